import pytest

from storedb.schemas.person import PersonOut
from storedb.services.security import LoginSession, require_admin, require_login, require_self_or_admin
from storedb.utils.errors import AccessDenied, NotAuthenticated


def person(role="USER", pid=3):
    return PersonOut(id=pid, first_name="Sam", last_name="Lee", email="sam@example.com",
                     phone="555-123-4567", role=role)


def test_empty_session():
    session = LoginSession()
    assert not session.is_authenticated
    assert not session.is_admin
    assert session.user_id is None
    with pytest.raises(NotAuthenticated) as exc:
        require_login(session, "view products")
    assert exc.value.detail == "Authentication required to view products."


def test_admin_role_is_case_insensitive():
    session = LoginSession(person(role="admin"))
    assert session.is_admin
    assert require_admin(session, "add products").id == 3


def test_user_is_denied_admin_actions():
    session = LoginSession(person())
    with pytest.raises(AccessDenied) as exc:
        require_admin(session, "add products")
    assert exc.value.detail == "Access denied. Admin privileges required."


def test_self_or_admin():
    user = LoginSession(person(pid=3))
    assert require_self_or_admin(user, 3, "purchase history").id == 3
    with pytest.raises(AccessDenied):
        require_self_or_admin(user, 4, "purchase history")

    admin = LoginSession(person(role="ADMIN", pid=1))
    assert require_self_or_admin(admin, 4, "purchase history").id == 1


def test_login_and_logout():
    session = LoginSession()
    session.login(person())
    assert session.user_id == 3
    session.logout()
    assert session.current_user is None
