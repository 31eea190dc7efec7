from contextlib import contextmanager

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storedb.database import init_db, make_engine
from storedb.models.person import Person, ROLE_ADMIN, ROLE_USER
from storedb.models.product import Product
from storedb.schemas.person import PersonOut
from storedb.services.security import LoginSession
from storedb.utils.hashing import get_password_hash

PASSWORD = "secret"


@pytest.fixture
def engine():
    # One shared in-memory database per test
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def db_factory(session_factory):
    """Same shape as ``storedb.database.get_db`` but bound to the test engine."""

    @contextmanager
    def factory():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    return factory


def add_person(db, first_name, email, role=ROLE_USER, password=PASSWORD):
    password_hash, salt = get_password_hash(password)
    person = Person(first_name=first_name, last_name="Tester", email=email, phone="555-123-4567",
                    password_hash=password_hash, salt=salt, role=role)
    db.add(person)
    db.commit()
    db.refresh(person)
    return person


@pytest.fixture
def admin(db):
    return add_person(db, "Ada", "admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
def user(db):
    return add_person(db, "Uma", "user@example.com")


@pytest.fixture
def other_user(db):
    return add_person(db, "Otto", "otto@example.com")


@pytest.fixture
def admin_session(admin):
    return LoginSession(PersonOut.model_validate(admin))


@pytest.fixture
def user_session(user):
    return LoginSession(PersonOut.model_validate(user))


@pytest.fixture
def anonymous():
    return LoginSession()


@pytest.fixture
def p1(db):
    product = Product(id="P1", name="Widget", price=2.50, quantity=5)
    db.add(product)
    db.commit()
    return product


@pytest.fixture
def catalog(db, p1):
    db.add_all([
        Product(id="P2", name="Gadget", price=10.00, quantity=0),
        Product(id="P3", name="Doohickey", price=1.25, quantity=40),
        Product(id="P4", name="Blue Widget", price=7.75, quantity=3),
    ])
    db.commit()
    return ["P1", "P2", "P3", "P4"]


@pytest.fixture
def make_person(db):
    def _make(first_name, email, role=ROLE_USER, password=PASSWORD):
        return add_person(db, first_name, email, role=role, password=password)
    return _make
