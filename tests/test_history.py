import pytest

from storedb.services import history, reports, transactions
from storedb.utils.errors import AccessDenied, InputError, NotAuthenticated, NotFound


@pytest.fixture
def purchases(db, admin_session, user, other_user, catalog):
    transactions.make_purchase(db, admin_session, user.id, "P1", 2)      # 5.00
    transactions.make_purchase(db, admin_session, user.id, "P3", 4)      # 5.00
    transactions.make_purchase(db, admin_session, other_user.id, "P4", 1)  # 7.75
    transactions.make_purchase(db, admin_session, user.id, "P1", 1)      # 2.50


def test_history_newest_first(db, user_session, user, purchases):
    page = history.purchase_history(db, user_session, user.id)
    assert page.total == 3
    assert [line.product_id for line in page.items] == ["P1", "P3", "P1"]
    assert [line.quantity for line in page.items] == [1, 4, 2]
    assert page.items[0].customer_name == "Uma Tester"
    assert page.items[0].total == 2.50


def test_history_paginates(db, admin_session, user, purchases):
    first = history.purchase_history(db, admin_session, user.id, page=1, page_size=2)
    second = history.purchase_history(db, admin_session, user.id, page=2, page_size=2)
    assert first.total_pages == 2
    assert len(first.items) == 2
    assert len(second.items) == 1
    ids = [line.transaction_id for line in first.items + second.items]
    assert len(set(ids)) == 3


def test_history_of_someone_else_is_denied(db, user_session, other_user, purchases):
    with pytest.raises(AccessDenied) as exc:
        history.purchase_history(db, user_session, other_user.id)
    assert exc.value.detail == "Access denied. You can only view your own purchase history."


def test_history_checks_customer_before_access(db, user_session, purchases):
    with pytest.raises(NotFound):
        history.purchase_history(db, user_session, 999)
    with pytest.raises(InputError) as exc:
        history.purchase_history(db, user_session, 0)
    assert exc.value.field == "Customer ID"


def test_history_requires_login(db, anonymous, user):
    with pytest.raises(NotAuthenticated):
        history.purchase_history(db, anonymous, user.id)


def test_history_empty(db, user_session, user):
    page = history.purchase_history(db, user_session, user.id)
    assert page.items == [] and page.total == 0


def test_all_purchases_admin_only(db, admin_session, user_session, purchases):
    page = history.all_purchases(db, admin_session, page_size=10)
    assert page.total == 4
    assert {line.customer_name for line in page.items} == {"Uma Tester", "Otto Tester"}

    with pytest.raises(AccessDenied):
        history.all_purchases(db, user_session)


def test_purchase_summary(db, user_session, user, purchases):
    summary = reports.purchase_summary(db, user_session, user.id)
    assert summary.customer_id == user.id
    assert summary.email == "user@example.com"
    assert summary.total_transactions == 3
    assert summary.total_items == 7
    assert summary.total_spent == 12.50
    assert summary.last_purchase is not None


def test_purchase_summary_without_purchases(db, admin_session, user):
    summary = reports.purchase_summary(db, admin_session, user.id)
    assert summary.total_transactions == 0
    assert summary.total_items == 0
    assert summary.total_spent == 0.0
    assert summary.last_purchase is None


def test_purchase_summary_of_someone_else_is_denied(db, user_session, other_user):
    with pytest.raises(AccessDenied):
        reports.purchase_summary(db, user_session, other_user.id)


def test_product_sales_analysis(db, admin_session, purchases):
    rows = reports.product_sales_analysis(db, admin_session)
    by_id = {r.id: r for r in rows}

    assert [r.id for r in rows] == ["P4", "P1", "P3", "P2"]
    assert by_id["P1"].times_sold == 2
    assert by_id["P1"].quantity_sold == 3
    assert by_id["P1"].revenue == 7.50
    assert by_id["P1"].current_stock == 2
    assert by_id["P2"].times_sold == 0
    assert by_id["P2"].revenue == 0.0


def test_product_sales_analysis_admin_only(db, user_session, catalog):
    with pytest.raises(AccessDenied):
        reports.product_sales_analysis(db, user_session)
