import logging

import pytest

from storedb.models.product import Product
from storedb.services import products, transactions
from storedb.utils.errors import AccessDenied, Conflict, InputError, NotAuthenticated, NotFound


def test_list_products_paginates_by_id(db, user_session, catalog):
    page = products.list_products(db, user_session, page=1, page_size=3)
    assert [p.id for p in page.items] == ["P1", "P2", "P3"]
    assert page.total == 4
    assert page.total_pages == 2

    page2 = products.list_products(db, user_session, page=2, page_size=3)
    assert [p.id for p in page2.items] == ["P4"]


def test_list_products_past_last_page_is_empty(db, user_session, catalog):
    page = products.list_products(db, user_session, page=5, page_size=3)
    assert page.items == []
    assert page.total == 4


def test_list_products_sorted_by_price_desc(db, user_session, catalog):
    page = products.list_products(db, user_session, page_size=10, sort_by="price", order="DESC")
    assert [p.id for p in page.items] == ["P2", "P4", "P1", "P3"]
    assert page.order == "desc"


def test_list_products_empty_catalog(db, user_session):
    page = products.list_products(db, user_session)
    assert page.items == [] and page.total == 0 and page.total_pages == 0


@pytest.mark.parametrize("kwargs,label", [
    ({"page": 0}, "Page"),
    ({"page_size": 101}, "Page Size"),
    ({"sort_by": "colour"}, "Sort Column"),
    ({"order": "sideways"}, "Sort Direction"),
])
def test_list_products_rejects_bad_paging(db, user_session, kwargs, label):
    with pytest.raises(InputError) as exc:
        products.list_products(db, user_session, **kwargs)
    assert exc.value.field == label


def test_list_products_requires_login(db, anonymous, catalog):
    with pytest.raises(NotAuthenticated):
        products.list_products(db, anonymous)


def test_search_by_name_is_case_insensitive(db, user_session, catalog):
    found = products.search_products(db, user_session, name="widget")
    assert [p.id for p in found] == ["P4", "P1"]


def test_search_by_price_range_and_stock(db, user_session, catalog):
    found = products.search_products(db, user_session, min_price=2, max_price=10)
    assert {p.id for p in found} == {"P1", "P2", "P4"}

    in_stock = products.search_products(db, user_session, min_price=2, max_price=10, in_stock_only=True)
    assert {p.id for p in in_stock} == {"P1", "P4"}


def test_search_blank_name_matches_everything(db, user_session, catalog):
    assert len(products.search_products(db, user_session, name="  ")) == 4


def test_search_rejects_inverted_price_range(db, user_session, catalog):
    with pytest.raises(InputError) as exc:
        products.search_products(db, user_session, min_price=10, max_price=2)
    assert exc.value.field == "Maximum Price"


def test_search_rejects_negative_price(db, user_session):
    with pytest.raises(InputError) as exc:
        products.search_products(db, user_session, min_price=-1)
    assert exc.value.field == "Minimum Price"


def test_get_product(db, user_session, p1):
    product = products.get_product(db, user_session, " P1 ")
    assert product.name == "Widget"
    assert product.quantity == 5

    with pytest.raises(NotFound):
        products.get_product(db, user_session, "P9")
    with pytest.raises(InputError):
        products.get_product(db, user_session, "")


def test_add_product(db, admin_session):
    created = products.add_product(db, admin_session, "P7", "Sprocket", 4.5, 12)
    assert created.id == "P7"
    assert db.get(Product, "P7").quantity == 12


def test_add_product_duplicate_id(db, admin_session, p1):
    with pytest.raises(Conflict) as exc:
        products.add_product(db, admin_session, "P1", "Other", 1.0, 1)
    assert "Product ID already exists" in exc.value.detail
    db.expire_all()
    assert db.get(Product, "P1").name == "Widget"


@pytest.mark.parametrize("args,label", [
    (("", "Thing", 1.0, 1), "Product ID"),
    (("P8", " ", 1.0, 1), "Product Name"),
    (("P8", "Thing", 0, 1), "Price"),
    (("P8", "Thing", float("inf"), 1), "Price"),
    (("P8", "Thing", float("nan"), 1), "Price"),
    (("P8", "Thing", 1.0, -1), "Quantity"),
])
def test_add_product_validation(db, admin_session, args, label):
    with pytest.raises(InputError) as exc:
        products.add_product(db, admin_session, *args)
    assert exc.value.field == label
    assert db.query(Product).count() == 0


def test_add_product_denied_for_user(db, user_session, anonymous):
    with pytest.raises(AccessDenied):
        products.add_product(db, user_session, "P7", "Sprocket", 4.5, 12)
    with pytest.raises(NotAuthenticated):
        products.add_product(db, anonymous, "P7", "Sprocket", 4.5, 12)
    assert db.query(Product).count() == 0


def test_modify_product_records_old_and_new(db, admin_session, p1, caplog):
    caplog.set_level(logging.INFO)
    updated = products.modify_product(db, admin_session, "P1", price=3.0, quantity=9)
    assert updated.price == 3.0
    assert updated.quantity == 9
    assert updated.name == "Widget"

    assert "Product updated: P1 - Price: $2.5 to $3.0, Quantity: 5 to 9" in caplog.text
    assert f"[User {admin_session.user_id}] Modify Product" in caplog.text


def test_modify_product_needs_a_change(db, admin_session, p1):
    with pytest.raises(InputError):
        products.modify_product(db, admin_session, "P1")


def test_modify_missing_product(db, admin_session):
    with pytest.raises(NotFound):
        products.modify_product(db, admin_session, "P9", name="Ghost")


def test_modify_product_denied_for_user(db, user_session, p1):
    with pytest.raises(AccessDenied):
        products.modify_product(db, user_session, "P1", price=99.0)
    db.expire_all()
    assert db.get(Product, "P1").price == 2.50


def test_remove_unreferenced_product(db, admin_session, p1):
    products.remove_product(db, admin_session, "P1")
    assert db.get(Product, "P1") is None


def test_remove_referenced_product_fails(db, admin_session, user, p1):
    transactions.make_purchase(db, admin_session, user.id, "P1", 1)
    with pytest.raises(Conflict):
        products.remove_product(db, admin_session, "P1")
    db.expire_all()
    assert db.get(Product, "P1") is not None


def test_remove_missing_product(db, admin_session):
    with pytest.raises(NotFound):
        products.remove_product(db, admin_session, "P9")


def test_remove_product_denied_for_user(db, user_session, p1):
    with pytest.raises(AccessDenied):
        products.remove_product(db, user_session, "P1")
    assert db.get(Product, "P1") is not None


def test_modify_product_rejects_infinite_price(db, admin_session, p1):
    with pytest.raises(InputError) as exc:
        products.modify_product(db, admin_session, "P1", price=float("inf"))
    assert exc.value.field == "Price"
    db.expire_all()
    assert db.get(Product, "P1").price == 2.50


def test_search_rejects_infinite_price(db, user_session, catalog):
    with pytest.raises(InputError) as exc:
        products.search_products(db, user_session, max_price=float("inf"))
    assert exc.value.field == "Maximum Price"
