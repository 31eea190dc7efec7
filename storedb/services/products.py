# storedb/services/products.py
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storedb.config import settings
from storedb.models.product import Product
from storedb.models.purchase import Purchase
from storedb.schemas.product import (
    ProductCreate, ProductEditRequest, ProductListPage, ProductOut,
    ProductPageRequest, ProductSearch,
)
from storedb.services.security import LoginSession, require_admin, require_login
from storedb.utils.audit import write_log
from storedb.utils.errors import Conflict, InputError, NotFound
from storedb.utils.validation import validate

logger = logging.getLogger(__name__)

# Columns a listing may be sorted by
SORT_COLUMNS = {
    "id": Product.id,
    "name": Product.name,
    "price": Product.price,
    "quantity": Product.quantity,
}


def _product_id(product_id) -> str:
    pid = str(product_id or "").strip()
    if not pid:
        raise InputError("Product ID", "cannot be empty")
    return pid


def _get_or_404(db: Session, product_id: str) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if product is None:
        raise NotFound(f"Product ID {product_id} does not exist!")
    return product


# =========================
# LISTING
# =========================
def list_products(
    db: Session,
    session: LoginSession,
    page: int = 1,
    page_size: Optional[int] = None,
    sort_by: str = "id",
    order: str = "asc",
) -> ProductListPage:
    require_login(session, "view products")
    req = validate(ProductPageRequest, page=page, page_size=page_size or settings.PAGE_SIZE,
                   sort_by=sort_by, order=order)

    sort_col = SORT_COLUMNS[req.sort_by]
    query = db.query(Product).order_by(sort_col.asc() if req.order == "asc" else sort_col.desc(), Product.id.asc())

    total = query.count()
    items = query.offset((req.page - 1) * req.page_size).limit(req.page_size).all()

    logger.info("Retrieving products page %s (sort: %s %s)", req.page, req.sort_by, req.order)
    return ProductListPage(
        items=[ProductOut.model_validate(p) for p in items],
        total=total, page=req.page, page_size=req.page_size,
        sort_by=req.sort_by, order=req.order,
    )


def search_products(
    db: Session,
    session: LoginSession,
    name: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock_only: bool = False,
) -> List[ProductOut]:
    require_login(session, "search products")
    criteria = validate(ProductSearch, name=name, min_price=min_price, max_price=max_price,
                        in_stock_only=in_stock_only)

    logger.info("Searching products with criteria - Name: %s, Min Price: %s, Max Price: %s, In Stock Only: %s",
                criteria.name or "any",
                "any" if criteria.min_price is None else criteria.min_price,
                "any" if criteria.max_price is None else criteria.max_price,
                criteria.in_stock_only)

    query = db.query(Product)
    if criteria.name:
        query = query.filter(Product.name.ilike(f"%{criteria.name}%"))
    if criteria.min_price is not None:
        query = query.filter(Product.price >= criteria.min_price)
    if criteria.max_price is not None:
        query = query.filter(Product.price <= criteria.max_price)
    if criteria.in_stock_only:
        query = query.filter(Product.quantity > 0)

    return [ProductOut.model_validate(p) for p in query.order_by(Product.name.asc()).all()]


def get_product(db: Session, session: LoginSession, product_id) -> ProductOut:
    require_login(session, "view products")
    return ProductOut.model_validate(_get_or_404(db, _product_id(product_id)))


# =========================
# CATALOG CHANGES (Admin only)
# =========================
def add_product(db: Session, session: LoginSession, product_id, name, price, quantity) -> ProductOut:
    admin = require_admin(session, "add products")
    data = validate(ProductCreate, id=product_id, name=name, price=price, quantity=quantity)

    exists = db.query(Product).filter(Product.id == data.id).first()
    if exists:
        logger.warning("Attempt to add product with existing ID: %s", data.id)
        raise Conflict("Error: Product ID already exists!")

    product = Product(id=data.id, name=data.name, price=data.price, quantity=data.quantity)
    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Attempt to add product with existing ID: %s", data.id)
        raise Conflict("Error: Product ID already exists!")
    db.refresh(product)

    logger.info("New product added: %s - %s", product.id, product.name)
    write_log(admin.id, "Add Product", f"Added product {product.id} - {product.name}")
    return ProductOut.model_validate(product)


def modify_product(
    db: Session,
    session: LoginSession,
    product_id,
    *,
    name: Optional[str] = None,
    price: Optional[float] = None,
    quantity: Optional[int] = None,
) -> ProductOut:
    """Update one or more fields of a product.

    The current values are read first so the audit line can record each
    change as ``old to new``.
    """
    admin = require_admin(session, "modify products")
    pid = _product_id(product_id)
    changes = validate(ProductEditRequest, name=name, price=price, quantity=quantity)

    product = db.query(Product).filter(Product.id == pid).first()
    if product is None:
        logger.warning("Attempt to modify non-existent product: %s", pid)
        raise NotFound(f"Product ID {pid} does not exist!")

    diff = []
    if changes.name is not None:
        diff.append(f"Name: '{product.name}' to '{changes.name}'")
        product.name = changes.name
    if changes.price is not None:
        diff.append(f"Price: ${product.price} to ${changes.price}")
        product.price = changes.price
    if changes.quantity is not None:
        diff.append(f"Quantity: {product.quantity} to {changes.quantity}")
        product.quantity = changes.quantity

    db.commit()
    db.refresh(product)

    detail = f"Product updated: {pid} - " + ", ".join(diff)
    logger.info(detail)
    write_log(admin.id, "Modify Product", detail)
    return ProductOut.model_validate(product)


def remove_product(db: Session, session: LoginSession, product_id) -> None:
    admin = require_admin(session, "remove products")
    pid = _product_id(product_id)

    product = db.query(Product).filter(Product.id == pid).first()
    if product is None:
        logger.warning("Attempt to remove non-existent product: %s", pid)
        raise NotFound(f"Product ID {pid} does not exist!")

    # Purchases keep referencing their product
    refs = db.query(func.count(Purchase.id)).filter(Purchase.product_id == pid).scalar()
    if refs:
        logger.warning("Attempt to remove product with existing transactions: %s", pid)
        raise Conflict("Cannot remove product: it is referenced by existing transactions.")

    name = product.name
    db.delete(product)
    try:
        db.commit()
    except IntegrityError:
        # A purchase slipped in after the check
        db.rollback()
        logger.warning("Attempt to remove product with existing transactions: %s", pid)
        raise Conflict("Cannot remove product: it is referenced by existing transactions.")

    logger.info("Product removed: %s - %s", pid, name)
    write_log(admin.id, "Remove Product", f"Removed product {pid} - {name}")
