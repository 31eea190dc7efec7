# storedb/services/transactions.py
import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storedb.models.person import Person, ROLE_USER
from storedb.models.product import Product
from storedb.schemas.person import ClientCreate, EmailLookup, PersonOut
from storedb.schemas.product import ProductOut
from storedb.schemas.purchase import PurchaseReceipt, PurchaseRequest
from storedb.services import stock
from storedb.services.auth import email_exists
from storedb.services.security import LoginSession, require_admin, require_login
from storedb.utils.audit import write_log
from storedb.utils.errors import AccessDenied, Conflict, InsufficientStock, NotFound
from storedb.utils.validation import validate

logger = logging.getLogger(__name__)


def customer_exists(db: Session, customer_id: int) -> bool:
    return db.query(Person.id).filter(Person.id == customer_id).first() is not None


# Add a client record (Admin only). The client sets a password on first login.
def add_client(db: Session, session: LoginSession, first_name, last_name, email, phone) -> PersonOut:
    admin = require_admin(session, "add a client")
    data = validate(ClientCreate, first_name=first_name, last_name=last_name, email=email, phone=phone)

    if email_exists(db, data.email):
        logger.warning("Attempt to add client with existing email: %s", data.email)
        raise Conflict("Error: Email already exists.")

    person = Person(first_name=data.first_name, last_name=data.last_name, email=data.email,
                    phone=data.phone, password_hash="", salt="", role=ROLE_USER)
    db.add(person)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Attempt to add client with existing email: %s", data.email)
        raise Conflict("Error: Email already exists.")
    db.refresh(person)

    logger.info("New client added: %s %s (ID: %s)", person.first_name, person.last_name, person.id)
    write_log(admin.id, "Add Client", f"Added client {person.id} ({person.email})")
    return PersonOut.model_validate(person)


def find_customer_by_email(db: Session, session: LoginSession, email: str) -> PersonOut:
    user = require_login(session, "search customers")
    data = validate(EmailLookup, email=email)
    if not session.is_admin and data.email != user.email.lower():
        logger.warning("Unauthorized customer lookup for %s by user ID: %s", data.email, user.id)
        raise AccessDenied("Access denied. Admin privileges required.")

    logger.info("Searching for customer with email: %s", data.email)
    person = db.query(Person).filter(func.lower(Person.email) == data.email).first()
    if person is None:
        raise NotFound(f"No customer was found with the email: {data.email}")
    return PersonOut.model_validate(person)


def browse_purchasable(db: Session, session: LoginSession, term: str = "") -> List[ProductOut]:
    """Products a purchase can be made from.

    An empty term lists everything in stock, an exact product id returns that
    product whatever its stock, anything else is an in-stock name search.
    """
    require_login(session, "browse products")
    term = (term or "").strip()
    query = db.query(Product)
    if term:
        exact = query.filter(Product.id == term).first()
        if exact is not None:
            return [ProductOut.model_validate(exact)]
        query = query.filter(Product.name.ilike(f"%{term}%"))
    items = query.filter(Product.quantity > 0).order_by(Product.id.asc()).all()
    return [ProductOut.model_validate(p) for p in items]


# Record a purchase of ``quantity`` units of a product for a customer
def make_purchase(db: Session, session: LoginSession, customer_id, product_id, quantity) -> PurchaseReceipt:
    user = require_login(session, "make a purchase")
    req = validate(PurchaseRequest, customer_id=customer_id, product_id=product_id, quantity=quantity)

    if not customer_exists(db, req.customer_id):
        logger.warning("Attempt to make purchase with non-existent customer ID: %s", req.customer_id)
        raise NotFound("Customer ID does not exist!")

    product = db.query(Product).filter(Product.id == req.product_id).first()
    if product is None:
        logger.warning("Attempt to purchase non-existent product: %s", req.product_id)
        raise NotFound("Product ID does not exist!")

    if req.quantity > product.quantity:
        logger.warning("Insufficient stock for product: %s, requested: %s, available: %s",
                       req.product_id, req.quantity, product.quantity)
        raise InsufficientStock(req.product_id, req.quantity, product.quantity)

    purchase = stock.reserve_and_record(db, req.customer_id, req.product_id, req.quantity)
    product = db.query(Product).filter(Product.id == req.product_id).first()

    receipt = PurchaseReceipt(
        transaction_id=purchase.id, customer_id=purchase.person_id, product_id=product.id,
        product_name=product.name, quantity=purchase.quantity, unit_price=purchase.unit_price,
        total=purchase.total, remaining_stock=product.quantity, date=purchase.date,
    )

    logger.info("Purchase completed: Customer ID %s purchased %s of %s (ID: %s) for $%.2f",
                receipt.customer_id, receipt.quantity, receipt.product_name, receipt.product_id, receipt.total)
    write_log(user.id, "Purchase",
              f"Processed purchase of {receipt.quantity} {receipt.product_name} for customer {receipt.customer_id}")
    return receipt
