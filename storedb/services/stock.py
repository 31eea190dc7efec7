# storedb/services/stock.py
import logging

from sqlalchemy.orm import Session

from storedb.models.product import Product
from storedb.models.purchase import Purchase
from storedb.utils.errors import InsufficientStock, NotFound

logger = logging.getLogger(__name__)


def reserve_and_record(db: Session, person_id: int, product_id: str, quantity: int) -> Purchase:
    """Decrement stock and record the purchase in a single transaction.

    The decrement is a conditional UPDATE that only matches while the product
    still has at least ``quantity`` units, so concurrent buyers of the same
    product (from this or any other process) can never push the stock below
    zero. When the update matches no row nothing is written and
    ``InsufficientStock`` is raised with the quantity left at that moment.
    """
    if quantity <= 0:
        raise ValueError("Quantity to reserve must be positive")

    try:
        updated = (
            db.query(Product)
            .filter(Product.id == product_id, Product.quantity >= quantity)
            .update({Product.quantity: Product.quantity - quantity}, synchronize_session=False)
        )
        if updated == 0:
            db.rollback()
            product = db.query(Product).filter(Product.id == product_id).first()
            if product is None:
                raise NotFound("Product ID does not exist!")
            logger.warning("Insufficient stock for product: %s, requested: %s, available: %s",
                           product_id, quantity, product.quantity)
            raise InsufficientStock(product_id, quantity, product.quantity)

        # Price is read inside the same transaction as the decrement
        unit_price = db.query(Product.price).filter(Product.id == product_id).scalar()
        purchase = Purchase(person_id=person_id, product_id=product_id,
                            quantity=quantity, unit_price=unit_price)
        db.add(purchase)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    return purchase
