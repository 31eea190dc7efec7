# storedb/services/reports.py
import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from storedb.models.person import Person
from storedb.models.product import Product
from storedb.models.purchase import Purchase
from storedb.schemas.product import ProductSales
from storedb.schemas.purchase import PurchaseSummary
from storedb.services.history import check_customer
from storedb.services.security import LoginSession, require_admin

logger = logging.getLogger(__name__)


# -----------------------------
# 1) Customer purchase summary
# -----------------------------
def purchase_summary(db: Session, session: LoginSession, customer_id) -> PurchaseSummary:
    cid = check_customer(db, session, customer_id, "purchase summary")
    logger.info("Viewing purchase summary for customer ID: %s", cid)

    person = db.query(Person).filter(Person.id == cid).first()
    row = db.query(
        func.count(Purchase.id).label("transactions"),
        func.coalesce(func.sum(Purchase.quantity), 0).label("items"),
        func.coalesce(func.sum(Purchase.quantity * Purchase.unit_price), 0.0).label("spent"),
        func.max(Purchase.date).label("last_purchase"),
    ).filter(Purchase.person_id == cid).one()

    return PurchaseSummary(
        customer_id=person.id, first_name=person.first_name, last_name=person.last_name,
        email=person.email, total_transactions=row.transactions, total_items=int(row.items),
        total_spent=round(float(row.spent), 2), last_purchase=row.last_purchase,
    )


# -----------------------------
# 2) Product sales analysis
# -----------------------------
def product_sales_analysis(db: Session, session: LoginSession) -> List[ProductSales]:
    require_admin(session, "view product sales analysis")
    logger.info("Viewing product sales analysis")

    rows = (db.query(
                Product.id, Product.name, Product.price, Product.quantity,
                func.count(Purchase.id).label("times_sold"),
                func.coalesce(func.sum(Purchase.quantity), 0).label("quantity_sold"),
                func.coalesce(func.sum(Purchase.quantity * Purchase.unit_price), 0.0).label("revenue"),
            )
            .outerjoin(Purchase, Purchase.product_id == Product.id)
            .group_by(Product.id, Product.name, Product.price, Product.quantity)
            .order_by(func.coalesce(func.sum(Purchase.quantity * Purchase.unit_price), 0.0).desc(), Product.id.asc())
            .all())

    return [
        ProductSales(
            id=r.id, name=r.name, price=r.price, current_stock=r.quantity,
            times_sold=r.times_sold, quantity_sold=int(r.quantity_sold), revenue=round(float(r.revenue), 2),
        )
        for r in rows
    ]
