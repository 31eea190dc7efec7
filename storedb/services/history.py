# storedb/services/history.py
import logging
from typing import Optional

from sqlalchemy.orm import Query, Session, joinedload

from storedb.config import settings
from storedb.models.purchase import Purchase
from storedb.schemas.product import PageRequest
from storedb.schemas.purchase import CustomerRef, PurchaseHistoryPage, PurchaseLine
from storedb.services.security import LoginSession, require_admin, require_login, require_self_or_admin
from storedb.services.transactions import customer_exists
from storedb.utils.errors import NotFound
from storedb.utils.validation import validate

logger = logging.getLogger(__name__)


def _to_line(p: Purchase) -> PurchaseLine:
    product_name = p.product.name if p.product else "Removed product"
    return PurchaseLine(
        transaction_id=p.id, date=p.date, customer_id=p.person_id,
        customer_name=f"{p.person.first_name} {p.person.last_name}",
        product_id=p.product_id, product_name=product_name,
        quantity=p.quantity, unit_price=p.unit_price, total=p.total,
    )


def _page(query: Query, page: int, page_size: int) -> PurchaseHistoryPage:
    total = query.count()
    rows = (query
            .options(joinedload(Purchase.person), joinedload(Purchase.product))
            .order_by(Purchase.date.desc(), Purchase.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all())
    return PurchaseHistoryPage(items=[_to_line(p) for p in rows], total=total, page=page, page_size=page_size)


def check_customer(db: Session, session: LoginSession, customer_id, what: str) -> int:
    """Shared entry checks for per-customer views, in workflow order."""
    require_login(session, f"view {what}")
    ref = validate(CustomerRef, customer_id=customer_id)
    if not customer_exists(db, ref.customer_id):
        logger.warning("Attempt to view %s for non-existent customer ID: %s", what, ref.customer_id)
        raise NotFound("Customer ID does not exist!")
    require_self_or_admin(session, ref.customer_id, what)
    return ref.customer_id


def purchase_history(
    db: Session,
    session: LoginSession,
    customer_id,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PurchaseHistoryPage:
    cid = check_customer(db, session, customer_id, "purchase history")
    req = validate(PageRequest, page=page, page_size=page_size or settings.PAGE_SIZE)

    logger.info("Viewing purchase history for customer ID: %s (page %s)", cid, req.page)
    query = db.query(Purchase).filter(Purchase.person_id == cid)
    return _page(query, req.page, req.page_size)


# Every customer's purchases, newest first (Admin only)
def all_purchases(
    db: Session,
    session: LoginSession,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PurchaseHistoryPage:
    require_admin(session, "view all purchases")
    req = validate(PageRequest, page=page, page_size=page_size or settings.PAGE_SIZE)

    logger.info("Viewing all past purchases (page %s)", req.page)
    return _page(db.query(Purchase), req.page, req.page_size)
