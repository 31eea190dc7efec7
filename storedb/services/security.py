# storedb/services/security.py
import logging
from typing import Optional

from storedb.models.person import ROLE_ADMIN
from storedb.schemas.person import PersonOut
from storedb.utils.errors import AccessDenied, NotAuthenticated

logger = logging.getLogger(__name__)


class LoginSession:
    """The identity the console is currently acting as.

    Owned by the caller (the CLI loop) and passed explicitly to every
    workflow. Holds at most one authenticated person at a time.
    """

    def __init__(self, current_user: Optional[PersonOut] = None):
        self.current_user = current_user

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and (self.current_user.role or "").upper() == ROLE_ADMIN

    @property
    def user_id(self) -> Optional[int]:
        return self.current_user.id if self.current_user else None

    def login(self, user: PersonOut) -> None:
        self.current_user = user

    def logout(self) -> None:
        self.current_user = None


def require_login(session: LoginSession, action: str) -> PersonOut:
    if not session.is_authenticated:
        logger.warning("Unauthenticated attempt to %s", action)
        raise NotAuthenticated(f"Authentication required to {action}.")
    return session.current_user


def require_admin(session: LoginSession, action: str) -> PersonOut:
    user = require_login(session, action)
    if not session.is_admin:
        logger.warning("Unauthorized attempt to %s by user ID: %s", action, user.id)
        raise AccessDenied("Access denied. Admin privileges required.")
    return user


# Admins may look at anyone; users only at their own records
def require_self_or_admin(session: LoginSession, customer_id: int, what: str) -> PersonOut:
    user = require_login(session, f"view {what}")
    if not session.is_admin and user.id != customer_id:
        logger.warning("Unauthorized attempt to view %s for ID: %s by user ID: %s", what, customer_id, user.id)
        raise AccessDenied(f"Access denied. You can only view your own {what}.")
    return user
