# storedb/utils/errors.py
import logging

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for errors reported back to the console user."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InputError(StoreError):
    """A field failed validation."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid input for {field}: {reason}")
        self.field = field
        self.reason = reason


class NotFound(StoreError):
    pass


class Conflict(StoreError):
    pass


class InsufficientStock(Conflict):
    def __init__(self, product_id: str, requested: int, available: int):
        super().__init__(f"Not enough inventory available. Only {available} in stock.")
        self.product_id = product_id
        self.requested = requested
        self.available = available


class NotAuthenticated(StoreError):
    pass


class AccessDenied(StoreError):
    pass


def describe_error(exc: Exception, context: str) -> str:
    """Turn any exception raised by a workflow into a message for the console.

    Store errors already carry a friendly ``detail`` and are only logged as
    warnings. Database and unexpected errors are logged with their traceback
    and replaced by a generic message that hides technical details.
    """
    if isinstance(exc, StoreError):
        logger.warning("%s while %s", exc.detail, context)
        return exc.detail

    if isinstance(exc, IntegrityError):
        logger.error("Integrity error while %s", context, exc_info=exc)
        return ("The operation could not be completed because it would violate data integrity. "
                "This might be due to duplicate data or missing required information.")

    if isinstance(exc, (OperationalError, InterfaceError)):
        logger.error("Database connection error while %s", context, exc_info=exc)
        return "Could not connect to the database. Please check your connection and try again."

    if isinstance(exc, SQLAlchemyError):
        logger.error("Database error while %s", context, exc_info=exc)
        return f"A database error occurred while {context}. Please try again later."

    logger.error("Unexpected error while %s", context, exc_info=exc)
    return f"An error occurred while {context}. Please try again later."
