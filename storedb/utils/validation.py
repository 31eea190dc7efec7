# storedb/utils/validation.py
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from storedb.utils.errors import InputError

T = TypeVar("T", bound=BaseModel)

# Human readable names used in validation messages
FIELD_LABELS = {
    "first_name": "First Name",
    "last_name": "Last Name",
    "email": "Email",
    "phone": "Phone",
    "password": "Password",
    "id": "Product ID",
    "product_id": "Product ID",
    "customer_id": "Customer ID",
    "name": "Product Name",
    "price": "Price",
    "quantity": "Quantity",
    "min_price": "Minimum Price",
    "max_price": "Maximum Price",
    "page": "Page",
    "page_size": "Page Size",
    "sort_by": "Sort Column",
    "order": "Sort Direction",
}

_REASONS = {
    "string_pattern_mismatch": "invalid format",
    "greater_than": "must be greater than {gt}",
    "greater_than_equal": "cannot be less than {ge}",
    "less_than_equal": "cannot be greater than {le}",
    "int_parsing": "must be a whole number",
    "float_parsing": "must be a number",
    "finite_number": "must be a finite number",
    "literal_error": "must be one of {expected}",
}


def _reason(err: dict) -> str:
    template = _REASONS.get(err["type"])
    if template:
        try:
            return template.format(**err.get("ctx", {}))
        except KeyError:
            pass
    msg = err["msg"]
    # pydantic prefixes custom ValueError messages
    return msg.removeprefix("Value error, ")


def validate(schema: Type[T], **data) -> T:
    """Build ``schema`` from ``data`` or raise ``InputError`` for the first bad field."""
    try:
        return schema(**data)
    except ValidationError as e:
        err = e.errors()[0]
        key = str(err["loc"][0]) if err["loc"] else ""
        field = FIELD_LABELS.get(key, key or schema.__name__)
        raise InputError(field, _reason(err)) from None
