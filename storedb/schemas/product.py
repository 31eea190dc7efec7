# storedb/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, ValidationInfo, field_validator, model_validator
from typing import Optional, List, Literal
import math


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _strip_required(v):
    if v is None:
        return v
    v = str(v).strip()
    if not v:
        raise ValueError("cannot be empty")
    return v


# Schema for creating a new product
class ProductCreate(BaseModel):
    id: str
    name: str
    price: float = Field(gt=0, allow_inf_nan=False)
    quantity: int = Field(ge=0)

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_required_fields(cls, v):
        return _strip_required(v)


# Schema for partial product updates - all fields optional
class ProductEditRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    quantity: Optional[int] = Field(None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip_required(v)

    @model_validator(mode="after")
    def at_least_one(self):
        if self.name is None and self.price is None and self.quantity is None:
            raise ValueError("at least one field must be changed")
        return self


class ProductOut(ORMBase):
    id: str
    name: str
    price: float
    quantity: int


# Filters for product search
class ProductSearch(BaseModel):
    name: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    in_stock_only: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("max_price")
    @classmethod
    def max_not_below_min(cls, v, info: ValidationInfo):
        min_price = info.data.get("min_price")
        if v is not None and min_price is not None and v < min_price:
            raise ValueError("cannot be less than minimum price")
        return v


class PageRequest(BaseModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)


class ProductPageRequest(PageRequest):
    sort_by: Literal["id", "name", "price", "quantity"] = "id"
    order: Literal["asc", "desc"] = "asc"

    @field_validator("sort_by", "order", mode="before")
    @classmethod
    def lowercase(cls, v):
        return v.lower() if isinstance(v, str) else v


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int
    sort_by: str = "id"
    order: str = "asc"

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


class ProductSales(BaseModel):
    id: str
    name: str
    price: float
    current_stock: int
    times_sold: int
    quantity_sold: int
    revenue: float
