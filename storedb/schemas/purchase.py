# storedb/schemas/purchase.py
from datetime import datetime
from typing import List, Optional
import math

from pydantic import BaseModel, Field, field_validator


class PurchaseRequest(BaseModel):
    customer_id: int = Field(gt=0)
    product_id: str
    quantity: int = Field(gt=0)

    @field_validator("product_id", mode="before")
    @classmethod
    def product_id_present(cls, v):
        v = str(v or "").strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class CustomerRef(BaseModel):
    customer_id: int = Field(gt=0)


class PurchaseReceipt(BaseModel):
    transaction_id: int
    customer_id: int
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    total: float
    remaining_stock: int
    date: Optional[datetime] = None


# One purchase line in history listings
class PurchaseLine(BaseModel):
    transaction_id: int
    date: Optional[datetime] = None
    customer_id: int
    customer_name: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    total: float


class PurchaseHistoryPage(BaseModel):
    items: List[PurchaseLine]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


class PurchaseSummary(BaseModel):
    customer_id: int
    first_name: str
    last_name: str
    email: str
    total_transactions: int = 0
    total_items: int = 0
    total_spent: float = 0.0
    last_purchase: Optional[datetime] = None
