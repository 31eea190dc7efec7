# storedb/models/purchase.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from storedb.database import Base
from storedb.models.person import Person
from storedb.models.product import Product

class Purchase(Base):
    __tablename__ = "Purchase"

    id = Column("TransactionID", Integer, primary_key=True, index=True)
    person_id = Column("PersonID", Integer, ForeignKey("Persons.PersonID"), nullable=False, index=True)
    product_id = Column("ProductID", String(20), ForeignKey("Products.ProductID"), nullable=False, index=True)
    quantity = Column("QuantityPurchased", Integer, nullable=False)

    # Price at the time of sale so the record stays immutable
    unit_price = Column("UnitPrice", Float, nullable=False)
    date = Column("Date", DateTime(timezone=True), server_default=func.now(), index=True)

    person = relationship(Person)
    product = relationship(Product)

    @property
    def total(self) -> float:
        return round(self.quantity * self.unit_price, 2)
