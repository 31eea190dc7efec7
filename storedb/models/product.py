# storedb/models/product.py
from sqlalchemy import Column, Integer, String, Float, CheckConstraint
from storedb.database import Base

# Catalog entry; ItemQuantity is the stock decremented by purchases.
class Product(Base):
    __tablename__ = "Products"

    id = Column("ProductID", String(20), primary_key=True, index=True)
    name = Column("ItemName", String(100), nullable=False, index=True)
    price = Column("ItemPrice", Float, CheckConstraint("ItemPrice > 0"), nullable=False)
    quantity = Column("ItemQuantity", Integer, CheckConstraint("ItemQuantity >= 0"), nullable=False, default=0)
