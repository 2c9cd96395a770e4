# backend/models/product.py
import uuid

from sqlalchemy import Column, String, Float, Integer, CheckConstraint
from database import Base

# Model Product
# Catalog entry and the authoritative stock count for it.
# Carts only read it: the stock column is what add/update requests are checked against.
class Product(Base):
    __tablename__ = "products"

    # Opaque identifier, the storefront never relies on it being numeric
    id = Column(String, primary_key=True, index=True, default=lambda: uuid.uuid4().hex)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    original_price = Column(Float, nullable=True)

    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)

    # Optional product image URL
    thumbnail = Column(String, nullable=True)
