# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A single cart line (product + variant + quantity) owned by a user
class CartItem(Base):
    __tablename__ = "cart_items" # Table name

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False) # Owner of the line
    product_id = Column(String, ForeignKey("products.id"), index=True, nullable=False) # Foreign key to product
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)

    # Variant, lines differing only in size/color are separate lines
    size = Column(String, nullable=True)
    color = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now()) # Creation timestamp

    product = relationship("Product") # Relationship to Product

    __table_args__ = (
        # One line per product variant in a user's cart
        UniqueConstraint("user_id", "product_id", "size", "color", name="uq_cartitem_user_variant"),
    )
