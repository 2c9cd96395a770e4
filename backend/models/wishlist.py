# backend/models/wishlist.py
from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A product saved for later by a user
class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    product_id = Column(String, ForeignKey("products.id"), index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_wishlist_user_product"),
    )
