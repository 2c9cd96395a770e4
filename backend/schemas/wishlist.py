# backend/schemas/wishlist.py
from pydantic import BaseModel
from typing import List, Optional

from schemas.cart import CartProduct


# A saved product, guest entries carry a local guest_ id
class WishlistLine(BaseModel):
    id: str
    product_id: str
    product: Optional[CartProduct] = None


class WishlistAddItem(BaseModel):
    product_id: str


class WishlistDeleteItem(BaseModel):
    product_id: str


class WishlistOut(BaseModel):
    wishlist: List[WishlistLine]


class WishlistCheckOut(BaseModel):
    in_wishlist: bool
