# backend/schemas/cart.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


def _blank_to_none(value):
    # "" and None mean the same thing for a variant attribute
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Denormalised product data stored with a cart line
class CartProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: float = Field(ge=0)
    original_price: Optional[float] = None
    thumbnail: Optional[str] = None
    stock: int = 0
    category: Optional[str] = None


# One purchasable product/variant configuration in a cart
class CartLine(BaseModel):
    id: str
    product_id: str
    quantity: int = Field(ge=1)
    size: Optional[str] = None
    color: Optional[str] = None
    product: Optional[CartProduct] = None

    @field_validator("size", "color", mode="before")
    @classmethod
    def normalize_variant(cls, value):
        return _blank_to_none(value)

    def matches(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> bool:
        return (
            self.product_id == product_id
            and self.size == _blank_to_none(size)
            and self.color == _blank_to_none(color)
        )


# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("size", "color", mode="before")
    @classmethod
    def normalize_variant(cls, value):
        return _blank_to_none(value)


# Request schema for changing the quantity of a line, < 1 removes it
class CartUpdateItem(BaseModel):
    item_id: str
    quantity: int


# Request schema for removing a line
class CartDeleteItem(BaseModel):
    item_id: str


# Response schema for the whole server cart
class CartOut(BaseModel):
    cart: List[CartLine]


# Response schema for cart mutations
class CartActionResult(BaseModel):
    success: bool
    message: Optional[str] = None
