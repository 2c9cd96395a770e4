# backend/store/projections.py
from typing import Iterable, Optional

from schemas.cart import CartLine


def cart_total(lines: Iterable[CartLine]) -> float:
    # Snapshot prices keep the total stable for the whole session
    return sum((line.product.price if line.product else 0.0) * line.quantity for line in lines)


def items_count(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def find_line(lines: Iterable[CartLine], product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> Optional[CartLine]:
    return next((line for line in lines if line.matches(product_id, size, color)), None)


def item_quantity(lines: Iterable[CartLine], product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> int:
    line = find_line(lines, product_id, size, color)
    return line.quantity if line else 0
