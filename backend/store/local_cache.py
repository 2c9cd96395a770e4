# backend/store/local_cache.py
"""
Local mirror of the shopping cart.

Holds two collections: the guest cart, owned locally and persisted through a
guest storage, and a shadow of the server cart, which is only ever filled
from a fetch and optimistically edited between fetches. Optimistic edits hand
back an UndoToken; rolling back restores the shadow exactly as it was.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from schemas.cart import CartLine, CartProduct
from store.guest_storage import MemoryGuestStorage
from store.line_ids import LocalLineId, RemoteLineId, new_local_id
from store.projections import find_line


@dataclass(frozen=True)
class UndoToken:
    lines: Tuple[CartLine, ...]


def _deep_copy(lines) -> List[CartLine]:
    return [line.model_copy(deep=True) for line in lines]


class LocalCartCache:
    def __init__(self, storage=None):
        self.storage = storage or MemoryGuestStorage()
        self.guest: List[CartLine] = self.storage.load()
        self.server: List[CartLine] = []

    # ---- guest cart (owned) ----

    def _persist_guest(self) -> None:
        self.storage.save(self.guest)

    def add_guest(self, product_id: str, quantity: int, size: Optional[str], color: Optional[str],
                  product: CartProduct) -> CartLine:
        existing = find_line(self.guest, product_id, size, color)
        if existing:
            existing.quantity += quantity
            # A fresh add carries the newest product data for this line
            existing.product = product.model_copy(deep=True)
            line = existing
        else:
            line = CartLine(
                id=str(new_local_id()),
                product_id=product_id,
                quantity=quantity,
                size=size,
                color=color,
                product=product.model_copy(deep=True),
            )
            self.guest.append(line)
        self._persist_guest()
        return line

    def set_guest_quantity(self, line_id: LocalLineId, quantity: int) -> bool:
        for line in self.guest:
            if line.id == str(line_id):
                line.quantity = quantity
                self._persist_guest()
                return True
        return False

    def remove_guest(self, line_id: LocalLineId) -> bool:
        before = len(self.guest)
        self.guest = [line for line in self.guest if line.id != str(line_id)]
        self._persist_guest()
        return len(self.guest) != before

    def clear_guest(self) -> None:
        self.guest = []
        self._persist_guest()

    # ---- server shadow ----

    def replace_server(self, lines: List[CartLine]) -> None:
        self.server = _deep_copy(lines)

    def clear_server(self) -> None:
        self.server = []

    def checkpoint(self) -> UndoToken:
        return UndoToken(tuple(_deep_copy(self.server)))

    def set_server_quantity(self, line_id: RemoteLineId, quantity: int) -> UndoToken:
        token = self.checkpoint()
        self.server = [
            line.model_copy(update={"quantity": quantity}) if line.id == str(line_id) else line
            for line in self.server
        ]
        return token

    def remove_server(self, line_id: RemoteLineId) -> UndoToken:
        token = self.checkpoint()
        self.server = [line for line in self.server if line.id != str(line_id)]
        return token

    def rollback(self, token: UndoToken) -> None:
        self.server = _deep_copy(token.lines)
