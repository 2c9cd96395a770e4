# backend/store/wishlist_store.py
import logging
from typing import Callable, List, Optional

from schemas.cart import CartProduct
from schemas.wishlist import WishlistLine
from store.guest_storage import MemoryGuestStorage
from store.line_ids import new_local_id
from store.notifications import LogNotifier, Notifier
from utils.storefront_client import NotAuthenticatedError, StorefrontApiError, StorefrontClient

logger = logging.getLogger(__name__)


class WishlistStore:
    """Guest/server wishlist, same routing rules as the cart store but keyed by product."""

    def __init__(self, api: StorefrontClient, storage=None, notifier: Notifier = None,
                 on_unauthenticated: Optional[Callable[[], None]] = None):
        self.api = api
        self.storage = storage or MemoryGuestStorage()
        self.notifier = notifier or LogNotifier()
        self.on_unauthenticated = on_unauthenticated
        self.guest: List[WishlistLine] = self.storage.load()
        self.server: List[WishlistLine] = []
        self.identity: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    async def sign_in(self, identity: str) -> None:
        # Identity was already verified by the caller (usually CartStore.sign_in)
        self.identity = identity
        await self.fetch_wishlist()
        await self.merge_guest_wishlist()

    def sign_out(self) -> None:
        self.identity = None
        self.server = []

    def _session_expired(self) -> None:
        logger.info("Server rejected session, falling back to guest wishlist")
        if self.on_unauthenticated is not None:
            self.on_unauthenticated()
        else:
            self.sign_out()
            self.api.token = None

    def _save_guest(self) -> None:
        self.storage.save(self.guest)

    async def fetch_wishlist(self) -> List[WishlistLine]:
        if not self.is_authenticated:
            return []
        self.server = await self.api.fetch_wishlist()
        return self.server

    async def add_item(self, product_id: str, snapshot: Optional[CartProduct] = None) -> bool:
        if self.is_authenticated:
            try:
                await self.api.add_wishlist_item(product_id)
            except NotAuthenticatedError:
                self._session_expired()
            except StorefrontApiError as e:
                self.notifier.error(e.message or "Failed to add")
                return False
            else:
                await self.fetch_wishlist()
                self.notifier.success("Added to wishlist!")
                return True

        if any(item.product_id == product_id for item in self.guest):
            self.notifier.info("Already in wishlist")
            return True
        if snapshot is None:
            self.notifier.error("Product details are required to add to wishlist")
            return False

        self.guest.append(WishlistLine(id=str(new_local_id()), product_id=product_id, product=snapshot))
        self._save_guest()
        self.notifier.success("Added to wishlist!")
        return True

    async def remove_item(self, product_id: str) -> bool:
        if not self.is_authenticated:
            self.guest = [item for item in self.guest if item.product_id != product_id]
            self._save_guest()
            self.notifier.success("Removed from wishlist")
            return True

        previous = [item.model_copy(deep=True) for item in self.server]
        self.server = [item for item in self.server if item.product_id != product_id]
        try:
            await self.api.remove_wishlist_item(product_id)
        except StorefrontApiError as e:
            self.server = previous
            if isinstance(e, NotAuthenticatedError):
                self._session_expired()
            self.notifier.error(e.message or "Failed to remove")
            return False
        self.notifier.success("Removed from wishlist")
        return True

    async def merge_guest_wishlist(self) -> bool:
        if not self.guest:
            return True
        if not self.is_authenticated:
            return False

        failed = 0
        for item in list(self.guest):
            try:
                await self.api.add_wishlist_item(item.product_id)
            except NotAuthenticatedError:
                # Unsent products stay in the guest wishlist
                self._session_expired()
                self.notifier.error("Session expired, wishlist kept on this device")
                return False
            except StorefrontApiError as e:
                logger.warning(f"Merge of wishlist product {item.product_id} failed: {e}")
                failed += 1
            else:
                self.guest = [g for g in self.guest if g.id != item.id]
                self._save_guest()

        self.guest = []
        self._save_guest()
        await self.fetch_wishlist()

        if failed:
            self.notifier.error("Some items could not be synced")
            return False
        self.notifier.success("Wishlist synced!")
        return True

    def clear_wishlist(self) -> None:
        self.server = []

    def clear_guest_wishlist(self) -> None:
        self.guest = []
        self._save_guest()

    def get_all_wishlist_items(self) -> List[WishlistLine]:
        return list(self.server if self.is_authenticated else self.guest)

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.get_all_wishlist_items())

    def get_wishlist_count(self) -> int:
        return len(self.get_all_wishlist_items())
