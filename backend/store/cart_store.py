# backend/store/cart_store.py
"""
Cart store: routes every cart intent to the guest cart or the server cart.

Anonymous visitors work against the local guest cart only. Signed-in customers
work against the cart service, with the local shadow updated optimistically
and repaired from an UndoToken when the server refuses. Signing in merges the
guest cart into the server cart once.

Mutations are coroutines that suspend only on the network call. They are not
serialised against each other: when two updates of the same line are in
flight, whichever completes last decides the local state. Callers that need
strict ordering await each mutation before issuing the next.
"""
import enum
import logging
from contextlib import contextmanager
from typing import Callable, List, Optional, Union

from schemas.cart import CartLine, CartProduct
from store import projections
from store.line_ids import LineId, LocalLineId, parse_line_id
from store.local_cache import LocalCartCache
from store.notifications import LogNotifier, Notifier
from utils.storefront_client import NotAuthenticatedError, StorefrontApiError, StorefrontClient

logger = logging.getLogger(__name__)


class CartMode(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class CartStore:
    def __init__(self, api: StorefrontClient, cache: LocalCartCache = None, notifier: Notifier = None,
                 on_unauthenticated: Optional[Callable[[], None]] = None):
        self.api = api
        self.cache = cache or LocalCartCache()
        self.notifier = notifier or LogNotifier()
        self.on_unauthenticated = on_unauthenticated
        self.identity: Optional[str] = None
        self._pending = 0

    # ---- state ----

    @property
    def mode(self) -> CartMode:
        return CartMode.AUTHENTICATED if self.identity is not None else CartMode.ANONYMOUS

    @property
    def loading(self) -> bool:
        """True while a remote call is in flight. Gates UI affordances only."""
        return self._pending > 0

    @contextmanager
    def _busy(self):
        self._pending += 1
        try:
            yield
        finally:
            self._pending -= 1

    def _become_anonymous(self) -> None:
        self.identity = None
        self.api.token = None
        self.cache.clear_server()

    def _session_expired(self) -> None:
        logger.info(f"Server rejected session for {self.identity}, cart falls back to guest mode")
        if self.on_unauthenticated is not None:
            # Owner signs every store sharing the client out together
            self.on_unauthenticated()
        else:
            self._become_anonymous()

    # ---- session transitions ----

    async def sign_in(self, token: str) -> bool:
        """Anonymous -> Authenticated. Verifies the identity, then merges the guest cart once."""
        if self.mode is CartMode.AUTHENTICATED:
            await self.fetch_cart()
            return True

        self.api.token = token
        with self._busy():
            user = await self.api.whoami()
        if user is None:
            self.api.token = None
            logger.info("Sign-in rejected, cart stays anonymous")
            return False

        self.identity = user.email
        logger.info(f"Cart switched to authenticated mode for {self.identity}")
        await self.fetch_cart()
        await self.merge_guest_into_server()
        # The merge drops back to guest mode if the session dies halfway
        return self.mode is CartMode.AUTHENTICATED

    def sign_out(self) -> None:
        """Authenticated -> Anonymous. Drops the shadow, leaves any guest lines alone."""
        self._become_anonymous()
        logger.info("Cart switched to anonymous mode")

    # ---- remote sync ----

    async def fetch_cart(self) -> List[CartLine]:
        if self.mode is CartMode.ANONYMOUS:
            return []
        with self._busy():
            lines = await self.api.fetch_cart()
        self.cache.replace_server(lines)
        return self.cache.server

    # ---- mutations ----

    async def add_item(self, product_id: str, quantity: int = 1, size: Optional[str] = None,
                       color: Optional[str] = None, snapshot: Optional[CartProduct] = None) -> bool:
        if quantity < 1:
            raise ValueError(f"quantity must be at least 1, got {quantity}")

        if self.mode is CartMode.AUTHENTICATED:
            with self._busy():
                try:
                    await self.api.add_cart_item(product_id, quantity, size, color)
                except NotAuthenticatedError:
                    # Session expired under us: continue this very call as a guest
                    self._session_expired()
                except StorefrontApiError as e:
                    self.notifier.error(e.message or "Failed to add")
                    return False
                else:
                    # Never trust a partial response, mirror the server exactly
                    await self.fetch_cart()
                    self.notifier.success("Added to cart!")
                    return True

        return self._add_guest(product_id, quantity, size, color, snapshot)

    def _add_guest(self, product_id, quantity, size, color, snapshot) -> bool:
        if snapshot is None:
            logger.warning(f"Guest add of {product_id} without product snapshot")
            self.notifier.error("Product details are required to add to cart")
            return False
        self.cache.add_guest(product_id, quantity, size, color, snapshot)
        self.notifier.success("Added to cart!")
        return True

    async def update_quantity(self, line_id: Union[LineId, str], quantity: int) -> bool:
        line_id = parse_line_id(line_id)
        if quantity < 1:
            return await self.remove_item(line_id)

        if isinstance(line_id, LocalLineId):
            if not self.cache.set_guest_quantity(line_id, quantity):
                self.notifier.error("Item not found in cart")
                return False
            self.notifier.success("Cart updated")
            return True

        token = self.cache.set_server_quantity(line_id, quantity)
        with self._busy():
            try:
                await self.api.update_cart_item(str(line_id), quantity)
            except StorefrontApiError as e:
                self.cache.rollback(token)
                if isinstance(e, NotAuthenticatedError):
                    self._session_expired()
                self.notifier.error(e.message or "Failed to update")
                return False
        self.notifier.success("Cart updated")
        return True

    async def remove_item(self, line_id: Union[LineId, str]) -> bool:
        line_id = parse_line_id(line_id)

        if isinstance(line_id, LocalLineId):
            self.cache.remove_guest(line_id)
            self.notifier.success("Removed")
            return True

        token = self.cache.remove_server(line_id)
        with self._busy():
            try:
                await self.api.remove_cart_item(str(line_id))
            except StorefrontApiError as e:
                self.cache.rollback(token)
                if isinstance(e, NotAuthenticatedError):
                    self._session_expired()
                self.notifier.error(e.message or "Failed to remove")
                return False
        self.notifier.success("Removed")
        return True

    async def merge_guest_into_server(self) -> bool:
        """
        Push every guest line to the server cart, one request at a time.

        Lines the server refuses are dropped; the guest cart is cleared either
        way and the server cart refetched once. Returns False when anything
        could not be synced.

        A 401 stops the merge: the store falls back to guest mode and keeps
        every line not yet accepted by the server, the rejected one included.
        """
        guest_lines = list(self.cache.guest)
        if not guest_lines:
            return True
        if self.mode is CartMode.ANONYMOUS:
            logger.warning("Merge requested without an authenticated session, guest cart kept")
            return False

        failed = []
        with self._busy():
            # One request at a time so same-variant increments land one after another
            for line in guest_lines:
                try:
                    await self.api.add_cart_item(line.product_id, line.quantity, line.size, line.color)
                except NotAuthenticatedError:
                    self._session_expired()
                    self.notifier.error("Session expired, cart kept on this device")
                    return False
                except StorefrontApiError as e:
                    logger.warning(f"Merge of guest line {line.product_id} x{line.quantity} failed: {e}")
                    failed.append(line)
                else:
                    self.cache.remove_guest(parse_line_id(line.id))

            self.cache.clear_guest()
            await self.fetch_cart()

        if failed:
            self.notifier.error("Some items could not be synced")
            return False
        self.notifier.success("Cart synced!")
        return True

    # ---- local only ----

    def clear_cart(self) -> None:
        self.cache.clear_server()

    def clear_guest_cart(self) -> None:
        self.cache.clear_guest()

    # ---- projections over the active cart ----

    def get_all_cart_items(self) -> List[CartLine]:
        lines = self.cache.server if self.mode is CartMode.AUTHENTICATED else self.cache.guest
        return list(lines)

    def get_cart_total(self) -> float:
        return projections.cart_total(self.get_all_cart_items())

    def get_cart_items_count(self) -> int:
        return projections.items_count(self.get_all_cart_items())

    def get_item_quantity(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> int:
        return projections.item_quantity(self.get_all_cart_items(), product_id, size, color)
