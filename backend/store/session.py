# backend/store/session.py
import logging

import httpx

from config import settings
from schemas.cart import CartLine
from schemas.wishlist import WishlistLine
from store.cart_store import CartStore
from store.guest_storage import guest_storage_for
from store.local_cache import LocalCartCache
from store.notifications import LogNotifier, Notifier
from store.wishlist_store import WishlistStore
from utils.storefront_client import StorefrontClient

logger = logging.getLogger(__name__)


class StorefrontSession:
    """
    Per-visitor state: one API client shared by the cart and wishlist stores.

    Whoever owns the visitor's lifetime holds exactly one of these; the stores
    inside are its only writers.
    """

    def __init__(self, base_url: str = None, notifier: Notifier = None, transport: httpx.AsyncBaseTransport = None,
                 cart_path: str = None, wishlist_path: str = None):
        notifier = notifier or LogNotifier()
        self.api = StorefrontClient(base_url or settings.STOREFRONT_API_URL, transport=transport)
        self.cart = CartStore(
            self.api,
            cache=LocalCartCache(guest_storage_for(cart_path or settings.GUEST_CART_PATH, CartLine)),
            notifier=notifier,
            on_unauthenticated=self.session_lost,
        )
        self.wishlist = WishlistStore(
            self.api,
            storage=guest_storage_for(wishlist_path or settings.GUEST_WISHLIST_PATH, WishlistLine),
            notifier=notifier,
            on_unauthenticated=self.session_lost,
        )

    async def sign_in(self, token: str) -> bool:
        if not await self.cart.sign_in(token):
            return False
        await self.wishlist.sign_in(self.cart.identity)
        return self.cart.identity is not None

    def sign_out(self) -> None:
        self.cart.sign_out()
        self.wishlist.sign_out()

    def session_lost(self) -> None:
        """Either store got a 401: both drop back to guest mode together."""
        logger.info("Session rejected by the server, signing the visitor out")
        self.sign_out()
