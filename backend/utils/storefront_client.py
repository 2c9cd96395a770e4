# backend/utils/storefront_client.py
import httpx
import logging
from typing import List, Optional

from config import settings
from schemas.cart import CartLine
from schemas.user import UserResponse
from schemas.wishlist import WishlistLine

logger = logging.getLogger(__name__)


class StorefrontApiError(Exception):
    """A cart/wishlist request the server refused or that never reached it."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or f"Storefront request failed (status={status_code})")
        self.message = message
        self.status_code = status_code


class NotAuthenticatedError(StorefrontApiError):
    """The server no longer recognises the session (HTTP 401)."""


def _error_message(response: httpx.Response) -> Optional[str]:
    # FastAPI puts it in "detail", older endpoints answered {"success": false, "message": ...}
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("detail") or body.get("message")
        if isinstance(message, str):
            return message
    return None


class StorefrontClient:
    def __init__(self, base_url: str = None, token: Optional[str] = None, transport: httpx.AsyncBaseTransport = None):
        self.base_url = base_url or settings.STOREFRONT_API_URL
        # Session identity travels as a bearer token, the server derives ownership from it
        self.token = token
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        return httpx.AsyncClient(base_url=self.base_url, headers=headers, transport=self.transport)

    async def _send(self, method: str, path: str, json: dict = None) -> dict:
        async with self._client() as client:
            try:
                response = await client.request(method, path, json=json)
            except httpx.RequestError as e:
                logger.error(f"Storefront {method} {path} transport error: {e}")
                raise StorefrontApiError() from e

        if response.status_code == 401:
            raise NotAuthenticatedError(_error_message(response), status_code=401)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(response)
            logger.error(f"Storefront {method} {path} failed with {response.status_code}: {message or response.text}")
            raise StorefrontApiError(message, status_code=response.status_code) from e

        body = response.json() if response.content else {}
        # Endpoints may still answer 200 with success=false
        if isinstance(body, dict) and body.get("success") is False:
            raise StorefrontApiError(body.get("message"), status_code=response.status_code)
        return body

    # ---- identity ----

    async def whoami(self) -> Optional[UserResponse]:
        if not self.token:
            return None
        try:
            body = await self._send("GET", "/me")
        except StorefrontApiError:
            return None
        return UserResponse.model_validate(body)

    # ---- cart ----

    async def fetch_cart(self) -> List[CartLine]:
        # Reads never fail towards the caller, an unreachable cart is an empty cart
        try:
            body = await self._send("GET", "/cart/get")
            return [CartLine.model_validate(line) for line in body.get("cart") or []]
        except StorefrontApiError as e:
            logger.error(f"Fetch cart error: {e}")
            return []

    async def add_cart_item(self, product_id: str, quantity: int = 1, size: str = None, color: str = None) -> dict:
        payload = {"product_id": product_id, "quantity": quantity, "size": size or None, "color": color or None}
        return await self._send("POST", "/cart/add", json=payload)

    async def update_cart_item(self, item_id: str, quantity: int) -> dict:
        return await self._send("PUT", "/cart/update", json={"item_id": item_id, "quantity": quantity})

    async def remove_cart_item(self, item_id: str) -> dict:
        return await self._send("DELETE", "/cart/delete", json={"item_id": item_id})

    # ---- wishlist ----

    async def fetch_wishlist(self) -> List[WishlistLine]:
        try:
            body = await self._send("GET", "/wishlist/get")
            return [WishlistLine.model_validate(line) for line in body.get("wishlist") or []]
        except StorefrontApiError as e:
            logger.error(f"Fetch wishlist error: {e}")
            return []

    async def add_wishlist_item(self, product_id: str) -> dict:
        return await self._send("POST", "/wishlist/add", json={"product_id": product_id})

    async def remove_wishlist_item(self, product_id: str) -> dict:
        return await self._send("DELETE", "/wishlist/delete", json={"product_id": product_id})
