from unittest.mock import AsyncMock

import httpx
import pytest

from main import app
from schemas.cart import CartProduct
from schemas.wishlist import WishlistLine
from store.session import StorefrontSession
from store.wishlist_store import WishlistStore
from utils.storefront_client import NotAuthenticatedError, StorefrontApiError, StorefrontClient


class TestWishlistRoutes:

    def test_add_is_idempotent(self, client, products, auth_headers):
        first = client.post("/wishlist/add", json={"product_id": "p1"}, headers=auth_headers)
        second = client.post("/wishlist/add", json={"product_id": "p1"}, headers=auth_headers)
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["message"] == "Already in wishlist"
        assert len(client.get("/wishlist/get", headers=auth_headers).json()["wishlist"]) == 1

    def test_check_and_delete(self, client, products, auth_headers):
        client.post("/wishlist/add", json={"product_id": "p2"}, headers=auth_headers)
        assert client.get("/wishlist/check/p2", headers=auth_headers).json() == {"in_wishlist": True}

        resp = client.request("DELETE", "/wishlist/delete", json={"product_id": "p2"}, headers=auth_headers)
        assert resp.status_code == 200
        assert client.get("/wishlist/check/p2", headers=auth_headers).json() == {"in_wishlist": False}

        resp = client.request("DELETE", "/wishlist/delete", json={"product_id": "p2"}, headers=auth_headers)
        assert resp.status_code == 404

    def test_anonymous_access(self, client, products):
        assert client.get("/wishlist/get").json() == {"wishlist": []}
        assert client.get("/wishlist/check/p1").json() == {"in_wishlist": False}
        assert client.post("/wishlist/add", json={"product_id": "p1"}).status_code == 401

    def test_unknown_product(self, client, products, auth_headers):
        resp = client.post("/wishlist/add", json={"product_id": "nope"}, headers=auth_headers)
        assert resp.status_code == 404


class TestWishlistStore:

    @pytest.fixture
    def api(self):
        api = AsyncMock(spec=StorefrontClient)
        api.token = None
        api.fetch_wishlist.return_value = []
        return api

    @pytest.fixture
    def store(self, api, notifier):
        return WishlistStore(api, notifier=notifier)

    @pytest.mark.anyio
    async def test_guest_add_deduplicates(self, store, notifier, make_snapshot):
        assert await store.add_item("p1", snapshot=make_snapshot("p1")) is True
        assert await store.add_item("p1", snapshot=make_snapshot("p1")) is True

        assert store.get_wishlist_count() == 1
        assert store.is_in_wishlist("p1")
        assert store.get_all_wishlist_items()[0].id.startswith("guest_")
        assert notifier.messages == [("success", "Added to wishlist!"), ("info", "Already in wishlist")]

    @pytest.mark.anyio
    async def test_failed_remove_restores_server_list(self, store, api, notifier):
        item = WishlistLine(id="3", product_id="p1", product=CartProduct(id="p1", name="P1", price=1.0))
        api.fetch_wishlist.return_value = [item]
        await store.sign_in("anna@storefront.io")
        api.remove_wishlist_item.side_effect = StorefrontApiError()

        assert await store.remove_item("p1") is False

        assert store.is_in_wishlist("p1")
        assert notifier.messages[-1] == ("error", "Failed to remove")

    @pytest.mark.anyio
    async def test_partial_merge(self, store, api, notifier, make_snapshot):
        await store.add_item("p1", snapshot=make_snapshot("p1"))
        await store.add_item("p2", snapshot=make_snapshot("p2"))
        api.add_wishlist_item.side_effect = [None, StorefrontApiError("Product not found")]

        await store.sign_in("anna@storefront.io")

        assert store.guest == []
        assert api.add_wishlist_item.await_count == 2
        assert notifier.messages[-1] == ("error", "Some items could not be synced")

    @pytest.mark.anyio
    async def test_expired_session_during_merge_keeps_guest_items(self, store, api, notifier, make_snapshot):
        for product_id in ("p1", "p2", "p3"):
            await store.add_item(product_id, snapshot=make_snapshot(product_id))
        api.token = "token"
        api.add_wishlist_item.side_effect = [None, NotAuthenticatedError("Please login first", status_code=401)]

        await store.sign_in("anna@storefront.io")

        assert not store.is_authenticated
        assert api.token is None
        assert [item.product_id for item in store.get_all_wishlist_items()] == ["p2", "p3"]
        assert notifier.messages[-1] == ("error", "Session expired, wishlist kept on this device")


@pytest.mark.anyio
async def test_sign_in_merges_guest_wishlist(products, token, notifier, make_snapshot):
    session = StorefrontSession(base_url="http://testserver", notifier=notifier,
                                transport=httpx.ASGITransport(app=app))
    await session.wishlist.add_item("p3", snapshot=make_snapshot("p3"))

    assert await session.sign_in(token) is True

    assert session.wishlist.guest == []
    assert [w.product_id for w in session.wishlist.get_all_wishlist_items()] == ["p3"]
    assert notifier.messages[-1] == ("success", "Wishlist synced!")

    session.sign_out()
    assert session.wishlist.get_wishlist_count() == 0
