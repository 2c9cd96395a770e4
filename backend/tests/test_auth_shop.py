from models.log import Log


class TestAuth:

    def test_register_login_me(self, client):
        resp = client.post("/register", json={"email": "Nowy@Storefront.io", "password": "pass1234", "first_name": "Jan"})
        assert resp.status_code == 201
        assert resp.json()["email"] == "nowy@storefront.io"
        assert resp.json()["role"] == "customer"

        resp = client.post("/login", json={"email": "nowy@storefront.io", "password": "pass1234"})
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["first_name"] == "Jan"

    def test_duplicate_email(self, client, customer, db):
        resp = client.post("/register", json={"email": customer.email, "password": "x"})
        assert resp.status_code == 400
        assert db.query(Log).filter(Log.action == "REGISTER", Log.status == "FAIL").count() == 1

    def test_wrong_password(self, client, customer):
        resp = client.post("/login", json={"email": customer.email, "password": "wrong"})
        assert resp.status_code == 401

    def test_me_requires_token(self, client):
        assert client.get("/me").status_code == 401


class TestShop:

    def test_lists_only_products_in_stock(self, client, products, db):
        products["p3"].stock = 0
        db.commit()
        resp = client.get("/shop/products", params={"sort_by": "price", "order": "desc"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 2
        assert [p["id"] for p in body["items"]] == ["p1", "p2"]

    def test_product_snapshot(self, client, products):
        resp = client.get("/shop/products/p2")
        assert resp.status_code == 200
        assert resp.json() == {
            "id": "p2", "name": "Enamel Mug", "price": 2.5, "original_price": 3.0,
            "thumbnail": None, "stock": 5, "category": "Home",
        }
        assert client.get("/shop/products/nope").status_code == 404
