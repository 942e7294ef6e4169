"""Integration tests for product and campaign endpoints."""

import pytest


class TestProductsRouter:
    async def _create(self, client, headers, **overrides):
        body = {"name": "desk lamp", "price": "19.9", "category": "home", "stock": 3}
        body.update(overrides)
        resp = await client.post("/api/products", json=body, headers=headers)
        assert resp.status_code == 200, resp.text
        return resp.json()

    async def test_create_and_list(self, client, auth_headers):
        product = await self._create(client, auth_headers)
        assert product["price"] == "19.90"
        assert product["isOptimized"] is False
        listed = (await client.get("/api/products", headers=auth_headers)).json()
        assert [p["id"] for p in listed] == [product["id"]]

    async def test_invalid_price(self, client, auth_headers):
        resp = await client.post("/api/products", json={
            "name": "x", "price": "-4", "category": "home",
        }, headers=auth_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("price", ["1e30", "NaN"])
    async def test_malformed_price_is_400(self, client, auth_headers, price):
        resp = await client.post("/api/products", json={
            "name": "x", "price": price, "category": "home",
        }, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"
        assert "price" in resp.json()["message"]

    async def test_update_and_delete(self, client, auth_headers):
        product = await self._create(client, auth_headers)
        resp = await client.patch(f"/api/products/{product['id']}", json={"stock": 9}, headers=auth_headers)
        assert resp.json()["stock"] == 9
        resp = await client.delete(f"/api/products/{product['id']}", headers=auth_headers)
        assert resp.status_code == 200
        resp = await client.get(f"/api/products/{product['id']}", headers=auth_headers)
        assert resp.status_code == 404

    async def test_other_users_product_is_404(self, client, register):
        owner = await register("owner@example.com")
        stranger = await register("stranger@example.com")
        product = await self._create(client, owner)
        resp = await client.get(f"/api/products/{product['id']}", headers=stranger)
        assert resp.status_code == 404
        resp = await client.delete(f"/api/products/{product['id']}", headers=stranger)
        assert resp.status_code == 404

    async def test_optimize_all_dedupes(self, client, auth_headers):
        first = await self._create(client, auth_headers, name="foo bar", category="electronics")
        await self._create(client, auth_headers, name="Foo Bar", category="electronics")
        await self._create(client, auth_headers, name="smart watch", category="electronics")

        resp = await client.post("/api/products/optimize-all", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["optimizedCount"] == 2
        assert data["duplicatesRemoved"] == 1

        products = (await client.get("/api/products", headers=auth_headers)).json()
        names = sorted(p["name"] for p in products)
        assert names == ["Foo Bar", "Smart Watch"]
        assert first["id"] in {p["id"] for p in products}
        assert all(p["isOptimized"] for p in products)

    async def test_optimize_all_ignores_category_case(self, client, auth_headers):
        await self._create(client, auth_headers, name="foo bar", category="Electronics")
        await self._create(client, auth_headers, name="Foo Bar", category="electronics")

        resp = await client.post("/api/products/optimize-all", headers=auth_headers)
        assert resp.json()["duplicatesRemoved"] == 1

        products = (await client.get("/api/products", headers=auth_headers)).json()
        assert len(products) == 1
        assert products[0]["name"] == "Foo Bar"
        assert products[0]["isOptimized"] is True

    async def test_optimize_all_does_not_touch_counters(self, client, auth_headers):
        await client.post("/api/dashboard/initialize", headers=auth_headers)
        await self._create(client, auth_headers)
        await client.post("/api/products/optimize-all", headers=auth_headers)
        stats = (await client.get("/api/usage-stats", headers=auth_headers)).json()
        assert stats["productsOptimized"] == 0


class TestCampaignsRouter:
    async def test_create_and_send(self, client, auth_headers):
        resp = await client.post("/api/campaigns", json={
            "type": "email", "name": "Launch", "subject": "Hello", "content": "Body",
        }, headers=auth_headers)
        assert resp.status_code == 200
        campaign = resp.json()
        assert campaign["status"] == "draft"

        resp = await client.patch(f"/api/campaigns/{campaign['id']}", json={
            "status": "sent", "sentCount": 120,
        }, headers=auth_headers)
        assert resp.json()["sentCount"] == 120
        stats = (await client.get("/api/usage-stats", headers=auth_headers)).json()
        assert stats["emailsSent"] == 120

    async def test_invalid_type(self, client, auth_headers):
        resp = await client.post("/api/campaigns", json={
            "type": "fax", "name": "Old", "content": "Body",
        }, headers=auth_headers)
        assert resp.status_code == 400
