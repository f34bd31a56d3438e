"""
Tests for the product and health HTTP endpoints.

Requests go through the ASGI app with the database dependency pointed at
the in-memory test database.
"""

from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from backend.src.api.main import app
from backend.src.api.routes import products as products_routes
from backend.src.core.database import get_db
from backend.src.core.exceptions import DatabaseError, InngestError
from backend.src.services.catalog_sync_service import CatalogSyncService
from backend.src.services.feed_client import FeedClient
from backend.src.services.product_store import ProductStore


# ============================================================================
# FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client bound to the app with the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def use_feed(monkeypatch):
    """Point the sync endpoint at a mocked feed."""

    def _use(handler):
        service = CatalogSyncService(
            store=ProductStore(),
            client=FeedClient(
                feed_url="https://shop.example.com/products.json",
                transport=httpx.MockTransport(handler),
            ),
            ceiling=50,
        )
        monkeypatch.setattr(products_routes, "catalog_sync_service", service)
        return service

    return _use


# ============================================================================
# LISTING AND SEARCH TESTS
# ============================================================================

class TestListProducts:
    """Tests for GET /v1/products."""

    async def test_empty_catalog(self, client):
        response = await client.get("/v1/products")

        assert response.status_code == 200
        body = response.json()
        assert body["products"] == []
        assert body["meta"]["page"] == 0
        assert body["meta"]["total_pages"] == 0
        assert body["meta"]["page_start"] == 0
        assert body["meta"]["page_end"] == 0

    async def test_page_past_end_is_clamped(self, client, make_products):
        await make_products(12)

        response = await client.get("/v1/products", params={"page": 5, "size": 10})

        assert response.status_code == 200
        body = response.json()
        assert len(body["products"]) == 2
        assert body["meta"]["page"] == 1
        assert body["meta"]["page_start"] == 11
        assert body["meta"]["page_end"] == 12
        assert body["meta"]["has_previous"] is True
        assert body["meta"]["has_next"] is False

    async def test_default_page_size(self, client, make_products):
        await make_products(15)

        body = (await client.get("/v1/products")).json()

        assert body["meta"]["page_size"] == 10
        assert body["products"][0]["title"] == "Product 14"

    async def test_non_integer_page_rejected(self, client):
        response = await client.get("/v1/products", params={"page": "abc"})

        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"


class TestSearchProducts:
    """Tests for GET /v1/products/search."""

    async def test_blank_term_performs_no_search(self, client, make_products):
        await make_products(3)

        body = (await client.get("/v1/products/search", params={"q": "   "})).json()

        assert body["products"] == []
        assert body["search_performed"] is False
        assert body["match_count"] == 0

    async def test_title_match(self, client, make_products):
        await make_products(12)

        body = (await client.get("/v1/products/search", params={"q": "product 1"})).json()

        # "Product 1", "Product 10", "Product 11"
        assert body["match_count"] == 3
        assert body["search_performed"] is True
        assert body["search_term"] == "product 1"


# ============================================================================
# SINGLE PRODUCT TESTS
# ============================================================================

class TestProductCrud:
    """Tests for get, create, update and delete endpoints."""

    async def test_get_missing_product(self, client):
        response = await client.get("/v1/products/404")

        assert response.status_code == 404
        assert "request_id" in response.json()

    async def test_create_product(self, client):
        response = await client.post(
            "/v1/products",
            json={"title": "Linen Shirt", "handle": "linen-shirt", "price": "49.90"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] > 0
        assert Decimal(body["price"]) == Decimal("49.90")
        assert body["shopify_product_id"] is None
        assert len(body["variants"]) == 1
        assert body["variants"][0]["available"] is True

        fetched = await client.get(f"/v1/products/{body['id']}")
        assert fetched.json()["title"] == "Linen Shirt"

    async def test_create_negative_price_rejected(self, client):
        response = await client.post(
            "/v1/products",
            json={"title": "Linen Shirt", "handle": "linen-shirt", "price": "-1"},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Price cannot be negative."

    async def test_update_product(self, client, make_products):
        records = await make_products(1)
        product_id = records[0].id

        response = await client.put(
            f"/v1/products/{product_id}",
            json={
                "title": "Renamed",
                "handle": "renamed",
                "price": "12.00",
                "product_type": "",
                "shopify_product_id": " 7401234567 ",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == product_id
        assert body["title"] == "Renamed"
        assert body["product_type"] is None
        assert body["shopify_product_id"] == 7401234567

    async def test_update_non_numeric_external_id(self, client, make_products):
        records = await make_products(1)

        response = await client.put(
            f"/v1/products/{records[0].id}",
            json={"title": "T", "handle": "t", "price": "1", "shopify_product_id": "12ab"},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Shopify product ID must be a number."

    @pytest.mark.parametrize(
        "external_id",
        ["\u00b2", "\u0663\u0664", "99999999999999999999", "0", "-5"],
    )
    async def test_update_rejects_ids_outside_bigint_digits(self, client, make_products, external_id):
        """Unicode digits, zero, negatives and values past 64 bits are validation errors."""
        records = await make_products(1)

        response = await client.put(
            f"/v1/products/{records[0].id}",
            json={"title": "T", "handle": "t", "price": "1", "shopify_product_id": external_id},
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Shopify product ID must be a number."

    async def test_update_duplicate_external_id(self, client, make_products):
        records = await make_products(2, shopify_ids=True)

        response = await client.put(
            f"/v1/products/{records[0].id}",
            json={"title": "T", "handle": "t", "price": "1", "shopify_product_id": "1001"},
        )

        assert response.status_code == 409

    async def test_update_missing_product(self, client):
        response = await client.put(
            "/v1/products/999",
            json={"title": "T", "handle": "t", "price": "1"},
        )

        assert response.status_code == 404

    async def test_delete_product(self, client, make_products):
        records = await make_products(1)

        response = await client.delete(f"/v1/products/{records[0].id}")
        assert response.status_code == 204

        again = await client.delete(f"/v1/products/{records[0].id}")
        assert again.status_code == 404


# ============================================================================
# SYNC ENDPOINT TESTS
# ============================================================================

class TestSyncEndpoint:
    """Tests for POST /v1/products/sync."""

    async def test_inline_sync(self, client, use_feed, build_feed):
        use_feed(lambda request: httpx.Response(200, json=build_feed(3)))

        response = await client.post("/v1/products/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Products synced successfully! Total products: 3"
        assert body["summary"]["inserted"] == 3

        listing = (await client.get("/v1/products")).json()
        assert listing["meta"]["total_items"] == 3

    async def test_inline_sync_feed_failure(self, client, use_feed):
        use_feed(lambda request: httpx.Response(500))

        response = await client.post("/v1/products/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("Error syncing products:")
        assert body["summary"]["status"] == "aborted"

    async def test_inline_sync_storage_failure(self, client, use_feed, monkeypatch, build_feed):
        service = use_feed(lambda request: httpx.Response(200, json=build_feed(2)))

        async def failing_prune(ceiling, db):
            raise DatabaseError("Failed to prune product")

        monkeypatch.setattr(service.store, "prune_excess", failing_prune)

        response = await client.post("/v1/products/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Error syncing products: Failed to prune product"
        assert body["summary"] is None

    async def test_inline_sync_driver_failure(self, client, use_feed, monkeypatch):
        service = use_feed(lambda request: httpx.Response(200, json={"products": []}))

        async def failing_count(db):
            raise OperationalError("SELECT count(*) FROM products", {}, Exception("database is locked"))

        monkeypatch.setattr(service.store, "count", failing_count)

        response = await client.post("/v1/products/sync")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["message"].startswith("Error syncing products:")

    async def test_background_sync_queues_event(self, client, monkeypatch):
        sent = []

        async def fake_send_event(name, data):
            sent.append((name, data))
            return ["01HZXEVENT"]

        monkeypatch.setattr(products_routes, "send_event", fake_send_event)

        response = await client.post("/v1/products/sync", params={"background": "true"})

        assert response.status_code == 200
        assert response.json()["event_ids"] == ["01HZXEVENT"]
        assert sent == [("catalog/sync.requested", {"requested_by": "api"})]

    async def test_background_sync_unavailable(self, client, monkeypatch):
        async def failing_send_event(name, data):
            raise InngestError(message="Failed to send event", function_name=name)

        monkeypatch.setattr(products_routes, "send_event", failing_send_event)

        response = await client.post("/v1/products/sync", params={"background": "true"})

        assert response.status_code == 503


# ============================================================================
# HEALTH AND MIDDLEWARE TESTS
# ============================================================================

class TestHealth:
    """Tests for health endpoints and request tracing."""

    async def test_basic_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_detailed_health_reports_catalog(self, client, make_products):
        await make_products(4)

        body = (await client.get("/v1/health/detailed")).json()

        assert body["status"] == "healthy"
        assert body["components"]["database"]["status"] == "healthy"
        assert body["components"]["catalog"]["product_count"] == 4
        assert body["components"]["catalog"]["max_products"] == 50

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.headers["X-Response-Time"].endswith("ms")
