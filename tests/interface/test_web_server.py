"""HTTP API tests using FastAPI's TestClient against an in-memory store."""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from interface.web.server import WebServer, validate_payload, RequestError
from store.base import RecordStoreError
from store.memory import MemoryStore


@pytest.fixture
def client(memory_store):
    return TestClient(WebServer(store=memory_store).app)


@pytest.fixture
def empty_client(empty_store):
    return TestClient(WebServer(store=empty_store).app)


class TestFinanceApi:
    """Finance CRUD with the required-field and unknown-id rules."""

    def test_list(self, client):
        response = client.get("/api/finance")
        assert response.status_code == 200
        records = response.json()
        assert [r["id"] for r in records] == ["f-3", "f-2", "f-1"]
        assert set(records[0]) >= {"id", "date", "type", "title", "amount", "memo"}

    def test_list_by_month(self, client):
        records = client.get("/api/finance", params={"month": "2024-03"}).json()
        assert sorted(r["id"] for r in records) == ["f-1", "f-2"]

    def test_create(self, empty_client):
        response = empty_client.post("/api/finance", json={
            "id": "f-9", "date": "2024-05-01", "type": "income",
            "title": "Facial", "amount": 0, "memo": "",
        })
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["data"]["id"] == "f-9"
        assert empty_client.get("/api/finance").json()[0]["title"] == "Facial"

    def test_create_duplicate_id_409(self, client):
        response = client.post("/api/finance", json={
            "id": "f-1", "date": "2024-05-01", "type": "income",
            "title": "Again", "amount": 1,
        })
        assert response.status_code == 409
        assert "f-1" in response.json()["error"]
        titles = [r["title"] for r in client.get("/api/finance").json()]
        assert "Again" not in titles

    @pytest.mark.parametrize("missing", ["date", "type", "title", "amount"])
    def test_create_missing_field_400(self, empty_client, missing):
        payload = {"date": "2024-05-01", "type": "income",
                   "title": "Facial", "amount": 100}
        payload.pop(missing)
        response = empty_client.post("/api/finance", json=payload)
        assert response.status_code == 400
        assert missing in response.json()["error"]

    def test_create_invalid_type_400(self, empty_client):
        response = empty_client.post("/api/finance", json={
            "date": "2024-05-01", "type": "gift", "title": "x", "amount": 1,
        })
        assert response.status_code == 400

    def test_update(self, client):
        response = client.put("/api/finance/f-2", json={"amount": 500})
        assert response.status_code == 200
        assert response.json()["data"]["amount"] == 500

    def test_update_unknown_404(self, client):
        response = client.put("/api/finance/nope", json={"amount": 500})
        assert response.status_code == 404
        assert "error" in response.json()

    def test_delete(self, client):
        assert client.delete("/api/finance/f-1").json()["success"] is True
        assert len(client.get("/api/finance").json()) == 2

    def test_delete_unknown_404(self, client):
        assert client.delete("/api/finance/nope").status_code == 404


class TestFinanceReports:
    """Monthly stats, breakdown and recent records."""

    def test_stats_for_month(self, client):
        body = client.get("/api/finance/stats", params={"month": "2024-03"}).json()
        assert body == {"month": "2024-03", "totalIncome": 1000,
                        "totalExpense": 400, "netProfit": 600,
                        "totalRecords": 2}

    def test_stats_defaults_to_current_month(self, empty_client):
        body = empty_client.get("/api/finance/stats").json()
        assert body["month"] == date.today().strftime("%Y-%m")
        assert body["totalRecords"] == 0

    def test_monthly_breakdown(self, client):
        rows = client.get("/api/finance/monthly").json()
        assert [r["month"] for r in rows] == ["2024-04", "2024-03"]

    def test_recent(self, client):
        records = client.get("/api/finance/recent", params={"limit": 2}).json()
        assert [r["id"] for r in records] == ["f-3", "f-2"]


class TestEntityApi:
    """Customers, products, purchases and appointments."""

    def test_customers_camel_case(self, client):
        customers = client.get("/api/customers").json()
        kim = next(c for c in customers if c["id"] == "c-kim")
        assert kim["birthDate"] == "1990-05-01"
        assert kim["skinType"] == "dry"
        assert "birth_date" not in kim

    def test_customer_search(self, client):
        results = client.get("/api/customers", params={"q": "3333"}).json()
        assert [c["id"] for c in results] == ["c-lee"]

    def test_get_customer(self, client):
        assert client.get("/api/customers/c-lee").json()["memo"] == "VIP"
        assert client.get("/api/customers/nope").status_code == 404

    def test_create_customer(self, empty_client):
        response = empty_client.post("/api/customers", json={
            "name": "Park", "phone": "010-5555-6666", "skinType": "normal",
        })
        assert response.status_code == 200
        created = response.json()["data"]
        assert created["skinType"] == "normal"
        assert created["point"] == 0
        assert created["createdAt"]

    def test_create_customer_invalid_skin_type(self, empty_client):
        response = empty_client.post("/api/customers", json={
            "name": "Park", "skinType": "shiny",
        })
        assert response.status_code == 400

    def test_product_count_field(self, empty_client):
        created = empty_client.post("/api/products", json={
            "name": "Hydra 5x", "price": 300000, "type": "voucher", "count": 5,
        }).json()["data"]
        assert created["count"] == 5

    def test_purchase_total_price(self, client):
        created = client.post("/api/purchases", json={
            "customerId": "c-lee", "productId": "p-facial", "quantity": 1,
        }).json()["data"]
        assert created["totalPrice"] == 90000
        assert created["customerId"] == "c-lee"

    def test_purchases_by_customer(self, client):
        records = client.get("/api/purchases",
                             params={"customerId": "c-kim"}).json()
        assert {r["id"] for r in records} == {"pu-1", "pu-2"}
        assert client.get("/api/purchases",
                          params={"customerId": "c-lee"}).json() == []

    def test_appointment_status_update(self, client):
        response = client.put("/api/appointments/a-1",
                              json={"status": "cancelled"})
        assert response.json()["data"]["status"] == "cancelled"
        bad = client.put("/api/appointments/a-1", json={"status": "lost"})
        assert bad.status_code == 400

    def test_delete_product(self, client):
        assert client.delete("/api/products/p-peel").status_code == 200
        assert client.get("/api/products/p-peel").status_code == 404


class TestEntitlementsApi:
    """Remaining sessions per customer."""

    def test_entitlements(self, client):
        body = client.get("/api/customers/c-kim/entitlements").json()
        assert body["remaining"] == {"p-facial": 2}
        assert body["text"] == "Facial 3x: 2 sessions"
        assert body["ledger"] == [{
            "productId": "p-facial", "productName": "Facial 3x",
            "purchased": 2, "unitCount": 3, "granted": 6, "consumed": 4,
            "remaining": 2, "overused": False,
        }]

    def test_excluded_statuses(self, client):
        client.put("/api/appointments/a-1", json={"status": "cancelled"})
        body = client.get("/api/customers/c-kim/entitlements",
                          params={"excludeStatuses": "cancelled,no-show"}).json()
        assert body["remaining"] == {"p-facial": 3}

    def test_customer_without_purchases(self, client):
        body = client.get("/api/customers/c-lee/entitlements").json()
        assert body["remaining"] == {}
        assert body["text"] == ""
        assert body["ledger"] == []

    def test_unknown_customer_404(self, client):
        assert client.get("/api/customers/nope/entitlements").status_code == 404


class TestDashboardAndStatus:
    """Dashboard, health and store status."""

    def test_dashboard(self, client):
        body = client.get("/api/dashboard").json()
        assert body["customerCount"] == 2
        assert [p["id"] for p in body["activeProducts"]] == ["p-facial"]
        assert [r["id"] for r in body["recentFinance"]] == ["f-3", "f-2", "f-1"]
        assert set(body["monthStats"]) == {"totalIncome", "totalExpense",
                                           "netProfit", "totalRecords"}
        assert body["currencyUnit"] == "KRW"

    def test_dashboard_today_appointments(self, empty_store):
        today = date.today().isoformat()
        empty_store.create("appointments", {
            "customer_id": "c1", "product_id": "p1",
            "datetime": f"{today}T10:00",
        })
        body = TestClient(WebServer(store=empty_store).app).get(
            "/api/dashboard").json()
        assert len(body["todayAppointments"]) == 1
        assert body["todayAppointments"][0]["customerId"] == "c1"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok",
                                                "backend": "memory"}

    def test_status(self, client):
        assert client.get("/api/status").json()["connected"] is True


class FailingStore(MemoryStore):
    def _fetch_all(self, kind):
        raise RecordStoreError("disk on fire")


class TestStoreFailures:
    """Store errors become 500 responses."""

    def test_store_error_500(self):
        client = TestClient(WebServer(store=FailingStore()).app)
        response = client.get("/api/finance")
        assert response.status_code == 500
        assert response.json() == {"error": "disk on fire"}


class TestValidatePayload:
    """Test validate_payload() directly."""

    def test_partial_skips_required(self):
        validate_payload("finance", {}, partial=True)

    def test_blank_string_is_missing(self):
        with pytest.raises(RequestError):
            validate_payload("customers", {"name": "  "})


class TestServerLifecycle:
    """Start and stop uvicorn in its background thread."""

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self):
        server = WebServer(store=MemoryStore(), host="127.0.0.1", port=0)
        await server.startup()
        assert server.running is True
        assert server._server is not None
        thread = server._server_thread
        assert thread.is_alive()

        await server.shutdown()
        assert server.running is False
        assert server._server is None
        assert server._server_thread is None
        assert not thread.is_alive()

    @pytest.mark.asyncio
    async def test_shutdown_without_startup(self):
        server = WebServer(store=MemoryStore())
        await server.shutdown()
        assert server.running is False
