"""
Tests for the dashboard and dashboard export endpoints.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

PARAMS = {"preset": "7d", "account_id": "acc-1"}


class TestDashboard:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "marketing-console"}

    def test_dashboard(self, client: TestClient) -> None:
        response = client.get("/api/dashboard", params=PARAMS)
        assert response.status_code == 200
        data = response.json()

        assert data["event_count"] == 5
        assert data["granularity"] == "day"
        assert set(data["kpis"]) == {"web", "messaging", "ecommerce", "attribution"}
        assert len(data["web"]["buckets"]) == 7
        assert data["web"]["series"]["page_view"] == [0, 0, 0, 0, 0, 2, 1]
        assert data["sends_by_channel"]["series"]["email"] == [0, 0, 0, 0, 1, 0, 0]
        assert [p["page_url"] for p in data["top_pages"]] == ["/home", "/pricing"]
        assert data["top_messages"][0]["name"] == "Summer Sale"
        assert data["top_products"][0] == {
            "id": "sku-1",
            "adds": 0,
            "purchases": 1,
            "revenue": 40.0,
        }
        assert data["attribution"][0]["name"] == "Winback"

    def test_account_scoping(self, client: TestClient) -> None:
        scoped = client.get("/api/dashboard", params=PARAMS).json()
        unscoped = client.get("/api/dashboard", params={"preset": "7d"}).json()
        assert unscoped["event_count"] == scoped["event_count"] + 1

    def test_hour_granularity(self, client: TestClient) -> None:
        response = client.get(
            "/api/dashboard", params={**PARAMS, "preset": "custom",
                                      "start": "2024-06-15", "end": "2024-06-15",
                                      "granularity": "hour"}
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["web"]["buckets"]) == 24
        # one page view three hours before noon
        assert data["web"]["series"]["page_view"][9] == 1

    def test_invalid_granularity(self, client: TestClient) -> None:
        response = client.get("/api/dashboard", params={"granularity": "month"})
        assert response.status_code == 400
        assert "Invalid granularity" in response.json()["detail"]

    def test_invalid_dimension(self, client: TestClient) -> None:
        response = client.get("/api/dashboard", params={"dimension": "segment"})
        assert response.status_code == 400


class TestKpis:
    def test_kpi_rows_with_deltas(self, client: TestClient) -> None:
        response = client.get("/api/dashboard/kpis", params=PARAMS)
        assert response.status_code == 200
        data = response.json()
        web = {r["label"]: r for r in data["kpis"]["web"]}
        # nothing in the previous period: delta is the raw current value
        assert web["Page views"]["value"] == 3
        assert web["Page views"]["delta"] == 3.0
        ecommerce = {r["label"]: r for r in data["kpis"]["ecommerce"]}
        assert ecommerce["Revenue"]["value_str"] == "$40.00"
        assert data["previous_end"] < data["start"]

    def test_channel_scope(self, client: TestClient) -> None:
        data = client.get("/api/dashboard/kpis", params={**PARAMS, "channel": "sms"}).json()
        messaging = {r["label"]: r for r in data["kpis"]["messaging"]}
        assert messaging["Sent"]["value"] == 0


class TestAttribution:
    def test_compare(self, client: TestClient) -> None:
        response = client.get(
            "/api/dashboard/attribution", params={**PARAMS, "a": "a1", "b": "zzz"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["dimension"] == "agent"
        assert data["rows"][0]["roi"] == 40.0
        assert data["compare_a"]["name"] == "Winback"
        assert data["compare_b"] is None

    def test_by_message(self, client: TestClient) -> None:
        data = client.get(
            "/api/dashboard/attribution", params={**PARAMS, "dimension": "message"}
        ).json()
        assert [(r["id"], r["name"]) for r in data["rows"]] == [("m1", "Summer Sale")]


class TestDashboardExports:
    def test_top_pages_csv(self, client: TestClient) -> None:
        response = client.get("/api/exports/top-pages", params=PARAMS)
        assert response.status_code == 200
        assert response.headers["content-type"] == "text/csv; charset=utf-8"
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="top-pages.csv"'
        )
        assert response.text == "page_url,views\n/home,2\n/pricing,1"

    def test_top_messages_csv(self, client: TestClient) -> None:
        response = client.get("/api/exports/top-messages", params=PARAMS)
        assert response.text == "id,name,sent,opens,clicks,bounces\nm1,Summer Sale,1,0,0,0"

    def test_top_products_csv(self, client: TestClient) -> None:
        response = client.get("/api/exports/top-products", params=PARAMS)
        assert response.text == "product_id,adds,purchases,revenue\nsku-1,0,1,40"

    def test_attribution_csv(self, client: TestClient) -> None:
        response = client.get(
            "/api/exports/attribution", params={**PARAMS, "dimension": "message"}
        )
        assert 'filename="attribution-message.csv"' in response.headers["content-disposition"]
        assert response.text == "message,revenue,orders,aov,roi\nSummer Sale,40,1,40.00,40.00"

    def test_export_rejects_bad_granularity(self, client: TestClient) -> None:
        response = client.get("/api/exports/top-pages", params={"granularity": "year"})
        assert response.status_code == 400
