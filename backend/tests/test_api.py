"""Integration tests for the FastAPI endpoints."""
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from fixed_assets.core import posting


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestRun:
    def test_run_posts_and_reports(self, client, make_asset):
        make_asset()
        make_asset(in_service_date=date(2025, 2, 15))
        r = client.post("/api/depreciation/run", params={"at": "2025-01-15"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["processed"] == 1
        assert data["considered"] == 2
        assert data["period"] == {"start": "2025-01-01", "end": "2025-01-31"}
        assert data["skipped"] == {"not_in_service": 1}
        assert data["failed"] == []
        assert "message" in data

    def test_run_twice_same_month(self, client, make_asset):
        asset = make_asset()
        client.post("/api/depreciation/run", params={"at": "2025-01-03"})
        r = client.post("/api/depreciation/run", params={"at": "2025-01-29"})
        assert r.json()["processed"] == 0

        schedules = client.get("/api/depreciation/schedules", params={"asset_id": asset.id}).json()
        assert len(schedules) == 1

    def test_run_reports_asset_failures(self, client, make_asset):
        broken = make_asset(useful_life_years=0)
        r = client.post("/api/depreciation/run", params={"at": "2025-01-15"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["processed"] == 0
        assert [f["asset_id"] for f in data["failed"]] == [broken.id]

    def test_run_tenant_scope(self, client, make_asset):
        make_asset(tenant_id="tenant-a")
        make_asset(tenant_id="tenant-b")
        r = client.post(
            "/api/depreciation/run", params={"at": "2025-01-15", "tenant_id": "tenant-b"}
        )
        assert r.json()["processed"] == 1

    def test_run_fatal_error(self, client, make_asset, monkeypatch):
        make_asset()

        def boom(db, tenant_id=None):
            raise OperationalError("SELECT", {}, Exception("database is unreachable"))

        monkeypatch.setattr(posting, "select_candidates", boom)
        r = client.post("/api/depreciation/run", params={"at": "2025-01-15"})
        assert r.status_code == 500
        data = r.json()
        assert data["success"] is False
        assert "unreachable" in data["error"]

    def test_run_invalid_period_type_returns_json_error(self, client, make_asset, monkeypatch):
        make_asset()
        monkeypatch.setattr(posting, "get_period_type", lambda: "weekly")
        r = client.post("/api/depreciation/run", params={"at": "2025-01-15"})
        assert r.status_code == 500
        data = r.json()
        assert data["success"] is False
        assert "weekly" in data["error"]

    def test_run_unexpected_error_returns_json_error(self, client, make_asset, monkeypatch):
        make_asset()

        def explode(asset, period):
            raise RuntimeError("calcul interrompu")

        monkeypatch.setattr(posting, "compute_for_asset", explode)
        r = client.post("/api/depreciation/run", params={"at": "2025-01-15"})
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Erreur inattendue : calcul interrompu"}

    def test_preflight_has_no_body(self, client):
        r = client.options("/api/depreciation/run")
        assert r.status_code == 204
        assert r.content == b""
        assert r.headers["access-control-allow-origin"] == "*"


class TestSchedules:
    def test_list_ordered(self, client, make_asset):
        asset = make_asset()
        for at in ("2025-01-10", "2025-02-10", "2025-03-10"):
            client.post("/api/depreciation/run", params={"at": at})

        r = client.get("/api/depreciation/schedules", params={"asset_id": asset.id})
        assert r.status_code == 200
        starts = [s["period_start"] for s in r.json()]
        assert starts == ["2025-01-01", "2025-02-01", "2025-03-01"]

    def test_filter_period_type(self, client, make_asset):
        asset = make_asset()
        client.post("/api/depreciation/run", params={"at": "2025-01-10"})
        r = client.get(
            "/api/depreciation/schedules",
            params={"asset_id": asset.id, "period_type": "yearly"},
        )
        assert r.json() == []


class TestSummary:
    def test_summary_after_runs(self, client, make_asset):
        asset = make_asset()
        client.post("/api/depreciation/run", params={"at": "2025-01-10"})
        client.post("/api/depreciation/run", params={"at": "2025-02-10"})

        r = client.get(f"/api/depreciation/summary/{asset.id}")
        assert r.status_code == 200
        data = r.json()
        assert data["total_periods"] == 2
        assert data["total_depreciation"] == 400.0
        assert data["current_book_value"] == 11600.0
        assert data["accumulated_depreciation"] == 400.0
        assert data["first_period"] == "2025-01-01"
        assert data["last_period"] == "2025-02-28"
        assert data["method"] == "straight_line"
        assert data["in_sync"] is True

    def test_summary_without_entries(self, client, make_asset):
        asset = make_asset(current_book_value=Decimal("9000"))
        data = client.get(f"/api/depreciation/summary/{asset.id}").json()
        assert data["total_periods"] == 0
        assert data["current_book_value"] == 9000.0

    def test_summary_not_found(self, client):
        r = client.get("/api/depreciation/summary/9999")
        assert r.status_code == 404


class TestProjection:
    def test_projection(self, client):
        r = client.post(
            "/api/depreciation/projection",
            json={
                "purchase_price": 12000,
                "salvage_value": 0,
                "useful_life_years": 5,
                "depreciation_method": "straight_line",
                "start_date": "2025-01-01",
                "period_type": "yearly",
            },
        )
        assert r.status_code == 200
        rows = r.json()
        assert len(rows) == 5
        assert rows[0]["depreciation_amount"] == 2400.0
        assert rows[-1]["closing_value"] == 0.0

    def test_projection_invalid_life(self, client):
        r = client.post(
            "/api/depreciation/projection",
            json={"purchase_price": 12000, "useful_life_years": 0, "start_date": "2025-01-01"},
        )
        assert r.status_code == 422

    def test_projection_unknown_period_type(self, client):
        r = client.post(
            "/api/depreciation/projection",
            json={
                "purchase_price": 12000,
                "useful_life_years": 5,
                "start_date": "2025-01-01",
                "period_type": "weekly",
            },
        )
        assert r.status_code == 422

    def test_projection_useful_life_capped(self, client):
        r = client.post(
            "/api/depreciation/projection",
            json={"purchase_price": 10000000, "useful_life_years": 5000, "start_date": "2025-01-01"},
        )
        assert r.status_code == 422

    def test_projection_negative_price(self, client):
        r = client.post(
            "/api/depreciation/projection",
            json={"purchase_price": -1, "useful_life_years": 5, "start_date": "2025-01-01"},
        )
        assert r.status_code == 422
