"""Tests for rescue request API endpoints."""

from __future__ import annotations

from unittest.mock import patch

from google.api_core.exceptions import ServiceUnavailable

from rescue.api.app import app
from rescue.api.deps import get_require_phone
from tests.persistence.fake_firestore import BrokenFirestoreClient

VALID = {
    "fullName": "Nguyễn Văn An",
    "phoneNumber": "0912345678",
    "status": "khẩn cấp",
    "notes": "Nhà ngập 1m",
    "coords": {"lat": 16.4637, "lng": 107.5909},
    "accuracy": 12,
    "manualOverride": False,
}


class TestCreateRequest:
    async def test_create(self, client):
        resp = await client.post("/api/requests", json=VALID)
        assert resp.status_code == 201
        data = resp.json()["request"]
        assert data["id"]
        assert data["created_at"]
        assert data["full_name"] == "Nguyễn Văn An"
        assert data["latitude"] == 16.4637
        assert data["longitude"] == 107.5909
        assert data["address"] is None
        assert data["source"] == "webapp"

    async def test_phone_optional(self, client):
        payload = {"fullName": "Trần Bình", "status": "an toàn tạm thời"}
        resp = await client.post("/api/requests", json=payload)
        assert resp.status_code == 201
        data = resp.json()["request"]
        assert data["phone_number"] is None
        assert data["latitude"] is None
        assert data["manual_override"] is False

    async def test_long_name_accepted(self, client):
        payload = {"fullName": "A" * 201, "status": "khẩn cấp"}
        resp = await client.post("/api/requests", json=payload)
        assert resp.status_code == 201
        assert resp.json()["request"]["full_name"] == "A" * 201

    async def test_missing_name(self, client, fake_client):
        resp = await client.post("/api/requests", json={**VALID, "fullName": ""})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Thiếu họ tên hoặc tình trạng."}
        assert fake_client.store == {}

    async def test_missing_status(self, client, fake_client):
        payload = {k: v for k, v in VALID.items() if k != "status"}
        resp = await client.post("/api/requests", json=payload)
        assert resp.status_code == 400
        assert "error" in resp.json()
        assert fake_client.store == {}

    async def test_unknown_status_is_400(self, client, fake_client):
        resp = await client.post("/api/requests", json={**VALID, "status": "emergency"})
        assert resp.status_code == 400
        assert resp.json()["error"]
        assert fake_client.store == {}

    async def test_phone_required_when_configured(self, client):
        app.dependency_overrides[get_require_phone] = lambda: True
        payload = {"fullName": "Trần Bình", "status": "khẩn cấp"}
        resp = await client.post("/api/requests", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Thiếu họ tên, số điện thoại hoặc tình trạng."

    async def test_store_failure_is_500_with_message(self, client):
        broken = BrokenFirestoreClient(ServiceUnavailable("quota exhausted"))
        with patch(
            "rescue.persistence.repositories.base.get_firestore_client",
            return_value=broken,
        ):
            resp = await client.post("/api/requests", json=VALID)
        assert resp.status_code == 500
        assert "quota exhausted" in resp.json()["error"]


class TestListRequests:
    async def _seed(self, client):
        people = [
            ("Nguyễn Văn An", "0912345678", "khẩn cấp", None),
            ("Lê Văn Bình", "0987654321", "khẩn cấp", "Số 912 Lê Lợi"),
            ("Trần Thị Dung", "0912000111", "cần hỗ trợ sớm", None),
            ("Phạm Minh", None, "khẩn cấp", "Kiệt 5 Huế"),
        ]
        ids = []
        for name, phone, status, address in people:
            payload = {"fullName": name, "status": status}
            if phone:
                payload["phoneNumber"] = phone
            if address:
                payload["address"] = address
            resp = await client.post("/api/requests", json=payload)
            ids.append(resp.json()["request"]["id"])
        return ids

    async def test_list_empty(self, client):
        resp = await client.get("/api/requests")
        assert resp.status_code == 200
        assert resp.json() == {"requests": []}

    async def test_default_newest_first(self, client):
        ids = await self._seed(client)
        resp = await client.get("/api/requests")
        items = resp.json()["requests"]
        assert len(items) == 4
        stamps = [r["created_at"] for r in items]
        assert stamps == sorted(stamps, reverse=True)
        assert set(r["id"] for r in items) == set(ids)

    async def test_filter_search_sort(self, client):
        await self._seed(client)
        resp = await client.get(
            "/api/requests",
            params={"status": "khẩn cấp", "search": "912", "sortBy": "full_name", "sortDir": "asc"},
        )
        assert resp.status_code == 200
        names = [r["full_name"] for r in resp.json()["requests"]]
        assert names == ["Lê Văn Bình", "Nguyễn Văn An"]

    async def test_status_all(self, client):
        await self._seed(client)
        resp = await client.get("/api/requests", params={"status": "all"})
        assert len(resp.json()["requests"]) == 4

    async def test_invalid_sort_falls_back(self, client):
        await self._seed(client)
        resp = await client.get("/api/requests", params={"sortBy": "notes; drop", "sortDir": "up"})
        assert resp.status_code == 200
        stamps = [r["created_at"] for r in resp.json()["requests"]]
        assert stamps == sorted(stamps, reverse=True)

    async def test_created_record_is_stable(self, client):
        created = (await client.post("/api/requests", json=VALID)).json()["request"]
        for _ in range(2):
            listed = (await client.get("/api/requests")).json()["requests"]
            assert listed == [created]

    async def test_store_failure(self, client):
        broken = BrokenFirestoreClient(ServiceUnavailable("backend offline"))
        with patch(
            "rescue.persistence.repositories.base.get_firestore_client",
            return_value=broken,
        ):
            resp = await client.get("/api/requests")
        assert resp.status_code == 500
        assert "backend offline" in resp.json()["error"]


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.json() == {"status": "ok"}
