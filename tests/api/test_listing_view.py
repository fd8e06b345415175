"""ListingView and RescueApiClient exercised against the real app."""

from __future__ import annotations

from unittest.mock import patch

from google.api_core.exceptions import ServiceUnavailable

from rescue.services.api_client import RescueApiClient
from rescue.services.listing import FetchState, ListingView, format_row
from rescue.contracts.rescue_request import RescueRequest, RescueRequestPayload
from tests.persistence.fake_firestore import BrokenFirestoreClient


async def _seed(api: RescueApiClient) -> None:
    await api.create_request(RescueRequestPayload(
        full_name="Nguyễn Văn An", phone_number="0912345678", status="khẩn cấp",
        coords={"lat": 16.46371, "lng": 107.59091}, accuracy=12,
    ))
    await api.create_request(RescueRequestPayload(
        full_name="Trần Thị Dung", status="cần hỗ trợ sớm", notes="Có người già",
    ))
    await api.create_request(RescueRequestPayload(
        full_name="Lê Văn Bình", status="khẩn cấp", address="Số 912 Lê Lợi",
    ))


class TestListingView:
    async def test_refresh_default(self, client):
        api = RescueApiClient(http_client=client)
        await _seed(api)
        view = ListingView(api)

        requests = await view.refresh()
        assert view.state == FetchState.IDLE
        assert [r.full_name for r in requests] == ["Lê Văn Bình", "Trần Thị Dung", "Nguyễn Văn An"]
        assert view.placeholder is None

    async def test_filters(self, client):
        api = RescueApiClient(http_client=client)
        await _seed(api)
        view = ListingView(api)
        view.status = "khẩn cấp"
        view.search = "912"
        view.select_sort("full_name:asc")

        requests = await view.refresh()
        assert [r.full_name for r in requests] == ["Lê Văn Bình", "Nguyễn Văn An"]

    async def test_empty(self, client):
        view = ListingView(RescueApiClient(http_client=client))
        await view.refresh()
        assert view.placeholder == "Chưa có tín hiệu nào phù hợp."

    async def test_error_kept_on_view(self, client):
        view = ListingView(RescueApiClient(http_client=client))
        broken = BrokenFirestoreClient(ServiceUnavailable("backend offline"))
        with patch(
            "rescue.persistence.repositories.base.get_firestore_client",
            return_value=broken,
        ):
            await view.refresh()
        assert view.state == FetchState.ERROR
        assert "backend offline" in view.placeholder

    async def test_notes_preview(self, client):
        api = RescueApiClient(http_client=client)
        await _seed(api)
        view = ListingView(api)
        await view.refresh()

        with_notes = next(r for r in view.requests if r.notes)
        preview = view.open_notes(with_notes)
        assert preview is not None
        assert preview.name == "Trần Thị Dung"
        assert preview.content == "Có người già"
        view.close_notes()
        assert view.preview is None

        without = next(r for r in view.requests if not r.notes)
        assert view.open_notes(without) is None


class TestFormatRow:
    def test_located_row(self):
        row = format_row(RescueRequest(
            id="x1",
            created_at="2025-11-18T06:30:00Z",
            full_name="Nguyễn Văn An",
            phone_number=None,
            status="khẩn cấp",
            latitude=16.46371,
            longitude=107.59091,
            accuracy=12,
            manual_override=True,
        ))
        assert row.created_at == "13:30:00 18/11/2025"
        assert row.phone_number == "Không có SĐT"
        assert row.address == "—"
        assert row.coordinates == "16.4637, 107.5909"
        assert row.map_url == "https://www.google.com/maps?q=16.46371,107.59091"
        assert row.accuracy == "±12m"
        assert row.manual_override is True
        assert row.has_notes is False

    def test_large_accuracy_is_plain_metres(self):
        row = format_row(RescueRequest(
            full_name="A", status="khẩn cấp", latitude=16.0, longitude=108.0, accuracy=1234567,
        ))
        assert row.accuracy == "±1234567m"

    def test_unlocated_row(self):
        row = format_row(RescueRequest(full_name="A", status="khẩn cấp"))
        assert row.coordinates == "—"
        assert row.map_url is None
        assert row.accuracy is None
        assert row.created_at == "—"
