"""Coordinator-facing list of rescue requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from rescue.contracts.enums import ALL_STATUSES, RequestStatus, SortDirection, SortField
from rescue.contracts.rescue_request import RequestQuery, RescueRequest
from rescue.services.api_client import RescueApiClient, RescueApiError

logger = logging.getLogger(__name__)

# Vietnam has no DST.
LOCAL_TZ = timezone(timedelta(hours=7))


@dataclass(frozen=True)
class SortOption:
    label: str
    field: SortField
    direction: SortDirection

    @property
    def value(self) -> str:
        return f"{self.field.value}:{self.direction.value}"


SORT_OPTIONS = [
    SortOption("Mới nhất", SortField.CREATED_AT, SortDirection.DESC),
    SortOption("Tên (A-Z)", SortField.FULL_NAME, SortDirection.ASC),
    SortOption("Tình trạng", SortField.STATUS, SortDirection.ASC),
]

STATUS_FILTERS = [("Tất cả", ALL_STATUSES)] + [(s.label, s.value) for s in RequestStatus]


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


@dataclass(frozen=True)
class RequestRow:
    """One table row, already formatted for display."""

    id: str | None
    created_at: str
    full_name: str
    manual_override: bool
    phone_number: str
    address: str
    status: str
    coordinates: str
    map_url: str | None
    accuracy: str | None
    has_notes: bool


@dataclass(frozen=True)
class NotePreview:
    name: str
    content: str
    created_at: str


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "—"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(LOCAL_TZ).strftime("%H:%M:%S %d/%m/%Y")


def _format_metres(value: float) -> str:
    # Plain decimal, never exponent notation.
    return f"{value:.0f}" if value.is_integer() else str(value)


def format_row(request: RescueRequest) -> RequestRow:
    coordinate = request.coordinate
    if coordinate is not None:
        coordinates = f"{coordinate.lat:.4f}, {coordinate.lng:.4f}"
        map_url = f"https://www.google.com/maps?q={coordinate.lat},{coordinate.lng}"
    else:
        coordinates, map_url = "—", None
    return RequestRow(
        id=request.id,
        created_at=format_timestamp(request.created_at),
        full_name=request.full_name,
        manual_override=request.manual_override,
        phone_number=request.phone_number or "Không có SĐT",
        address=request.address or "—",
        status=request.status,
        coordinates=coordinates,
        map_url=map_url,
        accuracy=f"±{_format_metres(request.accuracy)}m" if request.accuracy else None,
        has_notes=bool(request.notes),
    )


class ListingView:
    """Filter state plus the last fetched page of requests."""

    def __init__(self, client: RescueApiClient):
        self._client = client
        self.status = ALL_STATUSES
        self.search = ""
        self.sort = SORT_OPTIONS[0]
        self.requests: list[RescueRequest] = []
        self.state = FetchState.IDLE
        self.error: str | None = None
        self.preview: NotePreview | None = None

    def query(self) -> RequestQuery:
        return RequestQuery.from_params(
            status=self.status,
            search=self.search,
            sort_by=self.sort.field.value,
            sort_dir=self.sort.direction.value,
        )

    def select_sort(self, value: str) -> None:
        """Pick a sort preset by its ``field:direction`` value."""
        for option in SORT_OPTIONS:
            if option.value == value:
                self.sort = option
                return
        raise ValueError(f"Unknown sort option: {value}")

    async def refresh(self) -> list[RescueRequest]:
        """Reload the list. Errors are kept on the view, never raised."""
        self.state = FetchState.LOADING
        self.error = None
        try:
            self.requests = await self._client.list_requests(self.query())
        except RescueApiError as exc:
            logger.warning("Could not load rescue requests: %s", exc)
            self.error = str(exc)
            self.state = FetchState.ERROR
            return self.requests
        self.state = FetchState.IDLE
        return self.requests

    def rows(self) -> list[RequestRow]:
        return [format_row(r) for r in self.requests]

    @property
    def placeholder(self) -> str | None:
        """Text shown instead of the table, if any."""
        if self.state == FetchState.LOADING:
            return "Đang tải danh sách cầu cứu..."
        if self.state == FetchState.ERROR:
            return self.error or "Có lỗi xảy ra."
        if not self.requests:
            return "Chưa có tín hiệu nào phù hợp."
        return None

    def open_notes(self, request: RescueRequest) -> NotePreview | None:
        if not request.notes:
            return None
        self.preview = NotePreview(
            name=request.full_name,
            content=request.notes,
            created_at=format_timestamp(request.created_at),
        )
        return self.preview

    def close_notes(self) -> None:
        self.preview = None
