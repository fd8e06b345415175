"""RescueRequest: a single call for help submitted from the public form.

Stored at: ``/rescue_requests/{request_id}``

Records are written once and never updated or deleted.
"""

import os
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rescue.contracts.common import Coordinate, FirestoreModel
from rescue.contracts.enums import ALL_STATUSES, RequestStatus, SortDirection, SortField

# Literal stamped on every record created through the web form.
WEBAPP_SOURCE = "webapp"

# Set RESCUE_REQUIRE_PHONE=1 to make the phone number mandatory.
REQUIRE_PHONE = os.getenv("RESCUE_REQUIRE_PHONE", "0") == "1"


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class RescueRequest(FirestoreModel):
    """A persisted rescue request.

    ``id`` and ``created_at`` are assigned by the store; they are ``None``
    only on a record that has not been saved yet.
    """

    id: str | None = None
    created_at: datetime | None = None
    full_name: str = Field(..., min_length=1)
    phone_number: str | None = None
    status: RequestStatus
    notes: str | None = None
    address: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    accuracy: float | None = Field(default=None, ge=0)
    manual_override: bool = False
    source: str = WEBAPP_SOURCE

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def coordinates_paired(self) -> "RescueRequest":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be set together")
        return self

    @property
    def coordinate(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(lat=self.latitude, lng=self.longitude)

    def to_response(self) -> dict:
        """API shape: every column present, nulls included."""
        return self.model_dump(mode="json")


class RescueRequestPayload(BaseModel):
    """Body of ``POST /api/requests``.

    Optional fields are omitted by the client rather than sent as null.
    Required fields are checked with :meth:`missing_fields` so the API can
    answer with its own message instead of a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    status: RequestStatus | None = None
    notes: str | None = None
    address: str | None = None
    coords: Coordinate | None = None
    accuracy: float | None = Field(default=None, ge=0)
    manual_override: bool = Field(default=False, alias="manualOverride")

    def missing_fields(self, require_phone: bool = False) -> list[str]:
        missing = []
        if not _blank_to_none(self.full_name):
            missing.append("fullName")
        if require_phone and not _blank_to_none(self.phone_number):
            missing.append("phoneNumber")
        if self.status is None:
            missing.append("status")
        return missing

    def to_record(self) -> RescueRequest:
        """Build the unsaved record; blank strings are stored as null."""
        coords = self.coords
        return RescueRequest(
            full_name=self.full_name or "",
            phone_number=_blank_to_none(self.phone_number),
            status=self.status,
            notes=_blank_to_none(self.notes),
            address=_blank_to_none(self.address),
            latitude=coords.lat if coords else None,
            longitude=coords.lng if coords else None,
            accuracy=self.accuracy if coords else None,
            manual_override=self.manual_override,
            source=WEBAPP_SOURCE,
        )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class RequestQuery:
    """Filter and ordering for the rescue request list.

    ``status`` is ``None`` for no restriction. Unknown status strings are
    kept as-is and simply match nothing.
    """

    status: str | None = None
    search: str | None = None
    sort_by: SortField = SortField.CREATED_AT
    sort_dir: SortDirection = SortDirection.DESC

    @classmethod
    def from_params(
        cls,
        status: str | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        sort_dir: str | None = None,
    ) -> "RequestQuery":
        """Normalize raw query-string values.

        Unknown ``sort_by`` falls back to ``created_at``; anything other than
        ``asc`` sorts descending.
        """
        try:
            field = SortField(sort_by) if sort_by else SortField.CREATED_AT
        except ValueError:
            field = SortField.CREATED_AT
        direction = SortDirection.ASC if sort_dir == "asc" else SortDirection.DESC
        if not status or status == ALL_STATUSES:
            status = None
        return cls(
            status=status,
            search=_blank_to_none(search),
            sort_by=field,
            sort_dir=direction,
        )

    def to_params(self) -> dict[str, str]:
        params = {
            "status": self.status or ALL_STATUSES,
            "sortBy": self.sort_by.value,
            "sortDir": self.sort_dir.value,
        }
        if self.search:
            params["search"] = self.search
        return params
