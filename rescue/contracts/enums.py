"""Enumerations shared across all rescue contracts."""

from enum import Enum

# Filter pseudo-value meaning "no status restriction".
ALL_STATUSES = "all"


class RequestStatus(str, Enum):
    """Triage classification chosen by the person asking for help.

    Values are the localized strings stored in the database.
    """
    EMERGENCY = "khẩn cấp"
    NEEDS_HELP_SOON = "cần hỗ trợ sớm"
    TEMPORARILY_SAFE = "an toàn tạm thời"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    RequestStatus.EMERGENCY: "Khẩn cấp",
    RequestStatus.NEEDS_HELP_SOON: "Cần hỗ trợ sớm",
    RequestStatus.TEMPORARILY_SAFE: "An toàn tạm thời",
}


class LocationSource(str, Enum):
    """Where a coordinate came from."""
    GPS = "gps"
    MANUAL = "manual"
    GEOCODE = "geocode"


class SortField(str, Enum):
    CREATED_AT = "created_at"
    STATUS = "status"
    FULL_NAME = "full_name"
    PHONE_NUMBER = "phone_number"
    ADDRESS = "address"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class LocatorPhase(str, Enum):
    """Lifecycle of the client-side location reconciler."""
    UNLOCATED = "unlocated"
    WATCHING = "watching"
    LOCATED = "located"
    MANUAL_LOCATED = "manual_located"
