"""Rescue data contracts: Pydantic v2 models for flood rescue requests.

Data authority
--------------

**Firestore** (source of truth):
- ``RescueRequest``: ``/rescue_requests/{id}``, immutable once written

Calculated (never persisted)
----------------------------
- ``LocationReading``: client-side GPS, map tap or geocode observation
- ``GeocodeMatch``: first hit of an address lookup
- ``RequestQuery``: normalized list filter and ordering
"""

from rescue.contracts.enums import (
    ALL_STATUSES,
    LocationSource,
    LocatorPhase,
    RequestStatus,
    SortDirection,
    SortField,
)
from rescue.contracts.common import Coordinate, FirestoreModel
from rescue.contracts.location import GeocodeMatch, LocationReading
from rescue.contracts.rescue_request import (
    WEBAPP_SOURCE,
    RequestQuery,
    RescueRequest,
    RescueRequestPayload,
)

__all__ = [
    "ALL_STATUSES",
    "Coordinate",
    "FirestoreModel",
    "GeocodeMatch",
    "LocationReading",
    "LocationSource",
    "LocatorPhase",
    "RequestQuery",
    "RequestStatus",
    "RescueRequest",
    "RescueRequestPayload",
    "SortDirection",
    "SortField",
    "WEBAPP_SOURCE",
]
