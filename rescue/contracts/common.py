"""Base classes and shared types for rescue contracts.

Conventions (all contracts and API responses):
- **Coordinates**: WGS84 decimal degrees
- **Accuracy**: meters, suffix ``_m`` internally, ``accuracy`` on the wire
- **Datetimes**: always UTC, ISO 8601 in serialized form
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FirestoreModel(BaseModel):
    """Base model with Firestore-friendly serialization.

    - Enums serialize as string values (Firestore stores strings).
    - ``to_firestore()`` produces a JSON-safe dict (datetimes as ISO 8601).
    - ``from_firestore()`` hydrates from a Firestore document dict.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_firestore(self) -> dict[str, Any]:
        """Dump to Firestore-compatible dict."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_firestore(cls, data: dict[str, Any]) -> "FirestoreModel":
        """Create model instance from Firestore document dict."""
        return cls.model_validate(data)


class Coordinate(BaseModel):
    """WGS84 geographic coordinate."""

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)

    model_config = ConfigDict(frozen=True)
