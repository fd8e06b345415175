"""Location readings produced by GPS, map taps and address lookups."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from rescue.contracts.common import Coordinate
from rescue.contracts.enums import LocationSource


class LocationReading(BaseModel):
    """A single coordinate observation and where it came from.

    Manual and geocoded readings never carry an accuracy estimate.
    """

    coordinate: Coordinate
    accuracy_m: float | None = Field(default=None, ge=0)
    captured_at: datetime
    source: LocationSource

    model_config = ConfigDict(frozen=True)


class GeocodeMatch(BaseModel):
    """First match returned by the address lookup."""

    coordinate: Coordinate
    display_name: str

    model_config = ConfigDict(frozen=True)

    def to_response(self) -> dict:
        return {
            "lat": self.coordinate.lat,
            "lng": self.coordinate.lng,
            "displayName": self.display_name,
        }
