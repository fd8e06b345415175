"""Map viewport state driven by the location reconciler."""

from __future__ import annotations

from rescue.contracts.common import Coordinate
from rescue.services.locator import LocatorSnapshot

# Da Nang, shown until the first coordinate is known.
FALLBACK_CENTER = Coordinate(lat=16.047079, lng=108.20623)
DEFAULT_ZOOM = 15
MIN_ACCURACY_RADIUS_M = 15

TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a>'
)


class MapViewport:
    """Centre, marker and accuracy circle of the reporting map.

    Register :meth:`on_location` with the reconciler; every accepted
    coordinate recentres the view.
    """

    def __init__(self, fallback: Coordinate = FALLBACK_CENTER, zoom: int = DEFAULT_ZOOM):
        self._fallback = fallback
        self.zoom = zoom
        self.coordinate: Coordinate | None = None
        self.accuracy_m: float | None = None
        self.recenter_count = 0

    def on_location(self, snapshot: LocatorSnapshot) -> None:
        self.coordinate = snapshot.coordinate
        self.accuracy_m = snapshot.accuracy_m
        if snapshot.coordinate is not None:
            self.recenter_count += 1

    @property
    def center(self) -> Coordinate:
        return self.coordinate or self._fallback

    @property
    def popup_text(self) -> str:
        if self.coordinate is None:
            return "Đang lấy vị trí..."
        return f"Bạn đang ở: {self.coordinate.lat:.5f}, {self.coordinate.lng:.5f}"

    @property
    def accuracy_radius_m(self) -> float | None:
        """Radius of the accuracy circle, or None when nothing should be drawn."""
        if self.coordinate is None or not self.accuracy_m:
            return None
        return max(self.accuracy_m, MIN_ACCURACY_RADIUS_M)
