"""Location reconciler: one authoritative coordinate from three sources.

Sources compete for the current coordinate:

- a continuous GPS watch (push updates, possibly racing a cancellation),
- a manual tap on the map,
- an accepted address lookup.

The policy lives in :func:`transition`, a pure function over an immutable
:class:`LocatorSnapshot`. :class:`LocationReconciler` feeds it events, owns
the single GPS subscription handle and notifies observers whenever the
accepted coordinate changes.

Manual intent wins: once a map tap or geocode result is accepted, GPS
updates and GPS errors are discarded until :meth:`LocationReconciler.reacquire`
is called.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, Union

from rescue.contracts.common import Coordinate
from rescue.contracts.enums import LocationSource, LocatorPhase
from rescue.contracts.location import GeocodeMatch, LocationReading

logger = logging.getLogger(__name__)

# W3C GeolocationPositionError codes
PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3

CAPABILITY_MISSING_MESSAGE = "Thiết bị không hỗ trợ định vị GPS."


# ------------------------------------------------------------------
# Geolocation provider (device side)
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Position:
    """A raw fix delivered by the device."""

    latitude: float
    longitude: float
    accuracy: float
    timestamp: datetime


@dataclass(frozen=True)
class GeolocationError:
    code: int
    message: str


@dataclass(frozen=True)
class PositionOptions:
    enable_high_accuracy: bool = True
    maximum_age_ms: int = 0
    timeout_ms: int = 20_000


WATCH_OPTIONS = PositionOptions(enable_high_accuracy=True, maximum_age_ms=3_000, timeout_ms=20_000)
ONE_SHOT_OPTIONS = PositionOptions(enable_high_accuracy=True, maximum_age_ms=5_000, timeout_ms=15_000)

FixCallback = Callable[[Position], None]
ErrorCallback = Callable[[GeolocationError], None]


class GeolocationProvider(Protocol):
    """Device geolocation, shaped like the browser's ``navigator.geolocation``."""

    @property
    def available(self) -> bool: ...

    def watch_position(
        self, on_fix: FixCallback, on_error: ErrorCallback, options: PositionOptions
    ) -> Any: ...

    def clear_watch(self, handle: Any) -> None: ...

    def get_current_position(
        self, on_fix: FixCallback, on_error: ErrorCallback, options: PositionOptions
    ) -> None: ...


# ------------------------------------------------------------------
# State and events
# ------------------------------------------------------------------


@dataclass(frozen=True)
class LocatorSnapshot:
    """Immutable reconciler state.

    ``coordinate`` is the last accepted value and survives phase changes;
    it is ``None`` only until the first fix or manual pick.
    """

    phase: LocatorPhase = LocatorPhase.UNLOCATED
    coordinate: Coordinate | None = None
    accuracy_m: float | None = None
    captured_at: datetime | None = None
    source: LocationSource | None = None
    manual_override: bool = False
    watching: bool = False
    locating: bool = False
    error: str | None = None

    @property
    def reading(self) -> LocationReading | None:
        if self.coordinate is None or self.captured_at is None or self.source is None:
            return None
        return LocationReading(
            coordinate=self.coordinate,
            accuracy_m=self.accuracy_m,
            captured_at=self.captured_at,
            source=self.source,
        )

    @property
    def status(self) -> tuple[str, str]:
        """(tone, text) for the location status chip."""
        if self.error:
            return "error", "Không thể truy cập GPS. Kiểm tra quyền vị trí."
        if self.coordinate is not None:
            return "success", "Đã cập nhật vị trí thành công."
        return "warning", "Đang xác định vị trí..."

    def _position_key(self) -> tuple:
        return (self.coordinate, self.accuracy_m, self.captured_at)


@dataclass(frozen=True)
class WatchStarted:
    """A GPS subscription is (still) active; clears any manual override."""


@dataclass(frozen=True)
class WatchStopped:
    """The GPS subscription was released (teardown)."""


@dataclass(frozen=True)
class OneShotRequested:
    """A one-shot position read is in flight."""


@dataclass(frozen=True)
class GpsFix:
    coordinate: Coordinate
    accuracy_m: float | None
    captured_at: datetime


@dataclass(frozen=True)
class GpsFailure:
    code: int
    message: str


@dataclass(frozen=True)
class CapabilityMissing:
    message: str = CAPABILITY_MISSING_MESSAGE


@dataclass(frozen=True)
class ManualPick:
    coordinate: Coordinate
    captured_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True)
class GeocodeAccepted:
    match: GeocodeMatch
    captured_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


LocatorEvent = Union[
    WatchStarted,
    WatchStopped,
    OneShotRequested,
    GpsFix,
    GpsFailure,
    CapabilityMissing,
    ManualPick,
    GeocodeAccepted,
]


def _enter_manual(
    snapshot: LocatorSnapshot,
    coordinate: Coordinate,
    captured_at: datetime,
    source: LocationSource,
) -> LocatorSnapshot:
    # Manual sources carry no accuracy estimate.
    return replace(
        snapshot,
        phase=LocatorPhase.MANUAL_LOCATED,
        coordinate=coordinate,
        accuracy_m=None,
        captured_at=captured_at,
        source=source,
        manual_override=True,
        watching=False,
        locating=False,
    )


def _released_phase(snapshot: LocatorSnapshot) -> LocatorPhase:
    # Located only exists inside a live watch; the last coordinate is kept.
    if snapshot.phase in (LocatorPhase.WATCHING, LocatorPhase.LOCATED):
        return LocatorPhase.UNLOCATED
    return snapshot.phase


def transition(snapshot: LocatorSnapshot, event: LocatorEvent) -> LocatorSnapshot:
    """Apply ``event`` to ``snapshot`` and return the next state."""
    if isinstance(event, WatchStarted):
        phase = snapshot.phase if snapshot.phase == LocatorPhase.LOCATED else LocatorPhase.WATCHING
        return replace(snapshot, phase=phase, manual_override=False, watching=True, error=None)

    if isinstance(event, WatchStopped):
        return replace(snapshot, phase=_released_phase(snapshot), watching=False, locating=False)

    if isinstance(event, OneShotRequested):
        if snapshot.manual_override:
            return snapshot
        return replace(snapshot, locating=True, error=None)

    if isinstance(event, GpsFix):
        if snapshot.manual_override:
            return snapshot
        return replace(
            snapshot,
            phase=LocatorPhase.LOCATED,
            coordinate=event.coordinate,
            accuracy_m=round(event.accuracy_m) if event.accuracy_m is not None else None,
            captured_at=event.captured_at,
            source=LocationSource.GPS,
            locating=False,
            error=None,
        )

    if isinstance(event, GpsFailure):
        if snapshot.manual_override:
            return snapshot
        if event.code == PERMISSION_DENIED:
            return replace(
                snapshot,
                phase=_released_phase(snapshot),
                watching=False,
                locating=False,
                error=event.message,
            )
        # Timeouts and unavailable fixes keep the subscription alive.
        return replace(snapshot, locating=False, error=event.message)

    if isinstance(event, CapabilityMissing):
        return replace(snapshot, locating=False, error=event.message)

    if isinstance(event, ManualPick):
        return _enter_manual(snapshot, event.coordinate, event.captured_at, LocationSource.MANUAL)

    if isinstance(event, GeocodeAccepted):
        return _enter_manual(
            snapshot, event.match.coordinate, event.captured_at, LocationSource.GEOCODE
        )

    raise TypeError(f"Unknown locator event: {event!r}")


# ------------------------------------------------------------------
# Reconciler
# ------------------------------------------------------------------

Listener = Callable[[LocatorSnapshot], None]


class LocationReconciler:
    """Owns the current coordinate and the single GPS subscription.

    Usage::

        with LocationReconciler(provider) as locator:
            locator.subscribe(viewport.on_location)
            ...

    Entering the context starts the watch; leaving it always releases it.
    """

    def __init__(self, provider: GeolocationProvider):
        self._provider = provider
        self._handle: Any = None
        self._snapshot = LocatorSnapshot()
        self._listeners: list[Listener] = []

    @property
    def snapshot(self) -> LocatorSnapshot:
        return self._snapshot

    @property
    def watching(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for coordinate changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # User and lifecycle actions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin the continuous watch. No-op while a watch is active."""
        if not self._provider.available:
            self._apply(CapabilityMissing())
            return
        if self._handle is not None:
            return
        self._apply(WatchStarted())
        handle = self._provider.watch_position(self._on_fix, self._on_error, WATCH_OPTIONS)
        if not self._snapshot.watching:
            # The provider failed synchronously; the watch is already dead.
            self._provider.clear_watch(handle)
            logger.debug("GPS watch cleared on start (handle=%s)", handle)
            return
        self._handle = handle
        logger.debug("GPS watch started (handle=%s)", self._handle)

    def reacquire(self) -> None:
        """Drop any manual override and go back to GPS.

        Restarts the watch if needed and issues a one-shot read so a fresh
        fix arrives without waiting for the next watch sample.
        """
        if not self._provider.available:
            self._apply(CapabilityMissing())
            return
        if self._handle is None:
            self.start()
        else:
            self._apply(WatchStarted())
        self._apply(OneShotRequested())
        self._provider.get_current_position(self._on_fix, self._on_error, ONE_SHOT_OPTIONS)

    def pick_on_map(self, coordinate: Coordinate) -> None:
        self._apply(ManualPick(coordinate))

    def accept_geocode(self, match: GeocodeMatch) -> None:
        self._apply(GeocodeAccepted(match))

    def close(self) -> None:
        """Release the watch. Safe to call more than once."""
        self._release()
        if self._snapshot.watching:
            self._apply(WatchStopped())
        self._listeners.clear()

    def __enter__(self) -> "LocationReconciler":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Provider callbacks
    # ------------------------------------------------------------------

    def _on_fix(self, position: Position) -> None:
        self._apply(
            GpsFix(
                coordinate=Coordinate(lat=position.latitude, lng=position.longitude),
                accuracy_m=position.accuracy,
                captured_at=position.timestamp,
            )
        )

    def _on_error(self, error: GeolocationError) -> None:
        logger.warning("Geolocation error %s: %s", error.code, error.message)
        self._apply(GpsFailure(code=error.code, message=error.message))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(self, event: LocatorEvent) -> None:
        previous = self._snapshot
        self._snapshot = transition(previous, event)

        # The snapshot decides whether a subscription may exist.
        if not self._snapshot.watching:
            self._release()

        if self._snapshot._position_key() != previous._position_key():
            for listener in list(self._listeners):
                listener(self._snapshot)

    def _release(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self._provider.clear_watch(handle)
        logger.debug("GPS watch cleared (handle=%s)", handle)
