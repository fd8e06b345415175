"""Nominatim (OpenStreetMap) geocoding client.

Resolves a free-text address to the first matching coordinate. Exactly one
upstream request is issued per lookup and nothing is retried.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from rescue.contracts.common import Coordinate
from rescue.contracts.location import GeocodeMatch

logger = logging.getLogger(__name__)

NOMINATIM_ENDPOINT = os.getenv(
    "GEOCODER_ENDPOINT", "https://nominatim.openstreetmap.org/search"
)
DEFAULT_USER_AGENT = os.getenv(
    "GEOCODER_USER_AGENT", "FloodRescueApp/1.0 (contact: example@example.com)"
)


class GeocodingError(Exception):
    """Base exception for address lookups."""

    message = "Geocoding failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class EmptyQueryError(GeocodingError):
    """The query was empty after trimming; no request was sent."""

    message = "Thiếu địa chỉ để tìm kiếm."


class NoMatchError(GeocodingError):
    """The upstream service returned zero results."""

    message = "Không tìm thấy địa điểm phù hợp."


class UpstreamUnavailableError(GeocodingError):
    """The upstream request failed or answered with a non-success status."""

    message = "Không thể kết nối dịch vụ bản đồ."


class NominatimGeocoder:
    """Async HTTP client for the Nominatim search endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        endpoint: str = NOMINATIM_ENDPOINT,
    ):
        self._client = http_client or httpx.AsyncClient(timeout=15.0)
        self._user_agent = user_agent
        self._endpoint = endpoint

    async def geocode(self, query: str) -> GeocodeMatch:
        """Look up ``query`` and return the first match.

        Raises
        ------
        EmptyQueryError
            ``query`` is blank.
        NoMatchError
            Nominatim found nothing.
        UpstreamUnavailableError
            Transport error, non-2xx status or an unreadable body.
        """
        query = (query or "").strip()
        if not query:
            raise EmptyQueryError()

        try:
            resp = await self._client.get(
                self._endpoint,
                params={
                    "format": "json",
                    "limit": 1,
                    "addressdetails": 0,
                    "q": query,
                },
                headers={"User-Agent": self._user_agent},
            )
            resp.raise_for_status()
            results = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Nominatim lookup failed for %r: %s", query, exc)
            raise UpstreamUnavailableError() from exc

        if not isinstance(results, list):
            logger.warning("Nominatim returned a non-list body for %r: %r", query, results)
            raise UpstreamUnavailableError()
        if not results:
            raise NoMatchError()
        return _parse_match(results[0])

    async def aclose(self) -> None:
        await self._client.aclose()


def _parse_match(raw: Any) -> GeocodeMatch:
    """Convert a Nominatim result (string lat/lon) into a GeocodeMatch."""
    if not isinstance(raw, dict):
        raise UpstreamUnavailableError()
    try:
        coordinate = Coordinate(lat=float(raw["lat"]), lng=float(raw["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamUnavailableError() from exc
    return GeocodeMatch(coordinate=coordinate, display_name=raw.get("display_name") or "")
