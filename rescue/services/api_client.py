"""HTTP client for the rescue service's own JSON API."""

from __future__ import annotations

import logging

import httpx

from rescue.contracts.common import Coordinate
from rescue.contracts.location import GeocodeMatch
from rescue.contracts.rescue_request import RequestQuery, RescueRequest, RescueRequestPayload

logger = logging.getLogger(__name__)


class RescueApiError(Exception):
    """A call to the rescue API failed.

    ``str(exc)`` is the server's ``error`` message when one was returned.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RescueApiClient:
    """Async client for ``/api/requests`` and ``/api/geocode``."""

    def __init__(self, base_url: str = "", http_client: httpx.AsyncClient | None = None):
        self._client = http_client or httpx.AsyncClient(base_url=base_url, timeout=15.0)

    async def create_request(self, payload: RescueRequestPayload) -> RescueRequest:
        body = await self._send(
            "POST", "/api/requests", "Không thể lưu yêu cầu.", json=payload.to_wire()
        )
        if "request" not in body:
            raise RescueApiError("Không thể lưu yêu cầu.")
        return RescueRequest.model_validate(body["request"])

    async def list_requests(self, query: RequestQuery) -> list[RescueRequest]:
        body = await self._send(
            "GET", "/api/requests", "Không thể tải danh sách.", params=query.to_params()
        )
        return [RescueRequest.model_validate(r) for r in body.get("requests", [])]

    async def geocode(self, query: str) -> GeocodeMatch:
        body = await self._send(
            "POST", "/api/geocode", "Không tìm thấy địa điểm phù hợp.", json={"query": query}
        )
        if body.get("lat") is None or body.get("lng") is None:
            raise RescueApiError("Không tìm thấy địa điểm phù hợp.")
        return GeocodeMatch(
            coordinate=Coordinate(lat=body["lat"], lng=body["lng"]),
            display_name=body.get("displayName") or query,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, url: str, fallback: str, **kwargs) -> dict:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RescueApiError(fallback) from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.is_error:
            raise RescueApiError(body.get("error") or fallback, resp.status_code)
        return body
