"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import Request

from rescue.contracts.rescue_request import REQUIRE_PHONE
from rescue.persistence.repositories.rescue_request_repo import RescueRequestRepository
from rescue.services.geocoding import NominatimGeocoder

# ------------------------------------------------------------------
# Repositories (stateless, one instance per request)
# ------------------------------------------------------------------


def get_rescue_request_repo() -> RescueRequestRepository:
    return RescueRequestRepository()


# ------------------------------------------------------------------
# Upstream services (singleton from app.state)
# ------------------------------------------------------------------


def get_geocoder(request: Request) -> NominatimGeocoder:
    return request.app.state.geocoder


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------


def get_require_phone() -> bool:
    return REQUIRE_PHONE
