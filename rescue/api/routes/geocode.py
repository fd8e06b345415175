"""Address lookup proxy."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from rescue.api.deps import get_geocoder
from rescue.services.geocoding import (
    EmptyQueryError,
    NoMatchError,
    NominatimGeocoder,
    UpstreamUnavailableError,
)

router = APIRouter(prefix="/geocode", tags=["geocode"])


class GeocodeRequest(BaseModel):
    query: str | None = None


@router.post("")
async def geocode(
    body: GeocodeRequest,
    geocoder: NominatimGeocoder = Depends(get_geocoder),
) -> dict:
    """Resolve an address to ``{lat, lng, displayName}`` via Nominatim."""
    try:
        match = await geocoder.geocode(body.query or "")
    except EmptyQueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NoMatchError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UpstreamUnavailableError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return match.to_response()
