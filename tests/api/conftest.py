"""Shared fixtures for API tests."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from rescue.api.app import app
from rescue.api.deps import get_geocoder
from rescue.services.geocoding import NominatimGeocoder
from tests.persistence.fake_firestore import FakeFirestoreClient


@pytest.fixture
def fake_client():
    """In-memory Firestore fake, shared across all repos in a single test."""
    return FakeFirestoreClient()


@pytest.fixture
def nominatim():
    """Mutable upstream answer: set ``status`` / ``json`` per test."""
    state = {"status": 200, "json": [], "calls": 0}

    def handler(req: httpx.Request) -> httpx.Response:
        state["calls"] += 1
        return httpx.Response(state["status"], json=state["json"])

    state["transport"] = httpx.MockTransport(handler)
    return state


@pytest.fixture
async def test_app(fake_client, nominatim):
    """FastAPI app with Firestore and Nominatim replaced by fakes."""
    upstream = httpx.AsyncClient(transport=nominatim["transport"])
    app.dependency_overrides[get_geocoder] = lambda: NominatimGeocoder(http_client=upstream)

    with patch(
        "rescue.persistence.repositories.base.get_firestore_client",
        return_value=fake_client,
    ):
        yield app

    app.dependency_overrides.clear()
    await upstream.aclose()


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
