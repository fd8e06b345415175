"""Repository for rescue requests (the request store)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from rescue.contracts.enums import SortDirection
from rescue.contracts.rescue_request import RequestQuery, RescueRequest
from rescue.persistence.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

COLLECTION = "rescue_requests"

# Fields matched by the free-text search.
_SEARCH_FIELDS = ("full_name", "phone_number", "address")


class RescueRequestRepository(BaseRepository[RescueRequest]):
    def __init__(self):
        super().__init__(RescueRequest, COLLECTION)

    async def create(self, entity: RescueRequest) -> RescueRequest:  # type: ignore[override]
        """Store a new request and return it with ``id`` and ``created_at``."""
        record = entity.model_copy(
            update={"id": None, "created_at": datetime.now(timezone.utc)}
        )
        doc_id = await super().create(record)
        logger.info("Stored rescue request %s (status=%s)", doc_id, record.status)
        return record.model_copy(update={"id": doc_id})

    async def query(self, query: RequestQuery) -> list[RescueRequest]:
        """Return requests matching ``query`` in the requested order.

        The status restriction runs in Firestore; text search and ordering
        run here since Firestore has no substring match.
        """
        ref = self._collection_ref()
        if query.status:
            ref = ref.where("status", "==", query.status)
        requests = await self._stream(ref)

        if query.search:
            needle = query.search.casefold()
            requests = [r for r in requests if _matches(r, needle)]

        return sort_requests(requests, query.sort_by.value, query.sort_dir)


def _matches(request: RescueRequest, needle: str) -> bool:
    for field in _SEARCH_FIELDS:
        value = getattr(request, field)
        if value and needle in value.casefold():
            return True
    return False


def sort_requests(
    requests: list[RescueRequest], field: str, direction: SortDirection
) -> list[RescueRequest]:
    """Order requests by ``field``.

    Nulls go last ascending and first descending, the same as PostgreSQL's
    default. Strings compare case-insensitively.
    """
    present = [r for r in requests if getattr(r, field) is not None]
    missing = [r for r in requests if getattr(r, field) is None]

    def key(r: RescueRequest):
        value = getattr(r, field)
        return value.casefold() if isinstance(value, str) else value

    descending = direction == SortDirection.DESC
    present.sort(key=key, reverse=descending)
    return missing + present if descending else present + missing
