"""Rescue request endpoints: create and filtered list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from rescue.api.deps import get_require_phone, get_rescue_request_repo
from rescue.contracts.rescue_request import RequestQuery, RescueRequestPayload
from rescue.persistence.errors import PersistenceError
from rescue.persistence.repositories.rescue_request_repo import RescueRequestRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("")
async def list_requests(
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_dir: str | None = Query(default=None, alias="sortDir"),
    repo: RescueRequestRepository = Depends(get_rescue_request_repo),
) -> dict:
    query = RequestQuery.from_params(status, search, sort_by, sort_dir)
    try:
        requests = await repo.query(query)
    except PersistenceError as exc:
        logger.warning("Listing rescue requests failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"requests": [r.to_response() for r in requests]}


@router.post("", status_code=201)
async def create_request(
    payload: RescueRequestPayload,
    repo: RescueRequestRepository = Depends(get_rescue_request_repo),
    require_phone: bool = Depends(get_require_phone),
) -> dict:
    if payload.missing_fields(require_phone):
        detail = (
            "Thiếu họ tên, số điện thoại hoặc tình trạng."
            if require_phone
            else "Thiếu họ tên hoặc tình trạng."
        )
        raise HTTPException(status_code=400, detail=detail)

    try:
        record = await repo.create(payload.to_record())
    except PersistenceError as exc:
        logger.exception("Storing rescue request failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"request": record.to_response()}
