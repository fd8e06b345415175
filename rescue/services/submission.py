"""Submission flow: form fields plus the reconciled location into one create call."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from rescue.contracts.location import GeocodeMatch
from rescue.contracts.rescue_request import REQUIRE_PHONE, RescueRequest, RescueRequestPayload
from rescue.services.api_client import RescueApiClient
from rescue.services.geocoding import EmptyQueryError
from rescue.services.locator import LocationReconciler
from rescue.services.share import SHARE_TITLE, RequestForm, compose_message

logger = logging.getLogger(__name__)

ShareCallback = Callable[[str, str], Awaitable[None]]


class SubmissionValidationError(ValueError):
    """Required form fields are missing; nothing was sent."""


class SubmissionInProgressError(RuntimeError):
    """A submit is already running for this form."""


class SubmissionFlow:
    """Validates the form and stores it through the API.

    One user action produces at most one create call; failures are not
    retried and the server's message is raised unchanged.
    """

    def __init__(
        self,
        client: RescueApiClient,
        locator: LocationReconciler,
        require_phone: bool = REQUIRE_PHONE,
    ):
        self._client = client
        self._locator = locator
        self._require_phone = require_phone
        self.submitting = False
        self.geocoding = False

    def build_payload(self, form: RequestForm) -> RescueRequestPayload:
        """Validate ``form`` and attach the current location."""
        if not form.full_name.strip() or form.status_enum is None:
            raise SubmissionValidationError("Vui lòng điền họ tên và tình trạng.")
        if self._require_phone and not form.phone_number.strip():
            raise SubmissionValidationError("Vui lòng điền số điện thoại.")

        snapshot = self._locator.snapshot
        return RescueRequestPayload(
            full_name=form.full_name,
            phone_number=form.phone_number.strip() or None,
            status=form.status_enum,
            notes=form.notes or None,
            address=form.address or None,
            coords=snapshot.coordinate,
            accuracy=snapshot.accuracy_m if snapshot.coordinate else None,
            manual_override=snapshot.manual_override,
        )

    async def submit(self, form: RequestForm) -> RescueRequest:
        payload = self.build_payload(form)
        if self.submitting:
            raise SubmissionInProgressError("Đang lưu yêu cầu.")

        self.submitting = True
        try:
            record = await self._client.create_request(payload)
        finally:
            self.submitting = False
        logger.info("Rescue request %s submitted", record.id)
        return record

    async def submit_and_share(self, form: RequestForm, share: ShareCallback) -> RescueRequest:
        """Store the request, then hand the share text to ``share``.

        ``share`` is only awaited after the create call succeeded.
        """
        record = await self.submit(form)
        await share(SHARE_TITLE, compose_message(form, self._locator.snapshot))
        return record

    async def locate_address(self, form: RequestForm) -> GeocodeMatch:
        """Geocode the typed address and pin the reconciler to the result."""
        query = form.address.strip()
        if not query:
            raise EmptyQueryError("Nhập địa chỉ cụ thể để định vị.")

        self.geocoding = True
        try:
            match = await self._client.geocode(query)
        finally:
            self.geocoding = False
        self._locator.accept_geocode(match)
        return match
