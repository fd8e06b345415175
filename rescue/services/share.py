"""Plain-text distress message shared through chat apps and SMS."""

from __future__ import annotations

from dataclasses import dataclass

from rescue.contracts.enums import RequestStatus
from rescue.services.locator import LocatorSnapshot

SHARE_TITLE = "Cầu cứu khẩn cấp"
EMPTY_PROMPT = "Điền họ tên và số điện thoại để tạo nội dung cầu cứu."


@dataclass
class RequestForm:
    """Fields typed into the public form, as raw strings."""

    full_name: str = ""
    phone_number: str = ""
    status: str = ""
    notes: str = ""
    address: str = ""

    def set_phone_number(self, value: str) -> None:
        """Keep digits only, at most 11 of them."""
        self.phone_number = "".join(ch for ch in value if ch.isdigit())[:11]

    @property
    def status_enum(self) -> RequestStatus | None:
        try:
            return RequestStatus(self.status)
        except ValueError:
            return None


class NoCoordinateError(Exception):
    """Raised when coordinates are requested before any are known."""


class ShareMessageComposer:
    """Keeps the share text in sync with the form and the current location.

    Register :meth:`on_location` with the reconciler.
    """

    def __init__(self, form: RequestForm):
        self.form = form
        self._snapshot = LocatorSnapshot()
        self.message = compose_message(form, self._snapshot)

    def on_location(self, snapshot: LocatorSnapshot) -> None:
        self._snapshot = snapshot
        self.refresh()

    def refresh(self) -> str:
        """Re-format after a form edit."""
        self.message = compose_message(self.form, self._snapshot)
        return self.message

    def coordinates_text(self) -> str:
        coordinate = self._snapshot.coordinate
        if coordinate is None:
            raise NoCoordinateError("Chưa có toạ độ để sao chép.")
        return f"{coordinate.lat:.6f}, {coordinate.lng:.6f}"


def compose_message(form: RequestForm, snapshot: LocatorSnapshot) -> str:
    if not form.full_name and not form.phone_number:
        return EMPTY_PROMPT

    phone_line = f"SĐT: {form.phone_number}." if form.phone_number else "Chưa cung cấp SĐT."
    status_line = f"Tình trạng: {form.status}." if form.status else "Tình trạng: chưa chọn."
    address_line = f"Địa chỉ báo về: {form.address}." if form.address else ""
    coordinate = snapshot.coordinate
    if coordinate is not None:
        accuracy = f"{snapshot.accuracy_m:.0f}" if snapshot.accuracy_m is not None else "?"
        location_line = f"Toạ độ: {coordinate.lat:.5f}, {coordinate.lng:.5f} (±{accuracy}m)."
    else:
        location_line = "Toạ độ: chưa xác định."
    notes_line = f"Chi tiết: {form.notes}." if form.notes else "Chưa có mô tả thêm."

    return (
        f"Tôi là {form.full_name}. {phone_line} {status_line} "
        f"{address_line} {location_line} {notes_line}"
    )
