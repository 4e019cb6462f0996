from typing import Literal

from pydantic import Field

from .base import RecordModel, utc_now_iso

VisitStatus = Literal["pending", "approved", "rejected", "completed", "cancelled"]


class VisitRequest(RecordModel):
    """A user's request to visit a property."""

    user: dict | str | None = None
    property: dict | str | None = None
    status: VisitStatus = "pending"
    notes: str = ""
    requested_at: str = Field(default_factory=utc_now_iso)
    scheduled_date: str | None = None
