from pydantic import Field

from .base import RecordModel


class Review(RecordModel):
    rating: int = Field(default=5, ge=1, le=5)
    comment: str = ""
    review_type: str = "general"
    is_approved: bool = False
    is_verified: bool = False
    user: dict | None = None
    property: dict | str | None = None
