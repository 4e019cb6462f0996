"""Response envelopes exchanged with the REST backend."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PageSource = Literal["backend", "local", "merged"]


class Pagination(BaseModel):
    """Pagination block of a list response.

    The backend names the total differently per resource (totalBlogs,
    totalContacts, totalReviews, ...); all of them land in `total`.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    current_page: int = Field(default=1, alias="currentPage")
    total_pages: int = Field(default=0, alias="totalPages")
    total: int = 0

    @model_validator(mode="before")
    @classmethod
    def _normalize_total(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "total" in data:
            return data
        for key, value in data.items():
            if key.startswith("total") and key != "totalPages":
                return {**data, "total": value}
        return data

    @classmethod
    def for_total(cls, total: int, page: int, limit: int) -> Pagination:
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit > 0 else 0,
            total=total,
        )


class Page(BaseModel):
    """One page of records of a single resource type."""

    list_key: str
    items: list[dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    source: PageSource = "backend"

    @classmethod
    def from_envelope(cls, payload: dict[str, Any], list_key: str) -> Page:
        data = payload.get("data") or {}
        items = data.get(list_key) or []
        pagination = data.get("pagination")
        if pagination is None:
            parsed = Pagination(
                current_page=1, total_pages=1 if items else 0, total=len(items)
            )
        else:
            parsed = Pagination.model_validate(pagination)
        return cls(list_key=list_key, items=items, pagination=parsed)

    @property
    def ids(self) -> set[str]:
        return {str(record_id(item)) for item in self.items if record_id(item)}


class ResourceEnvelope(BaseModel):
    """Envelope for single-record responses: `{success, message?, data?}`."""

    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    # Set when the record only exists in the local store.
    offline: bool = False

    def record(self, key: str) -> dict[str, Any] | None:
        value = self.data.get(key)
        if value is None:
            # Some endpoints put the record at the top level, e.g. {admin: ...}
            value = (self.model_extra or {}).get(key)
        return value


def record_id(record: dict[str, Any]) -> str | None:
    """Return the identifier of a record, whichever key the backend used."""
    value = record.get("_id", record.get("id"))
    return None if value is None else str(value)
