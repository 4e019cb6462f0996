"""Shared base for records synthesized on the client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def drop_blank(data: Any) -> Any:
    """Drop None and empty-string values so field defaults apply instead."""
    if not isinstance(data, dict):
        return data
    return {
        k: v
        for k, v in data.items()
        if v is not None and not (isinstance(v, str) and not v.strip())
    }


class RecordModel(BaseModel):
    """A resource record in the backend's camelCase wire shape.

    Unknown payload fields are kept, so whatever the form sent survives into
    the stored record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: str = Field(alias="_id")
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        return drop_blank(data)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
