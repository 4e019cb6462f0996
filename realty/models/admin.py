"""Sub-admin accounts managed from the back office."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .base import utc_now_iso

PASSWORD_MIN_LENGTH = 10

_PASSWORD_RULES = [
    (re.compile(r"[a-z]"), "Must include lowercase"),
    (re.compile(r"[A-Z]"), "Must include uppercase"),
    (re.compile(r"[0-9]"), "Must include a number"),
    (re.compile(r"[^A-Za-z0-9]"), "Must include a special char"),
]


def check_password_strength(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Must be at least {PASSWORD_MIN_LENGTH} characters")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            raise ValueError(message)
    return password


class SubAdminPermissions(BaseModel):
    """Full permission map; every key must be present."""

    addProperty: bool
    editProperty: bool
    deleteProperty: bool
    writeReview: bool
    deleteReview: bool
    writeBlog: bool
    deleteBlog: bool
    deleteUser: bool
    viewInquiries: bool
    viewMessages: bool
    deleteMessages: bool


class CreateSubAdminRequest(BaseModel):
    name: str = Field(min_length=3, max_length=60)
    phoneNumber: str = Field(pattern=r"^[0-9]{10,15}$")
    password: str
    permissions: SubAdminPermissions

    @field_validator("password")
    @classmethod
    def _strong(cls, value: str) -> str:
        return check_password_strength(value)


class ResetPasswordRequest(BaseModel):
    newPassword: str

    @field_validator("newPassword")
    @classmethod
    def _strong(cls, value: str) -> str:
        return check_password_strength(value)


class SubAdmin(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(
        validation_alias=AliasChoices("_id", "id"), serialization_alias="_id"
    )
    name: str
    phoneNumber: str
    role: Literal["owner", "admin", "sub-admin"] = "sub-admin"
    permissions: SubAdminPermissions
    createdAt: str = Field(default_factory=utc_now_iso)
