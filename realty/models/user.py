"""Principal model for the logged-in actor."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


Role = Literal["owner", "admin", "sub-admin", "user"]


class Permission(str, Enum):
    """Fine-grained capabilities that can be granted to a sub-admin."""

    ADD_PROPERTY = "addProperty"
    EDIT_PROPERTY = "editProperty"
    DELETE_PROPERTY = "deleteProperty"
    WRITE_BLOG = "writeBlog"
    DELETE_BLOG = "deleteBlog"
    WRITE_REVIEW = "writeReview"
    DELETE_REVIEW = "deleteReview"
    DELETE_USER = "deleteUser"
    VIEW_MESSAGES = "viewMessages"
    DELETE_MESSAGES = "deleteMessages"
    VIEW_INQUIRIES = "viewInquiries"
    MANAGE_SUB_ADMINS = "manageSubAdmins"
    CREATE_ADMIN = "createAdmin"

    @classmethod
    def parse(cls, key: Permission | str) -> Permission | None:
        """Return the matching member, or None for an unrecognized key."""
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            return None


# The permissions a sub-admin can be granted from the back office.
SUB_ADMIN_PERMISSIONS: tuple[Permission, ...] = (
    Permission.ADD_PROPERTY,
    Permission.EDIT_PROPERTY,
    Permission.DELETE_PROPERTY,
    Permission.WRITE_REVIEW,
    Permission.DELETE_REVIEW,
    Permission.WRITE_BLOG,
    Permission.DELETE_BLOG,
    Permission.DELETE_USER,
    Permission.VIEW_INQUIRIES,
    Permission.VIEW_MESSAGES,
    Permission.DELETE_MESSAGES,
)


class Principal(BaseModel):
    """The authenticated actor, as returned by the backend auth endpoints.

    `permissions` only matters for sub-admins; owners and admins are
    authorized for everything regardless of what it holds.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(
        validation_alias=AliasChoices("_id", "id"), serialization_alias="_id"
    )
    name: str = ""
    email: str | None = None
    phone: str | None = None
    role: Role = "user"
    permissions: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"

    @property
    def is_main_admin(self) -> bool:
        return self.role in ("owner", "admin")

    @property
    def is_sub_admin(self) -> bool:
        return self.role == "sub-admin"

    @property
    def is_admin(self) -> bool:
        return self.role in ("owner", "admin", "sub-admin")

    def snapshot(self) -> str:
        """Serialize for durable storage."""
        return self.model_dump_json(by_alias=True)


class LoginResult(BaseModel):
    """Outcome of a login attempt."""

    success: bool
    principal: Principal | None = None
    message: str | None = None
    fallback: bool = Field(
        default=False, description="Authenticated locally while the backend was down"
    )
