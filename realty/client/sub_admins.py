"""Back-office management of sub-admin accounts."""

from dataclasses import dataclass, field
import logging
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from realty.app.env_loader import Settings
from realty.errors import (
    BackendError,
    ConflictError,
    NotFound,
    PermissionDenied,
    RealtyError,
)
from realty.models.admin import (
    CreateSubAdminRequest,
    ResetPasswordRequest,
    SubAdmin,
    SubAdminPermissions,
)
from realty.models.responses import ResourceEnvelope
from realty.store.records import LocalRecordStore
from .backend import BackendClient
from .fallback import should_fall_back

logger = logging.getLogger(__name__)

DUPLICATE_PHONE_MESSAGE = "An admin with this phone number already exists"

# The admin endpoints answer `{admin}` or `{data: {subAdmin}}`.
_RECORD_KEYS = ("admin", "subAdmin")
_LIST_KEYS = ("admins", "subAdmins")


def _admin_from(payload: dict[str, Any]) -> SubAdmin:
    try:
        envelope = ResourceEnvelope.model_validate(payload)
        admin = next(
            (a for a in map(envelope.record, _RECORD_KEYS) if a is not None), None
        )
        if admin is None:
            raise BackendError("Admin response is missing the admin record")
        return SubAdmin.model_validate(admin)
    except PydanticValidationError as e:
        raise BackendError(f"Admin response is malformed: {e}") from e


def _admins_from(payload: dict[str, Any]) -> list[SubAdmin]:
    data = payload.get("data")
    sources = [payload, data if isinstance(data, dict) else {}]
    admins = next(
        (s[k] for s in sources for k in _LIST_KEYS if s.get(k) is not None), []
    )
    if not isinstance(admins, list):
        raise BackendError("Admin list response is malformed")
    try:
        return [SubAdmin.model_validate(a) for a in admins]
    except PydanticValidationError as e:
        raise BackendError(f"Admin list response is malformed: {e}") from e


@dataclass
class SubAdminClient:
    """Create, list, re-permission, and delete sub-admins.

    Falls back to a locally stored roster when the backend is unreachable.
    Passwords are only ever sent to the backend; the local roster holds none.
    """

    backend: BackendClient
    local: LocalRecordStore
    settings: Settings = field(default_factory=Settings)

    def _falls_back(self, error: RealtyError) -> bool:
        return should_fall_back(
            error,
            write=True,
            fallback_on_validation_error=self.settings.fallback_on_validation_error,
        )

    async def list(self) -> list[SubAdmin]:
        try:
            payload = await self.backend.request("GET", "/admin/list")
        except RealtyError as e:
            if not should_fall_back(e, write=False):
                raise
            logger.warning(f"Admin API not available ({e}), using local roster")
            return [SubAdmin.model_validate(r) for r in self.local.all()]

        return _admins_from(payload)

    async def create(
        self, request: CreateSubAdminRequest | Mapping[str, Any]
    ) -> SubAdmin:
        """Create a sub-admin.

        Raises:
            pydantic.ValidationError: If the request fails field validation.
            ConflictError: If an admin with the same phone number exists.
        """
        if not isinstance(request, CreateSubAdminRequest):
            request = CreateSubAdminRequest.model_validate(request)

        try:
            payload = await self.backend.request(
                "POST", "/admin/create", json=request.model_dump()
            )
        except ConflictError:
            raise ConflictError(DUPLICATE_PHONE_MESSAGE, 409) from None
        except RealtyError as e:
            if not self._falls_back(e):
                raise
            logger.warning(f"Admin API not available ({e}), creating locally")
        else:
            return _admin_from(payload)

        if any(r.get("phoneNumber") == request.phoneNumber for r in self.local.all()):
            raise ConflictError(DUPLICATE_PHONE_MESSAGE, 409)

        admin = SubAdmin(
            id=self.local.new_id(),
            name=request.name,
            phoneNumber=request.phoneNumber,
            role="sub-admin",
            permissions=request.permissions,
        )
        self.local.prepend(admin.model_dump(by_alias=True))
        return admin

    async def update_permissions(
        self, admin_id: str, permissions: SubAdminPermissions | Mapping[str, Any]
    ) -> SubAdmin:
        if not isinstance(permissions, SubAdminPermissions):
            permissions = SubAdminPermissions.model_validate(permissions)

        try:
            payload = await self.backend.request(
                "PUT",
                f"/admin/{admin_id}/permissions",
                json={"permissions": permissions.model_dump()},
            )
        except RealtyError as e:
            if not self._falls_back(e):
                raise
            logger.warning(f"Admin API not available ({e}), updating local roster")
            try:
                record = self.local.update(
                    admin_id, {"permissions": permissions.model_dump()}
                )
            except NotFound:
                raise NotFound("Admin not found", 404) from e
            return SubAdmin.model_validate(record)
        return _admin_from(payload)

    async def reset_password(self, admin_id: str, new_password: str) -> None:
        """Reset a sub-admin's password.

        Raises:
            pydantic.ValidationError: If the password is too weak.
        """
        request = ResetPasswordRequest(newPassword=new_password)
        try:
            await self.backend.request(
                "PUT", f"/admin/{admin_id}/password", json=request.model_dump()
            )
        except RealtyError as e:
            if not self._falls_back(e):
                raise
            if self.local.find(admin_id) is None:
                raise NotFound("Admin not found", 404) from e
            # Nothing to store locally; the roster never holds passwords.
            logger.warning(
                f"Admin API not available ({e}), password reset for {admin_id} "
                f"was not applied"
            )

    async def delete(self, admin_id: str) -> None:
        try:
            await self.backend.request("DELETE", f"/admin/{admin_id}")
        except RealtyError as e:
            if not self._falls_back(e):
                raise
            record = self.local.find(admin_id)
            if record is None:
                raise NotFound("Admin not found", 404) from e
            if record.get("role") == "owner":
                raise PermissionDenied("Cannot delete owner account", 403) from e
            self.local.remove(admin_id)
            logger.warning(f"Admin API not available ({e}), deleted {admin_id} locally")

