"""Back-office actions, each gated on a permission before any request is made.

Every action reports its outcome to the user exactly once: one success
notification, or one error notification followed by the error propagating to
the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from realty.auth.permissions import requires_permission
from realty.auth.session import AuthSession
from realty.client.resources import PropertyClient, ResourceClient
from realty.client.sub_admins import SubAdminClient
from realty.errors import AuthError, RealtyError
from realty.models.admin import CreateSubAdminRequest, SubAdmin, SubAdminPermissions
from realty.models.responses import Page, ResourceEnvelope
from realty.models.user import Permission
from realty.utils.formatting import format_price
from .notifications import Notifier

logger = logging.getLogger(__name__)

InquiryStatus = Literal["pending", "approved", "rejected", "completed"]


def _validation_message(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first['msg']}" if field else first["msg"]


@dataclass
class AdminActions:
    session: AuthSession
    properties: PropertyClient
    blogs: ResourceClient
    reviews: ResourceClient
    contacts: ResourceClient
    visit_requests: ResourceClient
    sub_admins: SubAdminClient
    notifier: Notifier

    def _denied(self, error: RealtyError) -> None:
        self.notifier.error(error.message)

    def _session_ended_by(self, error: Exception) -> bool:
        return (
            isinstance(error, AuthError)
            and error.status_code == 401
            and not self.session.is_authenticated()
        )

    def _failed(self, action: str, error: Exception) -> None:
        if isinstance(error, PydanticValidationError):
            message = _validation_message(error)
        else:
            message = getattr(error, "message", None) or str(error)
        logger.error(
            f"{action} failed: exception_type={type(error).__name__}, "
            f"error={error}"
        )
        if self._session_ended_by(error):
            # The session has already told the user it expired.
            return
        self.notifier.error(message)

    def _done(self, envelope: ResourceEnvelope, default: str) -> ResourceEnvelope:
        self.notifier.success(envelope.message or default)
        return envelope

    # --- properties -------------------------------------------------------

    @requires_permission(Permission.ADD_PROPERTY)
    async def add_property(self, payload: Mapping[str, Any]) -> ResourceEnvelope:
        try:
            envelope = await self.properties.create(payload)
        except RealtyError as e:
            self._failed("Add property", e)
            raise

        record = envelope.record("property") or {}
        amount = (record.get("price") or {}).get("amount")
        if amount is None:
            return self._done(envelope, "Property added successfully")
        message = f"{record.get('title', 'Property')} listed at {format_price(amount)}"
        if envelope.offline:
            message += " (offline)"
        self.notifier.success(message)
        return envelope

    @requires_permission(Permission.EDIT_PROPERTY)
    async def edit_property(
        self, property_id: str, changes: Mapping[str, Any]
    ) -> ResourceEnvelope:
        try:
            envelope = await self.properties.update(property_id, changes)
        except RealtyError as e:
            self._failed("Edit property", e)
            raise
        return self._done(envelope, "Property updated successfully")

    @requires_permission(Permission.DELETE_PROPERTY)
    async def delete_property(self, property_id: str) -> ResourceEnvelope:
        try:
            envelope = await self.properties.remove(property_id)
        except RealtyError as e:
            self._failed("Delete property", e)
            raise
        return self._done(envelope, "Property deleted successfully")

    # --- blogs ------------------------------------------------------------

    @requires_permission(Permission.WRITE_BLOG)
    async def write_blog(self, payload: Mapping[str, Any]) -> ResourceEnvelope:
        try:
            envelope = await self.blogs.create(payload)
        except RealtyError as e:
            self._failed("Write blog", e)
            raise
        return self._done(envelope, "Blog created successfully")

    @requires_permission(Permission.DELETE_BLOG)
    async def delete_blog(self, blog_id: str) -> ResourceEnvelope:
        try:
            envelope = await self.blogs.remove(blog_id)
        except RealtyError as e:
            self._failed("Delete blog", e)
            raise
        return self._done(envelope, "Blog deleted successfully")

    # --- reviews ----------------------------------------------------------

    @requires_permission(Permission.WRITE_REVIEW)
    async def write_review(self, payload: Mapping[str, Any]) -> ResourceEnvelope:
        try:
            envelope = await self.reviews.create(payload)
        except RealtyError as e:
            self._failed("Write review", e)
            raise
        return self._done(envelope, "Review created successfully")

    @requires_permission(Permission.DELETE_REVIEW)
    async def delete_review(self, review_id: str) -> ResourceEnvelope:
        try:
            envelope = await self.reviews.remove(review_id)
        except RealtyError as e:
            self._failed("Delete review", e)
            raise
        return self._done(envelope, "Review deleted successfully")

    @requires_permission(Permission.WRITE_REVIEW)
    async def moderate_review(self, review_id: str, approved: bool) -> ResourceEnvelope:
        """Approve or reject a review."""
        try:
            envelope = await self.reviews.update(
                review_id, {"isApproved": approved}, action="status", method="PATCH"
            )
        except RealtyError as e:
            self._failed("Moderate review", e)
            raise
        verdict = "approved" if approved else "rejected"
        return self._done(envelope, f"Review {verdict} successfully")

    # --- messages and inquiries --------------------------------------------

    @requires_permission(Permission.VIEW_MESSAGES)
    async def list_messages(self, params: Optional[Mapping[str, Any]] = None) -> Page:
        try:
            return await self.contacts.list(params)
        except RealtyError as e:
            self._failed("Load messages", e)
            raise

    @requires_permission(Permission.DELETE_MESSAGES)
    async def delete_message(self, contact_id: str) -> ResourceEnvelope:
        try:
            envelope = await self.contacts.remove(contact_id)
        except RealtyError as e:
            self._failed("Delete message", e)
            raise
        return self._done(envelope, "Message deleted successfully")

    @requires_permission(Permission.VIEW_INQUIRIES)
    async def list_inquiries(self, params: Optional[Mapping[str, Any]] = None) -> Page:
        try:
            return await self.visit_requests.list(params)
        except RealtyError as e:
            self._failed("Load inquiries", e)
            raise

    @requires_permission(Permission.VIEW_INQUIRIES)
    async def update_inquiry_status(
        self, request_id: str, status: InquiryStatus, notes: str = ""
    ) -> ResourceEnvelope:
        try:
            envelope = await self.visit_requests.update(
                request_id, {"status": status, "notes": notes}
            )
        except RealtyError as e:
            self._failed("Update inquiry", e)
            raise
        return self._done(envelope, f"Visit request {status}")

    @requires_permission(Permission.VIEW_INQUIRIES)
    async def delete_inquiry(self, request_id: str) -> ResourceEnvelope:
        try:
            envelope = await self.visit_requests.remove(request_id)
        except RealtyError as e:
            self._failed("Delete inquiry", e)
            raise
        return self._done(envelope, "Visit request deleted successfully")

    # --- sub-admins ---------------------------------------------------------

    @requires_permission(Permission.MANAGE_SUB_ADMINS)
    async def list_sub_admins(self) -> list[SubAdmin]:
        try:
            return await self.sub_admins.list()
        except RealtyError as e:
            self._failed("Load sub-admins", e)
            raise

    @requires_permission(Permission.MANAGE_SUB_ADMINS)
    async def create_sub_admin(
        self, request: CreateSubAdminRequest | Mapping[str, Any]
    ) -> SubAdmin:
        try:
            admin = await self.sub_admins.create(request)
        except (RealtyError, PydanticValidationError) as e:
            self._failed("Create sub-admin", e)
            raise
        self.notifier.success(f"Sub-admin {admin.name} created successfully")
        return admin

    @requires_permission(Permission.MANAGE_SUB_ADMINS)
    async def update_sub_admin_permissions(
        self, admin_id: str, permissions: SubAdminPermissions | Mapping[str, Any]
    ) -> SubAdmin:
        try:
            admin = await self.sub_admins.update_permissions(admin_id, permissions)
        except (RealtyError, PydanticValidationError) as e:
            self._failed("Update sub-admin permissions", e)
            raise
        self.notifier.success("Permissions updated successfully")
        return admin

    @requires_permission(Permission.MANAGE_SUB_ADMINS)
    async def delete_sub_admin(self, admin_id: str) -> None:
        try:
            await self.sub_admins.delete(admin_id)
        except RealtyError as e:
            self._failed("Delete sub-admin", e)
            raise
        self.notifier.success("Sub-admin deleted successfully")
