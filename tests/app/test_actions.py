"""Tests for the permission-gated back-office actions."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from realty.app.constants import TOKEN_KEY, USER_KEY
from realty.errors import AuthError, PermissionDenied
from realty.models.user import Principal

PERMISSIONS = {
    "addProperty": True,
    "editProperty": False,
    "deleteProperty": False,
    "writeReview": True,
    "deleteReview": False,
    "writeBlog": False,
    "deleteBlog": False,
    "deleteUser": False,
    "viewInquiries": True,
    "viewMessages": False,
    "deleteMessages": False,
}


async def _restore(app, role: str, permissions: dict | None = None) -> None:
    """Start the app with a fallback session for the given role."""
    principal = Principal(
        id=f"mock_{role}", name=f"Test {role}", role=role, permissions=permissions or {}
    )
    app.store.set(TOKEN_KEY, f"mock_admin_token_{principal.id}_1700000000000")
    app.store.set(USER_KEY, principal.snapshot())
    assert await app.start()


class TestPermissionGate:
    @pytest.mark.asyncio
    async def test_denied_action_makes_no_request(
        self, online_app, fake_backend, notifier
    ):
        await _restore(online_app, "sub-admin", PERMISSIONS)

        with pytest.raises(PermissionDenied):
            await online_app.actions.delete_property("000000000000000000000001")

        assert fake_backend.requests == []
        assert notifier.errors == ["Permission denied. Required: deleteProperty"]
        assert notifier.successes == []

    @pytest.mark.asyncio
    async def test_user_cannot_read_messages(self, online_app, fake_backend, notifier):
        await _restore(online_app, "user")

        with pytest.raises(PermissionDenied):
            await online_app.actions.list_messages()

        assert fake_backend.requests == []
        assert len(notifier.errors) == 1

    @pytest.mark.asyncio
    async def test_anonymous_is_denied(self, offline_app, notifier):
        with pytest.raises(PermissionDenied):
            await offline_app.actions.add_property({"title": "X"})
        assert len(notifier.errors) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action,args",
        [
            ("add_property", ({"title": "Villa"},)),
            ("write_review", ({"rating": 5},)),
            ("list_inquiries", ()),
        ],
    )
    async def test_granted_actions_run(self, offline_app, notifier, action, args):
        await _restore(offline_app, "sub-admin", PERMISSIONS)

        await getattr(offline_app.actions, action)(*args)

        assert notifier.errors == []

    @pytest.mark.asyncio
    async def test_sub_admin_management_needs_the_permission(
        self, offline_app, notifier
    ):
        await _restore(offline_app, "sub-admin", PERMISSIONS)

        with pytest.raises(PermissionDenied):
            await offline_app.actions.list_sub_admins()
        assert notifier.errors == ["Permission denied. Required: manageSubAdmins"]

    @pytest.mark.asyncio
    async def test_owner_manages_sub_admins(self, offline_app, notifier):
        await _restore(offline_app, "owner")
        assert await offline_app.actions.list_sub_admins() == []
        assert notifier.errors == []


class TestNotifications:
    @pytest.mark.asyncio
    async def test_offline_add_property_notifies_once(self, offline_app, notifier):
        await _restore(offline_app, "owner")

        envelope = await offline_app.actions.add_property({"title": "Lakeview Villa"})

        assert envelope.offline
        assert notifier.successes == ["Lakeview Villa listed at ₹50.0 L (offline)"]
        assert notifier.errors == []

    @pytest.mark.asyncio
    async def test_online_add_property(self, online_app, notifier):
        await online_app.session.login(
            {"phoneNumber": "9876543210", "password": "owner-pass"}, is_admin_login=True
        )
        notifier.successes.clear()

        await online_app.actions.add_property(
            {"title": "Sky Tower", "price": {"amount": 32000000}}
        )

        assert notifier.successes == ["Sky Tower listed at ₹3.2 Cr"]

    @pytest.mark.asyncio
    async def test_failed_action_notifies_once_and_raises(
        self, online_app, notifier
    ):
        # A fallback token is refused by the backend; writes do not fall back.
        await _restore(online_app, "owner")

        with pytest.raises(AuthError):
            await online_app.actions.write_blog({"title": "Hello"})

        assert notifier.errors == ["Not authorized"]
        assert notifier.successes == []
        assert online_app.session.is_authenticated()

    @pytest.mark.asyncio
    async def test_expired_session_on_write_notifies_once(
        self, online_app, fake_backend, notifier
    ):
        await online_app.session.login(
            {"phoneNumber": "9876543210", "password": "owner-pass"}, is_admin_login=True
        )
        notifier.successes.clear()
        fake_backend.tokens.clear()

        with pytest.raises(AuthError):
            await online_app.actions.add_property({"title": "Lakeview Villa"})

        assert notifier.errors == ["Your session has expired. Please log in again."]
        assert notifier.successes == []
        assert notifier.redirects == ["/login"]
        assert not online_app.session.is_authenticated()

    @pytest.mark.asyncio
    async def test_invalid_sub_admin_request_notifies_once(self, offline_app, notifier):
        await _restore(offline_app, "owner")

        with pytest.raises(PydanticValidationError):
            await offline_app.actions.create_sub_admin(
                {"name": "Al", "phoneNumber": "9123456780", "password": "x"}
            )

        assert len(notifier.errors) == 1
        assert notifier.successes == []

    @pytest.mark.asyncio
    async def test_moderate_review_offline(self, offline_app, notifier):
        await _restore(offline_app, "admin")
        review = (await offline_app.reviews.create({"comment": "Nice"})).record(
            "review"
        )

        envelope = await offline_app.actions.moderate_review(review["_id"], True)

        assert envelope.record("review")["isApproved"] is True
        assert notifier.successes == ["Review updated successfully (offline)"]

    @pytest.mark.asyncio
    async def test_update_inquiry_status_online(
        self, online_app, fake_backend, notifier
    ):
        await online_app.session.login(
            {"phoneNumber": "9876543210", "password": "owner-pass"}, is_admin_login=True
        )
        fake_backend.seed(
            "visitRequests", [{"_id": "000000000000000000000abc", "status": "pending"}]
        )

        envelope = await online_app.actions.update_inquiry_status(
            "000000000000000000000abc", "approved", notes="Saturday 10am"
        )

        assert envelope.record("visitRequest")["status"] == "approved"
        assert notifier.successes[-1] == "Visit request approved"

    @pytest.mark.asyncio
    async def test_network_failure_on_list_is_served_locally(
        self, offline_app, notifier
    ):
        await _restore(offline_app, "owner")

        page = await offline_app.actions.list_messages()

        assert page.source == "local"
        assert notifier.errors == []

    @pytest.mark.asyncio
    async def test_sub_admin_lifecycle(self, offline_app, notifier):
        await _restore(offline_app, "owner")
        admin = await offline_app.actions.create_sub_admin(
            {
                "name": "Priya Shah",
                "phoneNumber": "9123456780",
                "password": "Str0ng!Passw0rd",
                "permissions": {k: True for k in PERMISSIONS},
            }
        )
        await offline_app.actions.update_sub_admin_permissions(
            admin.id, {k: False for k in PERMISSIONS}
        )
        await offline_app.actions.delete_sub_admin(admin.id)

        assert notifier.successes == [
            "Sub-admin Priya Shah created successfully",
            "Permissions updated successfully",
            "Sub-admin deleted successfully",
        ]
        assert await offline_app.actions.list_sub_admins() == []
