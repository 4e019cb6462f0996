"""The logged-in session: who the principal is and what they may do."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from realty.app.constants import LOGIN_PATH, TOKEN_KEY, USER_KEY
from realty.app.env_loader import Settings
from realty.app.notifications import Notifier
from realty.client.backend import BackendClient
from realty.errors import AuthError, NetworkUnavailable, RealtyError
from realty.models.user import LoginResult, Permission, Principal
from realty.store.persistent import PersistentStore
from .fallback import (
    FallbackAuthenticator,
    StaticAccountAuthenticator,
    is_fallback_token,
)
from .permissions import has_permission, is_admin_role, is_main_admin_role

logger = logging.getLogger(__name__)

ADMIN_LOGIN_MESSAGE = (
    "Admin login successful! You can access the Admin Dashboard from the menu."
)


def _welcome_message(principal: Principal) -> str:
    if principal.is_main_admin:
        return ADMIN_LOGIN_MESSAGE
    if principal.is_sub_admin:
        return "Sub-admin login successful!"
    return "Login successful!"


def _data(payload: dict[str, Any]) -> dict[str, Any]:
    data = payload.get("data") or {}
    return data if isinstance(data, dict) else {}


def _auth_payload(payload: dict[str, Any]) -> tuple[Principal, str]:
    """Pull the principal and token out of `{data: {user, token}}`."""
    data = _data(payload)
    user, token = data.get("user"), data.get("token")
    if not user or not token:
        raise AuthError("Authentication response is missing user or token")
    try:
        return Principal.model_validate(user), str(token)
    except PydanticValidationError as e:
        raise AuthError(f"Authentication response has an invalid user: {e}") from e


class AuthSession:
    """Single source of truth for "can the current principal do X".

    Permission checks read only the in-memory principal and never suspend.
    Login, restore, and profile calls are coroutines.
    """

    def __init__(
        self,
        backend: BackendClient,
        store: PersistentStore,
        notifier: Notifier,
        settings: Optional[Settings] = None,
        fallback_authenticator: Optional[FallbackAuthenticator] = None,
    ) -> None:
        self.backend = backend
        self.store = store
        self.notifier = notifier
        self.settings = settings or Settings()
        self.fallback_authenticator = (
            fallback_authenticator or StaticAccountAuthenticator()
        )
        self.principal: Principal | None = None
        self.token: str | None = None
        self.loading = True

    # --- checks -----------------------------------------------------------

    def is_authenticated(self) -> bool:
        return self.principal is not None and bool(self.token)

    def is_admin(self) -> bool:
        return is_admin_role(self.principal)

    def is_owner(self) -> bool:
        return self.principal is not None and self.principal.is_owner

    def is_main_admin(self) -> bool:
        return is_main_admin_role(self.principal)

    def is_sub_admin(self) -> bool:
        return self.principal is not None and self.principal.is_sub_admin

    def has_permission(self, key: Permission | str) -> bool:
        return has_permission(self.principal, key)

    @property
    def uses_fallback_token(self) -> bool:
        return is_fallback_token(self.token)

    # --- lifecycle --------------------------------------------------------

    def _establish(self, principal: Principal, token: str) -> None:
        """Persist the session, then adopt it.

        A failed write leaves no session behind, in memory or in storage.
        """
        try:
            self.store.set(TOKEN_KEY, token)
            self.store.set(USER_KEY, principal.snapshot())
        except RealtyError:
            self._clear()
            raise
        self.principal = principal
        self.token = token

    def _clear(self) -> None:
        self.principal = None
        self.token = None
        for key in (TOKEN_KEY, USER_KEY):
            try:
                self.store.remove(key)
            except RealtyError as e:
                logger.error(f"Could not remove {key} from storage: {e}")

    async def _authenticate(
        self, path: str, credentials: Mapping[str, Any]
    ) -> tuple[Principal, str]:
        payload = await self.backend.request(
            "POST", path, json=dict(credentials), handle_unauthorized=False
        )
        return _auth_payload(payload)

    async def login(
        self, credentials: Mapping[str, Any], is_admin_login: bool = False
    ) -> LoginResult:
        """Log in against the backend.

        Only an admin login whose backend is unreachable falls back to the
        local authenticator, and only when fallback login is allowed.
        """
        path = "/auth/admin/login" if is_admin_login else "/auth/login"
        fallback = False
        try:
            try:
                principal, token = await self._authenticate(path, credentials)
            except NetworkUnavailable as e:
                if not (is_admin_login and self.settings.allow_fallback_login):
                    raise
                logger.warning(f"Backend unreachable for admin login ({e}), "
                               f"using fallback authentication")
                principal, token = self.fallback_authenticator.authenticate(
                    credentials
                )
                fallback = True
            self._establish(principal, token)
        except RealtyError as e:
            message = e.message or "Login failed"
            logger.info(f"Login failed: {e}")
            self.notifier.error(message)
            return LoginResult(success=False, message=message)

        logger.info(
            f"Logged in {principal.name} as {principal.role}"
            + (" (fallback)" if fallback else "")
        )
        self.notifier.success(_welcome_message(principal))
        return LoginResult(success=True, principal=principal, fallback=fallback)

    async def login_sub_admin(self, credentials: Mapping[str, Any]) -> LoginResult:
        """Log in through the dedicated sub-admin endpoint."""
        try:
            principal, token = await self._authenticate(
                "/sub-admin/login", credentials
            )
            self._establish(principal, token)
        except RealtyError as e:
            message = e.message or "Sub-admin login failed"
            self.notifier.error(message)
            return LoginResult(success=False, message=message)

        self.notifier.success("Sub-admin login successful!")
        return LoginResult(success=True, principal=principal)

    async def register(self, user_data: Mapping[str, Any]) -> LoginResult:
        """Create a user account and log it in."""
        try:
            principal, token = await self._authenticate("/auth/register", user_data)
            self._establish(principal, token)
        except RealtyError as e:
            message = e.message or "Registration failed"
            self.notifier.error(message)
            return LoginResult(success=False, message=message)

        self.notifier.success("Registration successful!")
        return LoginResult(success=True, principal=principal)

    async def update_profile(self, changes: Mapping[str, Any]) -> bool:
        try:
            payload = await self.backend.request(
                "PUT", "/auth/profile", json=dict(changes)
            )
            user = _data(payload).get("user")
            if not user:
                raise AuthError("Profile response is missing the user")
            principal = Principal.model_validate(user)
            self.store.set(USER_KEY, principal.snapshot())
        except (RealtyError, PydanticValidationError) as e:
            message = getattr(e, "message", None) or "Update failed"
            self.notifier.error(message)
            return False

        self.principal = principal
        self.notifier.success("Profile updated successfully!")
        return True

    def logout(self) -> None:
        """End the session. Safe to call at any time, including twice."""
        self._clear()
        logger.info("Logged out")
        self.notifier.success("Logged out successfully")

    def handle_unauthorized(self) -> None:
        """End a backend session the backend no longer accepts.

        Called by the backend client on a 401 while holding a real token.
        """
        if is_fallback_token(self.token):
            return
        self._clear()
        self.notifier.error("Your session has expired. Please log in again.")
        self.notifier.redirect(LOGIN_PATH)

    async def restore_session(self) -> bool:
        """Rebuild the principal from the stored token at startup.

        A fallback token is restored from the stored principal snapshot; a
        real token is checked against the backend profile endpoint. Any
        failure leaves the session logged out.
        """
        self.loading = True
        try:
            token = self.store.get(TOKEN_KEY)
            if not token:
                return False
            self.token = token

            if is_fallback_token(token):
                snapshot = self.store.get(USER_KEY)
                if not snapshot:
                    raise AuthError("No stored user for fallback session")
                self.principal = Principal.model_validate_json(snapshot)
            else:
                payload = await self.backend.request("GET", "/auth/profile")
                user = _data(payload).get("user")
                if not user:
                    raise AuthError("Profile response is missing the user")
                self.principal = Principal.model_validate(user)
                self.store.set(USER_KEY, self.principal.snapshot())
            logger.info(f"Restored session for {self.principal.name}")
            return True
        except (RealtyError, PydanticValidationError) as e:
            logger.warning(f"Auth check failed: {e}")
            # A 401 has already ended the session through handle_unauthorized.
            if self.token is not None:
                self.logout()
            return False
        finally:
            self.loading = False
