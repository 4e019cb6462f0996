"""Local sign-in used when the backend cannot be reached for an admin login."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from realty.app.constants import FALLBACK_ADMIN_TOKEN_PREFIX, FALLBACK_TOKEN_PREFIX
from realty.errors import AuthError
from realty.models.user import SUB_ADMIN_PERMISSIONS, Permission, Principal, Role

logger = logging.getLogger(__name__)


def is_fallback_token(token: str | None) -> bool:
    """Check whether a session token was issued locally rather than by the backend."""
    return bool(token) and str(token).startswith(FALLBACK_TOKEN_PREFIX)


class FallbackAuthenticator(Protocol):
    def authenticate(self, credentials: Mapping[str, Any]) -> tuple[Principal, str]:
        """Return the principal and a fallback token, or raise AuthError."""
        ...


@dataclass(frozen=True)
class StaticAccount:
    phone: str
    password: str
    role: Role
    name: str


# Demo accounts available while the backend is offline.
DEMO_ACCOUNTS = (
    StaticAccount(
        phone="9876543209", password="owner123", role="owner", name="Owner Admin"
    ),
    StaticAccount(
        phone="9876543211", password="sub123", role="sub-admin", name="Sub Admin"
    ),
)


def _permission_map(role: Role) -> dict[str, bool]:
    granted = {p.value: True for p in SUB_ADMIN_PERMISSIONS}
    if role == "owner":
        granted[Permission.MANAGE_SUB_ADMINS.value] = True
        granted[Permission.CREATE_ADMIN.value] = True
    return granted


class StaticAccountAuthenticator:
    """Validate phone/password pairs against a fixed list of accounts."""

    def __init__(self, accounts: tuple[StaticAccount, ...] = DEMO_ACCOUNTS) -> None:
        self.accounts = {a.phone: a for a in accounts}

    def authenticate(self, credentials: Mapping[str, Any]) -> tuple[Principal, str]:
        phone = credentials.get("phoneNumber") or credentials.get("phone")
        password = credentials.get("password")

        account = self.accounts.get(str(phone)) if phone else None
        if account is None or password != account.password:
            logger.info(f"Fallback login rejected for phone {phone}")
            raise AuthError("Invalid phone number or password", 401)

        principal = Principal(
            id=f"{FALLBACK_TOKEN_PREFIX}{account.phone}",
            name=account.name,
            phone=account.phone,
            email=f"{account.name.lower().replace(' ', '.')}@promiserealty.com",
            role=account.role,
            permissions=_permission_map(account.role),
        )
        issued_at = int(time.time() * 1000)
        token = f"{FALLBACK_ADMIN_TOKEN_PREFIX}{principal.id}_{issued_at}"
        logger.info(f"Fallback login accepted: {account.role} {account.name}")
        return principal, token
