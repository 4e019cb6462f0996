"""Role and permission checks.

Every check here is a pure function of the principal: no I/O, so it can run
synchronously before any gated action. A missing principal fails closed.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from realty.errors import PermissionDenied
from realty.models.user import Permission, Principal

logger = logging.getLogger(__name__)

MAIN_ADMIN_ROLES = ("owner", "admin")
ADMIN_ROLES = ("owner", "admin", "sub-admin")

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def is_admin_role(principal: Principal | None) -> bool:
    return principal is not None and principal.role in ADMIN_ROLES


def is_main_admin_role(principal: Principal | None) -> bool:
    return principal is not None and principal.role in MAIN_ADMIN_ROLES


def has_permission(principal: Principal | None, key: Permission | str) -> bool:
    """Check whether a principal holds a permission.

    Owners and admins hold every recognized permission. Sub-admins hold only
    the keys explicitly set to True in their permission map. Users, a missing
    principal, and unrecognized keys always yield False.
    """
    permission = Permission.parse(key)
    if permission is None or principal is None:
        return False

    if principal.role in MAIN_ADMIN_ROLES:
        return True

    if principal.role == "sub-admin":
        return principal.permissions.get(permission.value) is True

    return False


def requires_permission(permission: Permission) -> Callable[[F], F]:
    """Gate an async method on the permission of `self.session`'s principal.

    Usage:
        @requires_permission(Permission.ADD_PROPERTY)
        async def add_property(self, payload): ...

    The check runs before the wrapped coroutine starts, so a denied call never
    reaches the network. The owning object may define `_denied(error)` to
    surface the refusal to the user.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            principal = self.session.principal
            if not has_permission(principal, permission):
                who = principal.name if principal else "anonymous"
                logger.warning(
                    f"Permission denied - user: {who}, required: {permission.value}"
                )
                error = PermissionDenied(
                    f"Permission denied. Required: {permission.value}", 403
                )
                on_denied = getattr(self, "_denied", None)
                if on_denied is not None:
                    on_denied(error)
                raise error
            return await func(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
