"""Error taxonomy shared by the auth session and the resource clients."""

from __future__ import annotations

from typing import Any

import httpx


class RealtyError(Exception):
    """Base class for every error surfaced to the UI layer."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


class AuthError(RealtyError):
    """Invalid credentials or an expired/invalid session token."""


class PermissionDenied(RealtyError):
    """The current principal may not perform the requested action."""


class NetworkUnavailable(RealtyError):
    """Connection refused, DNS failure, timeout, or no connectivity at all."""


class ValidationError(RealtyError):
    """The backend rejected the payload (HTTP 400/422)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 400,
        errors: list[Any] | None = None,
    ):
        super().__init__(message, status_code)
        self.errors = errors or []


class NotFound(RealtyError):
    """Record absent from the backend and from the local store."""


class ConflictError(RealtyError):
    """The backend refused a write because the record already exists."""


class BackendError(RealtyError):
    """Any other backend failure, including `success: false` envelopes."""


class StoreError(RealtyError):
    """The durable client storage could not be read or written."""


def _backend_message(response: httpx.Response, default: str) -> tuple[str, list[Any]]:
    try:
        body = response.json()
    except ValueError:
        return default, []
    if not isinstance(body, dict):
        return default, []
    message = body.get("message") or body.get("detail") or default
    if not isinstance(message, str):
        message = default
    errors = body.get("errors") or []
    if not isinstance(errors, list):
        errors = [errors]
    return message, errors


def error_for_status(response: httpx.Response) -> RealtyError:
    """Build the taxonomy error matching an HTTP error response."""
    status_code = response.status_code
    message, errors = _backend_message(
        response, f"Request failed with status {status_code}"
    )
    if status_code == 401:
        return AuthError(message, status_code)
    if status_code == 403:
        return PermissionDenied(message, status_code)
    if status_code == 404:
        return NotFound(message, status_code)
    if status_code == 409:
        return ConflictError(message, status_code)
    if status_code in (400, 422):
        return ValidationError(message, status_code, errors)
    return BackendError(message, status_code)


def classify_http_error(exc: Exception) -> RealtyError:
    """Map an httpx exception onto the error taxonomy."""
    if isinstance(exc, RealtyError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return error_for_status(exc.response)
    if isinstance(exc, httpx.TimeoutException):
        return NetworkUnavailable(f"Request timed out: {exc}")
    if isinstance(exc, (httpx.NetworkError, httpx.ProtocolError)):
        # ConnectError covers connection refused and DNS resolution failures
        return NetworkUnavailable(f"Backend unreachable: {exc}")
    if isinstance(exc, httpx.HTTPError):
        return BackendError(str(exc))
    return BackendError(f"{type(exc).__name__}: {exc}")
