"""HTTP access to the Promise Realty REST backend."""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Mapping, Optional

import httpx

from realty.app.constants import TOKEN_KEY
from realty.app.env_loader import Settings
from realty.auth.fallback import is_fallback_token
from realty.errors import (
    BackendError,
    NetworkUnavailable,
    RealtyError,
    classify_http_error,
    error_for_status,
)
from realty.store.persistent import PersistentStore

logger = logging.getLogger(__name__)


@dataclass
class BackendClient:
    """Thin async wrapper around the REST API.

    Every call returns the decoded JSON envelope or raises one of the
    realty.errors types. The session token is read from the store on each
    request, so logging in or out takes effect immediately.
    """

    settings: Settings
    store: PersistentStore
    on_unauthorized: Optional[Callable[[], None]] = None
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _token(self) -> str | None:
        try:
            return self.store.get(TOKEN_KEY)
        except RealtyError as e:
            logger.error(f"Could not read session token: {e}")
            return None

    def _auth_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _handle_unauthorized(self, method: str, path: str) -> None:
        token = self._token()
        if not token:
            return
        if is_fallback_token(token):
            # Locally issued tokens are never valid on the backend; a 401 here
            # says nothing about the session.
            logger.info(
                f"Ignoring 401 for {method} {path}: session uses a fallback token"
            )
            return
        logger.warning(
            f"Received 401 Unauthorized for {method} {path} with token "
            f"{token[:8]}..., ending session"
        )
        if self.on_unauthorized is not None:
            self.on_unauthorized()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        handle_unauthorized: bool = True,
    ) -> dict[str, Any]:
        """Make an API request and return the decoded envelope.

        Args:
            method: HTTP method.
            path: Path relative to the API base URL, e.g. "/properties".
            params: Query parameters.
            json: JSON body.
            handle_unauthorized: End the session on a 401 while holding a
                backend-issued token. Login calls turn this off.
        """
        if self.settings.offline:
            raise NetworkUnavailable("No connectivity (offline mode)")

        try:
            async with httpx.AsyncClient(
                base_url=self.settings.api_base_url,
                timeout=self.settings.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    params=dict(params) if params else None,
                    json=json,
                    headers=self._auth_headers(),
                )
        except httpx.HTTPError as e:
            error = classify_http_error(e)
            logger.warning(
                f"{method} {path} failed: exception_type={type(e).__name__}, "
                f"error={error}"
            )
            raise error from e

        if response.status_code == 401 and handle_unauthorized:
            self._handle_unauthorized(method, path)

        if response.status_code >= 400:
            error = error_for_status(response)
            logger.warning(
                f"Backend returned error for {method} {path}: "
                f"{response.status_code} {error.message}"
            )
            raise error

        try:
            body = response.json()
        except ValueError:
            raise BackendError(
                f"Backend returned invalid JSON for {method} {path}",
                response.status_code,
            ) from None

        if not isinstance(body, dict):
            return {"success": True, "data": body}

        if body.get("success") is False:
            raise BackendError(
                body.get("message") or "Request failed", response.status_code
            )

        return body
