"""User-facing notifications (toasts) and navigation requests."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def redirect(self, path: str) -> None: ...


class LoggingNotifier:
    """Notifier for headless use: writes every notification to the log."""

    def __init__(self) -> None:
        self.last_redirect: str | None = None

    def success(self, message: str) -> None:
        logger.info(f"[notice] {message}")

    def error(self, message: str) -> None:
        logger.warning(f"[error] {message}")

    def redirect(self, path: str) -> None:
        logger.info(f"Redirecting to {path}")
        self.last_redirect = path
