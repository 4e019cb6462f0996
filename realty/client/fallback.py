"""When to take the local fallback path, and how often to retry first."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from realty.app.env_loader import Settings
from realty.errors import (
    AuthError,
    NetworkUnavailable,
    PermissionDenied,
    RealtyError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def should_fall_back(
    error: RealtyError, *, write: bool, fallback_on_validation_error: bool = True
) -> bool:
    """Decide whether a failed backend call should be served locally.

    Args:
        error: The classified backend failure.
        write: True for create/update/delete. Authorization failures never
            fall back on writes; gated writes are refused before any request.
        fallback_on_validation_error: Let a 400/422 on a write fall back too.
    """
    if isinstance(error, NetworkUnavailable):
        return True
    if error.status_code is None or error.status_code < 400:
        return False
    if write and isinstance(error, (AuthError, PermissionDenied)):
        return False
    if write and isinstance(error, ValidationError):
        return fallback_on_validation_error
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff for unreachable-backend errors.

    Attempt 1 runs immediately; attempt n waits
    initial_delay * exponential_base ** (n - 2), capped at max_delay.
    Only NetworkUnavailable is retried; every other error is final.
    """

    max_attempts: int = 1
    initial_delay: float = 0.5
    max_delay: float = 5.0
    exponential_base: float = 2.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_attempts,
            initial_delay=settings.retry_initial_delay,
        )

    def delay_for(self, attempt: int) -> float:
        delay = min(
            self.initial_delay * (self.exponential_base ** (attempt - 1)),
            self.max_delay,
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay

    async def run(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await func(*args, **kwargs)
            except NetworkUnavailable as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} failed: {e}. "
                    f"Retrying in {delay:.3f}s..."
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")
