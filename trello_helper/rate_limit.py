"""Fixed-delay recovery from Trello rate-limit (429) responses."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from trello_helper.exceptions import TrelloAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Trello's documented limit is 100 requests per 10 seconds per token;
# 200ms is twice the implied spacing
DEFAULT_RATE_LIMIT_ERROR = 429
DEFAULT_RATE_LIMIT_DELAY_MS = 200


@dataclass(frozen=True)
class RateLimitPolicy:
    """Rate-limit recovery settings

    Attributes:
        error_code: HTTP status that signals rate limiting
        delay_ms: Fixed delay before re-issuing a rate-limited request
        max_attempts: Total attempts before giving up. None retries forever.
    """

    error_code: int = DEFAULT_RATE_LIMIT_ERROR
    delay_ms: int = DEFAULT_RATE_LIMIT_DELAY_MS
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0


class RateLimitRecovery:
    """Re-issue a request after a fixed delay whenever it is rate limited.

    Each call moves through Pending -> Succeeded, Pending -> Failed, or
    Pending -> RateLimited -> Pending. Rate-limit errors never reach the
    caller unless ``max_attempts`` is set and exhausted; every other error
    propagates unchanged on the first occurrence.
    """

    def __init__(
        self,
        policy: RateLimitPolicy | None = None,
        sleep: Callable[[float], Any] | None = None,
    ):
        self.policy = policy or RateLimitPolicy()
        self._sleep = sleep

    def is_rate_limited(self, error: BaseException) -> bool:
        """Return True when the error carries the configured rate-limit status"""
        return isinstance(error, TrelloAPIError) and error.status_code == self.policy.error_code

    def call(self, operation: Callable[[], T], description: str = "request") -> T:
        """
        Run ``operation`` until it succeeds or fails with a non rate-limit error

        Args:
            operation: Zero-argument callable issuing the request
            description: Short label used in log messages

        Returns:
            Whatever ``operation`` returns on its first non rate-limited attempt
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except TrelloAPIError as e:
                if not self.is_rate_limited(e):
                    raise
                max_attempts = self.policy.max_attempts
                if max_attempts is not None and attempt >= max_attempts:
                    logger.error(
                        "Rate limit error on %s - giving up after %d attempts",
                        description,
                        attempt,
                    )
                    raise
                logger.warning(
                    "Rate limit error on %s - retrying in %dms (attempt %d)",
                    description,
                    self.policy.delay_ms,
                    attempt,
                )
                sleep = self._sleep or time.sleep
                sleep(self.policy.delay_seconds)
