"""Bounded retry with exponential backoff for outbound calls.

Only exceptions the caller classifies as transient are retried; anything
else propagates on the first failure.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings shared by the Stripe and email adapters.

    Usage:
        policy = RetryPolicy(max_attempts=3, backoff_seconds=0.5)
        session = policy.call(
            lambda: client.checkout.sessions.retrieve(session_id),
            is_retryable=is_retryable_stripe_exception,
            operation="retrieve_session",
        )
    """

    max_attempts: int = 3
    backoff_seconds: float = 0.5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry following a failed ``attempt`` (0-based)."""
        return self.backoff_seconds * (2**attempt)

    def call(
        self,
        func: Callable[[], T],
        *,
        is_retryable: Callable[[Exception], bool],
        operation: str = "call",
    ) -> T:
        """Invoke ``func`` until it succeeds, fails permanently, or attempts run out.

        Args:
            func: Zero-argument callable performing the outbound call.
            is_retryable: Predicate deciding whether an exception is transient.
            operation: Name used in log messages.

        Returns:
            Whatever ``func`` returns.

        Raises:
            Exception: The last exception raised by ``func``.
        """
        attempts = max(1, self.max_attempts)

        for attempt in range(attempts):
            try:
                return func()
            except Exception as e:
                last_attempt = attempt + 1 >= attempts
                if last_attempt or not is_retryable(e):
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %d/%d): %s; retrying in %.2fs",
                    operation,
                    attempt + 1,
                    attempts,
                    e,
                    delay,
                )
                self.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise RuntimeError(f"{operation}: retry loop exited without result")
