"""In-memory token bucket rate limiter with background replenishment.

Notes:
- Every identifier owns an integer balance in ``[0, capacity]``.
- A single daemon thread adds one token to every known bucket each period.
  The effective period is the configured one plus the time spent sweeping.
- Refills share the decision lock, so a sweep briefly serializes with
  request handling. Fine at in-memory scale; the first bottleneck if the
  number of distinct identifiers grows large.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from ratelimiter.adapters.rate_limit.base import AbstractRateLimiter, Clock
from ratelimiter.core.errors import RateLimitInvariantError

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter(AbstractRateLimiter):
    """Per-identifier token buckets refilled by a background thread.

    A fresh identifier starts with a full bucket and immediately spends one
    token on its first request.
    """

    strategy = "tokenbucket"

    def __init__(
        self,
        *,
        capacity: int = 10,
        refill_period_seconds: float = 1.0,
        clock: Clock = time.time,
        start_refill: bool = True,
    ) -> None:
        """Initialize the buckets and, optionally, the refill thread.

        Args:
            capacity: Maximum tokens per identifier.
            refill_period_seconds: Seconds between refill sweeps.
            clock: Time source; only used for logging refill timings.
            start_refill: Start the background refill thread. Tests disable it
                and call ``refill()`` directly.

        Raises:
            ValueError: If capacity or refill_period_seconds are invalid.
        """
        super().__init__(limit=capacity, window_seconds=refill_period_seconds, clock=clock)
        if self._window_seconds > threading.TIMEOUT_MAX:
            raise ValueError(f"refill_period_seconds must be <= {threading.TIMEOUT_MAX}")
        self._tokens_by_key: dict[str, int] = {}
        self._fault: RateLimitInvariantError | None = None
        self._stop_event = threading.Event()
        self._refill_thread: threading.Thread | None = None

        if start_refill:
            self._refill_thread = threading.Thread(
                target=self._run_refill_loop,
                name="token-bucket-refill",
                daemon=True,
            )
            self._refill_thread.start()

    @property
    def capacity(self) -> int:
        return self._limit

    def limit_exceeded(self, identifier: str) -> bool:
        with self._lock:
            self._raise_if_faulted()

            tokens = self._tokens_by_key.get(identifier)
            if tokens is None:
                self._tokens_by_key[identifier] = self._limit - 1
                return False

            if tokens > 0:
                self._tokens_by_key[identifier] = tokens - 1
                return False

            logger.debug(
                "rate_limit.bucket_empty",
                extra={"strategy": self.strategy, "capacity": self._limit},
            )
            return True

    def refill(self) -> None:
        """Add one token to every bucket below capacity.

        Raises:
            RateLimitInvariantError: If a bucket holds more than ``capacity``
                tokens; the limiter then refuses further decisions.
        """
        with self._lock:
            self._raise_if_faulted()

            for identifier, tokens in self._tokens_by_key.items():
                if tokens > self._limit:
                    self._fault = RateLimitInvariantError(
                        code="token_balance_above_capacity",
                        message="Token balance exceeds bucket capacity",
                        details={"context": {"tokens": tokens, "capacity": self._limit}},
                    )
                    raise self._fault
                if tokens < self._limit:
                    self._tokens_by_key[identifier] = tokens + 1

    def _raise_if_faulted(self) -> None:
        fault = self._fault
        if fault is not None:
            raise RateLimitInvariantError(
                code=fault.code,
                message=fault.message,
                details=fault.details,
            ) from fault

    def tokens(self, identifier: str) -> int | None:
        """Return the current balance for ``identifier`` (None if unseen)."""

        with self._lock:
            return self._tokens_by_key.get(identifier)

    def _run_refill_loop(self) -> None:
        while not self._stop_event.wait(self._window_seconds):
            started = self._clock()
            try:
                self.refill()
            except RateLimitInvariantError as exc:
                logger.critical(
                    "rate_limit.refill_fault",
                    extra={"strategy": self.strategy, "error_code": exc.code},
                )
                return
            logger.debug(
                "rate_limit.refilled",
                extra={
                    "strategy": self.strategy,
                    "sweep_ms": round((self._clock() - started) * 1000, 3),
                },
            )

    def close(self) -> None:
        """Stop the refill thread and wait for it to exit."""

        self._stop_event.set()
        thread = self._refill_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(1.0, self._window_seconds))
        self._refill_thread = None

    def tracked_identifiers(self) -> int:
        with self._lock:
            return len(self._tokens_by_key)

    def stats(self) -> dict[str, Any]:
        data = super().stats()
        data["refill_running"] = self._refill_thread is not None and self._refill_thread.is_alive()
        data["faulted"] = self._fault is not None
        return data
