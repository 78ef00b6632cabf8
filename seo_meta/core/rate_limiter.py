# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Per-provider admission control over token buckets."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable

from seo_meta.core.config import SeoConfig
from seo_meta.core.errors import RateLimitExceeded
from seo_meta.core.logging import log_event
from seo_meta.core.models import BucketSizing, BucketStatus
from seo_meta.utils.rate_limit import TokenBucket

logger = logging.getLogger("seo_meta")

DEFAULT_REQUESTS_PER_MINUTE = 10
DEFAULT_MAX_WAIT_SECONDS = 30.0

# Smallest nap in wait_and_acquire; float residue in the refill math could
# otherwise produce sleeps too short to move the clock.
_MIN_SLEEP = 0.001


class RateLimiter:
    """Throttles outbound requests to named generation providers.

    One token bucket per provider name is created lazily on first use and
    lives as long as the limiter. When rate limiting is disabled in the
    config every call is a pass-through and no bucket is ever created.

    Args:
        config: Dotted-key configuration. Built from ``SeoOptions()`` when
            omitted.
        clock: Monotonic time source shared by all buckets.
        sleep: Suspension primitive used by ``wait_and_acquire``.

    Raises:
        ValueError: The configured requests per minute is below 1.
    """

    def __init__(
        self,
        config: SeoConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if config is None:
            config = SeoConfig.from_options()
        self._enabled = bool(config.get("rate_limiting.enabled", True))
        self._requests_per_minute = int(
            config.get("rate_limiting.requests_per_minute", DEFAULT_REQUESTS_PER_MINUTE)
        )
        if self._requests_per_minute < 1:
            raise ValueError(
                f"rate_limiting.requests_per_minute must be >= 1, got {self._requests_per_minute}"
            )
        self._block_on_limit = bool(config.get("rate_limiting.block_on_limit", True))
        self._clock = clock
        self._sleep = sleep
        self._buckets: dict[str, TokenBucket] = {}
        self._registry_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def block_on_limit(self) -> bool:
        return self._block_on_limit

    def is_enabled(self) -> bool:
        return self._enabled

    def bucket_sizing(self) -> BucketSizing:
        """Derive bucket capacity and refill rate from requests per minute.

        Burst capacity is half the per-minute budget. The refill rate is
        rounded up to whole tokens per second, so the sustained rate can
        exceed the configured figure for budgets that are not multiples of 60.
        """
        rpm = self._requests_per_minute
        return BucketSizing(
            capacity=max(1, rpm // 2),
            refill_rate=float(math.ceil(rpm / 60)),
        )

    def get_bucket(self, provider: str) -> TokenBucket:
        """Return the bucket for ``provider``, creating it on first use."""
        bucket = self._buckets.get(provider)
        if bucket is not None:
            return bucket
        with self._registry_lock:
            bucket = self._buckets.get(provider)
            if bucket is None:
                sizing = self.bucket_sizing()
                bucket = TokenBucket(sizing.capacity, sizing.refill_rate, clock=self._clock)
                self._buckets[provider] = bucket
                logger.debug(
                    "Created bucket for %s (capacity=%d, refill_rate=%.2f/s)",
                    provider,
                    sizing.capacity,
                    sizing.refill_rate,
                )
            return bucket

    def backends(self) -> list[str]:
        """Names of providers that have a bucket."""
        with self._registry_lock:
            return sorted(self._buckets)

    def acquire(self, provider: str) -> bool:
        """Take one token for a request to ``provider``.

        Returns:
            True when the request may proceed. False when the bucket is empty
            and blocking on limit is disabled.

        Raises:
            RateLimitExceeded: The bucket is empty and blocking on limit is
                enabled.
        """
        if not self._enabled:
            return True

        bucket = self.get_bucket(provider)
        if bucket.consume():
            return True

        wait_time = bucket.time_until_next_token()
        log_event(
            logging.WARNING,
            f"Rate limit reached for {provider}, next token in {wait_time:.2f}s",
            backend=provider,
            event="rate_limited",
            details=f"wait_time={wait_time:.3f}",
        )
        if self._block_on_limit:
            raise RateLimitExceeded(provider, wait_time)
        return False

    def can_acquire(self, provider: str) -> bool:
        """Check whether a request could proceed now without taking a token."""
        if not self._enabled:
            return True
        return self.get_bucket(provider).has_tokens()

    def wait_and_acquire(
        self,
        provider: str,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        cancel: threading.Event | None = None,
    ) -> bool:
        """Wait up to ``max_wait_seconds`` for a token, then try to take it.

        Never raises RateLimitExceeded. If ``cancel`` is set while waiting,
        returns False without consuming a token.

        Returns:
            True if a token was acquired.
        """
        if not self._enabled:
            return True

        bucket = self.get_bucket(provider)
        waited = 0.0
        while not bucket.has_tokens() and waited < max_wait_seconds:
            sleep_for = min(bucket.time_until_next_token(), max_wait_seconds - waited)
            if sleep_for <= 0:
                break
            sleep_for = min(max(sleep_for, _MIN_SLEEP), max_wait_seconds - waited)
            logger.debug("Waiting %.3fs for a %s token", sleep_for, provider)
            if cancel is not None:
                if cancel.wait(sleep_for):
                    logger.debug("Wait for %s token cancelled", provider)
                    return False
            else:
                self._sleep(sleep_for)
            waited += sleep_for

        if cancel is not None and cancel.is_set():
            return False
        return bucket.consume()

    def get_wait_time(self, provider: str) -> float:
        """Seconds until ``provider`` has a token (0.0 when one is available)."""
        if not self._enabled:
            return 0.0
        return self.get_bucket(provider).time_until_next_token()

    def get_available_tokens(self, provider: str) -> float:
        """Current token level for ``provider``; ``math.inf`` when disabled."""
        if not self._enabled:
            return math.inf
        return self.get_bucket(provider).available_tokens()

    def status(self, provider: str) -> BucketStatus:
        sizing = self.bucket_sizing()
        return BucketStatus(
            backend=provider,
            capacity=sizing.capacity,
            refill_rate=sizing.refill_rate,
            available_tokens=self.get_available_tokens(provider),
            wait_time=self.get_wait_time(provider),
        )

    def reset(self, provider: str) -> None:
        """Refill ``provider``'s bucket. Unknown providers are ignored."""
        bucket = self._buckets.get(provider)
        if bucket is not None:
            bucket.reset()
            logger.debug("Reset bucket for %s", provider)

    def reset_all(self) -> None:
        with self._registry_lock:
            buckets = list(self._buckets.values())
        for bucket in buckets:
            bucket.reset()
        logger.debug("Reset %d bucket(s)", len(buckets))
