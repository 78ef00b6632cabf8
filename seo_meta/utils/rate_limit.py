# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Token bucket rate limiter."""

from __future__ import annotations

import math
import threading
import time
from typing import Callable


class TokenBucket:
    """Thread-safe continuous-refill token bucket.

    Fractional tokens accumulate with elapsed time, so rates below one
    request per second work and bursts are bounded by ``capacity``.

    Args:
        capacity: Maximum number of tokens, i.e. the largest burst (>= 1).
        refill_rate: Tokens added per second (>= 0).
        clock: Monotonic time source in seconds. Replaceable for tests.
    """

    def __init__(
        self,
        capacity: int,
        refill_rate: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if refill_rate < 0:
            raise ValueError(f"refill_rate must be >= 0, got {refill_rate}")
        self._capacity = capacity
        self._refill_rate = refill_rate
        self._clock = clock
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def refill_rate(self) -> float:
        return self._refill_rate

    def consume(self, tokens: float = 1) -> bool:
        """Take ``tokens`` from the bucket.

        Returns:
            True if the tokens were available and removed, False otherwise.
            A failed call leaves the bucket untouched.
        """
        _check_amount(tokens)
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            return False

    def has_tokens(self, tokens: float = 1) -> bool:
        """Check whether ``tokens`` could be consumed right now."""
        _check_amount(tokens)
        with self._lock:
            self._refill()
            return self._tokens >= tokens

    def available_tokens(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens

    def time_until_next_token(self) -> float:
        """Seconds until one whole token is available.

        Returns 0.0 when a token is already available and ``math.inf`` when
        the bucket is empty and never refills.
        """
        with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                return 0.0
            if self._refill_rate == 0:
                return math.inf
            return (1.0 - self._tokens) / self._refill_rate

    def reset(self) -> None:
        """Restore the bucket to full capacity."""
        with self._lock:
            self._tokens = float(self._capacity)
            self._last_refill = self._clock()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time. Must be called under lock."""
        now = self._clock()
        added = (now - self._last_refill) * self._refill_rate
        # Timestamp only advances when something was added, so back-to-back
        # calls with no elapsed time stay idempotent.
        if added > 0:
            self._tokens = min(float(self._capacity), self._tokens + added)
            self._last_refill = now


def _check_amount(tokens: float) -> None:
    if tokens <= 0:
        raise ValueError(f"tokens must be > 0, got {tokens}")
