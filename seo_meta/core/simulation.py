# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Replay a sequence of admission attempts against one provider."""

from __future__ import annotations

import logging
import time
from typing import Callable

from seo_meta.core.errors import RateLimitExceeded
from seo_meta.core.models import AdmissionDecision, SimulationResult
from seo_meta.core.rate_limiter import RateLimiter

logger = logging.getLogger("seo_meta")


def run_simulation(
    limiter: RateLimiter,
    backend: str,
    requests: int,
    *,
    interval: float = 0.0,
    wait: bool = False,
    max_wait: float = 30.0,
    sleep: Callable[[float], None] = time.sleep,
) -> SimulationResult:
    """Issue ``requests`` admission attempts for ``backend``.

    With ``wait`` each attempt goes through ``wait_and_acquire``; otherwise
    through ``acquire``, counting RateLimitExceeded as a denial.
    """
    decisions: list[AdmissionDecision] = []

    for attempt in range(1, requests + 1):
        wait_time = 0.0
        if wait:
            allowed = limiter.wait_and_acquire(backend, max_wait)
        else:
            try:
                allowed = limiter.acquire(backend)
            except RateLimitExceeded as exc:
                logger.info("Attempt %d denied: %s", attempt, exc)
                allowed = False
                wait_time = exc.wait_time
        if not allowed and wait_time == 0.0:
            wait_time = limiter.get_wait_time(backend)

        decisions.append(
            AdmissionDecision(
                attempt=attempt,
                backend=backend,
                allowed=allowed,
                wait_time=wait_time,
            )
        )
        logger.debug("Attempt %d for %s: %s", attempt, backend, "allowed" if allowed else "denied")

        if interval > 0 and attempt < requests:
            sleep(interval)

    admitted = sum(1 for d in decisions if d.allowed)
    return SimulationResult(
        backend=backend,
        total=len(decisions),
        admitted=admitted,
        denied=len(decisions) - admitted,
        decisions=decisions,
    )


def print_summary(result: SimulationResult, limiter: RateLimiter) -> None:
    """Print a human-readable simulation summary to the console."""
    status = limiter.status(result.backend)
    lines = [
        "",
        "=" * 40,
        "  seo-meta Rate Limit Simulation",
        "=" * 40,
        f"  Backend:      {result.backend}",
        f"  Enabled:      {limiter.is_enabled()}",
        f"  Attempts:     {result.total}",
        f"  Admitted:     {result.admitted}",
        f"  Denied:       {result.denied}",
        f"  Tokens left:  {status.available_tokens:.2f}",
        f"  Next token:   {status.wait_time:.2f}s",
        "=" * 40,
        "",
    ]
    logger.info("\n".join(lines))
