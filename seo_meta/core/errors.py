# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Exceptions raised by generation providers and the rate limiter."""

from __future__ import annotations

import math


class ProviderError(Exception):
    """Raised when a generation provider cannot produce a result."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderCommunicationError(ProviderError):
    """Raised on transport-level failures talking to a provider."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(provider, f"Provider '{provider}' communication error: {reason}")


class RateLimitExceeded(ProviderError):
    """Raised when a provider's token bucket is exhausted.

    Attributes:
        provider: Backend name whose bucket is empty.
        wait_time: Seconds until the next token, for the caller's backoff.
            ``math.inf`` when the bucket never refills.
    """

    def __init__(self, provider: str, wait_time: float) -> None:
        self.wait_time = wait_time
        retry = "never" if math.isinf(wait_time) else f"after {wait_time:.2f}s"
        super().__init__(
            provider,
            f"Rate limit exceeded for provider '{provider}'. Retry {retry}",
        )
