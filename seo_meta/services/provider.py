# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Generation provider base class and fallback registry."""

from __future__ import annotations

import logging
import random
import time
from abc import ABC, abstractmethod

from seo_meta.core.config import SeoConfig
from seo_meta.core.errors import ProviderCommunicationError, ProviderError, RateLimitExceeded
from seo_meta.core.logging import log_event
from seo_meta.core.options import SeoOptions
from seo_meta.core.rate_limiter import RateLimiter

logger = logging.getLogger("seo_meta")


class Provider(ABC):
    """A named text-generation backend.

    Subclasses implement ``_send``. ``generate`` takes one rate-limit token
    per request, then retries transport failures with exponential backoff.
    Rate-limit denials are never retried here.
    """

    name: str = "provider"

    def __init__(
        self,
        options: SeoOptions | None = None,
        rate_limiter: RateLimiter | None = None,
        *,
        base_delay: float = 1.0,
        multiplier: float = 2.0,
        jitter: float = 0.25,
    ) -> None:
        if options is None:
            options = SeoOptions()
        self.options = options
        self.rate_limiter = rate_limiter
        self.model = options.ai.model
        self.timeout = options.ai.timeout
        self.max_retries = options.ai.max_retries
        self._base_delay = base_delay
        self._multiplier = multiplier
        self._jitter = jitter

    def is_available(self) -> bool:
        return True

    def generate(self, prompt: str) -> str:
        """Generate text for ``prompt``.

        Raises:
            RateLimitExceeded: The provider's bucket is exhausted and the
                limiter is configured to block on limit.
            ProviderError: The provider failed after all retries, or the
                limiter denied the request without raising.
        """
        if self.rate_limiter is not None and not self.rate_limiter.acquire(self.name):
            raise ProviderError(self.name, f"Provider '{self.name}' request denied by rate limiter")
        return self._send_with_retry(prompt)

    @abstractmethod
    def _send(self, prompt: str) -> str:
        """Perform one request against the backend."""

    def _send_with_retry(self, prompt: str) -> str:
        for attempt in range(self.max_retries + 1):
            try:
                return self._send(prompt)
            except ProviderCommunicationError as exc:
                if attempt >= self.max_retries:
                    logger.error(
                        "Retry exhausted for %s after %d attempts: %s",
                        self.name,
                        attempt + 1,
                        exc,
                    )
                    raise
                delay = _compute_delay(attempt, self._base_delay, self._multiplier, self._jitter)
                logger.warning(
                    "Retry %d/%d for %s after %.2fs: %s",
                    attempt + 1,
                    self.max_retries,
                    self.name,
                    delay,
                    exc,
                )
                time.sleep(delay)
        raise ProviderError(self.name, "unreachable")  # pragma: no cover


def _compute_delay(
    attempt: int,
    base_delay: float,
    multiplier: float,
    jitter: float,
) -> float:
    """delay = base_delay * multiplier^attempt * (1 ± jitter), never negative."""
    delay = base_delay * (multiplier ** attempt)
    jitter_range = delay * jitter
    delay += random.uniform(-jitter_range, jitter_range)
    return max(0.0, delay)


class ProviderRegistry:
    """Holds providers by name and runs generation across a fallback chain.

    Every registered provider without a limiter of its own draws from the
    registry's shared ``rate_limiter``, one bucket per provider name.
    """

    def __init__(
        self,
        options: SeoOptions | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        if options is None:
            options = SeoOptions()
        if rate_limiter is None:
            rate_limiter = RateLimiter(SeoConfig.from_options(options))
        self.options = options
        self.rate_limiter = rate_limiter
        self._providers: dict[str, Provider] = {}

    def register(self, provider: Provider) -> None:
        if provider.rate_limiter is None:
            provider.rate_limiter = self.rate_limiter
        self._providers[provider.name] = provider

    def get(self, name: str) -> Provider:
        try:
            return self._providers[name]
        except KeyError:
            raise ProviderError(name, f"Provider '{name}' is not registered") from None

    def has(self, name: str) -> bool:
        return name in self._providers

    def fallback_chain(self) -> list[Provider]:
        """Primary provider followed by configured fallbacks.

        Unknown, duplicate and unavailable providers are skipped.
        """
        names = [self.options.ai.provider, *self.options.ai.fallback_providers]
        chain: list[Provider] = []
        seen: set[str] = set()
        for name in names:
            if name in seen or name not in self._providers:
                continue
            seen.add(name)
            provider = self._providers[name]
            if provider.is_available():
                chain.append(provider)
        return chain

    def generate_with_fallback(self, prompt: str) -> str:
        """Try each provider in the chain until one succeeds.

        Raises:
            ProviderError: Every provider failed (or none is available).
        """
        failures: dict[str, str] = {}
        for provider in self.fallback_chain():
            try:
                return provider.generate(prompt)
            except RateLimitExceeded as exc:
                log_event(
                    logging.INFO,
                    f"Skipping {provider.name}, rate limited for {exc.wait_time:.2f}s",
                    backend=provider.name,
                    event="fallback",
                    error=str(exc),
                )
                failures[provider.name] = str(exc)
            except ProviderError as exc:
                log_event(
                    logging.WARNING,
                    f"Provider {provider.name} failed: {exc}",
                    backend=provider.name,
                    event="fallback",
                    error=str(exc),
                )
                failures[provider.name] = str(exc)

        if not failures:
            raise ProviderError("registry", "No available providers configured")
        lines = [f"- {name}: {error}" for name, error in failures.items()]
        raise ProviderError("registry", "All providers failed:\n" + "\n".join(lines))
