"""seo-meta — SEO metadata generation with per-provider rate limiting."""

__version__ = "0.1.0"

from seo_meta.core.config import SeoConfig
from seo_meta.core.errors import ProviderCommunicationError, ProviderError, RateLimitExceeded
from seo_meta.core.options import SeoOptions
from seo_meta.core.rate_limiter import RateLimiter
from seo_meta.utils.rate_limit import TokenBucket


def create_rate_limiter(options: SeoOptions | None = None) -> RateLimiter:
    """Build a RateLimiter from settings.

    This is the primary library entry point for admission control.

    Args:
        options: Configuration options. Uses env/YAML/defaults if not provided.

    Returns:
        A RateLimiter with no buckets yet.
    """
    return RateLimiter(SeoConfig.from_options(options))


__all__ = [
    "__version__",
    "create_rate_limiter",
    "RateLimiter",
    "RateLimitExceeded",
    "ProviderError",
    "ProviderCommunicationError",
    "SeoConfig",
    "SeoOptions",
    "TokenBucket",
]
