# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""CLI entry point for seo-meta."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from seo_meta import __version__
from seo_meta.core.config import SeoConfig
from seo_meta.core.logging import setup_logging, get_logger
from seo_meta.core.options import SeoOptions
from seo_meta.core.rate_limiter import RateLimiter


# Exit codes
EXIT_OK = 0
EXIT_PARTIAL = 2
EXIT_ALL_DENIED = 3

_RATE_LIMIT_KEYS = ("requests_per_minute", "block_on_limit", "rate_limiting_enabled")


def _common_options(fn):
    """Shared Click options that map to SeoOptions fields."""
    decorators = [
        click.option("--requests-per-minute", type=click.IntRange(min=1), default=None, help="Per-provider request budget."),
        click.option("--block/--no-block", "block_on_limit", default=None, help="Raise on an empty bucket instead of returning denied."),
        click.option("--enabled/--disabled", "rate_limiting_enabled", default=None, help="Turn rate limiting on or off."),
        click.option("--verbose", is_flag=True, default=None, help="Verbose console output."),
        click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Also write JSONL logs here."),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def _build_options(**cli_kwargs) -> SeoOptions:
    """Build SeoOptions from CLI kwargs, filtering out unset (None) values.

    Only explicitly-provided CLI flags are passed to SeoOptions as init
    overrides. Unset flags fall through to env vars → YAML → defaults.
    """
    overrides: dict = {}
    rate_limiting: dict = {}
    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key == "rate_limiting_enabled":
            rate_limiting["enabled"] = value
        elif key in _RATE_LIMIT_KEYS:
            rate_limiting[key] = value
        else:
            overrides[key] = value
    if rate_limiting:
        overrides["rate_limiting"] = rate_limiting
    return SeoOptions(**overrides)


def _exit_code(total: int, denied: int, strict: bool) -> int:
    """Determine exit code from simulation results."""
    if total == 0:
        return EXIT_OK
    if denied == 0:
        return EXIT_OK
    if denied == total:
        return EXIT_ALL_DENIED
    if strict:
        return EXIT_PARTIAL
    return EXIT_OK


@click.group()
@click.version_option(version=__version__, prog_name="seo_meta")
def cli() -> None:
    """SEO metadata generation with per-provider rate limiting."""


@cli.command()
@_common_options
def limits(**kwargs):
    """Show the bucket sizing derived from the configuration."""
    options = _build_options(**kwargs)
    setup_logging(verbose=options.verbose, jsonl_path=options.log_file)
    log = get_logger()

    limiter = RateLimiter(SeoConfig.from_options(options))
    if not limiter.is_enabled():
        log.info("Rate limiting is disabled")
        sys.exit(EXIT_OK)

    sizing = limiter.bucket_sizing()
    click.echo(f"requests_per_minute: {options.rate_limiting.requests_per_minute}")
    click.echo(f"capacity: {sizing.capacity}")
    click.echo(f"refill_rate: {sizing.refill_rate:g}/s")
    click.echo(f"block_on_limit: {str(limiter.block_on_limit).lower()}")
    sys.exit(EXIT_OK)


@cli.command()
@click.argument("backend")
@click.option("--requests", "requests_", type=click.IntRange(min=0), default=10, show_default=True, help="Number of admission attempts.")
@click.option("--interval", type=click.FloatRange(min=0), default=0.0, show_default=True, help="Seconds between attempts.")
@click.option("--wait", is_flag=True, default=False, help="Wait for tokens instead of failing fast.")
@click.option("--max-wait", type=click.FloatRange(min=0), default=30.0, show_default=True, help="Max seconds to wait per attempt with --wait.")
@click.option("--strict", is_flag=True, default=False, help="Exit 2 when some attempts are denied.")
@_common_options
def simulate(backend, requests_, interval, wait, max_wait, strict, **kwargs):
    """Replay admission attempts against one provider."""
    options = _build_options(**kwargs)
    setup_logging(verbose=options.verbose, jsonl_path=options.log_file)

    from seo_meta.core.simulation import print_summary, run_simulation

    limiter = RateLimiter(SeoConfig.from_options(options))
    result = run_simulation(
        limiter,
        backend,
        requests_,
        interval=interval,
        wait=wait,
        max_wait=max_wait,
    )
    print_summary(result, limiter)
    sys.exit(_exit_code(result.total, result.denied, strict))


if __name__ == "__main__":
    cli()
