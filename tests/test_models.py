# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Tests for seo_meta.core.models and seo_meta.core.options."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from seo_meta.core.models import AdmissionDecision, BucketSizing, BucketStatus, SimulationResult
from seo_meta.core.options import AiOptions, RateLimitingOptions, SeoOptions


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    # Keep a stray seo.yaml in the working directory out of these tests.
    monkeypatch.chdir(tmp_path)


# --- Models ---


class TestBucketSizing:
    def test_fields(self):
        sizing = BucketSizing(capacity=5, refill_rate=1.0)
        assert sizing.capacity == 5
        assert sizing.refill_rate == 1.0

    def test_missing_field(self):
        with pytest.raises(ValidationError):
            BucketSizing(capacity=5)


class TestBucketStatus:
    def test_unbounded_tokens(self):
        status = BucketStatus(
            backend="openai", capacity=5, refill_rate=1.0,
            available_tokens=float("inf"), wait_time=0.0,
        )
        assert status.available_tokens == float("inf")


class TestSimulationResult:
    def test_defaults(self):
        result = SimulationResult(backend="openai", total=0, admitted=0, denied=0)
        assert result.decisions == []

    def test_decisions(self):
        decision = AdmissionDecision(attempt=1, backend="openai", allowed=False, wait_time=1.5)
        result = SimulationResult(
            backend="openai", total=1, admitted=0, denied=1, decisions=[decision],
        )
        assert result.decisions[0].wait_time == 1.5

    def test_decision_wait_defaults_to_zero(self):
        decision = AdmissionDecision(attempt=1, backend="openai", allowed=True)
        assert decision.wait_time == 0.0


# --- SeoOptions ---


class TestSeoOptions:
    def test_defaults(self):
        opts = SeoOptions()
        assert opts.enabled is True
        assert opts.mode == "manual"
        assert opts.ai.provider == "openai"
        assert opts.ai.timeout == 30
        assert opts.ai.max_retries == 3
        assert opts.ai.fallback_providers == []
        assert opts.rate_limiting.enabled is True
        assert opts.rate_limiting.requests_per_minute == 10
        assert opts.rate_limiting.block_on_limit is True
        assert opts.verbose is False
        assert opts.log_file is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SEO_VERBOSE", "true")
        monkeypatch.setenv("SEO_MODE", "hybrid")
        monkeypatch.setenv("SEO_RATE_LIMITING__REQUESTS_PER_MINUTE", "30")
        monkeypatch.setenv("SEO_RATE_LIMITING__BLOCK_ON_LIMIT", "false")
        opts = SeoOptions()
        assert opts.verbose is True
        assert opts.mode == "hybrid"
        assert opts.rate_limiting.requests_per_minute == 30
        assert opts.rate_limiting.block_on_limit is False
        assert opts.rate_limiting.enabled is True

    def test_yaml_file(self, tmp_path):
        (tmp_path / "seo.yaml").write_text(
            "rate_limiting:\n  enabled: false\n  requests_per_minute: 120\n"
            "ai:\n  provider: anthropic\n  fallback_providers: [openai, ollama]\n",
            encoding="utf-8",
        )
        opts = SeoOptions()
        assert opts.rate_limiting.enabled is False
        assert opts.rate_limiting.requests_per_minute == 120
        assert opts.ai.provider == "anthropic"
        assert opts.ai.fallback_providers == ["openai", "ollama"]

    def test_init_beats_env(self, monkeypatch):
        monkeypatch.setenv("SEO_RATE_LIMITING__REQUESTS_PER_MINUTE", "30")
        opts = SeoOptions(rate_limiting={"requests_per_minute": 6})
        assert opts.rate_limiting.requests_per_minute == 6

    def test_invalid_mode(self):
        with pytest.raises(ValidationError):
            SeoOptions(mode="auto")

    def test_requests_per_minute_must_be_positive(self):
        with pytest.raises(ValidationError):
            RateLimitingOptions(requests_per_minute=0)

    def test_max_retries_must_not_be_negative(self):
        with pytest.raises(ValidationError):
            AiOptions(max_retries=-1)
        assert AiOptions(max_retries=0).max_retries == 0

    def test_mode_switches(self):
        assert SeoOptions(mode="ai").is_ai_enabled() is True
        assert SeoOptions(mode="ai").is_manual_enabled() is False
        assert SeoOptions(mode="hybrid").is_ai_enabled() is True
        assert SeoOptions(mode="hybrid").is_manual_enabled() is True
        assert SeoOptions(mode="ai", enabled=False).is_ai_enabled() is False

    def test_log_file_path(self):
        opts = SeoOptions(log_file="logs/seo.jsonl")
        assert opts.log_file == Path("logs/seo.jsonl")
