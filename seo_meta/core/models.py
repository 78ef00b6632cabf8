# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Pydantic data models for seo-meta."""

from __future__ import annotations

from pydantic import BaseModel


class BucketSizing(BaseModel):
    capacity: int
    refill_rate: float


class BucketStatus(BaseModel):
    backend: str
    capacity: int
    refill_rate: float
    available_tokens: float
    wait_time: float


class AdmissionDecision(BaseModel):
    attempt: int
    backend: str
    allowed: bool
    wait_time: float = 0.0


class SimulationResult(BaseModel):
    backend: str
    total: int
    admitted: int
    denied: int
    decisions: list[AdmissionDecision] = []
