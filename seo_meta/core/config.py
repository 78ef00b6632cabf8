# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Dotted-key configuration lookup."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from seo_meta.core.options import SeoOptions


class SeoConfig:
    """Read/write view over a nested configuration mapping.

    Keys are dot-separated paths, e.g. ``"rate_limiting.enabled"``.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = copy.deepcopy(dict(values or {}))

    @classmethod
    def from_options(cls, options: SeoOptions | None = None) -> SeoConfig:
        """Build a config from settings (env, YAML and defaults when omitted)."""
        if options is None:
            options = SeoOptions()
        return cls(options.model_dump())

    def get(self, key: str, default: Any = None) -> Any:
        value: Any = self._values
        for segment in key.split("."):
            if not isinstance(value, Mapping) or segment not in value:
                return default
            value = value[segment]
        return value

    def has(self, key: str) -> bool:
        value: Any = self._values
        for segment in key.split("."):
            if not isinstance(value, Mapping) or segment not in value:
                return False
            value = value[segment]
        return True

    def set(self, key: str, value: Any) -> SeoConfig:
        """Set ``key`` to ``value``, creating intermediate sections."""
        *parents, last = key.split(".")
        node = self._values
        for segment in parents:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[last] = value
        return self

    def all(self) -> dict[str, Any]:
        return copy.deepcopy(self._values)
