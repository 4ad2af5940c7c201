"""Tunable keyword tables and thresholds for the rule points classifier."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

from .. import config
from ..data import keywords as keyword_catalog


@dataclass(frozen=True)
class PointsConfig:
    keywords: dict[str, tuple[str, ...]] = field(default_factory=dict)
    overpowered_threshold: int = 20
    strong_numerical_threshold: int = 10
    moderate_numerical_threshold: int = 6
    min_multiplier: float = 0.1
    max_multiplier: float = 2.0

    def group(self, name: str) -> tuple[str, ...]:
        return self.keywords.get(name, ())


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _merge_keywords(overrides: Any) -> dict[str, tuple[str, ...]]:
    merged: dict[str, tuple[str, ...]] = {}
    for group, defaults in keyword_catalog.KEYWORD_GROUPS.items():
        values = list(defaults)
        if isinstance(overrides, dict) and isinstance(overrides.get(group), list):
            values = [str(item).strip().lower() for item in overrides[group] if str(item).strip()]
        for extra in config.extra_keywords(group):
            if extra not in values:
                values.append(extra)
        merged[group] = tuple(values)
    return merged


def build_points_config(data: dict[str, Any] | None = None) -> PointsConfig:
    data = data or {}
    thresholds = data.get("numeric_thresholds")
    numeric: dict[str, int] = {}
    if isinstance(thresholds, dict):
        for key in ("overpowered", "strong", "moderate"):
            try:
                numeric[key] = int(thresholds[key])
            except (KeyError, TypeError, ValueError):
                continue
    return PointsConfig(
        keywords=_merge_keywords(data.get("keywords")),
        overpowered_threshold=numeric.get("overpowered", 20),
        strong_numerical_threshold=numeric.get("strong", 10),
        moderate_numerical_threshold=numeric.get("moderate", 6),
    )


@lru_cache()
def points_config() -> PointsConfig:
    return build_points_config(_read_config_file(config.POINTS_CONFIG_PATH))
