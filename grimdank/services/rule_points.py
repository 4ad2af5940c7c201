"""Heuristic point costs for rules, derived from their name and description."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from .. import schemas
from .points_config import PointsConfig, points_config

MIN_RULE_POINTS = 1
MAX_RULE_POINTS = 75

TIER_SCALING = (1.0, 1.1, 1.21)

BASE_EFFECTIVENESS_WEIGHTS = {
    "minimal": 1.0,
    "moderate": 3.0,
    "strong": 5.0,
    "overpowered": 8.0,
}
DEFAULT_BASE_WEIGHT = BASE_EFFECTIVENESS_WEIGHTS["moderate"]

FREQUENCY_MULTIPLIERS = {
    "passive": 1.0,
    "conditional": 0.7,
    "limited": 0.4,
}
DEFAULT_FREQUENCY_MULTIPLIER = FREQUENCY_MULTIPLIERS["conditional"]

NUMBER_SUFFIXES = ("s", "th", "st", "nd", "rd")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class RuleEffectiveness:
    base_value: str = "moderate"
    multiplier: float = 1.0
    frequency: str = "conditional"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def round_half_up(value: float) -> int:
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def _label(value: Any) -> str:
    return str(value or "").strip().casefold()


def _count_matches(text: str, keywords: Iterable[str]) -> int:
    return sum(1 for keyword in keywords if keyword and keyword in text)


def _cascade(counts: Sequence[tuple[str, int]], blocker: Sequence[int], fallback: str) -> str:
    for (label, count), blocking in zip(counts, blocker):
        if count >= 2 or (count >= 1 and blocking == 0):
            return label
    return fallback


def analyze_base_effectiveness(text: str, cfg: PointsConfig | None = None) -> str:
    cfg = cfg or points_config()
    text = text.lower()
    overpowered = _count_matches(text, cfg.group("overpowered"))
    strong = _count_matches(text, cfg.group("strong"))
    moderate = _count_matches(text, cfg.group("moderate"))
    minimal = _count_matches(text, cfg.group("minimal"))
    return _cascade(
        [("overpowered", overpowered), ("strong", strong), ("moderate", moderate)],
        [strong, moderate, minimal],
        "minimal",
    )


def analyze_frequency(text: str, cfg: PointsConfig | None = None) -> str:
    cfg = cfg or points_config()
    text = text.lower()
    passive = _count_matches(text, cfg.group("passive"))
    limited = _count_matches(text, cfg.group("limited"))
    frequent = _count_matches(text, cfg.group("frequent"))
    if limited >= 2 or (limited >= 1 and frequent == 0):
        return "limited"
    if passive >= 2 or (passive >= 1 and frequent == 0):
        return "passive"
    if frequent >= 1:
        return "frequent"
    return "conditional"


def extract_numbers(text: str) -> list[int]:
    numbers: list[int] = []
    for word in text.split():
        clean = word
        for suffix in NUMBER_SUFFIXES:
            if clean.endswith(suffix):
                clean = clean[: -len(suffix)]
        if _INTEGER_RE.fullmatch(clean):
            numbers.append(int(clean))
    return numbers


def _numeric_base_value(numbers: Sequence[int], current: str, cfg: PointsConfig) -> str:
    if not numbers:
        return current
    highest = max(numbers)
    if highest >= cfg.overpowered_threshold:
        return "overpowered"
    if highest >= cfg.strong_numerical_threshold:
        return "strong"
    if highest >= cfg.moderate_numerical_threshold:
        return "moderate"
    return current


def rule_text(name: str | None, description: str | None, rule_type: str | None = None) -> str:
    parts = [name or "", description or ""]
    if rule_type:
        parts.append(rule_type)
    return " ".join(parts).lower()


def classify_text(
    name: str | None,
    description: str | None,
    rule_type: str | None = None,
    cfg: PointsConfig | None = None,
) -> RuleEffectiveness:
    cfg = cfg or points_config()
    text = rule_text(name, description, rule_type)

    frequency = analyze_frequency(text, cfg)
    base_value = analyze_base_effectiveness(text, cfg)
    # Numbers in the text take precedence over the keyword verdict.
    base_value = _numeric_base_value(extract_numbers(text), base_value, cfg)

    multiplier = min(max(1.0, cfg.min_multiplier), cfg.max_multiplier)
    return RuleEffectiveness(base_value=base_value, multiplier=multiplier, frequency=frequency)


def base_effectiveness_weight(base_value: str | None) -> float:
    return BASE_EFFECTIVENESS_WEIGHTS.get(_label(base_value), DEFAULT_BASE_WEIGHT)


def frequency_multiplier(frequency: str | None) -> float:
    return FREQUENCY_MULTIPLIERS.get(_label(frequency), DEFAULT_FREQUENCY_MULTIPLIER)


def _safe_multiplier(value: Any, cfg: PointsConfig | None = None) -> float:
    cfg = cfg or points_config()
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(numeric):
        return 1.0
    return min(max(numeric, cfg.min_multiplier), cfg.max_multiplier)


def final_score(effectiveness: RuleEffectiveness) -> float:
    return (
        base_effectiveness_weight(effectiveness.base_value)
        * _safe_multiplier(effectiveness.multiplier)
        * frequency_multiplier(effectiveness.frequency)
    )


def base_points(effectiveness: RuleEffectiveness) -> float:
    value = math.pow(2, (final_score(effectiveness) - 1) / 2)
    return min(max(value, float(MIN_RULE_POINTS)), float(MAX_RULE_POINTS))


def calculate_points(effectiveness: RuleEffectiveness) -> list[int]:
    base = base_points(effectiveness)

    tier1 = round_half_up(base * TIER_SCALING[0])
    tier2 = round_half_up(base * TIER_SCALING[1])
    tier3 = round_half_up(base * TIER_SCALING[2])

    if tier2 <= tier1:
        tier2 = tier1 + 1
    if tier3 <= tier2:
        tier3 = tier2 + 1

    return [min(tier, MAX_RULE_POINTS) for tier in (tier1, tier2, tier3)]


def calculate_points_from_description(
    name: str | None, description: str | None, rule_type: str | None = None
) -> list[int]:
    return calculate_points(classify_text(name, description, rule_type))


def points_explanation(effectiveness: RuleEffectiveness, points: Sequence[int] | None = None) -> str:
    tiers = list(points) if points is not None else calculate_points(effectiveness)
    base_value = _label(effectiveness.base_value) or "moderate"
    frequency = _label(effectiveness.frequency) or "conditional"
    return (
        f"Base effectiveness '{base_value}' weighs {base_effectiveness_weight(base_value):.1f}, "
        f"multiplied by {_safe_multiplier(effectiveness.multiplier):.2f} and by "
        f"{frequency_multiplier(frequency):.1f} for '{frequency}' use, "
        f"giving a score of {final_score(effectiveness):.2f} "
        f"and tier costs of {'/'.join(str(tier) for tier in tiers)} points."
    )


def calculate_rule_points(rule: schemas.Rule) -> list[int]:
    return calculate_points(classify_text(rule.name, rule.description, getattr(rule, "type", None)))


def rule_points_breakdown(rule: schemas.Rule) -> dict[str, Any]:
    effectiveness = classify_text(rule.name, rule.description, getattr(rule, "type", None))
    points = calculate_points(effectiveness)
    return {
        "rule_id": rule.id,
        "rule_name": rule.name,
        "calculated_points": points,
        "effectiveness": effectiveness.to_dict(),
        "explanation": points_explanation(effectiveness, points),
        "tier_scaling": {
            "tier_1": points[0],
            "tier_2": points[1],
            "tier_3": points[2],
            "tier_2_multiplier": TIER_SCALING[1],
            "tier_3_multiplier": TIER_SCALING[2],
        },
    }


def bulk_calculate_points(rules: Iterable[schemas.Rule]) -> list[schemas.Rule]:
    return [rule.model_copy(update={"points": calculate_rule_points(rule)}) for rule in rules]
