from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from .rule_points import round_half_up

MIN_WEAPON_POINTS = 1
MAX_WEAPON_POINTS = 50

MAX_RANGE = 48
RANGE_STEP = 6.0
MAX_RANGE_SCORE = 8.0
MELEE_RANGE_SCORE = 1.0

VARIABLE_ATTACKS = 3
ATTACKS_TABLE = {1: 1.0, 2: 2.0, 3: 2.8, 4: 3.5, 5: 4.0, 6: 4.0}
AP_TABLE = {1: 1.5, 2: 2.0, 3: 2.5}

RANGED_WEIGHTS = (0.4, 0.4, 0.2)
MELEE_WEIGHTS = (0.1, 0.6, 0.3)
RANGED_TYPES = {"ranged", "weapon"}

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class WeaponStats:
    range: int = 0
    attacks: str = "1"
    ap: str = "0"
    type: str = "ranged"

    @classmethod
    def from_weapon(cls, weapon: Any) -> "WeaponStats":
        return cls(
            range=getattr(weapon, "range", 0) or 0,
            attacks=str(getattr(weapon, "attacks", "1")),
            ap=str(getattr(weapon, "ap", "0")),
            type=str(getattr(weapon, "type", "ranged") or ""),
        )


def _parse_int(value: Any) -> int | None:
    text = str(value if value is not None else "").strip()
    if _INTEGER_RE.fullmatch(text):
        return int(text)
    return None


def _weapon_kind(weapon_type: str | None) -> str:
    return str(weapon_type or "").strip().casefold()


def is_melee(weapon_type: str | None) -> bool:
    return _weapon_kind(weapon_type) == "melee"


def range_score(range_value: Any, weapon_type: str | None) -> float:
    if is_melee(weapon_type):
        return MELEE_RANGE_SCORE
    try:
        capped = min(int(range_value), MAX_RANGE)
    except (TypeError, ValueError):
        capped = 0
    return min(capped / RANGE_STEP, MAX_RANGE_SCORE)


def attacks_value(attacks: Any) -> int:
    parsed = _parse_int(attacks)
    if parsed is not None:
        return parsed
    if str(attacks or "").strip().upper() == "X":
        return VARIABLE_ATTACKS
    return 1


def attacks_score(attacks: Any) -> float:
    value = attacks_value(attacks)
    if value <= 0:
        return 0.5
    if value in ATTACKS_TABLE:
        return ATTACKS_TABLE[value]
    return 4.0 + (value - 6) * 0.2


def ap_score(ap: Any) -> float:
    value = _parse_int(ap)
    if value is None or value <= 0:
        return 1.0
    return AP_TABLE.get(value, 3.0)


def stat_weights(weapon_type: str | None) -> tuple[float, float, float]:
    if _weapon_kind(weapon_type) in RANGED_TYPES:
        return RANGED_WEIGHTS
    return MELEE_WEIGHTS


def _points_from_score(combined: float) -> int:
    value = math.pow(1.6, combined / 2)
    value = min(max(value, float(MIN_WEAPON_POINTS)), float(MAX_WEAPON_POINTS))
    return round_half_up(value)


def combined_score(stats: WeaponStats) -> float:
    range_weight, attacks_weight, ap_weight = stat_weights(stats.type)
    return (
        range_score(stats.range, stats.type) * range_weight
        + attacks_score(stats.attacks) * attacks_weight
        + ap_score(stats.ap) * ap_weight
    )


def calculate_weapon_points(stats: WeaponStats) -> int:
    return _points_from_score(combined_score(stats))


def weapon_points_breakdown(stats: WeaponStats) -> dict[str, Any]:
    range_weight, attacks_weight, ap_weight = stat_weights(stats.type)
    scores = {
        "range": (stats.range, range_score(stats.range, stats.type), range_weight),
        "attacks": (stats.attacks, attacks_score(stats.attacks), attacks_weight),
        "ap": (stats.ap, ap_score(stats.ap), ap_weight),
    }
    breakdown: dict[str, Any] = {}
    combined = 0.0
    for key, (value, score, weight) in scores.items():
        weighted = score * weight
        combined += weighted
        breakdown[key] = {
            "value": value,
            "score": score,
            "weight": weight,
            "weighted": weighted,
        }
    breakdown["combined_score"] = combined
    breakdown["calculated_points"] = _points_from_score(combined)
    breakdown["weapon_type"] = stats.type
    return breakdown
