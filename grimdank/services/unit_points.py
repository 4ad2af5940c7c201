"""Unit cost aggregation over rule, weapon and wargear references.

Missing references are skipped so that unfinished rosters still get a cost
estimate; the display path in :mod:`population` is strict instead.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from .. import schemas
from .resolver import NotFoundError, ReferenceResolver

logger = logging.getLogger(__name__)

MIN_BASE_COST = 5
STAT_COST_FACTOR = 2
BASE_COST_OFFSET = 10


@dataclass
class UnitPointsBreakdown:
    base_cost: int = 0
    unit_rules_cost: int = 0
    weapons_cost: int = 0
    weapon_rules_cost: int = 0
    wargear_cost: int = 0
    total_points: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def tier_index(tier: Any, size: int = 3) -> int:
    try:
        index = int(tier) - 1
    except (TypeError, ValueError):
        return 0
    if index < 0 or index >= size:
        return 0
    return index


def tier_cost(points: Sequence[int] | None, tier: Any) -> int:
    values = list(points or [])
    if not values:
        return 0
    return int(values[tier_index(tier, min(len(values), 3))])


def base_unit_cost(melee: int, ranged: int, morale: int, defense: int) -> int:
    stat_sum = int(melee) + int(ranged) + int(morale) + int(defense)
    return max(MIN_BASE_COST, stat_sum * STAT_COST_FACTOR + BASE_COST_OFFSET)


def _model_count(unit: Any) -> int:
    try:
        return max(int(getattr(unit, "amount", 1)), 1)
    except (TypeError, ValueError):
        return 1


def _rule_cost(resolver: ReferenceResolver, ref: schemas.RuleReference) -> int:
    try:
        rule = resolver.get_rule(ref.rule_id)
    except NotFoundError as exc:
        logger.debug("Skipping rule reference: %s", exc)
        return 0
    return tier_cost(rule.points, ref.tier)


def rules_cost(
    resolver: ReferenceResolver, refs: Iterable[schemas.RuleReference], model_count: int
) -> int:
    return sum(_rule_cost(resolver, ref) for ref in refs or []) * model_count


def weapons_cost(
    resolver: ReferenceResolver,
    refs: Iterable[schemas.WeaponReference],
    model_count: int,
) -> tuple[int, int]:
    base_total = 0
    rules_total = 0
    for ref in refs or []:
        try:
            weapon = resolver.get_weapon(ref.weapon_id)
        except NotFoundError as exc:
            logger.debug("Skipping weapon reference: %s", exc)
            continue
        base_total += int(weapon.points or 0) * int(ref.quantity)
        # Weapon rules scale with the unit's models, not the weapon quantity.
        rules_total += rules_cost(resolver, weapon.rules, model_count)
    return base_total, rules_total


def wargear_cost(resolver: ReferenceResolver, wargear_ids: Iterable[int], model_count: int) -> int:
    total = 0
    for wargear_id in wargear_ids or []:
        try:
            wargear = resolver.get_wargear(wargear_id)
        except NotFoundError as exc:
            logger.debug("Skipping wargear reference: %s", exc)
            continue
        total += rules_cost(resolver, wargear.rules, model_count)
    return total


def calculate_unit_points(unit: schemas.Unit, resolver: ReferenceResolver) -> UnitPointsBreakdown:
    if unit is None:
        raise ValueError("unit cannot be None")

    model_count = _model_count(unit)
    breakdown = UnitPointsBreakdown()
    breakdown.base_cost = base_unit_cost(unit.melee, unit.ranged, unit.morale, unit.defense)
    breakdown.unit_rules_cost = rules_cost(resolver, unit.rules, model_count)
    breakdown.weapons_cost, breakdown.weapon_rules_cost = weapons_cost(
        resolver, unit.weapons, model_count
    )
    breakdown.wargear_cost = wargear_cost(resolver, unit.wargear, model_count)
    breakdown.total_points = (
        breakdown.base_cost
        + breakdown.unit_rules_cost
        + breakdown.weapons_cost
        + breakdown.weapon_rules_cost
        + breakdown.wargear_cost
    )
    return breakdown
