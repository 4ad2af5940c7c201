from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, Field

from .. import schemas
from .resolver import ReferenceResolver


class RuleWithTier(BaseModel):
    rule: schemas.Rule
    tier: int = 1


class PopulatedWeapon(BaseModel):
    weapon: schemas.Weapon
    rules: list[RuleWithTier] = Field(default_factory=list)


class PopulatedWarGear(BaseModel):
    wargear: schemas.WarGear
    rules: list[RuleWithTier] = Field(default_factory=list)


class PopulatedUnit(BaseModel):
    unit: schemas.Unit
    rules: list[RuleWithTier] = Field(default_factory=list)
    weapons: list[schemas.Weapon] = Field(default_factory=list)
    wargear: list[schemas.WarGear] = Field(default_factory=list)
    available_weapons: list[schemas.Weapon] = Field(default_factory=list)
    available_wargear: list[schemas.WarGear] = Field(default_factory=list)


def display_tier(tier: Any) -> int:
    try:
        value = int(tier)
    except (TypeError, ValueError):
        return 1
    if value < 1 or value > 3:
        return 1
    return value


def _populate_rules(
    resolver: ReferenceResolver, refs: Iterable[schemas.RuleReference]
) -> list[RuleWithTier]:
    return [
        RuleWithTier(rule=resolver.get_rule(ref.rule_id), tier=display_tier(ref.tier))
        for ref in refs or []
    ]


def populate_weapon(weapon: schemas.Weapon, resolver: ReferenceResolver) -> PopulatedWeapon:
    return PopulatedWeapon(weapon=weapon, rules=_populate_rules(resolver, weapon.rules))


def populate_wargear(wargear: schemas.WarGear, resolver: ReferenceResolver) -> PopulatedWarGear:
    return PopulatedWarGear(wargear=wargear, rules=_populate_rules(resolver, wargear.rules))


def populate_unit(unit: schemas.Unit, resolver: ReferenceResolver) -> PopulatedUnit:
    return PopulatedUnit(
        unit=unit,
        rules=_populate_rules(resolver, unit.rules),
        weapons=[resolver.get_weapon(ref.weapon_id) for ref in unit.weapons],
        wargear=[resolver.get_wargear(wargear_id) for wargear_id in unit.wargear],
        available_weapons=[resolver.get_weapon(weapon_id) for weapon_id in unit.available_weapons],
        available_wargear=[
            resolver.get_wargear(wargear_id) for wargear_id in unit.available_wargear
        ],
    )


def calculate_total_points(weapon: schemas.Weapon, resolver: ReferenceResolver) -> int:
    rule_points = 0
    for ref in weapon.rules:
        rule = resolver.get_rule(ref.rule_id)
        tier = display_tier(ref.tier)
        if len(rule.points) >= tier:
            rule_points += int(rule.points[tier - 1])
    return int(weapon.points or 0) + rule_points


def weapon_total_breakdown(weapon: schemas.Weapon, resolver: ReferenceResolver) -> dict[str, Any]:
    populated = populate_weapon(weapon, resolver)
    total = calculate_total_points(weapon, resolver)
    base = int(weapon.points or 0)
    return {
        "weapon": populated.model_dump(),
        "total_points": total,
        "base_points": base,
        "rule_points": total - base,
    }


def populate_weapons(
    weapons: Iterable[schemas.Weapon], resolver: ReferenceResolver
) -> list[PopulatedWeapon]:
    return [populate_weapon(weapon, resolver) for weapon in weapons]


def populate_wargear_list(
    wargear: Iterable[schemas.WarGear], resolver: ReferenceResolver
) -> list[PopulatedWarGear]:
    return [populate_wargear(item, resolver) for item in wargear]


def attach_rule(
    refs: Iterable[schemas.RuleReference], rule_id: int, tier: int = 1
) -> list[schemas.RuleReference]:
    """Return ``refs`` with a new reference appended; existing entries are kept."""
    return [*refs, schemas.RuleReference(rule_id=rule_id, tier=tier)]


def detach_rule(
    refs: Iterable[schemas.RuleReference], rule_id: int
) -> list[schemas.RuleReference]:
    """Return ``refs`` without any reference to ``rule_id``."""
    return [ref for ref in refs if ref.rule_id != rule_id]
