"""Lookup of rules, weapons and wargear by identifier.

The cost engine only ever reads through a :class:`ReferenceResolver`; the
storage behind it is interchangeable.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from sqlalchemy.orm import Session

from .. import models, schemas

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    def __init__(self, kind: str, identifier: Any) -> None:
        super().__init__(f"{kind} {identifier!r} not found")
        self.kind = kind
        self.identifier = identifier


class ReferenceResolver(Protocol):
    def get_rule(self, rule_id: int) -> schemas.Rule: ...

    def get_weapon(self, weapon_id: int) -> schemas.Weapon: ...

    def get_wargear(self, wargear_id: int) -> schemas.WarGear: ...


def _by_id(items: Iterable[Any] | None) -> dict[int, Any]:
    result: dict[int, Any] = {}
    for item in items or []:
        identifier = getattr(item, "id", None)
        if identifier is None:
            continue
        result[identifier] = item
    return result


class InMemoryResolver:
    def __init__(
        self,
        rules: Iterable[schemas.Rule] | None = None,
        weapons: Iterable[schemas.Weapon] | None = None,
        wargear: Iterable[schemas.WarGear] | None = None,
    ) -> None:
        self.rules = _by_id(rules)
        self.weapons = _by_id(weapons)
        self.wargear = _by_id(wargear)

    @staticmethod
    def _lookup(store: dict[int, Any], kind: str, identifier: int) -> Any:
        try:
            return store[identifier]
        except (KeyError, TypeError):
            raise NotFoundError(kind, identifier) from None

    def get_rule(self, rule_id: int) -> schemas.Rule:
        return self._lookup(self.rules, "rule", rule_id)

    def get_weapon(self, weapon_id: int) -> schemas.Weapon:
        return self._lookup(self.weapons, "weapon", weapon_id)

    def get_wargear(self, wargear_id: int) -> schemas.WarGear:
        return self._lookup(self.wargear, "wargear", wargear_id)


def _rule_refs(entries: Iterable[dict[str, Any]]) -> list[schemas.RuleReference]:
    refs: list[schemas.RuleReference] = []
    for entry in entries:
        try:
            refs.append(schemas.RuleReference.model_validate(entry))
        except ValueError:
            logger.warning("Dropping malformed rule reference: %r", entry)
            continue
    return refs


def _int_ids(values: Iterable[Any]) -> list[int]:
    ids: list[int] = []
    for value in values:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            logger.warning("Dropping malformed identifier: %r", value)
            continue
    return ids


def rule_to_schema(rule: models.Rule) -> schemas.Rule:
    return schemas.Rule(
        id=rule.id,
        name=rule.name,
        description=rule.description or "",
        type=rule.type or "",
        points=rule.points,
    )


def weapon_to_schema(weapon: models.Weapon) -> schemas.Weapon:
    return schemas.Weapon(
        id=weapon.id,
        name=weapon.name,
        type=weapon.type or "",
        range=weapon.range or 0,
        ap=weapon.ap or "0",
        attacks=weapon.attacks or "1",
        points=weapon.points or 0,
        rules=_rule_refs(weapon.rule_refs),
    )


def wargear_to_schema(wargear: models.WarGear) -> schemas.WarGear:
    return schemas.WarGear(
        id=wargear.id,
        name=wargear.name,
        description=wargear.description or "",
        points=wargear.points or 0,
        rules=_rule_refs(wargear.rule_refs),
    )


def unit_to_schema(unit: models.Unit) -> schemas.Unit:
    weapons: list[schemas.WeaponReference] = []
    for entry in unit.weapon_refs:
        try:
            weapons.append(schemas.WeaponReference.model_validate(entry))
        except ValueError:
            logger.warning("Dropping malformed weapon reference: %r", entry)
            continue
    return schemas.Unit(
        id=unit.id,
        name=unit.name,
        type=unit.type or "",
        melee=unit.melee or 0,
        ranged=unit.ranged or 0,
        morale=unit.morale or 0,
        defense=unit.defense or 0,
        points=unit.points or 0,
        amount=max(unit.amount or 1, 1),
        max=max(unit.max or 1, 1),
        rules=_rule_refs(unit.rule_refs),
        weapons=weapons,
        wargear=_int_ids(unit.wargear_ids),
        available_weapons=_int_ids(unit.available_weapon_ids),
        available_wargear=_int_ids(unit.available_wargear_ids),
    )


class SessionResolver:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _get(self, model: type, kind: str, identifier: Any) -> Any:
        try:
            key = int(identifier)
        except (TypeError, ValueError):
            raise NotFoundError(kind, identifier) from None
        instance = self.db.get(model, key)
        if instance is None:
            raise NotFoundError(kind, identifier)
        return instance

    def get_rule(self, rule_id: int) -> schemas.Rule:
        return rule_to_schema(self._get(models.Rule, "rule", rule_id))

    def get_weapon(self, weapon_id: int) -> schemas.Weapon:
        return weapon_to_schema(self._get(models.Weapon, "weapon", weapon_id))

    def get_wargear(self, wargear_id: int) -> schemas.WarGear:
        return wargear_to_schema(self._get(models.WarGear, "wargear", wargear_id))

    def get_unit(self, unit_id: int) -> schemas.Unit:
        return unit_to_schema(self._get(models.Unit, "unit", unit_id))
