from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..services import population, rule_points, unit_points, weapon_points
from ..services.resolver import (
    NotFoundError,
    SessionResolver,
    rule_to_schema,
    wargear_to_schema,
    weapon_to_schema,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/points", tags=["points"])


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def _effectiveness(form: schemas.EffectivenessForm) -> rule_points.RuleEffectiveness:
    return rule_points.RuleEffectiveness(
        base_value=form.base_value,
        multiplier=form.multiplier,
        frequency=form.frequency,
    )


@router.post("/rules/calculate")
def calculate_rule_points(form: schemas.EffectivenessForm) -> dict[str, Any]:
    effectiveness = _effectiveness(form)
    points = rule_points.calculate_points(effectiveness)
    return {
        "calculated_points": points,
        "effectiveness": effectiveness.to_dict(),
        "explanation": rule_points.points_explanation(effectiveness, points),
    }


@router.post("/rules/from-description")
def calculate_rule_points_from_description(form: schemas.RuleTextForm) -> dict[str, Any]:
    rule = schemas.Rule(name=form.name, description=form.description, type=form.type or "")
    breakdown = rule_points.rule_points_breakdown(rule)
    return {
        "calculated_points": breakdown["calculated_points"],
        "breakdown": breakdown,
        "explanation": breakdown["explanation"],
    }


@router.post("/rules/bulk")
def bulk_calculate_rule_points(rules: list[schemas.Rule]) -> dict[str, Any]:
    updated = rule_points.bulk_calculate_points(rules)
    return {
        "rules": [rule.model_dump() for rule in updated],
        "count": len(updated),
    }


@router.get("/rules/{rule_id}")
def rule_points_breakdown(rule_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        rule = SessionResolver(db).get_rule(rule_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return rule_points.rule_points_breakdown(rule)


@router.post("/rules/{rule_id}/recalculate")
def recalculate_rule_points(rule_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    rule = db.get(models.Rule, rule_id)
    if rule is None:
        raise HTTPException(status_code=404)
    points = rule_points.calculate_rule_points(rule_to_schema(rule))
    rule.points = points
    db.commit()
    logger.info("Recalculated points for rule %s (%s): %s", rule.id, rule.name, points)
    return {"rule": rule_to_schema(rule).model_dump()}


@router.post("/weapons/calculate")
def calculate_weapon_points(form: schemas.WeaponStatsForm) -> dict[str, Any]:
    stats = weapon_points.WeaponStats(
        range=form.range,
        attacks=form.attacks,
        ap=form.ap,
        type=form.type,
    )
    return {
        "points": weapon_points.calculate_weapon_points(stats),
        "breakdown": weapon_points.weapon_points_breakdown(stats),
        "stats": form.model_dump(),
    }


@router.post("/units/calculate")
def calculate_unit_points(form: schemas.UnitPointsForm, db: Session = Depends(get_db)) -> dict[str, Any]:
    breakdown = unit_points.calculate_unit_points(form.unit, SessionResolver(db))
    return {"total_points": breakdown.total_points, "breakdown": breakdown.to_dict()}


@router.get("/units/{unit_id}/cost")
def stored_unit_points(unit_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    resolver = SessionResolver(db)
    try:
        unit = resolver.get_unit(unit_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    breakdown = unit_points.calculate_unit_points(unit, resolver)
    return {"total_points": breakdown.total_points, "breakdown": breakdown.to_dict()}


@router.get("/weapons/{weapon_id}/populated")
def populated_weapon(weapon_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    resolver = SessionResolver(db)
    try:
        weapon = resolver.get_weapon(weapon_id)
        return population.weapon_total_breakdown(weapon, resolver)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/wargear/{wargear_id}/populated")
def populated_wargear(wargear_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    resolver = SessionResolver(db)
    try:
        wargear = resolver.get_wargear(wargear_id)
        return population.populate_wargear(wargear, resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/units/{unit_id}/populated")
def populated_unit(unit_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    resolver = SessionResolver(db)
    try:
        unit = resolver.get_unit(unit_id)
        return population.populate_unit(unit, resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.get("/weapons/populated")
def populated_weapons(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    weapons = db.execute(select(models.Weapon).order_by(models.Weapon.name)).scalars().all()
    try:
        populated = population.populate_weapons(
            [weapon_to_schema(weapon) for weapon in weapons], SessionResolver(db)
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return [item.model_dump() for item in populated]


@router.get("/wargear/populated")
def populated_wargear_list(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    wargear = db.execute(select(models.WarGear).order_by(models.WarGear.name)).scalars().all()
    try:
        populated = population.populate_wargear_list(
            [wargear_to_schema(item) for item in wargear], SessionResolver(db)
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return [item.model_dump() for item in populated]


def _require_rule(resolver: SessionResolver, rule_id: int) -> None:
    try:
        resolver.get_rule(rule_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/weapons/{weapon_id}/rules")
def attach_weapon_rule(
    weapon_id: int, form: schemas.RuleAttachForm, db: Session = Depends(get_db)
) -> dict[str, Any]:
    weapon = db.get(models.Weapon, weapon_id)
    if weapon is None:
        raise HTTPException(status_code=404)
    resolver = SessionResolver(db)
    _require_rule(resolver, form.rule_id)

    refs = population.attach_rule(weapon_to_schema(weapon).rules, form.rule_id, form.tier)
    weapon.rule_refs = [ref.model_dump() for ref in refs]
    db.commit()
    logger.info("Attached rule %s (tier %s) to weapon %s", form.rule_id, form.tier, weapon_id)
    try:
        return population.populate_weapon(resolver.get_weapon(weapon_id), resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/weapons/{weapon_id}/rules/{rule_id}/delete")
def detach_weapon_rule(weapon_id: int, rule_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    weapon = db.get(models.Weapon, weapon_id)
    if weapon is None:
        raise HTTPException(status_code=404)

    refs = population.detach_rule(weapon_to_schema(weapon).rules, rule_id)
    weapon.rule_refs = [ref.model_dump() for ref in refs]
    db.commit()
    logger.info("Detached rule %s from weapon %s", rule_id, weapon_id)
    resolver = SessionResolver(db)
    try:
        return population.populate_weapon(resolver.get_weapon(weapon_id), resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/wargear/{wargear_id}/rules")
def attach_wargear_rule(
    wargear_id: int, form: schemas.RuleAttachForm, db: Session = Depends(get_db)
) -> dict[str, Any]:
    wargear = db.get(models.WarGear, wargear_id)
    if wargear is None:
        raise HTTPException(status_code=404)
    resolver = SessionResolver(db)
    _require_rule(resolver, form.rule_id)

    refs = population.attach_rule(wargear_to_schema(wargear).rules, form.rule_id, form.tier)
    wargear.rule_refs = [ref.model_dump() for ref in refs]
    db.commit()
    logger.info("Attached rule %s (tier %s) to wargear %s", form.rule_id, form.tier, wargear_id)
    try:
        return population.populate_wargear(resolver.get_wargear(wargear_id), resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/wargear/{wargear_id}/rules/{rule_id}/delete")
def detach_wargear_rule(wargear_id: int, rule_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    wargear = db.get(models.WarGear, wargear_id)
    if wargear is None:
        raise HTTPException(status_code=404)

    refs = population.detach_rule(wargear_to_schema(wargear).rules, rule_id)
    wargear.rule_refs = [ref.model_dump() for ref in refs]
    db.commit()
    logger.info("Detached rule %s from wargear %s", rule_id, wargear_id)
    resolver = SessionResolver(db)
    try:
        return population.populate_wargear(resolver.get_wargear(wargear_id), resolver).model_dump()
    except NotFoundError as exc:
        raise _not_found(exc) from exc
