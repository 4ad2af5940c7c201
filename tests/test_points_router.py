from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from grimdank import models, schemas
from grimdank.db import Base
from grimdank.routers import points as points_router


def _session():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)()


def test_calculate_rule_points_endpoint():
    form = schemas.EffectivenessForm(base_value="moderate", multiplier=1.0, frequency="conditional")

    response = points_router.calculate_rule_points(form)

    assert response["calculated_points"] == [1, 2, 3]
    assert response["effectiveness"] == {
        "base_value": "moderate",
        "multiplier": 1.0,
        "frequency": "conditional",
    }
    assert "1/2/3" in response["explanation"]


def test_effectiveness_form_rejects_out_of_range_multiplier():
    with pytest.raises(ValueError):
        schemas.EffectivenessForm(multiplier=3.5)


def test_rule_points_from_description_endpoint():
    form = schemas.RuleTextForm(name="Regeneration", description="")

    response = points_router.calculate_rule_points_from_description(form)

    assert response["calculated_points"] == [4, 5, 6]
    assert response["breakdown"]["effectiveness"]["frequency"] == "passive"


def test_bulk_endpoint_counts_rules():
    response = points_router.bulk_calculate_rule_points(
        [schemas.Rule(name="Regeneration"), schemas.Rule(name="Outrage")]
    )

    assert response["count"] == 2
    assert response["rules"][1]["points"] == [2, 3, 4]


def test_recalculate_persists_engine_points():
    session = _session()
    try:
        rule = models.Rule(name="Regeneration", description="", points=[70, 71, 72])
        session.add(rule)
        session.commit()

        response = points_router.recalculate_rule_points(rule_id=rule.id, db=session)

        assert response["rule"]["points"] == [4, 5, 6]
        assert session.get(models.Rule, rule.id).points == [4, 5, 6]
    finally:
        session.close()


def test_recalculate_unknown_rule_is_404():
    session = _session()
    try:
        with pytest.raises(HTTPException) as excinfo:
            points_router.recalculate_rule_points(rule_id=1, db=session)
        assert excinfo.value.status_code == 404
    finally:
        session.close()


def test_stored_rule_breakdown_endpoint():
    session = _session()
    try:
        rule = models.Rule(name="Outrage", description="", points=[1, 1, 1])
        session.add(rule)
        session.commit()

        response = points_router.rule_points_breakdown(rule_id=rule.id, db=session)

        assert response["rule_id"] == rule.id
        assert response["calculated_points"] == [2, 3, 4]
    finally:
        session.close()


def test_weapon_points_endpoint_accepts_numbers():
    form = schemas.WeaponStatsForm(type="Melee", ap=3, attacks=2, range=0)

    response = points_router.calculate_weapon_points(form)

    assert response["points"] == 2
    assert response["stats"]["ap"] == "3"
    assert response["breakdown"]["calculated_points"] == 2


def test_weapon_points_form_requires_type():
    with pytest.raises(ValueError):
        schemas.WeaponStatsForm(type="", attacks="1")


def test_unit_points_endpoint_tolerates_missing_references():
    session = _session()
    try:
        form = schemas.UnitPointsForm(
            unit=schemas.Unit(
                name="Guardians",
                melee=3,
                ranged=3,
                morale=7,
                defense=3,
                amount=5,
                rules=[schemas.RuleReference(rule_id=9)],
                weapons=[schemas.WeaponReference(weapon_id=9, quantity=2)],
                wargear=[9],
            )
        )

        response = points_router.calculate_unit_points(form, db=session)

        assert response["total_points"] == 42
        assert response["breakdown"]["base_cost"] == 42
    finally:
        session.close()


def test_stored_unit_cost_endpoint():
    session = _session()
    try:
        weapon = models.Weapon(name="Rifle", type="ranged", range=24, points=4)
        session.add(weapon)
        session.flush()
        unit = models.Unit(
            name="Guardians",
            melee=1,
            ranged=1,
            morale=1,
            defense=1,
            amount=3,
            weapon_refs=[{"weapon_id": weapon.id, "quantity": 3}],
        )
        session.add(unit)
        session.commit()

        response = points_router.stored_unit_points(unit_id=unit.id, db=session)

        assert response["breakdown"]["weapons_cost"] == 12
        assert response["total_points"] == 18 + 12
    finally:
        session.close()


def test_populated_weapon_endpoint():
    session = _session()
    try:
        rule = models.Rule(name="Rending", description="", points=[2, 3, 4])
        session.add(rule)
        session.flush()
        weapon = models.Weapon(
            name="Power sword",
            type="melee",
            points=3,
            rule_refs=[{"rule_id": rule.id, "tier": 3}],
        )
        session.add(weapon)
        session.commit()

        response = points_router.populated_weapon(weapon_id=weapon.id, db=session)

        assert response["total_points"] == 7
        assert response["rule_points"] == 4
        assert response["weapon"]["rules"][0]["rule"]["name"] == "Rending"
    finally:
        session.close()


def test_populated_views_fail_on_dangling_references():
    session = _session()
    try:
        weapon = models.Weapon(name="Ghost", points=1, rule_refs=[{"rule_id": 404, "tier": 1}])
        wargear = models.WarGear(name="Ghost gear", rule_refs=[{"rule_id": 404, "tier": 1}])
        unit = models.Unit(name="Ghosts", wargear_ids=[404])
        session.add_all([weapon, wargear, unit])
        session.commit()

        with pytest.raises(HTTPException) as weapon_exc:
            points_router.populated_weapon(weapon_id=weapon.id, db=session)
        with pytest.raises(HTTPException) as wargear_exc:
            points_router.populated_wargear(wargear_id=wargear.id, db=session)
        with pytest.raises(HTTPException) as unit_exc:
            points_router.populated_unit(unit_id=unit.id, db=session)

        assert weapon_exc.value.status_code == 404
        assert wargear_exc.value.status_code == 404
        assert unit_exc.value.status_code == 404
        assert "404" in unit_exc.value.detail
    finally:
        session.close()


def test_populated_unit_endpoint():
    session = _session()
    try:
        wargear = models.WarGear(name="Relic armour")
        session.add(wargear)
        session.flush()
        unit = models.Unit(name="Guardians", wargear_ids=[wargear.id], available_wargear_ids=[wargear.id])
        session.add(unit)
        session.commit()

        response = points_router.populated_unit(unit_id=unit.id, db=session)

        assert response["unit"]["name"] == "Guardians"
        assert [item["name"] for item in response["wargear"]] == ["Relic armour"]
        assert [item["name"] for item in response["available_wargear"]] == ["Relic armour"]
    finally:
        session.close()


def test_app_mounts_points_router():
    from grimdank import main

    paths = {route.path for route in main.app.routes}

    assert main.health() == {"status": "ok"}
    assert "/points/rules/calculate" in paths
    assert "/points/units/{unit_id}/populated" in paths


def test_attach_and_detach_weapon_rule():
    session = _session()
    try:
        rule = models.Rule(name="Rending", description="", points=[2, 3, 4])
        weapon = models.Weapon(name="Power sword", type="melee", points=3)
        session.add_all([rule, weapon])
        session.commit()

        attached = points_router.attach_weapon_rule(
            weapon_id=weapon.id,
            form=schemas.RuleAttachForm(rule_id=rule.id, tier=2),
            db=session,
        )

        assert [(item["rule"]["name"], item["tier"]) for item in attached["rules"]] == [("Rending", 2)]
        assert session.get(models.Weapon, weapon.id).rule_refs == [{"rule_id": rule.id, "tier": 2}]

        detached = points_router.detach_weapon_rule(weapon_id=weapon.id, rule_id=rule.id, db=session)

        assert detached["rules"] == []
        assert session.get(models.Weapon, weapon.id).rule_refs == []
    finally:
        session.close()


def test_attach_and_detach_wargear_rule():
    session = _session()
    try:
        rule = models.Rule(name="Ward", description="", points=[1, 2, 3])
        wargear = models.WarGear(name="Relic armour")
        session.add_all([rule, wargear])
        session.commit()

        attached = points_router.attach_wargear_rule(
            wargear_id=wargear.id,
            form=schemas.RuleAttachForm(rule_id=rule.id, tier=3),
            db=session,
        )
        detached = points_router.detach_wargear_rule(wargear_id=wargear.id, rule_id=rule.id, db=session)

        assert attached["rules"][0]["tier"] == 3
        assert attached["wargear"]["rules"] == [{"rule_id": rule.id, "tier": 3}]
        assert detached["rules"] == []
        assert session.get(models.WarGear, wargear.id).rule_refs == []
    finally:
        session.close()


def test_attach_rejects_unknown_rule_and_owner():
    session = _session()
    try:
        weapon = models.Weapon(name="Rifle", points=4)
        session.add(weapon)
        session.commit()
        form = schemas.RuleAttachForm(rule_id=404, tier=1)

        with pytest.raises(HTTPException) as rule_exc:
            points_router.attach_weapon_rule(weapon_id=weapon.id, form=form, db=session)
        with pytest.raises(HTTPException) as owner_exc:
            points_router.attach_wargear_rule(wargear_id=1, form=form, db=session)

        assert rule_exc.value.status_code == 404
        assert owner_exc.value.status_code == 404
        assert session.get(models.Weapon, weapon.id).rule_refs == []
    finally:
        session.close()


def test_attach_form_requires_valid_tier():
    with pytest.raises(ValueError):
        schemas.RuleAttachForm(rule_id=1, tier=4)


def test_populated_lists():
    session = _session()
    try:
        rule = models.Rule(name="Rending", description="", points=[2, 3, 4])
        session.add(rule)
        session.flush()
        session.add_all(
            [
                models.Weapon(name="Sword", rule_refs=[{"rule_id": rule.id, "tier": 1}]),
                models.Weapon(name="Axe"),
                models.WarGear(name="Shield", rule_refs=[{"rule_id": rule.id, "tier": 2}]),
            ]
        )
        session.commit()

        weapons = points_router.populated_weapons(db=session)
        wargear = points_router.populated_wargear_list(db=session)

        assert [item["weapon"]["name"] for item in weapons] == ["Axe", "Sword"]
        assert weapons[1]["rules"][0]["rule"]["name"] == "Rending"
        assert wargear[0]["rules"][0]["tier"] == 2
    finally:
        session.close()
