from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _as_text(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class RuleReference(BaseModel):
    rule_id: int
    tier: int = 1


class WeaponReference(BaseModel):
    weapon_id: int
    quantity: int = 1
    type: str = ""


class Rule(BaseModel):
    id: int | None = None
    name: str = Field(..., max_length=100)
    description: str = ""
    type: str = ""
    points: list[int] = Field(default_factory=lambda: [0, 0, 0])


class Weapon(BaseModel):
    id: int | None = None
    name: str = Field(..., max_length=120)
    type: str = "ranged"
    range: int = 0
    ap: str = "0"
    attacks: str = "1"
    points: int = 0
    rules: list[RuleReference] = Field(default_factory=list)

    @field_validator("ap", "attacks", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class WarGear(BaseModel):
    id: int | None = None
    name: str = Field(..., max_length=120)
    description: str = ""
    points: int = 0
    rules: list[RuleReference] = Field(default_factory=list)


class Unit(BaseModel):
    id: int | None = None
    name: str = Field(..., max_length=120)
    type: str = ""
    melee: int = 0
    ranged: int = 0
    morale: int = 0
    defense: int = 0
    points: int = 0
    amount: int = Field(1, ge=1)
    max: int = Field(1, ge=1)
    rules: list[RuleReference] = Field(default_factory=list)
    weapons: list[WeaponReference] = Field(default_factory=list)
    wargear: list[int] = Field(default_factory=list)
    available_weapons: list[int] = Field(default_factory=list)
    available_wargear: list[int] = Field(default_factory=list)


class EffectivenessForm(BaseModel):
    base_value: str = "moderate"
    multiplier: float = Field(1.0, ge=0.1, le=2.0)
    frequency: str = "conditional"


class RuleTextForm(BaseModel):
    name: str = Field(..., max_length=100)
    description: str = Field("", max_length=1000)
    type: str | None = None


class WeaponStatsForm(BaseModel):
    range: int = 0
    attacks: str = "1"
    ap: str = "0"
    type: str = Field(..., min_length=1)

    @field_validator("ap", "attacks", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class UnitPointsForm(BaseModel):
    unit: Unit


class RuleAttachForm(BaseModel):
    rule_id: int
    tier: int = Field(1, ge=1, le=3)
