from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


def touch_timestamps(mapper, connection, target) -> None:  # pragma: no cover - SQLAlchemy hook
    now = datetime.utcnow()
    if getattr(target, "created_at", None) is None:
        target.created_at = now
    target.updated_at = now


def _load_list(raw: str | None) -> list[Any]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return []
    return parsed if isinstance(parsed, list) else []


def _dump_list(values: list[Any] | None) -> str:
    return json.dumps(list(values or []))


class RuleRefsMixin:
    rules_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def rule_refs(self) -> list[dict[str, Any]]:
        return [entry for entry in _load_list(self.rules_json) if isinstance(entry, dict)]

    @rule_refs.setter
    def rule_refs(self, value: list[dict[str, Any]]) -> None:
        self.rules_json = _dump_list(value)


class Rule(TimestampMixin, Base):
    __tablename__ = "rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    points_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def points(self) -> list[int]:
        values: list[int] = []
        for entry in _load_list(self.points_json):
            try:
                values.append(int(entry))
            except (TypeError, ValueError):
                continue
        return values

    @points.setter
    def points(self, value: list[int]) -> None:
        self.points_json = _dump_list([int(entry) for entry in value or []])


class Weapon(RuleRefsMixin, TimestampMixin, Base):
    __tablename__ = "weapons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="ranged")
    range: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ap: Mapped[str] = mapped_column(String(10), nullable=False, default="0")
    attacks: Mapped[str] = mapped_column(String(10), nullable=False, default="1")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class WarGear(RuleRefsMixin, TimestampMixin, Base):
    __tablename__ = "wargear"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Unit(RuleRefsMixin, TimestampMixin, Base):
    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    melee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ranged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    morale: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    defense: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    weapons_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    wargear_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    available_weapons_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    available_wargear_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def weapon_refs(self) -> list[dict[str, Any]]:
        return [entry for entry in _load_list(self.weapons_json) if isinstance(entry, dict)]

    @weapon_refs.setter
    def weapon_refs(self, value: list[dict[str, Any]]) -> None:
        self.weapons_json = _dump_list(value)

    @property
    def wargear_ids(self) -> list[Any]:
        return _load_list(self.wargear_json)

    @wargear_ids.setter
    def wargear_ids(self, value: list[int]) -> None:
        self.wargear_json = _dump_list(value)

    @property
    def available_weapon_ids(self) -> list[Any]:
        return _load_list(self.available_weapons_json)

    @available_weapon_ids.setter
    def available_weapon_ids(self, value: list[int]) -> None:
        self.available_weapons_json = _dump_list(value)

    @property
    def available_wargear_ids(self) -> list[Any]:
        return _load_list(self.available_wargear_json)

    @available_wargear_ids.setter
    def available_wargear_ids(self, value: list[int]) -> None:
        self.available_wargear_json = _dump_list(value)


for cls in [Rule, Weapon, WarGear, Unit]:
    event.listen(cls, "before_insert", touch_timestamps)
    event.listen(cls, "before_update", touch_timestamps)
