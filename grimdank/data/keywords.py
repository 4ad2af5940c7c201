from __future__ import annotations

from typing import Dict, Tuple

# Base effectiveness indicators, strongest first. Repeated entries count once
# per occurrence, so a single match on them already counts twice.
OVERPOWERED_KEYWORDS: Tuple[str, ...] = (
    "immune to all",
    "ignore all",
    "unlimited",
    "automatic",
    "always pass",
    "cannot be",
    "immune to",
    "invulnerable to",
    "eternal",
    "immortal",
    "unbreakable",
    "unstoppable",
    "overpowered",
    "broken",
    "overpowered",
    "win the game",
    "instant win",
    "guaranteed",
    "certain",
    "absolute",
    "eternal warrior",
    "immortal",
    "unbreakable",
    "unstoppable",
)

STRONG_KEYWORDS: Tuple[str, ...] = (
    "invulnerable save",
    "feel no pain",
    "eternal warrior",
    "fearless",
    "preferred enemy",
    "hate",
    "rage",
    "furious charge",
    "counter-attack",
    "stubborn",
    "unbreakable",
    "stealth",
    "concealed",
    "hidden",
    "regeneration",
    "tough",
    "hardy",
    "resilient",
    "durable",
    "sturdy",
    "ward save",
    "shield",
    "protection",
    "armour",
    "cover",
    "concealment",
    "preferred enemy",
    "hate",
    "rage",
    "furious charge",
    "counter-attack",
    "psychic",
    "magic",
    "warp",
    "soul",
    "spirit",
    "ethereal",
    "phase",
    "teleport",
    "deep strike",
    "outflank",
    "infiltrate",
)

MODERATE_KEYWORDS: Tuple[str, ...] = (
    "all friendly",
    "all units",
    "within",
    "range",
    "distance",
    "inches",
    "leadership",
    "morale",
    "fear",
    "terror",
    "awe",
    "inspiring",
    "command",
    "officer",
    "sergeant",
    "leader",
    "commander",
    "captain",
    "lieutenant",
    "major",
    "colonel",
    "general",
    "marshal",
    "lord",
    "reroll",
    "rerolls",
    "bonus",
    "penalty",
    "modifier",
    "adjustment",
    "difficult",
    "dangerous",
    "hazardous",
    "perilous",
    "challenging",
    "fearless",
    "stubborn",
    "unbreakable",
    "stealth",
    "concealed",
)

MINIMAL_KEYWORDS: Tuple[str, ...] = (
    "+1",
    "+2",
    "+3",
    "-1",
    "-2",
    "-3",
    "bonus",
    "penalty",
    "modifier",
    "reroll",
    "rerolls",
    "dice",
    "roll",
    "rolls",
    "d6",
    "d3",
    "2d6",
    "3d6",
    "hit",
    "wound",
    "save",
    "armour",
    "cover",
    "concealment",
    "stealth",
    "move",
    "movement",
    "advance",
    "charge",
    "assault",
    "close combat",
    "melee",
    "shooting",
    "ranged",
    "fire",
    "shoot",
    "gun",
    "weapon",
    "if",
    "when",
    "unless",
    "but",
    "however",
    "except",
    "provided",
)

# Frequency indicators.
PASSIVE_KEYWORDS: Tuple[str, ...] = (
    "always",
    "permanent",
    "constant",
    "immune",
    "invulnerable",
    "fearless",
    "stubborn",
    "unbreakable",
    "eternal",
    "stealth",
    "concealed",
    "hidden",
    "camouflage",
    "feel no pain",
    "regeneration",
    "tough",
    "hardy",
    "resilient",
    "durable",
    "sturdy",
    "save",
    "ward",
    "shield",
    "protection",
    "armour",
    "cover",
    "concealment",
)

LIMITED_KEYWORDS: Tuple[str, ...] = (
    "once per game",
    "once per turn",
    "once per battle",
    "limited",
    "restricted",
    "conditional",
    "when",
    "if",
    "unless",
    "but",
    "however",
    "except",
    "requires",
)

FREQUENT_KEYWORDS: Tuple[str, ...] = (
    "every turn",
    "each turn",
    "per turn",
    "frequently",
    "often",
    "regular",
    "common",
    "standard",
    "basic",
)

KEYWORD_GROUPS: Dict[str, Tuple[str, ...]] = {
    "overpowered": OVERPOWERED_KEYWORDS,
    "strong": STRONG_KEYWORDS,
    "moderate": MODERATE_KEYWORDS,
    "minimal": MINIMAL_KEYWORDS,
    "passive": PASSIVE_KEYWORDS,
    "limited": LIMITED_KEYWORDS,
    "frequent": FREQUENT_KEYWORDS,
}

BASE_VALUES: Tuple[str, ...] = ("minimal", "moderate", "strong", "overpowered")
FREQUENCIES: Tuple[str, ...] = ("passive", "conditional", "limited", "frequent")


def keywords_for(group: str) -> Tuple[str, ...]:
    return KEYWORD_GROUPS.get(group, ())
