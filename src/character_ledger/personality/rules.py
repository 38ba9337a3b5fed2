"""
Rule Tables - static data driving trait evolution.

Effect tables map an event category to base deltas per facet group:

    {"combat": {"traits": {"courage": 0.1}, "emotional": {...}, "cognitive": {...}}}

Everything here is constant data. The evolution engine reads it and never
mutates it, so tables can be swapped (tests, campaigns, config files)
without touching the algorithm.

Usage:
    from character_ledger.personality.rules import DEFAULT_RULES

    DEFAULT_RULES.experience_effects["combat"]["traits"]["courage"]  # 0.1
    DEFAULT_RULES.volatility_by_age.lookup(45)                       # 0.8

    custom = DEFAULT_RULES.replace_tables(trauma_effects={...})
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Tuple

from character_ledger.catalog import is_number
from character_ledger.context import freeze, thaw
from character_ledger.errors import ConfigurationError


GROUPS = ("traits", "emotional", "cognitive")


@dataclass(frozen=True)
class AgeTable:
    """
    Step function over age: the first step whose bound exceeds the age
    wins, otherwise ``otherwise``.
    """
    steps: Tuple[Tuple[float, float], ...]
    otherwise: float

    def lookup(self, age: float) -> float:
        for bound, value in self.steps:
            if age < bound:
                return value
        return self.otherwise

    def to_dict(self) -> Dict[str, Any]:
        return {"steps": [list(s) for s in self.steps], "otherwise": self.otherwise}

    @classmethod
    def from_dict(cls, data: Any) -> "AgeTable":
        if not isinstance(data, Mapping):
            raise ConfigurationError([f"Age table must be an object, got {data!r}"])
        steps = data.get("steps", [])
        otherwise = data.get("otherwise")
        problems = []
        if not is_number(otherwise):
            problems.append("Age table must have a numeric 'otherwise' value")
        if not all(
            isinstance(s, (list, tuple)) and len(s) == 2 and is_number(s[0]) and is_number(s[1])
            for s in steps
        ):
            problems.append("Age table steps must be [bound, value] number pairs")
        if problems:
            raise ConfigurationError(problems)
        return cls(steps=tuple((s[0], s[1]) for s in steps), otherwise=otherwise)


@dataclass(frozen=True)
class RuleTables:
    experience_effects: Mapping
    historical_effects: Mapping
    trauma_effects: Mapping
    social_effects: Mapping
    cultural_influence: Mapping
    scale_multipliers: Mapping
    role_multipliers: Mapping
    wisdom_by_age: AgeTable
    volatility_by_age: AgeTable
    adaptability_by_age: AgeTable
    physical_decline_by_age: AgeTable

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, AgeTable):
                object.__setattr__(self, f.name, freeze(value))

    def replace_tables(self, **tables: Any) -> "RuleTables":
        """Copy with whole tables swapped out by name."""
        converted = {}
        for name, value in tables.items():
            if name not in self.table_names():
                raise ConfigurationError([f"Unknown rule table: {name}"])
            if name.endswith("_by_age") and not isinstance(value, AgeTable):
                value = AgeTable.from_dict(value)
            converted[name] = value
        return replace(self, **converted)

    @classmethod
    def table_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for name in self.table_names():
            value = getattr(self, name)
            out[name] = value.to_dict() if isinstance(value, AgeTable) else thaw(value)
        return out

    @classmethod
    def from_dict(cls, data: Mapping, base: "RuleTables" = None) -> "RuleTables":
        """Tables present in ``data`` replace those of ``base`` (defaults)."""
        base = base or DEFAULT_RULES
        known = {k: v for k, v in data.items() if k in cls.table_names()}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigurationError([f"Unknown rule table: {name}" for name in unknown])
        return base.replace_tables(**known)


# =============================================================================
# Default tables
# =============================================================================

EXPERIENCE_EFFECTS = {
    "combat": {
        "traits": {"courage": 0.1, "aggression": 0.05, "caution": -0.05},
        "emotional": {"stress": 0.1, "confidence": 0.05},
        "cognitive": {"tactical": 0.1, "analytical": 0.05},
    },
    "leadership": {
        "traits": {"charisma": 0.1, "confidence": 0.1, "responsibility": 0.05},
        "emotional": {"empathy": 0.05, "authority": 0.1},
        "cognitive": {"strategic": 0.1, "social": 0.05},
    },
    "betrayal": {
        "traits": {"trust": -0.2, "cynicism": 0.15, "caution": 0.1},
        "emotional": {"anger": 0.1, "sadness": 0.05, "paranoia": 0.1},
        "cognitive": {"analytical": 0.05, "social": -0.05},
    },
    "loss": {
        "traits": {"empathy": 0.1, "melancholy": 0.15, "wisdom": 0.05},
        "emotional": {"grief": 0.2, "compassion": 0.1},
        "cognitive": {"introspective": 0.1, "philosophical": 0.05},
    },
    "achievement": {
        "traits": {"confidence": 0.1, "pride": 0.05, "ambition": 0.05},
        "emotional": {"joy": 0.1, "satisfaction": 0.1},
        "cognitive": {"goal-oriented": 0.05, "optimistic": 0.05},
    },
    "learning": {
        "traits": {"curiosity": 0.05, "patience": 0.05, "wisdom": 0.1},
        "emotional": {"satisfaction": 0.05, "wonder": 0.05},
        "cognitive": {"analytical": 0.1, "creative": 0.05, "memory": 0.05},
    },
}

HISTORICAL_EFFECTS = {
    "war": {
        "traits": {"courage": 0.1, "trauma": 0.15, "loyalty": 0.1, "aggression": 0.05},
        "emotional": {"fear": 0.1, "anger": 0.05, "solidarity": 0.1},
        "cognitive": {"strategic": 0.1, "survival": 0.15},
    },
    "plague": {
        "traits": {"caution": 0.15, "empathy": 0.1, "fatalism": 0.1},
        "emotional": {"fear": 0.2, "compassion": 0.1, "despair": 0.05},
        "cognitive": {"medical": 0.05, "philosophical": 0.1},
    },
    "revolution": {
        "traits": {"idealism": 0.15, "courage": 0.1, "rebellion": 0.2},
        "emotional": {"passion": 0.15, "hope": 0.1, "anger": 0.1},
        "cognitive": {"political": 0.15, "strategic": 0.1},
    },
    "discovery": {
        "traits": {"curiosity": 0.15, "wonder": 0.1, "adaptability": 0.1},
        "emotional": {"excitement": 0.1, "awe": 0.1},
        "cognitive": {"innovative": 0.15, "analytical": 0.1},
    },
    "famine": {
        "traits": {"resilience": 0.1, "desperation": 0.1, "frugality": 0.15},
        "emotional": {"hunger": 0.2, "despair": 0.1, "determination": 0.05},
        "cognitive": {"survival": 0.15, "resourceful": 0.1},
    },
}

# Per-facet deltas at severity 1.0
TRAUMA_EFFECTS = {
    "physical": {"resilience": 0.1, "caution": 0.15, "trust": -0.1, "anxiety": 0.2},
    "emotional": {"empathy": 0.05, "trust": -0.2, "anxiety": 0.25, "depression": 0.15},
    "betrayal": {"trust": -0.3, "cynicism": 0.2, "paranoia": 0.15, "isolation": 0.1},
    "loss": {"grief": 0.3, "empathy": 0.1, "melancholy": 0.2, "wisdom": 0.05},
}

SOCIAL_EFFECTS = {
    "friendship": {
        "positive": {"traits": {"trust": 0.1, "empathy": 0.05, "loyalty": 0.1}},
        "negative": {"traits": {"trust": -0.05, "cynicism": 0.05}},
    },
    "romance": {
        "positive": {"traits": {"trust": 0.15, "empathy": 0.1, "passion": 0.1}},
        "negative": {"traits": {"trust": -0.1, "cynicism": 0.1, "melancholy": 0.05}},
    },
    "conflict": {
        "victory": {"traits": {"confidence": 0.1, "aggression": 0.05}},
        "defeat": {"traits": {"humility": 0.1, "caution": 0.05, "resentment": 0.05}},
    },
    "mentorship": {
        "positive": {"traits": {"wisdom": 0.1, "patience": 0.05, "teaching": 0.1}},
        "negative": {"traits": {"frustration": 0.05, "impatience": 0.05}},
    },
}

CULTURAL_INFLUENCE = {
    "honor": ["courage", "loyalty", "pride"],
    "collectivism": ["empathy", "cooperation", "self-sacrifice"],
    "individualism": ["independence", "ambition", "self-reliance"],
    "tradition": ["respect", "conservatism", "wisdom"],
    "innovation": ["curiosity", "adaptability", "creativity"],
}

SCALE_MULTIPLIERS = {"local": 0.5, "regional": 0.75, "national": 1.0, "global": 1.25}
ROLE_MULTIPLIERS = {"minor": 0.5, "moderate": 0.75, "major": 1.0, "pivotal": 1.5}


DEFAULT_RULES = RuleTables(
    experience_effects=EXPERIENCE_EFFECTS,
    historical_effects=HISTORICAL_EFFECTS,
    trauma_effects=TRAUMA_EFFECTS,
    social_effects=SOCIAL_EFFECTS,
    cultural_influence=CULTURAL_INFLUENCE,
    scale_multipliers=SCALE_MULTIPLIERS,
    role_multipliers=ROLE_MULTIPLIERS,
    wisdom_by_age=AgeTable(steps=((30, 0), (40, 1), (60, 2)), otherwise=3),
    volatility_by_age=AgeTable(steps=((18, 1.2), (30, 1.0), (50, 0.8), (70, 0.6)), otherwise=0.5),
    adaptability_by_age=AgeTable(steps=((25, 1.0), (45, 0.9), (65, 0.7)), otherwise=0.5),
    physical_decline_by_age=AgeTable(steps=((30, 0), (50, -1), (70, -2)), otherwise=-3),
)
