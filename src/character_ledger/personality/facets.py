"""
Personality facets: the four kinds of entries a profile holds.

- Trait and EmotionalTendency: intensity / baseLevel / volatility in [0, 1]
- CognitiveTrait: complexity / adaptability in [0, 1]
- Attribute: integer-ish base score with a derived modifier

Defaults apply only when a field is absent (None). An explicit 0 is kept.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List

from character_ledger.catalog import is_number
from character_ledger.context import freeze, thaw
from character_ledger.errors import ConfigurationError


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


def _default(data: Mapping, key: str, fallback: Any) -> Any:
    value = data.get(key)
    return fallback if value is None else value


def _check(data: Any, kind: str, numeric: tuple) -> List[str]:
    """Violations for one raw facet entry."""
    if not isinstance(data, Mapping):
        return [f"{kind} entry must be an object, got {type(data).__name__}"]
    problems = []
    facet_id = data.get("id")
    if not isinstance(facet_id, str) or not facet_id.strip():
        problems.append(f"{kind} entry must have a valid id")
    for key in numeric:
        value = data.get(key)
        if value is not None and not is_number(value):
            problems.append(f"{kind} '{facet_id}' field '{key}' must be a number")
    metadata = data.get("metadata", data.get("influence"))
    if metadata is not None and not isinstance(metadata, Mapping):
        problems.append(f"{kind} '{facet_id}' metadata must be an object")
    return problems


class FacetKind(Enum):
    """Facet collections of a profile, valued by their wire key."""
    TRAITS = "traits"
    ATTRIBUTES = "attributes"
    EMOTIONAL = "emotionalTendencies"
    COGNITIVE = "cognitiveTraits"

    @classmethod
    def parse(cls, kind: Any) -> "FacetKind":
        if isinstance(kind, FacetKind):
            return kind
        for member in cls:
            if kind in (member.value, member.name, member.name.lower()):
                return member
        raise ConfigurationError([f"Unknown facet kind: {kind!r}"])

    @property
    def facet_type(self) -> type:
        return FACET_TYPES[self]


# =============================================================================
# Volatile facets (traits, emotional tendencies)
# =============================================================================

@dataclass(frozen=True)
class Trait:
    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    intensity: float = 0.5
    base_level: float = 0.5
    volatility: float = 0.3
    metadata: Mapping = field(default_factory=_empty_mapping)

    KIND = "Trait"
    NUMERIC = ("intensity", "baseLevel", "volatility")

    def __post_init__(self):
        object.__setattr__(self, "metadata", freeze(self.metadata or {}))

    @classmethod
    def violations(cls, data: Any) -> List[str]:
        return _check(data, cls.KIND, cls.NUMERIC)

    @classmethod
    def from_dict(cls, data: Mapping) -> "Trait":
        metadata = data.get("metadata")
        if metadata is None:
            metadata = data.get("influence")
        return cls(
            id=data["id"],
            name=_default(data, "name", ""),
            description=_default(data, "description", ""),
            category=_default(data, "category", ""),
            intensity=_default(data, "intensity", 0.5),
            base_level=_default(data, "baseLevel", 0.5),
            volatility=_default(data, "volatility", 0.3),
            metadata=metadata or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "intensity": self.intensity,
            "baseLevel": self.base_level,
            "volatility": self.volatility,
            "metadata": thaw(self.metadata),
        }

    @property
    def sensitivity(self) -> float:
        """Scale applied to incoming deltas."""
        return self.volatility

    def evolved(self, actual: float, reason: str, at: datetime,
                note: str = "lastChange") -> "Trait":
        """Shift by an already-scaled change and note it under metadata[note]."""
        metadata = dict(self.metadata)
        metadata[note] = {
            "timestamp": at.isoformat(),
            "reason": reason,
            "change": actual,
        }
        return replace(
            self,
            intensity=clamp_unit(self.intensity + actual),
            base_level=clamp_unit(self.base_level + actual * 0.1),
            metadata=metadata,
        )

    def with_volatility_scaled(self, factor: float) -> "Trait":
        return replace(self, volatility=max(0.1, min(1.0, self.volatility * factor)))


@dataclass(frozen=True)
class EmotionalTendency(Trait):
    """Same shape and evolution rules as a Trait."""
    KIND = "EmotionalTendency"


# =============================================================================
# Cognitive traits
# =============================================================================

@dataclass(frozen=True)
class CognitiveTrait:
    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    complexity: float = 0.5
    adaptability: float = 0.5
    metadata: Mapping = field(default_factory=_empty_mapping)

    KIND = "CognitiveTrait"
    NUMERIC = ("complexity", "adaptability")

    def __post_init__(self):
        object.__setattr__(self, "metadata", freeze(self.metadata or {}))

    @classmethod
    def violations(cls, data: Any) -> List[str]:
        return _check(data, cls.KIND, cls.NUMERIC)

    @classmethod
    def from_dict(cls, data: Mapping) -> "CognitiveTrait":
        metadata = data.get("metadata")
        if metadata is None:
            metadata = data.get("influence")
        return cls(
            id=data["id"],
            name=_default(data, "name", ""),
            description=_default(data, "description", ""),
            category=_default(data, "category", ""),
            complexity=_default(data, "complexity", 0.5),
            adaptability=_default(data, "adaptability", 0.5),
            metadata=metadata or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "complexity": self.complexity,
            "adaptability": self.adaptability,
            "metadata": thaw(self.metadata),
        }

    @property
    def sensitivity(self) -> float:
        return self.adaptability

    def evolved(self, actual: float, reason: str, at: datetime,
                note: str = "lastChange") -> "CognitiveTrait":
        metadata = dict(self.metadata)
        metadata[note] = {
            "timestamp": at.isoformat(),
            "reason": reason,
            "change": actual,
        }
        return replace(self, complexity=clamp_unit(self.complexity + actual), metadata=metadata)

    def with_adaptability_scaled(self, factor: float) -> "CognitiveTrait":
        return replace(self, adaptability=max(0.1, min(1.0, self.adaptability * factor)))


# =============================================================================
# Attributes
# =============================================================================

@dataclass(frozen=True)
class Attribute:
    """
    Ability score. ``modifier`` is always derived from ``base_value``; a
    stored modifier in input data is ignored.
    """
    id: str
    name: str = ""
    description: str = ""
    base_value: float = 10

    KIND = "Attribute"
    NUMERIC = ("baseValue",)

    @property
    def modifier(self) -> int:
        return math.floor((self.base_value - 10) / 2)

    @classmethod
    def violations(cls, data: Any) -> List[str]:
        return _check(data, cls.KIND, cls.NUMERIC)

    @classmethod
    def from_dict(cls, data: Mapping) -> "Attribute":
        return cls(
            id=data["id"],
            name=_default(data, "name", ""),
            description=_default(data, "description", ""),
            base_value=_default(data, "baseValue", 10),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "baseValue": self.base_value,
            "modifier": self.modifier,
        }


FACET_TYPES = {
    FacetKind.TRAITS: Trait,
    FacetKind.ATTRIBUTES: Attribute,
    FacetKind.EMOTIONAL: EmotionalTendency,
    FacetKind.COGNITIVE: CognitiveTrait,
}


DEFAULT_ATTRIBUTES: List[Dict[str, Any]] = [
    {"id": "strength", "name": "Strength",
     "description": "Physical power and carrying capacity", "baseValue": 10},
    {"id": "dexterity", "name": "Dexterity",
     "description": "Agility, reflexes, and balance", "baseValue": 10},
    {"id": "constitution", "name": "Constitution",
     "description": "Health, stamina, and vital force", "baseValue": 10},
    {"id": "intelligence", "name": "Intelligence",
     "description": "Mental acuity, information recall, and analytical skill", "baseValue": 10},
    {"id": "wisdom", "name": "Wisdom",
     "description": "Awareness, intuition, and insight", "baseValue": 10},
    {"id": "charisma", "name": "Charisma",
     "description": "Confidence, eloquence, and leadership", "baseValue": 10},
]
