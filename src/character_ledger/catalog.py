"""
Dimension Catalog - static configuration for bounded dimensions.

A catalog is the validated, read-only description of every dimension a
ledger tracks: its numeric range, its default, and the ordered sub-ranges
(tiers, levels, zones) used for qualitative classification.

Key properties:
- Validated eagerly: construction fails with a single ConfigurationError
  listing every violated rule
- Immutable once built: definitions are frozen dataclasses, extra keys are
  preserved as read-only mappings so snapshots round-trip
- Classification is first-match-wins over declaration order, bounds
  inclusive, and a value that falls in a gap classifies to None

Sub-ranges are deliberately NOT checked for contiguity or overlap. Some
configurations leave dead zones on purpose.

Usage:
    from character_ledger.catalog import DimensionCatalog, GENERIC_SCHEMA

    catalog = DimensionCatalog([{
        "id": "renown", "name": "Renown", "min": 0, "max": 10,
        "defaultValue": 0,
        "subranges": [{"name": "Obscure", "min": 0, "max": 4},
                      {"name": "Known", "min": 6, "max": 10}],
    }])
    catalog.classify("renown", 5)   # None (gap)
"""

import math
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

from character_ledger.context import freeze, thaw
from character_ledger.errors import ConfigurationError, UnknownDimension


def is_number(value: Any) -> bool:
    """True for finite real numbers; bools are not numbers here."""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


# =============================================================================
# Sub-ranges
# =============================================================================

@dataclass(frozen=True)
class Subrange:
    """
    A named [min, max] band inside a dimension.

    Bounds are inclusive on both ends. Unknown keys from the source
    configuration are kept in ``extra``.
    """
    name: str
    min: float
    max: float
    extra: Mapping = field(default_factory=_empty_mapping)

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = ("name", "min", "max")

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a metadata value by its configuration key."""
        return self.to_dict().get(key, default)

    @classmethod
    def violations(cls, data: Any, where: str) -> List[str]:
        if not isinstance(data, Mapping):
            return [f"{where} must be an object"]
        problems = []
        if not _is_name(data.get("name")):
            problems.append(f"{where} must have a valid name")
        lo, hi = data.get("min"), data.get("max")
        if not (is_number(lo) and is_number(hi)):
            problems.append(f"{where} must have numeric min and max values")
        elif lo >= hi:
            problems.append(f"{where} min value must be less than max value")
        problems.extend(cls._typed_violations(data, where))
        return problems

    @classmethod
    def from_dict(cls, data: Mapping) -> "Subrange":
        known = set(cls.KNOWN_KEYS)
        return cls(
            name=data["name"],
            min=data["min"],
            max=data["max"],
            extra=freeze({k: v for k, v in data.items() if k not in known}),
            **cls._typed_from_dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {"name": self.name, "min": self.min, "max": self.max}
        out.update(self._typed_to_dict())
        out.update(thaw(self.extra))
        return out

    # Hooks for kind-specific fields
    @classmethod
    def _typed_violations(cls, data: Mapping, where: str) -> List[str]:
        return []

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        return {}

    def _typed_to_dict(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class Tier(Subrange):
    """Influence tier: a band with a descriptive label."""
    description: str = ""

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = ("name", "min", "max", "description")

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        return {"description": data.get("description", "")}

    def _typed_to_dict(self) -> Dict[str, Any]:
        return {"description": self.description}


@dataclass(frozen=True)
class Level(Subrange):
    """Prestige level: grants political power and social benefits."""
    political_power: float = 0
    social_benefits: Tuple[str, ...] = ()

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = (
        "name", "min", "max", "politicalPower", "socialBenefits",
    )

    @classmethod
    def _typed_violations(cls, data: Mapping, where: str) -> List[str]:
        problems = []
        if not is_number(data.get("politicalPower")):
            problems.append(f"{where} must have a numeric political power value")
        benefits = data.get("socialBenefits", [])
        if not isinstance(benefits, (list, tuple)):
            problems.append(f"{where} socialBenefits must be a list")
        return problems

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        return {
            "political_power": data["politicalPower"],
            "social_benefits": tuple(data.get("socialBenefits", ())),
        }

    def _typed_to_dict(self) -> Dict[str, Any]:
        return {
            "politicalPower": self.political_power,
            "socialBenefits": list(self.social_benefits),
        }


@dataclass(frozen=True)
class ZoneEffect:
    """One annotated effect of sitting in an alignment zone."""
    type: str
    value: Any = None
    description: str = ""
    extra: Mapping = field(default_factory=_empty_mapping)

    @classmethod
    def from_dict(cls, data: Mapping) -> "ZoneEffect":
        return cls(
            type=data.get("type", ""),
            value=data.get("value"),
            description=data.get("description", ""),
            extra=freeze({k: v for k, v in data.items()
                          if k not in ("type", "value", "description")}),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {"type": self.type, "value": self.value, "description": self.description}
        out.update(thaw(self.extra))
        return out


@dataclass(frozen=True)
class Zone(Subrange):
    """Alignment zone: a band with effect annotations."""
    description: str = ""
    effects: Tuple[ZoneEffect, ...] = ()

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = ("name", "min", "max", "description", "effects")

    @classmethod
    def _typed_violations(cls, data: Mapping, where: str) -> List[str]:
        effects = data.get("effects", [])
        if not isinstance(effects, (list, tuple)):
            return [f"{where} effects must be a list"]
        if not all(isinstance(e, Mapping) for e in effects):
            return [f"{where} effects must be objects"]
        return []

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        return {
            "description": data.get("description", ""),
            "effects": tuple(ZoneEffect.from_dict(e) for e in data.get("effects", ())),
        }

    def _typed_to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "effects": [e.to_dict() for e in self.effects],
        }


# =============================================================================
# Dimension definitions
# =============================================================================

@dataclass(frozen=True)
class DimensionDefinition:
    """
    One tracked numeric attribute: a domain, a track or an axis.
    """
    id: str
    name: str
    min: float
    max: float
    default_value: float
    subranges: Tuple[Subrange, ...]
    description: str = ""
    extra: Mapping = field(default_factory=_empty_mapping)

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = (
        "id", "name", "description", "min", "max", "defaultValue",
    )

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))

    def classify(self, value: float) -> Optional[Subrange]:
        """First sub-range containing ``value``, or None for a gap."""
        for subrange in self.subranges:
            if subrange.contains(value):
                return subrange
        return None

    @classmethod
    def violations(cls, data: Any, where: str, schema: "CatalogSchema") -> List[str]:
        if not isinstance(data, Mapping):
            return [f"{where} must be an object"]
        label = schema.label.capitalize()
        problems = []
        if not _is_name(data.get("id")):
            problems.append(f"{where}: {label} must have a valid id")
        if not _is_name(data.get("name")):
            problems.append(f"{where}: {label} must have a valid name")

        lo, hi = data.get("min"), data.get("max")
        bounds_ok = is_number(lo) and is_number(hi)
        if not bounds_ok:
            problems.append(f"{where}: {label} must have numeric min and max values")
        elif lo >= hi:
            problems.append(f"{where}: {label} min value must be less than max value")

        default = data.get("defaultValue")
        if not is_number(default):
            problems.append(f"{where}: {label} must have a numeric default value")
        elif bounds_ok and lo < hi and not (lo <= default <= hi):
            problems.append(f"{where}: {label} default value must be within min/max range")

        problems.extend(cls._typed_violations(data, where, schema))

        subranges = data.get(schema.subrange_key)
        if not isinstance(subranges, (list, tuple)) or len(subranges) == 0:
            problems.append(f"{where}: {label} must have at least one {schema.subrange_label}")
        else:
            for i, subrange in enumerate(subranges):
                problems.extend(schema.subrange_type.violations(
                    subrange, f"{where}.{schema.subrange_key}[{i}]"
                ))
        return problems

    @classmethod
    def from_dict(cls, data: Mapping, schema: "CatalogSchema") -> "DimensionDefinition":
        known = set(cls.KNOWN_KEYS) | {schema.subrange_key}
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            min=data["min"],
            max=data["max"],
            default_value=data["defaultValue"],
            subranges=tuple(schema.subrange_type.from_dict(s) for s in data[schema.subrange_key]),
            extra=freeze({k: v for k, v in data.items() if k not in known}),
            **cls._typed_from_dict(data),
        )

    def to_dict(self, subrange_key: str = "subranges") -> Dict[str, Any]:
        out = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "min": self.min,
            "max": self.max,
            "defaultValue": self.default_value,
        }
        out.update(self._typed_to_dict())
        out[subrange_key] = [s.to_dict() for s in self.subranges]
        out.update(thaw(self.extra))
        return out

    @classmethod
    def _typed_violations(cls, data: Mapping, where: str, schema: "CatalogSchema") -> List[str]:
        return []

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        return {}

    def _typed_to_dict(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class TrackDefinition(DimensionDefinition):
    """Prestige track: adds a decay rate and a category weight."""
    decay_rate: float = 0.0
    category: Optional[str] = None
    category_weight: float = 1.0

    KNOWN_KEYS: ClassVar[Tuple[str, ...]] = (
        "id", "name", "description", "min", "max", "defaultValue",
        "decayRate", "category", "categoryWeight",
    )

    @classmethod
    def _typed_violations(cls, data: Mapping, where: str, schema: "CatalogSchema") -> List[str]:
        problems = []
        rate = data.get("decayRate")
        if not is_number(rate) or rate < 0:
            problems.append(f"{where}: Track must have a non-negative numeric decay rate")
        weight = data.get("categoryWeight", 1.0)
        if weight is not None and not is_number(weight):
            problems.append(f"{where}: Track categoryWeight must be numeric")
        return problems

    @classmethod
    def _typed_from_dict(cls, data: Mapping) -> Dict[str, Any]:
        weight = data.get("categoryWeight")
        return {
            "decay_rate": data["decayRate"],
            "category": data.get("category"),
            "category_weight": 1.0 if weight is None else weight,
        }

    def _typed_to_dict(self) -> Dict[str, Any]:
        out = {"decayRate": self.decay_rate, "categoryWeight": self.category_weight}
        if self.category is not None:
            out["category"] = self.category
        return out


# =============================================================================
# Catalog schema
# =============================================================================

@dataclass(frozen=True)
class CatalogSchema:
    """
    Names and types that distinguish one kind of catalog from another.

    Influence, Prestige and Alignment are structurally identical ledgers;
    the schema is the only place they differ.
    """
    kind: str
    label: str
    plural: str
    subrange_label: str
    subrange_key: str
    definition_type: type = DimensionDefinition
    subrange_type: type = Subrange
    supports_decay: bool = False
    legacy_manager_name: str = "Manager"
    legacy_values_key: str = "values"
    legacy_context_key: Optional[str] = None


GENERIC_SCHEMA = CatalogSchema(
    kind="generic",
    label="dimension",
    plural="dimensions",
    subrange_label="subrange",
    subrange_key="subranges",
)


def validate_definitions(definitions: Any, schema: CatalogSchema) -> List[str]:
    """Every violated rule across a raw definition list."""
    if isinstance(definitions, (str, bytes, Mapping)) or not isinstance(definitions, Iterable):
        return [f"{schema.plural.capitalize()} must be provided as a list"]
    definitions = list(definitions)
    if not definitions:
        return [f"{schema.kind.capitalize()} must have at least one {schema.label}"]

    problems = []
    seen = set()
    for i, data in enumerate(definitions):
        where = f"{schema.plural}[{i}]"
        problems.extend(schema.definition_type.violations(data, where, schema))
        if isinstance(data, Mapping) and _is_name(data.get("id")):
            if data["id"] in seen:
                problems.append(f"{where}: duplicate {schema.label} id '{data['id']}'")
            seen.add(data["id"])
    return problems


# =============================================================================
# Catalog
# =============================================================================

class DimensionCatalog:
    """
    Validated, ordered, read-only set of dimension definitions.

    Accepts raw configuration mappings or already-built definitions; both
    go through the same validation pass.
    """

    def __init__(self, definitions: Iterable, schema: CatalogSchema = GENERIC_SCHEMA):
        raw = definitions
        if isinstance(definitions, Iterable) and not isinstance(definitions, (str, bytes, Mapping)):
            raw = [
                d.to_dict(schema.subrange_key) if isinstance(d, DimensionDefinition) else d
                for d in definitions
            ]
        problems = validate_definitions(raw, schema)
        if problems:
            raise ConfigurationError(problems)

        self._schema = schema
        self._definitions: Tuple[DimensionDefinition, ...] = tuple(
            schema.definition_type.from_dict(d, schema) for d in raw
        )
        self._by_id: Dict[str, DimensionDefinition] = {d.id: d for d in self._definitions}

    @property
    def schema(self) -> CatalogSchema:
        return self._schema

    @property
    def definitions(self) -> Tuple[DimensionDefinition, ...]:
        return self._definitions

    @property
    def ids(self) -> List[str]:
        return [d.id for d in self._definitions]

    def get(self, dimension_id: str) -> DimensionDefinition:
        try:
            return self._by_id[dimension_id]
        except (KeyError, TypeError):
            raise UnknownDimension(dimension_id, self._schema.label) from None

    def find(self, dimension_id: str) -> Optional[DimensionDefinition]:
        try:
            return self._by_id.get(dimension_id)
        except TypeError:
            return None

    def classify(self, dimension_id: str, value: float) -> Optional[Subrange]:
        return self.get(dimension_id).classify(value)

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.to_dict(self._schema.subrange_key) for d in self._definitions]

    def __contains__(self, dimension_id: Any) -> bool:
        return self.find(dimension_id) is not None

    def __iter__(self) -> Iterator[DimensionDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, DimensionCatalog):
            return NotImplemented
        return self._schema == other._schema and self._definitions == other._definitions

    __hash__ = None

    def __repr__(self) -> str:
        return f"DimensionCatalog({self._schema.kind}, {self.ids})"
