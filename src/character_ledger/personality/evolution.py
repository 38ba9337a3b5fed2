"""
Trait Evolution Engine

Turns a qualitative occurrence into bounded numeric deltas on a profile's
facets and produces a new profile snapshot.

Pipeline (shared by every event kind):
1. Look up the category in the effect table (unknown -> empty, no-op)
2. Scale base deltas by an event-specific multiplier
3. Experience only: amplify facets named by the caller's cultural values
4. Scale by each facet's own sensitivity (volatility or adaptability),
   move intensity/complexity, clamp to [0, 1]
5. Note the change in the facet's metadata

Facets are never created or removed. A facet with no delta is carried over
untouched.

Usage:
    engine = TraitEvolutionEngine()
    effects = engine.experience_effects({"type": "combat", "intensity": 0.8})
    evolved = engine.apply(profile, effects, "Experience: combat")
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from character_ledger.catalog import is_number
from character_ledger.context import freeze
from character_ledger.ledger import coerce_timestamp
from character_ledger.personality.facets import FacetKind
from character_ledger.personality.rules import DEFAULT_RULES, GROUPS, RuleTables

logger = logging.getLogger(__name__)

PHYSICAL_ATTRIBUTES = ("strength", "dexterity", "constitution")
PHYSICAL_FLOOR = 3
WISDOM_CAP = 20

GROUP_KINDS = {
    "traits": FacetKind.TRAITS,
    "emotional": FacetKind.EMOTIONAL,
    "cognitive": FacetKind.COGNITIVE,
}

_AGE_KEY_ALIASES = {"physical_decline": "physicalDecline"}


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


def _field(source: Any, key: str, default: Any = None) -> Any:
    """Read ``key`` from a mapping or an object; None falls back to default."""
    if source is None:
        return default
    if isinstance(source, Mapping):
        value = source.get(key)
    else:
        value = getattr(source, key, None)
    return default if value is None else value


def _pairs(values: Union[Mapping, Iterable, None]) -> Tuple[Tuple[Any, Any], ...]:
    if values is None:
        return ()
    if isinstance(values, Mapping):
        return tuple(values.items())
    return tuple(tuple(p) for p in values)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# =============================================================================
# Effect sets
# =============================================================================

@dataclass(frozen=True)
class EffectSet:
    """Computed deltas per facet group, before facet sensitivity."""
    traits: Mapping = field(default_factory=_empty_mapping)
    emotional: Mapping = field(default_factory=_empty_mapping)
    cognitive: Mapping = field(default_factory=_empty_mapping)

    def __post_init__(self):
        for group in GROUPS:
            object.__setattr__(self, group, freeze(dict(_pairs(getattr(self, group)))))

    @classmethod
    def from_table(cls, table: Mapping, multiplier: float) -> "EffectSet":
        return cls(**{
            group: {fid: base * multiplier for fid, base in (table.get(group) or {}).items()}
            for group in GROUPS
        })

    def group(self, name: str) -> Mapping:
        return getattr(self, name)

    def is_empty(self) -> bool:
        return not any(d for g in GROUPS for d in self.group(g).values())


EMPTY_EFFECTS = EffectSet()


# =============================================================================
# Engine
# =============================================================================

class TraitEvolutionEngine:
    """
    Stateless evolution rules over injectable RuleTables.

    ``*_effects`` methods compute an EffectSet; ``apply`` folds one into a
    profile. All operations are total over well-formed profiles: unknown
    categories, scales or outcomes degrade to no-op.
    """

    def __init__(self, rules: RuleTables = DEFAULT_RULES):
        self.rules = rules

    # -------------------------------------------------------------------------
    # Effect computation
    # -------------------------------------------------------------------------

    def experience_effects(self, experience: Any, context: Any = None) -> EffectSet:
        kind = _field(experience, "type", "general")
        multiplier = _field(experience, "intensity", 0.5) * _field(experience, "duration", 1)
        effects = EffectSet.from_table(self.rules.experience_effects.get(kind) or {}, multiplier)

        cultural = _field(context, "culturalValues")
        if cultural:
            effects = self._apply_cultural(effects, cultural)
        return effects

    def _apply_cultural(self, effects: EffectSet, cultural_values: Any) -> EffectSet:
        """Cultural values amplify trait deltas only; other groups pass through."""
        traits = dict(effects.traits)
        for value, strength in _pairs(cultural_values):
            if not is_number(strength):
                logger.debug("Cultural value '%s' ignored: strength %r", value, strength)
                continue
            factor = 1 + strength * 0.2
            for facet_id in self.rules.cultural_influence.get(value, ()):
                if traits.get(facet_id):
                    traits[facet_id] = traits[facet_id] * factor
        return replace(effects, traits=traits)

    def historical_effects(self, event: Any, character_role: Any = None) -> EffectSet:
        kind = _field(event, "type", "general")
        scale = _field(event, "scale", "local")
        importance = _field(character_role, "importance", "minor")
        multiplier = (
            self.rules.scale_multipliers.get(scale, 0)
            * self.rules.role_multipliers.get(importance, 0)
        )
        return EffectSet.from_table(self.rules.historical_effects.get(kind) or {}, multiplier)

    def trauma_effects(self, profile: Any, trauma: Any, severity: float = 0.5) -> EffectSet:
        """
        Trauma deltas are keyed by bare facet id; each id lands on the
        profile's trait of that id, else its emotional tendency, else
        nowhere.
        """
        kind = _field(trauma, "type", "general")
        traits, emotional = {}, {}
        for facet_id, base in (self.rules.trauma_effects.get(kind) or {}).items():
            if facet_id in profile.traits:
                traits[facet_id] = base * severity
            elif facet_id in profile.emotional_tendencies:
                emotional[facet_id] = base * severity
        return EffectSet(traits=traits, emotional=emotional)

    def social_effects(self, interaction: Any) -> EffectSet:
        kind = _field(interaction, "type", "conversation")
        outcome = _field(interaction, "outcome", "neutral")
        multiplier = _field(interaction, "intimacy", 0.5) * _field(interaction, "duration", 1) * 0.1
        table = (self.rules.social_effects.get(kind) or {}).get(outcome)
        if not table:
            return EMPTY_EFFECTS
        return EffectSet.from_table(table, multiplier)

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------

    def apply(self, profile: Any, effects: EffectSet, reason: str,
              at: Union[datetime, str, None] = None, note: str = "lastChange") -> Any:
        """New profile with ``effects`` folded into every matching facet."""
        when = coerce_timestamp(at)
        collections = {}
        touched = 0
        for group, kind in GROUP_KINDS.items():
            deltas = effects.group(group)
            updated = {}
            for facet_id, facet in profile.facets(kind).items():
                delta = deltas.get(facet_id, 0)
                if delta:
                    updated[facet_id] = facet.evolved(delta * facet.sensitivity, reason, when, note)
                    touched += 1
                else:
                    updated[facet_id] = facet
            collections[kind] = updated
        logger.debug("%s: %d facets touched", reason, touched)
        return profile.with_facets(collections)

    def age_modifiers(self, age: float, overrides: Optional[Mapping] = None) -> Dict[str, float]:
        applied = {
            "wisdom": self.rules.wisdom_by_age.lookup(age),
            "volatility": self.rules.volatility_by_age.lookup(age),
            "adaptability": self.rules.adaptability_by_age.lookup(age),
            "physicalDecline": self.rules.physical_decline_by_age.lookup(age),
        }
        for key, value in (overrides or {}).items():
            applied[_AGE_KEY_ALIASES.get(key, key)] = value
        return applied

    def apply_age(self, profile: Any, age: float, overrides: Optional[Mapping] = None,
                  at: Union[datetime, str, None] = None) -> Any:
        """
        Age is a pure function of the table lookups plus overrides: volatility
        and adaptability are scaled and clamped to [0.1, 1], physical
        attributes decline to a floor of 3, wisdom grows to a cap of 20.
        """
        when = coerce_timestamp(at)
        applied = self.age_modifiers(age, overrides)
        note = {"age": age, "timestamp": when.isoformat(), "appliedModifiers": dict(applied)}

        traits = {}
        for facet_id, trait in profile.facets(FacetKind.TRAITS).items():
            scaled = trait.with_volatility_scaled(applied["volatility"])
            metadata = dict(scaled.metadata)
            metadata["ageModified"] = note
            traits[facet_id] = replace(scaled, metadata=metadata)

        emotional = {
            facet_id: tendency.with_volatility_scaled(applied["volatility"])
            for facet_id, tendency in profile.facets(FacetKind.EMOTIONAL).items()
        }
        cognitive = {
            facet_id: trait.with_adaptability_scaled(applied["adaptability"])
            for facet_id, trait in profile.facets(FacetKind.COGNITIVE).items()
        }

        attributes = {}
        for facet_id, attribute in profile.facets(FacetKind.ATTRIBUTES).items():
            value = attribute.base_value
            if facet_id in PHYSICAL_ATTRIBUTES:
                value = max(PHYSICAL_FLOOR, value + applied["physicalDecline"])
            elif facet_id == "wisdom":
                value = min(WISDOM_CAP, value + applied["wisdom"])
            attributes[facet_id] = replace(attribute, base_value=round_half_up(value))

        logger.debug("Age %s modifiers applied: %s", age, applied)
        return profile.with_facets({
            FacetKind.TRAITS: traits,
            FacetKind.ATTRIBUTES: attributes,
            FacetKind.EMOTIONAL: emotional,
            FacetKind.COGNITIVE: cognitive,
        })


DEFAULT_ENGINE = TraitEvolutionEngine()
