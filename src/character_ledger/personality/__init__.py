"""
Personality - facet collections and rule-driven trait evolution.
"""

from character_ledger.personality.evolution import (
    DEFAULT_ENGINE,
    EffectSet,
    TraitEvolutionEngine,
)
from character_ledger.personality.facets import (
    DEFAULT_ATTRIBUTES,
    Attribute,
    CognitiveTrait,
    EmotionalTendency,
    FacetKind,
    Trait,
)
from character_ledger.personality.profile import PersonalityProfile
from character_ledger.personality.rules import DEFAULT_RULES, AgeTable, RuleTables

__all__ = [
    "AgeTable",
    "Attribute",
    "CognitiveTrait",
    "DEFAULT_ATTRIBUTES",
    "DEFAULT_ENGINE",
    "DEFAULT_RULES",
    "EffectSet",
    "EmotionalTendency",
    "FacetKind",
    "PersonalityProfile",
    "RuleTables",
    "Trait",
    "TraitEvolutionEngine",
]
