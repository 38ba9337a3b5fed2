"""
Character Ledger Package

Bounded, append-only character state for narrative and world simulation.

Architecture:
    DimensionCatalog → Ledger (Influence / Prestige / Alignment)
                            ↓
                     ChangeRecord history → Codec → JSON snapshot

    RuleTables → TraitEvolutionEngine → PersonalityProfile

Core principle: every change is a new snapshot, and every snapshot can
explain how it got there.

Modules:
    catalog.py       - Validated dimension definitions and classification
    ledger.py        - Generic immutable value + history ledger
    influence.py     - Influence domains and tiers
    prestige.py      - Prestige tracks, levels and decay
    alignment.py     - Alignment axes, zones and effects
    personality/     - Facets, rule tables and the evolution engine
    codec.py         - JSON snapshots
    analysis.py      - numpy statistics over snapshots
    config_loader.py - JSON config for catalogs and rule tables
"""

from character_ledger.alignment import DEFAULT_ALIGNMENT_AXES, Alignment
from character_ledger.catalog import (
    CatalogSchema,
    DimensionCatalog,
    DimensionDefinition,
    Level,
    Subrange,
    Tier,
    TrackDefinition,
    Zone,
    ZoneEffect,
)
from character_ledger.errors import (
    ConfigurationError,
    DeserializationError,
    InvalidDecay,
    LedgerError,
    MissingLegacyManager,
    UnknownDimension,
    UnknownFacet,
)
from character_ledger.influence import DEFAULT_INFLUENCE_DOMAINS, Influence
from character_ledger.ledger import ChangeRecord, Ledger
from character_ledger.personality import (
    Attribute,
    CognitiveTrait,
    EffectSet,
    EmotionalTendency,
    FacetKind,
    PersonalityProfile,
    RuleTables,
    Trait,
    TraitEvolutionEngine,
)
from character_ledger.prestige import DEFAULT_PRESTIGE_TRACKS, Prestige

__version__ = "0.1.0"
__all__ = [
    # Ledgers
    "Ledger",
    "ChangeRecord",
    "Influence",
    "Prestige",
    "Alignment",
    "DEFAULT_INFLUENCE_DOMAINS",
    "DEFAULT_PRESTIGE_TRACKS",
    "DEFAULT_ALIGNMENT_AXES",
    # Catalog
    "CatalogSchema",
    "DimensionCatalog",
    "DimensionDefinition",
    "TrackDefinition",
    "Subrange",
    "Tier",
    "Level",
    "Zone",
    "ZoneEffect",
    # Personality
    "PersonalityProfile",
    "TraitEvolutionEngine",
    "EffectSet",
    "RuleTables",
    "FacetKind",
    "Trait",
    "EmotionalTendency",
    "CognitiveTrait",
    "Attribute",
    # Errors
    "LedgerError",
    "ConfigurationError",
    "UnknownDimension",
    "UnknownFacet",
    "InvalidDecay",
    "DeserializationError",
    "MissingLegacyManager",
]
