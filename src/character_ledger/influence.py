"""
Influence - political, economic and social standing.

Each domain runs over a numeric range and is classified into tiers.

Usage:
    from character_ledger.influence import Influence

    influence = Influence()                 # default domains
    influence = influence.with_change("economic", 30, "Trade deal",
                                      {"settlementData": {"population": 1200}})
    influence.get_tier("economic").name     # "Modest"
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from character_ledger.catalog import CatalogSchema, DimensionDefinition, Tier
from character_ledger.ledger import ChangeRecord, Ledger


INFLUENCE_SCHEMA = CatalogSchema(
    kind="influence",
    label="domain",
    plural="domains",
    subrange_label="tier",
    subrange_key="tiers",
    subrange_type=Tier,
    legacy_manager_name="InfluenceManager",
    legacy_values_key="playerInfluence",
    legacy_context_key="settlementContext",
)


DEFAULT_INFLUENCE_DOMAINS: List[Dict[str, Any]] = [
    {
        "id": "political",
        "name": "Political",
        "description": "Political influence and power",
        "min": 0,
        "max": 100,
        "defaultValue": 10,
        "tiers": [
            {"name": "None", "min": 0, "max": 9, "description": "No political influence"},
            {"name": "Low", "min": 10, "max": 29, "description": "Minor political influence"},
            {"name": "Medium", "min": 30, "max": 59, "description": "Moderate political influence"},
            {"name": "High", "min": 60, "max": 89, "description": "High political influence"},
            {"name": "VeryHigh", "min": 90, "max": 100, "description": "Dominant political influence"},
        ],
    },
    {
        "id": "economic",
        "name": "Economic",
        "description": "Economic influence and wealth",
        "min": 0,
        "max": 100,
        "defaultValue": 5,
        "tiers": [
            {"name": "Poor", "min": 0, "max": 19, "description": "Little economic influence"},
            {"name": "Modest", "min": 20, "max": 49, "description": "Modest economic influence"},
            {"name": "Wealthy", "min": 50, "max": 79, "description": "Significant economic influence"},
            {"name": "Very Wealthy", "min": 80, "max": 100, "description": "Dominant economic influence"},
        ],
    },
    {
        "id": "social",
        "name": "Social",
        "description": "Social influence and reputation",
        "min": 0,
        "max": 100,
        "defaultValue": 15,
        "tiers": [
            {"name": "Unknown", "min": 0, "max": 14, "description": "No social recognition"},
            {"name": "Known", "min": 15, "max": 39, "description": "Some social recognition"},
            {"name": "Respected", "min": 40, "max": 69, "description": "Well respected socially"},
            {"name": "Renowned", "min": 70, "max": 100, "description": "Widely renowned"},
        ],
    },
]


class Influence(Ledger):
    """Ledger over influence domains, classified into tiers."""

    schema = INFLUENCE_SCHEMA

    def __init__(self, domains: Optional[Iterable[Any]] = None, values=None, history=None):
        super().__init__(DEFAULT_INFLUENCE_DOMAINS if domains is None else domains, values, history)

    @property
    def domains(self) -> Tuple[DimensionDefinition, ...]:
        return self.definitions

    def domain_ids(self) -> List[str]:
        return self.dimension_ids

    def has_domain(self, domain_id: str) -> bool:
        return self.has_dimension(domain_id)

    def get_domain(self, domain_id: str) -> Optional[DimensionDefinition]:
        return self.get_dimension(domain_id)

    def get_tier(self, domain_id: str) -> Optional[Tier]:
        return self.classify(domain_id)

    def get_domain_history(self, domain_id: str) -> Tuple[ChangeRecord, ...]:
        return self.get_history(domain_id)
