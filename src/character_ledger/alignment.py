"""
Alignment - moral and ethical axes.

Axes are signed ranges classified into zones; each zone may carry effect
annotations that downstream systems read (reaction modifiers, access
flags). Effects are informational and never change values here.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from character_ledger.catalog import CatalogSchema, DimensionDefinition, Zone, ZoneEffect
from character_ledger.ledger import ChangeRecord, Ledger


ALIGNMENT_SCHEMA = CatalogSchema(
    kind="alignment",
    label="axis",
    plural="axes",
    subrange_label="zone",
    subrange_key="zones",
    subrange_type=Zone,
    legacy_manager_name="AlignmentManager",
    legacy_values_key="playerAlignment",
    legacy_context_key="historicalContext",
)


DEFAULT_ALIGNMENT_AXES: List[Dict[str, Any]] = [
    {
        "id": "moral",
        "name": "Moral",
        "description": "Good vs Evil",
        "min": -100,
        "max": 100,
        "defaultValue": 0,
        "zones": [
            {"name": "Evil", "min": -100, "max": -34, "description": "Evil alignment",
             "effects": [{"type": "reaction", "value": -2,
                          "description": "Good-aligned characters distrust you"}]},
            {"name": "Neutral", "min": -33, "max": 33, "description": "Neutral alignment",
             "effects": []},
            {"name": "Good", "min": 34, "max": 100, "description": "Good alignment",
             "effects": [{"type": "reaction", "value": 2,
                          "description": "Good-aligned characters trust you"}]},
        ],
    },
    {
        "id": "ethical",
        "name": "Ethical",
        "description": "Lawful vs Chaotic",
        "min": -100,
        "max": 100,
        "defaultValue": 0,
        "zones": [
            {"name": "Chaotic", "min": -100, "max": -34, "description": "Chaotic alignment",
             "effects": [{"type": "authority", "value": -1,
                          "description": "Officials watch you closely"}]},
            {"name": "Neutral", "min": -33, "max": 33, "description": "Neutral alignment",
             "effects": []},
            {"name": "Lawful", "min": 34, "max": 100, "description": "Lawful alignment",
             "effects": [{"type": "authority", "value": 1,
                          "description": "Officials extend you credit"}]},
        ],
    },
]


class Alignment(Ledger):
    """Ledger over alignment axes, classified into zones."""

    schema = ALIGNMENT_SCHEMA

    def __init__(self, axes: Optional[Iterable[Any]] = None, values=None, history=None):
        super().__init__(DEFAULT_ALIGNMENT_AXES if axes is None else axes, values, history)

    @property
    def axes(self) -> Tuple[DimensionDefinition, ...]:
        return self.definitions

    def axis_ids(self) -> List[str]:
        return self.dimension_ids

    def has_axis(self, axis_id: str) -> bool:
        return self.has_dimension(axis_id)

    def get_axis(self, axis_id: str) -> Optional[DimensionDefinition]:
        return self.get_dimension(axis_id)

    def get_zone(self, axis_id: str) -> Optional[Zone]:
        return self.classify(axis_id)

    def get_axis_history(self, axis_id: str) -> Tuple[ChangeRecord, ...]:
        return self.get_history(axis_id)

    def zone_effects(self, axis_id: str) -> Tuple[ZoneEffect, ...]:
        """Effects of the zone the axis currently sits in; empty in a gap."""
        zone = self.get_zone(axis_id)
        return zone.effects if zone else ()
