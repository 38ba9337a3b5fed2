"""
Prestige - multi-track reputation with time decay.

Tracks are classified into levels that grant political power and social
benefits. Prestige is the only ledger that decays: decay lowers values
toward the track floor and never raises them.

Usage:
    from character_ledger.prestige import Prestige

    prestige = Prestige().with_change("military", 50, "Won the siege")
    prestige = prestige.with_time_decay(elapsed_days=30)
    prestige.get_level("military").political_power
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from character_ledger.catalog import CatalogSchema, Level, TrackDefinition
from character_ledger.ledger import ChangeRecord, Ledger

logger = logging.getLogger(__name__)

# Decay amounts at or below this are not worth a history entry
MIN_DECAY_AMOUNT = 0.1

# Track decay rates are expressed per 30-day period
DECAY_PERIOD_DAYS = 30

# Level name fragment -> decay multiplier, first match wins
LEVEL_DECAY_MULTIPLIERS = (
    ("Very High", 1.8),
    ("VeryHigh", 1.8),
    ("Legendary", 1.8),
    ("High", 1.4),
)

MAX_SKILL_DAMPING = 0.4
DEFAULT_AGE = 30


PRESTIGE_SCHEMA = CatalogSchema(
    kind="prestige",
    label="track",
    plural="tracks",
    subrange_label="level",
    subrange_key="levels",
    definition_type=TrackDefinition,
    subrange_type=Level,
    supports_decay=True,
    legacy_manager_name="PrestigeManager",
    legacy_values_key="playerPrestige",
    legacy_context_key="socialContext",
)


DEFAULT_PRESTIGE_TRACKS: List[Dict[str, Any]] = [
    {
        "id": "military",
        "name": "Military",
        "description": "Military prowess and reputation",
        "min": 0,
        "max": 100,
        "defaultValue": 10,
        "decayRate": 0.02,
        "category": "combat",
        "categoryWeight": 1.2,
        "levels": [
            {"name": "Unknown", "min": 0, "max": 19, "politicalPower": 0, "socialBenefits": []},
            {"name": "Recognized", "min": 20, "max": 39, "politicalPower": 5,
             "socialBenefits": ["military_respect"]},
            {"name": "Renowned", "min": 40, "max": 69, "politicalPower": 15,
             "socialBenefits": ["military_respect", "veteran_status"]},
            {"name": "Legendary", "min": 70, "max": 100, "politicalPower": 30,
             "socialBenefits": ["military_respect", "veteran_status", "hero_status"]},
        ],
    },
    {
        "id": "social",
        "name": "Social",
        "description": "Social standing and reputation",
        "min": 0,
        "max": 100,
        "defaultValue": 15,
        "decayRate": 0.015,
        "category": "social",
        "categoryWeight": 1.0,
        "levels": [
            {"name": "Commoner", "min": 0, "max": 24, "politicalPower": 0, "socialBenefits": []},
            {"name": "Respected", "min": 25, "max": 49, "politicalPower": 3,
             "socialBenefits": ["social_invitations"]},
            {"name": "Influential", "min": 50, "max": 74, "politicalPower": 10,
             "socialBenefits": ["social_invitations", "opinion_leader"]},
            {"name": "Elite", "min": 75, "max": 100, "politicalPower": 20,
             "socialBenefits": ["social_invitations", "opinion_leader", "high_society"]},
        ],
    },
]


def _trait(character: Any, key: str, default: float) -> float:
    if character is None:
        return default
    if isinstance(character, Mapping):
        value = character.get(key)
    else:
        value = getattr(character, key, None)
    return default if value is None else value


class Prestige(Ledger):
    """Ledger over prestige tracks, classified into levels, with decay."""

    schema = PRESTIGE_SCHEMA

    def __init__(self, tracks: Optional[Iterable[Any]] = None, values=None, history=None):
        super().__init__(DEFAULT_PRESTIGE_TRACKS if tracks is None else tracks, values, history)

    @property
    def tracks(self) -> Tuple[TrackDefinition, ...]:
        return self.definitions

    def track_ids(self) -> List[str]:
        return self.dimension_ids

    def has_track(self, track_id: str) -> bool:
        return self.has_dimension(track_id)

    def get_track(self, track_id: str) -> Optional[TrackDefinition]:
        return self.get_dimension(track_id)

    def get_level(self, track_id: str) -> Optional[Level]:
        return self.classify(track_id)

    def get_track_history(self, track_id: str) -> Tuple[ChangeRecord, ...]:
        return self.get_history(track_id)

    def total_prestige(self) -> float:
        """Sum of track values weighted by each track's category weight."""
        return sum(self.values[t.id] * t.category_weight for t in self.tracks)

    # =========================================================================
    # Decay
    # =========================================================================

    def with_decay(
        self,
        rates_by_track: Union[Mapping, Iterable[Tuple[str, float]]],
        *,
        timestamp: Union[datetime, str, None] = None,
    ) -> "Prestige":
        """
        Subtract a non-negative amount from each listed track.

        All amounts are validated before any track is touched; a negative or
        non-numeric amount for a known track raises InvalidDecay. Unknown
        track ids are skipped whatever their amount. A record is appended
        only when the value moved.
        """
        return self._with_decay(rates_by_track, timestamp)

    def decay_rate_for(
        self,
        track_id: str,
        base_rate: Optional[float] = None,
        character: Any = None,
    ) -> float:
        """
        Effective per-period decay rate of one track.

        Starts from ``base_rate`` (the track's own rate when None), then:
        - high levels are harder to hold: x1.8 for "Legendary" / "Very High",
          x1.4 for other "High" levels
        - charisma + socialSkill slow decay, by at most 40%
        - physical tracks decay faster past 40, wisdom tracks slower past 50
        """
        track = self.catalog.get(track_id)
        rate = track.decay_rate if base_rate is None else base_rate

        level = self.get_level(track_id)
        if level is not None:
            for fragment, factor in LEVEL_DECAY_MULTIPLIERS:
                if fragment in level.name:
                    rate *= factor
                    break

        charisma = _trait(character, "charisma", 0)
        social_skill = _trait(character, "socialSkill", 0)
        rate *= 1 - min((charisma + social_skill) / 200, MAX_SKILL_DAMPING)

        age = _trait(character, "age", DEFAULT_AGE)
        if track_id == "physical" and age > 40:
            rate *= 1 + (age - 40) / 100
        elif track_id == "wisdom" and age > 50:
            rate *= 0.8

        return max(rate, 0)

    def decay_rates_for(
        self,
        elapsed_days: float,
        overrides: Optional[Mapping] = None,
        character: Any = None,
    ) -> Dict[str, float]:
        """
        Decay amounts owed after ``elapsed_days``.

        amount = value * rate * elapsed / 30, where rate comes from
        :meth:`decay_rate_for` seeded with the override for the track if
        given. Amounts at or below MIN_DECAY_AMOUNT are left out.
        """
        overrides = overrides or {}
        amounts = {}
        for track in self.tracks:
            rate = self.decay_rate_for(track.id, overrides.get(track.id), character)
            amount = self.values[track.id] * rate * (elapsed_days / DECAY_PERIOD_DAYS)
            if amount > MIN_DECAY_AMOUNT:
                amounts[track.id] = amount
        return amounts

    def with_time_decay(
        self,
        elapsed_days: float,
        overrides: Optional[Mapping] = None,
        character: Any = None,
        *,
        timestamp: Union[datetime, str, None] = None,
    ) -> "Prestige":
        if elapsed_days <= 0:
            return self
        amounts = self.decay_rates_for(elapsed_days, overrides, character)
        logger.debug("Time decay over %s days touches %d tracks", elapsed_days, len(amounts))
        return self.with_decay(amounts, timestamp=timestamp)
