"""
Personality Profile - immutable snapshot of a character's four facet
collections.

Every evolution operation returns a new profile; facet collections keep
insertion order and are exposed as read-only mappings.

Usage:
    from character_ledger.personality import PersonalityProfile

    profile = PersonalityProfile(traits=[{"id": "courage", "volatility": 0.5}])
    braver = profile.with_experience_influence({"type": "combat", "intensity": 1.0})
    braver.get_trait("courage").intensity    # 0.55
    profile.get_trait("courage").intensity   # 0.5
"""

from collections.abc import Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Optional, Union

from character_ledger.errors import ConfigurationError, UnknownFacet
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

Timestamp = Union[datetime, str, None]


def _build_collection(kind: FacetKind, entries: Iterable[Any], problems: List[str]) -> Dict[str, Any]:
    facet_type = kind.facet_type
    collection = {}
    if isinstance(entries, (str, bytes, Mapping)) or not isinstance(entries, Iterable):
        problems.append(f"{kind.value} must be a list of facets")
        return collection
    for entry in entries:
        if isinstance(entry, (Trait, CognitiveTrait, Attribute)):
            if type(entry) is not facet_type:
                problems.append(f"{kind.value} cannot hold a {type(entry).__name__}")
                continue
            facet = entry
        else:
            entry_problems = facet_type.violations(entry)
            if entry_problems:
                problems.extend(entry_problems)
                continue
            facet = facet_type.from_dict(entry)
        if facet.id in collection:
            problems.append(f"Duplicate {facet_type.KIND} id '{facet.id}'")
            continue
        collection[facet.id] = facet
    return collection


class PersonalityProfile:
    """
    Four facet collections: traits, attributes, emotional tendencies and
    cognitive traits.

    Omitting ``attributes`` gives the six default ability scores; an
    explicit empty list gives none.
    """

    def __init__(
        self,
        traits: Optional[Iterable[Any]] = None,
        attributes: Optional[Iterable[Any]] = None,
        emotional_tendencies: Optional[Iterable[Any]] = None,
        cognitive_traits: Optional[Iterable[Any]] = None,
        *,
        engine: Optional[TraitEvolutionEngine] = None,
    ):
        problems: List[str] = []
        self._facets = {
            FacetKind.TRAITS: _build_collection(FacetKind.TRAITS, traits or [], problems),
            FacetKind.ATTRIBUTES: _build_collection(
                FacetKind.ATTRIBUTES,
                DEFAULT_ATTRIBUTES if attributes is None else attributes,
                problems,
            ),
            FacetKind.EMOTIONAL: _build_collection(FacetKind.EMOTIONAL, emotional_tendencies or [], problems),
            FacetKind.COGNITIVE: _build_collection(FacetKind.COGNITIVE, cognitive_traits or [], problems),
        }
        if problems:
            raise ConfigurationError(problems)
        self._engine = engine or DEFAULT_ENGINE

    @classmethod
    def from_collections(cls, collections: Mapping, *,
                         engine: Optional[TraitEvolutionEngine] = None) -> "PersonalityProfile":
        """Build from ``{kind: entries}``; kinds are FacetKind members or wire keys."""
        by_kind = {}
        for key, entries in collections.items():
            by_kind[FacetKind.parse(key)] = entries
        return cls(
            traits=by_kind.get(FacetKind.TRAITS),
            attributes=by_kind.get(FacetKind.ATTRIBUTES),
            emotional_tendencies=by_kind.get(FacetKind.EMOTIONAL),
            cognitive_traits=by_kind.get(FacetKind.COGNITIVE),
            engine=engine,
        )

    def with_facets(self, collections: Mapping) -> "PersonalityProfile":
        """Successor profile with the given collections swapped in whole."""
        profile = PersonalityProfile.__new__(type(self))
        profile._facets = dict(self._facets)
        for kind, facets in collections.items():
            profile._facets[FacetKind.parse(kind)] = dict(facets)
        profile._engine = self._engine
        return profile

    # =========================================================================
    # Reads
    # =========================================================================

    @property
    def engine(self) -> TraitEvolutionEngine:
        return self._engine

    @property
    def traits(self) -> Mapping:
        return MappingProxyType(self._facets[FacetKind.TRAITS])

    @property
    def attributes(self) -> Mapping:
        return MappingProxyType(self._facets[FacetKind.ATTRIBUTES])

    @property
    def emotional_tendencies(self) -> Mapping:
        return MappingProxyType(self._facets[FacetKind.EMOTIONAL])

    @property
    def cognitive_traits(self) -> Mapping:
        return MappingProxyType(self._facets[FacetKind.COGNITIVE])

    def facets(self, kind: Union[FacetKind, str]) -> Mapping:
        return MappingProxyType(self._facets[FacetKind.parse(kind)])

    def facet(self, kind: Union[FacetKind, str], facet_id: str) -> Any:
        kind = FacetKind.parse(kind)
        try:
            return self._facets[kind][facet_id]
        except KeyError:
            raise UnknownFacet(facet_id, kind.value) from None

    def get_trait(self, facet_id: str) -> Optional[Trait]:
        return self._facets[FacetKind.TRAITS].get(facet_id)

    def get_attribute(self, facet_id: str) -> Optional[Attribute]:
        return self._facets[FacetKind.ATTRIBUTES].get(facet_id)

    def get_emotional_tendency(self, facet_id: str) -> Optional[EmotionalTendency]:
        return self._facets[FacetKind.EMOTIONAL].get(facet_id)

    def get_cognitive_trait(self, facet_id: str) -> Optional[CognitiveTrait]:
        return self._facets[FacetKind.COGNITIVE].get(facet_id)

    # =========================================================================
    # Evolution
    # =========================================================================

    def with_experience_influence(self, experience: Any, context: Any = None, *,
                                  at: Timestamp = None) -> "PersonalityProfile":
        kind = _get(experience, "type") or "Unknown"
        effects = self._engine.experience_effects(experience, context)
        return self._engine.apply(self, effects, f"Experience: {kind}", at)

    def with_historical_event_influence(self, event: Any, character_role: Any = None, *,
                                        at: Timestamp = None) -> "PersonalityProfile":
        label = _get(event, "name") or _get(event, "type") or "Unknown"
        effects = self._engine.historical_effects(event, character_role)
        return self._engine.apply(self, effects, f"Historical Event: {label}", at)

    def with_trauma_influence(self, trauma: Any, severity: Optional[float] = 0.5, *,
                              at: Timestamp = None) -> "PersonalityProfile":
        if severity is None:
            severity = 0.5
        kind = _get(trauma, "type") or "Unspecified"
        effects = self._engine.trauma_effects(self, trauma, severity)
        return self._engine.apply(self, effects, f"Trauma: {kind} (Severity: {severity})", at)

    def with_social_influence(self, interaction: Any, other_character: Any = None, *,
                              at: Timestamp = None) -> "PersonalityProfile":
        kind = _get(interaction, "type") or "General"
        effects = self._engine.social_effects(interaction)
        return self._engine.apply(self, effects, f"Social Interaction: {kind}", at)

    def with_trait_evolution(self, changes: Any, reason: str = "Experience-based evolution", *,
                             at: Timestamp = None) -> "PersonalityProfile":
        """
        Apply caller-supplied ``trait id -> delta`` changes to traits only.

        The change is noted under ``metadata["lastEvolution"]``, apart from
        the event-driven ``lastChange`` note.
        """
        return self._engine.apply(self, EffectSet(traits=changes), reason, at, note="lastEvolution")

    def with_age_modifiers(self, age: float, overrides: Optional[Mapping] = None, *,
                           at: Timestamp = None) -> "PersonalityProfile":
        return self._engine.apply_age(self, age, overrides, at)

    # =========================================================================
    # Equality and serialization
    # =========================================================================

    def equals(self, other: Any) -> bool:
        return self == other

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PersonalityProfile):
            return NotImplemented
        return all(
            list(self._facets[k].items()) == list(other._facets[k].items())
            for k in FacetKind
        )

    __hash__ = None

    def to_dict(self) -> Dict[str, Any]:
        from character_ledger import codec
        return codec.profile_to_dict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "PersonalityProfile":
        from character_ledger import codec
        return codec.profile_from_dict(data)

    def to_json(self, indent: Optional[int] = None) -> str:
        from character_ledger import codec
        return codec.dumps(self, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "PersonalityProfile":
        from character_ledger import codec
        return codec.profile_from_dict(codec.parse_json(text))

    def __repr__(self) -> str:
        counts = ", ".join(f"{k.value}={len(self._facets[k])}" for k in FacetKind)
        return f"PersonalityProfile({counts})"


def _get(source: Any, key: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)
