"""
Codec - JSON snapshots for ledgers and personality profiles.

Ledger snapshot:
    {"<plural>": [definition, ...],          # domains / tracks / axes
     "values": {"<id>": number},
     "history": {"<id>": [{"timestamp": ISO-8601, "delta": number,
                           "resultingValue": number, "reason": str,
                           "context": ...}]}}

Profile snapshot:
    {"traits": [...], "attributes": [...],
     "emotionalTendencies": [...], "cognitiveTraits": [...]}

Anything malformed raises DeserializationError; there is no partial
reconstruction.

Usage:
    from character_ledger import codec

    text = codec.dumps(influence)
    restored = codec.loads(text)              # kind detected from keys
    codec.save(prestige, "prestige.json")
    prestige = codec.load("prestige.json", kind="prestige")
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

from character_ledger.alignment import Alignment
from character_ledger.errors import ConfigurationError, DeserializationError
from character_ledger.influence import Influence
from character_ledger.ledger import ChangeRecord, Ledger
from character_ledger.personality.facets import FacetKind
from character_ledger.personality.profile import PersonalityProfile
from character_ledger.prestige import Prestige


LEDGER_TYPES: Dict[str, Type[Ledger]] = {
    "influence": Influence,
    "prestige": Prestige,
    "alignment": Alignment,
}

KINDS = tuple(LEDGER_TYPES) + ("profile",)

Snapshot = Union[Ledger, PersonalityProfile]


# =============================================================================
# Ledgers
# =============================================================================

def ledger_to_dict(ledger: Ledger) -> Dict[str, Any]:
    return {
        ledger.schema.plural: ledger.catalog.to_list(),
        "values": dict(ledger.values),
        "history": {
            dimension_id: [record.to_dict() for record in records]
            for dimension_id, records in ledger.history.items()
        },
    }


def ledger_from_dict(cls: Type[Ledger], data: Any) -> Ledger:
    if not isinstance(data, Mapping):
        raise DeserializationError(f"Invalid JSON data for {cls.__name__}: expected an object")

    plural = cls.schema.plural
    definitions = data.get(plural)
    if not isinstance(definitions, list):
        raise DeserializationError(f"{cls.__name__} snapshot must have a '{plural}' list")

    values = data.get("values") or {}
    if not isinstance(values, Mapping):
        raise DeserializationError(f"{cls.__name__} snapshot 'values' must be an object")

    raw_history = data.get("history") or {}
    if not isinstance(raw_history, Mapping):
        raise DeserializationError(f"{cls.__name__} snapshot 'history' must be an object")
    history = {}
    for dimension_id, records in raw_history.items():
        if not isinstance(records, list):
            raise DeserializationError(f"History for '{dimension_id}' must be a list")
        history[dimension_id] = [ChangeRecord.from_dict(r) for r in records]

    try:
        return cls(definitions, values, history)
    except ConfigurationError as exc:
        raise DeserializationError(f"Invalid {cls.__name__} snapshot: {exc}") from exc


# =============================================================================
# Profiles
# =============================================================================

def profile_to_dict(profile: PersonalityProfile) -> Dict[str, Any]:
    return {
        kind.value: [facet.to_dict() for facet in profile.facets(kind).values()]
        for kind in FacetKind
    }


def profile_from_dict(data: Any) -> PersonalityProfile:
    if not isinstance(data, Mapping):
        raise DeserializationError("Invalid JSON data for PersonalityProfile: expected an object")

    wire_keys = {kind.value for kind in FacetKind}
    unknown = sorted(k for k in data if k not in wire_keys)
    if unknown:
        raise DeserializationError(f"Unknown facet collections: {', '.join(unknown)}")

    collections = {}
    for kind in FacetKind:
        entries = data.get(kind.value) or []
        if not isinstance(entries, list):
            raise DeserializationError(f"'{kind.value}' must be a list")
        collections[kind] = entries

    try:
        return PersonalityProfile.from_collections(collections)
    except ConfigurationError as exc:
        raise DeserializationError(f"Invalid PersonalityProfile snapshot: {exc}") from exc


# =============================================================================
# Dispatch
# =============================================================================

def to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    if isinstance(snapshot, Ledger):
        return ledger_to_dict(snapshot)
    if isinstance(snapshot, PersonalityProfile):
        return profile_to_dict(snapshot)
    raise TypeError(f"Cannot serialize {type(snapshot).__name__}")


def detect_kind(data: Any) -> str:
    """Snapshot kind from its top-level keys."""
    if isinstance(data, Mapping):
        for kind, ledger_type in LEDGER_TYPES.items():
            if ledger_type.schema.plural in data:
                return kind
        if any(k.value in data for k in FacetKind):
            return "profile"
    raise DeserializationError("Cannot detect snapshot kind")


def from_dict(data: Any, kind: Optional[str] = None) -> Snapshot:
    kind = kind or detect_kind(data)
    if kind == "profile":
        return profile_from_dict(data)
    if kind not in LEDGER_TYPES:
        raise DeserializationError(f"Unknown snapshot kind: {kind!r}")
    return ledger_from_dict(LEDGER_TYPES[kind], data)


def parse_json(text: Union[str, bytes]) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"Snapshot is not valid JSON: {exc}") from exc


def dumps(snapshot: Snapshot, indent: Optional[int] = None) -> str:
    return json.dumps(to_dict(snapshot), indent=indent)


def loads(text: Union[str, bytes], kind: Optional[str] = None) -> Snapshot:
    return from_dict(parse_json(text), kind)


def save(snapshot: Snapshot, path: Union[str, Path], indent: int = 2) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(snapshot, indent=indent))
    return path


def load(path: Union[str, Path], kind: Optional[str] = None) -> Snapshot:
    return loads(Path(path).read_text(), kind)
