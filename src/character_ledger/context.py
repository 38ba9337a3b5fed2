"""
Context Payloads - frozen structured data attached to change records.

A change record may carry an opaque context payload (settlement data,
witness counts, social connections, ...). Two concerns live here:

1. Freezing. Payloads are deep-copied into read-only structures on the way
   in: mappings become read-only mapping views, lists become tuples. A
   caller that keeps a reference to the dict it passed in cannot reach the
   snapshot's copy.

2. Tagged map encoding. A JSON object cannot carry non-string keys and is a
   poor signal of "this field is an associative structure". Mapping-valued
   fields are therefore written as an array of pairs plus an explicit
   marker:

       {"settlementData": [["population", 1200], [7, "ward"]],
        "_settlementDataSerialized": true}

   Decoding only rebuilds a mapping when the marker is present. Without the
   marker the field is a plain value.

   A mapping with non-string keys anywhere else (the payload itself, a
   value inside a pair, a list item) is wrapped instead:

       {"__map__": [[7, "north"], [8, "south"]]}

Usage:
    from character_ledger.context import freeze, encode_context, decode_context

    payload = freeze({"settlementData": {"population": 1200}})
    wire = encode_context(payload)
    assert decode_context(wire) == payload
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from character_ledger.errors import DeserializationError


MARKER_SUFFIX = "Serialized"

# Wrapper key for mappings that cannot be written as a JSON object
MAP_TAG = "__map__"


def marker_for(field_name: str) -> str:
    """Marker key that tags ``field_name`` as a pair-encoded mapping."""
    return f"_{field_name}{MARKER_SUFFIX}"


# =============================================================================
# Freezing
# =============================================================================

def freeze(value: Any) -> Any:
    """Deep-copy ``value`` into read-only mappings and tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({_freeze_key(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: plain dicts and lists, JSON-friendly."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


def _freeze_key(key: Any) -> Any:
    if isinstance(key, list):
        return tuple(_freeze_key(k) for k in key)
    return key


# =============================================================================
# Tagged map encoding
# =============================================================================

def encode_context(value: Any) -> Any:
    """
    Convert a (frozen) payload into JSON-compatible data.

    Mapping-valued fields of an object become ``[[key, value], ...]`` with a
    ``_<field>Serialized: true`` marker next to them. A mapping that cannot
    be a JSON object (non-string keys) is written as ``{"__map__": pairs}``
    wherever it appears.
    """
    if isinstance(value, Mapping):
        if _needs_map_tag(value):
            return {MAP_TAG: _encode_pairs(value)}
        encoded = {}
        for key, item in value.items():
            if isinstance(item, Mapping):
                encoded[key] = _encode_pairs(item)
                encoded[marker_for(key)] = True
            else:
                encoded[key] = encode_context(item)
        return encoded
    if isinstance(value, (list, tuple)):
        return [encode_context(v) for v in value]
    return value


def decode_context(value: Any) -> Any:
    """Rebuild a frozen payload from :func:`encode_context` output."""
    if isinstance(value, dict):
        if list(value) == [MAP_TAG]:
            return _decode_pairs(MAP_TAG, value[MAP_TAG])
        decoded = {}
        for key, item in value.items():
            if _is_marker_of_present_field(key, value):
                continue
            if value.get(marker_for(key)) is True:
                decoded[key] = _decode_pairs(key, item)
            else:
                decoded[key] = decode_context(item)
        return MappingProxyType(decoded)
    if isinstance(value, list):
        return tuple(decode_context(v) for v in value)
    return value


def _needs_map_tag(mapping: Mapping) -> bool:
    keys = list(mapping)
    return keys == [MAP_TAG] or any(not isinstance(k, str) for k in keys)


def _encode_pairs(mapping: Mapping) -> list:
    return [[_encode_key(k), encode_context(v)] for k, v in mapping.items()]


def _encode_key(key: Any) -> Any:
    if isinstance(key, tuple):
        return [_encode_key(k) for k in key]
    return key


def _is_marker_of_present_field(key: str, container: dict) -> bool:
    if not (key.startswith("_") and key.endswith(MARKER_SUFFIX)):
        return False
    field_name = key[1:-len(MARKER_SUFFIX)]
    return field_name in container and container[key] is True


def _decode_pairs(field_name: str, pairs: Any) -> MappingProxyType:
    if not isinstance(pairs, list):
        raise DeserializationError(
            f"Context field '{field_name}' is tagged as a map but is not a list of pairs"
        )
    rebuilt = {}
    for pair in pairs:
        if not isinstance(pair, list) or len(pair) != 2:
            raise DeserializationError(
                f"Context field '{field_name}' contains a malformed pair: {pair!r}"
            )
        key, item = pair
        rebuilt[_freeze_key(key)] = decode_context(item)
    return MappingProxyType(rebuilt)
