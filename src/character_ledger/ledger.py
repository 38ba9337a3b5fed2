"""
Bounded Dimension Ledger

Immutable snapshot of current values plus per-dimension change history for
a DimensionCatalog. Influence, Prestige and Alignment are all ledgers; they
differ only in their CatalogSchema.

Key properties:
- Immutable: every "mutation" returns a brand-new ledger, the original is
  never touched
- Bounded: values always sit inside [min, max] of their dimension
- Append-only history: a change appends exactly one record, records are
  never edited or removed
- Honest records: the stored delta is what was requested, the resulting
  value is what actually happened after clamping

Usage:
    from character_ledger.influence import Influence

    influence = Influence()
    after = influence.with_change("political", 25, "victory")
    after.get_value("political")     # 35
    after.get_tier("political").name  # "Medium"
    influence.get_value("political")  # still 10
"""

import logging
import warnings
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple, Union

from character_ledger.catalog import (
    CatalogSchema,
    DimensionCatalog,
    DimensionDefinition,
    GENERIC_SCHEMA,
    Subrange,
    is_number,
)
from character_ledger.context import decode_context, encode_context, freeze
from character_ledger.errors import (
    ConfigurationError,
    DeserializationError,
    InvalidDecay,
    MissingLegacyManager,
)

logger = logging.getLogger(__name__)

DECAY_REASON = "Time decay"


# =============================================================================
# Timestamps
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_timestamp(value: Union[datetime, str, None]) -> datetime:
    """
    Normalize a timestamp to an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings
    (including a trailing ``Z``) or None for "now".
    """
    if value is None:
        return utc_now()
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise TypeError(f"Timestamp must be a datetime or ISO string, got {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# Change Record
# =============================================================================

@dataclass(frozen=True)
class ChangeRecord:
    """
    One append-only history entry.

    ``delta`` is the requested change, unclamped. ``resulting_value`` is the
    dimension value after clamping. ``context`` is frozen on construction.
    """
    timestamp: datetime
    delta: float
    resulting_value: float
    reason: str
    context: Any = None

    def __post_init__(self):
        object.__setattr__(self, "timestamp", coerce_timestamp(self.timestamp))
        object.__setattr__(self, "context", freeze(self.context))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "delta": self.delta,
            "resultingValue": self.resulting_value,
            "reason": self.reason,
            "context": encode_context(self.context),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ChangeRecord":
        if not isinstance(data, Mapping):
            raise DeserializationError(f"Change record must be an object, got {type(data).__name__}")
        missing = [k for k in ("timestamp", "delta", "resultingValue", "reason") if k not in data]
        if missing:
            raise DeserializationError(f"Change record missing keys: {', '.join(missing)}")
        if not (is_number(data["delta"]) and is_number(data["resultingValue"])):
            raise DeserializationError("Change record delta and resultingValue must be numbers")
        try:
            timestamp = coerce_timestamp(data["timestamp"])
        except (TypeError, ValueError) as exc:
            raise DeserializationError(f"Invalid change record timestamp: {data['timestamp']!r}") from exc
        return cls(
            timestamp=timestamp,
            delta=data["delta"],
            resulting_value=data["resultingValue"],
            reason=data["reason"],
            context=decode_context(data.get("context")),
        )


def _get_field(source: Any, key: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(key, default)
    return getattr(source, key, default)


# =============================================================================
# Ledger
# =============================================================================

class Ledger:
    """
    Generic bounded dimension ledger.

    Subclasses set ``schema`` and add kind-specific named accessors. The
    constructor accepts raw definition mappings, definition objects or an
    already-built DimensionCatalog of the same schema.
    """

    schema: ClassVar[CatalogSchema] = GENERIC_SCHEMA

    def __init__(
        self,
        definitions: Union[DimensionCatalog, Iterable[Any]],
        values: Optional[Mapping] = None,
        history: Optional[Mapping] = None,
    ):
        if isinstance(definitions, DimensionCatalog):
            if definitions.schema != self.schema:
                raise ConfigurationError([
                    f"{type(self).__name__} requires a {self.schema.kind} catalog, "
                    f"got {definitions.schema.kind}"
                ])
            catalog = definitions
        else:
            catalog = DimensionCatalog(definitions, self.schema)

        values = dict(values or {})
        history = dict(history or {})
        label = self.schema.label.capitalize()
        problems = []
        for key in values:
            if key not in catalog:
                problems.append(f"Value given for unknown {self.schema.label} '{key}'")
        for key in history:
            if key not in catalog:
                problems.append(f"History given for unknown {self.schema.label} '{key}'")

        resolved = {}
        for definition in catalog:
            value = values.get(definition.id)
            if value is None:
                value = definition.default_value
            if not is_number(value):
                problems.append(f"Value for {self.schema.label} '{definition.id}' must be a number")
            elif not (definition.min <= value <= definition.max):
                problems.append(
                    f"Value for {self.schema.label} '{definition.id}' must be between "
                    f"{definition.min} and {definition.max}"
                )
            resolved[definition.id] = value
        if problems:
            raise ConfigurationError(problems)

        records = {}
        for definition in catalog:
            records[definition.id] = tuple(
                r if isinstance(r, ChangeRecord) else ChangeRecord.from_dict(r)
                for r in history.get(definition.id) or ()
            )

        self._catalog = catalog
        self._values: Dict[str, float] = resolved
        self._history: Dict[str, Tuple[ChangeRecord, ...]] = records
        logger.debug("%s created with %d %s", label, len(catalog), self.schema.plural)

    @classmethod
    def _derive(
        cls,
        catalog: DimensionCatalog,
        values: Dict[str, float],
        history: Dict[str, Tuple[ChangeRecord, ...]],
    ) -> "Ledger":
        """Build a successor snapshot from already-validated state."""
        ledger = cls.__new__(cls)
        ledger._catalog = catalog
        ledger._values = values
        ledger._history = history
        return ledger

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def catalog(self) -> DimensionCatalog:
        return self._catalog

    @property
    def definitions(self) -> Tuple[DimensionDefinition, ...]:
        return self._catalog.definitions

    @property
    def values(self) -> Mapping:
        return MappingProxyType(self._values)

    @property
    def history(self) -> Mapping:
        return MappingProxyType(self._history)

    @property
    def dimension_ids(self) -> List[str]:
        return self._catalog.ids

    def has_dimension(self, dimension_id: str) -> bool:
        return dimension_id in self._catalog

    def get_dimension(self, dimension_id: str) -> Optional[DimensionDefinition]:
        return self._catalog.find(dimension_id)

    def get_value(self, dimension_id: str) -> float:
        self._catalog.get(dimension_id)
        return self._values[dimension_id]

    def classify(self, dimension_id: str) -> Optional[Subrange]:
        """Sub-range holding the current value; None when it sits in a gap."""
        return self._catalog.get(dimension_id).classify(self._values[dimension_id])

    def get_history(self, dimension_id: str) -> Tuple[ChangeRecord, ...]:
        self._catalog.get(dimension_id)
        return self._history[dimension_id]

    def get_last_change(self, dimension_id: str) -> Optional[ChangeRecord]:
        records = self.get_history(dimension_id)
        return records[-1] if records else None

    def summary(self) -> Dict[str, Dict[str, Any]]:
        out = {}
        for dimension_id in self.dimension_ids:
            out[dimension_id] = {
                "value": self._values[dimension_id],
                self.schema.subrange_label: self.classify(dimension_id),
                "lastChange": self.get_last_change(dimension_id),
            }
        return out

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def with_change(
        self,
        dimension_id: str,
        delta: float,
        reason: str,
        context: Any = None,
        *,
        timestamp: Union[datetime, str, None] = None,
    ) -> "Ledger":
        """
        Return a new ledger with ``delta`` applied to one dimension.

        The value is clamped into [min, max]; the record keeps the requested
        delta alongside the clamped result.
        """
        definition = self._catalog.get(dimension_id)
        if not is_number(delta):
            raise TypeError(f"Change delta must be a finite number, got {delta!r}")

        current = self._values[dimension_id]
        raw = current + delta
        new_value = definition.clamp(raw)
        if new_value != raw:
            logger.debug("%s '%s' clamped %s -> %s", self.schema.label, dimension_id, raw, new_value)

        record = ChangeRecord(
            timestamp=coerce_timestamp(timestamp),
            delta=delta,
            resulting_value=new_value,
            reason=reason,
            context=context,
        )
        values = dict(self._values)
        values[dimension_id] = new_value
        history = dict(self._history)
        history[dimension_id] = history[dimension_id] + (record,)
        logger.debug("%s '%s' changed by %s: %s", self.schema.label, dimension_id, delta, reason)
        return self._derive(self._catalog, values, history)

    def _with_decay(
        self,
        rates_by_dimension: Union[Mapping, Iterable[Tuple[str, float]]],
        timestamp: Union[datetime, str, None] = None,
    ) -> "Ledger":
        if isinstance(rates_by_dimension, Mapping):
            rates = list(rates_by_dimension.items())
        else:
            rates = [tuple(pair) for pair in rates_by_dimension]

        known = []
        for dimension_id, amount in rates:
            definition = self._catalog.find(dimension_id)
            if definition is None:
                logger.debug("Decay skipped for unknown %s '%s'", self.schema.label, dimension_id)
                continue
            known.append((definition, amount))

        # Validate every known amount before touching anything
        for definition, amount in known:
            if not is_number(amount) or amount < 0:
                raise InvalidDecay(definition.id, amount)

        when = coerce_timestamp(timestamp)
        values = dict(self._values)
        history = dict(self._history)
        for definition, amount in known:
            dimension_id = definition.id
            old = values[dimension_id]
            new = max(definition.min, old - amount)
            if new == old:
                continue
            values[dimension_id] = new
            history[dimension_id] = history[dimension_id] + (ChangeRecord(
                timestamp=when,
                delta=-(old - new),
                resulting_value=new,
                reason=DECAY_REASON,
            ),)
        return self._derive(self._catalog, values, history)

    # -------------------------------------------------------------------------
    # Equality and serialization
    # -------------------------------------------------------------------------

    def equals(self, other: Any) -> bool:
        return self == other

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._catalog == other._catalog
            and self._values == other._values
            and self._history == other._history
        )

    __hash__ = None

    def to_dict(self) -> Dict[str, Any]:
        from character_ledger import codec
        return codec.ledger_to_dict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "Ledger":
        from character_ledger import codec
        return codec.ledger_from_dict(cls, data)

    def to_json(self, indent: Optional[int] = None) -> str:
        from character_ledger import codec
        return codec.dumps(self, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "Ledger":
        from character_ledger import codec
        return codec.ledger_from_dict(cls, codec.parse_json(text))

    # -------------------------------------------------------------------------
    # Legacy managers
    # -------------------------------------------------------------------------

    @classmethod
    def from_legacy_manager(cls, manager: Any) -> "Ledger":
        """
        Build a ledger from an old-style manager object or mapping.

        Managers carry ``{domains|tracks|axes, player<Kind>, history}`` and
        history records keyed ``change`` / ``newValue`` / ``<x>Context``.
        History for dimensions the manager no longer defines is dropped
        with a warning.
        """
        schema = cls.schema
        if manager is None:
            raise MissingLegacyManager(schema.legacy_manager_name)

        definitions = _get_field(manager, schema.plural) or []
        catalog = DimensionCatalog(definitions, schema)

        raw_values = _get_field(manager, schema.legacy_values_key) or {}
        values = {k: v for k, v in dict(raw_values).items() if k in catalog}
        if len(values) != len(raw_values):
            logger.debug("Legacy values for unknown %s dropped", schema.plural)

        raw_history = _get_field(manager, "history") or {}
        history = {}
        dropped = []
        for dimension_id, records in dict(raw_history).items():
            if dimension_id not in catalog:
                if records:
                    dropped.append(dimension_id)
                continue
            history[dimension_id] = [_legacy_record(r, schema) for r in records]
        if dropped:
            warnings.warn(
                f"Legacy history dropped for unknown {schema.plural}: {', '.join(map(str, dropped))}"
            )
        return cls(catalog, values, history)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        parts = []
        for dimension_id in self.dimension_ids:
            subrange = self.classify(dimension_id)
            name = subrange.name if subrange else "Unknown"
            parts.append(f"{dimension_id}: {self._values[dimension_id]:g} ({name})")
        return f"{type(self).__name__} {{ {', '.join(parts)} }}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._values)!r})"


def _legacy_record(record: Any, schema: CatalogSchema) -> ChangeRecord:
    if isinstance(record, ChangeRecord):
        return record
    if not isinstance(record, Mapping):
        raise DeserializationError(f"Legacy history record must be an object, got {record!r}")

    delta = record.get("change", record.get("delta"))
    resulting = record.get("newValue", record.get("resultingValue"))
    context = record.get("context")
    if context is None and schema.legacy_context_key:
        context = record.get(schema.legacy_context_key)
    if not (is_number(delta) and is_number(resulting)):
        raise DeserializationError(f"Legacy history record has no numeric change/newValue: {record!r}")
    try:
        timestamp = coerce_timestamp(record.get("timestamp"))
    except (TypeError, ValueError) as exc:
        raise DeserializationError(f"Invalid legacy timestamp: {record.get('timestamp')!r}") from exc
    return ChangeRecord(
        timestamp=timestamp,
        delta=delta,
        resulting_value=resulting,
        reason=record.get("reason", ""),
        context=context,
    )
