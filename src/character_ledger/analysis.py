"""
Analysis - read-only statistics over ledger snapshots.

Nothing here changes a snapshot; reports are plain frozen dataclasses that
serialize with ``to_dict``.

Usage:
    from character_ledger.analysis import influence_distribution, history_stats

    report = influence_distribution(influence)
    report.dominant_domains          # ("political",)

    stats = history_stats(prestige, "military")
    stats.clamped_count, stats.trend_slope
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Tuple

import numpy as np

from character_ledger.alignment import Alignment
from character_ledger.influence import Influence
from character_ledger.ledger import Ledger

CONFLICT_THRESHOLD = 0.3
HARMONY_THRESHOLD = 0.7


def _rank_slice(ids: Tuple[str, ...], values: np.ndarray, top: bool) -> Tuple[str, ...]:
    """Top or bottom third of ids by value, at least one."""
    count = max(1, len(ids) // 3)
    order = np.argsort(-values if top else values, kind="stable")
    return tuple(ids[i] for i in order[:count])


# =============================================================================
# Influence distribution
# =============================================================================

@dataclass(frozen=True)
class DistributionReport:
    total: float
    average: float
    dominant_domains: Tuple[str, ...]
    weak_domains: Tuple[str, ...]
    balance_score: float
    tier_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def influence_distribution(influence: Influence) -> DistributionReport:
    """
    How influence spreads across domains.

    balance_score is the population standard deviation of domain values;
    lower means more evenly spread.
    """
    ids = tuple(influence.domain_ids())
    values = np.array([influence.get_value(d) for d in ids], dtype=float)

    tiers: Dict[str, int] = {}
    for domain_id in ids:
        tier = influence.get_tier(domain_id)
        name = tier.name if tier else "Unknown"
        tiers[name] = tiers.get(name, 0) + 1

    return DistributionReport(
        total=float(values.sum()),
        average=float(values.mean()),
        dominant_domains=_rank_slice(ids, values, top=True),
        weak_domains=_rank_slice(ids, values, top=False),
        balance_score=float(values.std()),
        tier_distribution=tiers,
    )


# =============================================================================
# Alignment compatibility
# =============================================================================

@dataclass(frozen=True)
class CompatibilityReport:
    overall: float
    axis_scores: Dict[str, float]
    conflict_areas: Tuple[str, ...]
    harmonious_areas: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def alignment_compatibility(first: Alignment, second: Alignment) -> CompatibilityReport:
    """
    Per-axis closeness of two alignments over the axes both define.

    score = 1 - |v1 - v2| / (max - min); 1.0 is identical, 0.0 is opposite
    ends. No shared axes gives an overall score of 0.
    """
    shared = [a for a in first.axis_ids() if second.has_axis(a)]
    scores = {}
    for axis_id in shared:
        axis = first.get_axis(axis_id)
        spread = axis.max - axis.min
        diff = abs(first.get_value(axis_id) - second.get_value(axis_id))
        scores[axis_id] = float(max(0.0, 1 - diff / spread))

    overall = float(np.mean(list(scores.values()))) if scores else 0.0
    return CompatibilityReport(
        overall=overall,
        axis_scores=scores,
        conflict_areas=tuple(a for a, s in scores.items() if s < CONFLICT_THRESHOLD),
        harmonious_areas=tuple(a for a, s in scores.items() if s > HARMONY_THRESHOLD),
    )


# =============================================================================
# History statistics
# =============================================================================

@dataclass(frozen=True)
class HistoryStats:
    dimension_id: str
    count: int
    net_requested: float
    net_effective: float
    clamped_count: int
    volatility: float
    trend_slope: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def history_stats(ledger: Ledger, dimension_id: str) -> HistoryStats:
    """
    Summary of one dimension's change history.

    - net_requested: sum of requested deltas
    - net_effective: last resulting value minus the value before the first
      record (see :func:`_starting_value`)
    - clamped_count: records whose effective change differs from the
      requested delta
    - volatility: population std of requested deltas
    - trend_slope: least-squares slope of resulting values per change
    """
    records = ledger.get_history(dimension_id)
    if not records:
        return HistoryStats(dimension_id, 0, 0.0, 0.0, 0, 0.0, 0.0)

    deltas = np.array([r.delta for r in records], dtype=float)
    results = np.array([r.resulting_value for r in records], dtype=float)
    start = _starting_value(ledger, dimension_id, records[0])
    previous = np.concatenate(([start], results[:-1]))
    effective = results - previous

    slope = 0.0
    if len(results) > 1:
        slope = float(np.polyfit(np.arange(len(results)), results, 1)[0])

    return HistoryStats(
        dimension_id=dimension_id,
        count=len(records),
        net_requested=float(deltas.sum()),
        net_effective=float(results[-1] - start),
        clamped_count=int(np.count_nonzero(~np.isclose(effective, deltas))),
        volatility=float(deltas.std()),
        trend_slope=slope,
    )


def _starting_value(ledger: Ledger, dimension_id: str, first) -> float:
    """
    Value before the first record.

    A snapshot may start away from the default, so the value is inferred as
    ``resulting_value - delta`` of the first record. If that lies outside
    [min, max] the first change was clamped and the dimension default is
    used instead. A clamp that still lands in range goes unnoticed.
    """
    definition = ledger.catalog.get(dimension_id)
    inferred = float(first.resulting_value - first.delta)
    if definition.min <= inferred <= definition.max:
        return inferred
    return float(definition.default_value)
