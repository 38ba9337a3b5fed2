"""
Tests for numpy statistics over snapshots.
"""

import math

import pytest

from character_ledger.alignment import Alignment
from character_ledger.analysis import alignment_compatibility, history_stats, influence_distribution
from character_ledger.influence import Influence
from character_ledger.prestige import Prestige


def test_default_influence_distribution():
    report = influence_distribution(Influence())
    assert report.total == 30
    assert report.average == 10
    assert report.dominant_domains == ("social",)
    assert report.weak_domains == ("economic",)
    assert report.balance_score == pytest.approx(math.sqrt(50 / 3))
    assert report.tier_distribution == {"Low": 1, "Poor": 1, "Known": 1}


def test_distribution_to_dict():
    data = influence_distribution(Influence()).to_dict()
    assert data["dominant_domains"] == ("social",)
    assert data["total"] == 30


def test_compatibility():
    report = alignment_compatibility(Alignment(), Alignment(values={"moral": 100}))
    assert report.axis_scores == {"moral": 0.5, "ethical": 1.0}
    assert report.overall == pytest.approx(0.75)
    assert report.harmonious_areas == ("ethical",)
    assert report.conflict_areas == ()


def test_opposed_alignments_conflict():
    saint = Alignment(values={"moral": 100, "ethical": 100})
    fiend = Alignment(values={"moral": -100, "ethical": -100})
    report = alignment_compatibility(saint, fiend)
    assert report.overall == 0
    assert report.conflict_areas == ("moral", "ethical")


def test_no_shared_axes():
    axis = {
        "id": "chaos",
        "name": "Chaos",
        "min": 0,
        "max": 1,
        "defaultValue": 0,
        "zones": [{"name": "Calm", "min": 0, "max": 1}],
    }
    report = alignment_compatibility(Alignment(), Alignment(axes=[axis]))
    assert report.overall == 0
    assert report.axis_scores == {}


def test_history_stats():
    influence = (
        Influence()
        .with_change("political", 25, "a")
        .with_change("political", 200, "b")
        .with_change("political", -5, "c")
    )
    stats = history_stats(influence, "political")
    assert stats.count == 3
    assert stats.net_requested == 220
    assert stats.net_effective == 85
    assert stats.clamped_count == 1
    assert stats.trend_slope == pytest.approx(30)
    assert stats.volatility > 0


def test_history_stats_from_non_default_start():
    """The value before the first record is inferred from that record."""
    influence = Influence(values={"political": 50}).with_change("political", 5, "speech")
    stats = history_stats(influence, "political")
    assert stats.net_effective == 5
    assert stats.clamped_count == 0


def test_history_stats_clamped_first_change_falls_back_to_default():
    influence = Influence(values={"political": 90}).with_change("political", 200, "coup")
    stats = history_stats(influence, "political")
    assert stats.net_effective == 90
    assert stats.clamped_count == 1


def test_history_stats_with_decay():
    prestige = Prestige().with_decay({"military": 50})
    stats = history_stats(prestige, "military")
    assert stats.net_requested == -10
    assert stats.clamped_count == 0
    assert stats.trend_slope == 0


def test_empty_history_stats():
    stats = history_stats(Influence(), "economic")
    assert stats.count == 0
    assert stats.net_requested == 0
    assert stats.trend_slope == 0
