"""
Tests for the Influence ledger and its default domains.
"""

import pytest

from character_ledger.catalog import Tier
from character_ledger.influence import DEFAULT_INFLUENCE_DOMAINS, Influence


def test_default_domains():
    influence = Influence()
    assert influence.domain_ids() == ["political", "economic", "social"]
    assert influence.get_value("political") == 10
    assert influence.get_value("economic") == 5
    assert influence.get_value("social") == 15


def test_default_tiers():
    influence = Influence()
    assert influence.get_tier("political").name == "Low"
    assert influence.get_tier("economic").name == "Poor"
    assert influence.get_tier("social").name == "Known"
    assert isinstance(influence.get_tier("social"), Tier)
    assert influence.get_tier("social").description == "Some social recognition"


@pytest.mark.parametrize("value,tier", [
    (0, "None"), (9, "None"), (10, "Low"), (59, "Medium"), (60, "High"), (90, "VeryHigh"), (100, "VeryHigh"),
])
def test_political_tiers(value, tier):
    assert Influence(values={"political": value}).get_tier("political").name == tier


def test_domain_accessors():
    influence = Influence()
    assert influence.has_domain("economic")
    assert not influence.has_domain("military")
    assert influence.get_domain("economic").name == "Economic"
    assert influence.get_domain("military") is None
    assert [d.id for d in influence.domains] == influence.domain_ids()


def test_domain_history():
    influence = Influence().with_change("economic", 30, "Trade deal", {"settlementData": {"population": 1200}})
    history = influence.get_domain_history("economic")
    assert len(history) == 1
    assert history[0].reason == "Trade deal"
    assert influence.get_tier("economic").name == "Modest"


def test_custom_domains():
    arcane = {
        "id": "arcane",
        "name": "Arcane",
        "min": 0,
        "max": 50,
        "defaultValue": 0,
        "tiers": [{"name": "Novice", "min": 0, "max": 50}],
    }
    influence = Influence(domains=[arcane])
    assert influence.domain_ids() == ["arcane"]
    assert influence.with_change("arcane", 80, "Ritual").get_value("arcane") == 50


def test_defaults_are_not_shared_state():
    """Building a ledger never edits the module-level defaults."""
    Influence().with_change("political", 50, "coup")
    assert DEFAULT_INFLUENCE_DOMAINS[0]["defaultValue"] == 10
