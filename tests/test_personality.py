"""
Tests for PersonalityProfile and trait evolution

Verifies:
1. Experience, historical, trauma and social deltas scale as documented
2. Every facet stays inside [0, 1]; unknown categories are no-ops
3. Age modifiers: volatility/adaptability scaling, physical floor, wisdom cap
4. Facet defaults apply only to absent fields
5. Profiles are never mutated
"""

import pytest

from character_ledger.errors import ConfigurationError, UnknownFacet
from character_ledger.personality import DEFAULT_RULES, FacetKind, PersonalityProfile, TraitEvolutionEngine


def make_profile(**overrides):
    collections = {
        "traits": [
            {"id": "courage", "name": "Courage", "volatility": 0.5},
            {"id": "trust", "name": "Trust"},
            {"id": "caution", "name": "Caution"},
        ],
        "emotional_tendencies": [
            {"id": "stress", "name": "Stress"},
            {"id": "paranoia", "name": "Paranoia"},
        ],
        "cognitive_traits": [
            {"id": "tactical", "name": "Tactical"},
        ],
    }
    collections.update(overrides)
    return PersonalityProfile(**collections)


# =============================================================================
# Construction
# =============================================================================

def test_default_attributes():
    profile = PersonalityProfile()
    assert list(profile.attributes) == [
        "strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma",
    ]
    assert profile.get_attribute("strength").base_value == 10
    assert profile.get_attribute("strength").modifier == 0


def test_explicit_empty_attributes():
    assert len(PersonalityProfile(attributes=[]).attributes) == 0


def test_trait_defaults_only_for_absent_fields():
    """An explicit 0 is a value, not a missing field."""
    profile = PersonalityProfile(traits=[{"id": "calm", "intensity": 0, "volatility": None}])
    calm = profile.get_trait("calm")
    assert calm.intensity == 0
    assert calm.base_level == 0.5
    assert calm.volatility == 0.3


def test_attribute_modifier_is_derived():
    profile = PersonalityProfile(attributes=[
        {"id": "strength", "baseValue": 14, "modifier": 99},
        {"id": "dexterity", "baseValue": 0},
        {"id": "charisma", "baseValue": 9},
    ])
    assert profile.get_attribute("strength").modifier == 2
    assert profile.get_attribute("dexterity").base_value == 0
    assert profile.get_attribute("dexterity").modifier == -5
    assert profile.get_attribute("charisma").modifier == -1


def test_influence_alias_for_metadata():
    profile = PersonalityProfile(traits=[{"id": "pride", "influence": {"source": "family"}}])
    assert profile.get_trait("pride").metadata["source"] == "family"


def test_invalid_facets_rejected():
    with pytest.raises(ConfigurationError, match="Duplicate Trait id 'courage'"):
        PersonalityProfile(traits=[{"id": "courage"}, {"id": "courage"}])
    with pytest.raises(ConfigurationError) as exc_info:
        PersonalityProfile(traits=[{"name": "No id"}], cognitive_traits=[{"id": "x", "complexity": "high"}])
    assert len(exc_info.value.violations) == 2


def test_facet_lookup():
    profile = make_profile()
    assert profile.facet("traits", "courage").volatility == 0.5
    assert profile.facet(FacetKind.COGNITIVE, "tactical").complexity == 0.5
    assert profile.get_trait("missing") is None
    with pytest.raises(UnknownFacet):
        profile.facet("traits", "missing")
    with pytest.raises(ConfigurationError):
        profile.facets("hobbies")


def test_collections_read_only():
    profile = make_profile()
    with pytest.raises(TypeError):
        profile.traits["courage"] = None


# =============================================================================
# Experience
# =============================================================================

def test_combat_experience(at):
    profile = make_profile()
    evolved = profile.with_experience_influence({"type": "combat", "intensity": 1.0}, at=at)

    courage = evolved.get_trait("courage")
    assert courage.intensity == pytest.approx(0.55)
    assert courage.base_level == pytest.approx(0.505)
    assert evolved.get_cognitive_trait("tactical").complexity == pytest.approx(0.55)
    assert evolved.get_trait("caution").intensity == pytest.approx(0.5 - 0.05 * 0.3)

    note = courage.metadata["lastChange"]
    assert note["reason"] == "Experience: combat"
    assert note["change"] == pytest.approx(0.05)
    assert note["timestamp"] == at.isoformat()

    # Source profile untouched
    assert profile.get_trait("courage").intensity == 0.5
    assert "lastChange" not in profile.get_trait("courage").metadata


def test_default_intensity_and_duration():
    evolved = make_profile().with_experience_influence({"type": "combat"})
    assert evolved.get_trait("courage").intensity == pytest.approx(0.5 + 0.1 * 0.5 * 0.5)


def test_cultural_values_amplify():
    evolved = make_profile().with_experience_influence(
        {"type": "combat", "intensity": 1.0},
        {"culturalValues": {"honor": 1.0}},
    )
    assert evolved.get_trait("courage").intensity == pytest.approx(0.56)
    assert evolved.get_trait("caution").intensity == pytest.approx(0.5 - 0.05 * 0.3)


def test_cultural_values_leave_emotional_and_cognitive_alone():
    """Only trait deltas are amplified, even when an id matches."""
    rules = DEFAULT_RULES.replace_tables(cultural_influence={"collectivism": ["charisma", "empathy", "strategic"]})
    profile = PersonalityProfile(
        traits=[{"id": "charisma", "volatility": 1.0}],
        emotional_tendencies=[{"id": "empathy", "volatility": 1.0}],
        cognitive_traits=[{"id": "strategic", "adaptability": 1.0}],
        engine=TraitEvolutionEngine(rules),
    )
    evolved = profile.with_experience_influence(
        {"type": "leadership", "intensity": 1.0},
        {"culturalValues": {"collectivism": 1.0}},
    )
    assert evolved.get_trait("charisma").intensity == pytest.approx(0.5 + 0.1 * 1.2)
    assert evolved.get_emotional_tendency("empathy").intensity == pytest.approx(0.55)
    assert evolved.get_cognitive_trait("strategic").complexity == pytest.approx(0.6)


def test_default_collectivism_does_not_touch_emotional_empathy():
    profile = make_profile(emotional_tendencies=[{"id": "empathy", "volatility": 1.0}])
    evolved = profile.with_experience_influence(
        {"type": "leadership", "intensity": 1.0},
        {"culturalValues": {"collectivism": 1.0}},
    )
    assert evolved.get_emotional_tendency("empathy").intensity == pytest.approx(0.55)


def test_facets_without_delta_carried_over():
    profile = make_profile()
    evolved = profile.with_experience_influence({"type": "combat"})
    assert evolved.get_trait("trust") is profile.get_trait("trust")


def test_unknown_category_is_noop():
    profile = make_profile()
    evolved = profile.with_experience_influence({"type": "knitting", "intensity": 1.0})
    assert evolved == profile
    assert evolved is not profile


def test_values_clamped():
    profile = make_profile(traits=[{"id": "courage", "intensity": 0.98, "baseLevel": 0.999, "volatility": 1.0}])
    evolved = profile.with_experience_influence({"type": "combat", "intensity": 1.0, "duration": 5})
    assert evolved.get_trait("courage").intensity == 1.0
    assert evolved.get_trait("courage").base_level == 1.0

    low = make_profile(traits=[{"id": "trust", "intensity": 0.01, "volatility": 1.0}])
    betrayed = low.with_experience_influence({"type": "betrayal", "intensity": 1.0})
    assert betrayed.get_trait("trust").intensity == 0.0


# =============================================================================
# Historical, trauma, social
# =============================================================================

def test_historical_event(at):
    evolved = make_profile().with_historical_event_influence(
        {"type": "war", "name": "The Long War", "scale": "national"},
        {"importance": "pivotal"},
        at=at,
    )
    # 0.1 * national 1.0 * pivotal 1.5, then volatility 0.5
    assert evolved.get_trait("courage").intensity == pytest.approx(0.5 + 0.15 * 0.5)
    assert evolved.get_trait("courage").metadata["lastChange"]["reason"] == "Historical Event: The Long War"


def test_historical_unknown_scale_is_noop():
    profile = make_profile()
    evolved = profile.with_historical_event_influence({"type": "war", "scale": "cosmic"})
    assert evolved == profile


def test_trauma_resolves_traits_then_emotional():
    evolved = make_profile().with_trauma_influence({"type": "betrayal"}, 0.5)
    assert evolved.get_trait("trust").intensity == pytest.approx(0.5 - 0.3 * 0.5 * 0.3)
    assert evolved.get_emotional_tendency("paranoia").intensity == pytest.approx(0.5 + 0.15 * 0.5 * 0.3)
    reason = evolved.get_trait("trust").metadata["lastChange"]["reason"]
    assert reason == "Trauma: betrayal (Severity: 0.5)"


def test_trauma_default_severity():
    a = make_profile().with_trauma_influence({"type": "physical"}, None)
    b = make_profile().with_trauma_influence({"type": "physical"})
    assert a.get_trait("caution").intensity == b.get_trait("caution").intensity
    assert a.get_trait("caution").metadata["lastChange"]["reason"] == "Trauma: physical (Severity: 0.5)"


def test_social_interaction():
    evolved = make_profile().with_social_influence({"type": "friendship", "outcome": "positive"})
    # 0.1 * intimacy 0.5 * duration 1 * 0.1 * volatility 0.3
    assert evolved.get_trait("trust").intensity == pytest.approx(0.5 + 0.0015)
    assert evolved.get_trait("trust").metadata["lastChange"]["reason"] == "Social Interaction: friendship"


def test_social_unknown_outcome_is_noop():
    profile = make_profile()
    assert profile.with_social_influence({"type": "friendship", "outcome": "awkward"}) == profile
    assert profile.with_social_influence({}) == profile


def test_direct_trait_evolution():
    evolved = make_profile().with_trait_evolution({"courage": 0.2, "unknown": 0.5})
    courage = evolved.get_trait("courage")
    assert courage.intensity == pytest.approx(0.6)
    assert courage.metadata["lastEvolution"]["reason"] == "Experience-based evolution"
    assert courage.metadata["lastEvolution"]["change"] == pytest.approx(0.1)
    assert "lastChange" not in courage.metadata


def test_trait_evolution_keeps_earlier_change_note(at):
    experienced = make_profile().with_experience_influence({"type": "combat", "intensity": 1.0}, at=at)
    evolved = experienced.with_trait_evolution({"courage": 0.2})
    courage = evolved.get_trait("courage")
    assert courage.metadata["lastChange"]["reason"] == "Experience: combat"
    assert courage.metadata["lastEvolution"]["reason"] == "Experience-based evolution"


# =============================================================================
# Age
# =============================================================================

def test_middle_age(at):
    profile = make_profile()
    aged = profile.with_age_modifiers(45, at=at)

    assert aged.get_attribute("strength").base_value == 9
    assert aged.get_attribute("dexterity").base_value == 9
    assert aged.get_attribute("wisdom").base_value == 12
    assert aged.get_attribute("charisma").base_value == 10
    assert aged.get_trait("trust").volatility == pytest.approx(0.24)
    assert aged.get_emotional_tendency("stress").volatility == pytest.approx(0.24)
    assert aged.get_cognitive_trait("tactical").adaptability == pytest.approx(0.35)

    note = aged.get_trait("trust").metadata["ageModified"]
    assert note["age"] == 45
    assert note["timestamp"] == at.isoformat()
    assert note["appliedModifiers"]["physicalDecline"] == -1


def test_old_age_floor_and_cap():
    profile = make_profile(attributes=[
        {"id": "strength", "baseValue": 4},
        {"id": "wisdom", "baseValue": 19},
    ])
    aged = profile.with_age_modifiers(75)
    assert aged.get_attribute("strength").base_value == 3
    assert aged.get_attribute("wisdom").base_value == 20


def test_youth_volatility_clamped():
    profile = make_profile(traits=[
        {"id": "fiery", "volatility": 0.9},
        {"id": "stoic", "volatility": 0.05},
    ])
    young = profile.with_age_modifiers(10)
    assert young.get_trait("fiery").volatility == 1.0
    assert young.get_trait("stoic").volatility == pytest.approx(0.1)


def test_age_overrides():
    aged = make_profile().with_age_modifiers(45, {"physical_decline": -5, "wisdom": 0})
    assert aged.get_attribute("strength").base_value == 5
    assert aged.get_attribute("wisdom").base_value == 10


def test_age_rounds_half_up():
    profile = make_profile(attributes=[{"id": "charisma", "baseValue": 10.5}])
    assert profile.with_age_modifiers(20).get_attribute("charisma").base_value == 11


# =============================================================================
# Equality
# =============================================================================

def test_equality_respects_order():
    a = PersonalityProfile(traits=[{"id": "a"}, {"id": "b"}])
    b = PersonalityProfile(traits=[{"id": "a"}, {"id": "b"}])
    c = PersonalityProfile(traits=[{"id": "b"}, {"id": "a"}])
    assert a == b
    assert a.equals(b)
    assert a != c
