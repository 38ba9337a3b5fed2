"""
Tests for JSON snapshots

Verifies:
1. A long random history survives a round trip exactly
2. Mapping-valued context fields carry the tagged marker on the wire
3. Malformed snapshots fail with DeserializationError, never partially
4. Kind detection and file save/load
"""

import json
import random
from datetime import timedelta

import pytest

from character_ledger import codec
from character_ledger.alignment import Alignment
from character_ledger.errors import DeserializationError
from character_ledger.influence import Influence
from character_ledger.personality import PersonalityProfile
from character_ledger.prestige import Prestige


def test_thousand_change_round_trip(at):
    """Values, history and context all come back identical."""
    rng = random.Random(1234)
    influence = Influence()
    ids = influence.domain_ids()
    for i in range(1000):
        context = {
            "settlementData": {"population": rng.randint(10, 5000), 7: "ward"},
            "witnesses": [rng.choice(["ana", "bo", "cy"])],
        }
        influence = influence.with_change(
            ids[i % len(ids)],
            rng.uniform(-30, 30),
            f"event {i}",
            context,
            timestamp=at + timedelta(seconds=i),
        )

    restored = Influence.from_json(influence.to_json())
    assert restored == influence
    assert sum(len(restored.get_history(d)) for d in ids) == 1000


def test_wire_format(at):
    prestige = Prestige().with_change(
        "military", 15, "Siege", {"socialContext": {"witnesses": 40}}, timestamp=at,
    )
    data = prestige.to_dict()

    assert data["values"]["military"] == 25
    assert data["tracks"][0]["decayRate"] == 0.02
    record = data["history"]["military"][0]
    assert record["timestamp"] == "2024-05-01T12:00:00+00:00"
    assert record["resultingValue"] == 25
    assert record["context"] == {"socialContext": [["witnesses", 40]], "_socialContextSerialized": True}
    json.dumps(data)


def test_nested_non_string_keys_round_trip(at):
    """Int keys two levels down inside a tagged field."""
    influence = Influence().with_change(
        "political", 5, "x", {"settlementData": {"ward": {7: "north", 8: {9: "gate"}}}}, timestamp=at,
    )
    restored = Influence.from_json(influence.to_json())
    assert restored == influence
    assert restored.get_last_change("political").context["settlementData"]["ward"][8][9] == "gate"


def test_non_string_top_level_context_round_trip(at):
    influence = Influence().with_change("political", 5, "x", {1: "a", "note": "b"}, timestamp=at)
    data = json.loads(influence.to_json())
    assert list(data["history"]["political"][0]["context"]) == ["__map__"]
    assert Influence.from_json(influence.to_json()) == influence


def test_alignment_round_trip_keeps_effects():
    alignment = Alignment().with_change("moral", -50, "Raid")
    restored = codec.loads(codec.dumps(alignment))
    assert isinstance(restored, Alignment)
    assert restored.zone_effects("moral")[0].value == -2


@pytest.mark.parametrize("text", [
    "not json",
    "[]",
    '{"domains": "nope"}',
    '{"domains": [], "values": {}}',
])
def test_malformed_influence(text):
    with pytest.raises(DeserializationError):
        Influence.from_json(text)


def test_malformed_history():
    data = Influence().to_dict()
    data["history"]["political"] = [{"timestamp": "yesterday", "delta": 1, "resultingValue": 11, "reason": "x"}]
    with pytest.raises(DeserializationError):
        Influence.from_dict(data)

    data["history"]["political"] = [{"delta": 1}]
    with pytest.raises(DeserializationError, match="missing keys"):
        Influence.from_dict(data)

    data["history"]["political"] = {"not": "a list"}
    with pytest.raises(DeserializationError):
        Influence.from_dict(data)


def test_out_of_range_value_rejected():
    data = Influence().to_dict()
    data["values"]["political"] = 500
    with pytest.raises(DeserializationError):
        Influence.from_dict(data)


def test_profile_round_trip(at):
    profile = PersonalityProfile(
        traits=[{"id": "courage", "volatility": 0.5}],
        cognitive_traits=[{"id": "tactical"}],
    ).with_experience_influence({"type": "combat", "intensity": 1.0}, at=at)

    data = profile.to_dict()
    assert set(data) == {"traits", "attributes", "emotionalTendencies", "cognitiveTraits"}
    assert data["attributes"][0]["modifier"] == 0

    restored = PersonalityProfile.from_json(profile.to_json())
    assert restored == profile
    assert restored.get_trait("courage").metadata["lastChange"]["reason"] == "Experience: combat"


def test_profile_missing_collections_are_empty():
    profile = PersonalityProfile.from_dict({"traits": [{"id": "calm"}]})
    assert list(profile.traits) == ["calm"]
    assert len(profile.attributes) == 0


def test_profile_unknown_collection():
    with pytest.raises(DeserializationError, match="hobbies"):
        PersonalityProfile.from_dict({"traits": [], "hobbies": []})


def test_detect_kind():
    assert codec.detect_kind(Influence().to_dict()) == "influence"
    assert codec.detect_kind(Prestige().to_dict()) == "prestige"
    assert codec.detect_kind(Alignment().to_dict()) == "alignment"
    assert codec.detect_kind(PersonalityProfile().to_dict()) == "profile"
    with pytest.raises(DeserializationError):
        codec.detect_kind({"weather": []})
    with pytest.raises(DeserializationError):
        codec.from_dict({}, "weather")


def test_save_and_load(tmp_path):
    prestige = Prestige().with_time_decay(60)
    path = codec.save(prestige, tmp_path / "saves" / "prestige.json")
    assert path.exists()
    assert codec.load(path) == prestige
    assert codec.load(path, kind="prestige") == prestige


def test_to_dict_rejects_other_objects():
    with pytest.raises(TypeError):
        codec.to_dict({"domains": []})
