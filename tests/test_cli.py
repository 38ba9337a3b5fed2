"""
Tests for the chledger command line.
"""

import json

import pytest

from character_ledger import codec
from character_ledger.cli import main
from character_ledger.influence import Influence
from character_ledger.personality import PersonalityProfile
from character_ledger.prestige import Prestige


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "chledger" in capsys.readouterr().out


def test_defaults_to_stdout(capsys):
    assert main(["defaults", "influence"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert [d["id"] for d in data["domains"]] == ["political", "economic", "social"]


def test_defaults_to_file(tmp_path, capsys):
    target = tmp_path / "prestige.json"
    assert main(["defaults", "prestige", "--output", str(target)]) == 0
    assert "Wrote prestige defaults" in capsys.readouterr().out
    assert codec.load(target) == Prestige()


def test_inspect_ledger(tmp_path, capsys):
    path = codec.save(Influence(), tmp_path / "influence.json")
    assert main(["inspect", str(path)]) == 0
    out = capsys.readouterr().out
    assert "political" in out
    assert "Low" in out


def test_inspect_prestige_total(tmp_path, capsys):
    path = codec.save(Prestige(), tmp_path / "prestige.json")
    assert main(["inspect", str(path), "--kind", "prestige"]) == 0
    assert "Total prestige" in capsys.readouterr().out


def test_inspect_profile(tmp_path, capsys):
    path = codec.save(PersonalityProfile(traits=[{"id": "courage"}]), tmp_path / "hero.json")
    assert main(["inspect", str(path)]) == 0
    out = capsys.readouterr().out
    assert "courage" in out
    assert "strength" in out


def test_history(tmp_path, capsys):
    influence = (
        Influence()
        .with_change("political", 25, "Elected")
        .with_change("political", 200, "Coup")
        .with_change("political", -5, "Scandal")
    )
    path = codec.save(influence, tmp_path / "influence.json")
    assert main(["history", str(path), "political", "--tail", "2"]) == 0
    out = capsys.readouterr().out
    assert "Scandal" in out
    assert "Elected" not in out
    assert "Changes: 3" in out
    assert "clamped: 1" in out


def test_history_tail_must_not_be_negative(tmp_path, capsys):
    path = codec.save(Influence().with_change("political", 5, "x"), tmp_path / "influence.json")
    with pytest.raises(SystemExit) as exc_info:
        main(["history", str(path), "political", "--tail", "-5"])
    assert exc_info.value.code == 2
    assert "must be 0 or more" in capsys.readouterr().err


def test_history_tail_zero_shows_all(tmp_path, capsys):
    influence = Influence().with_change("political", 5, "Elected").with_change("political", 5, "Scandal")
    path = codec.save(influence, tmp_path / "influence.json")
    assert main(["history", str(path), "political", "--tail", "0"]) == 0
    out = capsys.readouterr().out
    assert "Elected" in out
    assert "Scandal" in out


def test_history_of_profile_fails(tmp_path, capsys):
    path = codec.save(PersonalityProfile(), tmp_path / "hero.json")
    assert main(["history", str(path), "courage"]) == 1


def test_unknown_dimension_reported(tmp_path, capsys):
    path = codec.save(Influence(), tmp_path / "influence.json")
    assert main(["history", str(path), "military"]) == 1
    assert "Domain 'military' not found" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert main(["inspect", str(tmp_path / "absent.json")]) == 1
    assert "Error" in capsys.readouterr().out
