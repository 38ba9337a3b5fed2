"""
Config Loader - load catalogs and rule tables from config files.

This separates tunable data from source code:
- Source defines structure (what a domain, track or rule table is)
- Config files define values (which domains exist, how strong an effect is)

A missing file means "use the code defaults".

Config file layout:
    {
      "influence": [ {domain}, ... ],
      "prestige": [ {track}, ... ],
      "alignment": [ {axis}, ... ],
      "rules": { "trauma_effects": {...}, "volatility_by_age": {...} }
    }

Usage:
    from character_ledger.config_loader import load_definitions, load_rule_tables

    domains = load_definitions("influence")                  # defaults
    domains = load_definitions("influence", "campaign.json")
    rules = load_rule_tables("campaign.json")
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from character_ledger.alignment import DEFAULT_ALIGNMENT_AXES
from character_ledger.errors import ConfigurationError
from character_ledger.influence import DEFAULT_INFLUENCE_DOMAINS
from character_ledger.personality.rules import DEFAULT_RULES, RuleTables
from character_ledger.prestige import DEFAULT_PRESTIGE_TRACKS


# Default config location
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "character_ledger.json"

DEFAULT_DEFINITIONS = {
    "influence": DEFAULT_INFLUENCE_DOMAINS,
    "prestige": DEFAULT_PRESTIGE_TRACKS,
    "alignment": DEFAULT_ALIGNMENT_AXES,
}

PathLike = Union[str, Path]


def load_config(config_path: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load the full config file."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        # Return empty dict if no config - will use code defaults
        return {}

    with open(path) as f:
        try:
            config = json.load(f)
        except ValueError as exc:
            raise ConfigurationError([f"Config file {path} is not valid JSON: {exc}"]) from exc
    if not isinstance(config, dict):
        raise ConfigurationError([f"Config file {path} must contain an object"])
    return config


def load_definitions(kind: str, config_path: Optional[PathLike] = None) -> List[Dict[str, Any]]:
    """
    Definition list for one ledger kind.

    Falls back to the module defaults when the file or the section is missing.
    Validation happens when the list is handed to a ledger.
    """
    if kind not in DEFAULT_DEFINITIONS:
        raise ConfigurationError([f"Unknown ledger kind: {kind!r}"])

    config = load_config(config_path)
    definitions = config.get(kind)
    if definitions is None:
        return copy.deepcopy(DEFAULT_DEFINITIONS[kind])
    if not isinstance(definitions, list):
        raise ConfigurationError([f"Config section '{kind}' must be a list"])
    return definitions


def load_rule_tables(config_path: Optional[PathLike] = None) -> RuleTables:
    """
    RuleTables from config; each table in the file replaces the default
    table of the same name, the rest stay at their defaults.
    """
    config = load_config(config_path)
    rules = config.get("rules", {})

    if not rules:
        return DEFAULT_RULES  # Code defaults

    if not isinstance(rules, dict):
        raise ConfigurationError(["Config section 'rules' must be an object"])
    return RuleTables.from_dict(rules)


def save_rule_tables(tables: RuleTables, config_path: Optional[PathLike] = None) -> Path:
    """
    Save rule tables back to config file.

    Preserves the catalog sections already in the file.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    existing = load_config(path)
    existing["rules"] = tables.to_dict()

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(existing, f, indent=2)
    return path


def get_config_path() -> Path:
    """Return the default config path for reference."""
    return DEFAULT_CONFIG_PATH
