"""
Tests for Character Ledger

Organized by module:
- test_catalog.py, test_context.py: configuration and payload building blocks
- test_ledger.py, test_influence.py, test_prestige.py, test_alignment.py: ledgers
- test_personality.py, test_rules.py: facets and trait evolution
- test_codec.py, test_analysis.py, test_config_loader.py, test_cli.py: outer surfaces
"""
