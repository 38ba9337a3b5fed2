"""
Allow running the package as a module:
    python -m character_ledger inspect influence.json
    python -m character_ledger defaults prestige
"""

import sys

from character_ledger.cli import main

if __name__ == '__main__':
    sys.exit(main())
