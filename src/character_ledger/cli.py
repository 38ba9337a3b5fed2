#!/usr/bin/env python3
"""
Character Ledger CLI

Inspect persisted ledger and profile snapshots.

Commands:
    chledger inspect <file>              Current values and classification
    chledger history <file> <dimension>  Change history and trend statistics
    chledger defaults <kind>             Fresh snapshot of a default catalog

Examples:
    chledger inspect influence.json
    chledger inspect hero.json --kind profile
    chledger history prestige.json military --tail 20
    chledger defaults alignment --output alignment.json

Usage:
    python -m character_ledger inspect influence.json

    # Or if installed:
    chledger inspect influence.json
"""

import argparse
import sys
from typing import Any, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from character_ledger import codec
from character_ledger.analysis import history_stats
from character_ledger.errors import LedgerError
from character_ledger.ledger import Ledger
from character_ledger.personality.facets import FacetKind
from character_ledger.personality.profile import PersonalityProfile
from character_ledger.prestige import Prestige


def _console() -> Console:
    return Console(highlight=False)


def _count(text: str) -> int:
    """argparse type for N >= 0; 0 means no limit."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {value}")
    return value


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3g}" if abs(value) < 1 else f"{value:g}"
    return str(value)


# =============================================================================
# Rendering
# =============================================================================

def render_ledger(console: Console, ledger: Ledger) -> None:
    schema = ledger.schema
    table = Table(title=type(ledger).__name__, box=box.SIMPLE_HEAD)
    table.add_column(schema.label.capitalize(), style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Range", justify="center")
    table.add_column(schema.subrange_label.capitalize())
    table.add_column("Changes", justify="right")
    if schema.supports_decay:
        table.add_column("Decay", justify="right")

    for definition in ledger.definitions:
        subrange = ledger.classify(definition.id)
        row = [
            definition.id,
            _fmt(ledger.get_value(definition.id)),
            f"{_fmt(definition.min)}..{_fmt(definition.max)}",
            subrange.name if subrange else "[dim]-[/]",
            str(len(ledger.get_history(definition.id))),
        ]
        if schema.supports_decay:
            row.append(_fmt(definition.decay_rate))
        table.add_row(*row)

    console.print(table)
    if isinstance(ledger, Prestige):
        console.print(f"Total prestige: [bold]{_fmt(ledger.total_prestige())}[/]")


def render_profile(console: Console, profile: PersonalityProfile) -> None:
    columns = {
        FacetKind.TRAITS: ("intensity", "base_level", "volatility"),
        FacetKind.EMOTIONAL: ("intensity", "base_level", "volatility"),
        FacetKind.COGNITIVE: ("complexity", "adaptability"),
        FacetKind.ATTRIBUTES: ("base_value", "modifier"),
    }
    for kind, fields in columns.items():
        facets = profile.facets(kind)
        if not facets:
            continue
        table = Table(title=kind.value, box=box.SIMPLE_HEAD)
        table.add_column("Id", style="bold")
        for name in fields:
            table.add_column(name, justify="right")
        for facet_id, facet in facets.items():
            table.add_row(facet_id, *(_fmt(getattr(facet, name)) for name in fields))
        console.print(table)


# =============================================================================
# Commands
# =============================================================================

def cmd_inspect(args) -> int:
    """Show current values and classification of a snapshot."""
    console = _console()
    snapshot = codec.load(args.file, args.kind)
    if isinstance(snapshot, PersonalityProfile):
        render_profile(console, snapshot)
    else:
        render_ledger(console, snapshot)
    return 0


def cmd_history(args) -> int:
    """Show one dimension's change history."""
    console = _console()
    snapshot = codec.load(args.file, args.kind)
    if not isinstance(snapshot, Ledger):
        console.print("[red]Error: history needs a ledger snapshot, not a profile[/]")
        return 1

    records = snapshot.get_history(args.dimension)
    shown = records[-args.tail:] if args.tail else records

    table = Table(title=f"{args.dimension} history", box=box.SIMPLE_HEAD)
    table.add_column("Timestamp")
    table.add_column("Delta", justify="right")
    table.add_column("Result", justify="right")
    table.add_column("Reason")
    for record in shown:
        delta = _fmt(record.delta)
        table.add_row(
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            f"[green]+{delta}[/]" if record.delta > 0 else f"[red]{delta}[/]",
            _fmt(record.resulting_value),
            escape(str(record.reason)),
        )
    console.print(table)

    stats = history_stats(snapshot, args.dimension)
    console.print(
        f"Changes: {stats.count}  "
        f"requested: {_fmt(stats.net_requested)}  "
        f"effective: {_fmt(stats.net_effective)}  "
        f"clamped: {stats.clamped_count}  "
        f"trend: {stats.trend_slope:+.3f}/change"
    )
    return 0


def cmd_defaults(args) -> int:
    """Write a fresh snapshot built from the default catalog of a kind."""
    if args.kind == "profile":
        snapshot = PersonalityProfile()
    else:
        snapshot = codec.LEDGER_TYPES[args.kind]()

    if args.output:
        path = codec.save(snapshot, args.output)
        _console().print(f"[cyan]Wrote {args.kind} defaults to {path}[/]")
    else:
        print(codec.dumps(snapshot, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog='chledger',
        description='Character Ledger CLI - inspect influence, prestige, alignment and profile snapshots',
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # inspect
    p_inspect = subparsers.add_parser('inspect', help='Show current values and classification')
    p_inspect.add_argument('file', help='Snapshot JSON file')
    p_inspect.add_argument('--kind', '-k', choices=codec.KINDS, help='Snapshot kind (default: detect)')
    p_inspect.set_defaults(func=cmd_inspect)

    # history
    p_history = subparsers.add_parser('history', help='Show change history of one dimension')
    p_history.add_argument('file', help='Snapshot JSON file')
    p_history.add_argument('dimension', help='Domain, track or axis id')
    p_history.add_argument('--kind', '-k', choices=codec.LEDGER_TYPES, help='Snapshot kind (default: detect)')
    p_history.add_argument('--tail', '-n', type=_count, default=0, help='Show only the last N changes (0: all)')
    p_history.set_defaults(func=cmd_history)

    # defaults
    p_defaults = subparsers.add_parser('defaults', help='Write a default snapshot')
    p_defaults.add_argument('kind', choices=codec.KINDS, help='Snapshot kind')
    p_defaults.add_argument('--output', '-o', help='Output file (default: stdout)')
    p_defaults.set_defaults(func=cmd_defaults)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (LedgerError, OSError) as e:
        _console().print(f"[red]Error: {escape(str(e))}[/]")
        return 1


if __name__ == '__main__':
    sys.exit(main())
