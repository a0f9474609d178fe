"""CLI entry point: run a query against every rule of a policy file."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .model.config import Inventory
from .model.policy import Rule
from .parser.extractors import load_policy
from .parser.query import parse
from .parser.tokenizer import tokenize
from .util import WherecpError, setup_logging

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="wherecp",
        description="Find the firewall rules that match a query.",
        epilog='Example: wherecp policy.yaml \'(and (has "192.168.1.1" in src) (has "tcp/443"))\'',
    )
    p.add_argument(
        "policy", type=Path,
        help="Path to YAML policy file",
    )
    p.add_argument(
        "query",
        help="Query expression, e.g. '(has \"10.0.0.1\" in dst)'",
    )
    p.add_argument("--tokens", action="store_true", help="Print the scanned query tokens and exit")
    p.add_argument("--summary", action="store_true", help="Print a summary of the loaded policy")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"wherecp {__version__}")
    return p


def _names(grp) -> str:
    names = []
    for attr in ("hosts", "networks", "ranges", "ports", "groups"):
        names.extend(m.name for m in getattr(grp, attr, []))
    return ",".join(names) or "-"


def _format_rule(rule: Rule) -> str:
    line = (f"{rule.number:>5}  {rule.action_name:<5}  "
            f"src={_names(rule.source)}  dst={_names(rule.destination)}  svc={_names(rule.service)}")
    if rule.comment:
        line += f"  # {rule.comment}"
    return line


def _print_summary(inventory: Inventory):
    """Print a policy summary."""
    print("\n" + "=" * 60)
    print(f"  wherecp Policy Summary {inventory.source_file}")
    print("=" * 60)
    print(f"  Hosts:                {len(inventory.hosts)}")
    print(f"  Networks:             {len(inventory.networks)}")
    print(f"  Ranges:               {len(inventory.ranges)}")
    print(f"  Groups:               {len(inventory.groups)}")
    print(f"  Ports:                {len(inventory.ports)}")
    print(f"  Port Ranges:          {len(inventory.port_ranges)}")
    print(f"  Port Groups:          {len(inventory.port_groups)}")
    print(f"  Rules:                {len(inventory.rules)}")
    print("=" * 60)


def run_query(inventory: Inventory, query: str) -> List[Rule]:
    """Return the rules of ``inventory`` that satisfy ``query``."""
    pred = parse(query, groups=inventory.group_catalog())
    return [rule for rule in inventory.rules.all() if pred(rule)]


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.tokens:
        for tok in tokenize(args.query):
            print(f"{tok.pos:>4}  {tok.type.name:<12} {tok.value!r}")
        return 0

    # Validate input file
    if not args.policy.exists():
        log.error(f"Policy file not found: {args.policy}")
        return 2

    log.debug(f"Reading policy: {args.policy}")
    try:
        raw_text = args.policy.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        log.error(f"Cannot read policy file {args.policy}: {exc}")
        return 2

    try:
        inventory = load_policy(raw_text, source_file=str(args.policy))
        matched = run_query(inventory, args.query)
    except WherecpError as exc:
        log.error(str(exc))
        return 2

    for rule in matched:
        print(_format_rule(rule))
    log.info(f"{len(matched)} of {len(inventory.rules)} rule(s) matched")

    if args.summary:
        _print_summary(inventory)
    return 0 if matched else 1


if __name__ == "__main__":
    sys.exit(main())
