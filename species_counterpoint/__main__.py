"""CLI entry point: python -m species_counterpoint validate/generate/rules/keys."""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional, Set

from .generator import CantusFirmusGenerator, CFConfig, Clef, GenerationFailed
from .keys import all_key_names, parse_key
from .registry import build_default_registry
from .report import (format_cantus_firmus, format_cantus_firmus_json, format_json,
                     format_rules_json, format_rules_text, format_text)
from .runner import Analyzer, check_completeness, load_exercise


def _parse_list(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def _parse_categories(value: Optional[str]) -> Optional[Set[str]]:
    items = _parse_list(value)
    return set(items) if items else None


def _emit(args: argparse.Namespace, output: str) -> None:
    if args.output:
        Path(args.output).write_text(output)
    else:
        print(output)


def cmd_validate(args: argparse.Namespace) -> int:
    """Analyze one exercise file."""
    key = parse_key(args.key) if args.key else None
    context = load_exercise(args.input, species=args.species, key=key)
    registry = build_default_registry(_parse_categories(args.categories))
    analyzer = Analyzer(registry)

    rule_ids = _parse_list(args.rules)
    if rule_ids:
        unknown = [r for r in rule_ids if registry.get(r) is None]
        if unknown:
            print(f"Error: unknown rule id(s): {', '.join(unknown)}", file=sys.stderr)
            return 1
        result = analyzer.analyze_with_rules(context, rule_ids)
        ran = [r for r in registry.for_species(context.species) if r.rule_id in rule_ids]
    else:
        result = analyzer.analyze(context)
        ran = registry.for_species(context.species)

    completeness = check_completeness(context.cantus_firmus, context.counterpoint, context.species)
    if args.json:
        output = format_json(context, result, completeness)
    else:
        output = format_text(context, result, ran, completeness)
    _emit(args, output)

    return 0 if result.is_valid else 1


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate a cantus firmus."""
    key = parse_key(args.key)
    config = CFConfig(key, args.length, Clef(args.clef))
    rng = random.Random(args.seed)
    generator = CantusFirmusGenerator(config, rng=rng, max_attempts=args.max_attempts)
    try:
        notes = generator.generate()
    except GenerationFailed as exc:
        print(f"Error: {exc} ({exc.attempts} attempts)", file=sys.stderr)
        return 2

    if args.json:
        output = format_cantus_firmus_json(notes, key, generator.attempts)
    else:
        output = format_cantus_firmus(notes, key, generator.attempts)
    _emit(args, output)
    return 0


def cmd_rules(args: argparse.Namespace) -> int:
    """Print the rule reference."""
    registry = build_default_registry()
    if args.json:
        output = format_rules_json(registry, args.species)
    else:
        output = format_rules_text(registry, args.species)
    _emit(args, output)
    return 0


def cmd_keys(args: argparse.Namespace) -> int:
    """List the supported keys."""
    names = all_key_names()
    _emit(args, json.dumps(names, indent=2) if args.json else "\n".join(names))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="species_counterpoint",
        description="Species counterpoint checker and cantus firmus generator",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # validate
    p_val = subparsers.add_parser("validate", help="Check an exercise against the rules")
    p_val.add_argument("input", help="Path to exercise .json or .mid file")
    p_val.add_argument("--species", type=int, choices=range(1, 6), help="Override species (1-5)")
    p_val.add_argument("--key", help='Override key (e.g. "D minor")')
    p_val.add_argument("--rules", help="Comma-separated rule ids")
    p_val.add_argument("--categories", help="Comma-separated rule categories")
    p_val.add_argument("--json", action="store_true", help="JSON output")
    p_val.add_argument("-o", "--output", help="Output file path")

    # generate
    p_gen = subparsers.add_parser("generate", help="Generate a cantus firmus")
    p_gen.add_argument("--key", default="C major", help='Key (default "C major")')
    p_gen.add_argument("--length", type=int, default=8, help="Number of notes (4-16)")
    p_gen.add_argument("--clef", default="treble", choices=[c.value for c in Clef], help="Clef")
    p_gen.add_argument("--seed", type=int, help="Random seed")
    p_gen.add_argument("--max-attempts", type=int, default=1000, help="Attempt budget")
    p_gen.add_argument("--json", action="store_true", help="JSON output")
    p_gen.add_argument("-o", "--output", help="Output file path")

    # rules
    p_rules = subparsers.add_parser("rules", help="Show the rule reference")
    p_rules.add_argument("--species", type=int, choices=range(1, 6), help="Only rules for this species")
    p_rules.add_argument("--json", action="store_true", help="JSON output")
    p_rules.add_argument("-o", "--output", help="Output file path")

    # keys
    p_keys = subparsers.add_parser("keys", help="List supported keys")
    p_keys.add_argument("--json", action="store_true", help="JSON output")
    p_keys.add_argument("-o", "--output", help="Output file path")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "generate":
        return cmd_generate(args)
    elif args.command == "rules":
        return cmd_rules(args)
    elif args.command == "keys":
        return cmd_keys(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
