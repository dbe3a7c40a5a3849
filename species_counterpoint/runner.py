"""Analysis orchestrator and exercise completeness check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .loaders import load_json, load_midi
from .model import Key, Note
from .registry import RuleRegistry, build_default_registry
from .rules.base import AnalysisResult, Rule, RuleContext, Violation
from .species import Species, beat_slots, get_species_config

logger = logging.getLogger(__name__)


def load_exercise(
    path: Union[str, Path],
    species: Optional[int] = None,
    key: Optional[Key] = None,
) -> RuleContext:
    """Auto-detect format and load an exercise."""
    p = Path(path)
    if p.suffix.lower() in (".mid", ".midi"):
        return load_midi(p, species=species, key=key)
    return load_json(p, species=species, key=key)


class Analyzer:
    """Runs the applicable rules of a registry against a context.

    A rule that raises is logged and listed in ``failed_rules``; the other
    rules still contribute their violations.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else build_default_registry()

    def analyze(self, context: RuleContext) -> AnalysisResult:
        return self._run(context, self.registry.for_species(context.species))

    def analyze_with_rules(self, context: RuleContext, rule_ids: Iterable[str]) -> AnalysisResult:
        """Like :meth:`analyze`, restricted to the listed rule ids."""
        wanted = set(rule_ids)
        rules = [r for r in self.registry.for_species(context.species) if r.rule_id in wanted]
        return self._run(context, rules)

    def _run(self, context: RuleContext, rules: Sequence[Rule]) -> AnalysisResult:
        violations: List[Violation] = []
        failed: List[str] = []
        for rule in rules:
            try:
                found = rule.check(context)
            except Exception:
                logger.exception("rule %s failed", rule.rule_id)
                failed.append(rule.rule_id)
                continue
            violations.extend(found)
        result = AnalysisResult.of(violations, failed)
        logger.debug(
            "ran %d rules for species %s: %d errors, %d warnings",
            len(rules), context.species.roman, result.error_count, result.warning_count,
        )
        return result


def analyze(context: RuleContext, registry: Optional[RuleRegistry] = None) -> AnalysisResult:
    """Analyze a context with the given (or the default) registry."""
    return Analyzer(registry).analyze(context)


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Completeness:
    """How many slots of the species grid the counterpoint fills."""
    expected_slots: int
    present_slots: int
    missing_measures: Tuple[int, ...]
    is_complete: bool


def check_completeness(
    cantus_firmus: Sequence[Note],
    counterpoint: Sequence[Note],
    species: "Species | int",
) -> Completeness:
    """Check that every measure of the cantus firmus has its counterpoint.

    Fixed-grid species need a note on every beat slot; fifth species needs
    at least one note per measure.  Notes outside the cantus firmus range
    are ignored.
    """
    measures = len(cantus_firmus)
    slots = beat_slots(species)
    expected = measures * len(slots)
    in_range = [n for n in counterpoint if 0 <= n.measure_index < measures]

    if get_species_config(species).is_variable:
        filled = {n.measure_index for n in in_range}
        missing = tuple(m for m in range(measures) if m not in filled)
        present = len({(n.measure_index, n.beat_position) for n in in_range})
        return Completeness(expected, present, missing, not missing)

    occupied = {(n.measure_index, n.beat_position) for n in in_range if n.beat_position in slots}
    missing = tuple(
        m for m in range(measures)
        if any((m, b) not in occupied for b in slots)
    )
    return Completeness(expected, len(occupied), missing, len(occupied) == expected)
