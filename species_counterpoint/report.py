"""Report generation: text and JSON output, note highlights."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .model import Key, Note
from .registry import CATEGORY_ORDER, RuleRegistry
from .rules.base import AnalysisResult, Category, Rule, RuleContext, Severity
from .runner import Completeness
from .species import Species


def _severity_prefix(severity: Severity) -> str:
    return {
        Severity.ERROR: "[ERROR]   ",
        Severity.WARNING: "[WARNING] ",
    }[severity]


def _completeness_line(completeness: Completeness) -> str:
    line = f"Incomplete: {completeness.present_slots}/{completeness.expected_slots} slots filled"
    if completeness.missing_measures:
        measures = ", ".join(str(m + 1) for m in completeness.missing_measures)
        line += f", missing measures {measures}"
    return line


def format_text(
    context: RuleContext,
    result: AnalysisResult,
    rules: Optional[Sequence[Rule]] = None,
    completeness: Optional[Completeness] = None,
) -> str:
    """Format an analysis result as human-readable text.

    When ``rules`` (the rules that ran) is given, rules without violations
    are listed as passed and the category summary covers every category
    that ran.
    """
    lines = []
    lines.append(
        f"=== Analysis: species={context.species.roman}, key={context.key}, "
        f"{len(context.cantus_firmus)} measures ==="
    )
    if completeness is not None and not completeness.is_complete:
        lines.append(_completeness_line(completeness))
    lines.append("")

    for v in result.violations:
        lines.append(f"{_severity_prefix(v.severity)} {v.category.value}/{v.rule_id}: {v.location} {v.message}")
    for rule_id in result.failed_rules:
        lines.append(f"[FAILED]   {rule_id}: rule raised an exception, see log")
    if rules is not None:
        flagged = {v.rule_id for v in result.violations} | set(result.failed_rules)
        for rule in rules:
            if rule.rule_id not in flagged:
                lines.append(f"[PASS]     {rule.category.value}/{rule.rule_id}")
    lines.append("")

    lines.append("Category Summary:")
    counts: Dict[Category, Dict[str, int]] = {}
    if rules is not None:
        for rule in rules:
            counts.setdefault(rule.category, {"error": 0, "warning": 0})
    for v in result.violations:
        counts.setdefault(v.category, {"error": 0, "warning": 0})[v.severity.value] += 1

    for cat in CATEGORY_ORDER:
        if cat not in counts:
            continue
        c = counts[cat]
        parts = []
        if c["error"]:
            parts.append(f"{c['error']} error")
        if c["warning"]:
            parts.append(f"{c['warning']} warning")
        if c["error"]:
            lines.append(f"  {cat.value:<16} FAIL ({', '.join(parts)})")
        elif parts:
            lines.append(f"  {cat.value:<16} PASS ({', '.join(parts)})")
        else:
            lines.append(f"  {cat.value:<16} PASS")

    lines.append(f"  OVERALL: {'PASS' if result.is_valid else 'FAIL'}")
    lines.append("")
    return "\n".join(lines)


def format_json(
    context: RuleContext,
    result: AnalysisResult,
    completeness: Optional[Completeness] = None,
) -> str:
    """Format an analysis result as JSON."""
    data: Dict[str, Any] = {
        "metadata": {
            "species": int(context.species),
            "key": context.key.name,
            "measures": len(context.cantus_firmus),
            "counterpoint_notes": len(context.counterpoint),
        },
        "result": result.to_dict(),
    }
    if completeness is not None:
        data["completeness"] = {
            "expected_slots": completeness.expected_slots,
            "present_slots": completeness.present_slots,
            "missing_measures": list(completeness.missing_measures),
            "is_complete": completeness.is_complete,
        }
    return json.dumps(data, indent=2)


# ---------------------------------------------------------------------------
# Rule reference
# ---------------------------------------------------------------------------


def format_rules_text(registry: RuleRegistry, species: Optional[int] = None) -> str:
    """Rule reference grouped by category."""
    lines = []
    title = "Rules" if species is None else f"Rules for {Species(species).roman} species"
    count = len(registry) if species is None else len(registry.for_species(species))
    lines.append(f"=== {title} ({count}) ===")
    for info, rules in registry.grouped_by_category(species):
        lines.append("")
        lines.append(f"{info.label}: {info.description}")
        for rule in rules:
            sp = ",".join(s.roman for s in sorted(rule.species))
            lines.append(f"  {_severity_prefix(rule.severity)} {rule.rule_id:<52} [{sp}]")
            lines.append(f"             {rule.description}")
    lines.append("")
    return "\n".join(lines)


def format_rules_json(registry: RuleRegistry, species: Optional[int] = None) -> str:
    data = []
    for info, rules in registry.grouped_by_category(species):
        data.append({
            "category": info.category.value,
            "label": info.label,
            "description": info.description,
            "rules": [
                {
                    "id": r.rule_id,
                    "name": r.name,
                    "severity": r.severity.value,
                    "species": sorted(int(s) for s in r.species),
                    "description": r.description,
                }
                for r in rules
            ],
        })
    return json.dumps(data, indent=2)


# ---------------------------------------------------------------------------
# Generated melodies
# ---------------------------------------------------------------------------


def format_cantus_firmus(notes: Sequence[Note], key: Key, attempts: Optional[int] = None) -> str:
    lines = []
    header = f"=== Cantus firmus: {key}, {len(notes)} notes"
    if attempts is not None:
        header += f", {attempts} attempts"
    lines.append(header + " ===")
    lines.append("  " + " ".join(n.name for n in notes))
    lines.append("  " + " ".join(str(n.scale_degree).ljust(len(n.name)) for n in notes).rstrip())
    lines.append("")
    return "\n".join(lines)


def format_cantus_firmus_json(notes: Sequence[Note], key: Key, attempts: Optional[int] = None) -> str:
    data: Dict[str, Any] = {
        "key": key.name,
        "notes": [n.to_dict() for n in notes],
    }
    if attempts is not None:
        data["attempts"] = attempts
    return json.dumps(data, indent=2)


# ---------------------------------------------------------------------------
# Note highlights
# ---------------------------------------------------------------------------

HIGHLIGHT_COLORS = {
    "error": "#B54834",
    "warning": "#C49A3B",
    "selection": "#2196F3",
}

_PRIORITY = {"warning": 1, "error": 2, "selection": 3}


@dataclass(frozen=True)
class NoteHighlight:
    voice: str  # "cf" or "cp"
    index: int
    kind: str  # "error", "warning" or "selection"

    @property
    def color(self) -> str:
        return HIGHLIGHT_COLORS[self.kind]


def _same_note(a: Note, b: Note) -> bool:
    return a.pitch == b.pitch and a.measure_index == b.measure_index and a.beat_position == b.beat_position


def _find(notes: Sequence[Note], target: Note) -> int:
    for i, n in enumerate(notes):
        if _same_note(n, target):
            return i
    return -1


def note_highlights(
    cantus_firmus: Sequence[Note],
    counterpoint: Sequence[Note],
    violations,
    selected: Optional[int] = None,
) -> List[NoteHighlight]:
    """Map the notes named by violations back to voice positions.

    Cantus firmus matches win over counterpoint matches.  When several
    violations touch one note the strongest kind is kept: a selected
    counterpoint note beats an error, which beats a warning.
    """
    best: Dict[Tuple[str, int], NoteHighlight] = {}

    def upsert(voice: str, index: int, kind: str):
        existing = best.get((voice, index))
        if existing is None or _PRIORITY[kind] > _PRIORITY[existing.kind]:
            best[(voice, index)] = NoteHighlight(voice, index, kind)

    for v in violations:
        for note in v.affected_notes:
            idx = _find(cantus_firmus, note)
            if idx != -1:
                upsert("cf", idx, v.severity.value)
                continue
            idx = _find(counterpoint, note)
            if idx != -1:
                upsert("cp", idx, v.severity.value)

    if selected is not None:
        upsert("cp", selected, "selection")

    return list(best.values())
