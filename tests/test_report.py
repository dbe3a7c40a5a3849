"""Tests for report generation."""

import json
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.keys import parse_key
from species_counterpoint.model import make_note
from species_counterpoint.registry import build_default_registry
from species_counterpoint.report import (
    HIGHLIGHT_COLORS,
    format_cantus_firmus,
    format_cantus_firmus_json,
    format_json,
    format_rules_json,
    format_rules_text,
    format_text,
    note_highlights,
)
from species_counterpoint.rules.base import AnalysisResult, Category, Severity, Violation
from species_counterpoint.runner import analyze, check_completeness, load_exercise

FIXTURES = Path(__file__).parent / "fixtures"
C_MAJOR = parse_key("C major")


def _violation(severity, notes, rule_id="test-rule"):
    return Violation(
        rule_id=rule_id,
        rule_name="Test rule",
        severity=severity,
        category=Category.MELODIC,
        message="test",
        affected_notes=tuple(notes),
    )


class TestTextReport(unittest.TestCase):
    def setUp(self):
        self.registry = build_default_registry()
        self.context = load_exercise(FIXTURES / "parallel_octaves.json")
        self.result = analyze(self.context, self.registry)
        self.rules = self.registry.for_species(self.context.species)

    def test_text_contains_header(self):
        text = format_text(self.context, self.result)
        self.assertIn("=== Analysis: species=I, key=C major, 9 measures ===", text)

    def test_text_lists_violations(self):
        text = format_text(self.context, self.result)
        self.assertIn("[ERROR]    motion/species1-no-parallel-octaves: measure 2 Parallel octaves", text)

    def test_text_contains_summary(self):
        text = format_text(self.context, self.result, self.rules)
        self.assertIn("Category Summary:", text)
        self.assertIn("FAIL (8 error)", text)
        self.assertIn("  OVERALL: FAIL", text)

    def test_passed_rules_listed(self):
        text = format_text(self.context, self.result, self.rules)
        self.assertIn("[PASS]     intervals/species1-consonance", text)
        self.assertNotIn("[PASS]     motion/species1-no-parallel-octaves", text)

    def test_failed_rule_listed(self):
        result = AnalysisResult.of([], ["broken-rule"])
        text = format_text(self.context, result)
        self.assertIn("[FAILED]   broken-rule", text)
        self.assertIn("  OVERALL: PASS", text)

    def test_incomplete_exercise(self):
        context = load_exercise(FIXTURES / "species2_d_minor.json", species=3)
        completeness = check_completeness(context.cantus_firmus, context.counterpoint, context.species)
        text = format_text(context, analyze(context), completeness=completeness)
        self.assertIn("Incomplete: 7/16 slots filled, missing measures 1, 2, 3, 4", text)


class TestJsonReport(unittest.TestCase):
    def setUp(self):
        self.context = load_exercise(FIXTURES / "parallel_octaves.json")
        self.result = analyze(self.context)

    def test_json_parseable(self):
        data = json.loads(format_json(self.context, self.result))
        self.assertIn("metadata", data)
        self.assertIn("result", data)
        self.assertNotIn("completeness", data)

    def test_json_metadata(self):
        data = json.loads(format_json(self.context, self.result))
        self.assertEqual(data["metadata"]["species"], 1)
        self.assertEqual(data["metadata"]["key"], "C major")
        self.assertEqual(data["metadata"]["measures"], 9)

    def test_json_result(self):
        data = json.loads(format_json(self.context, self.result))
        self.assertFalse(data["result"]["is_valid"])
        octaves = [v for v in data["result"]["violations"] if v["rule_id"] == "species1-no-parallel-octaves"]
        self.assertEqual(len(octaves), 8)
        self.assertEqual(octaves[0]["location"], {"measure": 1})
        self.assertEqual(len(octaves[0]["affected_notes"]), 4)

    def test_json_completeness(self):
        completeness = check_completeness(self.context.cantus_firmus, self.context.counterpoint, 1)
        data = json.loads(format_json(self.context, self.result, completeness))
        self.assertTrue(data["completeness"]["is_complete"])
        self.assertEqual(data["completeness"]["missing_measures"], [])


class TestRuleReference(unittest.TestCase):
    def setUp(self):
        self.registry = build_default_registry()

    def test_text(self):
        text = format_rules_text(self.registry)
        self.assertIn("=== Rules (53) ===", text)
        self.assertIn("Dissonance Treatment:", text)
        self.assertIn("s4-cadential-suspension", text)

    def test_text_for_species(self):
        text = format_rules_text(self.registry, 1)
        self.assertIn("=== Rules for I species (30) ===", text)
        self.assertNotIn("Dissonance Treatment:", text)

    def test_json(self):
        data = json.loads(format_rules_json(self.registry))
        self.assertEqual([g["category"] for g in data],
                         ["intervals", "motion", "melodic", "dissonance", "cadence", "voiceCrossing"])
        first = data[0]["rules"][0]
        self.assertEqual(first["id"], "species1-consonance")
        self.assertEqual(first["species"], [1])
        self.assertEqual(first["severity"], "error")


class TestCantusFirmusReport(unittest.TestCase):
    def setUp(self):
        self.notes = [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(["C4", "D4", "E4", "D4", "C4"])]

    def test_text(self):
        text = format_cantus_firmus(self.notes, C_MAJOR, attempts=12)
        self.assertIn("=== Cantus firmus: C major, 5 notes, 12 attempts ===", text)
        self.assertIn("  C4 D4 E4 D4 C4", text)
        self.assertIn("  1  2  3  2  1", text)

    def test_json(self):
        data = json.loads(format_cantus_firmus_json(self.notes, C_MAJOR))
        self.assertEqual(data["key"], "C major")
        self.assertEqual([n["pitch"] for n in data["notes"]], ["C4", "D4", "E4", "D4", "C4"])
        self.assertNotIn("attempts", data)


class TestNoteHighlights(unittest.TestCase):
    def setUp(self):
        self.cf = [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(["C4", "D4", "C4"])]
        self.cp = [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(["G4", "F4", "C4"])]

    def test_error_beats_warning(self):
        vs = [
            _violation(Severity.WARNING, [self.cp[1]]),
            _violation(Severity.ERROR, [self.cp[1]]),
            _violation(Severity.WARNING, [self.cp[1]]),
        ]
        hl = note_highlights(self.cf, self.cp, vs)
        self.assertEqual(len(hl), 1)
        self.assertEqual((hl[0].voice, hl[0].index, hl[0].kind), ("cp", 1, "error"))
        self.assertEqual(hl[0].color, HIGHLIGHT_COLORS["error"])

    def test_selection_wins(self):
        hl = note_highlights(self.cf, self.cp, [_violation(Severity.ERROR, [self.cp[0]])], selected=0)
        self.assertEqual([(h.voice, h.index, h.kind) for h in hl], [("cp", 0, "selection")])

    def test_cantus_firmus_matched_first(self):
        # The final unison is the same pitch at the same position in both voices.
        hl = note_highlights(self.cf, self.cp, [_violation(Severity.WARNING, [self.cp[2], self.cf[1]])])
        self.assertEqual({(h.voice, h.index) for h in hl}, {("cf", 2), ("cf", 1)})

    def test_unknown_note_ignored(self):
        stray = make_note("A5", "1", 7, 0)
        self.assertEqual(note_highlights(self.cf, self.cp, [_violation(Severity.ERROR, [stray])]), [])


if __name__ == "__main__":
    unittest.main()
