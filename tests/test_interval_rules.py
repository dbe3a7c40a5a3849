"""Tests for vertical interval rules."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.keys import parse_key
from species_counterpoint.model import make_note
from species_counterpoint.rules.base import Category, RuleContext, Severity
from species_counterpoint.rules.intervals import (
    Consonance,
    DownbeatConsonance,
    FirstInterval,
    FirstIntervalExpanded,
    FourthSpeciesOffbeatConsonance,
    LastInterval,
    LastIntervalExpanded,
    NoAugmentedOrDiminished,
    NoHarmonicTritone,
    PenultimateBarConsonance,
)

C_MAJOR = parse_key("C major")


def _cf(*pitches):
    return [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(pitches)]


def _n(pitch, measure=0, beat=0, dur="1"):
    return make_note(pitch, dur, measure, beat, key=C_MAJOR)


def _ctx(species, cf, cp):
    return RuleContext(species=species, key=C_MAJOR, cantus_firmus=cf, counterpoint=cp)


class TestConsonance(unittest.TestCase):
    def test_dissonant_second(self):
        ctx = _ctx(1, _cf("C4", "D4"), [_n("D4", 0), _n("F4", 1)])
        vs = Consonance().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].measure_index, 0)
        self.assertEqual(vs[0].category, Category.INTERVALS)
        self.assertIn("measure 1", vs[0].message)

    def test_all_consonant(self):
        ctx = _ctx(1, _cf("C4", "D4"), [_n("G4", 0), _n("F4", 1)])
        self.assertEqual(Consonance().check(ctx), [])

    def test_empty_counterpoint(self):
        self.assertEqual(Consonance().check(_ctx(1, _cf("C4", "D4"), [])), [])


class TestOpeningAndClosing(unittest.TestCase):
    def test_first_interval_third(self):
        ctx = _ctx(1, _cf("C4", "D4"), [_n("E4", 0), _n("D5", 1)])
        vs = FirstInterval().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(len(vs[0].affected_notes), 2)

    def test_first_interval_octave(self):
        ctx = _ctx(1, _cf("C4", "D4"), [_n("C5", 0), _n("B4", 1)])
        self.assertEqual(FirstInterval().check(ctx), [])

    def test_last_interval(self):
        ctx = _ctx(1, _cf("D4", "C4"), [_n("B4", 0), _n("E4", 1)])
        vs = LastInterval().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].measure_index, 1)

    def test_expanded_opening_allows_fifth(self):
        ctx = _ctx(2, _cf("C4", "D4"), [_n("G4", 0, 0, "2"), _n("A4", 0, 1, "2")])
        self.assertEqual(FirstIntervalExpanded().check(ctx), [])

    def test_expanded_opening_rejects_third(self):
        ctx = _ctx(2, _cf("C4", "D4"), [_n("E4", 0, 0, "2"), _n("A4", 0, 1, "2")])
        self.assertEqual(len(FirstIntervalExpanded().check(ctx)), 1)

    def test_expanded_closing(self):
        ctx = _ctx(3, _cf("D4", "C4"), [_n("B4", 0, 0, "4"), _n("E4", 1, 0, "1")])
        vs = LastIntervalExpanded().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].rule_id, "all-last-interval-expanded")

    def test_expanded_rules_skip_first_species(self):
        self.assertFalse(FirstIntervalExpanded().applies_to(1))
        self.assertTrue(LastIntervalExpanded().applies_to(5))


class TestDownbeatConsonance(unittest.TestCase):
    def test_dissonant_downbeat(self):
        cf = _cf("C4", "D4")
        cp = [_n("D4", 0, 0, "2"), _n("E4", 0, 1, "2"), _n("F4", 1, 0, "2")]
        vs = DownbeatConsonance().check(_ctx(2, cf, cp))
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].beat_position, 0)

    def test_offbeat_dissonance_ignored(self):
        cf = _cf("C4", "D4")
        cp = [_n("E4", 0, 0, "2"), _n("F4", 0, 1, "2"), _n("F4", 1, 0, "2")]
        self.assertEqual(DownbeatConsonance().check(_ctx(2, cf, cp)), [])


class TestTritone(unittest.TestCase):
    def test_tritone_fires_in_every_species(self):
        cf = _cf("F3", "D3")
        cp = [_n("B3", 0), _n("F3", 1)]
        for species in range(1, 6):
            vs = NoHarmonicTritone().check(_ctx(species, cf, cp))
            self.assertEqual(len(vs), 1, f"species {species}")
            self.assertEqual(vs[0].severity, Severity.ERROR)

    def test_augmented_fourth_is_also_augmented(self):
        ctx = _ctx(1, _cf("F3"), [_n("B3", 0)])
        vs = NoAugmentedOrDiminished().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertTrue(vs[0].message.startswith("Augmented 4"))

    def test_perfect_fourth_not_tritone(self):
        ctx = _ctx(1, _cf("F3"), [_n("Bb3", 0)])
        self.assertEqual(NoHarmonicTritone().check(ctx), [])


class TestPenultimateBar(unittest.TestCase):
    def test_offbeat_dissonance_in_penultimate_bar(self):
        cf = _cf("C4", "D4", "C4")
        cp = [
            _n("G4", 0, 0, "2"), _n("A4", 0, 1, "2"),
            _n("F4", 1, 0, "2"), _n("E4", 1, 1, "2"),
            _n("C5", 2, 0, "1"),
        ]
        vs = PenultimateBarConsonance().check(_ctx(2, cf, cp))
        self.assertEqual(len(vs), 1)
        self.assertEqual((vs[0].measure_index, vs[0].beat_position), (1, 1))


class TestFourthSpeciesOffbeat(unittest.TestCase):
    def test_untied_dissonant_offbeat(self):
        cf = _cf("C4", "D4")
        cp = [_n("E4", 0, 0, "2"), _n("D4", 0, 1, "2"), _n("F4", 1, 0, "2")]
        vs = FourthSpeciesOffbeatConsonance().check(_ctx(4, cf, cp))
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].beat_position, 1)

    def test_preparation_of_tie_is_exempt(self):
        cf = _cf("C4", "D4")
        cp = [_n("E4", 0, 0, "2"), _n("D4", 0, 1, "2"), _n("D4", 1, 0, "2")]
        self.assertEqual(FourthSpeciesOffbeatConsonance().check(_ctx(4, cf, cp)), [])


if __name__ == "__main__":
    unittest.main()
