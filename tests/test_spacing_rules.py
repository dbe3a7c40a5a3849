"""Tests for voice crossing, spacing, and texture rules."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.keys import parse_key
from species_counterpoint.model import make_note
from species_counterpoint.rules.base import Category, RuleContext, Severity
from species_counterpoint.rules.spacing import (
    AvoidConsecutiveSamePerfects,
    AvoidSimilarMotionToPerfect,
    NoConsecutiveUnisons,
    NoCrossingThroughOffbeatUnison,
    NoDoubleNeighbor,
    NoVoiceCrossing,
    SpacingNotTooWide,
)

C_MAJOR = parse_key("C major")


def _line(*pitches):
    return [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(pitches)]


def _n(pitch, measure, beat, dur="2"):
    return make_note(pitch, dur, measure, beat, key=C_MAJOR)


def _ctx(species, cf, cp):
    return RuleContext(species=species, key=C_MAJOR, cantus_firmus=cf, counterpoint=cp)


class TestVoiceCrossing(unittest.TestCase):
    def test_crossing_through_unison(self):
        ctx = _ctx(1, _line("C4", "C4", "C4"), _line("E4", "C4", "A3"))
        vs = NoVoiceCrossing().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].measure_index, 2)
        self.assertEqual(vs[0].category, Category.VOICE_CROSSING)

    def test_touching_unison_is_fine(self):
        ctx = _ctx(1, _line("C4", "C4", "C4"), _line("E4", "C4", "G4"))
        self.assertEqual(NoVoiceCrossing().check(ctx), [])

    def test_counterpoint_below(self):
        ctx = _ctx(1, _line("C5", "D5", "C5"), _line("C4", "B3", "C4"))
        self.assertEqual(NoVoiceCrossing().check(ctx), [])

    def test_offbeat_unison_sneak_crossing(self):
        cp = [_n("E4", 0, 0), _n("C4", 0, 1), _n("A3", 1, 0)]
        vs = NoCrossingThroughOffbeatUnison().check(_ctx(2, _line("C4", "C4"), cp))
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].beat_position, 1)

    def test_offbeat_unison_returning(self):
        cp = [_n("E4", 0, 0), _n("C4", 0, 1), _n("E4", 1, 0)]
        self.assertEqual(NoCrossingThroughOffbeatUnison().check(_ctx(2, _line("C4", "C4"), cp)), [])


class TestUnisonsAndSpacing(unittest.TestCase):
    def test_consecutive_unisons(self):
        vs = NoConsecutiveUnisons().check(_ctx(1, _line("C4", "D4"), _line("C4", "D4")))
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].severity, Severity.WARNING)

    def test_single_unison(self):
        self.assertEqual(NoConsecutiveUnisons().check(_ctx(1, _line("C4", "D4"), _line("C4", "F4"))), [])

    def test_spacing_too_wide(self):
        vs = SpacingNotTooWide().check(_ctx(1, _line("C3"), _line("E5")))
        self.assertEqual(len(vs), 1)
        self.assertIn("Spacing of 28 semitones", vs[0].message)

    def test_two_octaves_is_allowed(self):
        self.assertEqual(SpacingNotTooWide().check(_ctx(1, _line("C3"), _line("C5"))), [])


class TestTexture(unittest.TestCase):
    def test_similar_motion_into_fifth(self):
        vs = AvoidSimilarMotionToPerfect().check(_ctx(1, _line("C4", "D4"), _line("E4", "A4")))
        self.assertEqual(len(vs), 1)
        self.assertIn("Similar motion to perfect 5", vs[0].message)

    def test_contrary_motion_into_octave(self):
        ctx = _ctx(1, _line("C4", "D4"), _line("E5", "D5"))
        self.assertEqual(AvoidSimilarMotionToPerfect().check(ctx), [])

    def test_consecutive_fifths(self):
        vs = AvoidConsecutiveSamePerfects().check(_ctx(1, _line("C4", "D4"), _line("G4", "A4")))
        self.assertEqual(len(vs), 1)
        self.assertIn("perfect fifths", vs[0].message)

    def test_consecutive_unisons_left_to_unison_rule(self):
        ctx = _ctx(1, _line("C4", "D4"), _line("C4", "D4"))
        self.assertEqual(AvoidConsecutiveSamePerfects().check(ctx), [])

    def test_double_neighbor(self):
        cp = [
            _n("E4", 0, 0, "4"), _n("F4", 0, 1, "4"), _n("E4", 0, 2, "4"), _n("D4", 0, 3, "4"),
            _n("E4", 1, 0, "1"),
        ]
        vs = NoDoubleNeighbor().check(_ctx(3, _line("C4", "C4"), cp))
        self.assertEqual(len(vs), 1)
        self.assertIn("around E4", vs[0].message)
        self.assertEqual(len(vs[0].affected_notes), 5)

    def test_same_side_oscillation_is_not_double_neighbor(self):
        cp = [
            _n("E4", 0, 0, "4"), _n("F4", 0, 1, "4"), _n("E4", 0, 2, "4"), _n("F4", 0, 3, "4"),
            _n("E4", 1, 0, "1"),
        ]
        self.assertEqual(NoDoubleNeighbor().check(_ctx(3, _line("C4", "C4"), cp)), [])


if __name__ == "__main__":
    unittest.main()
