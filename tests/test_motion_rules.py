"""Tests for motion rules."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.keys import parse_key
from species_counterpoint.model import make_note
from species_counterpoint.rules.base import Category, RuleContext, Severity
from species_counterpoint.rules.motion import (
    NoDirectFifths,
    NoDirectOctaves,
    NoLeapfrogFifths,
    NoParallelFifths,
    NoParallelFifthsOffbeat,
    NoParallelOctaves,
    NoSimilarMotionToUnison,
    NoVoiceCrossingConsecutive,
)
from species_counterpoint.runner import analyze

C_MAJOR = parse_key("C major")


def _cf(*pitches):
    return [make_note(p, "1", i, 0, key=C_MAJOR) for i, p in enumerate(pitches)]


def _n(pitch, measure=0, beat=0, dur="1"):
    return make_note(pitch, dur, measure, beat, key=C_MAJOR)


def _line(*pitches):
    return [_n(p, i) for i, p in enumerate(pitches)]


def _ctx(species, cf, cp):
    return RuleContext(species=species, key=C_MAJOR, cantus_firmus=cf, counterpoint=cp)


class TestParallelPerfects(unittest.TestCase):
    def setUp(self):
        self.cf = _cf("C3", "D3", "E3", "F3", "G3", "F3", "E3", "D3", "C3")
        self.cp = _line("C4", "D4", "E4", "F4", "G4", "F4", "E4", "D4", "C4")

    def test_parallel_octaves_every_pair(self):
        vs = NoParallelOctaves().check(_ctx(1, self.cf, self.cp))
        self.assertEqual(len(vs), 8)
        self.assertEqual([v.measure_index for v in vs], list(range(1, 9)))
        self.assertEqual(vs[0].category, Category.MOTION)
        self.assertEqual(len(vs[0].affected_notes), 4)

    def test_parallel_octaves_via_analyze(self):
        result = analyze(_ctx(1, self.cf, self.cp))
        self.assertFalse(result.is_valid)
        self.assertEqual(len(result.by_rule("species1-no-parallel-octaves")), 8)
        self.assertEqual(result.by_rule("species1-no-parallel-fifths"), [])

    def test_parallel_fifths(self):
        ctx = _ctx(1, _cf("C4", "D4"), _line("G4", "A4"))
        vs = NoParallelFifths().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertIn("measures 1-2", vs[0].message)

    def test_contrary_motion_clean(self):
        ctx = _ctx(1, _cf("C4", "D4"), _line("G4", "F4"))
        self.assertEqual(NoParallelFifths().check(ctx), [])

    def test_single_note_has_no_motion(self):
        ctx = _ctx(1, _cf("C4"), _line("G4"))
        self.assertEqual(NoParallelFifths().check(ctx), [])
        self.assertEqual(NoParallelOctaves().check(ctx), [])


class TestDirectPerfects(unittest.TestCase):
    def test_direct_fifth(self):
        ctx = _ctx(1, _cf("C4", "D4"), _line("E4", "A4"))
        vs = NoDirectFifths().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].severity, Severity.WARNING)

    def test_direct_octave(self):
        ctx = _ctx(1, _cf("C4", "D4"), _line("A4", "D5"))
        self.assertEqual(len(NoDirectOctaves().check(ctx)), 1)

    def test_contrary_approach_clean(self):
        ctx = _ctx(1, _cf("C4", "D4"), _line("C5", "A4"))
        self.assertEqual(NoDirectFifths().check(ctx), [])

    def test_first_species_only(self):
        self.assertTrue(NoDirectFifths().applies_to(1))
        self.assertFalse(NoDirectFifths().applies_to(2))


class TestNoteToNoteParallels(unittest.TestCase):
    def setUp(self):
        cf = _cf("C4", "D4")
        cp = [_n("E4", 0, 0, "2"), _n("G4", 0, 1, "2"), _n("A4", 1, 0, "2")]
        self.ctx = _ctx(2, cf, cp)

    def test_offbeat_to_downbeat_fifths(self):
        vs = NoParallelFifthsOffbeat().check(self.ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual((vs[0].measure_index, vs[0].beat_position), (1, 0))
        self.assertIn("measure 1 beat 2 -> measure 2 beat 1", vs[0].message)

    def test_leapfrog_fifths(self):
        vs = NoLeapfrogFifths().check(self.ctx)
        self.assertEqual(len(vs), 1)
        self.assertTrue(vs[0].message.startswith("Disguised parallel fifths"))

    def test_measure_level_rule_not_triggered(self):
        self.assertEqual(NoParallelFifths().check(self.ctx), [])

    def test_leapfrog_needs_moving_cantus(self):
        cf = _cf("C4", "C4")
        cp = [_n("E4", 0, 0, "2"), _n("G4", 0, 1, "2"), _n("G4", 1, 0, "2")]
        self.assertEqual(NoLeapfrogFifths().check(_ctx(2, cf, cp)), [])


class TestCrossingAndUnison(unittest.TestCase):
    def test_voice_crossing(self):
        ctx = _ctx(1, _cf("C4", "C4"), _line("E4", "A3"))
        vs = NoVoiceCrossingConsecutive().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].measure_index, 1)

    def test_unison_is_not_crossing(self):
        ctx = _ctx(1, _cf("C4", "C4", "C4"), _line("E4", "C4", "E4"))
        self.assertEqual(NoVoiceCrossingConsecutive().check(ctx), [])

    def test_similar_motion_to_unison(self):
        ctx = _ctx(1, _cf("C4", "E4"), _line("A3", "E4"))
        vs = NoSimilarMotionToUnison().check(ctx)
        self.assertEqual(len(vs), 1)
        self.assertEqual(vs[0].severity, Severity.WARNING)

    def test_oblique_unison_allowed(self):
        ctx = _ctx(1, _cf("C4", "E4"), _line("E4", "E4"))
        self.assertEqual(NoSimilarMotionToUnison().check(ctx), [])


if __name__ == "__main__":
    unittest.main()
