"""Tests for interval and motion classification."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from species_counterpoint.model import Pitch, make_note
from species_counterpoint.music_theory import (
    IntervalQuality,
    MotionType,
    all_motions,
    classify_motion,
    interval,
    is_imperfect_consonance,
    is_perfect_consonance,
    voice_motion,
)


def _n(pitch, measure=0, beat=0):
    return make_note(pitch, "1", measure, beat)


def _iv(a, b):
    return interval(Pitch.parse(a), Pitch.parse(b))


class TestInterval(unittest.TestCase):
    def test_perfect_fifth(self):
        iv = _iv("C4", "G4")
        self.assertEqual(iv.degree, 5)
        self.assertEqual(iv.quality, IntervalQuality.PERFECT)
        self.assertEqual(iv.semitones, 7)
        self.assertTrue(iv.is_consonant)

    def test_octave_and_compound(self):
        iv = _iv("C4", "C5")
        self.assertEqual(iv.degree, 8)
        self.assertTrue(iv.is_consonant)
        self.assertEqual(_iv("C3", "E4").degree, 10)
        self.assertTrue(_iv("C3", "E4").is_consonant)

    def test_thirds(self):
        self.assertEqual(_iv("C4", "E4").quality, IntervalQuality.MAJOR)
        self.assertEqual(_iv("C4", "Eb4").quality, IntervalQuality.MINOR)
        self.assertEqual(_iv("A3", "C4").quality, IntervalQuality.MINOR)

    def test_order_does_not_matter(self):
        self.assertEqual(_iv("G4", "C4"), _iv("C4", "G4"))

    def test_dissonances(self):
        for a, b in (("C4", "D4"), ("C4", "F4"), ("C4", "B4"), ("C4", "Db4")):
            self.assertFalse(_iv(a, b).is_consonant, f"{a}-{b}")

    def test_augmented_fourth(self):
        iv = _iv("F3", "B3")
        self.assertEqual(iv.degree, 4)
        self.assertEqual(iv.quality, IntervalQuality.AUGMENTED)
        self.assertTrue(iv.is_tritone)
        self.assertFalse(iv.is_consonant)

    def test_diminished_fifth(self):
        iv = _iv("B3", "F4")
        self.assertEqual(iv.degree, 5)
        self.assertEqual(iv.quality, IntervalQuality.DIMINISHED)
        self.assertTrue(iv.is_tritone)

    def test_spelling_outside_table(self):
        """E#4 over C4 spelled as a third is augmented, not a fourth."""
        iv = _iv("C4", "E#4")
        self.assertEqual(iv.degree, 3)
        self.assertEqual(iv.quality, IntervalQuality.AUGMENTED)
        self.assertFalse(iv.is_consonant)

    def test_accepts_notes(self):
        self.assertEqual(interval(_n("C4"), _n("A4")).short_name, "M6")

    def test_perfect_and_imperfect(self):
        self.assertTrue(is_perfect_consonance(_iv("C4", "G5")))
        self.assertFalse(is_perfect_consonance(_iv("C4", "F4")))
        self.assertTrue(is_imperfect_consonance(_iv("C4", "Ab4")))
        self.assertFalse(is_imperfect_consonance(_iv("C4", "C4")))

    def test_to_dict(self):
        d = _iv("D4", "A4").to_dict()
        self.assertEqual(d, {"degree": 5, "quality": "perfect", "semitones": 7, "consonant": True})


class TestMotion(unittest.TestCase):
    def test_parallel(self):
        self.assertEqual(
            classify_motion(_n("C4"), _n("D4"), _n("G4"), _n("A4")), MotionType.PARALLEL,
        )

    def test_similar(self):
        # M3 -> m3: same direction, different quality
        self.assertEqual(
            classify_motion(_n("C4"), _n("D4"), _n("E4"), _n("F4")), MotionType.SIMILAR,
        )

    def test_contrary(self):
        self.assertEqual(
            classify_motion(_n("C4"), _n("D4"), _n("E4"), _n("D4")), MotionType.CONTRARY,
        )

    def test_oblique(self):
        self.assertEqual(
            classify_motion(_n("C4"), _n("C4"), _n("E4"), _n("F4")), MotionType.OBLIQUE,
        )
        self.assertEqual(
            classify_motion(_n("C4"), _n("C4"), _n("E4"), _n("E4")), MotionType.OBLIQUE,
        )

    def test_voice_motion_carries_intervals(self):
        mo = voice_motion(_n("C4"), _n("D4"), _n("E4"), _n("A4"))
        self.assertEqual(mo.type, MotionType.SIMILAR)
        self.assertEqual(mo.interval_before.short_name, "M3")
        self.assertEqual(mo.interval_after.short_name, "P5")
        self.assertEqual(len(mo.notes), 4)

    def test_all_motions_uses_first_note_per_measure(self):
        cf = [_n("C4", 0), _n("D4", 1)]
        cp = [_n("E4", 0, 0), _n("G4", 0, 1), _n("F4", 1, 0)]
        motions = all_motions(cf, cp)
        self.assertEqual(len(motions), 1)
        self.assertEqual(motions[0].cp_from.name, "E4")

    def test_all_motions_needs_two_notes(self):
        cf = [_n("C4", 0), _n("D4", 1)]
        self.assertEqual(all_motions(cf, [_n("E4", 0)]), [])

    def test_missing_measure_breaks_chain(self):
        cf = [_n("C4", 0), _n("D4", 1), _n("E4", 2)]
        cp = [_n("E4", 0), _n("C5", 2)]
        self.assertEqual(all_motions(cf, cp), [])


if __name__ == "__main__":
    unittest.main()
