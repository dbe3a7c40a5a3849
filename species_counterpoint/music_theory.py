"""Interval and motion classification between two voices.

Intervals are measured both diatonically (degree, from the letter names) and
chromatically (semitones); the pair determines the quality.  All functions
here are pure and total: every pair of pitches yields an Interval.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Tuple, Union

from .model import Note, Pitch


class IntervalQuality(Enum):
    PERFECT = "perfect"
    MAJOR = "major"
    MINOR = "minor"
    AUGMENTED = "augmented"
    DIMINISHED = "diminished"

    @property
    def abbrev(self) -> str:
        return {"perfect": "P", "major": "M", "minor": "m",
                "augmented": "A", "diminished": "d"}[self.value]


_P = IntervalQuality.PERFECT
_M = IntervalQuality.MAJOR
_m = IntervalQuality.MINOR
_A = IntervalQuality.AUGMENTED
_d = IntervalQuality.DIMINISHED

# (simple degree) -> {semitones mod 12: quality}
QUALITY_TABLE: Dict[int, Dict[int, IntervalQuality]] = {
    1: {0: _P, 1: _A},
    2: {1: _m, 2: _M, 3: _A},
    3: {3: _m, 4: _M, 5: _A},
    4: {4: _d, 5: _P, 6: _A},
    5: {6: _d, 7: _P, 8: _A},
    6: {8: _m, 9: _M, 10: _A},
    7: {10: _m, 11: _M, 0: _A},
}

# Semitone size of the perfect/major form of each simple degree.
_REFERENCE_SIZE = {1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11}


def simple_degree(degree: int) -> int:
    """Reduce a compound degree to 1-7 (an octave reduces to 1)."""
    return (degree - 1) % 7 + 1


def interval_quality(degree: int, semitones: int) -> IntervalQuality:
    sd = simple_degree(degree)
    ns = semitones % 12
    quality = QUALITY_TABLE[sd].get(ns)
    if quality is not None:
        return quality
    # Spellings outside the table: classify by which side of the reference size.
    diff = (ns - _REFERENCE_SIZE[sd] + 6) % 12 - 6
    return IntervalQuality.AUGMENTED if diff > 0 else IntervalQuality.DIMINISHED


def _is_consonant(degree: int, quality: IntervalQuality) -> bool:
    sd = simple_degree(degree)
    if sd in (1, 5):
        return quality == IntervalQuality.PERFECT
    if sd in (3, 6):
        return quality in (IntervalQuality.MAJOR, IntervalQuality.MINOR)
    return False


@dataclass(frozen=True)
class Interval:
    """A harmonic or melodic interval between two pitches."""
    degree: int
    quality: IntervalQuality
    semitones: int
    is_consonant: bool

    @property
    def simple_degree(self) -> int:
        return simple_degree(self.degree)

    @property
    def is_perfect(self) -> bool:
        return self.quality == IntervalQuality.PERFECT

    @property
    def is_tritone(self) -> bool:
        return self.semitones == 6

    def is_exactly(self, degree: int, quality: IntervalQuality = IntervalQuality.PERFECT) -> bool:
        return self.degree == degree and self.quality == quality

    @property
    def short_name(self) -> str:
        return f"{self.quality.abbrev}{self.degree}"

    def describe(self) -> str:
        return f"{self.quality.value} {self.degree}"

    def to_dict(self) -> dict:
        return {
            "degree": self.degree,
            "quality": self.quality.value,
            "semitones": self.semitones,
            "consonant": self.is_consonant,
        }


PitchLike = Union[Note, Pitch]


def _pitch(p: PitchLike) -> Pitch:
    return p.pitch if isinstance(p, Note) else p


def interval(a: PitchLike, b: PitchLike) -> Interval:
    """Interval between two pitches (order does not matter)."""
    pa, pb = _pitch(a), _pitch(b)
    semitones = abs(pb.midi - pa.midi)
    degree = abs(pb.diatonic_index - pa.diatonic_index) + 1
    quality = interval_quality(degree, semitones)
    return Interval(degree, quality, semitones, _is_consonant(degree, quality))


def is_perfect_consonance(iv: Interval) -> bool:
    """P1, P5, P8 and their compounds."""
    return iv.simple_degree in (1, 5) and iv.quality == IntervalQuality.PERFECT


def is_imperfect_consonance(iv: Interval) -> bool:
    """Major/minor thirds and sixths and their compounds."""
    return iv.simple_degree in (3, 6) and iv.quality in (IntervalQuality.MAJOR, IntervalQuality.MINOR)


# ---------------------------------------------------------------------------
# Motion
# ---------------------------------------------------------------------------


class MotionType(Enum):
    PARALLEL = "parallel"
    SIMILAR = "similar"
    CONTRARY = "contrary"
    OBLIQUE = "oblique"


@dataclass(frozen=True)
class VoiceMotion:
    """Relative motion of the two voices from one sonority to the next."""
    type: MotionType
    cf_from: Note
    cf_to: Note
    cp_from: Note
    cp_to: Note
    interval_before: Interval
    interval_after: Interval

    @property
    def notes(self) -> Tuple[Note, Note, Note, Note]:
        return (self.cf_from, self.cf_to, self.cp_from, self.cp_to)


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def classify_motion(cf1: Note, cf2: Note, cp1: Note, cp2: Note) -> MotionType:
    cf_dir = _sign(cf2.midi_number - cf1.midi_number)
    cp_dir = _sign(cp2.midi_number - cp1.midi_number)
    if cf_dir == 0 or cp_dir == 0:
        return MotionType.OBLIQUE
    if cf_dir != cp_dir:
        return MotionType.CONTRARY
    before = interval(cf1, cp1)
    after = interval(cf2, cp2)
    if before.degree == after.degree and before.quality == after.quality:
        return MotionType.PARALLEL
    return MotionType.SIMILAR


def voice_motion(cf1: Note, cf2: Note, cp1: Note, cp2: Note) -> VoiceMotion:
    return VoiceMotion(
        type=classify_motion(cf1, cf2, cp1, cp2),
        cf_from=cf1,
        cf_to=cf2,
        cp_from=cp1,
        cp_to=cp2,
        interval_before=interval(cf1, cp1),
        interval_after=interval(cf2, cp2),
    )


def all_motions(cantus_firmus: Sequence[Note], counterpoint: Sequence[Note]) -> List[VoiceMotion]:
    """Motions between consecutive cantus firmus measures.

    The counterpoint is represented in each measure by its first sounding
    note.  Measures without a counterpoint note break the chain.
    """
    if len(cantus_firmus) < 2 or len(counterpoint) < 2:
        return []
    first_in_measure: Dict[int, Note] = {}
    for note in sorted(counterpoint, key=lambda n: (n.measure_index, n.beat_position)):
        first_in_measure.setdefault(note.measure_index, note)

    motions = []
    for cf1, cf2 in zip(cantus_firmus, cantus_firmus[1:]):
        cp1 = first_in_measure.get(cf1.measure_index)
        cp2 = first_in_measure.get(cf2.measure_index)
        if cp1 is None or cp2 is None:
            continue
        motions.append(voice_motion(cf1, cf2, cp1, cp2))
    return motions
