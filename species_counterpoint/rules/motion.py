"""Motion rules: parallel, direct, and disguised perfect consonances."""

from __future__ import annotations

from typing import List, Tuple

from ..model import Note
from ..music_theory import IntervalQuality, MotionType, all_motions
from .base import ALL, SPECIES_II_III_V, Category, RuleContext, Severity, SpeciesRule, Violation, species_set
from .helpers import against_cf, consecutive_pairs, note_at_measure, sign

_P = IntervalQuality.PERFECT


class _MotionRule(SpeciesRule):
    category = Category.MOTION


# ---------------------------------------------------------------------------
# Parallel perfects between consecutive measures
# ---------------------------------------------------------------------------


class _ParallelPerfect(_MotionRule):
    degree = 5
    label = "fifths"

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for mo in all_motions(context.cantus_firmus, context.counterpoint):
            if (
                mo.type == MotionType.PARALLEL
                and mo.interval_before.is_exactly(self.degree, _P)
                and mo.interval_after.is_exactly(self.degree, _P)
            ):
                out.append(self.violation(
                    f"Parallel {self.label} between measures "
                    f"{mo.cf_from.measure_index + 1}-{mo.cf_to.measure_index + 1}",
                    mo.cf_to.measure_index,
                    notes=mo.notes,
                ))
        return out


class NoParallelFifths(_ParallelPerfect):
    rule_id = "species1-no-parallel-fifths"
    name = "No parallel perfect fifths"
    species = ALL
    description = "Parallel perfect fifths are forbidden"
    explanation = (
        "Parallel perfect fifths create a hollow sound and destroy melodic independence. "
        "Use contrary or oblique motion instead."
    )


class NoParallelOctaves(_ParallelPerfect):
    rule_id = "species1-no-parallel-octaves"
    name = "No parallel perfect octaves"
    species = ALL
    description = "Parallel perfect octaves are forbidden"
    explanation = "Parallel octaves eliminate the sense of two independent voices."
    degree = 8
    label = "octaves"


# ---------------------------------------------------------------------------
# Direct (hidden) perfects
# ---------------------------------------------------------------------------


class _DirectPerfect(_MotionRule):
    severity = Severity.WARNING
    species = species_set(1)
    degree = 5
    label = "fifth"

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for mo in all_motions(context.cantus_firmus, context.counterpoint):
            if mo.type == MotionType.SIMILAR and mo.interval_after.is_exactly(self.degree, _P):
                out.append(self.violation(
                    f"Direct {self.label} at measure {mo.cf_to.measure_index + 1}",
                    mo.cf_to.measure_index,
                    notes=mo.notes,
                ))
        return out


class NoDirectFifths(_DirectPerfect):
    rule_id = "species1-no-direct-fifths"
    name = "Avoid direct fifths"
    description = "Approaching perfect fifth by similar motion is discouraged"
    explanation = (
        "Direct (hidden) fifths can sound awkward. Prefer contrary or oblique motion "
        "when approaching perfect consonances."
    )


class NoDirectOctaves(_DirectPerfect):
    rule_id = "species1-no-direct-octaves"
    name = "Avoid direct octaves"
    description = "Approaching octave by similar motion is discouraged"
    explanation = "Direct octaves weaken voice independence, especially when the upper voice leaps."
    degree = 8
    label = "octave"


# ---------------------------------------------------------------------------
# Note-to-note parallels (species II, III, V)
# ---------------------------------------------------------------------------


def _perfect_pairs(
    context: RuleContext,
    degree: int,
    skip_downbeat_pairs: bool = False,
    require_cf_motion: bool = False,
) -> List[Tuple[Note, Note, Note, Note]]:
    """Consecutive counterpoint notes each forming the same perfect interval
    with the cantus firmus note of its own measure.

    Returns (cf_prev, prev, cf_curr, curr) tuples.
    """
    cf = context.cantus_firmus
    hits = []
    for prev, curr in consecutive_pairs(context.counterpoint):
        if skip_downbeat_pairs and prev.beat_position == 0 and curr.beat_position == 0:
            continue
        a = against_cf(cf, prev)
        b = against_cf(cf, curr)
        if a is None or b is None:
            continue
        (cf_prev, iv_prev), (cf_curr, iv_curr) = a, b
        if require_cf_motion and cf_prev.midi_number == cf_curr.midi_number:
            continue
        if iv_prev.is_exactly(degree, _P) and iv_curr.is_exactly(degree, _P):
            hits.append((cf_prev, prev, cf_curr, curr))
    return hits


def _span(prev: Note, curr: Note) -> str:
    return (
        f"measure {prev.measure_index + 1} beat {prev.beat_position + 1} -> "
        f"measure {curr.measure_index + 1} beat {curr.beat_position + 1}"
    )


class _OffbeatParallel(_MotionRule):
    species = SPECIES_II_III_V
    degree = 5
    label = "fifths"

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        # Downbeat-to-downbeat pairs are covered by the measure-level rules.
        for cf_prev, prev, cf_curr, curr in _perfect_pairs(context, self.degree, skip_downbeat_pairs=True):
            out.append(self.violation(
                f"Parallel {self.label}: {_span(prev, curr)}",
                curr.measure_index, curr.beat_position,
                [cf_prev, prev, cf_curr, curr],
            ))
        return out


class NoParallelFifthsOffbeat(_OffbeatParallel):
    rule_id = "s2s3s5-no-parallel-fifths-offbeat"
    name = "No parallel fifths (including off-beat)"
    description = "Parallel perfect fifths between any two consecutive notes (including off-beat) are forbidden"
    explanation = (
        "Parallel fifths are forbidden between any two consecutive notes, not just downbeats. "
        "The rule applies to all note-to-note motion in the counterpoint."
    )


class NoParallelOctavesOffbeat(_OffbeatParallel):
    rule_id = "s2s3s5-no-parallel-octaves-offbeat"
    name = "No parallel octaves (including off-beat)"
    description = "Parallel perfect octaves between any two consecutive notes (including off-beat) are forbidden"
    explanation = (
        "Parallel octaves are forbidden between any two consecutive notes. Even off-beat "
        "to downbeat motion must avoid parallel octaves."
    )
    degree = 8
    label = "octaves"


# ---------------------------------------------------------------------------
# NoVoiceCrossingConsecutive
# ---------------------------------------------------------------------------


class NoVoiceCrossingConsecutive(_MotionRule):
    rule_id = "all-no-voice-crossing-consecutive"
    name = "No voice crossing between consecutive beats"
    species = ALL
    description = "The counterpoint must not cross the cantus firmus between any two consecutive notes"
    explanation = (
        "The two voices must maintain their relative position (counterpoint above or below "
        "the cantus firmus). Crossing destroys voice independence."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf = context.cantus_firmus
        out = []
        for prev, curr in consecutive_pairs(context.counterpoint):
            cf_prev = note_at_measure(cf, prev.measure_index)
            cf_curr = note_at_measure(cf, curr.measure_index)
            if cf_prev is None or cf_curr is None:
                continue
            s1 = sign(prev.midi_number - cf_prev.midi_number)
            s2 = sign(curr.midi_number - cf_curr.midi_number)
            if s1 and s2 and s1 != s2:
                out.append(self.violation(
                    f"Voice crossing at measure {curr.measure_index + 1}, beat {curr.beat_position + 1}",
                    curr.measure_index, curr.beat_position,
                    [cf_prev, prev, cf_curr, curr],
                ))
        return out


# ---------------------------------------------------------------------------
# NoSimilarMotionToUnison
# ---------------------------------------------------------------------------


class NoSimilarMotionToUnison(_MotionRule):
    rule_id = "all-no-similar-motion-to-unison"
    name = "Avoid approaching unison by similar motion"
    severity = Severity.WARNING
    species = ALL
    description = "Unisons should be reached by contrary or oblique motion, not similar motion"
    explanation = (
        "Reaching a unison by similar motion weakens the sense of two independent voices. "
        "Use contrary or oblique motion to arrive at unisons."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for mo in all_motions(context.cantus_firmus, context.counterpoint):
            if mo.type == MotionType.SIMILAR and mo.interval_after.is_exactly(1, _P):
                out.append(self.violation(
                    f"Unison approached by similar motion at measure {mo.cf_to.measure_index + 1}",
                    mo.cf_to.measure_index,
                    notes=mo.notes,
                ))
        return out


# ---------------------------------------------------------------------------
# Leapfrog (disguised) parallels, species II and III
# ---------------------------------------------------------------------------


class _LeapfrogParallel(_MotionRule):
    species = species_set(2, 3)
    degree = 5
    label = "fifths"

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for _, prev, _, curr in _perfect_pairs(context, self.degree, require_cf_motion=True):
            out.append(self.violation(
                f"Disguised parallel {self.label}: {_span(prev, curr)}",
                curr.measure_index, curr.beat_position,
                [prev, curr],
            ))
        return out


class NoLeapfrogFifths(_LeapfrogParallel):
    rule_id = "s2s3-no-leapfrog-fifths"
    name = "No disguised parallel fifths"
    description = "Two consecutive counterpoint notes each forming a P5 with the CF constitute disguised parallel fifths"
    explanation = (
        "Even when the counterpoint leaps, consecutive perfect fifths against the cantus "
        "firmus are heard as parallel fifths and are forbidden."
    )


class NoLeapfrogOctaves(_LeapfrogParallel):
    rule_id = "s2s3-no-leapfrog-octaves"
    name = "No disguised parallel octaves"
    description = "Two consecutive counterpoint notes each forming a P8 with the CF constitute disguised parallel octaves"
    explanation = (
        "Consecutive octaves against the cantus firmus, even with a leap in between, "
        "are heard as parallel octaves and are forbidden."
    )
    degree = 8
    label = "octaves"


ALL_MOTION_RULES = [
    NoParallelFifths,
    NoParallelOctaves,
    NoDirectFifths,
    NoDirectOctaves,
    NoParallelFifthsOffbeat,
    NoParallelOctavesOffbeat,
    NoVoiceCrossingConsecutive,
    NoSimilarMotionToUnison,
    NoLeapfrogFifths,
    NoLeapfrogOctaves,
]
