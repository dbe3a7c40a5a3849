"""Melodic rules: leaps, contour, range, climax and nadir of the counterpoint."""

from __future__ import annotations

from typing import List

from ..music_theory import MotionType, all_motions
from .base import ALL, SPECIES_II_III_V, Category, RuleContext, Severity, SpeciesRule, Violation, species_set
from .helpers import against_cf, consecutive_pairs, direction, is_leap, is_step, is_tied_pair


class _MelodicRule(SpeciesRule):
    category = Category.MELODIC


# ---------------------------------------------------------------------------
# PreferContraryMotion
# ---------------------------------------------------------------------------


class PreferContraryMotion(_MelodicRule):
    """Warn when less than 40% of the measure-to-measure motions are contrary."""

    rule_id = "species1-prefer-contrary-motion"
    name = "Prefer contrary motion"
    severity = Severity.WARNING
    species = ALL
    description = "Composition should use contrary motion frequently for independence"
    explanation = (
        "Contrary motion creates the strongest sense of melodic independence between voices. "
        "Try using contrary motion more frequently."
    )

    def __init__(self, min_ratio: float = 0.4, min_motions: int = 3):
        self.min_ratio = min_ratio
        self.min_motions = min_motions

    def check(self, context: RuleContext) -> List[Violation]:
        motions = all_motions(context.cantus_firmus, context.counterpoint)
        if len(motions) < self.min_motions:
            return []
        contrary = sum(1 for m in motions if m.type == MotionType.CONTRARY)
        ratio = contrary / len(motions)
        if ratio >= self.min_ratio:
            return []
        return [self.violation(
            f"Only {round(ratio * 100)}% contrary motion (recommend >{round(self.min_ratio * 100)}%)",
            0,
        )]


# ---------------------------------------------------------------------------
# RecoverLeaps
# ---------------------------------------------------------------------------


class RecoverLeaps(_MelodicRule):
    """A leap of a fourth or more must be followed by a step the other way."""

    rule_id = "species1-recover-leaps"
    name = "Recover leaps by step"
    severity = Severity.WARNING
    species = ALL
    description = "Large leaps should be followed by stepwise motion in opposite direction"
    explanation = (
        'Fux teaches that large leaps should be "recovered" by stepwise motion in the '
        "opposite direction."
    )

    def __init__(self, threshold: int = 5):
        self.threshold = threshold

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for prev, curr, nxt in zip(cp, cp[1:], cp[2:]):
            if abs(curr.midi_number - prev.midi_number) < self.threshold:
                continue
            if direction(prev, curr) != direction(curr, nxt) and is_step(curr, nxt):
                continue
            out.append(self.violation(
                f"Leap at measure {curr.measure_index + 1} not recovered properly",
                curr.measure_index, curr.beat_position,
                [prev, curr, nxt],
            ))
        return out


# ---------------------------------------------------------------------------
# ClimaxApproach
# ---------------------------------------------------------------------------


class ClimaxApproach(_MelodicRule):
    rule_id = "species1-climax-approach"
    name = "Approach climax by step"
    severity = Severity.WARNING
    species = ALL
    description = "Melodic climax should be approached and left by step"
    explanation = "Stepwise approach to the melodic climax creates smooth, singable melodies."

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if len(cp) < 3:
            return []
        top = max(n.midi_number for n in cp)
        idx = next(i for i, n in enumerate(cp) if n.midi_number == top)
        climax = cp[idx]
        out = []
        if idx > 0 and is_leap(cp[idx - 1], climax):
            out.append(self.violation(
                f"Climax at measure {climax.measure_index + 1} approached by leap",
                climax.measure_index, climax.beat_position,
                [cp[idx - 1], climax],
            ))
        if idx < len(cp) - 1 and is_leap(climax, cp[idx + 1]):
            out.append(self.violation(
                f"Climax at measure {climax.measure_index + 1} left by leap",
                climax.measure_index, climax.beat_position,
                [climax, cp[idx + 1]],
                rule_name="Leave climax by step",
                explanation="Stepwise departure from the melodic climax creates smooth, singable melodies.",
            ))
        return out


# ---------------------------------------------------------------------------
# RangeLimit
# ---------------------------------------------------------------------------


class RangeLimit(_MelodicRule):
    rule_id = "all-range-limit"
    name = "Counterpoint range must not exceed a tenth"
    severity = Severity.WARNING
    species = ALL
    description = "The counterpoint line must stay within a tenth (16 semitones) of its starting note"
    explanation = (
        "A counterpoint line spanning more than a tenth loses melodic coherence. "
        "Keep the range compact for a singable melody."
    )

    def __init__(self, max_span: int = 16):
        self.max_span = max_span

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if len(cp) < 2:
            return []
        first = cp[0]
        return [
            self.violation(
                f"Note at measure {n.measure_index + 1} is more than a tenth from the opening note",
                n.measure_index, n.beat_position, [first, n],
            )
            for n in cp
            if abs(n.midi_number - first.midi_number) > self.max_span
        ]


# ---------------------------------------------------------------------------
# NoLeapOfSeventhOrMore
# ---------------------------------------------------------------------------


class NoLeapOfSeventhOrMore(_MelodicRule):
    rule_id = "all-no-leap-of-seventh-or-more"
    name = "No melodic leap larger than a sixth"
    species = ALL
    description = "No single melodic leap in the counterpoint may exceed a minor sixth (8 semitones)"
    explanation = (
        "Fux prohibits melodic leaps larger than a minor sixth. Large leaps are difficult "
        "to sing and break melodic flow."
    )

    def __init__(self, max_leap: int = 8):
        self.max_leap = max_leap

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for prev, curr in consecutive_pairs(context.counterpoint):
            size = abs(curr.midi_number - prev.midi_number)
            if size > self.max_leap:
                out.append(self.violation(
                    f"Leap of {size} semitones at measure {curr.measure_index + 1}",
                    curr.measure_index, curr.beat_position, [prev, curr],
                ))
        return out


# ---------------------------------------------------------------------------
# NoRepeatedNotes
# ---------------------------------------------------------------------------


class NoRepeatedNotes(_MelodicRule):
    """Fourth-species ties are the only sanctioned repetition."""

    rule_id = "all-no-repeated-notes"
    name = "No repeated consecutive notes"
    species = ALL
    description = "Two consecutive notes at the same pitch are forbidden (except Fourth Species ties)"
    explanation = (
        "Consecutive notes at the same pitch stall the melodic line. Each note should move "
        "to a new pitch (ties in Fourth Species are the only exception)."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for prev, curr in consecutive_pairs(context.counterpoint):
            if prev.midi_number != curr.midi_number:
                continue
            if is_tied_pair(prev, curr, context.species):
                continue
            out.append(self.violation(
                f"Repeated note {curr.name} at measure {curr.measure_index + 1}, "
                f"beat {curr.beat_position + 1}",
                curr.measure_index, curr.beat_position, [prev, curr],
            ))
        return out


# ---------------------------------------------------------------------------
# Consecutive leaps
# ---------------------------------------------------------------------------


class NoConsecutiveLeapsSameDirection(_MelodicRule):
    rule_id = "all-no-consecutive-leaps-same-direction"
    name = "Avoid two consecutive leaps in the same direction"
    severity = Severity.WARNING
    species = ALL
    description = "Two consecutive leaps in the same direction weaken the melodic line"
    explanation = (
        "Consecutive leaps in the same direction create an ungainly melodic contour. "
        "Alternate leap direction or insert stepwise motion between leaps."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        pairs = consecutive_pairs(context.counterpoint)
        out = []
        for (a, b), (_, c) in zip(pairs, pairs[1:]):
            if not is_leap(a, b) or not is_leap(b, c):
                continue
            if direction(a, b) == direction(b, c):
                out.append(self.violation(
                    f"Two consecutive leaps in the same direction ending at measure {c.measure_index + 1}",
                    c.measure_index, c.beat_position, [a, b, c],
                ))
        return out


class NoThreeConsecutiveLeaps(_MelodicRule):
    rule_id = "all-no-three-consecutive-leaps"
    name = "No three consecutive leaps"
    species = ALL
    description = "Three or more consecutive leaps in any direction are forbidden"
    explanation = (
        "Three or more leaps in a row make the melody impossible to follow. Return to "
        "stepwise motion after at most two leaps."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        pairs = consecutive_pairs(context.counterpoint)
        out = []
        for (a, b), (_, c), (_, d) in zip(pairs, pairs[1:], pairs[2:]):
            if is_leap(a, b) and is_leap(b, c) and is_leap(c, d):
                out.append(self.violation(
                    f"Three consecutive leaps ending at measure {d.measure_index + 1}",
                    d.measure_index, d.beat_position, [a, b, c, d],
                ))
        return out


# ---------------------------------------------------------------------------
# Single climax / nadir
# ---------------------------------------------------------------------------


class SingleClimax(_MelodicRule):
    rule_id = "all-single-climax"
    name = "Counterpoint should have a single climax"
    severity = Severity.WARNING
    species = ALL
    description = "The highest pitch in the counterpoint should appear exactly once"
    explanation = (
        "A well-shaped counterpoint has a single melodic climax, one unique highest point. "
        "Repeating the climax dilutes its impact."
    )
    word = "highest"
    pick = staticmethod(max)

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if len(cp) < 3:
            return []
        extreme = self.pick(n.midi_number for n in cp)
        hits = [n for n in cp if n.midi_number == extreme]
        if len(hits) < 2:
            return []
        return [self.violation(
            f"The {self.word} note ({hits[0].name}) appears {len(hits)} times",
            hits[0].measure_index,
            notes=hits,
        )]


class SingleNadir(SingleClimax):
    rule_id = "all-single-nadir"
    name = "Counterpoint should have a single nadir"
    description = "The lowest pitch in the counterpoint should appear exactly once"
    explanation = (
        "A well-shaped counterpoint has a single melodic low point. Repeating the nadir "
        "flattens the melodic contour."
    )
    word = "lowest"
    pick = staticmethod(min)


# ---------------------------------------------------------------------------
# Off-beat dissonance approach / departure
# ---------------------------------------------------------------------------


class NoLeapToOffbeatDissonance(_MelodicRule):
    rule_id = "s2s3s5-no-leap-to-offbeat-dissonance"
    name = "Dissonant off-beat must be approached by step"
    species = SPECIES_II_III_V
    description = "A dissonant note on an off-beat must never be reached by leap"
    explanation = (
        "Dissonances on off-beats must always be approached by stepwise motion. A leap to "
        "a dissonance violates the fundamental rules of dissonance treatment."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for prev, curr in consecutive_pairs(context.counterpoint):
            if curr.beat_position == 0:
                continue
            found = against_cf(context.cantus_firmus, curr)
            if found is None or found[1].is_consonant:
                continue
            if is_leap(prev, curr):
                out.append(self.violation(
                    f"Leap to dissonant off-beat at measure {curr.measure_index + 1}, "
                    f"beat {curr.beat_position + 1}",
                    curr.measure_index, curr.beat_position, [prev, curr],
                ))
        return out


class NoLargeLeapAfterOffbeatDissonance(_MelodicRule):
    """Third species: an off-beat dissonance continues by step in the same direction."""

    rule_id = "s3-no-large-leap-after-offbeat-dissonance"
    name = "Must leave off-beat dissonance by step in same direction"
    species = species_set(3)
    description = (
        "In Third Species, the note after an off-beat dissonance must continue stepwise "
        "in the same direction"
    )
    explanation = (
        "In Third Species, a dissonant passing tone must continue stepwise in the same "
        "direction it was approached from. Changing direction or leaping breaks the "
        "passing-tone pattern."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for prev, curr, nxt in zip(cp, cp[1:], cp[2:]):
            if curr.beat_position == 0:
                continue
            found = against_cf(context.cantus_firmus, curr)
            if found is None or found[1].is_consonant:
                continue
            if is_step(curr, nxt) and direction(curr, nxt) == direction(prev, curr):
                continue
            out.append(self.violation(
                f"Off-beat dissonance at measure {curr.measure_index + 1}, beat "
                f"{curr.beat_position + 1} not left by step in same direction",
                curr.measure_index, curr.beat_position, [prev, curr, nxt],
            ))
        return out


ALL_MELODIC_RULES = [
    PreferContraryMotion,
    RecoverLeaps,
    ClimaxApproach,
    RangeLimit,
    NoLeapOfSeventhOrMore,
    NoRepeatedNotes,
    NoConsecutiveLeapsSameDirection,
    NoThreeConsecutiveLeaps,
    SingleClimax,
    SingleNadir,
    NoLeapToOffbeatDissonance,
    NoLargeLeapAfterOffbeatDissonance,
]
