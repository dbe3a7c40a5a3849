"""Voice crossing and spacing rules, plus harmonic texture warnings."""

from __future__ import annotations

from typing import List

from ..music_theory import is_imperfect_consonance, is_perfect_consonance
from .base import ALL, SPECIES_II_III_V, Category, RuleContext, Severity, SpeciesRule, Violation
from .helpers import against_cf, direction, note_at_measure, sign

# Widest vertical distance (semitones) before the voices stop sounding related.
MAX_SPACING = 24


class _SpacingRule(SpeciesRule):
    category = Category.VOICE_CROSSING


def _side(cf, note) -> "int | None":
    """+1 above the cantus firmus, -1 below, 0 in unison, None with no CF note."""
    cf_note = note_at_measure(cf, note.measure_index)
    if cf_note is None:
        return None
    return sign(note.midi_number - cf_note.midi_number)


def _aligned_pairs(context: RuleContext):
    """Yield (cf_prev, prev, cf_curr, curr) for consecutive notes with a CF note under both."""
    cf, cp = context.cantus_firmus, context.counterpoint
    for prev, curr in zip(cp, cp[1:]):
        cf_prev = note_at_measure(cf, prev.measure_index)
        cf_curr = note_at_measure(cf, curr.measure_index)
        if cf_prev is None or cf_curr is None:
            continue
        yield cf_prev, prev, cf_curr, curr


# ---------------------------------------------------------------------------
# NoVoiceCrossing
# ---------------------------------------------------------------------------


class NoVoiceCrossing(_SpacingRule):
    """Tracks the last definite side; unisons neither establish nor break it."""

    rule_id = "all-no-voice-crossing"
    name = "No voice crossing"
    species = ALL
    description = "The counterpoint must stay on the same side of the cantus firmus throughout"
    explanation = (
        "The counterpoint and cantus firmus must maintain their relative position: if the "
        "counterpoint starts above the CF, it must stay above (or reach unison). Crossing "
        "destroys the identity of the two voices."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if len(cp) < 2:
            return []
        last = _side(cf, cp[0])
        if last is None:
            return []
        out = []
        for note in cp[1:]:
            side = _side(cf, note)
            if side is None:
                continue
            if side and last and side != last:
                out.append(self.violation(
                    f"Voice crossing at measure {note.measure_index + 1}, beat {note.beat_position + 1}",
                    note.measure_index, note.beat_position,
                    [note_at_measure(cf, note.measure_index), note],
                ))
            if side:
                last = side
        return out


class NoConsecutiveUnisons(_SpacingRule):
    rule_id = "all-no-voice-touching-consecutively"
    name = "Avoid consecutive unisons"
    severity = Severity.WARNING
    species = ALL
    description = "Two consecutive unisons between counterpoint and cantus firmus are discouraged"
    explanation = (
        "Two unisons in a row collapse the two voices into one. A single unison is acceptable, "
        "but sustained unison contact destroys the sense of two independent melodic lines."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for cf_prev, prev, cf_curr, curr in _aligned_pairs(context):
            a = against_cf(context.cantus_firmus, prev)[1]
            b = against_cf(context.cantus_firmus, curr)[1]
            if a.is_exactly(1) and b.is_exactly(1):
                out.append(self.violation(
                    f"Consecutive unisons at measure {curr.measure_index + 1}",
                    curr.measure_index, curr.beat_position,
                    [cf_prev, prev, cf_curr, curr],
                ))
        return out


class SpacingNotTooWide(_SpacingRule):
    rule_id = "all-spacing-not-too-wide"
    name = "Voices must not be more than two octaves apart"
    severity = Severity.WARNING
    species = ALL
    description = "The vertical distance between counterpoint and cantus firmus must not exceed 24 semitones"
    explanation = (
        "Voices more than two octaves apart become difficult to hear as two related melodic "
        "lines. Keep the spacing within two octaves for clarity."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for note in context.counterpoint:
            cf_note = note_at_measure(context.cantus_firmus, note.measure_index)
            if cf_note is None:
                continue
            distance = abs(note.midi_number - cf_note.midi_number)
            if distance > MAX_SPACING:
                out.append(self.violation(
                    f"Spacing of {distance} semitones at measure {note.measure_index + 1}, "
                    f"beat {note.beat_position + 1}",
                    note.measure_index, note.beat_position, [cf_note, note],
                ))
        return out


# ---------------------------------------------------------------------------
# NoCrossingThroughOffbeatUnison
# ---------------------------------------------------------------------------


class NoCrossingThroughOffbeatUnison(_SpacingRule):
    rule_id = "s2s3s5-no-unison-on-offbeat-after-crossing-attempt"
    name = "Off-beat unison does not excuse a directional flip"
    species = SPECIES_II_III_V
    description = (
        "If the counterpoint reaches unison on an off-beat but the voices were on opposite "
        "sides, this is a sneak crossing"
    )
    explanation = (
        "Passing through a unison on an off-beat does not make a voice crossing legal. The "
        "voices must maintain their relative position throughout the piece."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        out = []
        for i in range(1, len(cp) - 1):
            prev, curr, nxt = cp[i - 1], cp[i], cp[i + 1]
            if curr.beat_position == 0:
                continue
            before, here, after = _side(cf, prev), _side(cf, curr), _side(cf, nxt)
            if before is None or here is None or after is None:
                continue
            if here == 0 and before != 0 and after != 0 and after != before:
                out.append(self.violation(
                    f"Voice crossing via off-beat unison at measure {curr.measure_index + 1}, "
                    f"beat {curr.beat_position + 1}",
                    curr.measure_index, curr.beat_position,
                    [note_at_measure(cf, prev.measure_index), prev,
                     note_at_measure(cf, curr.measure_index), curr],
                ))
        return out


# ---------------------------------------------------------------------------
# Harmonic texture
# ---------------------------------------------------------------------------


class AvoidSimilarMotionToPerfect(_SpacingRule):
    rule_id = "all-avoid-parallel-imperfect-to-perfect"
    name = "Avoid similar motion from imperfect to perfect consonance"
    severity = Severity.WARNING
    species = ALL
    description = (
        "Moving by similar motion from consecutive imperfect consonances into a perfect "
        "consonance weakens the perfect"
    )
    explanation = (
        "Approaching a perfect consonance by similar motion from imperfect consonances weakens "
        "the stability of the perfect interval. Use contrary or oblique motion to reach perfects."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for cf_prev, prev, cf_curr, curr in _aligned_pairs(context):
            a = against_cf(context.cantus_firmus, prev)[1]
            b = against_cf(context.cantus_firmus, curr)[1]
            if not is_imperfect_consonance(a) or not is_perfect_consonance(b):
                continue
            cf_dir = direction(cf_prev, cf_curr)
            if cf_dir != 0 and cf_dir == direction(prev, curr):
                out.append(self.violation(
                    f"Similar motion to {b.describe()} at measure {curr.measure_index + 1}",
                    curr.measure_index, curr.beat_position,
                    [cf_prev, prev, cf_curr, curr],
                ))
        return out


class AvoidConsecutiveSamePerfects(_SpacingRule):
    rule_id = "all-avoid-consecutive-perfects-same"
    name = "Avoid two identical perfect consonances in a row"
    severity = Severity.WARNING
    species = ALL
    description = "Two consecutive perfect consonances of the same type create a monotonous texture"
    explanation = (
        "Two identical perfect consonances in a row (even by contrary motion) creates a hollow, "
        "monotonous texture. Insert an imperfect consonance between them for richer sound."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for cf_prev, prev, cf_curr, curr in _aligned_pairs(context):
            a = against_cf(context.cantus_firmus, prev)[1]
            b = against_cf(context.cantus_firmus, curr)[1]
            if not (is_perfect_consonance(a) and is_perfect_consonance(b)) or a.degree != b.degree:
                continue
            # Unisons belong to NoConsecutiveUnisons.
            if a.degree == 1:
                continue
            label = "fifths" if a.simple_degree == 5 else "octaves"
            out.append(self.violation(
                f"Two consecutive perfect {label} at measure {curr.measure_index + 1}",
                curr.measure_index, curr.beat_position,
                [cf_prev, prev, cf_curr, curr],
            ))
        return out


class NoDoubleNeighbor(_SpacingRule):
    """Hub, dissonant neighbor, hub, dissonant neighbor on the other side, hub."""

    rule_id = "s2s3s5-no-double-neighbor"
    name = "No double-neighbor figure"
    severity = Severity.WARNING
    species = SPECIES_II_III_V
    description = (
        "Upper-neighbor then lower-neighbor (or vice versa) around the same consonance is a "
        "pointless oscillation"
    )
    explanation = (
        "A double neighbor, stepping to both sides of a consonant note with dissonant "
        "neighbors, creates a pointless oscillation. Choose one neighbor direction or use "
        "other melodic motion."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        out = []
        for i in range(len(cp) - 4):
            a, b, c, d, e = cp[i:i + 5]
            if not a.midi_number == c.midi_number == e.midi_number:
                continue
            if b.midi_number == d.midi_number:
                continue
            if (b.midi_number > a.midi_number) == (d.midi_number > c.midi_number):
                continue
            ib, id_ = against_cf(cf, b), against_cf(cf, d)
            if ib is None or id_ is None:
                continue
            if ib[1].is_consonant or id_[1].is_consonant:
                continue
            out.append(self.violation(
                f"Double-neighbor figure around {a.name} at measure {a.measure_index + 1}",
                b.measure_index, b.beat_position, [a, b, c, d, e],
            ))
        return out


ALL_SPACING_RULES = [
    NoVoiceCrossing,
    NoConsecutiveUnisons,
    SpacingNotTooWide,
    NoCrossingThroughOffbeatUnison,
    AvoidSimilarMotionToPerfect,
    AvoidConsecutiveSamePerfects,
    NoDoubleNeighbor,
]
