"""Cadence rules: leading tone, final tonic, clean final measure."""

from __future__ import annotations

from typing import List

from ..model import Accidental, Note, Pitch
from .base import ALL, SPECIES_II_III_V, Category, RuleContext, Severity, SpeciesRule, Violation, species_set
from .helpers import (against_cf, downbeat_note, is_leap, is_step, is_tied_pair, leading_tone_degree,
                      note_at_beat, notes_at_measure)


class _CadenceRule(SpeciesRule):
    category = Category.CADENCE


def _is_raised_leading_tone(note: Note, tonic: str) -> bool:
    """Sharpened, or a natural that sits a semitone under the tonic (e.g. E in F minor)."""
    if note.accidental == Accidental.SHARP:
        return True
    tonic_pc = Pitch.parse(f"{tonic}4").midi % 12
    return note.midi_number % 12 == (tonic_pc - 1) % 12


# ---------------------------------------------------------------------------
# PenultimateLeadingTone
# ---------------------------------------------------------------------------


class PenultimateLeadingTone(_CadenceRule):
    rule_id = "all-penultimate-leading-tone"
    name = "Penultimate note must be the leading tone"
    species = ALL
    description = "The penultimate counterpoint note must be scale degree 7 (raised in minor keys)"
    explanation = (
        "The leading tone (scale degree 7) creates a strong pull to the tonic. In minor keys, "
        "use the raised 7th (harmonic minor) for a proper cadence."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if len(cp) < 2:
            return []
        penult, final = cp[-2], cp[-1]
        expected = leading_tone_degree(context.key)
        if penult.scale_degree != expected:
            return [self.violation(
                f"Penultimate note is scale degree {penult.scale_degree}, "
                f"expected {expected} (leading tone)",
                penult.measure_index, penult.beat_position, [penult, final],
            )]
        if context.key.is_minor and not _is_raised_leading_tone(penult, context.key.tonic):
            return [self.violation(
                "Leading tone in minor must be raised (sharp), use harmonic minor",
                penult.measure_index, penult.beat_position, [penult],
            )]
        return []


class LeadingToneApproach(_CadenceRule):
    rule_id = "all-penultimate-approaches-by-step"
    name = "Leading tone should be approached by step"
    severity = Severity.WARNING
    species = ALL
    description = "The leading tone should be approached by step, not by leap"
    explanation = (
        "Approaching the leading tone by step creates smoother voice leading into the "
        "cadence. A leap to the leading tone can sound abrupt."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if len(cp) < 3:
            return []
        before, penult = cp[-3], cp[-2]
        if penult.scale_degree != leading_tone_degree(context.key) or not is_leap(before, penult):
            return []
        return [self.violation(
            "Leading tone is approached by leap",
            penult.measure_index, penult.beat_position, [before, penult],
        )]


# ---------------------------------------------------------------------------
# CadentialSuspension (fourth species)
# ---------------------------------------------------------------------------


class CadentialSuspension(_CadenceRule):
    """Tie into the penultimate measure, leading tone, step up to the final.

    The tied note is either the leading tone itself or resolves down by step
    onto it within the penultimate measure.
    """

    rule_id = "s4-cadential-suspension"
    name = "Fourth Species cadence should use a 7-8 suspension"
    severity = Severity.WARNING
    species = species_set(4)
    description = "The penultimate measure in Fourth Species should contain a 7-8 suspension resolving to the tonic"
    explanation = (
        "The classic Fourth Species cadence ties a note over the barline into the "
        "penultimate measure. It is either the leading tone itself or resolves down by step "
        "onto the leading tone, which then rises by step to the final."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if len(cp) < 3 or len(cf) < 2:
            return []
        before, penult, final = cp[-3], cp[-2], cp[-1]
        m = cf[-2].measure_index
        prep = note_at_beat(cp, m - 1, 1)
        susp = downbeat_note(cp, m)
        tied = prep is not None and susp is not None and is_tied_pair(prep, susp, context.species)
        if (
            tied
            and penult.scale_degree == leading_tone_degree(context.key)
            and (penult is susp or (penult.midi_number < susp.midi_number and is_step(susp, penult)))
            and final.midi_number > penult.midi_number
            and is_step(penult, final)
        ):
            return []
        return [self.violation(
            "Cadence does not use the recommended 7-8 suspension pattern",
            penult.measure_index, penult.beat_position, [before, penult, final],
        )]


# ---------------------------------------------------------------------------
# FinalNoteTonic
# ---------------------------------------------------------------------------


class FinalNoteTonic(_CadenceRule):
    rule_id = "all-final-note-is-tonic"
    name = "Final note must be the tonic"
    species = ALL
    description = "The last counterpoint note must be scale degree 1"
    explanation = "Counterpoint must close on the tonic to establish the key at the cadence."

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        if not cp:
            return []
        final = cp[-1]
        if final.scale_degree == 1:
            return []
        return [self.violation(
            f"Final note is scale degree {final.scale_degree}, expected 1 (tonic)",
            final.measure_index, final.beat_position, [final],
        )]


class FinalMeasureConsonant(_CadenceRule):
    rule_id = "s2s3s5-cadence-no-offbeat-dissonance"
    name = "Final measure must be entirely consonant"
    species = SPECIES_II_III_V
    description = "No dissonances are allowed in the final measure, including off-beat"
    explanation = (
        "The final measure is the point of complete rest. Every note sounding against the "
        "last cantus firmus note must be consonant."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf = context.cantus_firmus
        if not cf:
            return []
        last = cf[-1]
        out = []
        for note in notes_at_measure(context.counterpoint, last.measure_index):
            iv = against_cf(cf, note)[1]
            if not iv.is_consonant:
                out.append(self.violation(
                    f"Dissonance in final measure at beat {note.beat_position + 1}",
                    note.measure_index, note.beat_position, [last, note],
                ))
        return out


# ---------------------------------------------------------------------------
# ClimaxNotAtCadence
# ---------------------------------------------------------------------------


class ClimaxNotAtCadence(_CadenceRule):
    rule_id = "all-no-cadence-at-climax"
    name = "Climax should not be in the last two measures"
    severity = Severity.WARNING
    species = ALL
    description = "The melodic high point should come before the cadential approach"
    explanation = (
        "Placing the climax in the last two measures competes with the cadence. Reach the "
        "high point earlier and let the line descend into the final."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if len(cp) < 3 or len(cf) < 3:
            return []
        climax = cp[0]
        for note in cp[1:]:
            if note.midi_number > climax.midi_number:
                climax = note
        if climax.measure_index < cf[-2].measure_index:
            return []
        return [self.violation(
            f"Melodic climax ({climax.name}) is in measure {climax.measure_index + 1}, "
            "too close to the cadence",
            climax.measure_index, climax.beat_position, [climax],
        )]


ALL_CADENCE_RULES = [
    PenultimateLeadingTone,
    LeadingToneApproach,
    CadentialSuspension,
    FinalNoteTonic,
    FinalMeasureConsonant,
    ClimaxNotAtCadence,
]
