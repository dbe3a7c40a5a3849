"""Dissonance treatment rules: passing and neighbor tones, cambiata, suspensions."""

from __future__ import annotations

from typing import Iterator, List, Tuple

from ..model import Note
from .base import Category, RuleContext, SpeciesRule, Violation, species_set
from .helpers import against_cf, direction, is_legal_dissonance, is_leap, is_step, is_tied_pair


class _DissonanceRule(SpeciesRule):
    category = Category.DISSONANCE


def _offbeat_dissonances(context: RuleContext) -> Iterator[Tuple[int, Note, Note, Note]]:
    """Yield (index, prev, note, next) for every interior off-beat dissonance."""
    cp = context.counterpoint
    for i in range(1, len(cp) - 1):
        note = cp[i]
        if note.beat_position == 0:
            continue
        found = against_cf(context.cantus_firmus, note)
        if found is None or found[1].is_consonant:
            continue
        yield i, cp[i - 1], note, cp[i + 1]


def _dissonant_suspensions(context: RuleContext) -> Iterator[Tuple[int, Note, Note]]:
    """Yield (index, preparation, suspension) for every dissonant tied downbeat."""
    cp = context.counterpoint
    for i in range(1, len(cp)):
        note = cp[i]
        if note.beat_position != 0:
            continue
        prev = cp[i - 1]
        if not is_tied_pair(prev, note, context.species):
            continue
        found = against_cf(context.cantus_firmus, note)
        if found is None or found[1].is_consonant:
            continue
        yield i, prev, note


# ---------------------------------------------------------------------------
# Passing tones (species II and III)
# ---------------------------------------------------------------------------


class _PassingTone(_DissonanceRule):
    explanation = (
        "A passing tone must be approached and left by step in the same direction, "
        "connecting two consonant notes. Check that the notes before and after move "
        "stepwise through the dissonance."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for _, prev, note, nxt in _offbeat_dissonances(context):
            d1, d2 = direction(prev, note), direction(note, nxt)
            if is_step(prev, note) and is_step(note, nxt) and d1 != 0 and d1 == d2:
                continue
            out.append(self.violation(
                f"Dissonance at measure {note.measure_index + 1}, beat {note.beat_position + 1} "
                "is not a valid passing tone",
                note.measure_index, note.beat_position, [prev, note, nxt],
            ))
        return out


class SecondSpeciesPassingTone(_PassingTone):
    rule_id = "s2-passing-tone"
    name = "Second Species: dissonances must be passing tones"
    species = species_set(2)
    description = "Every off-beat dissonance in Second Species must be a valid passing tone"


class ThirdSpeciesPassingTone(_PassingTone):
    rule_id = "s3-passing-tone"
    name = "Third Species: check passing-tone pattern"
    species = species_set(3)
    description = (
        "Off-beat dissonances in Third Species that are not neighbor tones or cambiatas "
        "must be valid passing tones"
    )


# ---------------------------------------------------------------------------
# ThirdSpeciesNeighborTone
# ---------------------------------------------------------------------------


class ThirdSpeciesNeighborTone(_DissonanceRule):
    """Stepwise approach and return that reverses direction must land on the same pitch."""

    rule_id = "s3-neighbor-tone"
    name = "Third Species: neighbor tone must return to consonance"
    species = species_set(3)
    description = "A neighbor tone steps away from a consonance and must step back to that same pitch"
    explanation = (
        "A neighbor tone steps one step away from a consonant note and must immediately "
        "return to that exact same pitch."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for _, prev, note, nxt in _offbeat_dissonances(context):
            if not is_step(prev, note) or not is_step(note, nxt):
                continue
            if direction(prev, note) == direction(note, nxt):
                continue
            if prev.midi_number != nxt.midi_number:
                out.append(self.violation(
                    f"Neighbor tone at measure {note.measure_index + 1}, beat "
                    f"{note.beat_position + 1} does not return to the same note",
                    note.measure_index, note.beat_position, [prev, note, nxt],
                ))
        return out


# ---------------------------------------------------------------------------
# ThirdSpeciesCambiata
# ---------------------------------------------------------------------------


class ThirdSpeciesCambiata(_DissonanceRule):
    """A dissonance left by leap must be a nota cambiata."""

    rule_id = "s3-cambiata-escape"
    name = "Third Species: cambiata escape pattern must be correct"
    species = species_set(3)
    description = (
        "A dissonance left by leap must follow the nota cambiata pattern: step down, "
        "leap down a third, step up"
    )
    explanation = (
        "The nota cambiata is the only situation where a dissonance may be left by leap. "
        "The pattern must be: step down to the dissonance, leap down a third to a "
        "consonance, then step back up."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for i, prev, note, nxt in _offbeat_dissonances(context):
            if not is_leap(note, nxt):
                continue
            leap = note.midi_number - nxt.midi_number
            valid_approach = is_step(prev, note) and direction(prev, note) < 0
            valid_leap = 3 <= leap <= 4
            recovers = (
                i + 2 < len(cp)
                and is_step(nxt, cp[i + 2])
                and direction(nxt, cp[i + 2]) > 0
            )
            if valid_approach and valid_leap and recovers:
                continue
            out.append(self.violation(
                f"Dissonance at measure {note.measure_index + 1}, beat {note.beat_position + 1} "
                "left by leap without valid cambiata pattern",
                note.measure_index, note.beat_position, [prev, note, nxt],
            ))
        return out


# ---------------------------------------------------------------------------
# Suspensions (species IV)
# ---------------------------------------------------------------------------


class SuspensionPreparation(_DissonanceRule):
    rule_id = "s4-suspension-preparation"
    name = "Suspension must be prepared"
    species = species_set(4)
    description = "A dissonant suspension must be prepared: the previous note must be the same pitch and consonant"
    explanation = (
        "A suspension must be prepared by a consonant note of the same pitch on the previous "
        'beat. The preparation establishes the note as "belonging" before it becomes dissonant.'
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for _, prep, susp in _dissonant_suspensions(context):
            found = against_cf(context.cantus_firmus, prep)
            if found is None or found[1].is_consonant:
                continue
            out.append(self.violation(
                f"Suspension at measure {susp.measure_index + 1} is not properly prepared "
                "(preparation is dissonant)",
                susp.measure_index, susp.beat_position, [prep, susp],
            ))
        return out


class SuspensionResolution(_DissonanceRule):
    rule_id = "s4-suspension-resolution"
    name = "Suspension must resolve to a consonance"
    species = species_set(4)
    description = "The note after a dissonant suspension must be consonant"
    explanation = (
        "After a dissonant suspension, the next note must be consonant. The suspension "
        "creates tension that must be released by resolving to a consonant interval."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for i, _, susp in _dissonant_suspensions(context):
            if i + 1 >= len(cp):
                continue
            res = cp[i + 1]
            found = against_cf(context.cantus_firmus, res)
            if found is None or found[1].is_consonant:
                continue
            out.append(self.violation(
                f"Suspension at measure {susp.measure_index + 1} resolves to a dissonance",
                susp.measure_index, susp.beat_position, [susp, res],
            ))
        return out


class SuspensionResolutionDirection(_DissonanceRule):
    rule_id = "s4-suspension-resolution-direction"
    name = "Suspension must resolve downward by step"
    species = species_set(4)
    description = "A dissonant suspension must resolve downward by step; upward resolution is forbidden"
    explanation = (
        "In strict counterpoint, suspensions must always resolve downward by step. Upward "
        "resolution or resolution by leap are not permitted."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for i, _, susp in _dissonant_suspensions(context):
            if i + 1 >= len(cp):
                continue
            res = cp[i + 1]
            if res.midi_number < susp.midi_number and is_step(susp, res):
                continue
            out.append(self.violation(
                f"Suspension at measure {susp.measure_index + 1} does not resolve downward by step",
                susp.measure_index, susp.beat_position, [susp, res],
            ))
        return out


# ---------------------------------------------------------------------------
# FifthSpeciesDissonanceTreatment
# ---------------------------------------------------------------------------


class FifthSpeciesDissonanceTreatment(_DissonanceRule):
    """Every dissonance must be a passing tone, neighbor, cambiata or suspension."""

    rule_id = "s5-all-dissonance-treatments"
    name = "Fifth Species: every dissonance must be legally treated"
    species = species_set(5)
    description = (
        "In Fifth Species every dissonant note must fit passing tone, neighbor tone, "
        "cambiata, or suspension pattern"
    )
    explanation = (
        "In Fifth Species, every dissonant note must be one of: a passing tone (stepwise "
        "through), a neighbor tone (step away and back), a cambiata escape (step down, leap "
        "down a third, step up), or a suspension (tied from a consonant preparation, "
        "resolving down by step)."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        out = []
        for i, note in enumerate(cp):
            found = against_cf(cf, note)
            if found is None or found[1].is_consonant:
                continue
            if is_legal_dissonance(cp, i, cf):
                continue
            out.append(self.violation(
                f"Dissonance at measure {note.measure_index + 1}, beat {note.beat_position + 1} "
                "has no valid treatment",
                note.measure_index, note.beat_position, [note],
            ))
        return out


ALL_DISSONANCE_RULES = [
    SecondSpeciesPassingTone,
    ThirdSpeciesPassingTone,
    ThirdSpeciesNeighborTone,
    ThirdSpeciesCambiata,
    SuspensionPreparation,
    SuspensionResolution,
    SuspensionResolutionDirection,
    FifthSpeciesDissonanceTreatment,
]
