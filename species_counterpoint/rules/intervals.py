"""Interval rules: vertical consonance, opening and closing intervals."""

from __future__ import annotations

from typing import List

from ..music_theory import IntervalQuality, interval
from .base import ALL, SPECIES_II_III_V, SPECIES_II_TO_V, Category, RuleContext, SpeciesRule, Violation, species_set
from .helpers import against_cf, downbeat_note, is_tied_pair, note_at_measure, notes_at_measure, vertical_interval

_P = IntervalQuality.PERFECT


class _IntervalRule(SpeciesRule):
    category = Category.INTERVALS


def _is_unison_or_octave(iv) -> bool:
    return iv.is_exactly(1, _P) or iv.is_exactly(8, _P)


# ---------------------------------------------------------------------------
# Consonance
# ---------------------------------------------------------------------------


class Consonance(_IntervalRule):
    """First species: every vertical interval must be consonant."""

    rule_id = "species1-consonance"
    name = "All intervals must be consonant"
    species = species_set(1)
    description = "Every vertical interval must be consonant in first species"
    explanation = (
        "First species counterpoint uses only consonant intervals: unisons, thirds, "
        "fifths, sixths, and octaves. Avoid seconds, fourths, sevenths, and tritones."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        out = []
        for cp_note in cp:
            m = cp_note.measure_index
            iv = vertical_interval(cf, cp, m)
            if iv is None or iv.is_consonant:
                continue
            out.append(self.violation(
                f"Dissonant {iv.describe()} at measure {m + 1}",
                m,
                notes=[note_at_measure(cf, m), note_at_measure(cp, m)],
            ))
        return out


# ---------------------------------------------------------------------------
# FirstInterval / LastInterval (first species)
# ---------------------------------------------------------------------------


class FirstInterval(_IntervalRule):
    rule_id = "species1-first-interval"
    name = "First interval must be unison or octave"
    species = species_set(1)
    description = "Opening interval must be P1 or P8"
    explanation = (
        "Fux requires first species counterpoint to begin on the tonic, forming a "
        "perfect consonance (unison or octave) with the cantus firmus."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if not cp or not cf:
            return []
        iv = vertical_interval(cf, cp, 0)
        if iv is None or _is_unison_or_octave(iv):
            return []
        return [self.violation(
            "First note must form a unison or octave with cantus firmus",
            0,
            notes=[cf[0], cp[0]],
        )]


class LastInterval(_IntervalRule):
    rule_id = "species1-last-interval"
    name = "Final interval must be unison or octave"
    species = species_set(1)
    description = "Closing interval must be P1 or P8"
    explanation = (
        "Counterpoint must end on the tonic for harmonic closure, forming a perfect "
        "consonance with the cantus firmus."
    )
    message = "Final note must form a unison or octave with cantus firmus"

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if not cp or not cf:
            return []
        last_cf = cf[-1]
        iv = vertical_interval(cf, cp, last_cf.measure_index)
        if iv is None or _is_unison_or_octave(iv):
            return []
        return [self.violation(self.message, last_cf.measure_index, notes=[last_cf, cp[-1]])]


# ---------------------------------------------------------------------------
# DownbeatConsonance
# ---------------------------------------------------------------------------


class DownbeatConsonance(_IntervalRule):
    rule_id = "s2s3s5-downbeat-consonance"
    name = "Downbeat must be consonant"
    species = SPECIES_II_III_V
    description = "The downbeat (beat 0) of every measure must be consonant with the cantus firmus"
    explanation = (
        "In Species II, III, and V the strong beat (downbeat) must always be consonant. "
        "Off-beat dissonances are allowed only if properly treated as passing tones or neighbors."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for cf_note in context.cantus_firmus:
            m = cf_note.measure_index
            cp_note = downbeat_note(context.counterpoint, m)
            if cp_note is None:
                continue
            iv = interval(cf_note, cp_note)
            if not iv.is_consonant:
                out.append(self.violation(
                    f"Dissonant {iv.describe()} on downbeat of measure {m + 1}",
                    m, 0, [cf_note, cp_note],
                ))
        return out


# ---------------------------------------------------------------------------
# Vertical tritone / augmented-diminished
# ---------------------------------------------------------------------------


class NoHarmonicTritone(_IntervalRule):
    rule_id = "all-no-tritone-harmonic"
    name = "No vertical tritone"
    species = ALL
    description = "A tritone (augmented 4th / diminished 5th) must never appear as a vertical interval"
    explanation = (
        "The tritone is the most dissonant interval in strict counterpoint and is never "
        "permitted as a vertical sonority in any species."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for note in context.counterpoint:
            found = against_cf(context.cantus_firmus, note)
            if found is None:
                continue
            cf_note, iv = found
            if iv.is_tritone:
                out.append(self.violation(
                    f"Tritone ({iv.describe()}) at measure {note.measure_index + 1}, "
                    f"beat {note.beat_position + 1}",
                    note.measure_index, note.beat_position, [cf_note, note],
                ))
        return out


class NoAugmentedOrDiminished(_IntervalRule):
    rule_id = "all-no-augmented-diminished-intervals"
    name = "No augmented or diminished intervals"
    species = ALL
    description = "Augmented and diminished vertical intervals are forbidden"
    explanation = (
        "Strict counterpoint permits only perfect, major, and minor intervals. Augmented and "
        "diminished intervals create instability that is not permitted in the Fux tradition."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        out = []
        for note in context.counterpoint:
            found = against_cf(context.cantus_firmus, note)
            if found is None:
                continue
            cf_note, iv = found
            if iv.quality in (IntervalQuality.AUGMENTED, IntervalQuality.DIMINISHED):
                out.append(self.violation(
                    f"{iv.describe().capitalize()} at measure {note.measure_index + 1}, "
                    f"beat {note.beat_position + 1}",
                    note.measure_index, note.beat_position, [cf_note, note],
                ))
        return out


# ---------------------------------------------------------------------------
# PenultimateBarConsonance
# ---------------------------------------------------------------------------


class PenultimateBarConsonance(_IntervalRule):
    rule_id = "s2s3s5-penultimate-bar-consonance"
    name = "All notes in penultimate measure must be consonant"
    species = SPECIES_II_III_V
    description = "Every note in the second-to-last measure must be consonant"
    explanation = (
        "The penultimate measure leads directly into the final cadence. All notes here "
        "must be consonant to prepare a clean resolution."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf = context.cantus_firmus
        if len(cf) < 2:
            return []
        cf_note = cf[-2]
        m = cf_note.measure_index
        out = []
        for note in notes_at_measure(context.counterpoint, m):
            iv = against_cf(cf, note)[1]
            if not iv.is_consonant:
                out.append(self.violation(
                    f"Dissonant {iv.describe()} in penultimate measure (measure {m + 1}), "
                    f"beat {note.beat_position + 1}",
                    m, note.beat_position, [cf_note, note],
                ))
        return out


# ---------------------------------------------------------------------------
# FourthSpeciesOffbeatConsonance
# ---------------------------------------------------------------------------


class FourthSpeciesOffbeatConsonance(_IntervalRule):
    """Off-beat notes that do not start a tie must be consonant."""

    rule_id = "s4-offbeat-consonance-required"
    name = "Non-suspension off-beat notes must be consonant"
    species = species_set(4)
    description = "In Fourth Species, off-beat notes that are not suspensions must be consonant"
    explanation = (
        "In Fourth Species, dissonance is only permitted as a suspension (a note tied over "
        "from a consonant preparation). Off-beat notes that are not suspensions must be consonant."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cp = context.counterpoint
        out = []
        for i, note in enumerate(cp):
            if note.beat_position == 0:
                continue
            # Preparation of a suspension: left to the suspension rules.
            if i + 1 < len(cp) and is_tied_pair(note, cp[i + 1], context.species):
                continue
            found = against_cf(context.cantus_firmus, note)
            if found is None:
                continue
            cf_note, iv = found
            if not iv.is_consonant:
                out.append(self.violation(
                    f"Dissonant off-beat note at measure {note.measure_index + 1}, "
                    f"beat {note.beat_position + 1} is not a suspension",
                    note.measure_index, note.beat_position, [cf_note, note],
                ))
        return out


# ---------------------------------------------------------------------------
# Opening / closing intervals for species II-V
# ---------------------------------------------------------------------------


class FirstIntervalExpanded(_IntervalRule):
    rule_id = "all-first-interval-expanded"
    name = "Opening interval must be a perfect consonance"
    species = SPECIES_II_TO_V
    description = "The opening interval in Species II-V must be P1, P5, or P8"
    explanation = (
        "Species II-V may begin on a perfect fifth in addition to the unison or octave "
        "allowed in first species. Any other opening interval is forbidden."
    )

    def check(self, context: RuleContext) -> List[Violation]:
        cf, cp = context.cantus_firmus, context.counterpoint
        if not cp or not cf:
            return []
        iv = vertical_interval(cf, cp, 0)
        if iv is None or _is_unison_or_octave(iv) or iv.is_exactly(5, _P):
            return []
        return [self.violation(
            "Opening interval must be a unison, fifth, or octave",
            0,
            notes=[cf[0], cp[0]],
        )]


class LastIntervalExpanded(LastInterval):
    rule_id = "all-last-interval-expanded"
    species = SPECIES_II_TO_V
    description = "The closing interval in Species II-V must be P1 or P8"
    explanation = (
        "The final cadence must close on a perfect consonance of unison or octave "
        "for harmonic closure."
    )
    message = "Final note must form a unison or octave with the cantus firmus"


ALL_INTERVAL_RULES = [
    Consonance,
    FirstInterval,
    LastInterval,
    DownbeatConsonance,
    NoHarmonicTritone,
    NoAugmentedOrDiminished,
    PenultimateBarConsonance,
    FourthSpeciesOffbeatConsonance,
    FirstIntervalExpanded,
    LastIntervalExpanded,
]
