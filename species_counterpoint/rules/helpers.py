"""Sequence, scale, and dissonance-shape helpers shared by the rule modules."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..model import Key, Note
from ..music_theory import Interval, interval
from ..species import Species

# Largest melodic move (in semitones) that still counts as a step.
STEP = 2

# ---------------------------------------------------------------------------
# Sequence helpers
# ---------------------------------------------------------------------------


def sign(n: int) -> int:
    return (n > 0) - (n < 0)


def sorted_notes(notes: Sequence[Note]) -> List[Note]:
    """Notes ordered by (measure, beat)."""
    return sorted(notes, key=lambda n: (n.measure_index, n.beat_position))


def consecutive_pairs(notes: Sequence[Note]) -> List[Tuple[Note, Note]]:
    """All (prev, curr) pairs in time order, across barlines."""
    ordered = sorted_notes(notes)
    return list(zip(ordered, ordered[1:]))


def notes_at_measure(notes: Sequence[Note], measure_index: int) -> List[Note]:
    return sorted(
        (n for n in notes if n.measure_index == measure_index),
        key=lambda n: n.beat_position,
    )


def note_at_measure(notes: Sequence[Note], measure_index: int) -> Optional[Note]:
    """First note found in a measure (the sounding cantus firmus note)."""
    for n in notes:
        if n.measure_index == measure_index:
            return n
    return None


def note_at_beat(notes: Sequence[Note], measure_index: int, beat_position: int) -> Optional[Note]:
    for n in notes:
        if n.measure_index == measure_index and n.beat_position == beat_position:
            return n
    return None


def downbeat_note(notes: Sequence[Note], measure_index: int) -> Optional[Note]:
    return note_at_beat(notes, measure_index, 0)


def index_by_measure(notes: Sequence[Note]) -> Dict[int, Note]:
    """Map measure -> first note in that measure."""
    out: Dict[int, Note] = {}
    for n in notes:
        out.setdefault(n.measure_index, n)
    return out


def vertical_interval(cf: Sequence[Note], cp: Sequence[Note], measure_index: int) -> Optional[Interval]:
    """Interval between the first notes of both voices in a measure."""
    cf_note = note_at_measure(cf, measure_index)
    cp_note = note_at_measure(cp, measure_index)
    if cf_note is None or cp_note is None:
        return None
    return interval(cf_note, cp_note)


def against_cf(cf: Sequence[Note], note: Note) -> Optional[Tuple[Note, Interval]]:
    """The cantus firmus note under ``note`` and the interval they form."""
    cf_note = note_at_measure(cf, note.measure_index)
    if cf_note is None:
        return None
    return cf_note, interval(cf_note, note)


# ---------------------------------------------------------------------------
# Scale helpers
# ---------------------------------------------------------------------------


def is_step(a: Note, b: Note) -> bool:
    """One diatonic step up or down (1-2 semitones); a repeated pitch is not a step."""
    return 0 < abs(b.midi_number - a.midi_number) <= STEP


def is_leap(a: Note, b: Note) -> bool:
    return abs(b.midi_number - a.midi_number) > STEP


def direction(a: Note, b: Note) -> int:
    return sign(b.midi_number - a.midi_number)


def leading_tone_degree(key: Key) -> int:
    """Always 7; minor keys additionally need the raised form."""
    return 7


def is_tied_pair(a: Note, b: Note, species: Species) -> bool:
    """Fourth species tie: off-beat note held over the barline at the same pitch."""
    if species != Species.FOURTH:
        return False
    return (
        a.beat_position == 1
        and b.beat_position == 0
        and b.measure_index == a.measure_index + 1
        and a.midi_number == b.midi_number
    )


def _consonant_against(cf: Sequence[Note], note: Note) -> bool:
    found = against_cf(cf, note)
    return found is not None and found[1].is_consonant


# ---------------------------------------------------------------------------
# Dissonance shapes: each inspects notes[i] within a time-ordered voice
# ---------------------------------------------------------------------------


def is_passing_tone(notes: Sequence[Note], i: int, cf: Sequence[Note]) -> bool:
    """Step in, step out, same direction, consonant on both sides."""
    if i == 0 or i >= len(notes) - 1:
        return False
    prev, curr, nxt = notes[i - 1], notes[i], notes[i + 1]
    d1, d2 = direction(prev, curr), direction(curr, nxt)
    if d1 == 0 or d1 != d2:
        return False
    if not is_step(prev, curr) or not is_step(curr, nxt):
        return False
    return _consonant_against(cf, prev) and _consonant_against(cf, nxt)


def is_neighbor_tone(notes: Sequence[Note], i: int, cf: Sequence[Note]) -> bool:
    """Step away from a consonance and straight back to the same pitch."""
    if i == 0 or i >= len(notes) - 1:
        return False
    prev, curr, nxt = notes[i - 1], notes[i], notes[i + 1]
    if not is_step(prev, curr) or not is_step(curr, nxt):
        return False
    if prev.midi_number != nxt.midi_number:
        return False
    return _consonant_against(cf, prev)


def is_cambiata_escape(notes: Sequence[Note], i: int, cf: Sequence[Note]) -> bool:
    """Step down into the dissonance, leap down a third, step back up."""
    if i == 0 or i + 2 >= len(notes):
        return False
    prev, curr, nxt, after = notes[i - 1], notes[i], notes[i + 1], notes[i + 2]
    if direction(prev, curr) >= 0 or not is_step(prev, curr):
        return False
    if not 3 <= curr.midi_number - nxt.midi_number <= 4:
        return False
    if direction(nxt, after) <= 0 or not is_step(nxt, after):
        return False
    return _consonant_against(cf, nxt)


def is_suspension(notes: Sequence[Note], i: int, cf: Sequence[Note]) -> bool:
    """Held from a consonant preparation, resolving down by step to a consonance."""
    if i == 0 or i >= len(notes) - 1:
        return False
    prep, susp, res = notes[i - 1], notes[i], notes[i + 1]
    if prep.midi_number != susp.midi_number:
        return False
    if not _consonant_against(cf, prep):
        return False
    if susp.midi_number - res.midi_number < 1 or not is_step(susp, res):
        return False
    return _consonant_against(cf, res)


def is_legal_dissonance(notes: Sequence[Note], i: int, cf: Sequence[Note]) -> bool:
    return (
        is_passing_tone(notes, i, cf)
        or is_neighbor_tone(notes, i, cf)
        or is_cambiata_escape(notes, i, cf)
        or is_suspension(notes, i, cf)
    )
