"""Per-candidate filtering for cantus firmus generation."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..keys import scale_pitch_classes
from ..model import Duration, Key, Note, make_note, pitch_to_midi
from .validator import MAX_LEAP, TRITONE

# A leap at least this large must be followed by a step back.
LARGE_LEAP = 5
# Intervals from this size up count as leaps for the sequence rules.
LEAP = 3
STEP = 2
# Melody stays within an octave of its opening note.
MAX_SPAN = 12


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


class CFConstraints:
    """Enumerates the scale tones that may follow a partial melody.

    Candidates are the seven scale degrees in the octave of the last note and
    one octave either side.  In minor keys the raised leading tone is offered
    as well at the second-to-last position.
    """

    def __init__(self, key: Key, total_length: int):
        self.key = key
        self.total_length = total_length
        self.scale = scale_pitch_classes(key)

    def candidates(self, existing: Sequence[Note], position: int) -> List[Note]:
        last = existing[-1]
        out = []
        for degree in range(1, 8):
            for offset in (-1, 0, 1):
                pitch = f"{self.scale[degree - 1]}{last.pitch.octave + offset}"
                if self.is_valid(pitch_to_midi(pitch), existing):
                    out.append(make_note(pitch, Duration.WHOLE, position, 0, degree=degree))

        if self.key.is_minor and position == self.total_length - 2:
            raised = self.raised_seventh(existing)
            if raised is not None and self.is_valid(pitch_to_midi(raised), existing):
                out.append(make_note(raised, Duration.WHOLE, position, 0, degree=7))
        return out

    def is_valid(self, midi: int, existing: Sequence[Note]) -> bool:
        last = existing[-1]
        if midi == last.midi_number:
            return False
        if abs(midi - existing[0].midi_number) > MAX_SPAN:
            return False

        size = abs(midi - last.midi_number)
        if size > MAX_LEAP or size == TRITONE:
            return False

        if len(existing) >= 2:
            prev = existing[-2]
            prev_move = last.midi_number - prev.midi_number
            move = midi - last.midi_number

            if abs(prev_move) >= LARGE_LEAP:
                if abs(move) > STEP or _sign(move) == _sign(prev_move):
                    return False

            if abs(prev_move) >= LEAP and abs(move) >= LEAP and _sign(move) == _sign(prev_move):
                return False

            if len(existing) >= 3:
                before = abs(prev.midi_number - existing[-3].midi_number)
                if before >= LEAP and abs(prev_move) >= LEAP and abs(move) >= LEAP:
                    return False
        return True

    def raised_seventh(self, existing: Sequence[Note]) -> Optional[str]:
        """Spelling of the pitch a semitone below the opening tonic."""
        target = existing[0].midi_number - 1
        natural = self.scale[6]
        raised = natural[:-1] if natural.endswith("b") else natural + "#"
        for octave in range(1, 7):
            candidate = f"{raised}{octave}"
            if pitch_to_midi(candidate) == target:
                return candidate
        return None
