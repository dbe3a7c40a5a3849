"""Acceptance gate for a generated cantus firmus."""

from __future__ import annotations

from typing import List, Sequence

from ..model import Note

MIN_LENGTH = 4
MAX_LENGTH = 16

# Largest melodic interval allowed, a perfect fifth.
MAX_LEAP = 7
TRITONE = 6


def cantus_firmus_problems(notes: Sequence[Note]) -> List[str]:
    """Every reason the melody would be rejected; empty when it is acceptable."""
    problems = []
    if not MIN_LENGTH <= len(notes) <= MAX_LENGTH:
        problems.append(f"length {len(notes)} outside {MIN_LENGTH}-{MAX_LENGTH}")
        if not notes:
            return problems

    if notes[0].scale_degree != 1:
        problems.append("does not start on the tonic")
    if notes[-1].scale_degree != 1:
        problems.append("does not end on the tonic")

    top = max(n.midi_number for n in notes)
    peaks = [i for i, n in enumerate(notes) if n.midi_number == top]
    if len(peaks) != 1:
        problems.append(f"climax occurs {len(peaks)} times")
    elif peaks[0] in (0, len(notes) - 1):
        problems.append("climax is not in the interior")

    for i in range(1, len(notes)):
        size = abs(notes[i].midi_number - notes[i - 1].midi_number)
        where = f"measure {i + 1}"
        if size == 0:
            problems.append(f"repeated note at {where}")
        elif size > MAX_LEAP:
            problems.append(f"leap of {size} semitones at {where}")
        elif size == TRITONE:
            problems.append(f"melodic tritone at {where}")
    return problems


def validate_cantus_firmus(notes: Sequence[Note]) -> bool:
    """True when the melody passes the acceptance gate."""
    return not cantus_firmus_problems(notes)
