"""Restart-based cantus firmus generator."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from ..model import Duration, Key, Note, make_note
from .constraints import CFConstraints
from .validator import MAX_LENGTH, MIN_LENGTH, cantus_firmus_problems

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 1000


class GenerationFailed(RuntimeError):
    """No acceptable melody was found within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__("Failed to generate valid Cantus Firmus after maximum attempts")
        self.attempts = attempts


class Clef(Enum):
    TREBLE = "treble"
    ALTO = "alto"
    TENOR = "tenor"
    BASS = "bass"

    @property
    def tonic_octave(self) -> int:
        return _CLEF_OCTAVES[self]


_CLEF_OCTAVES = {
    Clef.TREBLE: 5,
    Clef.ALTO: 4,
    Clef.TENOR: 4,
    Clef.BASS: 3,
}


@dataclass(frozen=True)
class CFConfig:
    key: Key
    length: int = 8
    clef: Clef = Clef.TREBLE

    def __post_init__(self):
        if not MIN_LENGTH <= self.length <= MAX_LENGTH:
            raise ValueError(f"length must be {MIN_LENGTH}-{MAX_LENGTH}, got {self.length}")
        object.__setattr__(self, "clef", Clef(self.clef))


def _step_weight(size: int) -> float:
    if size <= 2:
        return 0.6
    if size <= 4:
        return 0.3
    return 0.1


class CantusFirmusGenerator:
    """Builds a melody note by note, restarting from scratch on any dead end.

    ``rng`` only needs a ``random()`` method returning floats in [0, 1);
    pass ``random.Random(seed)`` for reproducible output.
    """

    def __init__(self, config: CFConfig, rng=None, max_attempts: int = MAX_ATTEMPTS):
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.max_attempts = max_attempts
        self.constraints = CFConstraints(config.key, config.length)
        self.attempts = 0

    @property
    def tonic_pitch(self) -> str:
        return f"{self.config.key.tonic}{self.config.clef.tonic_octave}"

    def generate(self) -> List[Note]:
        self.attempts = 0
        while self.attempts < self.max_attempts:
            self.attempts += 1
            melody = self._attempt()
            if melody is None:
                continue
            problems = cantus_firmus_problems(melody)
            if problems:
                logger.debug("attempt %d rejected: %s", self.attempts, "; ".join(problems))
                continue
            logger.info(
                "generated %d-note cantus firmus in %s after %d attempts",
                len(melody), self.config.key, self.attempts,
            )
            return melody
        logger.warning("gave up after %d attempts (%s, length %d)",
                       self.attempts, self.config.key, self.config.length)
        raise GenerationFailed(self.attempts)

    def _attempt(self) -> Optional[List[Note]]:
        length = self.config.length
        notes = [make_note(self.tonic_pitch, Duration.WHOLE, 0, 0, degree=1)]

        for position in range(1, length - 1):
            options = self.constraints.candidates(notes, position)
            if not options:
                logger.debug("attempt %d: no candidate at position %d", self.attempts, position)
                return None
            notes.append(self._pick(options, notes[-1]))

        final = make_note(self.tonic_pitch, Duration.WHOLE, length - 1, 0, degree=1)
        # Stepwise approach only; a unison cadence is rejected.
        if not 1 <= abs(final.midi_number - notes[-1].midi_number) <= 2:
            logger.debug("attempt %d: no stepwise cadence from %s", self.attempts, notes[-1].name)
            return None
        notes.append(final)

        if not _single_interior_climax(notes):
            logger.debug("attempt %d: climax not unique or not interior", self.attempts)
            return None
        return notes

    def _pick(self, options: Sequence[Note], last: Note) -> Note:
        """Weighted random choice favouring steps over leaps."""
        weights = [_step_weight(abs(n.midi_number - last.midi_number)) for n in options]
        r = self.rng.random() * sum(weights)
        for note, w in zip(options, weights):
            r -= w
            if r <= 0:
                return note
        return options[-1]


def _single_interior_climax(notes: Sequence[Note]) -> bool:
    top = max(n.midi_number for n in notes)
    peaks = [i for i, n in enumerate(notes) if n.midi_number == top]
    return len(peaks) == 1 and 0 < peaks[0] < len(notes) - 1


def generate_cantus_firmus(
    key: Key,
    length: int = 8,
    clef: "Clef | str" = Clef.TREBLE,
    rng=None,
    max_attempts: int = MAX_ATTEMPTS,
) -> List[Note]:
    """Convenience wrapper: build a generator and run it once."""
    return CantusFirmusGenerator(CFConfig(key, length, Clef(clef)), rng, max_attempts).generate()
