"""Core data model: pitches, notes and keys.

Pitches use scientific pitch notation (``C4`` = MIDI 60).  Notes are
immutable; editing a voice means building a new tuple of notes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# ---------------------------------------------------------------------------
# Pitch constants
# ---------------------------------------------------------------------------

LETTERS = ["C", "D", "E", "F", "G", "A", "B"]

LETTER_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

SHARP_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

PITCH_RE = re.compile(r"^([A-G])(#{1,2}|b{1,2})?(-?\d+)$")


class InvalidPitchFormat(ValueError):
    """A pitch string could not be decoded into letter/accidental/octave."""

    def __init__(self, text: str):
        super().__init__(f"Invalid pitch format: {text!r}")
        self.text = text


class Accidental(Enum):
    """Accidental attached to a pitch letter."""
    SHARP = "sharp"
    FLAT = "flat"
    DOUBLE_SHARP = "double-sharp"
    DOUBLE_FLAT = "double-flat"

    @property
    def semitones(self) -> int:
        return _ACCIDENTAL_SEMITONES[self]

    @property
    def symbol(self) -> str:
        return _ACCIDENTAL_SYMBOLS[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> Optional["Accidental"]:
        if not symbol:
            return None
        for acc, sym in _ACCIDENTAL_SYMBOLS.items():
            if sym == symbol:
                return acc
        raise ValueError(f"Unknown accidental symbol: {symbol!r}")


_ACCIDENTAL_SEMITONES = {
    Accidental.SHARP: 1,
    Accidental.FLAT: -1,
    Accidental.DOUBLE_SHARP: 2,
    Accidental.DOUBLE_FLAT: -2,
}

_ACCIDENTAL_SYMBOLS = {
    Accidental.SHARP: "#",
    Accidental.FLAT: "b",
    Accidental.DOUBLE_SHARP: "##",
    Accidental.DOUBLE_FLAT: "bb",
}


class Duration(Enum):
    """Note value, encoded as the reciprocal of its length in whole notes."""
    WHOLE = "1"
    HALF = "2"
    QUARTER = "4"
    EIGHTH = "8"
    SIXTEENTH = "16"


class Mode(Enum):
    MAJOR = "major"
    MINOR = "minor"


# ---------------------------------------------------------------------------
# Pitch
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pitch:
    """A spelled pitch: letter, optional accidental, octave."""
    letter: str
    accidental: Optional[Accidental] = None
    octave: int = 4

    @classmethod
    def parse(cls, text: str) -> "Pitch":
        """Parse ``'F#5'``, ``'Bb3'``, ``'C-1'``.  Raises InvalidPitchFormat."""
        m = PITCH_RE.match(text) if isinstance(text, str) else None
        if m is None:
            raise InvalidPitchFormat(str(text))
        letter, acc, octave = m.groups()
        return cls(letter, Accidental.from_symbol(acc or ""), int(octave))

    @property
    def midi(self) -> int:
        offset = self.accidental.semitones if self.accidental else 0
        return (self.octave + 1) * 12 + LETTER_SEMITONES[self.letter] + offset

    @property
    def diatonic_index(self) -> int:
        """Position on the staff counted in letter steps from C-1."""
        return (self.octave + 1) * 7 + LETTERS.index(self.letter)

    def __str__(self) -> str:
        acc = self.accidental.symbol if self.accidental else ""
        return f"{self.letter}{acc}{self.octave}"


class ParseErrorKind(Enum):
    INVALID_PITCH_FORMAT = "invalid_pitch_format"


@dataclass(frozen=True)
class ParseResult:
    """Outcome of :func:`parse_pitch`: either a value or an error kind."""
    value: Optional[Pitch] = None
    error: Optional[ParseErrorKind] = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Pitch:
        if self.value is None:
            raise InvalidPitchFormat(self.text)
        return self.value


def parse_pitch(text: str) -> ParseResult:
    """Parse a pitch string without raising."""
    try:
        return ParseResult(value=Pitch.parse(text), text=text)
    except InvalidPitchFormat:
        return ParseResult(error=ParseErrorKind.INVALID_PITCH_FORMAT, text=str(text))


def pitch_to_midi(text: str) -> int:
    """MIDI number of a pitch string (C4 = 60)."""
    return Pitch.parse(text).midi


def midi_to_pitch(midi: int, prefer_flats: bool = False) -> str:
    """Spell a MIDI number; sharps by default."""
    names = FLAT_NAMES if prefer_flats else SHARP_NAMES
    return f"{names[midi % 12]}{midi // 12 - 1}"


# ---------------------------------------------------------------------------
# Key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Key:
    """Tonic (letter plus accidental), mode, and signed signature count."""
    tonic: str
    mode: Mode
    signature: int = 0

    @property
    def name(self) -> str:
        return f"{self.tonic} {self.mode.value}"

    @property
    def tonic_letter(self) -> str:
        return self.tonic[0]

    @property
    def is_minor(self) -> bool:
        return self.mode == Mode.MINOR

    def __str__(self) -> str:
        return self.name


def scale_degree(pitch: Pitch, key: Key) -> int:
    """Diatonic degree (1-7) of a pitch letter relative to the key's tonic."""
    return (LETTERS.index(pitch.letter) - LETTERS.index(key.tonic_letter)) % 7 + 1


# ---------------------------------------------------------------------------
# Note
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Note:
    """A single note of one voice.

    ``beat_position`` is the slot index inside the measure on the species
    grid (see :func:`species_counterpoint.species.beat_slots`).
    """
    pitch: Pitch
    duration: Duration = Duration.WHOLE
    measure_index: int = 0
    beat_position: int = 0
    scale_degree: int = 1

    @property
    def midi_number(self) -> int:
        return self.pitch.midi

    @property
    def accidental(self) -> Optional[Accidental]:
        return self.pitch.accidental

    @property
    def name(self) -> str:
        return str(self.pitch)

    def to_dict(self) -> dict:
        d = {
            "pitch": self.name,
            "midi": self.midi_number,
            "duration": self.duration.value,
            "measure": self.measure_index,
            "beat": self.beat_position,
            "scale_degree": self.scale_degree,
        }
        if self.accidental is not None:
            d["accidental"] = self.accidental.value
        return d


def make_note(
    pitch: "str | Pitch",
    duration: "str | Duration" = Duration.WHOLE,
    measure_index: int = 0,
    beat_position: int = 0,
    key: Optional[Key] = None,
    degree: Optional[int] = None,
) -> Note:
    """Build a Note from a pitch string.

    The scale degree is taken from ``degree`` when given, otherwise derived
    from ``key``; with neither it defaults to 1.
    """
    p = pitch if isinstance(pitch, Pitch) else Pitch.parse(pitch)
    dur = duration if isinstance(duration, Duration) else Duration(duration)
    if degree is None:
        degree = scale_degree(p, key) if key is not None else 1
    return Note(
        pitch=p,
        duration=dur,
        measure_index=measure_index,
        beat_position=beat_position,
        scale_degree=degree,
    )
