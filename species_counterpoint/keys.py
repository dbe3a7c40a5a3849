"""Key signature table and scale spelling."""

from __future__ import annotations

from typing import Dict, List

from .model import LETTER_SEMITONES, LETTERS, Accidental, Key, Mode, Pitch, midi_to_pitch

SHARP_ORDER = ["F", "C", "G", "D", "A", "E", "B"]
FLAT_ORDER = ["B", "E", "A", "D", "G", "C", "F"]


class UnknownKey(KeyError):
    """Key name not present in the signature table."""


def _major(tonic: str, signature: int) -> Key:
    return Key(tonic, Mode.MAJOR, signature)


def _minor(tonic: str, signature: int) -> Key:
    return Key(tonic, Mode.MINOR, signature)


KEY_SIGNATURES: Dict[str, Key] = {
    k.name: k
    for k in [
        _major("C", 0),
        _major("G", 1),
        _major("D", 2),
        _major("A", 3),
        _major("E", 4),
        _major("B", 5),
        _major("F#", 6),
        _major("C#", 7),
        _major("F", -1),
        _major("Bb", -2),
        _major("Eb", -3),
        _major("Ab", -4),
        _major("Db", -5),
        _major("Gb", -6),
        _minor("A", 0),
        _minor("E", 1),
        _minor("B", 2),
        _minor("F#", 3),
        _minor("C#", 4),
        _minor("G#", 5),
        _minor("D#", 6),
        _minor("A#", 7),
        _minor("D", -1),
        _minor("G", -2),
        _minor("C", -3),
        _minor("F", -4),
        _minor("Bb", -5),
        _minor("Eb", -6),
    ]
}


def parse_key(name: str) -> Key:
    """Look up a key by name, e.g. ``"D minor"``."""
    try:
        return KEY_SIGNATURES[name]
    except KeyError:
        raise UnknownKey(name) from None


def find_key(tonic: str, mode: str) -> Key:
    return parse_key(f"{tonic} {mode}")


def all_key_names() -> List[str]:
    return list(KEY_SIGNATURES)


def scale_letters(key: Key) -> List[str]:
    """The seven letters of the scale, starting on the tonic letter."""
    start = LETTERS.index(key.tonic_letter)
    return LETTERS[start:] + LETTERS[:start]


def signature_accidental(letter: str, key: Key) -> "Accidental | None":
    """Accidental the key signature applies to ``letter``."""
    if key.signature > 0 and letter in SHARP_ORDER[:key.signature]:
        return Accidental.SHARP
    if key.signature < 0 and letter in FLAT_ORDER[:-key.signature]:
        return Accidental.FLAT
    return None


def scale_pitch_classes(key: Key) -> List[str]:
    """Scale note names with the signature applied, e.g. ``['D', 'E', 'F', ...]``."""
    names = []
    for letter in scale_letters(key):
        acc = signature_accidental(letter, key)
        names.append(letter + (acc.symbol if acc else ""))
    return names


_RAISED = {
    None: Accidental.SHARP,
    Accidental.FLAT: None,
    Accidental.SHARP: Accidental.DOUBLE_SHARP,
}


def _spell_on(letter: str, acc: "Accidental | None", midi: int) -> str:
    offset = acc.semitones if acc else 0
    octave = (midi - LETTER_SEMITONES[letter] - offset) // 12 - 1
    return str(Pitch(letter, acc, octave))


def spell_midi(midi: int, key: Key) -> str:
    """Spell a MIDI number in ``key``.

    Scale notes take the signature's spelling (``B#3`` in C# major), the
    pitch a semitone under a minor tonic is the raised seventh (``C#`` in
    D minor, ``E`` in F minor), and other chromatic notes fall back to
    sharps or flats following the signature.
    """
    pc = midi % 12
    for letter in scale_letters(key):
        acc = signature_accidental(letter, key)
        if (LETTER_SEMITONES[letter] + (acc.semitones if acc else 0)) % 12 == pc:
            return _spell_on(letter, acc, midi)
    if key.is_minor:
        tonic_pc = Pitch.parse(f"{key.tonic}4").midi % 12
        if pc == (tonic_pc - 1) % 12:
            seventh = scale_letters(key)[6]
            return _spell_on(seventh, _RAISED[signature_accidental(seventh, key)], midi)
    return midi_to_pitch(midi, prefer_flats=key.signature < 0)
