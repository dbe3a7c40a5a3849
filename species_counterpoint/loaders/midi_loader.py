"""Load an exercise from a two-channel standard MIDI file using mido."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..keys import UnknownKey, parse_key, spell_midi
from ..model import Duration, Key, Note, make_note
from ..rules.base import RuleContext
from ..species import Species, beat_slots

logger = logging.getLogger(__name__)

CF_CHANNEL = 0
CP_CHANNEL = 1

# Bars are read as 4/4.
BEATS_PER_BAR = 4

_DURATIONS_BY_FRACTION = [
    (1.0, Duration.WHOLE),
    (0.5, Duration.HALF),
    (0.25, Duration.QUARTER),
    (0.125, Duration.EIGHTH),
    (0.0625, Duration.SIXTEENTH),
]

# (channel, midi pitch, start tick, length in ticks)
_RawNote = Tuple[int, int, int, int]


def _key_from_meta(name: str) -> Optional[Key]:
    """mido spells key signatures as ``'D'`` or ``'Dm'``."""
    if name.endswith("m"):
        full = f"{name[:-1]} minor"
    else:
        full = f"{name} major"
    try:
        return parse_key(full)
    except UnknownKey:
        logger.warning("ignoring unsupported key signature %r", name)
        return None


def _nearest_duration(length: int, bar: int) -> Duration:
    fraction = length / bar if bar else 1.0
    return min(_DURATIONS_BY_FRACTION, key=lambda fd: abs(fd[0] - fraction))[1]


def _quantise(start: int, bar: int, slots: int) -> Tuple[int, int]:
    """(measure, beat slot) for an onset, snapped to the nearest slot of the grid."""
    measure, offset = divmod(start, bar)
    slot = round(offset * slots / bar)
    if slot >= slots:
        return measure + 1, 0
    return measure, slot


def _collect(mid) -> Tuple[List[_RawNote], Optional[Key]]:
    raw: List[_RawNote] = []
    key = None
    for track in mid.tracks:
        abs_tick = 0
        pending: Dict[Tuple[int, int], int] = {}  # (channel, pitch) -> start_tick
        for msg in track:
            abs_tick += msg.time
            if msg.type == "key_signature" and key is None:
                key = _key_from_meta(msg.key)
            elif msg.type == "note_on" and msg.velocity > 0:
                pending[(msg.channel, msg.note)] = abs_tick
            elif msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
                start = pending.pop((msg.channel, msg.note), None)
                if start is not None:
                    raw.append((msg.channel, msg.note, start, abs_tick - start))
    raw.sort(key=lambda r: r[2])
    return raw, key


def load_midi(
    source: Union[str, Path],
    species: Optional[int] = None,
    key: Optional[Key] = None,
) -> RuleContext:
    """Load an exercise from a .mid file.

    Requires the ``mido`` package.  Channel 0 carries the cantus firmus
    (one note per bar), channel 1 the counterpoint.  Onsets are snapped to
    the species beat grid, and pitches are spelled in the key (the raised
    seventh of a minor key as a sharpened leading tone).  Without a
    ``key_signature`` meta message or an explicit ``key`` the exercise is
    read in C major; ``species`` defaults to first species.

    Args:
        source: Path to a .mid file.
        species: Species whose grid the counterpoint is quantised to.
        key: Overrides any key signature found in the file.

    Returns:
        A RuleContext ready for analysis.
    """
    try:
        import mido
    except ImportError as exc:
        raise ImportError(
            "mido is required for MIDI loading. Install with: pip install mido"
        ) from exc

    mid = mido.MidiFile(str(source))
    bar = mid.ticks_per_beat * BEATS_PER_BAR
    raw, file_key = _collect(mid)

    sp = Species(species if species is not None else Species.FIRST)
    k = key or file_key or parse_key("C major")
    slots = len(beat_slots(sp))

    cf: List[Note] = []
    cp: List[Note] = []
    seen = set()
    for channel, pitch, start, length in raw:
        name = spell_midi(pitch, k)
        if channel == CF_CHANNEL:
            cf.append(make_note(name, Duration.WHOLE, start // bar, 0, key=k))
        elif channel == CP_CHANNEL:
            measure, beat = _quantise(start, bar, slots)
            if (measure, beat) in seen:
                logger.debug("dropping %s: slot %d/%d already taken", name, measure, beat)
                continue
            seen.add((measure, beat))
            cp.append(make_note(name, _nearest_duration(length, bar), measure, beat, key=k))
        else:
            logger.debug("ignoring note on channel %d", channel)

    return RuleContext(species=sp, key=k, cantus_firmus=cf, counterpoint=cp)
