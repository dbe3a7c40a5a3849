"""Load an exercise (both voices, species, key) from JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Union

from ..keys import find_key, parse_key
from ..model import Duration, Key, Note, make_note
from ..rules.base import RuleContext
from ..species import Species, get_species_config


def _parse_key(value: Union[str, dict]) -> Key:
    """Key given as ``"D minor"`` or ``{"tonic": "D", "mode": "minor"}``."""
    if isinstance(value, dict):
        return find_key(value.get("tonic", ""), value.get("mode", "major"))
    return parse_key(value)


def _require(data: dict, field: str):
    if field not in data:
        raise ValueError(f"exercise is missing required field {field!r}")
    return data[field]


def _parse_cf(entries: list, key: Key) -> List[Note]:
    """Bare pitch strings become one whole note per measure."""
    notes = []
    for idx, entry in enumerate(entries):
        if isinstance(entry, str):
            notes.append(make_note(entry, Duration.WHOLE, idx, 0, key=key))
        else:
            notes.append(_parse_note(entry, key, Duration.WHOLE, default_measure=idx))
    return notes


def _parse_note(
    note_data: dict,
    key: Key,
    default_duration: Duration,
    default_measure: int = 0,
) -> Note:
    """Parse a single note dict."""
    return make_note(
        _require(note_data, "pitch"),
        note_data.get("duration", default_duration.value),
        note_data.get("measure", default_measure),
        note_data.get("beat", 0),
        key=key,
    )


def load_json(
    source: Union[str, Path, dict],
    species: Optional[int] = None,
    key: Optional[Key] = None,
) -> RuleContext:
    """Load an exercise from a JSON file or pre-parsed dict.

    Args:
        source: File path (str or Path) or already-parsed dict.
        species: Overrides the file's ``species`` field.
        key: Overrides the file's ``key`` field.

    Returns:
        A RuleContext ready for analysis.

    Raises:
        ValueError: a required field is missing.
        InvalidPitchFormat: a pitch string cannot be decoded.
        UnknownKey: the key is not in the signature table.
    """
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        with open(path) as fh:
            data = json.load(fh)

    sp = Species(species if species is not None else _require(data, "species"))
    k = key if key is not None else _parse_key(_require(data, "key"))
    default_duration = get_species_config(sp).allowed_durations[0]

    cf = _parse_cf(_require(data, "cantus_firmus"), k)
    cp = [
        _parse_note(nd, k, default_duration)
        for nd in data.get("counterpoint", [])
    ]
    return RuleContext(species=sp, key=k, cantus_firmus=cf, counterpoint=cp)
