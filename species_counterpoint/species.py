"""Species definitions and their rhythmic configuration.

Each species of counterpoint fixes how many counterpoint notes sound
against one cantus firmus note and which dissonance devices are allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple

from .model import Duration

# Sentinel for species V: the number of notes per measure is free.
VARIABLE = -1


class Species(IntEnum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5

    @property
    def roman(self) -> str:
        return ("I", "II", "III", "IV", "V")[self.value - 1]


ALL_SPECIES = frozenset(Species)


@dataclass(frozen=True)
class SpeciesConfig:
    """Rhythmic profile of one species."""

    species: Species
    name: str
    description: str
    notes_per_measure: int
    allowed_durations: Tuple[Duration, ...]

    # Policy flags
    requires_downbeat_consonance: bool = True
    allows_passing_tones: bool = False
    allows_syncopation: bool = False

    @property
    def is_variable(self) -> bool:
        return self.notes_per_measure == VARIABLE


# ---------------------------------------------------------------------------
# Config table
# ---------------------------------------------------------------------------

SPECIES_CONFIGS: Dict[Species, SpeciesConfig] = {
    Species.FIRST: SpeciesConfig(
        species=Species.FIRST,
        name="First Species",
        description="Note against note - whole notes only",
        notes_per_measure=1,
        allowed_durations=(Duration.WHOLE,),
    ),
    Species.SECOND: SpeciesConfig(
        species=Species.SECOND,
        name="Second Species",
        description="Two notes against one - half notes",
        notes_per_measure=2,
        allowed_durations=(Duration.HALF,),
        allows_passing_tones=True,
    ),
    Species.THIRD: SpeciesConfig(
        species=Species.THIRD,
        name="Third Species",
        description="Four notes against one - quarter notes",
        notes_per_measure=4,
        allowed_durations=(Duration.QUARTER,),
        allows_passing_tones=True,
    ),
    Species.FOURTH: SpeciesConfig(
        species=Species.FOURTH,
        name="Fourth Species",
        description="Syncopation - tied half notes",
        notes_per_measure=2,
        allowed_durations=(Duration.HALF,),
        requires_downbeat_consonance=False,
        allows_syncopation=True,
    ),
    Species.FIFTH: SpeciesConfig(
        species=Species.FIFTH,
        name="Fifth Species",
        description="Florid counterpoint - mixed durations",
        notes_per_measure=VARIABLE,
        allowed_durations=(Duration.WHOLE, Duration.HALF, Duration.QUARTER, Duration.EIGHTH),
        allows_passing_tones=True,
        allows_syncopation=True,
    ),
}

# Species V notes are placed on a quarter-note grid.
FIFTH_SPECIES_SLOTS = 4


def get_species_config(species: "Species | int") -> SpeciesConfig:
    """Return the config for a species (accepts a plain int 1-5)."""
    return SPECIES_CONFIGS[Species(species)]


def beat_slots(species: "Species | int") -> Tuple[int, ...]:
    """Beat positions a counterpoint note may occupy inside one measure."""
    config = get_species_config(species)
    if config.is_variable:
        return tuple(range(FIFTH_SPECIES_SLOTS))
    return tuple(range(config.notes_per_measure))
