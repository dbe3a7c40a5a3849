"""Rule protocol, violation types, and severity/category enums."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..model import Key, Note
from ..species import Species


class Severity(Enum):
    """Violation severity level."""
    ERROR = "error"
    WARNING = "warning"


class Category(Enum):
    """Rule category."""
    INTERVALS = "intervals"
    MOTION = "motion"
    MELODIC = "melodic"
    DISSONANCE = "dissonance"
    CADENCE = "cadence"
    VOICE_CROSSING = "voiceCrossing"


def _note_order(note: Note) -> Tuple[int, int]:
    return (note.measure_index, note.beat_position)


@dataclass(frozen=True)
class RuleContext:
    """Snapshot of an exercise handed to every rule.

    Both voices are stored as tuples sorted by (measure, beat).
    """
    species: Species
    key: Key
    cantus_firmus: Tuple[Note, ...] = ()
    counterpoint: Tuple[Note, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "species", Species(self.species))
        object.__setattr__(self, "cantus_firmus", tuple(sorted(self.cantus_firmus, key=_note_order)))
        object.__setattr__(self, "counterpoint", tuple(sorted(self.counterpoint, key=_note_order)))


@dataclass(frozen=True)
class Violation:
    """A single rule violation."""
    rule_id: str
    rule_name: str
    severity: Severity
    category: Category
    message: str
    explanation: str = ""
    measure_index: int = 0
    beat_position: Optional[int] = None
    affected_notes: Tuple[Note, ...] = ()

    @property
    def location(self) -> str:
        """Human-readable location string (one-based)."""
        loc = f"measure {self.measure_index + 1}"
        if self.beat_position is not None:
            loc += f" beat {self.beat_position + 1}"
        return loc

    def to_dict(self) -> dict:
        loc = {"measure": self.measure_index}
        if self.beat_position is not None:
            loc["beat"] = self.beat_position
        return {
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "explanation": self.explanation,
            "location": loc,
            "affected_notes": [n.to_dict() for n in self.affected_notes],
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Aggregated outcome of one analysis run."""
    violations: Tuple[Violation, ...] = ()
    failed_rules: Tuple[str, ...] = ()

    @classmethod
    def of(cls, violations: Iterable[Violation], failed_rules: Iterable[str] = ()) -> "AnalysisResult":
        return cls(tuple(violations), tuple(failed_rules))

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.WARNING)

    @property
    def is_valid(self) -> bool:
        """Warnings never affect validity."""
        return self.error_count == 0

    def by_rule(self, rule_id: str) -> List[Violation]:
        return [v for v in self.violations if v.rule_id == rule_id]

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "violations": [v.to_dict() for v in self.violations],
            "failed_rules": list(self.failed_rules),
        }


@runtime_checkable
class Rule(Protocol):
    """Protocol for a counterpoint rule."""

    @property
    def rule_id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def severity(self) -> Severity: ...

    @property
    def species(self) -> FrozenSet[Species]: ...

    @property
    def category(self) -> Category: ...

    def check(self, context: RuleContext) -> List[Violation]: ...


class SpeciesRule:
    """Shared plumbing for the concrete rule classes.

    Subclasses set the class attributes and define ``check``; a subclass
    without one does not satisfy the ``Rule`` protocol.
    """

    rule_id: str = ""
    name: str = ""
    severity: Severity = Severity.ERROR
    species: FrozenSet[Species] = frozenset(Species)
    category: Category = Category.INTERVALS
    description: str = ""
    explanation: str = ""

    def applies_to(self, species: Species) -> bool:
        return species in self.species

    def violation(
        self,
        message: str,
        measure_index: int,
        beat_position: Optional[int] = None,
        notes: Sequence[Note] = (),
        rule_name: Optional[str] = None,
        explanation: Optional[str] = None,
    ) -> Violation:
        return Violation(
            rule_id=self.rule_id,
            rule_name=rule_name or self.name,
            severity=self.severity,
            category=self.category,
            message=message,
            explanation=self.explanation if explanation is None else explanation,
            measure_index=measure_index,
            beat_position=beat_position,
            affected_notes=tuple(notes),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.rule_id}>"


def species_set(*species: int) -> FrozenSet[Species]:
    return frozenset(Species(s) for s in species)


ALL = frozenset(Species)
SPECIES_II_TO_V = species_set(2, 3, 4, 5)
SPECIES_II_III_V = species_set(2, 3, 5)
