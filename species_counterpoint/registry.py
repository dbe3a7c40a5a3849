"""Rule registry and category metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple, Type

from .rules.base import Category, Rule
from .rules.cadence import ALL_CADENCE_RULES
from .rules.dissonance import ALL_DISSONANCE_RULES
from .rules.intervals import ALL_INTERVAL_RULES
from .rules.melodic import ALL_MELODIC_RULES
from .rules.motion import ALL_MOTION_RULES
from .rules.spacing import ALL_SPACING_RULES
from .species import Species


@dataclass(frozen=True)
class CategoryInfo:
    """Display metadata for a rule category."""
    category: Category
    label: str
    description: str


CATEGORY_ORDER: Tuple[Category, ...] = (
    Category.INTERVALS,
    Category.MOTION,
    Category.MELODIC,
    Category.DISSONANCE,
    Category.CADENCE,
    Category.VOICE_CROSSING,
)

CATEGORY_INFO: Dict[Category, CategoryInfo] = {
    c.category: c
    for c in [
        CategoryInfo(Category.INTERVALS, "Intervals", "Vertical interval consonance and dissonance"),
        CategoryInfo(Category.MOTION, "Voice Motion", "Parallel, similar, and contrary motion between voices"),
        CategoryInfo(Category.MELODIC, "Melodic Rules", "Melodic contour, leaps, and range"),
        CategoryInfo(Category.DISSONANCE, "Dissonance Treatment", "Passing tones, neighbor tones, suspensions"),
        CategoryInfo(Category.CADENCE, "Cadence", "Ending patterns and leading tone treatment"),
        CategoryInfo(Category.VOICE_CROSSING, "Voice Crossing & Spacing", "Voice independence and spacing limits"),
    ]
}

ALL_RULE_CLASSES: List[Type] = (
    ALL_INTERVAL_RULES
    + ALL_MOTION_RULES
    + ALL_MELODIC_RULES
    + ALL_DISSONANCE_RULES
    + ALL_CADENCE_RULES
    + ALL_SPACING_RULES
)

CATEGORY_MAP: Dict[str, List[Type]] = {
    "intervals": ALL_INTERVAL_RULES,
    "motion": ALL_MOTION_RULES,
    "melodic": ALL_MELODIC_RULES,
    "dissonance": ALL_DISSONANCE_RULES,
    "cadence": ALL_CADENCE_RULES,
    "voiceCrossing": ALL_SPACING_RULES,
}


class RuleRegistry:
    """Ordered, read-only collection of rules keyed by id."""

    def __init__(self, rules: Sequence[Rule]):
        self._rules: List[Rule] = []
        self._by_id: Dict[str, Rule] = {}
        for rule in rules:
            if rule.rule_id in self._by_id:
                raise ValueError(f"duplicate rule id: {rule.rule_id}")
            self._by_id[rule.rule_id] = rule
            self._rules.append(rule)

    def all(self) -> List[Rule]:
        return list(self._rules)

    def for_species(self, species: "Species | int") -> List[Rule]:
        """Rules whose species set contains ``species``, in registration order."""
        sp = Species(species)
        return [r for r in self._rules if sp in r.species]

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._by_id.get(rule_id)

    def grouped_by_category(self, species: "Species | int | None" = None) -> List[Tuple[CategoryInfo, List[Rule]]]:
        """Rules grouped in display order; empty categories are left out."""
        rules = self._rules if species is None else self.for_species(species)
        groups = []
        for cat in CATEGORY_ORDER:
            members = [r for r in rules if r.category == cat]
            if members:
                groups.append((CATEGORY_INFO[cat], members))
        return groups

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)


def get_rules(categories: Optional[Set[str]] = None) -> List[Rule]:
    """Instantiate rule objects, optionally filtered by category names."""
    classes = []
    if categories:
        for cat in categories:
            if cat not in CATEGORY_MAP:
                raise ValueError(f"unknown category: {cat}")
        # Keep registration order regardless of how the names were given.
        classes = [cls for name, group in CATEGORY_MAP.items() if name in categories for cls in group]
    else:
        classes = list(ALL_RULE_CLASSES)
    return [cls() for cls in classes]


def build_default_registry(categories: Optional[Set[str]] = None) -> RuleRegistry:
    """Built-in rules, one instance each, optionally limited to some categories."""
    return RuleRegistry(get_rules(categories))
