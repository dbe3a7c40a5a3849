"""Species counterpoint checker and cantus firmus generator.

Usage:
    python -m species_counterpoint validate exercise.json
    python -m species_counterpoint validate exercise.mid --species 2 --key "D minor"
    python -m species_counterpoint generate --key "D minor" --length 10 --seed 7
    python -m species_counterpoint rules --species 4
"""

from .generator import CantusFirmusGenerator, CFConfig, Clef, GenerationFailed, generate_cantus_firmus
from .keys import parse_key
from .model import Key, Note, Pitch, make_note
from .registry import RuleRegistry, build_default_registry
from .rules.base import AnalysisResult, RuleContext, Severity, Violation
from .runner import Analyzer, analyze, check_completeness, load_exercise
from .species import Species

__all__ = [
    "AnalysisResult",
    "Analyzer",
    "CFConfig",
    "CantusFirmusGenerator",
    "Clef",
    "GenerationFailed",
    "Key",
    "Note",
    "Pitch",
    "RuleContext",
    "RuleRegistry",
    "Severity",
    "Species",
    "Violation",
    "analyze",
    "build_default_registry",
    "check_completeness",
    "generate_cantus_firmus",
    "load_exercise",
    "make_note",
    "parse_key",
]
