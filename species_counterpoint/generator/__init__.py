"""Cantus firmus generation: constraint filter, acceptance gate, search loop."""

from .cantus_firmus import CantusFirmusGenerator, CFConfig, Clef, GenerationFailed, generate_cantus_firmus
from .validator import cantus_firmus_problems, validate_cantus_firmus

__all__ = [
    "CFConfig",
    "CantusFirmusGenerator",
    "Clef",
    "GenerationFailed",
    "cantus_firmus_problems",
    "generate_cantus_firmus",
    "validate_cantus_firmus",
]
