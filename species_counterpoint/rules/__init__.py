"""Counterpoint rules, one module per category."""

from .base import AnalysisResult, Category, Rule, RuleContext, Severity, SpeciesRule, Violation

__all__ = [
    "AnalysisResult",
    "Category",
    "Rule",
    "RuleContext",
    "Severity",
    "SpeciesRule",
    "Violation",
]
