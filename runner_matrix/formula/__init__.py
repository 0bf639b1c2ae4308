"""
Formula Module

Compatibility views over formula requirements, plus the data sources
that supply those requirements.
"""

from .compatibility import ONLY_PREDICATES, TestRunnerFormula
from .registry import FormulaRegistry
from .requirements import (
    Arch,
    ArchRequirement,
    LinuxRequirement,
    MacOSRequirement,
    Platform,
    UnknownRequirement,
    parse_requirement,
    parse_requirements,
)
from .source import BrewInfoSource, CatalogFormulaSource, FormulaSource

__all__ = [
    "ONLY_PREDICATES",
    "TestRunnerFormula",
    "FormulaRegistry",
    "Arch",
    "ArchRequirement",
    "LinuxRequirement",
    "MacOSRequirement",
    "Platform",
    "UnknownRequirement",
    "parse_requirement",
    "parse_requirements",
    "BrewInfoSource",
    "CatalogFormulaSource",
    "FormulaSource",
]
