"""
Runner Matrix - CI runner selection for formula changes

Determines which CI runners (Linux, macOS Intel, macOS Apple Silicon per
release) are needed to test a set of changed formulae, or their
dependents, instead of running on every platform.

Architecture:
    formula:    Compatibility views over declared requirements
    dependents: Which formulae depend on a formula
    decision:   Does a candidate runner have anything to test?
    matrix:     Builds the ordered runner list

Entry point:
    determine-test-runners (runner_matrix.cli)
"""

__version__ = "0.1.0"

from .config import RunnerMatrixConfig, load_config
from .decision import RunnerFilter, add_runner
from .formula import FormulaRegistry, TestRunnerFormula
from .matrix import MatrixBuilder, RunnerSpec, determine_test_runners

__all__ = [
    "RunnerMatrixConfig",
    "load_config",
    "RunnerFilter",
    "add_runner",
    "FormulaRegistry",
    "TestRunnerFormula",
    "MatrixBuilder",
    "RunnerSpec",
    "determine_test_runners",
]
