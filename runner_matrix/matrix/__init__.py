"""
Runner Matrix Module

Turns coverage decisions into the list of runners a CI run needs.
"""

from .builder import MatrixBuilder, determine_test_runners
from .runner_spec import ContainerSpec, RunnerSpec

__all__ = ["MatrixBuilder", "determine_test_runners", "ContainerSpec", "RunnerSpec"]
