"""
Coverage Decision Engine

Decides whether a candidate runner (platform x architecture x macOS
version) has anything to test for a batch of formulae, either the
formulae themselves or their untested dependents.

Classes:
    RunnerFilter: What a candidate runner cannot provide, and which macOS
        version it runs

Functions:
    formulae_need_runner: Direct coverage
    formulae_have_untested_dependents: Dependents coverage
    add_runner: Dispatch between the two

Example:
    >>> from runner_matrix.formula import Arch, Platform
    >>> linux = RunnerFilter(reject_platform=Platform.MACOS, reject_arch=Arch.ARM64)
    >>> add_runner(formulae, dependents=False, deleted_formulae=[], runner_filter=linux)
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..formula.compatibility import ONLY_PREDICATES, TestRunnerFormula
from ..formula.requirements import Arch, Platform
from ..macos import MacOSVersion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunnerFilter:
    """
    A candidate runner, described by what it rules out.

    Attributes:
        reject_platform: Platform the runner does not provide
        reject_arch: Architecture the runner does not provide
        select_macos_version: macOS version the runner runs
    """
    reject_platform: Optional[Platform] = None
    reject_arch: Optional[Arch] = None
    select_macos_version: Optional[MacOSVersion] = None

    def excludes(self, formula: TestRunnerFormula) -> bool:
        """Whether the formula is restricted to a rejected platform or architecture."""
        if self.reject_platform is not None and ONLY_PREDICATES[self.reject_platform](formula):
            return True
        if self.reject_arch is not None and ONLY_PREDICATES[self.reject_arch](formula):
            return True
        return False

    def accepts(self, formula: TestRunnerFormula) -> bool:
        """Whether the formula can be tested on this runner."""
        if self.excludes(formula):
            return False
        if self.select_macos_version is not None:
            return formula.compatible_with(self.select_macos_version)
        return True

    def describe(self) -> str:
        parts = []
        if self.reject_platform is not None:
            parts.append(f"no {self.reject_platform.value}")
        if self.reject_arch is not None:
            parts.append(f"no {self.reject_arch.value}")
        if self.select_macos_version is not None:
            parts.append(f"macOS {self.select_macos_version}")
        return ", ".join(parts) or "any runner"


def formulae_need_runner(formulae: Sequence[TestRunnerFormula],
                         runner_filter: RunnerFilter) -> bool:
    """Whether at least one formula can be tested on the runner."""
    compatible = [f for f in formulae if runner_filter.accepts(f)]
    logger.debug(
        f"[{runner_filter.describe()}] {len(compatible)}/{len(formulae)} formulae compatible"
    )
    return bool(compatible)


def formulae_have_untested_dependents(formulae: Sequence[TestRunnerFormula],
                                      runner_filter: RunnerFilter,
                                      simulate_macos_on_linux: bool = False) -> bool:
    """
    Whether any formula has a dependent that must be tested on the runner.

    A formula the runner cannot test contributes nothing: its dependents
    would never be built against it there. Dependents that are part of
    the batch are already tested directly and do not count.

    Args:
        formulae: Formulae being tested
        runner_filter: Candidate runner
        simulate_macos_on_linux: Resolve dependents as seen on macOS

    Returns:
        True if at least one untested, compatible dependent exists
    """
    testing = {f.name for f in formulae}

    for formula in formulae:
        if not runner_filter.accepts(formula):
            continue

        compatible_dependents = [
            d for d in formula.dependents(simulate_macos_on_linux)
            if runner_filter.accepts(d)
        ]
        untested = [d.name for d in compatible_dependents if d.name not in testing]
        if untested:
            logger.debug(
                f"[{runner_filter.describe()}] {formula.name} has untested dependents: "
                f"{', '.join(untested[:5])}{' ...' if len(untested) > 5 else ''}"
            )
            return True

    logger.debug(f"[{runner_filter.describe()}] no untested dependents")
    return False


def add_runner(formulae: Sequence[TestRunnerFormula],
               dependents: bool,
               deleted_formulae: Optional[List[str]] = None,
               runner_filter: Optional[RunnerFilter] = None,
               simulate_macos_on_linux: bool = False) -> bool:
    """
    Whether the runner described by `runner_filter` is needed.

    In dependents mode this asks whether untested dependents exist.
    Otherwise any deleted formula forces the runner; a deletion still has
    to be validated somewhere.
    """
    runner_filter = runner_filter or RunnerFilter()

    if dependents:
        return formulae_have_untested_dependents(
            formulae, runner_filter, simulate_macos_on_linux=simulate_macos_on_linux
        )

    if deleted_formulae:
        logger.debug(f"[{runner_filter.describe()}] deleted formulae present: {', '.join(deleted_formulae)}")
        return True

    return formulae_need_runner(formulae, runner_filter)
