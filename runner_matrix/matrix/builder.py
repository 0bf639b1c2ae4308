"""
Runner Matrix Builder

Walks the Linux runner and every supported macOS release for both CPU
architectures, asks the decision engine whether each is needed, and
collects the resulting runner specifications.

Architecture:
    formula names → FormulaRegistry → TestRunnerFormula views
                                           ↓
    RunnerFilter per candidate → add_runner → RunnerSpec list

Example:
    >>> builder = MatrixBuilder(load_config())
    >>> runners = builder.build(registry.get_many(["wget"]))
    >>> [r.runner for r in runners]
    ['linux-self-hosted-1', '13-123-1', '13-arm64-123-1', ...]
"""

import logging
from typing import List, Optional, Sequence

from ..config import RunnerMatrixConfig
from ..decision.engine import RunnerFilter, add_runner
from ..formula.compatibility import TestRunnerFormula
from ..formula.registry import FormulaRegistry
from ..formula.requirements import Arch, Platform
from ..macos import MacOSCatalog, MacOSVersion
from .runner_spec import ContainerSpec, RunnerSpec

logger = logging.getLogger(__name__)


class MatrixBuilder:
    """
    Builds the runner matrix for a batch of formulae.

    The configuration is checked for completeness on construction, so a
    missing setting fails before any runner is computed.

    Attributes:
        config: Runner labels, macOS policy and run identifiers
        catalog: macOS releases to consider
    """

    def __init__(self, config: RunnerMatrixConfig, catalog: Optional[MacOSCatalog] = None):
        self.config = config.require_complete()
        self.catalog = catalog if catalog is not None else config.macos.catalog()

    def linux_runner_spec(self) -> RunnerSpec:
        linux = self.config.linux
        return RunnerSpec(
            runner=linux.runner,
            container=ContainerSpec(image=linux.image, options=linux.options),
            workdir=linux.workdir,
            timeout=linux.timeout,
            cleanup=linux.cleanup,
        )

    def intel_runner_spec(self, macos_version: MacOSVersion) -> RunnerSpec:
        return RunnerSpec(
            runner=f"{macos_version}{self.config.github.ephemeral_suffix}",
            cleanup=False,
        )

    def arm64_runner_spec(self, macos_version: MacOSVersion,
                          dependents: bool) -> Optional[RunnerSpec]:
        """
        Apple Silicon runner for a release, or None below the oldest band.

        Dependents on the intermediate band run on shared bare metal
        instead of ephemeral runners.
        """
        policy = self.config.macos
        if macos_version >= policy.version("ephemeral_arm64_since") or (
            macos_version >= policy.version("ephemeral_arm64_direct_since") and not dependents
        ):
            return RunnerSpec(
                runner=f"{macos_version}-arm64{self.config.github.ephemeral_suffix}",
                cleanup=False,
            )
        if macos_version >= policy.version("bare_metal_arm64_since"):
            return RunnerSpec(runner=f"{macos_version}-arm64", cleanup=True)
        return None

    def linux_runners(self, formulae: Sequence[TestRunnerFormula],
                      deleted_formulae: Optional[List[str]],
                      dependents: bool) -> List[RunnerSpec]:
        # Linux runners only ship x86_64.
        needed = add_runner(
            formulae,
            dependents=dependents,
            deleted_formulae=deleted_formulae,
            runner_filter=RunnerFilter(reject_platform=Platform.MACOS, reject_arch=Arch.ARM64),
            simulate_macos_on_linux=False,
        )
        return [self.linux_runner_spec()] if needed else []

    def macos_runners(self, formulae: Sequence[TestRunnerFormula],
                      deleted_formulae: Optional[List[str]],
                      dependents: bool) -> List[RunnerSpec]:
        # TODO: simulating macOS on Linux resolves dependents for the oldest
        # macOS release; dependents that only exist on newer releases are missed.
        def needed(runner_filter: RunnerFilter) -> bool:
            return add_runner(
                formulae,
                dependents=dependents,
                deleted_formulae=deleted_formulae,
                runner_filter=runner_filter,
                simulate_macos_on_linux=True,
            )

        if not needed(RunnerFilter(reject_platform=Platform.LINUX)):
            logger.info("No macOS runners needed")
            return []

        add_intel = needed(RunnerFilter(reject_platform=Platform.LINUX, reject_arch=Arch.ARM64))
        add_arm64 = needed(RunnerFilter(reject_platform=Platform.LINUX, reject_arch=Arch.X86_64))

        runners = []
        for release in self.catalog:
            if not release.supported:
                continue

            version = release.version
            if not needed(RunnerFilter(reject_platform=Platform.LINUX,
                                       select_macos_version=version)):
                logger.debug(f"No formulae to test on macOS {version}")
                continue

            if add_intel:
                runners.append(self.intel_runner_spec(version))

            if add_arm64:
                spec = self.arm64_runner_spec(version, dependents)
                if spec is not None:
                    runners.append(spec)

        return runners

    def build(self, formulae: Sequence[TestRunnerFormula],
              deleted_formulae: Optional[List[str]] = None,
              dependents: bool = False) -> List[RunnerSpec]:
        """
        Build the runner matrix.

        Args:
            formulae: Formulae being tested
            deleted_formulae: Names of formulae deleted by the change
            dependents: Test dependents of the formulae instead of the formulae

        Returns:
            Runner specifications in emission order: Linux first, then
            macOS releases newest first, Intel before Apple Silicon
        """
        runners = []
        runners.extend(self.linux_runners(formulae, deleted_formulae, dependents))
        runners.extend(self.macos_runners(formulae, deleted_formulae, dependents))

        if not dependents and not runners:
            # Keeps a required `tests` status check reporting.
            runners.append(RunnerSpec.placeholder(self.config.no_op_runner))

        for spec in runners:
            logger.info(f"Runner: {spec.runner}{' (no-op)' if spec.no_op else ''}")
        return runners


def determine_test_runners(testing_formulae: Sequence[str],
                           registry: FormulaRegistry,
                           config: RunnerMatrixConfig,
                           deleted_formulae: Optional[List[str]] = None,
                           dependents: bool = False) -> List[RunnerSpec]:
    """
    Runner matrix for changed formula names.

    Args:
        testing_formulae: Names of the changed formulae
        registry: Resolves names to compatibility views
        config: Complete runner configuration
        deleted_formulae: Names of formulae deleted by the change
        dependents: Test dependents instead of the formulae themselves

    Returns:
        Ordered runner specifications
    """
    builder = MatrixBuilder(config)
    formulae = registry.get_many(testing_formulae)
    mode = "dependents" if dependents else "formulae"
    logger.info(f"Determining {mode} runners for {len(formulae)} formulae")
    return builder.build(formulae, deleted_formulae=deleted_formulae, dependents=dependents)
