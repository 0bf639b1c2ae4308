"""
Formula Compatibility View

Wraps one formula's requirements and answers where it can be tested:
which platform or architecture it is restricted to and which macOS
versions it supports. Also resolves (and memoizes) the formulae that
depend on it.

Classes:
    TestRunnerFormula: Compatibility view of a single formula

Example:
    >>> from runner_matrix.formula.requirements import LinuxRequirement
    >>> f = TestRunnerFormula("foo", [LinuxRequirement()])
    >>> f.linux_only, f.macos_only
    (True, False)
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional, Tuple, Union

from ..macos import MacOSVersion
from .requirements import (
    Arch, ArchRequirement, LinuxRequirement, MacOSRequirement, Platform, Requirement,
)

if TYPE_CHECKING:
    from .registry import FormulaRegistry

logger = logging.getLogger(__name__)


class TestRunnerFormula:
    """
    Compatibility view of one formula.

    All predicates are derived from the requirement list given at
    construction and never change. The only mutable state is the
    dependents cache, filled at most once per simulation flag.

    Attributes:
        name: Formula name
        requirements: Declared requirements
    """
    __test__ = False  # prevent pytest collection

    def __init__(self, name: str, requirements: Iterable[Requirement] = (),
                 registry: Optional["FormulaRegistry"] = None):
        self._name = name
        self._requirements: Tuple[Requirement, ...] = tuple(requirements)
        self._registry = registry
        self._dependents: Dict[bool, Tuple["TestRunnerFormula", ...]] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def requirements(self) -> Tuple[Requirement, ...]:
        return self._requirements

    @property
    def macos_only(self) -> bool:
        return any(
            isinstance(r, MacOSRequirement) and not r.version_specified
            for r in self._requirements
        )

    @property
    def linux_only(self) -> bool:
        return any(isinstance(r, LinuxRequirement) for r in self._requirements)

    @property
    def x86_64_only(self) -> bool:
        return self._arch_only(Arch.X86_64)

    @property
    def arm64_only(self) -> bool:
        return self._arch_only(Arch.ARM64)

    def _arch_only(self, arch: Arch) -> bool:
        return any(
            isinstance(r, ArchRequirement) and r.arch == arch
            for r in self._requirements
        )

    @property
    def versioned_macos_requirement(self) -> Optional[MacOSRequirement]:
        """First macOS requirement that names a version, if any."""
        for r in self._requirements:
            if isinstance(r, MacOSRequirement) and r.version_specified:
                return r
        return None

    def compatible_with(self, macos_version: Union[str, MacOSVersion]) -> bool:
        """Whether the formula can be tested on `macos_version`."""
        requirement = self.versioned_macos_requirement
        if requirement is None:
            return True
        return requirement.allows(MacOSVersion.parse(macos_version))

    def dependents(self, simulate_macos_on_linux: bool = False) -> Tuple["TestRunnerFormula", ...]:
        """
        Formulae that transitively depend on this one.

        The first call per flag value runs the dependent query; later
        calls return the cached views. Query errors propagate.

        Args:
            simulate_macos_on_linux: Resolve dependents as seen on macOS

        Returns:
            Views of every dependent, in query order
        """
        key = bool(simulate_macos_on_linux)
        if key not in self._dependents:
            if self._registry is None:
                raise RuntimeError(f"{self._name} has no registry to resolve dependents")
            self._dependents[key] = self._registry.resolve_dependents(self._name, key)
            logger.debug(f"{self._name}: cached {len(self._dependents[key])} dependents "
                         f"(simulate macOS: {key})")
        return self._dependents[key]

    def dependents_cached(self, simulate_macos_on_linux: bool) -> bool:
        return bool(simulate_macos_on_linux) in self._dependents

    def __eq__(self, other) -> bool:
        if isinstance(other, TestRunnerFormula):
            return self._name == other._name
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._name)

    def __repr__(self) -> str:
        return f"TestRunnerFormula({self._name!r})"


# Exclusion predicates keyed by the platform or architecture a runner rejects.
ONLY_PREDICATES: Dict[Union[Platform, Arch], Callable[[TestRunnerFormula], bool]] = {
    Platform.MACOS: lambda f: f.macos_only,
    Platform.LINUX: lambda f: f.linux_only,
    Arch.X86_64: lambda f: f.x86_64_only,
    Arch.ARM64: lambda f: f.arm64_only,
}
