"""
Dependent Queries

Answer "which formulae transitively depend on NAME?". The answer differs
depending on whether macOS is simulated on Linux, because formulae declare
platform-conditional dependencies.

Classes:
    DependentQuery: Protocol for dependent lookups
    CatalogDependentQuery: In-memory lookup from a catalog
    BrewUsesQuery: Lookup via `brew uses`
"""

import logging
import os
import subprocess
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from ..errors import DependentQueryError

logger = logging.getLogger(__name__)

SIMULATE_MACOS_ENV = "HOMEBREW_SIMULATE_MACOS_ON_LINUX"


def _unique(names: Sequence[str]) -> List[str]:
    seen = set()
    ordered = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


class DependentQuery(Protocol):
    """Dependent lookup protocol."""

    def dependents(self, name: str, simulate_macos_on_linux: bool) -> List[str]:
        """Return distinct names of formulae that transitively depend on `name`."""
        ...


class CatalogDependentQuery:
    """
    Dependents read from mappings of formula name to dependent names.

    Args:
        dependents: Dependents on Linux (no simulation)
        macos_dependents: Dependents when simulating macOS; formulae
            missing here fall back to `dependents`
    """

    def __init__(self, dependents: Mapping[str, Sequence[str]],
                 macos_dependents: Optional[Mapping[str, Sequence[str]]] = None):
        self._dependents = {name: _unique(names) for name, names in dependents.items()}
        self._macos_dependents = {
            name: _unique(names) for name, names in (macos_dependents or {}).items()
        }

    def dependents(self, name: str, simulate_macos_on_linux: bool) -> List[str]:
        if simulate_macos_on_linux and name in self._macos_dependents:
            return list(self._macos_dependents[name])
        return list(self._dependents.get(name, []))


class BrewUsesQuery:
    """
    Dependents via `brew uses --formulae --eval-all --include-build --include-test`.

    The query is evaluated across the whole formula catalog, not just the
    formulae being tested. A non-zero exit is raised as DependentQueryError;
    retrying is left to the caller.
    """

    def __init__(self, brew_file: str = "brew"):
        self.brew_file = brew_file

    def command(self, name: str) -> List[str]:
        return [
            self.brew_file, "uses", "--formulae", "--eval-all",
            "--include-build", "--include-test", name,
        ]

    def environment(self, simulate_macos_on_linux: bool) -> Dict[str, str]:
        env = dict(os.environ)
        env["HOMEBREW_STDERR"] = "1"
        if simulate_macos_on_linux:
            env[SIMULATE_MACOS_ENV] = "1"
        else:
            env.pop(SIMULATE_MACOS_ENV, None)
        return env

    def dependents(self, name: str, simulate_macos_on_linux: bool) -> List[str]:
        logger.debug(f"Querying dependents of {name} (simulate macOS: {simulate_macos_on_linux})")
        try:
            result = subprocess.run(
                self.command(name),
                capture_output=True,
                text=True,
                env=self.environment(simulate_macos_on_linux),
            )
        except OSError as e:
            raise DependentQueryError(name, stderr=str(e)) from e

        if result.returncode != 0:
            raise DependentQueryError(name, result.returncode, result.stderr)

        names = _unique(result.stdout.splitlines())
        logger.debug(f"{name} has {len(names)} dependents")
        return names
