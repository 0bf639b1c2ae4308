"""Formula data sources.

Resolve a formula name to its declared requirements. Two backends:
an in-memory catalog (tests, offline runs) and `brew info --json=v2`.
"""

import json
import logging
import os
import subprocess
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..errors import FormulaUnavailableError
from .requirements import Requirement, parse_requirements

logger = logging.getLogger(__name__)


class FormulaSource(Protocol):
    """Formula data source protocol."""

    def requirements(self, name: str) -> List[Requirement]:
        """Return the requirements declared by formula `name`."""
        ...


class CatalogFormulaSource:
    """Requirements read from a mapping of formula name to requirement entries."""

    def __init__(self, formulae: Mapping[str, Optional[List[Any]]]):
        self._formulae = {
            name: parse_requirements(entries) for name, entries in formulae.items()
        }

    def requirements(self, name: str) -> List[Requirement]:
        if name not in self._formulae:
            raise FormulaUnavailableError(name)
        return list(self._formulae[name])

    def __contains__(self, name: str) -> bool:
        return name in self._formulae


class BrewInfoSource:
    """
    Requirements read from `brew info --json=v2 --formula NAME`.

    Results are cached per name; `brew info` is slow and deterministic
    within a single run.
    """

    def __init__(self, brew_file: str = "brew"):
        self.brew_file = brew_file
        self._cache: Dict[str, List[Requirement]] = {}

    def requirements(self, name: str) -> List[Requirement]:
        if name not in self._cache:
            self._cache[name] = parse_requirements(self._fetch(name).get("requirements"))
        return list(self._cache[name])

    def _fetch(self, name: str) -> Dict[str, Any]:
        logger.debug(f"brew info --json=v2 --formula {name}")
        try:
            result = subprocess.run(
                [self.brew_file, "info", "--json=v2", "--formula", name],
                capture_output=True,
                text=True,
                env={**os.environ, "HOMEBREW_NO_AUTO_UPDATE": "1"},
            )
        except FileNotFoundError as e:
            raise FormulaUnavailableError(name, f"cannot run {self.brew_file}: {e}") from e

        if result.returncode != 0:
            raise FormulaUnavailableError(name, result.stderr.strip())

        try:
            formulae = json.loads(result.stdout).get("formulae") or []
        except (json.JSONDecodeError, AttributeError) as e:
            raise FormulaUnavailableError(name, f"unreadable brew info output: {e}") from e

        if not formulae:
            raise FormulaUnavailableError(name)
        return formulae[0]
