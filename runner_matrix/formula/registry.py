"""Formula registry: one compatibility view per formula name."""

import logging
from typing import Dict, Iterable, List, Tuple

from ..dependents.query import DependentQuery
from .compatibility import TestRunnerFormula
from .source import FormulaSource

logger = logging.getLogger(__name__)


class FormulaRegistry:
    """
    Creates and reuses TestRunnerFormula views.

    Views are created on first request, by the caller or while resolving
    dependents, and live as long as the registry.

    Attributes:
        source: Formula data source
        dependent_query: Dependent lookup used by the views
    """

    def __init__(self, source: FormulaSource, dependent_query: DependentQuery):
        self.source = source
        self.dependent_query = dependent_query
        self._views: Dict[str, TestRunnerFormula] = {}

    def get(self, name: str) -> TestRunnerFormula:
        if name not in self._views:
            logger.debug(f"Loading formula {name}")
            self._views[name] = TestRunnerFormula(
                name, self.source.requirements(name), registry=self
            )
        return self._views[name]

    def get_many(self, names: Iterable[str]) -> List[TestRunnerFormula]:
        return [self.get(name) for name in names]

    def resolve_dependents(self, name: str,
                           simulate_macos_on_linux: bool) -> Tuple[TestRunnerFormula, ...]:
        names = self.dependent_query.dependents(name, simulate_macos_on_linux)
        return tuple(self.get_many(names))
