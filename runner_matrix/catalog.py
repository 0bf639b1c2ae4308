"""
Formula Catalog Loader
======================
Loads formula requirements and dependents from a YAML catalog, for
offline runs and tests that should not call `brew`.

Format:
    formulae:
      gcc:
        dependents: [mpfr]
      mpfr:
        requirements:
          - {name: arch, arch: arm64}
          - {name: macos, version: ventura, comparator: ">="}
      xcodes:
        requirements: [macos]
        macos_dependents: [some-mac-tool]
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .dependents.query import CatalogDependentQuery
from .formula.registry import FormulaRegistry
from .formula.source import CatalogFormulaSource

logger = logging.getLogger(__name__)


@dataclass
class FormulaCatalog:
    """Formula source and dependent query backed by the same catalog."""
    source: CatalogFormulaSource
    dependent_query: CatalogDependentQuery

    def registry(self) -> FormulaRegistry:
        return FormulaRegistry(self.source, self.dependent_query)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormulaCatalog":
        """Create from a parsed catalog mapping."""
        formulae = (data or {}).get("formulae") or {}
        if not isinstance(formulae, dict):
            raise ValueError("Catalog 'formulae' must be a mapping of name to entry")

        requirements = {}
        dependents = {}
        macos_dependents = {}
        for name, entry in formulae.items():
            entry = entry or {}
            requirements[name] = entry.get("requirements") or []
            dependents[name] = entry.get("dependents") or []
            if "macos_dependents" in entry:
                macos_dependents[name] = entry.get("macos_dependents") or []

        return cls(
            source=CatalogFormulaSource(requirements),
            dependent_query=CatalogDependentQuery(dependents, macos_dependents),
        )


def load_catalog(path: Union[str, Path]) -> FormulaCatalog:
    """
    Load a formula catalog file.

    Raises:
        FileNotFoundError: If the catalog does not exist
        ValueError: If the catalog is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Formula catalog not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Formula catalog root must be a mapping: {path}")

    catalog = FormulaCatalog.from_dict(data or {})
    logger.info(f"Loaded formula catalog: {path}")
    return catalog
