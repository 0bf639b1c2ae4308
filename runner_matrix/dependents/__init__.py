"""
Dependents Module

Lookups of the formulae that transitively depend on a formula.
"""

from .query import BrewUsesQuery, CatalogDependentQuery, DependentQuery

__all__ = ["BrewUsesQuery", "CatalogDependentQuery", "DependentQuery"]
