"""
Coverage Decision Module

Decides whether a candidate runner has anything to test.
"""

from .engine import (
    RunnerFilter,
    add_runner,
    formulae_have_untested_dependents,
    formulae_need_runner,
)

__all__ = [
    "RunnerFilter",
    "add_runner",
    "formulae_have_untested_dependents",
    "formulae_need_runner",
]
