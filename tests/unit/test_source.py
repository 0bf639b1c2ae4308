"""
Unit Tests for runner_matrix.formula.source

Tests:
- Catalog requirement lookups
- `brew info --json=v2` parsing, caching and errors
"""

import json
import subprocess
import pytest
from unittest.mock import patch

from runner_matrix.errors import FormulaUnavailableError
from runner_matrix.formula.requirements import Arch, ArchRequirement, MacOSRequirement
from runner_matrix.formula.source import BrewInfoSource, CatalogFormulaSource
from runner_matrix.macos import MacOSVersion

from tests.fixtures.formulae import BREW_INFO_JSON


def completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestCatalogFormulaSource:
    """Test CatalogFormulaSource."""

    def test_requirements(self):
        source = CatalogFormulaSource({"arm-tool": [{"name": "arch", "arch": "arm64"}]})
        assert source.requirements("arm-tool") == [ArchRequirement(Arch.ARM64)]

    def test_none_means_no_requirements(self):
        source = CatalogFormulaSource({"pkg-a": None})
        assert source.requirements("pkg-a") == []

    def test_unknown_formula(self):
        with pytest.raises(FormulaUnavailableError) as exc_info:
            CatalogFormulaSource({}).requirements("nope")
        assert exc_info.value.name == "nope"

    def test_contains(self):
        source = CatalogFormulaSource({"pkg-a": []})
        assert "pkg-a" in source
        assert "pkg-b" not in source


class TestBrewInfoSource:
    """Test BrewInfoSource."""

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_requirements(self, mock_run):
        mock_run.return_value = completed(json.dumps(BREW_INFO_JSON))

        reqs = BrewInfoSource().requirements("mpfr")

        assert reqs == [
            MacOSRequirement(version=MacOSVersion.parse("13"), comparator=">="),
            ArchRequirement(Arch.ARM64),
        ]
        args, _ = mock_run.call_args
        assert args[0] == ["brew", "info", "--json=v2", "--formula", "mpfr"]

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_cached(self, mock_run):
        mock_run.return_value = completed(json.dumps(BREW_INFO_JSON))
        source = BrewInfoSource()

        source.requirements("mpfr")
        source.requirements("mpfr")

        assert mock_run.call_count == 1

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_no_requirements_key(self, mock_run):
        mock_run.return_value = completed(json.dumps({"formulae": [{"name": "wget"}]}))
        assert BrewInfoSource().requirements("wget") == []

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_unknown_formula(self, mock_run):
        mock_run.return_value = completed(stderr="Error: No available formula", returncode=1)

        with pytest.raises(FormulaUnavailableError, match="No available formula"):
            BrewInfoSource().requirements("nope")

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_unreadable_output(self, mock_run):
        mock_run.return_value = completed("not json")

        with pytest.raises(FormulaUnavailableError, match="unreadable"):
            BrewInfoSource().requirements("wget")

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_empty_result(self, mock_run):
        mock_run.return_value = completed(json.dumps({"formulae": [], "casks": []}))

        with pytest.raises(FormulaUnavailableError):
            BrewInfoSource().requirements("wget")

    @patch("runner_matrix.formula.source.subprocess.run")
    def test_brew_missing(self, mock_run):
        mock_run.side_effect = FileNotFoundError("brew")

        with pytest.raises(FormulaUnavailableError, match="cannot run brew"):
            BrewInfoSource().requirements("wget")
