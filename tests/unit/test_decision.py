"""
Unit Tests for runner_matrix.decision.engine

Tests:
- RunnerFilter acceptance
- Direct coverage (formulae_need_runner)
- Dependents coverage (formulae_have_untested_dependents)
- add_runner dispatch and the deleted-formulae override
"""

import pytest
from unittest.mock import MagicMock

from runner_matrix.decision.engine import (
    RunnerFilter,
    add_runner,
    formulae_have_untested_dependents,
    formulae_need_runner,
)
from runner_matrix.formula.requirements import Arch, Platform
from runner_matrix.macos import MacOSVersion

LINUX = RunnerFilter(reject_platform=Platform.MACOS, reject_arch=Arch.ARM64)
MACOS = RunnerFilter(reject_platform=Platform.LINUX)
MACOS_INTEL = RunnerFilter(reject_platform=Platform.LINUX, reject_arch=Arch.ARM64)
MACOS_ARM64 = RunnerFilter(reject_platform=Platform.LINUX, reject_arch=Arch.X86_64)


def on_macos(version):
    return RunnerFilter(reject_platform=Platform.LINUX,
                        select_macos_version=MacOSVersion.parse(version))


class TestRunnerFilter:
    """Test RunnerFilter."""

    def test_empty_filter_accepts_everything(self, formulae):
        assert all(RunnerFilter().accepts(f) for f in formulae("glibc", "xcodegen", "arm-tool"))

    def test_rejects_platform(self, formulae):
        glibc, xcodegen = formulae("glibc", "xcodegen")
        assert LINUX.accepts(glibc) is True
        assert LINUX.accepts(xcodegen) is False
        assert MACOS.accepts(glibc) is False

    def test_rejects_arch(self, formulae):
        arm, intel = formulae("arm-tool", "intel-tool")
        assert MACOS_INTEL.accepts(arm) is False
        assert MACOS_INTEL.accepts(intel) is True
        assert MACOS_ARM64.accepts(intel) is False

    def test_selects_macos_version(self, formulae):
        (ventura_tool,) = formulae("ventura-tool")
        assert on_macos("12").accepts(ventura_tool) is False
        assert on_macos("13").accepts(ventura_tool) is True

    def test_describe(self):
        assert LINUX.describe() == "no macos, no arm64"
        assert on_macos("13").describe() == "no linux, macOS 13"
        assert RunnerFilter().describe() == "any runner"


class TestDirectCoverage:
    """Test formulae_need_runner()."""

    def test_unrestricted(self, formulae):
        assert formulae_need_runner(formulae("pkg-a"), LINUX) is True
        assert formulae_need_runner(formulae("pkg-a"), MACOS) is True

    def test_empty_batch(self):
        assert formulae_need_runner([], LINUX) is False

    def test_all_filtered_out(self, formulae):
        assert formulae_need_runner(formulae("xcodegen", "arm-tool"), LINUX) is False

    def test_one_survivor_is_enough(self, formulae):
        assert formulae_need_runner(formulae("xcodegen", "glibc"), LINUX) is True

    def test_version_filter(self, formulae):
        batch = formulae("ventura-tool")
        assert formulae_need_runner(batch, on_macos("12")) is False
        assert formulae_need_runner(batch, on_macos("13")) is True


class TestDependentsCoverage:
    """Test formulae_have_untested_dependents()."""

    def test_untested_dependents(self, formulae):
        assert formulae_have_untested_dependents(formulae("openssl@3"), LINUX) is True

    def test_all_dependents_in_batch(self, formulae):
        batch = formulae("openssl@3", "curl", "wget", "python@3.11")
        assert formulae_have_untested_dependents(batch, LINUX) is False

    def test_partial_batch(self, formulae):
        # curl's only dependent (wget) is missing from the batch
        assert formulae_have_untested_dependents(formulae("curl"), LINUX) is True
        assert formulae_have_untested_dependents(formulae("curl", "wget"), LINUX) is False

    def test_no_dependents(self, formulae):
        assert formulae_have_untested_dependents(formulae("pkg-a", "wget"), LINUX) is False

    def test_excluded_formula_skipped(self, formulae):
        """A Linux-only formula's dependents never need a macOS runner."""
        batch = formulae("linux-headers@5.15")
        assert formulae_have_untested_dependents(batch, LINUX) is True
        assert formulae_have_untested_dependents(batch, MACOS) is False

    def test_excluded_formula_does_not_query(self, registry):
        formula = registry.get("linux-headers@5.15")
        formulae_have_untested_dependents([formula], MACOS)
        assert formula.dependents_cached(False) is False

    def test_incompatible_version_skipped(self, registry):
        formula = registry.get("old-mac-tool")
        assert formulae_have_untested_dependents([formula], on_macos("13"), True) is False
        assert formula.dependents_cached(True) is False

    def test_dependents_filtered(self, formulae):
        """zlib-ng's only dependent is Linux-only."""
        batch = formulae("zlib-ng")
        assert formulae_have_untested_dependents(batch, LINUX) is True
        assert formulae_have_untested_dependents(batch, MACOS) is False

    def test_simulated_macos_dependents(self, formulae):
        batch = formulae("libmac")
        assert formulae_have_untested_dependents(batch, MACOS, simulate_macos_on_linux=False) is False
        assert formulae_have_untested_dependents(batch, MACOS, simulate_macos_on_linux=True) is True

    def test_dependents_filtered_by_version(self):
        formula = MagicMock(name="formula")
        formula.name = "libfoo"
        formula.macos_only = formula.linux_only = False
        formula.x86_64_only = formula.arm64_only = False
        formula.compatible_with.return_value = True

        dependent = MagicMock(name="dependent")
        dependent.name = "ventura-app"
        dependent.macos_only = dependent.linux_only = False
        dependent.x86_64_only = dependent.arm64_only = False
        dependent.compatible_with.side_effect = lambda v: v >= MacOSVersion.parse("13")
        formula.dependents.return_value = (dependent,)

        assert formulae_have_untested_dependents([formula], on_macos("12"), True) is False
        assert formulae_have_untested_dependents([formula], on_macos("13"), True) is True
        formula.dependents.assert_called_with(True)


class TestAddRunner:
    """Test add_runner() dispatch."""

    def test_direct_mode(self, formulae):
        assert add_runner(formulae("pkg-a"), dependents=False, runner_filter=LINUX) is True
        assert add_runner(formulae("xcodegen"), dependents=False, runner_filter=LINUX) is False

    def test_deleted_formulae_force_runner(self, formulae):
        assert add_runner(
            formulae("xcodegen"), dependents=False,
            deleted_formulae=["old-formula"], runner_filter=LINUX,
        ) is True

    def test_deleted_formulae_with_empty_batch(self):
        assert add_runner([], dependents=False, deleted_formulae=["old"], runner_filter=MACOS) is True

    def test_empty_deleted_list(self, formulae):
        assert add_runner(formulae("xcodegen"), dependents=False,
                          deleted_formulae=[], runner_filter=LINUX) is False

    def test_dependents_mode_ignores_deleted(self, formulae):
        batch = formulae("wget")
        assert add_runner(batch, dependents=True, deleted_formulae=["old"], runner_filter=LINUX) is False

    def test_dependents_mode(self, formulae):
        assert add_runner(formulae("openssl@3"), dependents=True, runner_filter=LINUX) is True

    def test_default_filter(self, formulae):
        assert add_runner(formulae("glibc"), dependents=False) is True

    @pytest.mark.parametrize("simulate", [False, True])
    def test_passes_simulation_flag(self, simulate):
        formula = MagicMock()
        formula.name = "libfoo"
        formula.macos_only = formula.linux_only = False
        formula.x86_64_only = formula.arm64_only = False
        formula.dependents.return_value = ()

        add_runner([formula], dependents=True, runner_filter=LINUX,
                   simulate_macos_on_linux=simulate)

        formula.dependents.assert_called_once_with(simulate)
