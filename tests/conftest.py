"""
Runner Matrix Test Configuration

Shared fixtures for all tests.
"""
import os
import pytest
from unittest.mock import patch

from runner_matrix.catalog import FormulaCatalog
from runner_matrix.config import GitHubRunConfig, LinuxRunnerConfig, RunnerMatrixConfig

from tests.fixtures.formulae import SAMPLE_CATALOG


# =============================================================================
# FIXTURES: Configuration
# =============================================================================

@pytest.fixture
def config() -> RunnerMatrixConfig:
    """Complete configuration with default macOS policy (11 <= tested < 14)."""
    return RunnerMatrixConfig(
        linux=LinuxRunnerConfig(runner="linux-self-hosted-1", cleanup=True),
        github=GitHubRunConfig(run_id="12345", run_attempt="1"),
    )


@pytest.fixture
def ci_env(tmp_path):
    """Environment of a GitHub Actions run."""
    output = tmp_path / "github_output"
    with patch.dict(os.environ, {
        "HOMEBREW_LINUX_RUNNER": "linux-self-hosted-1",
        "HOMEBREW_LINUX_CLEANUP": "true",
        "GITHUB_RUN_ID": "12345",
        "GITHUB_RUN_ATTEMPT": "1",
        "GITHUB_OUTPUT": str(output),
    }):
        yield output


# =============================================================================
# FIXTURES: Formulae
# =============================================================================

@pytest.fixture
def catalog() -> FormulaCatalog:
    return FormulaCatalog.from_dict(SAMPLE_CATALOG)


@pytest.fixture
def registry(catalog):
    return catalog.registry()


@pytest.fixture
def formulae(registry):
    """Resolve formula names to compatibility views."""
    def _formulae(*names):
        return registry.get_many(names)
    return _formulae

