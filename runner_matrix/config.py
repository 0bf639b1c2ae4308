"""Configuration for runner matrix generation.

Loads from an optional YAML file with environment variable overrides.
Pattern: RUNNER_MATRIX__{SECTION}__{KEY} overrides nested YAML keys.
Example: RUNNER_MATRIX__LINUX__TIMEOUT=2880

The CI-provided variables (HOMEBREW_LINUX_RUNNER, HOMEBREW_LINUX_CLEANUP,
GITHUB_RUN_ID, GITHUB_RUN_ATTEMPT, GITHUB_OUTPUT) take precedence over both.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .macos import MacOSCatalog, MacOSVersion

logger = logging.getLogger(__name__)


# --- Linux ---


class LinuxRunnerConfig(BaseModel):
    runner: str = ""  # from env: HOMEBREW_LINUX_RUNNER
    cleanup: Optional[bool] = None  # from env: HOMEBREW_LINUX_CLEANUP
    image: str = "ghcr.io/homebrew/ubuntu22.04:master"
    options: str = "--user=linuxbrew -e GITHUB_ACTIONS_HOMEBREW_SELF_HOSTED"
    workdir: str = "/github/home"
    timeout: int = Field(default=4320, gt=0, description="Job timeout in minutes")


# --- macOS ---


class MacOSPolicyConfig(BaseModel):
    """Which macOS releases are tested and on what kind of hardware.

    Apple Silicon bands:
        >= ephemeral_arm64_since                       ephemeral runner
        >= ephemeral_arm64_direct_since (not dependents) ephemeral runner
        >= bare_metal_arm64_since                      shared bare metal, cleanup
        below                                          no arm64 runner
    """
    oldest_supported: str = "11"
    newest_unsupported: str = "14"
    ephemeral_arm64_since: str = "13"  # ventura
    ephemeral_arm64_direct_since: str = "12"  # monterey
    bare_metal_arm64_since: str = "11"  # big_sur

    @field_validator(
        "oldest_supported",
        "newest_unsupported",
        "ephemeral_arm64_since",
        "ephemeral_arm64_direct_since",
        "bare_metal_arm64_since",
        mode="before",
    )
    @classmethod
    def _normalize_version(cls, value) -> str:
        return str(MacOSVersion.parse(value))

    def version(self, field_name: str) -> MacOSVersion:
        return MacOSVersion.parse(getattr(self, field_name))

    def catalog(self) -> MacOSCatalog:
        return MacOSCatalog(
            oldest_supported=self.oldest_supported,
            newest_unsupported=self.newest_unsupported,
        )


# --- GitHub Actions run ---


class GitHubRunConfig(BaseModel):
    run_id: str = ""  # from env: GITHUB_RUN_ID
    run_attempt: str = ""  # from env: GITHUB_RUN_ATTEMPT
    output: Optional[str] = None  # from env: GITHUB_OUTPUT

    @field_validator("run_id", "run_attempt", mode="before")
    @classmethod
    def _as_string(cls, value) -> str:
        return "" if value is None else str(value)

    @property
    def ephemeral_suffix(self) -> str:
        """Unique per run and attempt, so ephemeral runner labels never collide."""
        return f"-{self.run_id}-{self.run_attempt}"


# --- Top level ---


class RunnerMatrixConfig(BaseModel):
    linux: LinuxRunnerConfig = LinuxRunnerConfig()
    macos: MacOSPolicyConfig = MacOSPolicyConfig()
    github: GitHubRunConfig = GitHubRunConfig()
    no_op_runner: str = "ubuntu-latest"

    def missing_settings(self) -> List[str]:
        """Environment variables whose values are still missing."""
        missing = []
        if not self.linux.runner:
            missing.append("HOMEBREW_LINUX_RUNNER")
        if self.linux.cleanup is None:
            missing.append("HOMEBREW_LINUX_CLEANUP")
        if not self.github.run_id:
            missing.append("GITHUB_RUN_ID")
        if not self.github.run_attempt:
            missing.append("GITHUB_RUN_ATTEMPT")
        return missing

    def require_complete(self) -> "RunnerMatrixConfig":
        missing = self.missing_settings()
        if missing:
            raise ConfigurationError(f"{missing[0]} is not defined")
        return self


def _section(config_dict: dict, name: str) -> dict:
    """Nested mapping `name`, created if absent; an empty YAML section is `{}`."""
    section = config_dict.get(name)
    if section is None:
        section = config_dict[name] = {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section {name!r} must be a mapping")
    return section


def _apply_env_overrides(config_dict: dict, environ: Mapping[str, str],
                         prefix: str = "RUNNER_MATRIX") -> dict:
    """Apply environment variable overrides to config dict.

    Pattern: RUNNER_MATRIX__SECTION__KEY=value maps to config[section][key] = value
    """
    for key, value in environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        parts = key[len(prefix) + 2 :].lower().split("__")
        target = config_dict
        for part in parts[:-1]:
            target = _section(target, part)
        # Type coercion for common cases
        if value.lower() in ("true", "false"):
            value = value.lower() == "true"
        elif value.isdigit():
            value = int(value)
        target[parts[-1]] = value
    return config_dict


def _apply_ci_variables(config_dict: dict, environ: Mapping[str, str]) -> dict:
    linux = _section(config_dict, "linux")
    github = _section(config_dict, "github")

    if environ.get("HOMEBREW_LINUX_RUNNER"):
        linux["runner"] = environ["HOMEBREW_LINUX_RUNNER"]
    if "HOMEBREW_LINUX_CLEANUP" in environ:
        linux["cleanup"] = environ["HOMEBREW_LINUX_CLEANUP"] == "true"
    if environ.get("GITHUB_RUN_ID"):
        github["run_id"] = environ["GITHUB_RUN_ID"]
    if environ.get("GITHUB_RUN_ATTEMPT"):
        github["run_attempt"] = environ["GITHUB_RUN_ATTEMPT"]
    if environ.get("GITHUB_OUTPUT"):
        github["output"] = environ["GITHUB_OUTPUT"]
    return config_dict


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunnerMatrixConfig:
    """Load configuration from YAML file with env overrides.

    Priority: CI variables > RUNNER_MATRIX__* overrides > YAML file > defaults

    Raises:
        ConfigurationError: If the file is missing or the values are invalid
    """
    environ = os.environ if environ is None else environ
    config_dict: Dict = {}

    # 1. Load YAML if given
    if config_path is None:
        config_path = environ.get("RUNNER_MATRIX_CONFIG")
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError(f"Config root must be a mapping: {path}")
        logger.debug(f"Loaded config from {path}")

    # 2. Apply env overrides
    config_dict = _apply_env_overrides(config_dict, environ)

    # 3. CI-provided variables
    config_dict = _apply_ci_variables(config_dict, environ)

    try:
        return RunnerMatrixConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
