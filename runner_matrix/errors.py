"""Error types raised while determining test runners."""

from typing import Optional


class ConfigurationError(ValueError):
    """A required configuration value is missing or invalid."""


class FormulaUnavailableError(LookupError):
    """The formula data source does not know the requested formula."""

    def __init__(self, name: str, reason: str = ""):
        self.name = name
        message = f"No available formula with the name \"{name}\""
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DependentQueryError(RuntimeError):
    """Fetching the dependents of a formula failed."""

    def __init__(self, name: str, returncode: Optional[int] = None, stderr: str = ""):
        self.name = name
        self.returncode = returncode
        self.stderr = stderr
        message = f"Failed to query dependents of {name}"
        if returncode is not None:
            message = f"{message} (exit status {returncode})"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
