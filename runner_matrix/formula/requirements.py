"""
Formula Requirements

Structured representation of the platform, architecture and macOS version
requirements a formula declares.

Classes:
    Platform: Operating system families a runner can provide
    Arch: CPU architectures a runner can provide
    MacOSRequirement: macOS-only, optionally bounded by a version
    LinuxRequirement: Linux-only
    ArchRequirement: Restricted to a single CPU architecture
    UnknownRequirement: Any other requirement (matches no predicate)

Example:
    >>> req = parse_requirement({"name": "macos", "version": ">= 13"})
    >>> req.version_specified, req.comparator, str(req.version)
    (True, '>=', '13')
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..macos import COMPARATORS, MacOSVersion

logger = logging.getLogger(__name__)


class Platform(Enum):
    """Operating system families."""
    MACOS = "macos"
    LINUX = "linux"


class Arch(Enum):
    """CPU architectures."""
    X86_64 = "x86_64"
    ARM64 = "arm64"

    @classmethod
    def parse(cls, value: Union[str, "Arch"]) -> "Arch":
        if isinstance(value, Arch):
            return value
        key = str(value).strip().lower().lstrip(":")
        try:
            return cls(ARCH_ALIASES.get(key, key))
        except ValueError:
            raise ValueError(f"Unknown architecture: {value!r}") from None


ARCH_ALIASES = {
    "intel": "x86_64",
    "amd64": "x86_64",
    "x86-64": "x86_64",
    "aarch64": "arm64",
    "arm": "arm64",
    "apple_silicon": "arm64",
}

# ">= 13", "<=10.15", "==ventura"
_VERSION_WITH_COMPARATOR = re.compile(r"^\s*(>=|<=|==|>|<)\s*(\S+)\s*$")


@dataclass(frozen=True)
class MacOSRequirement:
    """
    Requires macOS; bounded by `comparator version` when a version is set.

    An `==` requirement may list further releases in `alternatives`; any
    of them satisfies it.
    """
    version: Optional[MacOSVersion] = None
    comparator: str = ">="
    alternatives: Tuple[MacOSVersion, ...] = ()

    @property
    def version_specified(self) -> bool:
        return self.version is not None

    def allows(self, macos_version: MacOSVersion) -> bool:
        if self.version is None:
            return True
        if self.comparator == "==":
            return any(macos_version == v for v in (self.version,) + self.alternatives)
        return macos_version.compare(self.comparator, self.version)


@dataclass(frozen=True)
class LinuxRequirement:
    """Requires Linux."""


@dataclass(frozen=True)
class ArchRequirement:
    """Requires a specific CPU architecture."""
    arch: Arch


@dataclass(frozen=True)
class UnknownRequirement:
    """A requirement kind that does not restrict runner selection."""
    name: str = ""
    data: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


Requirement = Union[MacOSRequirement, LinuxRequirement, ArchRequirement, UnknownRequirement]


def _parse_macos(data: Dict[str, Any]) -> MacOSRequirement:
    version = data.get("version")
    comparator = data.get("comparator")

    if version is None or version in ("", [], ()):
        return MacOSRequirement()

    if isinstance(version, (list, tuple)):
        # [">=", "ventura"] as written in catalog files
        if len(version) == 2 and isinstance(version[0], str) and version[0] in COMPARATORS:
            comparator, version = version
        # ["catalina", "mojave"]: any of the listed releases
        elif comparator in (None, "=="):
            versions = [MacOSVersion.parse(v) for v in version]
            return MacOSRequirement(version=versions[0], comparator="==",
                                    alternatives=tuple(versions[1:]))
        else:
            raise ValueError(f"Comparator {comparator!r} with several versions")

    if comparator is None:
        match = _VERSION_WITH_COMPARATOR.match(str(version))
        if match:
            comparator, version = match.groups()
        else:
            comparator = ">="

    if comparator not in COMPARATORS:
        raise ValueError(f"Unknown comparator: {comparator!r}")

    return MacOSRequirement(version=MacOSVersion.parse(version), comparator=comparator)


def _parse_arch(data: Dict[str, Any]) -> ArchRequirement:
    # brew info reports the architecture in "version"
    value = data.get("arch") or data.get("version")
    if not value:
        raise ValueError("Architecture requirement without an architecture")
    return ArchRequirement(arch=Arch.parse(value))


def parse_requirement(data: Union[Dict[str, Any], str]) -> Requirement:
    """
    Parse one requirement entry.

    Accepts both the catalog shape and the `brew info --json=v2` shape.
    Malformed or unknown entries are returned as `UnknownRequirement`
    so they never restrict where a formula is tested.

    Args:
        data: Mapping with a "name" key, or a bare requirement name

    Returns:
        The parsed requirement
    """
    if isinstance(data, str):
        data = {"name": data}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed requirement: {data!r}")
        return UnknownRequirement(data={"value": data})

    name = str(data.get("name", "")).strip().lower()

    try:
        if name == "macos":
            return _parse_macos(data)
        if name == "linux":
            return LinuxRequirement()
        if name == "arch":
            return _parse_arch(data)
    except ValueError as e:
        logger.warning(f"Ignoring malformed {name} requirement {data!r}: {e}")
        return UnknownRequirement(name=name, data=data)

    return UnknownRequirement(name=name, data=data)


def parse_requirements(entries: Optional[List[Any]]) -> List[Requirement]:
    """Parse a requirement list; `None` means no requirements."""
    return [parse_requirement(entry) for entry in (entries or [])]
