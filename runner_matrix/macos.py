"""
macOS Release Catalog

Release-ordered macOS versions and the catalog of releases the CI fleet
knows about, flagged as pre-release or outdated (end-of-life).

Classes:
    MacOSVersion: A macOS major version, ordered by release chronology
    MacOSRelease: One catalog entry with its support flags
    MacOSCatalog: All known releases, newest first

Example:
    >>> MacOSVersion.parse("ventura") >= MacOSVersion.parse("10.15")
    True
    >>> catalog = MacOSCatalog(oldest_supported="11", newest_unsupported="14")
    >>> [str(r.version) for r in catalog.supported_releases()]
    ['13', '12', '11']
"""

import operator
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

# Newest first, matching the order runners are emitted in.
SYMBOLS: Dict[str, str] = {
    "tahoe": "26",
    "sequoia": "15",
    "sonoma": "14",
    "ventura": "13",
    "monterey": "12",
    "big_sur": "11",
    "catalina": "10.15",
    "mojave": "10.14",
    "high_sierra": "10.13",
    "sierra": "10.12",
    "el_capitan": "10.11",
}

COMPARATORS: Dict[str, Callable[[object, object], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
    ">": operator.gt,
    "<": operator.lt,
    "==": operator.eq,
}


@dataclass(frozen=True, order=True)
class MacOSVersion:
    """
    A macOS version compared by release order.

    Versions are stored as integer tuples so that 10.15 sorts before 11
    and 11 before 26.
    """
    parts: Tuple[int, ...]

    @classmethod
    def parse(cls, value: Union[str, int, "MacOSVersion"]) -> "MacOSVersion":
        """Parse a version string ("13", "10.15") or a release symbol ("ventura")."""
        if isinstance(value, MacOSVersion):
            return value
        text = str(value).strip().lower()
        text = SYMBOLS.get(text, text)
        try:
            parts = tuple(int(part) for part in text.split("."))
        except ValueError:
            raise ValueError(f"Invalid macOS version: {value!r}") from None
        # "13.0" and "13" name the same major release
        while len(parts) > 1 and parts[-1] == 0:
            parts = parts[:-1]
        return cls(parts)

    @property
    def symbol(self) -> str:
        for name, version in SYMBOLS.items():
            if version == str(self):
                return name
        return ""

    def compare(self, comparator: str, other: "MacOSVersion") -> bool:
        """Evaluate `self <comparator> other`."""
        try:
            compare = COMPARATORS[comparator]
        except KeyError:
            raise ValueError(f"Unknown comparator: {comparator!r}") from None
        return compare(self, MacOSVersion.parse(other))

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.parts)


@dataclass(frozen=True)
class MacOSRelease:
    """A catalog entry with its support status."""
    symbol: str
    version: MacOSVersion
    prerelease: bool = False
    outdated: bool = False

    @property
    def supported(self) -> bool:
        return not (self.prerelease or self.outdated)


class MacOSCatalog:
    """
    Ordered catalog of known macOS releases.

    A release is a pre-release when it is at or above `newest_unsupported`
    and outdated when it is below `oldest_supported`.

    Attributes:
        oldest_supported: Oldest release still tested
        newest_unsupported: First release considered pre-release
    """

    def __init__(self, oldest_supported: Union[str, MacOSVersion] = "11",
                 newest_unsupported: Union[str, MacOSVersion] = "14",
                 symbols: Optional[Dict[str, str]] = None):
        self.oldest_supported = MacOSVersion.parse(oldest_supported)
        self.newest_unsupported = MacOSVersion.parse(newest_unsupported)
        self._symbols = dict(symbols if symbols is not None else SYMBOLS)

    def releases(self) -> List[MacOSRelease]:
        return [
            MacOSRelease(
                symbol=symbol,
                version=MacOSVersion.parse(version),
                prerelease=MacOSVersion.parse(version) >= self.newest_unsupported,
                outdated=MacOSVersion.parse(version) < self.oldest_supported,
            )
            for symbol, version in self._symbols.items()
        ]

    def supported_releases(self) -> Iterator[MacOSRelease]:
        """Releases that are neither pre-release nor outdated, newest first."""
        return (release for release in self.releases() if release.supported)

    def __iter__(self) -> Iterator[MacOSRelease]:
        return iter(self.releases())

    def __len__(self) -> int:
        return len(self._symbols)
