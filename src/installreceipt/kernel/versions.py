"""Version parsing for manager releases and install directory names."""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional, Tuple, Union


_LEADING_NUMERIC = re.compile(r"^\s*v?(\d+(?:\.\d+)*)")
_PKG_VERSION = re.compile(r"^(?P<version>.+?)(?:_(?P<revision>\d+))?$")


def _strip_trailing_zeros(parts: Tuple[int, ...]) -> Tuple[int, ...]:
    end = len(parts)
    while end > 0 and parts[end - 1] == 0:
        end -= 1
    return parts[:end]


@total_ordering
@dataclass(frozen=True)
class ManagerVersion:
    """Version of the package manager that wrote a receipt.

    Only the leading dotted numeric part takes part in comparisons, so
    ``"4.0.17-12-gabcdef"`` compares equal to ``"4.0.17"``. A missing
    version (``raw is None``) sorts below every real version.
    """
    raw: Optional[str]
    parts: Tuple[int, ...] = ()

    @classmethod
    def parse(cls, value: Optional[str]) -> "ManagerVersion":
        if value is None:
            return cls(raw=None)
        match = _LEADING_NUMERIC.match(value)
        parts = tuple(int(p) for p in match.group(1).split(".")) if match else ()
        return cls(raw=value, parts=parts)

    @property
    def is_null(self) -> bool:
        return self.raw is None

    def _key(self) -> Tuple[int, Tuple[int, ...]]:
        if self.is_null:
            return (0, ())
        return (1, _strip_trailing_zeros(self.parts))

    @staticmethod
    def _coerce(other: object) -> Optional["ManagerVersion"]:
        if isinstance(other, ManagerVersion):
            return other
        if isinstance(other, str):
            return ManagerVersion.parse(other)
        return None

    def __eq__(self, other: object) -> bool:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        return self._key() == coerced._key()

    def __lt__(self, other: Union["ManagerVersion", str]) -> bool:
        coerced = self._coerce(other)
        if coerced is None:
            return NotImplemented
        return self._key() < coerced._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.raw or ""


@dataclass(frozen=True)
class PackageVersion:
    """Version of an installed package as used for its directory name.

    ``1.2.3_1`` is version ``1.2.3`` at revision 1. Head installs are named
    ``HEAD`` or ``HEAD-<commit>``.
    """
    version: str
    revision: int = 0

    @classmethod
    def parse(cls, text: str) -> "PackageVersion":
        match = _PKG_VERSION.match(text)
        if match is None:
            return cls(version=text)
        revision = match.group("revision")
        return cls(version=match.group("version"), revision=int(revision) if revision else 0)

    @property
    def is_head(self) -> bool:
        return self.version == "HEAD" or self.version.startswith("HEAD-")

    def __str__(self) -> str:
        if self.revision:
            return f"{self.version}_{self.revision}"
        return self.version
