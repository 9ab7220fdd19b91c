"""Build option flags: an ordered, duplicate-free set of named options."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Union


@dataclass(frozen=True)
class Option:
    """A single build option, e.g. ``with-tests``.

    The flag form (``--with-tests``) is what receipts store on disk.
    """
    name: str
    description: str = field(default="", compare=False)

    @property
    def flag(self) -> str:
        return f"--{self.name}"

    def __str__(self) -> str:
        return self.flag


@dataclass(frozen=True)
class DeprecatedOption:
    """Maps an option name that was renamed to its current name."""
    old: str
    current: str


def _strip_flag(flag: str) -> str:
    return flag[2:] if flag.startswith("--") else flag


class Options:
    """Ordered set of options.

    Insertion order is preserved; adding an option that is already present
    is a no-op.
    """

    def __init__(self, options: Iterable[Option] = ()):
        self._options: List[Option] = []
        for option in options:
            if option not in self._options:
                self._options.append(option)

    @classmethod
    def from_flags(cls, flags: Union[Sequence[str], None]) -> "Options":
        """Create options from flag strings (``--`` prefix optional)."""
        return cls(Option(_strip_flag(str(flag))) for flag in (flags or []))

    def as_flags(self) -> List[str]:
        return [option.flag for option in self._options]

    def contains(self, name: Union[str, Option]) -> bool:
        """Check membership by option, bare name, or flag."""
        if isinstance(name, Option):
            return name in self._options
        bare = _strip_flag(name)
        return any(option.name == bare for option in self._options)

    def names(self) -> List[str]:
        return [option.name for option in self._options]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, Option)):
            return False
        return self.contains(name)

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __bool__(self) -> bool:
        return bool(self._options)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Options):
            return self._options == other._options
        return NotImplemented

    def __repr__(self) -> str:
        return f"Options({self.as_flags()!r})"

    def __str__(self) -> str:
        return " ".join(self.as_flags())


def remap_deprecated(deprecated: Iterable[DeprecatedOption], options: Options) -> Options:
    """Rename deprecated options to their current names.

    Each renamed option moves to the end of the set, keeping its description.
    """
    remapped = list(options)
    for deprecated_option in deprecated:
        match = next((o for o in remapped if o.name == deprecated_option.old), None)
        if match is None:
            continue
        remapped.remove(match)
        remapped.append(Option(deprecated_option.current, match.description))
    return Options(remapped)
