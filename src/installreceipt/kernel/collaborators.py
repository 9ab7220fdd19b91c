"""Interfaces of the systems a receipt reads from but does not own.

Repositories, the dependency graph and the filesystem are implemented
elsewhere; receipts only rely on the small surface described here.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Repository(Protocol):
    """A package repository (tap) that formulae and casks are loaded from."""

    @property
    def name(self) -> str: ...

    def head_commit(self) -> Optional[str]: ...

    def is_installed(self) -> bool: ...


RepositoryLookup = Callable[[str], Optional[Repository]]


class DependencyLike(Protocol):
    """A resolved runtime dependency."""

    @property
    def name(self) -> str: ...

    def to_record(self) -> Dict[str, Any]:
        """Return ``full_name``, ``version``, ``revision`` and ``package_version``."""
        ...


class DependencySource(Protocol):
    """The dependency graph of a single package."""

    def runtime_dependencies(self, include_undeclared: bool) -> Sequence[DependencyLike]: ...


class FileSystem(Protocol):
    """Filesystem operations receipts need."""

    def read_bytes(self, path: Path) -> bytes: ...

    def exists(self, path: Path) -> bool: ...

    def atomic_write(self, path: Path, data: bytes) -> None: ...
