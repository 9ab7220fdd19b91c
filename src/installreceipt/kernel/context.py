"""Live install contexts that receipts are built from.

The installer fills one of these in from the package definition it is
about to install (or has just installed).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from installreceipt.codes import RECEIPT_FILENAME, BuildSpec
from installreceipt.kernel.collaborators import DependencyLike, DependencySource, Repository
from installreceipt.kernel.options import DeprecatedOption


@dataclass
class FormulaInstallContext:
    """What the installer knows about a formula installation."""
    full_name: str
    prefix: Path
    specified_path: Optional[str] = None
    repository: Optional[Repository] = None
    active_spec: BuildSpec = BuildSpec.STABLE
    stable_version: Optional[str] = None
    head_version: Optional[str] = None
    version_scheme: int = 0
    used_options: Sequence[str] = ()
    unused_options: Sequence[str] = ()
    build_as_bottle: bool = False
    loaded_from_api: bool = False
    source_modified_time: Optional[float] = None
    aliases: Sequence[str] = ()
    dependencies: Optional[DependencySource] = None
    declared_dependencies: Sequence[str] = ()
    # Used when looking up the receipt of an existing installation.
    options: Sequence[str] = ()
    deprecated_options: Sequence[DeprecatedOption] = ()
    candidate_prefixes: Sequence[Path] = ()

    @property
    def receipt_path(self) -> Path:
        return Path(self.prefix) / RECEIPT_FILENAME


@dataclass
class CaskInstallContext:
    """What the installer knows about a cask installation.

    ``depends_on`` maps requirement types to their values; ``cask`` and
    ``formula`` entries are lists of names resolved through
    ``resolve_dependency(type, name)``.
    """
    full_name: str
    metadata_dir: Path
    sourcefile_path: Optional[str] = None
    repository: Optional[Repository] = None
    version: Optional[str] = None
    loaded_from_api: bool = False
    caskfile_only: bool = False
    depends_on: Mapping[str, Any] = field(default_factory=dict)
    resolve_dependency: Optional[Callable[[str, str], DependencyLike]] = None
    uninstall_artifacts: Sequence[Dict[str, Any]] = ()

    @property
    def receipt_path(self) -> Path:
        return Path(self.metadata_dir) / RECEIPT_FILENAME

    def uninstall_artifact_list(self) -> List[Dict[str, Any]]:
        return [dict(artifact) for artifact in self.uninstall_artifacts]
