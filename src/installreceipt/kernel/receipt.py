"""Install receipt models.

A receipt records how a single package installation was produced. There are
two kinds, modelled as separate classes sharing a base of common fields:

- ``FormulaReceipt``: a package built from source or poured from a bottle.
- ``CaskReceipt``: a pre-built package the manager only tracks as an entry.

Python attribute names describe what a field means; the on-disk keys are the
historical ones (``homebrew_version``, ``poured_from_bottle``, ``tap``, ...)
and are wired up through pydantic aliases.
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from installreceipt.codes import DEFAULT_COMPILER, BuildSpec, ReceiptKind
from installreceipt.kernel.collaborators import Repository, RepositoryLookup
from installreceipt.kernel.options import Options
from installreceipt.kernel.versions import ManagerVersion

# Manager releases before this one recorded incorrect runtime dependency lists.
RUNTIME_DEPENDENCIES_MIN_VERSION = "1.1.6"

AttributeBag = Dict[str, Any]

_MAPPABLE_DEPENDENCY_TYPES = ("cask", "formula")


def _blank_to_none(value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    return value if value.strip() else None


def _none_to_false(value: Any) -> Any:
    return False if value is None else value


def _none_to_empty(value: Any) -> Any:
    return [] if value is None else value


@dataclass(frozen=True)
class Toolchain:
    """The C++ standard library and compiler a formula was built with."""
    stdlib: Optional[str]
    compiler: str


class DependencySnapshot(BaseModel):
    """A runtime dependency as recorded at install time.

    Keys missing from the source document stay missing when the snapshot is
    written back (cask dependency entries have no revision).
    """
    full_name: str
    version: Optional[str] = None
    revision: Optional[int] = None
    package_version: Optional[str] = Field(default=None, alias="pkg_version")
    declared_directly: bool = False

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("version", "package_version", mode="before")
    @classmethod
    def _stringify_version(cls, v: Any) -> Any:
        return v if v is None or isinstance(v, str) else str(v)

    def to_attributes(self) -> AttributeBag:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CaskDependencies(BaseModel):
    """Cask runtime dependencies, keyed by requirement type.

    ``cask`` and ``formula`` entries are dependency snapshots. Other
    requirement types (``macos``, ``arch``, ...) are kept as recorded.
    """
    cask: Optional[List[DependencySnapshot]] = None
    formula: Optional[List[DependencySnapshot]] = None
    requirements: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_requirements(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "requirements" in data:
            return data
        split: Dict[str, Any] = {k: data[k] for k in _MAPPABLE_DEPENDENCY_TYPES if k in data}
        split["requirements"] = {
            k: v for k, v in data.items() if k not in _MAPPABLE_DEPENDENCY_TYPES
        }
        return split

    def to_attributes(self) -> AttributeBag:
        attributes: AttributeBag = {}
        for key in _MAPPABLE_DEPENDENCY_TYPES:
            snapshots = getattr(self, key)
            if snapshots is not None:
                attributes[key] = [s.to_attributes() for s in snapshots]
        attributes.update(copy.deepcopy(self.requirements))
        return attributes


class SpecVersions(BaseModel):
    """Versions of each spec a formula declared when it was installed."""
    stable: Optional[str] = None
    head: Optional[str] = None
    version_scheme: int = 0

    model_config = ConfigDict(extra="allow")

    # Manager releases 1.5.13 through 4.0.17 wrote "" instead of null.
    @field_validator("stable", "head", mode="before")
    @classmethod
    def _normalize_blank(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("version_scheme", mode="before")
    @classmethod
    def _default_scheme(cls, v: Any) -> Any:
        return 0 if v is None else v


class FormulaSource(BaseModel):
    """Where a formula was loaded from.

    Keys this model does not know are kept, so rewriting a receipt from
    another manager release does not lose them.
    """
    path: Optional[str] = None
    repository_name: Optional[str] = Field(default=None, alias="tap")
    repository_head_commit: Optional[str] = Field(default=None, alias="tap_git_head")
    build_spec: BuildSpec = Field(default=BuildSpec.STABLE, alias="spec")
    versions: SpecVersions = Field(default_factory=SpecVersions)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_attributes(self) -> AttributeBag:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class CaskSource(BaseModel):
    """Where a cask was loaded from; unknown keys are kept."""
    path: Optional[str] = None
    repository_name: Optional[str] = Field(default=None, alias="tap")
    repository_head_commit: Optional[str] = Field(default=None, alias="tap_git_head")
    declared_version: Optional[str] = Field(default=None, alias="version")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("declared_version", mode="before")
    @classmethod
    def _stringify_version(cls, v: Any) -> Any:
        return v if v is None or isinstance(v, str) else str(v)

    def to_attributes(self) -> AttributeBag:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class _ReceiptBase(BaseModel):
    """Fields and queries shared by every receipt kind.

    Never instantiated directly: each kind supplies ``_provenance()`` for
    ``describe()``.
    """
    manager_version: Optional[str] = Field(default=None, alias="homebrew_version")
    installed_as_dependency: bool = False
    installed_on_request: bool = False
    install_time: Optional[int] = Field(default=None, alias="time")
    cpu_arch: Optional[str] = Field(default=None, alias="arch")
    build_environment: Optional[Dict[str, Any]] = Field(default=None, alias="built_on")
    loaded_from_remote_index: bool = Field(default=False, alias="loaded_from_api")
    receipt_path: Optional[Path] = Field(default=None, exclude=True)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator(
        "installed_as_dependency", "installed_on_request", "loaded_from_remote_index",
        mode="before",
    )
    @classmethod
    def _coerce_missing_flag(cls, v: Any) -> Any:
        return _none_to_false(v)

    def parsed_manager_version(self) -> ManagerVersion:
        return ManagerVersion.parse(self.manager_version)

    def effective_runtime_dependencies(self):
        """Recorded runtime dependencies, or None when they cannot be trusted.

        None means "unknown", not "no dependencies".
        """
        if self.parsed_manager_version() >= RUNTIME_DEPENDENCIES_MIN_VERSION:
            return self.runtime_dependencies
        return None

    def repository(self, lookup: RepositoryLookup) -> Optional[Repository]:
        name = self.source.repository_name
        return lookup(name) if name else None

    def set_repository(self, repository: Union[Repository, str, None]) -> None:
        name = getattr(repository, "name", repository)
        self.source.repository_name = name

    def _describe_options(self) -> List[str]:
        return []

    def describe(self) -> str:
        """One-line, human-readable summary of how the package got installed."""
        parts = [self._provenance()]
        if self.loaded_from_remote_index:
            parts.append("using the package index API")
        if self.install_time is not None:
            parts.append(datetime.fromtimestamp(self.install_time).strftime("on %Y-%m-%d at %H:%M:%S"))
        parts.extend(self._describe_options())
        return " ".join(parts)

    def __str__(self) -> str:
        return self.describe()


class FormulaReceipt(_ReceiptBase):
    """Receipt of a formula built from source or poured from a bottle."""
    kind: Literal["formula"] = Field(default=ReceiptKind.FORMULA.value, frozen=True, exclude=True)
    used_option_flags: List[str] = Field(default_factory=list, alias="used_options")
    unused_option_flags: List[str] = Field(default_factory=list, alias="unused_options")
    was_built_as_binary_artifact: bool = Field(default=False, alias="built_as_bottle")
    was_installed_from_binary_artifact: bool = Field(default=False, alias="poured_from_bottle")
    source_modified_time: int = 0
    compiler_id: Optional[str] = Field(default=None, alias="compiler")
    standard_library_id: Optional[str] = Field(default=None, alias="stdlib")
    aliases: List[str] = Field(default_factory=list)
    changed_files: Optional[List[str]] = None
    runtime_dependencies: Optional[List[DependencySnapshot]] = None
    source: FormulaSource = Field(default_factory=FormulaSource)

    @field_validator("used_option_flags", "unused_option_flags", mode="before")
    @classmethod
    def _normalize_flags(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return Options.from_flags(v).as_flags()
        return v

    @field_validator("was_built_as_binary_artifact", "was_installed_from_binary_artifact", mode="before")
    @classmethod
    def _coerce_missing_bottle_flag(cls, v: Any) -> Any:
        return _none_to_false(v)

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_missing_aliases(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @field_validator("source_modified_time", mode="before")
    @classmethod
    def _default_source_modified_time(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("changed_files", mode="before")
    @classmethod
    def _stringify_changed_files(cls, v: Any) -> Any:
        if v is None:
            return None
        return [str(p) for p in v]

    # Build spec and versions

    def is_head_build(self) -> bool:
        return self.source.build_spec == BuildSpec.HEAD

    def is_stable_build(self) -> bool:
        return self.source.build_spec == BuildSpec.STABLE

    def stable_version(self) -> Optional[str]:
        return self.source.versions.stable

    def head_version(self) -> Optional[str]:
        return self.source.versions.head

    @property
    def version_scheme(self) -> int:
        return self.source.versions.version_scheme

    def source_modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.source_modified_time or 0)

    # Options

    def used_options(self) -> Options:
        return Options.from_flags(self.used_option_flags)

    def unused_options(self) -> Options:
        return Options.from_flags(self.unused_option_flags)

    def has_any_options(self) -> bool:
        return bool(self.used_option_flags) or bool(self.unused_option_flags)

    def has_option(self, flag: str) -> bool:
        return self.used_options().contains(flag)

    def requests_variant(self, name: str) -> bool:
        """Whether the install was built with the ``name`` variant.

        ``without-<name>`` only counts when it was offered and not chosen,
        so it is looked up among the unused options.
        """
        return self.has_option(f"with-{name}") or self.unused_options().contains(f"without-{name}")

    def lacks_variant(self, name: str) -> bool:
        return not self.requests_variant(name)

    # Toolchain and bottles

    def effective_compiler(self, default_compiler: Optional[str] = None) -> str:
        if self.compiler_id:
            return self.compiler_id
        return default_compiler or DEFAULT_COMPILER

    def toolchain(self, default_compiler: Optional[str] = None) -> Toolchain:
        return Toolchain(
            stdlib=self.standard_library_id or None,
            compiler=self.effective_compiler(default_compiler),
        )

    def is_binary_artifact(self) -> bool:
        return self.was_built_as_binary_artifact

    def was_built_fresh(self) -> bool:
        """Built as a bottle here rather than poured from one."""
        return self.was_built_as_binary_artifact and not self.was_installed_from_binary_artifact

    def add_changed_files(self, paths) -> None:
        changed = list(self.changed_files or [])
        for path in paths:
            if str(path) not in changed:
                changed.append(str(path))
        self.changed_files = changed

    def _provenance(self) -> str:
        return "Poured from bottle" if self.was_installed_from_binary_artifact else "Built from source"

    def _describe_options(self) -> List[str]:
        used = self.used_options()
        if not used:
            return []
        return ["with:", str(used)]


class CaskReceipt(_ReceiptBase):
    """Receipt of a pre-built package tracked as a manager entry."""
    kind: Literal["cask"] = Field(default=ReceiptKind.CASK.value, frozen=True, exclude=True)
    artifact_source_only: bool = Field(default=False, alias="caskfile_only")
    uninstall_artifacts: List[Dict[str, Any]] = Field(default_factory=list)
    runtime_dependencies: Optional[CaskDependencies] = None
    source: CaskSource = Field(default_factory=CaskSource)

    @field_validator("artifact_source_only", mode="before")
    @classmethod
    def _coerce_missing_caskfile_only(cls, v: Any) -> Any:
        return _none_to_false(v)

    @field_validator("uninstall_artifacts", mode="before")
    @classmethod
    def _coerce_missing_artifacts(cls, v: Any) -> Any:
        return _none_to_empty(v)

    @property
    def declared_version(self) -> Optional[str]:
        return self.source.declared_version

    def _provenance(self) -> str:
        return "Installed"


ReceiptRecord = Annotated[Union[FormulaReceipt, CaskReceipt], Field(discriminator="kind")]

_RECORD_ADAPTER = TypeAdapter(ReceiptRecord)


def record_from_attributes(
    attributes: AttributeBag,
    kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
    path: Union[str, Path, None] = None,
) -> Union[FormulaReceipt, CaskReceipt]:
    """Validate a canonical attribute bag into the receipt model for ``kind``.

    Raises:
        pydantic.ValidationError: If a field has the wrong shape.
    """
    data = dict(attributes)
    data["kind"] = ReceiptKind(kind).value
    if path is not None:
        data["receipt_path"] = Path(path)
    return _RECORD_ADAPTER.validate_python(data)
