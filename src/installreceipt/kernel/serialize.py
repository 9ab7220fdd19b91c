"""Project receipts into their on-disk attribute views.

Three views exist:

- full view: everything a formula receipt file holds (casks use their
  manager-entry view as their full view)
- manager-entry view: what the manager needs to track an installed entry
- bottle view: the subset packed into a bottle; it leaves out option flags
  and source paths because those belong to the installing machine

Key order within each view is fixed so files are byte-stable.
"""

from typing import Any, List, Optional, Union

from installreceipt._internal.canonical_json import pretty_dumps
from installreceipt.kernel.receipt import AttributeBag, CaskReceipt, FormulaReceipt

Receipt = Union[FormulaReceipt, CaskReceipt]


def _dependencies_attributes(record: Receipt) -> Any:
    dependencies = record.effective_runtime_dependencies()
    if dependencies is None:
        return None
    if isinstance(dependencies, list):
        return [d.to_attributes() for d in dependencies]
    return dependencies.to_attributes()


def _changed_files(record: FormulaReceipt) -> Optional[List[str]]:
    if record.changed_files is None:
        return None
    return [str(p) for p in record.changed_files]


def _stdlib(record: FormulaReceipt) -> Optional[str]:
    return record.standard_library_id or None


def _drop_blank_stdlib(attributes: AttributeBag) -> AttributeBag:
    if not attributes.get("stdlib"):
        attributes.pop("stdlib", None)
    return attributes


def _formula_full_view(record: FormulaReceipt, default_compiler: Optional[str] = None) -> AttributeBag:
    attributes = {
        "homebrew_version": record.manager_version,
        "used_options": record.used_options().as_flags(),
        "unused_options": record.unused_options().as_flags(),
        "built_as_bottle": record.was_built_as_binary_artifact,
        "poured_from_bottle": record.was_installed_from_binary_artifact,
        "loaded_from_api": record.loaded_from_remote_index,
        "installed_as_dependency": record.installed_as_dependency,
        "installed_on_request": record.installed_on_request,
        "changed_files": _changed_files(record),
        "time": record.install_time,
        "source_modified_time": int(record.source_modified_time or 0),
        "stdlib": _stdlib(record),
        "compiler": record.effective_compiler(default_compiler),
        "aliases": list(record.aliases),
        "runtime_dependencies": _dependencies_attributes(record),
        "source": record.source.to_attributes(),
        "arch": record.cpu_arch,
        "built_on": record.build_environment,
    }
    return _drop_blank_stdlib(attributes)


def _cask_manager_entry_view(record: CaskReceipt) -> AttributeBag:
    return {
        "homebrew_version": record.manager_version,
        "loaded_from_api": record.loaded_from_remote_index,
        "caskfile_only": record.artifact_source_only,
        "installed_as_dependency": record.installed_as_dependency,
        "installed_on_request": record.installed_on_request,
        "time": record.install_time,
        "runtime_dependencies": _dependencies_attributes(record),
        "source": record.source.to_attributes(),
        "arch": record.cpu_arch,
        "uninstall_artifacts": [dict(a) for a in record.uninstall_artifacts],
        "built_on": record.build_environment,
    }


def _formula_manager_entry_view(record: FormulaReceipt, default_compiler: Optional[str] = None) -> AttributeBag:
    attributes = {
        "homebrew_version": record.manager_version,
        "loaded_from_api": record.loaded_from_remote_index,
        "installed_as_dependency": record.installed_as_dependency,
        "installed_on_request": record.installed_on_request,
        "time": record.install_time,
        "runtime_dependencies": _dependencies_attributes(record),
        "source": record.source.to_attributes(),
        "arch": record.cpu_arch,
        "built_on": record.build_environment,
        "changed_files": _changed_files(record),
        "source_modified_time": int(record.source_modified_time or 0),
        "compiler": record.effective_compiler(default_compiler),
        "stdlib": _stdlib(record),
    }
    return _drop_blank_stdlib(attributes)


def manager_entry_view(record: Receipt, default_compiler: Optional[str] = None) -> AttributeBag:
    """Attributes the manager tracks for an installed entry."""
    if isinstance(record, CaskReceipt):
        return _cask_manager_entry_view(record)
    return _formula_manager_entry_view(record, default_compiler)


def full_view(record: Receipt, default_compiler: Optional[str] = None) -> AttributeBag:
    """Every attribute the receipt file for ``record`` holds."""
    if isinstance(record, CaskReceipt):
        return _cask_manager_entry_view(record)
    return _formula_full_view(record, default_compiler)


def bottle_view(record: Receipt, default_compiler: Optional[str] = None) -> AttributeBag:
    """Attributes packed into a bottle built from this installation.

    Raises:
        TypeError: If ``record`` is a cask receipt; casks have no bottles.
    """
    if not isinstance(record, FormulaReceipt):
        raise TypeError(f"bottle view is only defined for formula receipts, got {record.kind!r}")
    attributes = {
        "homebrew_version": record.manager_version,
        "changed_files": _changed_files(record),
        "source_modified_time": int(record.source_modified_time or 0),
        "stdlib": _stdlib(record),
        "compiler": record.effective_compiler(default_compiler),
        "runtime_dependencies": _dependencies_attributes(record),
        "arch": record.cpu_arch,
        "built_on": record.build_environment,
    }
    return _drop_blank_stdlib(attributes)


VIEWS = {
    "full": full_view,
    "manager": manager_entry_view,
    "bottle": bottle_view,
}


def dumps(record: Receipt, view: str = "full", default_compiler: Optional[str] = None) -> str:
    """Render a view of ``record`` as receipt file text.

    ``default_compiler`` stands in for a compiler the receipt never recorded.
    """
    try:
        project = VIEWS[view]
    except KeyError:
        raise ValueError(f"Unknown receipt view: {view!r} (expected one of {sorted(VIEWS)})")
    return pretty_dumps(project(record, default_compiler))
