"""Build canonical receipt attributes from a live install context.

Builders never fail on missing upstream data: anything the context does not
know is recorded as null, false or empty.
"""

import copy
from typing import Any, Dict, List, Optional, Union

from installreceipt.codes import BuildSpec, ReceiptKind
from installreceipt.kernel.collaborators import Repository
from installreceipt.kernel.context import CaskInstallContext, FormulaInstallContext
from installreceipt.kernel.environment import HostEnvironment
from installreceipt.kernel.options import Options
from installreceipt.kernel.receipt import AttributeBag


def generic_attributes(now: float, environment: HostEnvironment) -> AttributeBag:
    """Attributes every fresh receipt starts from; ``now`` is the install time."""
    return {
        "homebrew_version": environment.manager_version,
        "installed_as_dependency": False,
        "installed_on_request": False,
        "time": int(now),
        "arch": environment.cpu_arch,
        "built_on": environment.build_environment(),
    }


def repository_head_commit(repository: Optional[Repository]) -> Optional[str]:
    """Head commit of a repository, only if it is checked out locally."""
    if repository is None or not repository.is_installed():
        return None
    return repository.head_commit()


def formula_runtime_dependencies(context: FormulaInstallContext) -> List[AttributeBag]:
    if context.dependencies is None:
        return []
    declared = set(context.declared_dependencies)
    snapshots = []
    for dependency in context.dependencies.runtime_dependencies(include_undeclared=False):
        record = dependency.to_record()
        full_name = record.get("full_name") or dependency.name
        snapshots.append({
            "full_name": full_name,
            "version": record.get("version"),
            "revision": record.get("revision"),
            "pkg_version": record.get("package_version"),
            "declared_directly": dependency.name in declared or full_name in declared,
        })
    return snapshots


def _cask_dependency_entry(context: CaskInstallContext, dep_type: str, name: str) -> AttributeBag:
    if context.resolve_dependency is None:
        return {"full_name": name, "version": None, "declared_directly": True}
    record = context.resolve_dependency(dep_type, name).to_record()
    entry: AttributeBag = {
        "full_name": record.get("full_name") or name,
        "version": record.get("version"),
    }
    if dep_type == "formula":
        entry["revision"] = record.get("revision")
        entry["pkg_version"] = record.get("package_version")
    # Entries come from the cask's own depends_on, so they are always direct.
    entry["declared_directly"] = True
    return entry


def cask_runtime_dependencies(context: CaskInstallContext) -> Dict[str, Any]:
    dependencies: Dict[str, Any] = {}
    for dep_type, value in context.depends_on.items():
        if dep_type not in ("cask", "formula"):
            dependencies[dep_type] = copy.deepcopy(value)
            continue
        dependencies[dep_type] = [_cask_dependency_entry(context, dep_type, name) for name in value]
    return dependencies


def build_formula_attributes(
    context: FormulaInstallContext,
    now: float,
    environment: HostEnvironment,
    compiler: Optional[str] = None,
    stdlib: Optional[str] = None,
) -> AttributeBag:
    """Attributes for a new formula installation.

    The compiler defaults to the host default compiler when not given.
    """
    attributes = generic_attributes(now, environment)
    repository = context.repository
    attributes.update({
        "used_options": Options.from_flags(context.used_options).as_flags(),
        "unused_options": Options.from_flags(context.unused_options).as_flags(),
        "built_as_bottle": bool(context.build_as_bottle),
        "poured_from_bottle": False,
        "loaded_from_api": bool(context.loaded_from_api),
        "source_modified_time": int(context.source_modified_time or 0),
        "compiler": compiler or environment.default_compiler,
        "stdlib": stdlib,
        "aliases": list(context.aliases),
        "runtime_dependencies": formula_runtime_dependencies(context),
        "source": {
            "path": context.specified_path,
            "tap": repository.name if repository is not None else None,
            "tap_git_head": repository_head_commit(repository),
            "spec": BuildSpec(context.active_spec).value,
            "versions": {
                "stable": context.stable_version,
                "head": context.head_version,
                "version_scheme": context.version_scheme,
            },
        },
    })
    return attributes


def build_cask_attributes(
    context: CaskInstallContext,
    now: float,
    environment: HostEnvironment,
) -> AttributeBag:
    """Attributes for a new cask installation."""
    attributes = generic_attributes(now, environment)
    repository = context.repository
    attributes.update({
        "loaded_from_api": bool(context.loaded_from_api),
        "caskfile_only": bool(context.caskfile_only),
        "runtime_dependencies": cask_runtime_dependencies(context),
        "source": {
            "path": context.sourcefile_path,
            "tap": repository.name if repository is not None else None,
            "tap_git_head": repository_head_commit(repository),
            "version": context.version,
        },
        "uninstall_artifacts": context.uninstall_artifact_list(),
    })
    return attributes


def build_empty(
    kind: Union[ReceiptKind, str],
    environment: HostEnvironment,
) -> AttributeBag:
    """Placeholder attributes for a package that is not installed."""
    attributes: AttributeBag = {
        "homebrew_version": environment.manager_version,
        "installed_as_dependency": False,
        "installed_on_request": False,
        "loaded_from_api": False,
        "time": None,
        "runtime_dependencies": None,
        "arch": None,
        "built_on": environment.generic_build_environment(),
    }
    if ReceiptKind(kind) == ReceiptKind.CASK:
        attributes.update({
            "caskfile_only": False,
            "uninstall_artifacts": [],
            "source": {"path": None, "tap": None, "tap_git_head": None, "version": None},
        })
        return attributes

    attributes.update({
        "used_options": [],
        "unused_options": [],
        "built_as_bottle": False,
        "poured_from_bottle": False,
        "source_modified_time": 0,
        "stdlib": None,
        "compiler": environment.default_compiler,
        "aliases": [],
        "source": {
            "path": None,
            "tap": None,
            "tap_git_head": None,
            "spec": BuildSpec.STABLE.value,
            "versions": {"stable": None, "head": None, "version_scheme": 0},
        },
    })
    return attributes
