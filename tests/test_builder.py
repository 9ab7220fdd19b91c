"""Tests for building receipt attributes from install contexts."""

from pathlib import Path

from installreceipt.codes import BuildSpec, ReceiptKind
from installreceipt.kernel.builder import (
    build_cask_attributes,
    build_empty,
    build_formula_attributes,
    generic_attributes,
    repository_head_commit,
)
from installreceipt.kernel.context import CaskInstallContext, FormulaInstallContext

from conftest import FIXED_TIME, FakeDependency, FakeDependencySource, FakeRepository


def _formula_context(**overrides):
    values = dict(
        full_name="foo",
        prefix=Path("/opt/cellar/foo/1.0"),
        specified_path="/taps/core/Formula/foo.rb",
        repository=FakeRepository("homebrew/core"),
        stable_version="1.0",
        used_options=["with-tests"],
        unused_options=["--with-docs"],
        aliases=["foo-alias"],
    )
    values.update(overrides)
    return FormulaInstallContext(**values)


def test_generic_attributes(environment):
    attributes = generic_attributes(FIXED_TIME + 0.7, environment)
    assert attributes["homebrew_version"] == "5.0.0"
    assert attributes["time"] == FIXED_TIME
    assert attributes["arch"] == "arm64"
    assert attributes["installed_on_request"] is False

    # Each receipt gets its own copy of the build environment.
    attributes["built_on"]["os"] = "changed"
    assert environment.build_system_info["os"] == "Darwin"


def test_formula_attributes(environment):
    attributes = build_formula_attributes(_formula_context(), FIXED_TIME, environment=environment)
    assert attributes["used_options"] == ["--with-tests"]
    assert attributes["unused_options"] == ["--with-docs"]
    assert attributes["poured_from_bottle"] is False
    assert attributes["built_as_bottle"] is False
    assert attributes["compiler"] == "clang"
    assert attributes["stdlib"] is None
    assert attributes["source_modified_time"] == 0
    assert attributes["aliases"] == ["foo-alias"]
    assert attributes["runtime_dependencies"] == []
    assert attributes["source"] == {
        "path": "/taps/core/Formula/foo.rb",
        "tap": "homebrew/core",
        "tap_git_head": "abc123",
        "spec": "stable",
        "versions": {"stable": "1.0", "head": None, "version_scheme": 0},
    }


def test_formula_attributes_with_explicit_toolchain(environment):
    attributes = build_formula_attributes(
        _formula_context(active_spec=BuildSpec.HEAD, head_version="HEAD"),
        FIXED_TIME,
        compiler="gcc-13",
        stdlib="libstdcxx",
        environment=environment,
    )
    assert attributes["compiler"] == "gcc-13"
    assert attributes["stdlib"] == "libstdcxx"
    assert attributes["source"]["spec"] == "head"


def test_remote_repository_has_no_head_commit():
    assert repository_head_commit(FakeRepository("homebrew/core", installed=False)) is None
    assert repository_head_commit(None) is None
    assert repository_head_commit(FakeRepository("me/tap", commit="def456")) == "def456"


def test_formula_runtime_dependencies(environment):
    source = FakeDependencySource([
        FakeDependency("zlib", "homebrew/core/zlib", "1.3", revision=1),
        FakeDependency("xz", "xz", "5.4"),
    ])
    context = _formula_context(dependencies=source, declared_dependencies=["zlib"])
    attributes = build_formula_attributes(context, FIXED_TIME, environment=environment)

    assert source.calls == [False]
    assert attributes["runtime_dependencies"] == [
        {
            "full_name": "homebrew/core/zlib",
            "version": "1.3",
            "revision": 1,
            "pkg_version": "1.3_1",
            "declared_directly": True,
        },
        {
            "full_name": "xz",
            "version": "5.4",
            "revision": 0,
            "pkg_version": "5.4",
            "declared_directly": False,
        },
    ]


def test_cask_attributes(environment):
    resolved = {
        ("formula", "python"): FakeDependency("python", "python@3.12", "3.12.1", revision=2),
        ("cask", "java"): FakeDependency("java", "java", "21"),
    }
    context = CaskInstallContext(
        full_name="bar",
        metadata_dir=Path("/opt/caskroom/bar/.metadata"),
        sourcefile_path="/taps/cask/Casks/bar.rb",
        repository=FakeRepository("homebrew/cask", commit="c0ffee"),
        version="2.1",
        loaded_from_api=True,
        depends_on={"formula": ["python"], "cask": ["java"], "macos": {">=": ["12"]}},
        resolve_dependency=lambda dep_type, name: resolved[(dep_type, name)],
        uninstall_artifacts=[{"app": ["Bar.app"]}],
    )
    attributes = build_cask_attributes(context, FIXED_TIME, environment)

    assert attributes["loaded_from_api"] is True
    assert attributes["caskfile_only"] is False
    assert attributes["uninstall_artifacts"] == [{"app": ["Bar.app"]}]
    assert attributes["source"] == {
        "path": "/taps/cask/Casks/bar.rb",
        "tap": "homebrew/cask",
        "tap_git_head": "c0ffee",
        "version": "2.1",
    }
    assert attributes["runtime_dependencies"] == {
        "formula": [{
            "full_name": "python@3.12",
            "version": "3.12.1",
            "revision": 2,
            "pkg_version": "3.12.1_2",
            "declared_directly": True,
        }],
        "cask": [{"full_name": "java", "version": "21", "declared_directly": True}],
        "macos": {">=": ["12"]},
    }


def test_empty_formula_attributes(environment):
    attributes = build_empty(ReceiptKind.FORMULA, environment)
    assert attributes["homebrew_version"] == "5.0.0"
    assert attributes["time"] is None
    assert attributes["runtime_dependencies"] is None
    assert attributes["arch"] is None
    assert attributes["compiler"] == "clang"
    assert attributes["built_on"] == {"os": "Darwin", "os_version": "14.0", "cpu_family": "arm64"}
    assert attributes["source"]["versions"] == {"stable": None, "head": None, "version_scheme": 0}


def test_empty_cask_attributes(environment):
    attributes = build_empty("cask", environment)
    assert "used_options" not in attributes
    assert attributes["caskfile_only"] is False
    assert attributes["source"] == {"path": None, "tap": None, "tap_git_head": None, "version": None}
