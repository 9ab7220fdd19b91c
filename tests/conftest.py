"""Pytest configuration and shared fixtures.

No sys.path hacks - tests should import from the installed installreceipt package.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from installreceipt import logging_utils
from installreceipt._internal.cache import ReceiptCache, reset_default_cache
from installreceipt.config import _load_settings_cached
from installreceipt.kernel.environment import HostEnvironment

FIXED_TIME = 1_700_000_000


@dataclass
class FakeRepository:
    name: str
    commit: Optional[str] = "abc123"
    installed: bool = True

    def head_commit(self) -> Optional[str]:
        return self.commit

    def is_installed(self) -> bool:
        return self.installed


@dataclass
class FakeDependency:
    name: str
    full_name: str
    version: str
    revision: int = 0

    def to_record(self) -> Dict[str, Any]:
        package_version = f"{self.version}_{self.revision}" if self.revision else self.version
        return {
            "full_name": self.full_name,
            "version": self.version,
            "revision": self.revision,
            "package_version": package_version,
        }


@dataclass
class FakeDependencySource:
    dependencies: List[FakeDependency] = field(default_factory=list)
    calls: List[bool] = field(default_factory=list)

    def runtime_dependencies(self, include_undeclared: bool):
        self.calls.append(include_undeclared)
        return list(self.dependencies)


@dataclass
class FakeFileSystem:
    files: Dict[Path, bytes] = field(default_factory=dict)

    def read_bytes(self, path: Path) -> bytes:
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(path)

    def exists(self, path: Path) -> bool:
        return Path(path) in self.files

    def atomic_write(self, path: Path, data: bytes) -> None:
        self.files[Path(path)] = bytes(data)


@pytest.fixture
def environment():
    return HostEnvironment(
        manager_version="5.0.0",
        default_compiler="clang",
        cpu_arch="arm64",
        build_system_info={"os": "Darwin", "os_version": "14.0", "cpu_family": "arm64", "default_compiler": "clang"},
        generic_build_system_info={"os": "Darwin", "os_version": "14.0", "cpu_family": "arm64"},
    )


@pytest.fixture
def cache(environment):
    return ReceiptCache(environment=environment)


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch):
    """Keep settings, logging and the process-wide cache from leaking between tests."""
    monkeypatch.setattr(logging_utils, "_logging_configured", True)
    for key in ("INSTALLRECEIPT_MANAGER_VERSION", "INSTALLRECEIPT_DEFAULT_COMPILER",
                "INSTALLRECEIPT_CPU_ARCH", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(key, raising=False)
    reset_default_cache()
    _load_settings_cached.cache_clear()
    yield
    _load_settings_cached.cache_clear()
    reset_default_cache()


@pytest.fixture
def write_json():
    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path
    return _write
