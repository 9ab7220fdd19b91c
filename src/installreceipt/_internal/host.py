"""Build the host environment from process settings."""

import platform
from typing import Optional

from installreceipt.config import Settings, load_settings
from installreceipt.kernel.environment import HostEnvironment


def environment_from_settings(settings: Optional[Settings] = None) -> HostEnvironment:
    settings = settings or load_settings()
    receipt = settings.receipt
    generic = {
        "os": platform.system() or None,
        "os_version": platform.release() or None,
        "cpu_family": receipt.cpu_arch,
    }
    build = dict(generic)
    build["default_compiler"] = receipt.default_compiler
    build["python"] = platform.python_version()
    return HostEnvironment(
        manager_version=receipt.manager_version,
        default_compiler=receipt.default_compiler,
        cpu_arch=receipt.cpu_arch,
        build_system_info=build,
        generic_build_system_info=generic,
    )


def current_environment() -> HostEnvironment:
    """Environment derived from the process settings."""
    return environment_from_settings()


def resolve_environment(environment: Optional[HostEnvironment] = None) -> HostEnvironment:
    """``environment`` itself, or the one derived from the process settings."""
    if environment is None:
        return current_environment()
    return environment
