"""Host environment recorded into new receipts."""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class HostEnvironment:
    """Process-wide facts about the installing host.

    ``build_system_info`` is the full build-environment descriptor stored in
    ``built_on`` for fresh installs; ``generic_build_system_info`` is the
    reduced form used for placeholder receipts.
    """
    manager_version: str
    default_compiler: str
    cpu_arch: Optional[str] = None
    build_system_info: Dict[str, Any] = field(default_factory=dict)
    generic_build_system_info: Dict[str, Any] = field(default_factory=dict)

    def build_environment(self) -> Dict[str, Any]:
        """Snapshot of the build environment, safe for the caller to mutate."""
        return copy.deepcopy(self.build_system_info)

    def generic_build_environment(self) -> Dict[str, Any]:
        return copy.deepcopy(self.generic_build_system_info)
