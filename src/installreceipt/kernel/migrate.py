"""Bring receipts written by older manager releases into the canonical shape.

Every fixup is idempotent and nothing here raises: fields that cannot be
inferred are filled with conservative defaults. The input is never mutated.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Union

from installreceipt.codes import BuildSpec, ReceiptKind
from installreceipt.kernel.receipt import AttributeBag
from installreceipt.kernel.versions import PackageVersion

logger = logging.getLogger(__name__)

TAPPED_FROM_PLACEHOLDER = "path or URL"
CORE_REPOSITORY = "homebrew/core"
DEPRECATED_CORE_REPOSITORIES = ("mxcl/master", "Homebrew/homebrew")


def infer_build_spec(path: Union[str, Path]) -> BuildSpec:
    """Build spec implied by the version directory holding a receipt."""
    version = PackageVersion.parse(Path(path).parent.name)
    return BuildSpec.HEAD if version.is_head else BuildSpec.STABLE


def _move_tapped_from(attributes: AttributeBag, source: Dict[str, Any], path) -> None:
    tapped_from = attributes.get("tapped_from")
    if tapped_from is not None and tapped_from != TAPPED_FROM_PLACEHOLDER:
        source["tap"] = attributes.pop("tapped_from")
        logger.debug("Moved tapped_from to source.tap in %s", path)

    if source.get("tap") in DEPRECATED_CORE_REPOSITORIES:
        logger.debug("Renamed repository %s to %s in %s", source["tap"], CORE_REPOSITORY, path)
        source["tap"] = CORE_REPOSITORY


def _ensure_build_spec(source: Dict[str, Any], path) -> None:
    spec = source.get("spec")
    if spec in (BuildSpec.STABLE.value, BuildSpec.HEAD.value):
        return
    # Also covers specs no longer supported, such as "devel".
    source["spec"] = infer_build_spec(path).value
    logger.debug("Inferred build spec %r (was %r) for %s", source["spec"], spec, path)


def _ensure_versions(source: Dict[str, Any], path) -> None:
    versions = source.get("versions")
    if not isinstance(versions, dict):
        source["versions"] = {"stable": None, "head": None, "version_scheme": 0}
        logger.debug("Defaulted source.versions for %s", path)
        return

    # Manager releases 1.5.13 through 4.0.17 inclusive wrote "" for missing versions.
    for spec in (BuildSpec.STABLE.value, BuildSpec.HEAD.value):
        value = versions.get(spec)
        if isinstance(value, str) and not value.strip():
            value = None
            logger.debug("Normalized empty %s version in %s", spec, path)
        versions[spec] = value


def migrate(
    raw: AttributeBag,
    path: Union[str, Path],
    kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
) -> AttributeBag:
    """Return the canonical form of a receipt read from ``path``.

    Args:
        raw: Attributes as parsed from the receipt file.
        path: Location of the receipt; its parent directory name is the
            installed version.
        kind: Receipt kind; cask receipts have no legacy fixups.

    Returns:
        A new attribute bag; ``raw`` is left untouched.
    """
    attributes = copy.deepcopy(raw)
    if not isinstance(attributes.get("source"), dict):
        attributes["source"] = {}

    if ReceiptKind(kind) == ReceiptKind.CASK:
        return attributes

    source = attributes["source"]
    _move_tapped_from(attributes, source, path)
    _ensure_build_spec(source, path)
    _ensure_versions(source, path)

    if attributes.get("source_modified_time") is None:
        attributes["source_modified_time"] = 0

    return attributes
