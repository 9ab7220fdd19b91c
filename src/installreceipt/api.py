"""Public API for installreceipt.

High-level functions for creating, finding, loading and writing install
receipts. Callers should use these instead of importing from _internal.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from installreceipt._internal.cache import ReceiptCache, default_cache
from installreceipt._internal.host import resolve_environment
from installreceipt._internal.io.receipt_file import empty_receipt, parse_receipt
from installreceipt.codes import RECEIPT_FILENAME, BuildSpec, ReceiptKind
from installreceipt.kernel.builder import (
    build_cask_attributes,
    build_formula_attributes,
    repository_head_commit,
)
from installreceipt.kernel.collaborators import FileSystem
from installreceipt.kernel.context import CaskInstallContext, FormulaInstallContext
from installreceipt.kernel.environment import HostEnvironment
from installreceipt.kernel.options import Options, remap_deprecated
from installreceipt.kernel.receipt import (
    CaskReceipt,
    CaskSource,
    FormulaReceipt,
    FormulaSource,
    record_from_attributes,
)
from installreceipt.kernel.serialize import dumps

logger = logging.getLogger(__name__)

Receipt = Union[FormulaReceipt, CaskReceipt]

__all__ = [
    "create_formula_receipt",
    "create_cask_receipt",
    "create_receipt",
    "empty_receipt",
    "parse_receipt",
    "load_receipt",
    "receipt_for_prefix",
    "receipt_for_formula",
    "receipt_for_cask",
    "write_receipt",
]


def create_formula_receipt(
    context: FormulaInstallContext,
    compiler: Optional[str] = None,
    stdlib: Optional[str] = None,
    environment: Optional[HostEnvironment] = None,
    now: Optional[float] = None,
) -> FormulaReceipt:
    """Receipt for a formula that is being (or was just) installed."""
    if now is None:
        now = time.time()
    attributes = build_formula_attributes(context, now, resolve_environment(environment), compiler, stdlib)
    return record_from_attributes(attributes, ReceiptKind.FORMULA, path=context.receipt_path)


def create_cask_receipt(
    context: CaskInstallContext,
    environment: Optional[HostEnvironment] = None,
    now: Optional[float] = None,
) -> CaskReceipt:
    """Receipt for a cask that is being (or was just) installed."""
    if now is None:
        now = time.time()
    attributes = build_cask_attributes(context, now, resolve_environment(environment))
    return record_from_attributes(attributes, ReceiptKind.CASK, path=context.receipt_path)


def create_receipt(
    context: Union[FormulaInstallContext, CaskInstallContext],
    compiler: Optional[str] = None,
    stdlib: Optional[str] = None,
    environment: Optional[HostEnvironment] = None,
    now: Optional[float] = None,
) -> Receipt:
    if isinstance(context, CaskInstallContext):
        return create_cask_receipt(context, environment, now)
    return create_formula_receipt(context, compiler, stdlib, environment, now)


def load_receipt(
    path: Union[str, Path],
    kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
    cache: Optional[ReceiptCache] = None,
) -> Receipt:
    """Receipt stored at ``path``, parsed once per process.

    Use :func:`parse_receipt` to bypass the cache.

    Raises:
        ReceiptParseError: If the file is not a valid receipt.
        OSError: If the file cannot be read.
    """
    if cache is None:
        cache = default_cache()
    return cache.fetch_or_load(path, kind)


def receipt_for_prefix(
    prefix: Union[str, Path],
    cache: Optional[ReceiptCache] = None,
) -> FormulaReceipt:
    """Receipt of the formula installed at ``prefix``, or a placeholder."""
    if cache is None:
        cache = default_cache()
    path = Path(prefix) / RECEIPT_FILENAME
    if cache.filesystem.exists(path):
        record = cache.fetch_or_load(path, ReceiptKind.FORMULA)
    else:
        record = empty_receipt(ReceiptKind.FORMULA, cache.environment)
    record.receipt_path = path
    return record


def receipt_for_formula(
    context: FormulaInstallContext,
    cache: Optional[ReceiptCache] = None,
) -> FormulaReceipt:
    """Receipt of an installed formula, or a placeholder if it is not installed.

    Candidate prefixes are checked in order and the first holding a receipt
    wins. Deprecated option names in the receipt are renamed to their
    current names. The placeholder lists every option the formula offers as
    unused and describes the formula's current source.
    """
    if cache is None:
        cache = default_cache()
    prefixes = list(context.candidate_prefixes) or [context.prefix]
    path = next(
        (Path(p) / RECEIPT_FILENAME for p in prefixes if cache.filesystem.exists(Path(p) / RECEIPT_FILENAME)),
        None,
    )

    if path is not None:
        record = cache.fetch_or_load(path, ReceiptKind.FORMULA)
        used = remap_deprecated(context.deprecated_options, record.used_options())
        record.used_option_flags = used.as_flags()
        return record

    record = empty_receipt(ReceiptKind.FORMULA, cache.environment)
    record.unused_option_flags = Options.from_flags(context.options).as_flags()
    record.source = FormulaSource.model_validate({
        "path": context.specified_path,
        "tap": context.repository.name if context.repository is not None else None,
        "spec": BuildSpec(context.active_spec).value,
        "versions": {
            "stable": context.stable_version,
            "head": context.head_version,
            "version_scheme": context.version_scheme,
        },
    })
    return record


def receipt_for_cask(
    context: CaskInstallContext,
    cache: Optional[ReceiptCache] = None,
) -> CaskReceipt:
    """Receipt of an installed cask, or a placeholder if it is not installed."""
    if cache is None:
        cache = default_cache()
    path = context.receipt_path
    if cache.filesystem.exists(path):
        return cache.fetch_or_load(path, ReceiptKind.CASK)

    record = empty_receipt(ReceiptKind.CASK, cache.environment)
    repository = context.repository
    record.source = CaskSource.model_validate({
        "path": context.sourcefile_path,
        "tap": repository.name if repository is not None else None,
        "tap_git_head": repository_head_commit(repository),
        "version": context.version,
    })
    record.uninstall_artifacts = context.uninstall_artifact_list()
    return record


def write_receipt(
    record: Receipt,
    path: Union[str, Path, None] = None,
    cache: Optional[ReceiptCache] = None,
    filesystem: Optional[FileSystem] = None,
) -> bool:
    """Atomically write ``record`` and remember it in the cache.

    Args:
        record: Receipt to write.
        path: Destination; defaults to ``record.receipt_path``.
        cache: Cache to update; defaults to the process-wide cache.
        filesystem: Filesystem to write through; defaults to the cache's.

    Returns:
        True if no receipt existed at the destination before. The set of
        installed packages changed, so callers must invalidate anything
        derived from it.

    Raises:
        ValueError: If neither ``path`` nor ``record.receipt_path`` is set.
        OSError: If the write fails; nothing is cached in that case.
    """
    if cache is None:
        cache = default_cache()
    fs = filesystem if filesystem is not None else cache.filesystem
    target = Path(path) if path is not None else record.receipt_path
    if target is None:
        raise ValueError("Receipt has no path; pass one explicitly")

    is_new = not fs.exists(target)
    text = dumps(record, default_compiler=cache.environment.default_compiler)
    fs.atomic_write(target, text.encode("utf-8"))
    record.receipt_path = target
    cache.store(target, record)

    if is_new:
        logger.info("Wrote new receipt %s", target)
    else:
        logger.debug("Rewrote receipt %s", target)
    return is_new
