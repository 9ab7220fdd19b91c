"""Per-process receipt cache keyed by receipt path."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from installreceipt._internal.host import resolve_environment
from installreceipt._internal.io.receipt_file import LocalFileSystem, parse_receipt
from installreceipt.codes import ReceiptKind
from installreceipt.kernel.collaborators import FileSystem
from installreceipt.kernel.environment import HostEnvironment
from installreceipt.kernel.receipt import CaskReceipt, FormulaReceipt

logger = logging.getLogger(__name__)

Receipt = Union[FormulaReceipt, CaskReceipt]


class ReceiptCache:
    """Parsed receipts, keyed by the path they were read from.

    There is no locking: concurrent loads of one path may both parse the
    file and the last one stored wins. Callers that change the set of
    installed packages are responsible for invalidating anything derived
    from it; this cache only tracks individual receipts.
    """

    def __init__(
        self,
        filesystem: Optional[FileSystem] = None,
        environment: Optional[HostEnvironment] = None,
    ):
        self.filesystem = filesystem if filesystem is not None else LocalFileSystem()
        self.environment = resolve_environment(environment)
        self._records: Dict[Path, Receipt] = {}

    def fetch_or_load(
        self,
        path: Union[str, Path],
        kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
    ) -> Receipt:
        """Return the cached receipt for ``path``, reading it on a miss.

        Blank receipt files produce a placeholder that is not cached, so a
        later write to the same path is picked up.

        Raises:
            ReceiptParseError: If the file is not a valid receipt.
            OSError: If the file cannot be read.
        """
        key = Path(path)
        cached = self._records.get(key)
        if cached is not None:
            return cached

        content = self.filesystem.read_bytes(key)
        record = parse_receipt(content, key, kind, self.environment)
        if not content.strip():
            return record

        logger.debug("Cached receipt %s", key)
        self._records[key] = record
        return record

    def get(self, path: Union[str, Path]) -> Optional[Receipt]:
        return self._records.get(Path(path))

    def store(self, path: Union[str, Path], record: Receipt) -> None:
        self._records[Path(path)] = record

    def invalidate(self, path: Union[str, Path]) -> None:
        self._records.pop(Path(path), None)

    def clear(self) -> None:
        self._records.clear()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return Path(path) in self._records

    def __len__(self) -> int:
        return len(self._records)


_default_cache: Optional[ReceiptCache] = None


def default_cache() -> ReceiptCache:
    """The process-wide cache used when callers do not pass their own."""
    global _default_cache
    if _default_cache is None:
        _default_cache = ReceiptCache()
    return _default_cache


def reset_default_cache(cache: Optional[ReceiptCache] = None) -> ReceiptCache:
    """Replace the process-wide cache (a fresh one unless ``cache`` is given)."""
    global _default_cache
    _default_cache = cache if cache is not None else ReceiptCache()
    return _default_cache
