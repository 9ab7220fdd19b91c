"""Receipt file I/O helpers (internal)."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from installreceipt._internal.errors import ReceiptParseError
from installreceipt._internal.host import resolve_environment
from installreceipt.codes import ReceiptKind
from installreceipt.kernel.builder import build_empty
from installreceipt.kernel.environment import HostEnvironment
from installreceipt.kernel.migrate import migrate
from installreceipt.kernel.receipt import CaskReceipt, FormulaReceipt, record_from_attributes

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """Local disk access with all-or-nothing writes."""

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def atomic_write(self, path: Path, data: bytes) -> None:
        """Replace ``path`` with ``data``; readers see the old or the new file, never a mix."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(target)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise


def empty_receipt(
    kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
    environment: Optional[HostEnvironment] = None,
) -> Union[FormulaReceipt, CaskReceipt]:
    """Placeholder receipt for a package that is not installed."""
    return record_from_attributes(build_empty(kind, resolve_environment(environment)), kind)


def parse_receipt(
    content: Union[str, bytes],
    path: Union[str, Path],
    kind: Union[ReceiptKind, str] = ReceiptKind.FORMULA,
    environment: Optional[HostEnvironment] = None,
) -> Union[FormulaReceipt, CaskReceipt]:
    """
    Parse receipt file content read from ``path``.

    Blank content (an interrupted write leaves a zero-byte file) yields an
    empty receipt instead of an error.

    Raises:
        ReceiptParseError: If the content is not a JSON object or does not
            validate as a receipt of ``kind``.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReceiptParseError(path, e) from e

    if not content.strip():
        logger.debug("Receipt %s is empty, using a placeholder", path)
        return empty_receipt(kind, environment)

    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        raise ReceiptParseError(path, e) from e

    if not isinstance(raw, dict):
        raise ReceiptParseError(path, TypeError(f"expected a JSON object, got {type(raw).__name__}"))

    attributes = migrate(raw, path, kind)
    try:
        return record_from_attributes(attributes, kind, path=path)
    except ValidationError as e:
        raise ReceiptParseError(path, e) from e
