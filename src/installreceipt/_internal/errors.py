"""Receipt read errors."""

from pathlib import Path
from typing import Union


class ReceiptParseError(ValueError):
    """Raised when a receipt file cannot be parsed.

    Fatal to the single read only; ``path`` names the offending file and
    ``cause`` is the underlying decode or validation error.
    """
    def __init__(self, path: Union[str, Path], cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Cannot parse {self.path}: {cause}")
