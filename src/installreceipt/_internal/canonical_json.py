"""Centralized receipt JSON rendering.

Receipts are written everywhere through this one function: receipt writes,
CLI output, test snapshots. Using one renderer keeps the bytes on disk
identical for identical records.
"""

import json
from typing import Any


def pretty_dumps(obj: Any) -> str:
    """
    Pretty JSON serialization for receipt files.

    Rules:
    - UTF-8 text (non-ASCII characters are not escaped)
    - Two-space indentation, ": " and "," separators
    - Key order is the insertion order of each view (views fix their own order)
    - No trailing newline

    Args:
        obj: JSON-compatible Python object

    Returns:
        JSON text
    """
    return json.dumps(
        obj,
        indent=2,
        separators=(",", ": "),
        ensure_ascii=False,
    )
