"""Enum constants for installreceipt.

These constants prevent stringly-typed kinds and build specs from leaking
into client code.
"""

from enum import Enum


class ReceiptKind(str, Enum):
    """Kind of installation a receipt describes."""

    FORMULA = "formula"  # built from source or poured from a bottle
    CASK = "cask"  # pre-built package managed as an opaque entry


class BuildSpec(str, Enum):
    """Which version spec of a formula was installed."""

    STABLE = "stable"
    HEAD = "head"


RECEIPT_FILENAME = "INSTALL_RECEIPT.json"

# Compiler assumed for receipts that never recorded one.
DEFAULT_COMPILER = "clang"
