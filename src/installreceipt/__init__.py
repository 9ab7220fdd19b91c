"""installreceipt: install receipt records for package installations."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("installreceipt")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from installreceipt.api import (
    create_cask_receipt,
    create_formula_receipt,
    create_receipt,
    empty_receipt,
    load_receipt,
    parse_receipt,
    receipt_for_cask,
    receipt_for_formula,
    receipt_for_prefix,
    write_receipt,
)
from installreceipt._internal.cache import ReceiptCache, default_cache, reset_default_cache
from installreceipt._internal.errors import ReceiptParseError
from installreceipt.codes import RECEIPT_FILENAME, BuildSpec, ReceiptKind
from installreceipt.kernel.context import CaskInstallContext, FormulaInstallContext
from installreceipt.kernel.environment import HostEnvironment
from installreceipt.kernel.receipt import CaskReceipt, FormulaReceipt, ReceiptRecord

__all__ = [
    "__version__",
    "create_cask_receipt",
    "create_formula_receipt",
    "create_receipt",
    "empty_receipt",
    "load_receipt",
    "parse_receipt",
    "receipt_for_cask",
    "receipt_for_formula",
    "receipt_for_prefix",
    "write_receipt",
    "ReceiptCache",
    "default_cache",
    "reset_default_cache",
    "ReceiptParseError",
    "RECEIPT_FILENAME",
    "BuildSpec",
    "ReceiptKind",
    "CaskInstallContext",
    "FormulaInstallContext",
    "HostEnvironment",
    "CaskReceipt",
    "FormulaReceipt",
    "ReceiptRecord",
]
