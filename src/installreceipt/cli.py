"""installreceipt CLI: inspect and maintain install receipts."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path

logger = logging.getLogger(__name__)


def _receipt_path(path: Path) -> Path:
    """Accept either a receipt file or the install prefix holding it."""
    from .codes import RECEIPT_FILENAME

    path = path.resolve()
    return path / RECEIPT_FILENAME if path.is_dir() else path


def _kind(args):
    from .codes import ReceiptKind

    return ReceiptKind.CASK if args.cask else ReceiptKind.FORMULA


def main():
    """Main CLI entry point for installreceipt commands."""
    try:
        package_version = get_version("installreceipt")
    except PackageNotFoundError:
        package_version = "dev"

    parser = argparse.ArgumentParser(
        prog="installreceipt",
        description="installreceipt: inspect and maintain package install receipts"
    )
    parser.add_argument("--version", action="version", version=f"installreceipt {package_version}")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to LOG_LEVEL or WARNING)"
    )
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "path",
        type=Path,
        help="Receipt file, or the install prefix that holds it"
    )
    parent_parser.add_argument(
        "--cask",
        action="store_true",
        help="Read the receipt as a cask receipt"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "show",
        help="Print a one-line summary of an installation",
        parents=[parent_parser]
    )

    dump_parser = subparsers.add_parser(
        "dump",
        help="Print a view of a receipt as JSON",
        parents=[parent_parser]
    )
    dump_parser.add_argument(
        "--view",
        choices=["full", "manager", "bottle"],
        default="full",
        help="Which view to print (default: full)"
    )

    migrate_parser = subparsers.add_parser(
        "migrate",
        help="Print a legacy receipt in the current format",
        parents=[parent_parser]
    )
    migrate_parser.add_argument(
        "--write",
        action="store_true",
        help="Rewrite the receipt file in place instead of printing it"
    )

    mark_parser = subparsers.add_parser(
        "mark",
        help="Record whether the package was installed on request",
        parents=[parent_parser]
    )
    on_request = mark_parser.add_mutually_exclusive_group(required=True)
    on_request.add_argument(
        "--on-request",
        dest="on_request",
        action="store_true",
        help="Mark as installed on request"
    )
    on_request.add_argument(
        "--no-on-request",
        dest="on_request",
        action="store_false",
        help="Mark as not installed on request"
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    from .logging_utils import configure_logging

    configure_logging(args.log_level)

    from ._internal.cache import ReceiptCache
    from .api import load_receipt, write_receipt
    from .kernel.serialize import dumps

    cache = ReceiptCache()
    default_compiler = cache.environment.default_compiler
    path = _receipt_path(args.path)

    try:
        if not path.exists():
            raise FileNotFoundError(f"No receipt at {path}")
        record = load_receipt(path, _kind(args), cache=cache)

        if args.command == "show":
            print(record.describe())
        elif args.command == "dump":
            print(dumps(record, view=args.view, default_compiler=default_compiler))
        elif args.command == "migrate":
            if args.write:
                write_receipt(record, path, cache=cache)
                print(f"[OK] Migrated {path}")
            else:
                print(dumps(record, default_compiler=default_compiler))
        elif args.command == "mark":
            record.installed_on_request = args.on_request
            write_receipt(record, path, cache=cache)
            state = "on request" if args.on_request else "not on request"
            print(f"[OK] Marked {path} as installed {state}")
    except (OSError, ValueError, TypeError) as e:
        # ReceiptParseError is a ValueError
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
