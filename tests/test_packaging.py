"""Packaging regression tests."""

from pathlib import Path


def test_source_layout():
    repo_root = Path(__file__).resolve().parents[1]
    src_pkg = repo_root / "src" / "installreceipt"

    assert src_pkg.exists(), "installreceipt package should exist in src/"
    assert (src_pkg / "kernel").exists(), "installreceipt.kernel should exist"
    assert (src_pkg / "_internal").exists(), "installreceipt._internal should exist"


def test_import_boundary():
    import installreceipt
    import installreceipt.kernel  # noqa: F401

    # In dev mode it's "dev", in installed mode it's the released version
    assert installreceipt.__version__ in ("1.0.0", "dev")
