"""Tests for reading and atomically writing receipt files."""

import json

import pytest

from installreceipt._internal.errors import ReceiptParseError
from installreceipt._internal.io.receipt_file import LocalFileSystem, empty_receipt, parse_receipt
from installreceipt.codes import ReceiptKind
from installreceipt.kernel.builder import build_empty
from installreceipt.kernel.receipt import CaskReceipt, FormulaReceipt
from installreceipt.kernel.serialize import full_view


@pytest.mark.parametrize("content", [b"", "   \n", b"\n"])
def test_blank_content_is_empty_receipt(content, environment, tmp_path):
    record = parse_receipt(content, tmp_path / "INSTALL_RECEIPT.json", environment=environment)
    expected = empty_receipt(ReceiptKind.FORMULA, environment)
    assert record == expected
    assert full_view(record) == full_view(expected)
    assert record.manager_version == build_empty(ReceiptKind.FORMULA, environment)["homebrew_version"]


def test_blank_cask_content(environment, tmp_path):
    record = parse_receipt("", tmp_path / "INSTALL_RECEIPT.json", ReceiptKind.CASK, environment)
    assert isinstance(record, CaskReceipt)


def test_malformed_json_names_the_file(tmp_path):
    path = tmp_path / "foo" / "1.0" / "INSTALL_RECEIPT.json"
    with pytest.raises(ReceiptParseError) as excinfo:
        parse_receipt("{not json", path)
    assert excinfo.value.path == path
    assert str(path) in str(excinfo.value)
    assert isinstance(excinfo.value.cause, json.JSONDecodeError)


def test_non_object_json_is_rejected(tmp_path):
    with pytest.raises(ReceiptParseError):
        parse_receipt("[1, 2]", tmp_path / "INSTALL_RECEIPT.json")


def test_invalid_field_is_a_parse_error(tmp_path):
    with pytest.raises(ReceiptParseError):
        parse_receipt('{"time": "noon"}', tmp_path / "INSTALL_RECEIPT.json")


def test_parse_error_is_a_value_error():
    assert issubclass(ReceiptParseError, ValueError)


def test_invalid_utf8_is_a_parse_error(tmp_path):
    with pytest.raises(ReceiptParseError):
        parse_receipt(b"\xff\xfe{", tmp_path / "INSTALL_RECEIPT.json")


def test_parse_migrates_and_records_path(tmp_path):
    path = tmp_path / "foo" / "HEAD-abc" / "INSTALL_RECEIPT.json"
    record = parse_receipt(json.dumps({"tapped_from": "Homebrew/homebrew", "homebrew_version": "1.0.0"}), path)
    assert isinstance(record, FormulaReceipt)
    assert record.source.repository_name == "homebrew/core"
    assert record.is_head_build()
    assert record.receipt_path == path


def test_atomic_write_replaces_file_and_leaves_no_temp_files(tmp_path):
    fs = LocalFileSystem()
    target = tmp_path / "foo" / "1.0" / "INSTALL_RECEIPT.json"
    fs.atomic_write(target, b'{"a": 1}')
    fs.atomic_write(target, b'{"a": 2}')

    assert fs.read_bytes(target) == b'{"a": 2}'
    assert fs.exists(target)
    assert [p.name for p in target.parent.iterdir()] == ["INSTALL_RECEIPT.json"]


def test_failed_atomic_write_keeps_old_content(tmp_path, monkeypatch):
    fs = LocalFileSystem()
    target = tmp_path / "INSTALL_RECEIPT.json"
    target.write_bytes(b"old")

    def _fail(self, other):
        raise OSError("disk full")

    monkeypatch.setattr(type(target), "replace", _fail)
    with pytest.raises(OSError, match="disk full"):
        fs.atomic_write(target, b"new")

    assert target.read_bytes() == b"old"
    assert [p.name for p in tmp_path.iterdir()] == ["INSTALL_RECEIPT.json"]


def test_unknown_source_keys_survive_rewrite(tmp_path):
    content = json.dumps({
        "homebrew_version": "4.0.0",
        "source": {
            "tap": "homebrew/core",
            "tap_url": "https://example.com/tap.git",
            "versions": {"stable": "1.0", "devel": "1.1"},
        },
    })
    record = parse_receipt(content, tmp_path / "foo" / "1.0" / "INSTALL_RECEIPT.json")
    source = full_view(record)["source"]
    assert source["tap_url"] == "https://example.com/tap.git"
    assert source["versions"]["devel"] == "1.1"

    cask = parse_receipt(
        json.dumps({"source": {"version": "2.0", "sha256": "abc"}}),
        tmp_path / ".metadata" / "INSTALL_RECEIPT.json",
        ReceiptKind.CASK,
    )
    assert full_view(cask)["source"] == {"version": "2.0", "sha256": "abc"}
