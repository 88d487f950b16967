import base64
import hashlib
import os

import pytest

from funcli.importer.errors import ScanError
from funcli.importer.manifest import build_manifest, compute_checksum, detect_format
from funcli.importer.models import FileKind, ScannedFile
from funcli.importer.scanner import DirectoryScanner


def test_checksum_is_base64_md5(tmp_path):
    path = tmp_path / "hello.md"
    path.write_bytes(b"hello")
    assert compute_checksum(str(path)) == "XUFAKrxLKna5cZ2REBfFkg=="


def test_checksum_stable_and_sensitive_to_one_byte(tmp_path):
    path = tmp_path / "doc.md"
    path.write_bytes(b"# Title\n\nBody text\n")
    first = compute_checksum(str(path))
    assert compute_checksum(str(path)) == first

    path.write_bytes(b"# Title\n\nBody texT\n")
    assert compute_checksum(str(path)) != first


def test_checksum_streams_in_chunks(tmp_path):
    content = os.urandom(300 * 1024 + 7)
    path = tmp_path / "big.pdf"
    path.write_bytes(content)

    expected = base64.b64encode(hashlib.md5(content).digest()).decode("ascii")
    assert compute_checksum(str(path), chunk_size=4096) == expected


@pytest.mark.parametrize("ext, fmt", [
    (".md", "markdown"),
    ("docx", "docx"),
    (".odt", "odt"),
    (".doc", "doc"),
    (".PNG", "image"),
    (".svg", "image"),
    (".pdf", "pdf"),
    (".avi", "video"),
    (".xyz", "other"),
])
def test_detect_format(ext, fmt):
    assert detect_format(ext) == fmt


def test_build_manifest_keeps_scan_order(import_dir):
    files = DirectoryScanner().scan(import_dir)
    entries = build_manifest(files, max_workers=3)

    assert [e.relative_path for e in entries] == [f.relative_path for f in files]
    by_path = {e.relative_path: e for e in entries}
    assert by_path["Guide/image.png"].file_type == "attachment"
    assert by_path["Guide/image.png"].format == "image"
    assert by_path["README.md"].file_type == "document"
    assert by_path["README.md"].format == "markdown"
    assert by_path["README.md"].size_bytes == os.path.getsize(os.path.join(import_dir, "README.md"))


def test_manifest_wire_format(import_dir):
    entry = build_manifest(DirectoryScanner().scan(import_dir))[0]
    assert set(entry.to_dict()) == {"relative_path", "checksum", "file_size", "format", "file_type"}


def test_build_manifest_unreadable_file_raises_scan_error(tmp_path):
    missing = ScannedFile(
        absolute_path=str(tmp_path / "gone.md"),
        relative_path="gone.md",
        size_bytes=1,
        extension=".md",
        kind=FileKind.DOCUMENT,
    )
    with pytest.raises(ScanError):
        build_manifest([missing])


def test_build_manifest_empty():
    assert build_manifest([]) == []
