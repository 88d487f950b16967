"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import shutil
import tempfile
import threading
from typing import Dict, Generator, List, Optional

import pytest

# Make the src/ layout importable without installing
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from funcli.importer.models import FileUploadEntry, ImportSession  # noqa: E402


@pytest.fixture
def import_dir() -> Generator[str, None, None]:
    """A small directory tree to import.

    import_dir/
        README.md
        Guide/
            a.md
            b.md
            image.png
    """
    root = tempfile.mkdtemp(prefix="test_import_")

    with open(os.path.join(root, "README.md"), "w", encoding="utf-8") as f:
        f.write("---\ntitle: Project README\n---\n\n# README\n\nTop-level document.\n")

    guide = os.path.join(root, "Guide")
    os.makedirs(guide)
    with open(os.path.join(guide, "a.md"), "w", encoding="utf-8") as f:
        f.write("# A\n\nFirst steps.\n")
    with open(os.path.join(guide, "b.md"), "w", encoding="utf-8") as f:
        f.write("# B\n\nDeep dive.\n")
    with open(os.path.join(guide, "image.png"), "wb") as f:
        # Minimal PNG (1x1 pixel transparent)
        f.write(b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01'
                b'\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89'
                b'\x00\x00\x00\nIDATx\x9cc\x00\x01\x00\x00\x05\x00\x01'
                b'\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82')

    yield root

    shutil.rmtree(root, ignore_errors=True)


class FakeRemoteApi:
    """In-memory stand-in for FundamentoClient's import session operations.

    ``already_uploaded`` lists relative paths the server already has content
    for (no direct_upload_url is issued). ``statuses`` is the sequence of
    session states returned by successive get_import_session calls; the last
    one repeats.
    """

    def __init__(self, already_uploaded=(), statuses=None, total_files=None, failed_files=0,
                 files: Optional[List[FileUploadEntry]] = None):
        self.already_uploaded = set(already_uploaded)
        self.statuses = list(statuses or ["processing", "completed"])
        self.total_files = total_files
        self.failed_files = failed_files
        self.files = files or []
        self.calls: List[tuple] = []
        self.uploaded_ids: List[str] = []
        self.manifests: List[list] = []
        self._lock = threading.Lock()
        self._polls = 0
        self._next_session = 1

    def _record(self, *call):
        with self._lock:
            self.calls.append(call)

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    def create_import_session(self, space_id, source_format):
        self._record("create_import_session", space_id, source_format)
        session_id = f"sess-{self._next_session}"
        self._next_session += 1
        return ImportSession(id=session_id, status="created", space_id=space_id, source_format=source_format)

    def submit_manifest(self, session_id, entries):
        self._record("submit_manifest", session_id, len(entries))
        self.manifests.append(list(entries))
        result = []
        for i, entry in enumerate(entries):
            needs_upload = entry.relative_path not in self.already_uploaded
            result.append(FileUploadEntry(
                id=f"file-{i}",
                relative_path=entry.relative_path,
                status="pending_upload" if needs_upload else "uploaded",
                direct_upload_url=f"https://storage.example/{entry.relative_path}" if needs_upload else None,
                content_type="text/markdown" if entry.format == "markdown" else "application/octet-stream",
            ))
        if self.total_files is None:
            self.total_files = len(result)
        self.files = result
        return result

    def mark_file_uploaded(self, session_id, file_id):
        self._record("mark_file_uploaded", session_id, file_id)
        with self._lock:
            self.uploaded_ids.append(file_id)

    def trigger_processing(self, session_id):
        self._record("trigger_processing", session_id)

    def get_import_session(self, session_id):
        self._record("get_import_session", session_id)
        status = self.statuses[min(self._polls, len(self.statuses) - 1)]
        self._polls += 1
        total = self.total_files or 0
        done = total if status in ("completed", "partial", "failed") else total // 2
        return ImportSession(
            id=session_id,
            status=status,
            total_files=total,
            processed_files=done - self.failed_files if status != "processing" else done,
            failed_files=self.failed_files,
            files=list(self.files),
        )

    def cancel_import_session(self, session_id):
        self._record("cancel_import_session", session_id)

    def retry_import_session(self, session_id):
        self._record("retry_import_session", session_id)


class RecordingTransfer:
    """Transfer function stub recording (url, path, content_type) calls."""

    def __init__(self, fail_for: Optional[Dict[str, Exception]] = None):
        self.fail_for = fail_for or {}
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, url, path, content_type=None):
        with self._lock:
            self.calls.append((url, path, content_type))
        for suffix, error in self.fail_for.items():
            if path.endswith(suffix):
                raise error


@pytest.fixture
def fake_api() -> FakeRemoteApi:
    return FakeRemoteApi()


@pytest.fixture
def no_sleep():
    return lambda seconds: None
