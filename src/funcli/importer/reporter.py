"""
Import Reporting Module

Presentation for the import workflow. ImportSessionManager only talks to an
ImportReporter; ConsoleReporter renders through the shared rich logger.
"""

import json
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from funcli.importer.models import FileStatus, FileUploadEntry, ImportSession
from funcli.importer.poller import render_bar
from funcli.logger import Logger, logger as default_logger


def format_bytes(size: int) -> str:
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.2f} GB"


class ImportReporter:
    """No-op reporter; subclasses override what they want to show."""

    def session_resumed(self, session_id: str, space_id: Optional[str]) -> None:
        pass

    def format_detected(self, source_format: str) -> None:
        pass

    def scan_finished(self, file_count: int, total_bytes: int) -> None:
        pass

    def session_created(self, session_id: str, session_file: str) -> None:
        pass

    def manifest_submitted(self, to_upload: int, already_uploaded: int) -> None:
        pass

    @contextmanager
    def uploading(self, total: int) -> Iterator[Callable[[int, int], None]]:
        """Yields a ``(done, total)`` callback for the duration of the uploads."""
        yield lambda done, total: None

    @contextmanager
    def processing(self, session_id: str) -> Iterator[Callable[[ImportSession, int], None]]:
        """Yields a ``(session, percent)`` callback for the duration of polling."""
        yield lambda session, pct: None

    def processing_started(self, session_id: str) -> None:
        pass

    def finished(self, session: ImportSession) -> None:
        pass

    def status(self, session: ImportSession) -> None:
        pass

    def cancelled(self, session_id: str) -> None:
        pass

    def retrying(self, session_id: str) -> None:
        pass

    def file_log(self, session_id: str, files: List[FileUploadEntry], as_json: bool = False) -> None:
        pass


_STATUS_ICONS = {
    FileStatus.COMPLETED.value: "✓",
    FileStatus.FAILED.value: "✗",
    FileStatus.SKIPPED.value: "⊘",
}


class ConsoleReporter(ImportReporter):
    """Renders import progress on the terminal."""

    def __init__(self, log: Logger = default_logger):
        self.log = log

    def session_resumed(self, session_id, space_id):
        self.log.info(f"Resuming session: {session_id}", icon="🔁")

    def format_detected(self, source_format):
        self.log.info("Detected Obsidian vault, using Obsidian format", icon="🏠")

    def scan_finished(self, file_count, total_bytes):
        self.log.info(f"Scanning files... {file_count} files found ({format_bytes(total_bytes)})", icon="🔍")

    def session_created(self, session_id, session_file):
        self.log.success(f"Session ID: {session_id}")
        self.log.debug(f"Session saved to {session_file}")

    def manifest_submitted(self, to_upload, already_uploaded):
        self.log.info(f"Manifest submitted: {to_upload} files to upload ({already_uploaded} already uploaded)", icon="📋")

    @contextmanager
    def uploading(self, total):
        with self.log.progress(total, "📤 Uploading") as advance:
            last = [0]

            def update(done, _total):
                advance(done - last[0])
                last[0] = done

            yield update

    def processing_started(self, session_id):
        self.log.success("All files uploaded. Processing started.")
        self.log.info(f"Session ID: {session_id}  (run `funcli import cancel {session_id}` to cancel)")

    @contextmanager
    def processing(self, session_id):
        with self.log.status_line("Processing") as show:
            def update(session, pct):
                show(f"{render_bar(pct)}  {pct}%   {session.processed_files} / {session.total_files}")

            yield update

    def finished(self, session):
        message = (f"Import {session.status}  "
                   f"({session.failed_files} failed, {session.processed_files} imported)")
        if session.failed_files:
            self.log.warning(message)
            self.log.info(f"Run `funcli import log {session.id} --failed-only` for details, "
                          f"`funcli import retry {session.id}` to retry")
        else:
            self.log.success(message)

    def status(self, session):
        rows = {
            "Session": session.id,
            "Status": session.status,
            "Progress": f"{session.processed_files} / {session.total_files} processed",
        }
        if session.failed_files > 0:
            rows["Failed"] = session.failed_files
        self.log.summary_table("Import session", rows)

    def cancelled(self, session_id):
        self.log.success(f"Session {session_id} cancelled.")

    def retrying(self, session_id):
        self.log.info(f"Retrying failed files in session {session_id}...", icon="🔄")

    def file_log(self, session_id, files, as_json=False):
        if as_json:
            self.log.echo(json.dumps([f.to_dict() for f in files], indent=2, ensure_ascii=False))
            return

        self.log.rule(f"Import Log: {session_id}")
        for f in files:
            icon = _STATUS_ICONS.get(f.status, "⏳")
            detail = f"→ {f.document_id}" if f.document_id else (f.error_message or "")
            self.log.echo(f"  {icon} {f.relative_path:<50} {detail}")
