"""
Import Session Manager Module

Orchestrates a bulk directory import:
scan -> manifest -> (create or resume session) -> submit manifest ->
upload missing content -> trigger processing -> poll until done.

All session state lives on the server. Locally only a SessionRecord is kept
next to the imported directory so an interrupted run resumes the same
session instead of creating a new one.
"""

import os
from typing import Iterable, List, Optional

from funcli.config import MAX_CHECKSUM_WORKERS, MAX_UPLOAD_WORKERS, POLL_INTERVAL
from funcli.constants import SOURCE_FORMAT_GENERIC, SOURCE_FORMATS
from funcli.importer.errors import ScanError, SessionFileError
from funcli.importer.manifest import build_manifest
from funcli.importer.models import FileStatus, FileUploadEntry, ImportSession, SessionRecord
from funcli.importer.poller import ProgressPoller
from funcli.importer.reporter import ImportReporter
from funcli.importer.scanner import DirectoryScanner, detect_source_format
from funcli.importer.session_store import SessionStore
from funcli.importer.uploader import UploadScheduler, direct_upload
from funcli.logger import logger


class ImportSessionManager:
    """Lifecycle operations for directory import sessions."""

    def __init__(self, client, reporter: Optional[ImportReporter] = None,
                 concurrency: int = MAX_UPLOAD_WORKERS, ignore: Iterable[str] = (),
                 session_store: Optional[SessionStore] = None,
                 poll_interval: float = POLL_INTERVAL,
                 checksum_workers: int = MAX_CHECKSUM_WORKERS,
                 transfer=direct_upload, sleep=None):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.client = client
        self.reporter = reporter or ImportReporter()
        self.concurrency = concurrency
        self.ignore = list(ignore)
        self.session_store = session_store or SessionStore()
        self.poll_interval = poll_interval
        self.checksum_workers = checksum_workers
        self.transfer = transfer
        self.sleep = sleep

    def start(self, space_id: str, directory: str, source_format: Optional[str] = None,
              session_file: Optional[str] = None) -> ImportSession:
        """Import ``directory`` into ``space_id``, resuming a previous run if one exists.

        Returns:
            The session in its terminal state

        Raises:
            ScanError: before any remote call if the directory cannot be read
            SessionFileError: before any remote call if the session file cannot be written
            UploadError / ApiError: from the upload or API phases
        """
        if source_format is not None and source_format not in SOURCE_FORMATS:
            raise ValueError(f"Unknown source format {source_format!r}, expected one of {SOURCE_FORMATS}")
        directory = os.path.abspath(directory)
        if not os.path.isdir(directory):
            raise ScanError(f"Not a directory: {directory}")

        session_path = self.session_store.path_for(directory, session_file)
        record = self.session_store.load(session_path)
        if record:
            if record.space_id and record.space_id != space_id:
                logger.warning(f"Session file belongs to space {record.space_id}, not {space_id}; resuming it anyway")
            self.reporter.session_resumed(record.session_id, record.space_id)
        else:
            self.session_store.check_writable(session_path)

        if not source_format:
            source_format = detect_source_format(directory)
            if source_format != SOURCE_FORMAT_GENERIC:
                self.reporter.format_detected(source_format)

        files = DirectoryScanner(self.ignore).scan(directory)
        self.reporter.scan_finished(len(files), sum(f.size_bytes for f in files))
        manifest = build_manifest(files, max_workers=self.checksum_workers)

        if record:
            session_id = record.session_id
        else:
            session = self.client.create_import_session(space_id, source_format)
            session_id = session.id
            try:
                self.session_store.save(session_path, SessionRecord(session_id=session_id, space_id=space_id))
            except SessionFileError as e:
                raise SessionFileError(f"{e}. Session {session_id} was created but not recorded; "
                                       f"cancel it with `funcli import cancel {session_id}`") from e
            self.reporter.session_created(session_id, session_path)

        file_entries = self.client.submit_manifest(session_id, manifest)
        to_upload = [e for e in file_entries if e.needs_upload]
        self.reporter.manifest_submitted(len(to_upload), len(file_entries) - len(to_upload))

        if to_upload:
            local_paths = {f.relative_path: f.absolute_path for f in files}
            with self.reporter.uploading(len(to_upload)) as on_progress:
                scheduler = UploadScheduler(self.client, concurrency=self.concurrency,
                                            transfer=self.transfer, on_progress=on_progress)
                scheduler.run(session_id, to_upload, local_paths)

        self.client.trigger_processing(session_id)
        self.reporter.processing_started(session_id)

        return self._poll(session_id)

    def status(self, session_id: str) -> ImportSession:
        session = self.client.get_import_session(session_id)
        self.reporter.status(session)
        return session

    def cancel(self, session_id: str) -> None:
        """Cancel remotely. The local session file is kept for status/log."""
        self.client.cancel_import_session(session_id)
        self.reporter.cancelled(session_id)

    def retry(self, session_id: str) -> ImportSession:
        """Ask the server to retry failed files and wait for the outcome."""
        self.client.retry_import_session(session_id)
        self.reporter.retrying(session_id)
        return self._poll(session_id)

    def log(self, session_id: str, failed_only: bool = False, as_json: bool = False) -> List[FileUploadEntry]:
        session = self.client.get_import_session(session_id)
        files = session.files
        if failed_only:
            files = [f for f in files if f.status == FileStatus.FAILED.value]
        self.reporter.file_log(session_id, files, as_json=as_json)
        return files

    def _poll(self, session_id: str) -> ImportSession:
        with self.reporter.processing(session_id) as on_progress:
            poller = ProgressPoller(self.client, interval=self.poll_interval,
                                    sleep=self.sleep, on_progress=on_progress)
            session = poller.wait(session_id)
        self.reporter.finished(session)
        return session
