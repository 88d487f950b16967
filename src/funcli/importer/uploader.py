"""
Upload Scheduler Module

Transfers file content to server-issued direct upload URLs with a fixed
number of worker threads, acknowledging every file as soon as its transfer
succeeds.
"""

import os
import queue
import threading
from typing import Callable, Dict, List, Optional, Sequence

import requests

from funcli.config import MAX_UPLOAD_WORKERS
from funcli.constants import DEFAULT_CONTENT_TYPE
from funcli.importer.errors import UploadError
from funcli.importer.models import FileUploadEntry
from funcli.logger import logger


def direct_upload(url: str, file_path: str, content_type: Optional[str] = None) -> None:
    """PUT the file at ``file_path`` to a direct upload URL.

    The body is streamed from disk. No timeout and no retry.

    Raises:
        UploadError: on a transport error or a non-2xx response
    """
    headers = {"Content-Type": content_type or DEFAULT_CONTENT_TYPE}
    try:
        with open(file_path, 'rb') as f:
            size = os.fstat(f.fileno()).st_size
            headers["Content-Length"] = str(size)
            # an empty stream would be sent chunked, which storage rejects
            resp = requests.put(url, data=f if size else b"", headers=headers)
    except (OSError, requests.exceptions.RequestException) as e:
        raise UploadError(f"Upload failed for {file_path}: {e}") from e

    if not resp.ok:
        raise UploadError(f"Upload failed for {file_path}: HTTP {resp.status_code}")


class UploadScheduler:
    """Bounded worker pool over a shared queue of FileUploadEntry items."""

    def __init__(self, client, concurrency: int = MAX_UPLOAD_WORKERS,
                 transfer: Callable[[str, str, Optional[str]], None] = direct_upload,
                 on_progress: Optional[Callable[[int, int], None]] = None):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.client = client
        self.concurrency = concurrency
        self.transfer = transfer
        self.on_progress = on_progress

    def run(self, session_id: str, entries: Sequence[FileUploadEntry], local_paths: Dict[str, str]) -> int:
        """Upload and acknowledge every entry.

        Args:
            session_id: Import session the entries belong to
            entries: Entries that still need their content uploaded
            local_paths: relative path -> absolute local path

        Returns:
            Number of files uploaded

        Raises:
            UploadError / ApiError: the first failure, after in-flight
                transfers have drained
        """
        total = len(entries)
        if total == 0:
            return 0

        pending: "queue.Queue[FileUploadEntry]" = queue.Queue()
        for entry in entries:
            pending.put(entry)

        done = [0]
        errors: List[Exception] = []
        lock = threading.Lock()
        stop = threading.Event()

        def worker():
            while not stop.is_set():
                try:
                    entry = pending.get_nowait()
                except queue.Empty:
                    return
                try:
                    self._upload_one(session_id, entry, local_paths)
                except Exception as e:
                    with lock:
                        errors.append(e)
                    stop.set()
                    return
                with lock:
                    done[0] += 1
                    if self.on_progress:
                        self.on_progress(done[0], total)

        logger.debug(f"Uploading {total} files with {self.concurrency} workers")
        workers = [threading.Thread(target=worker, name=f"upload-{i}", daemon=True)
                   for i in range(self.concurrency)]
        for t in workers:
            t.start()
        for t in workers:
            t.join()

        if errors:
            raise errors[0]
        return done[0]

    def _upload_one(self, session_id: str, entry: FileUploadEntry, local_paths: Dict[str, str]) -> None:
        file_path = local_paths.get(entry.relative_path)
        if file_path is None:
            raise UploadError(f"Server requested upload of unknown file: {entry.relative_path}")

        self.transfer(entry.direct_upload_url, file_path, entry.content_type)
        self.client.mark_file_uploaded(session_id, entry.id)
        logger.debug(f"Uploaded {entry.relative_path}")
