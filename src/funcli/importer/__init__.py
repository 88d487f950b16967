"""
Import Module Package

Bulk directory import into a Fundamento space.

Structure:
    - scanner.py: DirectoryScanner - eligible files below an import root
    - manifest.py: build_manifest - checksums and metadata per file
    - session_store.py: SessionStore - local session file for resumption
    - uploader.py: UploadScheduler - bounded concurrent direct uploads
    - poller.py: ProgressPoller - waits for server side processing
    - manager.py: ImportSessionManager - start/status/cancel/retry/log
    - reporter.py: ImportReporter, ConsoleReporter - presentation

Usage:
    from funcli.importer import ImportSessionManager, ConsoleReporter
"""

from funcli.importer.errors import ImportSessionError, ScanError, SessionFileError, UploadError
from funcli.importer.manager import ImportSessionManager
from funcli.importer.reporter import ImportReporter, ConsoleReporter
from funcli.importer.scanner import DirectoryScanner
from funcli.importer.session_store import SessionStore
from funcli.importer.uploader import UploadScheduler
from funcli.importer.poller import ProgressPoller

__all__ = ['ImportSessionManager', 'ImportReporter', 'ConsoleReporter', 'DirectoryScanner',
           'SessionStore', 'UploadScheduler', 'ProgressPoller',
           'ImportSessionError', 'ScanError', 'SessionFileError', 'UploadError']
