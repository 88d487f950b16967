"""
Directory Scanner Module

Walks an import root and returns the files eligible for import.
"""

import os
import re
from typing import Iterable, List, Optional, Pattern

from funcli.constants import (
    ATTACHMENT_EXTENSIONS,
    DOCUMENT_EXTENSIONS,
    OBSIDIAN_MARKER,
    SOURCE_FORMAT_GENERIC,
    SOURCE_FORMAT_OBSIDIAN,
)
from funcli.importer.errors import ScanError
from funcli.importer.models import FileKind, ScannedFile
from funcli.logger import logger


def compile_ignore_pattern(pattern: str) -> Pattern:
    """Translate a wildcard pattern (``*`` = any run of characters) to a regex.

    Raises:
        ScanError: if the resulting expression does not compile
    """
    try:
        return re.compile(pattern.replace("*", ".*"))
    except re.error as e:
        raise ScanError(f"Invalid ignore pattern {pattern!r}: {e}") from e


def classify(extension: str) -> Optional[FileKind]:
    """Return the FileKind for an extension, or None if it is not importable."""
    extension = extension.lower()
    if extension in DOCUMENT_EXTENSIONS:
        return FileKind.DOCUMENT
    if extension in ATTACHMENT_EXTENSIONS:
        return FileKind.ATTACHMENT
    return None


def detect_source_format(directory: str) -> str:
    """Obsidian if the directory holds a vault marker folder, generic otherwise."""
    if os.path.isdir(os.path.join(directory, OBSIDIAN_MARKER)):
        return SOURCE_FORMAT_OBSIDIAN
    return SOURCE_FORMAT_GENERIC


class DirectoryScanner:
    """Collects importable files below a root directory.

    Hidden entries (leading dot) are always skipped. Ignore patterns are
    searched in each file and directory name.
    """

    def __init__(self, ignore_patterns: Iterable[str] = ()):
        self.ignore_patterns = list(ignore_patterns)
        self._compiled = [compile_ignore_pattern(p) for p in self.ignore_patterns]

    def should_ignore(self, name: str) -> bool:
        if name.startswith("."):
            return True
        return any(p.search(name) for p in self._compiled)

    def scan(self, root: str) -> List[ScannedFile]:
        """Scan ``root`` recursively.

        Returns:
            ScannedFile list sorted by relative path

        Raises:
            ScanError: if root or any sub-directory cannot be read
        """
        root = os.path.abspath(root)
        if not os.path.isdir(root):
            raise ScanError(f"Not a directory: {root}")

        results: List[ScannedFile] = []
        self._scan_dir(root, "", results)
        results.sort(key=lambda f: f.relative_path)
        logger.debug(f"Scanned {root}: {len(results)} importable files")
        return results

    def _scan_dir(self, path: str, prefix: str, results: List[ScannedFile]) -> None:
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(f"Cannot read directory {path}: {e}") from e

        for entry in entries:
            if self.should_ignore(entry.name):
                continue

            relative_path = f"{prefix}/{entry.name}" if prefix else entry.name

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                raise ScanError(f"Cannot stat {entry.path}: {e}") from e

            if is_dir:
                self._scan_dir(entry.path, relative_path, results)
            elif is_file:
                extension = os.path.splitext(entry.name)[1].lower()
                kind = classify(extension)
                if kind is None:
                    continue
                try:
                    size = entry.stat(follow_symlinks=False).st_size
                except OSError as e:
                    raise ScanError(f"Cannot stat {entry.path}: {e}") from e
                results.append(ScannedFile(
                    absolute_path=entry.path,
                    relative_path=relative_path,
                    size_bytes=size,
                    extension=extension,
                    kind=kind,
                ))
