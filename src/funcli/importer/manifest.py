"""
Manifest Builder Module

Computes the checksum and metadata the server needs to decide which files
must be uploaded.
"""

import base64
import hashlib
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from funcli.config import MAX_CHECKSUM_WORKERS
from funcli.constants import CHECKSUM_CHUNK_SIZE, DEFAULT_FORMAT, FORMAT_MAP
from funcli.importer.errors import ScanError
from funcli.importer.models import ManifestEntry, ScannedFile
from funcli.logger import logger


def compute_checksum(file_path: str, chunk_size: int = CHECKSUM_CHUNK_SIZE) -> str:
    """Base64 encoded MD5 of the file content, read in chunks.

    The server compares this value to decide whether content is already
    stored, so algorithm and encoding must not change.
    """
    md5 = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            md5.update(chunk)
    return base64.b64encode(md5.digest()).decode("ascii")


def detect_format(extension: str) -> str:
    """Map an extension (with or without the dot) to its manifest format."""
    return FORMAT_MAP.get(extension.lower().lstrip("."), DEFAULT_FORMAT)


def build_entry(scanned: ScannedFile) -> ManifestEntry:
    try:
        checksum = compute_checksum(scanned.absolute_path)
    except OSError as e:
        raise ScanError(f"Cannot read {scanned.relative_path}: {e}") from e

    return ManifestEntry(
        relative_path=scanned.relative_path,
        checksum=checksum,
        size_bytes=scanned.size_bytes,
        format=detect_format(scanned.extension),
        file_type=scanned.kind.value,
    )


def build_manifest(files: Sequence[ScannedFile], max_workers: int = MAX_CHECKSUM_WORKERS) -> List[ManifestEntry]:
    """Build manifest entries for ``files``, keeping their order."""
    if not files:
        return []

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        entries = list(executor.map(build_entry, files))

    logger.debug(f"Built manifest with {len(entries)} entries")
    return entries
