"""
Data types shared by the import pipeline.

Wire dictionaries use the server's snake_case field names; ``from_dict``
helpers tolerate missing optional fields and ignore unknown ones.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class FileKind(str, Enum):
    DOCUMENT = "document"
    ATTACHMENT = "attachment"


class FileStatus(str, Enum):
    """Per-file state reported by the server."""
    PENDING_UPLOAD = "pending_upload"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SessionStatus(str, Enum):
    """Import session state. Only the server moves a session between states."""
    CREATED = "created"
    MANIFEST_SUBMITTED = "manifest_submitted"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


# Sets of plain strings (str-mixin Enum members hash by name, not value)
FINISHED_STATUSES = frozenset(s.value for s in (SessionStatus.COMPLETED, SessionStatus.PARTIAL, SessionStatus.FAILED))
TERMINAL_STATUSES = FINISHED_STATUSES | {SessionStatus.CANCELLED.value}


@dataclass(frozen=True)
class ScannedFile:
    absolute_path: str
    relative_path: str  # POSIX separators, relative to the import root
    size_bytes: int
    extension: str      # lower case, with leading dot
    kind: FileKind


@dataclass(frozen=True)
class ManifestEntry:
    relative_path: str
    checksum: str
    size_bytes: int
    format: str
    file_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "checksum": self.checksum,
            "file_size": self.size_bytes,
            "format": self.format,
            "file_type": self.file_type,
        }


@dataclass
class FileUploadEntry:
    id: str
    relative_path: str
    status: str = FileStatus.PENDING_UPLOAD.value
    direct_upload_url: Optional[str] = None
    content_type: Optional[str] = None
    document_id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def needs_upload(self) -> bool:
        return bool(self.direct_upload_url)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileUploadEntry":
        return cls(
            id=str(data["id"]),
            relative_path=data["relative_path"],
            status=data.get("status") or FileStatus.PENDING_UPLOAD.value,
            direct_upload_url=data.get("direct_upload_url"),
            content_type=data.get("content_type"),
            document_id=data.get("document_id"),
            error_message=data.get("error_message"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ImportSession:
    id: str
    status: str
    space_id: Optional[str] = None
    source_format: Optional[str] = None
    total_files: int = 0
    processed_files: int = 0
    failed_files: int = 0
    files: List[FileUploadEntry] = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportSession":
        return cls(
            id=str(data["id"]),
            status=data.get("status") or SessionStatus.CREATED.value,
            space_id=data.get("space_id"),
            source_format=data.get("source_format"),
            total_files=int(data.get("total_files") or 0),
            processed_files=int(data.get("processed_files") or 0),
            failed_files=int(data.get("failed_files") or 0),
            files=[FileUploadEntry.from_dict(f) for f in data.get("files") or []],
        )


@dataclass(frozen=True)
class SessionRecord:
    """Local pointer from an import root to its remote session."""
    session_id: str
    space_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"session_id": self.session_id, "space_id": self.space_id}
