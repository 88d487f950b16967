"""
Constants Module

Defines constants used across the funcli project.
"""

# =============================================================================
# File Classification
# =============================================================================

# Extensions imported as documents (converted server side)
DOCUMENT_EXTENSIONS = frozenset({".md", ".docx", ".odt", ".doc"})

# Extensions imported as attachments (stored as-is)
ATTACHMENT_EXTENSIONS = frozenset({
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg",
    ".pdf",
    ".mp4", ".mov", ".avi",
})

# Extension (without dot) -> manifest format
FORMAT_MAP = {
    "md": "markdown",
    "docx": "docx",
    "odt": "odt",
    "doc": "doc",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "gif": "image",
    "webp": "image",
    "svg": "image",
    "pdf": "pdf",
    "mp4": "video",
    "mov": "video",
    "avi": "video",
}

DEFAULT_FORMAT = "other"


# =============================================================================
# Import Sources
# =============================================================================

SOURCE_FORMAT_GENERIC = "generic"
SOURCE_FORMAT_OBSIDIAN = "obsidian"
SOURCE_FORMATS = (SOURCE_FORMAT_GENERIC, SOURCE_FORMAT_OBSIDIAN)

# Directory whose presence marks an Obsidian vault
OBSIDIAN_MARKER = ".obsidian"


# =============================================================================
# Transfers
# =============================================================================

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Read size used when streaming files through the checksum digest
CHECKSUM_CHUNK_SIZE = 64 * 1024

# Width (characters) of the processing progress bar
PROGRESS_BAR_WIDTH = 20
