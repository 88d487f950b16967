class ImportSessionError(Exception):
    """Base class for failures of a directory import run."""


class ScanError(ImportSessionError):
    """The import directory could not be scanned or checksummed.

    Raised before any remote call is made.
    """


class UploadError(ImportSessionError):
    """A direct content upload failed; the whole run is aborted."""


class SessionFileError(ImportSessionError):
    """The local session file cannot be written."""
