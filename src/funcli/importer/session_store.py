import json
import os
import tempfile
from typing import Optional

from funcli.config import SESSION_FILE
from funcli.importer.errors import SessionFileError
from funcli.importer.models import SessionRecord
from funcli.logger import logger


class SessionStore:
    """
    Persists the link between an import root and its remote session id.

    A readable record means the session must be resumed. Anything that is not
    a readable record (missing, unreadable, corrupt) means "start fresh".
    """

    def __init__(self, file_name: str = SESSION_FILE):
        self.file_name = file_name

    def path_for(self, directory: str, override: Optional[str] = None) -> str:
        if override:
            return os.path.abspath(override)
        return os.path.join(os.path.abspath(directory), self.file_name)

    def load(self, path: str) -> Optional[SessionRecord]:
        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring session file {path}: expected a JSON object")
            return None

        session_id = data.get("session_id")
        if isinstance(session_id, bool) or not isinstance(session_id, (str, int)) or session_id == "":
            logger.warning(f"Ignoring session file {path}: no session_id")
            return None

        space_id = data.get("space_id")
        return SessionRecord(
            session_id=str(session_id),
            space_id=None if space_id is None else str(space_id),
        )

    def check_writable(self, path: str) -> None:
        """Raise SessionFileError unless a record could be saved at ``path``."""
        directory = os.path.dirname(os.path.abspath(path))
        if not os.path.isdir(directory):
            raise SessionFileError(f"Cannot write session file {path}: directory does not exist")
        if not os.access(directory, os.W_OK | os.X_OK):
            raise SessionFileError(f"Cannot write session file {path}: directory is not writable")
        if os.path.isdir(path):
            raise SessionFileError(f"Cannot write session file {path}: path is a directory")

    def save(self, path: str, record: SessionRecord) -> None:
        """Write the whole record atomically (temp file + rename).

        Raises:
            SessionFileError: if the file cannot be written
        """
        directory = os.path.dirname(os.path.abspath(path))
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".session-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(record.to_dict(), f, indent=2, ensure_ascii=False)
                    f.write("\n")
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise SessionFileError(f"Cannot write session file {path}: {e}") from e
        logger.debug(f"Saved session {record.session_id} to {path}")
