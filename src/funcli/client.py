"""
Fundamento API Client

Thin wrapper over the Fundamento REST API:
- Spaces and documents (read-only pass-through)
- Import sessions (create, manifest, upload acknowledgement, processing,
  status, cancel, retry)

Every non-2xx response raises ApiError. Only idempotent reads are retried.
"""

from typing import Any, Dict, List, Optional

import requests

from funcli import __version__
from funcli.config import Config, API_TIMEOUT
from funcli.core.retry import retry_on_failure
from funcli.importer.models import FileUploadEntry, ImportSession, ManifestEntry
from funcli.logger import logger


class ApiError(Exception):
    """Non-success response from the Fundamento API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"API Error ({status_code}): {message}")


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return str(message)
    return resp.reason or "Unknown error"


class FundamentoClient:
    """Client for the Fundamento API."""

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.base_url
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.api_key}",
            "Accept": "application/json",
            "User-Agent": f"funcli/{__version__}",
        })

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "FundamentoClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _request(self, method: str, path: str, text: bool = False, **kwargs) -> Any:
        """Send a request and return the decoded JSON body (None when empty), or the raw text."""
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", API_TIMEOUT)
        logger.debug(f"{method} {path}")
        resp = self.session.request(method, url, **kwargs)
        if not resp.ok:
            raise ApiError(resp.status_code, _error_message(resp))
        if text:
            return resp.text
        if not resp.content:
            return None
        return resp.json()

    # ------------------------------------------------------------------
    # Spaces & documents
    # ------------------------------------------------------------------

    @retry_on_failure()
    def list_spaces(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/v1/spaces")

    @retry_on_failure()
    def get_space(self, space_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/api/v1/spaces/{space_id}")

    @retry_on_failure()
    def list_documents(self, space_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/v1/spaces/{space_id}/documents")

    @retry_on_failure()
    def get_document(self, document_id: str, format: str = "markdown") -> Any:
        """Fetch a document; markdown comes back as text, json as a dict."""
        return self._request("GET", f"/api/v1/documents/{document_id}.{format}", text=format != "json")

    # ------------------------------------------------------------------
    # Import sessions
    # ------------------------------------------------------------------

    def create_import_session(self, space_id: str, source_format: str) -> ImportSession:
        data = self._request("POST", "/api/v1/import_sessions", json={
            "import_session": {"space_id": space_id, "source_format": source_format}
        })
        return ImportSession.from_dict(data)

    def submit_manifest(self, session_id: str, entries: List[ManifestEntry]) -> List[FileUploadEntry]:
        """Submit the manifest; the server answers with one entry per file.

        Entries without a direct_upload_url already have matching content on
        the server.
        """
        data = self._request("POST", f"/api/v1/import_sessions/{session_id}/manifest", json={
            "files": [e.to_dict() for e in entries]
        })
        files = (data.get("files") or []) if isinstance(data, dict) else (data or [])
        return [FileUploadEntry.from_dict(f) for f in files]

    def mark_file_uploaded(self, session_id: str, file_id: str) -> None:
        self._request("POST", f"/api/v1/import_sessions/{session_id}/files/{file_id}/uploaded")

    def trigger_processing(self, session_id: str) -> None:
        self._request("POST", f"/api/v1/import_sessions/{session_id}/process")

    @retry_on_failure()
    def get_import_session(self, session_id: str) -> ImportSession:
        return ImportSession.from_dict(self._request("GET", f"/api/v1/import_sessions/{session_id}"))

    def cancel_import_session(self, session_id: str) -> None:
        self._request("POST", f"/api/v1/import_sessions/{session_id}/cancel")

    def retry_import_session(self, session_id: str) -> None:
        self._request("POST", f"/api/v1/import_sessions/{session_id}/retry")
