import os
from typing import Optional
from urllib.parse import urlparse

import keyring
from dotenv import load_dotenv
from keyring.errors import KeyringError, PasswordDeleteError

from funcli.logger import logger

load_dotenv()

KEYRING_SERVICE = "funcli"
KEYRING_USERNAME = "api_key"

# ============================================================
# Application Constants
# ============================================================
DEFAULT_BASE_URL: str = "https://fundamento.cloud"

# Session file written next to the imported directory
SESSION_FILE: str = ".fundamento-session.json"

# Concurrent direct uploads per import run
MAX_UPLOAD_WORKERS: int = 5

# Concurrent checksum computations while building a manifest
MAX_CHECKSUM_WORKERS: int = 4

# Seconds between import session status polls
POLL_INTERVAL: float = 2.0

# Retry settings for idempotent API reads
API_MAX_RETRIES: int = 3
API_RETRY_BASE_DELAY: float = 1.0

# Timeout (seconds) for JSON API calls; direct uploads have none
API_TIMEOUT: float = 30


class ConfigError(Exception):
    """Raised when the client cannot be configured (missing key, bad URL)."""


# ============================================================
# Secure Token Storage (keyring)
# ============================================================
def load_api_key_from_keyring() -> Optional[str]:
    """Load the API key stored with `funcli token set`."""
    try:
        return keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except KeyringError as e:
        logger.debug(f"Keyring unavailable: {e}")
        return None


def save_api_key(api_key: str) -> None:
    """Store the API key in the system keyring."""
    if not api_key:
        raise ConfigError("Refusing to store an empty API key.")
    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, api_key)
    except KeyringError as e:
        raise ConfigError(f"Could not store API key in keyring: {e}") from e


def clear_api_key() -> bool:
    """Remove the stored API key. Returns False if nothing was stored."""
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
        return True
    except PasswordDeleteError:
        return False
    except KeyringError as e:
        raise ConfigError(f"Could not access keyring: {e}") from e


def validate_base_url(base_url: str) -> str:
    """Normalize the server URL, requiring an http(s) scheme and a host."""
    normalized = base_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigError(f"Base URL must include scheme and host (e.g. {DEFAULT_BASE_URL}), got: {base_url!r}")
    return normalized


class Config:
    """Connection settings for the Fundamento API.

    The API key is taken from the explicit argument, then the
    FUNDAMENTO_API_KEY environment variable (a .env file is honoured),
    then the system keyring.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.base_url = validate_base_url(base_url or os.getenv("FUNDAMENTO_BASE_URL") or DEFAULT_BASE_URL)
        self.api_key = api_key or os.getenv("FUNDAMENTO_API_KEY") or load_api_key_from_keyring()

        if not self.api_key:
            raise ConfigError(
                "API key is required. Set FUNDAMENTO_API_KEY, run `funcli token set <key>` or use --token."
            )

    def __repr__(self):
        return f"Config(base_url={self.base_url!r})"
