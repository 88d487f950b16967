"""
Progress Poller Module

Polls an import session until the server stops working on it.
"""

import time
from typing import Callable, Optional

from funcli.config import POLL_INTERVAL
from funcli.constants import PROGRESS_BAR_WIDTH
from funcli.importer.models import ImportSession
from funcli.logger import logger


def progress_percent(processed: int, total: int) -> int:
    """Rounded percentage in [0, 100]; 0 when there is nothing to process."""
    if total <= 0:
        return 0
    pct = round(processed * 100 / total)
    return max(0, min(100, pct))


def render_bar(percent: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    percent = max(0, min(100, percent))
    filled = round(width * percent / 100)
    return "[" + "█" * filled + "░" * (width - filled) + "]"


class ProgressPoller:
    """Fetches session status every ``interval`` seconds until it is terminal.

    There is no overall timeout; server side processing may take as long as
    it takes.
    """

    def __init__(self, client, interval: float = POLL_INTERVAL,
                 sleep: Optional[Callable[[float], None]] = None,
                 on_progress: Optional[Callable[[ImportSession, int], None]] = None):
        self.client = client
        self.interval = interval
        self.sleep = sleep or time.sleep
        self.on_progress = on_progress

    def wait(self, session_id: str) -> ImportSession:
        polls = 0
        while True:
            self.sleep(self.interval)
            session = self.client.get_import_session(session_id)
            polls += 1
            pct = progress_percent(session.processed_files, session.total_files)
            if self.on_progress:
                self.on_progress(session, pct)

            if session.is_terminal:
                logger.debug(f"Session {session_id} reached {session.status} after {polls} polls")
                return session
