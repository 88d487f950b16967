import os
import threading
from datetime import datetime
from enum import Enum
from contextlib import contextmanager
from typing import Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn, TimeElapsedColumn
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape


class LogLevel(Enum):
    """Log levels"""
    DEBUG = 0
    INFO = 1
    SUCCESS = 2
    WARNING = 3
    ERROR = 4


class Logger:
    """
    Console logger (thread safe).

    Supports:
    - colored output through rich
    - progress bars
    - summary tables
    - level filtering, also from the FUNCLI_LOG_LEVEL environment variable
    """

    _STYLES = {
        LogLevel.DEBUG: "dim",
        LogLevel.INFO: "blue",
        LogLevel.SUCCESS: "green",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red bold",
    }

    def __init__(self, name="funcli", level=LogLevel.INFO, console: Optional[Console] = None):
        self.name = name
        self.level = level
        self._lock = threading.Lock()
        self.console = console or Console(highlight=False)

        env_level = os.getenv("FUNCLI_LOG_LEVEL", "").upper()
        if env_level in LogLevel.__members__:
            self.level = LogLevel[env_level]

    def set_level(self, level: LogLevel):
        """Set the minimum level that gets printed."""
        self.level = level

    def _should_log(self, level: LogLevel) -> bool:
        return level.value >= self.level.value

    def _log(self, level: LogLevel, icon, message):
        if not self._should_log(level):
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        style = self._STYLES.get(level, "")
        with self._lock:
            self.console.print(f"[cyan][{timestamp}][/cyan] [{style}]{icon} {escape(str(message))}[/{style}]")

    def debug(self, message, icon="🔧"):
        """Debug output, only shown at DEBUG level."""
        self._log(LogLevel.DEBUG, icon, message)

    def info(self, message, icon="ℹ️ "):
        self._log(LogLevel.INFO, icon, message)

    def success(self, message, icon="✅"):
        self._log(LogLevel.SUCCESS, icon, message)

    def warning(self, message, icon="⚠️ "):
        self._log(LogLevel.WARNING, icon, message)

    def error(self, message, icon="❌"):
        self._log(LogLevel.ERROR, icon, message)

    def header(self, message, icon=""):
        """Print a boxed title."""
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            title = f"{icon} {message}" if icon else message
            self.console.print(Panel(title, style="bold magenta", width=60))

    def rule(self, message=""):
        """Print a horizontal separator."""
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            self.console.rule(message)

    def echo(self, text: str):
        """Print text verbatim, without markup, timestamp or level filtering."""
        with self._lock:
            self.console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)

    @contextmanager
    def progress(self, total: int, description: str = "Working"):
        """Progress bar context manager.

        Usage:
            with logger.progress(10, "Uploading") as update:
                for item in items:
                    process(item)
                    update(1)  # advance by 1
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=30),
            TaskProgressColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=self.console
        ) as progress:
            task = progress.add_task(description, total=total)

            def update(advance: int = 1):
                progress.update(task, advance=advance)

            yield update

    @contextmanager
    def status_line(self, description: str = "Processing"):
        """Single live line for externally computed progress.

        Yields a callable taking the text to show after the description.
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TextColumn("{task.fields[detail]}", markup=False),
            console=self.console
        ) as progress:
            task = progress.add_task(description, total=None, detail="")

            def update(detail: str):
                progress.update(task, detail=detail)

            yield update

    def summary_table(self, title: str, data: dict):
        """Print a two column summary table.

        Args:
            title: table title
            data: dict of row label -> value
        """
        if not self._should_log(LogLevel.INFO):
            return

        with self._lock:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            table.add_column("Field", style="dim")
            table.add_column("Value", justify="right")

            for key, value in data.items():
                lowered = key.lower()
                if "completed" in lowered or "imported" in lowered:
                    table.add_row(key, f"[green]{value}[/green]")
                elif "failed" in lowered:
                    table.add_row(key, f"[red]{value}[/red]")
                else:
                    table.add_row(key, str(value))

            self.console.print(table)


# Global logger instance
logger = Logger()
