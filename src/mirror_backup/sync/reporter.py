"""Per-entry output of a backup run."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TaskProgressColumn, TextColumn


class ActionMarker(str, Enum):
    """Symbol printed in front of every processed entry."""
    CREATE = "+"
    UPDATE = "*"
    UNCHANGED = "="
    DELETE = "-"


FAILURE_MARK = "!"


@dataclass(frozen=True)
class ReportLine:
    """One processed entry."""
    marker: ActionMarker
    path: str
    note: Optional[str] = None
    simulated: bool = False

    def render(self) -> str:
        text = f"{self.marker.value} {self.path}"
        if self.note:
            text += f" -- {self.note}"
        if self.simulated:
            text += " (dry-run)"
        return text


def render_failure(path: str, reason: str) -> str:
    return f"{FAILURE_MARK} {path} -- {reason}"


class Reporter(ABC):
    """Receives one line per processed entry from the engine."""

    suppress_progress: bool = False

    @abstractmethod
    def report(self, line: ReportLine) -> None:
        """Emit a marker line."""

    @abstractmethod
    def failure(self, path: str, reason: str) -> None:
        """Emit a diagnostic for an entry that could not be processed."""

    def progress(self, marker: ActionMarker, path: str, done: int, total: int) -> None:
        """Called between copy chunks unless progress is suppressed."""

    def end_progress(self) -> None:
        """Clear any progress display left by an interrupted copy."""


class ConsoleReporter(Reporter):
    """Writes lines to the terminal through rich consoles."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.live_progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def _print(self, console: Console, text: str, **kwargs) -> None:
        # Paths are printed verbatim: no markup, emoji codes or wrapping.
        console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True, **kwargs)

    def report(self, line: ReportLine) -> None:
        self.end_progress()
        self._print(self.console, line.render())

    def failure(self, path: str, reason: str) -> None:
        self.end_progress()
        self._print(self.error_console, render_failure(path, reason), style="red")

    def progress(self, marker: ActionMarker, path: str, done: int, total: int) -> None:
        if not self.console.is_terminal:
            return
        description = f"{marker.value} {path}"
        if self.live_progress is not None and self.live_progress.tasks[0].description != description:
            self.end_progress()
        if self.live_progress is None:
            # Transient: the marker line replaces the bar once the copy ends.
            self.live_progress = Progress(
                TextColumn("{task.description}", markup=False),
                BarColumn(),
                TaskProgressColumn(),
                console=self.console,
                transient=True,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self.live_progress.start()
            self._task = self.live_progress.add_task(description, total=total)
        self.live_progress.update(self._task, completed=done, total=total)

    def end_progress(self) -> None:
        if self.live_progress is not None:
            self.live_progress.stop()
            self.live_progress = None
            self._task = None


class LogFileReporter(Reporter):
    """Writes plain lines to a log stream; never reports progress."""

    suppress_progress = True

    def __init__(self, stream: TextIO):
        self.stream = stream

    def report(self, line: ReportLine) -> None:
        self.stream.write(line.render() + "\n")
        self.stream.flush()

    def failure(self, path: str, reason: str) -> None:
        self.stream.write(render_failure(path, reason) + "\n")
        self.stream.flush()
