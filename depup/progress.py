"""Progress display on stderr while a run is in flight."""

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)


class ProgressReporter:
    """Spinner for indeterminate steps and a bar for dependency checks.

    A disabled reporter (quiet or JSON output) does nothing, so callers
    never need to check.
    """

    def __init__(self, enabled: bool = True, console: Console | None = None):
        self.enabled = enabled
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def spinner(self, message: str) -> None:
        if not self.enabled:
            return
        self.finish()
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("{task.description}"),
            console=self.console,
            transient=True,
        )
        self._task = self._progress.add_task(message, total=None)
        self._progress.start()

    def start(self, total: int, message: str) -> None:
        if not self.enabled:
            return
        self.finish()
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        )
        self._task = self._progress.add_task(message, total=total)
        self._progress.start()

    def advance(self, message: str | None = None) -> None:
        if self._progress is None or self._task is None:
            return
        if message is not None:
            self._progress.update(self._task, description=message)
        self._progress.advance(self._task)

    def finish(self) -> None:
        """Stop and clear whatever is showing."""
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None
