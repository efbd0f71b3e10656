"""Rich progress bar for batch parsing.

Drawn on stderr so JSON written to stdout stays clean.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from claims_timeline.batch import FileParseResult


class BatchProgress:
    """Files-completed bar fed by ``parse_files(on_progress=...)``.

    Disabled instances accept the same calls and draw nothing.
    """

    def __init__(self, total: int, enabled: bool = True, console: Optional[Console] = None):
        self.total = total
        self.enabled = enabled
        self._console = console or Console(stderr=True)
        self._progress: Optional[Progress] = None
        self._task = None
        self.completed = 0

    def start(self) -> None:
        if not self.enabled:
            return
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task("Parsing", total=self.total)

    def on_file_done(self, result: FileParseResult) -> None:
        """Advance one file and print a result line above the bar."""
        self.completed += 1
        if not self._progress:
            return
        name = escape(result.path.name)
        if result.succeeded:
            msg = f"[green]✓[/green] {name}: {result.timeline.metadata.total_claims} claims ({result.strategy})"
        else:
            msg = f"[red]✗[/red] {name}: {escape(result.error.message)}"
        self._progress.console.print(msg)
        self._progress.advance(self._task, 1)

    def finish(self) -> None:
        if self._progress:
            self._progress.stop()
            self._progress = None

    def __enter__(self) -> "BatchProgress":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.finish()
