"""console progress for cli operations."""

from contextlib import contextmanager
from typing import Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn


class ProgressManager:
    """shows a spinner while a registry request is in flight."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)
        self._enabled = self._should_show_progress()

    def _should_show_progress(self) -> bool:
        """
        check if we should show spinners.

        returns false in non-interactive environments (ci jobs, piped output).
        """
        return self.console.is_terminal

    def print(self, *args, **kwargs):
        self.console.print(*args, **kwargs)

    @contextmanager
    def spinner(self, description: str, transient: bool = True):
        """
        show an indeterminate spinner for the duration of the block.

        yields:
            task id of the spinner, or None when spinners are disabled
        """
        if not self._enabled:
            self.console.print(f"{description}...")
            yield None
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            transient=transient,
        ) as progress:
            yield progress.add_task(description, total=None)
