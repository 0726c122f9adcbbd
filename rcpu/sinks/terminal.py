from __future__ import annotations

from collections import deque

from rich import box
from rich.console import Console
from rich.table import Table

from rcpu.models import UtilizationSample

HEADERS = (
    "Time",
    "Avg CPU Usage",
    "Adjusted CPU Usage",
    "Avg Remaining CPU",
    "RCPU",
    "Difference",
)


class TerminalTable:
    """Redraws a rounded table of the most recent samples on every sample."""

    def __init__(self, console: Console | None = None, max_rows: int = 20, clear: bool = True) -> None:
        self._console = console or Console()
        self._rows: deque[UtilizationSample] = deque(maxlen=max_rows)
        self._clear = clear

    async def handle_sample(self, sample: UtilizationSample) -> None:
        self._rows.append(sample)
        if self._clear:
            self._console.clear()
        self._console.print(self.build_table())

    def build_table(self) -> Table:
        table = Table(box=box.ROUNDED, header_style="bold", border_style="blue", show_lines=True)
        table.add_column(HEADERS[0], justify="left")
        for header in HEADERS[1:]:
            table.add_column(header, justify="center")

        for s in self._rows:
            table.add_row(
                s.timestamp.astimezone().strftime("%H:%M:%S"),
                f"[yellow]{s.naive_usage_percent:.2f}%[/yellow]",
                f"[green]{s.adjusted_usage_percent:.2f}%[/green]",
                f"[yellow]{s.naive_remaining_percent:.2f}%[/yellow]",
                f"[green]{s.adjusted_remaining_percent:.2f}%[/green]",
                f"[bold red]{s.difference_percent:.2f}%[/bold red]",
            )
        return table

    @property
    def rows(self) -> list[UtilizationSample]:
        return list(self._rows)
