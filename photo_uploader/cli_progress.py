"""Console rendering and progress helpers for the photo-up CLI."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
import time

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from .models import SearchResult, TaskSnapshot, UploadStatus

console = Console()

_STATUS_LABELS = {
    UploadStatus.PENDING: "[dim]Waiting...[/dim]",
    UploadStatus.UPLOADING: "[cyan]Uploading...[/cyan]",
    UploadStatus.COMPLETED: "[green]Completed ✓[/green]",
    UploadStatus.ERROR: "[red]Failed[/red]",
}


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]photo-up[/bold green]",
        subtitle="[dim]photo uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_search_results(query: str, results: Sequence[SearchResult]) -> None:
    if not results:
        console.print(f"[yellow]No results for[/yellow] {query!r}")
        return
    table = Table(title=f"Results for {query!r}")
    table.add_column("Rank", justify="right", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("URL", overflow="fold")
    for result in results:
        table.add_row(str(result.rank), f"{result.score:.4f}", result.url)
    console.print(table)


def render_gallery(records: List[Dict[str, Any]]) -> None:
    if not records:
        console.print("[yellow]No images uploaded yet.[/yellow]")
        return
    table = Table(title=f"{len(records)} image(s)")
    table.add_column("Uploaded", style="dim")
    table.add_column("File", style="bold")
    table.add_column("Size", justify="right")
    table.add_column("URL", overflow="fold")
    for record in records:
        table.add_row(
            str(record.get("uploadedAt") or "-"),
            str(record.get("fileName") or "-"),
            _human_size(int(record.get("fileSize") or 0)),
            str(record.get("url") or "-"),
        )
    console.print(table)


class BatchProgressDisplay:
    """
    Event-based console display for a batch upload.

    Shows one row per task plus "N of M completed" and a failure count.
    It only reads snapshots handed to it by the orchestrator.
    """

    def __init__(self, live: bool = True):
        self._rows: Dict[str, TaskSnapshot] = {}
        self._order: List[str] = []
        self._use_live = live
        self._live: Optional[Live] = None
        self._overall = Progress(
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("{task.completed}/{task.total}"),
            TextColumn("[dim]{task.fields[detail]}", justify="left"),
            expand=False,
            console=console,
        )
        self._overall_id = self._overall.add_task(
            "overall", label="Uploading Images", total=1, completed=0, detail=""
        )

    @property
    def completed(self) -> int:
        return sum(1 for s in self._rows.values() if s.status is UploadStatus.COMPLETED)

    @property
    def failed(self) -> int:
        return sum(1 for s in self._rows.values() if s.status is UploadStatus.ERROR)

    def summary(self) -> str:
        text = f"{self.completed} of {len(self._rows)} completed"
        if self.failed:
            text += f" · {self.failed} failed"
        return text

    def _table(self) -> Table:
        table = Table(expand=False, show_edge=False)
        table.add_column("File", style="bold", overflow="ellipsis", max_width=48)
        table.add_column("Size", justify="right")
        table.add_column("Status")
        table.add_column("%", justify="right")
        for task_id in self._order:
            snap = self._rows[task_id]
            status = _STATUS_LABELS[snap.status]
            if snap.status is UploadStatus.ERROR and snap.error_message:
                status = f"[red]Failed: {snap.error_message}[/red]"
            table.add_row(snap.filename, _human_size(snap.file_size), status, str(snap.progress))
        return table

    def _renderable(self) -> Group:
        return Group(self._overall, self._table())

    def _refresh(self) -> None:
        self._overall.update(
            self._overall_id,
            completed=self.completed,
            total=max(len(self._rows), 1),
            detail=self.summary(),
        )
        if self._live is not None:
            self._live.update(self._renderable())

    def on_batch_created(self, batch: Any) -> None:
        self._rows.clear()
        self._order.clear()
        for snap in batch.snapshot():
            self._rows[snap.task_id] = snap
            self._order.append(snap.task_id)
        if self._use_live and self._live is None:
            self._live = Live(
                self._renderable(),
                console=console,
                refresh_per_second=8,
                vertical_overflow="visible",
            )
            self._live.start()
        self._refresh()

    def on_task_update(self, snapshot: TaskSnapshot) -> None:
        if snapshot.task_id not in self._rows:
            self._order.append(snapshot.task_id)
        self._rows[snapshot.task_id] = snapshot
        self._refresh()

    def on_batch_settled(self, batch: Any, urls: List[str]) -> None:
        self._refresh()
        if self._live is not None:
            self._live.stop()
            self._live = None
        elif not self._use_live:
            console.print(self._table())
        console.print(f"[bold]Done[/bold] {self.summary()}")

    def on_validation_error(self, error: Exception) -> None:
        stamp = time.strftime("%H:%M:%S")
        console.print(f"[dim]{stamp}[/dim] [red]FAIL[/red] {error}")

    def on_notification_failed(self, error: Exception) -> None:
        console.print(f"[yellow]Indexing notification failed:[/yellow] {error}")
