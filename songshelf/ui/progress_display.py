"""
Manages Rich-based progress display for Songshelf downloads.
"""
from typing import Optional

from rich.console import Console
from rich.progress import (
    Progress, BarColumn, TextColumn, TimeRemainingColumn, DownloadColumn, TransferSpeedColumn, TaskID
)

from songshelf.core.acquisition_models import AcquisitionPhase, ProgressEvent
from songshelf.utils.logger import get_logger

FETCH_PHASES = (AcquisitionPhase.FETCHING_COVER, AcquisitionPhase.FETCHING_AUDIO)


class AcquisitionProgressDisplay:
    """
    Renders the progress events of one acquisition.

    Phase changes print a status line; fetch phases drive a byte progress
    bar; the terminal event prints the one-line outcome.
    """
    def __init__(self, console: Optional[Console] = None):
        self.logger = get_logger(__name__)
        self.console = console or Console()
        self.file_progress = Progress(
            TextColumn("[progress.description]{task.description}", style="bold magenta", justify="left"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.1f}%"),
            TransferSpeedColumn(),
            DownloadColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
            expand=True
        )
        self.file_task_id: Optional[TaskID] = None
        self._current_phase: Optional[AcquisitionPhase] = None
        self.last_status: str = ""

    async def update(self, event: ProgressEvent) -> None:
        """
        Update the display for one event.

        Args:
            event: Progress event from the acquisition pipeline
        """
        if event.phase != self._current_phase:
            self._finish_file_task()
            self._current_phase = event.phase
            if not event.is_terminal:
                self.console.print(event.message, style="cyan")

        if event.phase in FETCH_PHASES and event.downloaded_bytes:
            self._update_file_task(event)

        if event.is_terminal:
            self._finish_file_task()
            style = "bold green" if event.phase == AcquisitionPhase.SUCCEEDED else "bold red"
            self.console.print(event.message, style=style)
            self._current_phase = None

        self.last_status = event.message

    def _update_file_task(self, event: ProgressEvent) -> None:
        total = event.total_bytes if event.total_bytes > 0 else None
        label = "Cover" if event.phase == AcquisitionPhase.FETCHING_COVER else "Audio"
        description = f"{label}: {event.title or ''}"
        if len(description) > 40:
            description = description[:37] + "..."

        if self.file_task_id is None:
            self.file_progress.start()
            self.file_task_id = self.file_progress.add_task(description, total=total, start=True)
        self.file_progress.update(
            self.file_task_id,
            completed=event.downloaded_bytes,
            total=total,
            description=description,
        )

    def _finish_file_task(self) -> None:
        if self.file_task_id is not None:
            self.file_progress.update(self.file_task_id, visible=False)
            self.file_progress.stop()
            self.file_progress.remove_task(self.file_task_id)
            self.file_task_id = None

    def stop(self) -> None:
        """Tear down any live progress bar."""
        self._finish_file_task()
        self._current_phase = None
