"""
Handles transport actions for the CLI.
"""
import asyncio
from typing import Callable

from rich.console import Console
from rich.panel import Panel

from songshelf.core.errors import CommandRejected, PlaybackLoadError
from songshelf.playback.engine import PlaybackEngine, PlaybackStatus
from songshelf.ui.input_utils import get_number
from songshelf.utils.logger import get_logger


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


class PlaybackHandler:
    def __init__(self, engine: PlaybackEngine, console: Console):
        self.engine = engine
        self.console = console
        self.logger = get_logger(__name__)

    def is_playing(self) -> bool:
        return self.engine.status == PlaybackStatus.PLAYING

    def is_paused(self) -> bool:
        return self.engine.status == PlaybackStatus.PAUSED

    def has_track(self) -> bool:
        return self.engine.status != PlaybackStatus.IDLE

    def status_line(self) -> str:
        """One-line summary for the main menu header."""
        state = self.engine.refresh_progress()
        if state.current_track is None:
            return "Nothing playing"
        symbol = "▶" if state.is_playing else "⏸"
        return (
            f"{symbol} {state.current_track.title} "
            f"[{format_time(state.current_time)} / {format_time(state.duration)}]"
        )

    async def handle_now_playing(self) -> None:
        state = self.engine.refresh_progress()
        if state.current_track is None:
            print("Nothing playing")
            return
        lines = [
            f"[bold]Title:[/] {state.current_track.title}",
            f"[bold]Status:[/] {state.status.value.capitalize()}",
            f"[bold]Position:[/] {format_time(state.current_time)} / {format_time(state.duration)}",
        ]
        if state.queue_position is not None:
            lines.append(f"[bold]Queue:[/] {state.queue_position + 1} of {len(state.queue)}")
        self.console.print(Panel("\n".join(lines), title="Now Playing", border_style="blue", width=80))

    async def handle_pause(self) -> None:
        await self._run(self.engine.pause)

    async def handle_resume(self) -> None:
        await self._run(self.engine.resume)

    async def handle_stop(self) -> None:
        await self._run(self.engine.stop)

    async def handle_next(self) -> None:
        if not await asyncio.to_thread(self.engine.next):
            print("No next song")

    async def handle_previous(self) -> None:
        if not await asyncio.to_thread(self.engine.previous):
            print("No previous song")

    async def handle_seek(self) -> None:
        state = self.engine.refresh_progress()
        seconds = await get_number(
            f"Seek to second (0-{int(state.duration)})", round(state.current_time)
        )
        if seconds is None:
            return
        try:
            position = await asyncio.to_thread(self.engine.seek, seconds)
        except CommandRejected as e:
            print(e.detail)
            return
        print(f"Position: {format_time(position)}")

    async def _run(self, operation: Callable[[], None]) -> None:
        try:
            await asyncio.to_thread(operation)
        except (CommandRejected, PlaybackLoadError) as e:
            print(e.detail)
