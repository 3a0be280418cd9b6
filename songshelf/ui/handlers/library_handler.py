"""
Handles download and library actions for the CLI.
"""
import asyncio
from typing import TYPE_CHECKING

from tabulate import tabulate

from songshelf.core.acquisition import AcquisitionPipeline
from songshelf.core.acquisition_models import AcquisitionResult
from songshelf.core.errors import PlaybackLoadError, ScanError
from songshelf.core.library_scanner import LibraryIndex
from songshelf.playback.engine import PlaybackEngine
from songshelf.ui.input_utils import get_input, get_index
from songshelf.utils.logger import get_logger
from songshelf.utils.paths import extract_source_id

if TYPE_CHECKING:
    from songshelf.ui.progress_display import AcquisitionProgressDisplay


class LibraryHandler:
    def __init__(
        self,
        pipeline: AcquisitionPipeline,
        library: LibraryIndex,
        engine: PlaybackEngine,
        progress_display: 'AcquisitionProgressDisplay',
    ):
        self.pipeline = pipeline
        self.library = library
        self.engine = engine
        self.progress_display = progress_display
        self.logger = get_logger(__name__)

    async def download(self, link: str) -> AcquisitionResult:
        """Run one acquisition, rendering its progress."""
        try:
            return await self.pipeline.run(link, self.progress_display.update)
        finally:
            self.progress_display.stop()

    async def handle_download(self) -> None:
        print("\n=== Download from YouTube ===")
        link = await get_input("Paste YouTube link here")
        if not link:
            return
        if not extract_source_id(link):
            print("Invalid YouTube URL")
            return
        await self.download(link)

    async def handle_rescan(self) -> None:
        try:
            tracks = await self.library.refresh()
        except ScanError as e:
            print(f"❌ {e.detail}")
            return
        print(f"Library contains {len(tracks)} songs.")

    async def handle_library(self) -> None:
        """List the library and play a chosen song with the listing as the autoplay queue."""
        try:
            tracks = await self.library.ensure_fresh()
        except ScanError as e:
            print(f"❌ {e.detail}")
            return

        print("\n=== My Music Library ===")
        if not tracks:
            print("No songs found.")
            print(f"Please add song folders to {self.library.store_root}")
            return

        current = self.engine.state.current_track
        rows = []
        for i, track in enumerate(tracks):
            marker = "▶" if current is not None and current.id == track.id else ""
            rows.append([i + 1, marker, track.title, track.audio_path.suffix[1:]])
        print(tabulate(rows, headers=["#", "", "Title", "Format"], tablefmt="simple"))

        index = await get_index("Song number to play (Enter to go back)", len(tracks))
        if index is None:
            return

        queue = self.library.snapshot()
        try:
            await asyncio.to_thread(self.engine.play, queue[index], queue)
        except PlaybackLoadError as e:
            print(f"❌ {e.detail}")
