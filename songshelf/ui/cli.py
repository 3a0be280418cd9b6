"""
Command-line interface for Songshelf.

This module wires the store, library, downloader and player together and
drives them from a numbered menu.
"""

from typing import Optional

from rich.console import Console

from songshelf import __version__
from songshelf.core.acquisition import AcquisitionPipeline
from songshelf.core.errors import PlaybackLoadError, ScanError
from songshelf.core.library_scanner import LibraryIndex, Track
from songshelf.core.settings import Settings
from songshelf.core.track_store import TrackStore
from songshelf.playback.backend import MpvBackend
from songshelf.playback.engine import PlaybackEngine
from songshelf.playback.now_playing import NowPlayingCenter
from songshelf.playback.remote import RemoteCommandCenter
from songshelf.ui.handlers import LibraryHandler, PlaybackHandler, SettingsHandler
from songshelf.ui.menu import Menu, MenuItem
from songshelf.ui.progress_display import AcquisitionProgressDisplay
from songshelf.utils.logger import get_logger


class CLI:
    """
    Command-line interface for Songshelf.

    This class provides methods for interacting with the user
    through the command line.
    """

    def __init__(self, settings: Settings, engine: Optional[PlaybackEngine] = None):
        """
        Initialize the CLI.

        Args:
            settings: Application settings
            engine: Player to drive; an mpv-backed one is created if omitted
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self.console = Console()

        self.store = TrackStore(settings.store_root, settings.staging_dir)
        self.store.ensure_root()
        self.library = LibraryIndex(settings.store_root, order=settings.library_order)
        self.pipeline = AcquisitionPipeline(settings, store=self.store)
        self.pipeline.library_changed.connect(self.library.invalidate)

        self.engine = engine or PlaybackEngine(MpvBackend(settings), NowPlayingCenter())
        self.now_playing = self.engine.now_playing
        self.remote = RemoteCommandCenter(self.engine)
        self.engine.track_changed.connect(self._on_track_changed)
        self.engine.playback_error.connect(self._on_playback_error)

        self.progress_display = AcquisitionProgressDisplay(self.console)
        self.library_handler = LibraryHandler(self.pipeline, self.library, self.engine, self.progress_display)
        self.playback_handler = PlaybackHandler(self.engine, self.console)
        self.settings_handler = SettingsHandler(self.settings)

    async def print_logo(self) -> None:
        """Print the application banner."""
        self.console.print(f"[bold blue]♫ Songshelf[/] v{__version__}")
        self.console.print(f"Library: {self.settings.store_root}")

    def _on_track_changed(self, track: Optional[Track]) -> None:
        if track is None:
            self.logger.debug("Playback idle")
        else:
            self.logger.info(f"Now playing: {track.title}")

    def _on_playback_error(self, error: PlaybackLoadError) -> None:
        # Raised from the player thread during autoplay
        self.logger.error(f"Autoplay failed: {error.detail}")
        self.console.print(f"\n[red]❌ {error.detail}[/]")

    async def run_download(self, link: str) -> int:
        """Download one link without entering the menu; returns an exit code."""
        try:
            result = await self.library_handler.download(link)
        finally:
            await self.close()
        return 0 if result.success else 1

    async def refresh_library(self) -> None:
        """Rescan the library if a download or rescan marked it stale."""
        try:
            await self.library.ensure_fresh()
        except ScanError as e:
            self.logger.warning(f"Library scan failed: {e.detail}")
            self.console.print(f"[red]❌ {e.detail}[/]")

    async def _build_main_menu(self) -> Menu:
        """Builds the main menu object."""
        playback = self.playback_handler
        items = [
            MenuItem(label="Download from YouTube", action=self.library_handler.handle_download),
            MenuItem(label=lambda: f"My Music ({len(self.library)} songs)", action=self.library_handler.handle_library),
            MenuItem(label="Now Playing", action=playback.handle_now_playing, enabled=playback.has_track),
            MenuItem(label="Pause", action=playback.handle_pause, enabled=playback.is_playing),
            MenuItem(label="Resume", action=playback.handle_resume, enabled=playback.is_paused),
            MenuItem(label="Next", action=playback.handle_next, enabled=playback.has_track),
            MenuItem(label="Previous", action=playback.handle_previous, enabled=playback.has_track),
            MenuItem(label="Seek", action=playback.handle_seek, enabled=playback.has_track),
            MenuItem(label="Stop", action=playback.handle_stop, enabled=playback.has_track),
            MenuItem(label="Rescan Library", action=self.library_handler.handle_rescan),
            MenuItem(label="Settings", action=self.settings_handler.handle_settings),
        ]
        return Menu(title="Main Menu", items=items, exit_label="Exit")

    async def close(self) -> None:
        self.progress_display.stop()
        self.engine.close()
        await self.pipeline.close()

    async def start(self) -> int:
        """
        Start the CLI.
        """
        await self.print_logo()

        main_menu = await self._build_main_menu()
        exit_code = 0

        try:
            while True:
                self.progress_display.stop()
                await self.refresh_library()

                action_result = await main_menu.display(header=self.playback_handler.status_line())

                if action_result is None:
                    print("Goodbye!")
                    break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            exit_code = 1
        except Exception as e:
            self.logger.error(f"CLI Error: {e}", exc_info=True)
            print(f"\nAn unexpected error occurred: {e}")
            exit_code = 1
        finally:
            await self.close()

        return exit_code
