"""
Library scanner for Songshelf.

This module scans the track store and turns every complete track folder
into a :class:`Track`, and keeps the latest scan around for the player
and the UI.
"""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from songshelf.core.errors import ScanError
from songshelf.core.events import LibraryChanged
from songshelf.core.settings import LibraryOrder
from songshelf.core.track_store import classify
from songshelf.utils.logger import get_logger


@dataclass(frozen=True)
class Track:
    """A playable track found in the store."""
    title: str
    audio_path: Path
    cover_path: Path
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def display_name(self) -> str:
        return self.title


class LibraryScanner:
    """
    Scanner for the track store.

    Each immediate subfolder of the store root is inspected
    (non-recursively); a folder missing either an audio file or a cover
    image is skipped without error.
    """

    def __init__(self):
        """Initialize the library scanner."""
        self.logger = get_logger(__name__)

    async def scan(
        self,
        store_root: Path,
        order: Union[LibraryOrder, str] = LibraryOrder.TITLE,
    ) -> List[Track]:
        """
        Scan the store for tracks.

        Args:
            store_root: Directory holding one folder per track; created if absent
            order: "title" sorts by case-folded title, "filesystem" keeps
                enumeration order

        Returns:
            List of Track objects (empty for an empty library)

        Raises:
            ScanError: If the root cannot be created or enumerated
        """
        store_root = Path(store_root)
        try:
            store_root.mkdir(parents=True, exist_ok=True)
            entries = list(store_root.iterdir())
        except OSError as e:
            self.logger.error(f"Cannot read track store {store_root}: {e}")
            raise ScanError(f"Cannot read library at {store_root}: {e.strerror or e}")

        self.logger.debug(f"Scanning track store: {store_root}")

        tracks = []
        for folder in entries:
            if folder.name.startswith('.') or not folder.is_dir():
                continue
            track = self._process_folder(folder)
            if track:
                tracks.append(track)

        if LibraryOrder(order) == LibraryOrder.TITLE:
            tracks.sort(key=lambda t: t.title.casefold())

        self.logger.info(f"Found {len(tracks)} tracks in {store_root}")
        return tracks

    def _process_folder(self, folder: Path) -> Optional[Track]:
        """
        Find the audio file and cover image inside a track folder.

        When several files of one kind exist, the last one enumerated wins.
        """
        audio_path = None
        cover_path = None
        try:
            for file_path in folder.iterdir():
                if file_path.name.startswith('.') or not file_path.is_file():
                    continue
                kind = classify(file_path)
                if kind == "audio":
                    audio_path = file_path
                elif kind == "cover":
                    cover_path = file_path
        except OSError as e:
            self.logger.warning(f"Skipping unreadable folder {folder.name}: {e}")
            return None

        if audio_path is None or cover_path is None:
            self.logger.debug(f"Folder {folder.name} missing audio or cover")
            return None

        return Track(title=folder.name, audio_path=audio_path, cover_path=cover_path)


class LibraryIndex:
    """
    The most recent scan of the track store.

    Connect :meth:`invalidate` to the ``library_changed`` signal so a new
    commit marks the index stale.
    """

    def __init__(
        self,
        store_root: Path,
        scanner: Optional[LibraryScanner] = None,
        order: Union[LibraryOrder, str] = LibraryOrder.TITLE,
    ):
        self.store_root = Path(store_root)
        self.scanner = scanner or LibraryScanner()
        self.order = LibraryOrder(order)
        self.logger = get_logger(__name__)
        self._tracks: List[Track] = []
        self.stale = True

    @property
    def tracks(self) -> List[Track]:
        return list(self._tracks)

    def invalidate(self, event: Optional[LibraryChanged] = None) -> None:
        """Mark the index stale; the next :meth:`ensure_fresh` rescans."""
        if event is not None:
            self.logger.debug(f"Library changed ({event.title}); index marked stale")
        self.stale = True

    async def refresh(self) -> List[Track]:
        """
        Rescan the store, replacing the cached tracks wholesale.

        Raises:
            ScanError: Propagated from the scanner; the previous tracks are kept
        """
        self._tracks = await self.scanner.scan(self.store_root, self.order)
        self.stale = False
        return self.tracks

    async def ensure_fresh(self) -> List[Track]:
        if self.stale:
            return await self.refresh()
        return self.tracks

    def snapshot(self) -> List[Track]:
        """A copy of the current tracks, safe to hand to the player as a queue."""
        return list(self._tracks)

    def find(self, title: str) -> Optional[Track]:
        for track in self._tracks:
            if track.title == title:
                return track
        return None

    def __len__(self) -> int:
        return len(self._tracks)
