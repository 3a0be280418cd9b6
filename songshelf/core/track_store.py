"""
Track store for Songshelf.

The store is a directory with one folder per track. A folder is named after
the track's sanitized title and holds one audio file and one cover image:

    <root>/<title>/<title>.mp3
    <root>/<title>/<title>.jpg

Only :meth:`TrackStore.commit` writes into the store.
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from songshelf.core.errors import SaveError
from songshelf.utils.logger import get_logger

AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "m4a"})
COVER_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})

COMMIT_AUDIO_SUFFIX = ".mp3"
COMMIT_COVER_SUFFIX = ".jpg"


def classify(path: Path) -> Optional[str]:
    """
    Classify a file by its extension.

    Returns:
        "audio", "cover", or None when the extension is not recognized
    """
    ext = path.suffix[1:].lower()
    if ext in AUDIO_EXTENSIONS:
        return "audio"
    if ext in COVER_EXTENSIONS:
        return "cover"
    return None


class TrackStore:
    """Filesystem layout shared by the acquisition pipeline (writer) and the library scanner (reader)."""

    def __init__(self, root: Path, staging_dir: Optional[Path] = None):
        self.root = Path(root)
        self.staging_dir = Path(staging_dir) if staging_dir else self.root.parent / ".staging"
        self.logger = get_logger(__name__)

    def ensure_root(self) -> Path:
        """Create the store root if needed."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def entry_dir(self, safe_title: str) -> Path:
        return self.root / safe_title

    def audio_path(self, safe_title: str) -> Path:
        return self.entry_dir(safe_title) / f"{safe_title}{COMMIT_AUDIO_SUFFIX}"

    def cover_path(self, safe_title: str) -> Path:
        return self.entry_dir(safe_title) / f"{safe_title}{COMMIT_COVER_SUFFIX}"

    @contextmanager
    def staging_area(self) -> Iterator[Path]:
        """
        Yield a private temporary directory for in-flight downloads.

        The directory and anything left in it are removed on exit.
        """
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(prefix="job-", dir=self.staging_dir))
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)

    def commit(self, safe_title: str, staged_cover: Path, staged_audio: Path) -> Path:
        """
        Move staged assets into the track's folder.

        The cover is moved before the audio, so a concurrent scan sees the
        folder as a track only once both files are in place. Existing files
        of the same name are set aside under hidden names and replaced. If
        anything fails, files placed by this call are removed, the set-aside
        files are restored, and the folder is removed if this call created
        it and it is left empty.

        Args:
            safe_title: Sanitized title naming the folder and both files
            staged_cover: Downloaded cover image
            staged_audio: Downloaded audio file

        Returns:
            The track's folder

        Raises:
            SaveError: If any filesystem operation fails
        """
        entry = self.entry_dir(safe_title)
        dest_cover = self.cover_path(safe_title)
        dest_audio = self.audio_path(safe_title)
        created_entry = False
        placed: List[Path] = []
        set_aside: List[Tuple[Path, Path]] = []

        try:
            self.ensure_root()
            if not entry.is_dir():
                entry.mkdir(parents=True, exist_ok=True)
                created_entry = True

            for staged, dest in ((staged_cover, dest_cover), (staged_audio, dest_audio)):
                if dest.exists() or dest.is_symlink():
                    backup = dest.with_name(f".{dest.name}.prev")
                    os.replace(dest, backup)
                    set_aside.append((backup, dest))
                shutil.move(str(staged), str(dest))
                placed.append(dest)
        except OSError as e:
            self.logger.error(f"Save error for '{safe_title}': {e}")
            self._rollback(entry, placed, set_aside, created_entry)
            raise SaveError(f"Save error: {e}")

        for backup, _ in set_aside:
            try:
                backup.unlink(missing_ok=True)
            except OSError as e:
                self.logger.warning(f"Could not remove {backup}: {e}")

        self.logger.info(f"Committed '{safe_title}' to {entry}")
        return entry

    def _rollback(
        self,
        entry: Path,
        placed: List[Path],
        set_aside: List[Tuple[Path, Path]],
        created_entry: bool,
    ) -> None:
        for path in placed:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                self.logger.warning(f"Could not remove {path} during rollback: {e}")
        for backup, dest in set_aside:
            try:
                os.replace(backup, dest)
            except OSError as e:
                self.logger.error(f"Could not restore {dest} during rollback: {e}")
        if created_entry:
            try:
                if entry.is_dir() and not any(entry.iterdir()):
                    entry.rmdir()
            except OSError as e:
                self.logger.warning(f"Could not remove {entry} during rollback: {e}")
