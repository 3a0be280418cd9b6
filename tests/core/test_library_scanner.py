from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio

from songshelf.core.errors import ScanError
from songshelf.core.events import LibraryChanged
from songshelf.core.library_scanner import LibraryIndex, LibraryScanner
from songshelf.core.settings import LibraryOrder


def make_track_folder(root: Path, name: str, audio: str = "mp3", cover: str = "jpg") -> Path:
    folder = root / name
    folder.mkdir(parents=True)
    if audio:
        (folder / f"{name}.{audio}").write_bytes(b"audio")
    if cover:
        (folder / f"{name}.{cover}").write_bytes(b"cover")
    return folder


@pytest.fixture
def store_root(tmp_path):
    root = tmp_path / "Songs"
    root.mkdir()
    return root


@pytest_asyncio.fixture
async def scanner():
    return LibraryScanner()


@pytest.mark.asyncio
async def test_scan_creates_missing_root(scanner, tmp_path):
    root = tmp_path / "missing" / "Songs"
    assert await scanner.scan(root) == []
    assert root.is_dir()


@pytest.mark.asyncio
async def test_scan_complete_folders(scanner, store_root):
    make_track_folder(store_root, "Beta", audio="wav", cover="png")
    make_track_folder(store_root, "alpha")

    tracks = await scanner.scan(store_root)

    assert [t.title for t in tracks] == ["alpha", "Beta"]
    assert tracks[0].audio_path == store_root / "alpha" / "alpha.mp3"
    assert tracks[0].cover_path == store_root / "alpha" / "alpha.jpg"
    assert tracks[1].audio_path.suffix == ".wav"
    assert tracks[0].id != tracks[1].id


@pytest.mark.asyncio
async def test_scan_title_is_folder_name(scanner, store_root):
    folder = store_root / "Folder Name"
    folder.mkdir()
    (folder / "whatever.m4a").write_bytes(b"a")
    (folder / "art.jpeg").write_bytes(b"c")

    tracks = await scanner.scan(store_root)

    assert len(tracks) == 1
    assert tracks[0].title == "Folder Name"


@pytest.mark.asyncio
async def test_scan_skips_incomplete_and_hidden(scanner, store_root):
    make_track_folder(store_root, "Complete")
    make_track_folder(store_root, "NoCover", cover=None)
    make_track_folder(store_root, "NoAudio", audio=None)
    make_track_folder(store_root, ".hidden")
    (store_root / "stray.mp3").write_bytes(b"a")
    extra = store_root / "Other"
    extra.mkdir()
    (extra / "readme.txt").write_text("x")

    tracks = await scanner.scan(store_root)

    assert [t.title for t in tracks] == ["Complete"]


def test_last_file_of_each_kind_wins(store_root):
    folder = make_track_folder(store_root, "Song")
    second_audio = folder / "second.mp3"
    second_audio.write_bytes(b"a")
    fake_folder = MagicMock()
    fake_folder.name = "Song"
    fake_folder.iterdir.return_value = [folder / "Song.mp3", folder / "Song.jpg", second_audio]

    track = LibraryScanner()._process_folder(fake_folder)

    assert track.audio_path == second_audio
    assert track.cover_path == folder / "Song.jpg"


@pytest.mark.asyncio
async def test_scan_filesystem_order(scanner, store_root):
    for name in ["b", "A", "c"]:
        make_track_folder(store_root, name)
    expected = [p.name for p in store_root.iterdir()]

    tracks = await scanner.scan(store_root, LibraryOrder.FILESYSTEM)

    assert [t.title for t in tracks] == expected


@pytest.mark.asyncio
async def test_scan_unreadable_root_raises(scanner, store_root):
    with patch.object(Path, "iterdir", side_effect=PermissionError(13, "Permission denied")):
        with pytest.raises(ScanError) as exc_info:
            await scanner.scan(store_root)
    assert "Permission denied" in exc_info.value.detail


@pytest.mark.asyncio
async def test_index_refresh_and_invalidate(store_root):
    index = LibraryIndex(store_root)
    assert index.stale

    make_track_folder(store_root, "One")
    assert [t.title for t in await index.ensure_fresh()] == ["One"]
    assert not index.stale

    make_track_folder(store_root, "Two")
    assert len(await index.ensure_fresh()) == 1

    index.invalidate(LibraryChanged(store_root=store_root, title="Two"))
    assert index.stale
    assert [t.title for t in await index.ensure_fresh()] == ["One", "Two"]
    assert index.find("Two") is not None
    assert index.find("Three") is None
    assert len(index) == 2


@pytest.mark.asyncio
async def test_index_snapshot_is_a_copy(store_root):
    make_track_folder(store_root, "One")
    index = LibraryIndex(store_root)
    await index.refresh()

    snapshot = index.snapshot()
    snapshot.clear()

    assert len(index.tracks) == 1


@pytest.mark.asyncio
async def test_index_keeps_tracks_when_scan_fails(store_root):
    make_track_folder(store_root, "One")
    index = LibraryIndex(store_root)
    await index.refresh()
    index.invalidate()

    with patch.object(index.scanner, "scan", side_effect=ScanError("gone")):
        with pytest.raises(ScanError):
            await index.refresh()

    assert [t.title for t in index.tracks] == ["One"]
    assert index.stale
