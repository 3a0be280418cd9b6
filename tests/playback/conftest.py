from pathlib import Path
from typing import List, Optional

import pytest

from songshelf.core.errors import PlaybackLoadError
from songshelf.core.library_scanner import Track
from songshelf.playback.backend import AudioBackend, FinishedCallback
from songshelf.playback.engine import PlaybackEngine
from songshelf.playback.now_playing import NowPlayingCenter


class FakeBackend(AudioBackend):
    """In-memory backend; call :meth:`finish` to simulate natural end of track."""

    def __init__(self, duration: float = 200.0):
        self.duration = duration
        self.loaded: Optional[Path] = None
        self.playing = False
        self.pos = 0.0
        self.fail_paths: List[Path] = []
        self.calls: List[str] = []
        self._on_finished: Optional[FinishedCallback] = None
        self.stale_callbacks: List[FinishedCallback] = []

    def load(self, path, on_finished):
        self.calls.append("load")
        if path in self.fail_paths:
            raise PlaybackLoadError(f"Cannot open {path.name}")
        self.loaded = path
        self.playing = False
        self.pos = 0.0
        self._on_finished = on_finished
        return self.duration

    def play(self):
        self.calls.append("play")
        self.playing = True

    def pause(self):
        self.calls.append("pause")
        self.playing = False

    def stop(self):
        self.calls.append("stop")
        if self._on_finished is not None:
            self.stale_callbacks.append(self._on_finished)
        self._on_finished = None
        self.loaded = None
        self.playing = False

    def seek(self, seconds):
        self.calls.append("seek")
        self.pos = seconds

    def position(self):
        return self.pos

    def finish(self):
        callback, self._on_finished = self._on_finished, None
        assert callback is not None, "nothing loaded"
        callback()


def make_track(root: Path, title: str) -> Track:
    folder = root / title
    folder.mkdir(parents=True, exist_ok=True)
    audio = folder / f"{title}.mp3"
    cover = folder / f"{title}.jpg"
    audio.write_bytes(b"audio")
    cover.write_bytes(f"art-{title}".encode())
    return Track(title=title, audio_path=audio, cover_path=cover)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def now_playing():
    return NowPlayingCenter()


@pytest.fixture
def engine(backend, now_playing):
    return PlaybackEngine(backend, now_playing)


@pytest.fixture
def tracks(tmp_path):
    return [make_track(tmp_path, title) for title in ("A", "B", "C")]


@pytest.fixture
def track_factory(tmp_path):
    return lambda title: make_track(tmp_path, title)
