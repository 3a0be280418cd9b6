"""
Playback engine for Songshelf.

The engine owns the playback state: the current track, play/pause status,
position, and the queue that autoplay walks. All transport operations are
serialized on one lock, and each leaves the published now-playing record
consistent with the state before it returns.
"""

import threading
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from songshelf.core.errors import CommandRejected, PlaybackLoadError
from songshelf.core.events import Signal
from songshelf.core.library_scanner import Track
from songshelf.playback.backend import AudioBackend
from songshelf.playback.now_playing import NowPlayingCenter, NowPlayingInfo
from songshelf.utils.logger import get_logger


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackState(BaseModel):
    """Read-only snapshot of the engine's state."""
    current_track: Optional[Track] = None
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    queue: List[Track] = Field(default_factory=list)
    queue_position: Optional[int] = None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    @property
    def status(self) -> PlaybackStatus:
        if self.current_track is None:
            return PlaybackStatus.IDLE
        return PlaybackStatus.PLAYING if self.is_playing else PlaybackStatus.PAUSED


class PlaybackEngine:
    """
    Single-track player with a snapshot queue for autoplay.

    Construct one per process and hand it to whatever needs to control
    playback. Calls may come from any thread; loads block, so callers on an
    event loop should dispatch them with ``asyncio.to_thread``.
    """

    def __init__(self, backend: AudioBackend, now_playing: Optional[NowPlayingCenter] = None):
        self.backend = backend
        self.now_playing = now_playing or NowPlayingCenter()
        self.logger = get_logger(__name__)
        self.track_changed: Signal[Optional[Track]] = Signal("track_changed")
        self.playback_error: Signal[PlaybackLoadError] = Signal("playback_error")

        self._lock = threading.RLock()
        self._current_track: Optional[Track] = None
        self._is_playing = False
        self._current_time = 0.0
        self._duration = 0.0
        self._queue: List[Track] = []
        self._queue_position: Optional[int] = None
        self._artwork: Optional[bytes] = None
        # Bumped on every load and stop; finish callbacks from older loads are ignored
        self._generation = 0

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return PlaybackState(
                current_track=self._current_track,
                is_playing=self._is_playing,
                current_time=self._current_time,
                duration=self._duration,
                queue=list(self._queue),
                queue_position=self._queue_position,
            )

    @property
    def status(self) -> PlaybackStatus:
        return self.state.status

    def play(self, track: Track, queue: Optional[Iterable[Track]] = None) -> None:
        """
        Play a track from the start.

        Args:
            track: Track to play; restarts it if it is already current
            queue: Replaces the autoplay queue when given; the queue is copied

        Raises:
            PlaybackLoadError: If the audio cannot be loaded; the engine is left idle
        """
        with self._lock:
            if queue is not None:
                self._queue = list(queue)
            self._play_at(track, self._index_of(track))

    def pause(self) -> None:
        """
        Pause the current track.

        Raises:
            CommandRejected: If nothing is playing
        """
        with self._lock:
            if self._current_track is None or not self._is_playing:
                raise CommandRejected("Nothing is playing")
            self.backend.pause()
            self._is_playing = False
            self._current_time = self._clamp(self.backend.position())
            self._publish()
            self.logger.debug(f"Paused '{self._current_track.title}' at {self._current_time:.1f}s")

    def resume(self) -> None:
        """
        Continue a loaded, paused track.

        Raises:
            CommandRejected: If no track is loaded or it is already playing
        """
        with self._lock:
            if self._current_track is None:
                raise CommandRejected("No track loaded")
            if self._is_playing:
                raise CommandRejected("Already playing")
            self.backend.play()
            self._is_playing = True
            self._publish()
            self.logger.debug(f"Resumed '{self._current_track.title}'")

    def toggle(self) -> None:
        with self._lock:
            if self._is_playing:
                self.pause()
            else:
                self.resume()

    def stop(self) -> None:
        """Stop playback from any state and clear the now-playing record."""
        with self._lock:
            self._generation += 1
            self.backend.stop()
            self._go_idle()
            self.logger.debug("Stopped")

    def seek(self, seconds: float) -> float:
        """
        Move within the current track without changing play/pause status.

        Args:
            seconds: Target position; clamped to [0, duration]

        Returns:
            The position actually used

        Raises:
            CommandRejected: If no track is loaded
        """
        with self._lock:
            if self._current_track is None:
                raise CommandRejected("No track loaded")
            target = self._clamp(seconds)
            self.backend.seek(target)
            self._current_time = target
            self._publish()
            return target

    def next(self) -> bool:
        """
        Play the following track in the queue.

        Returns:
            False, with nothing changed, when there is no following track
        """
        return self._step(1)

    def previous(self) -> bool:
        """
        Play the preceding track in the queue.

        Returns:
            False, with nothing changed, when there is no preceding track
        """
        return self._step(-1)

    def refresh_progress(self) -> PlaybackState:
        """Read the backend's position into the state and return a snapshot."""
        with self._lock:
            if self._current_track is not None:
                self._current_time = self._clamp(self.backend.position())
            return self.state

    def close(self) -> None:
        with self._lock:
            self.stop()
            self.backend.close()

    def _step(self, offset: int) -> bool:
        with self._lock:
            if self._queue_position is None:
                return False
            target = self._queue_position + offset
            if not 0 <= target < len(self._queue):
                return False
            self._play_at(self._queue[target], target)
            return True

    def _play_at(self, track: Track, position: Optional[int]) -> None:
        self._generation += 1
        generation = self._generation
        self.backend.stop()

        try:
            duration = self.backend.load(
                track.audio_path, lambda: self._on_track_finished(generation)
            )
        except PlaybackLoadError as e:
            self.logger.error(f"Error playing song {track.title}: {e.detail}")
            self._go_idle()
            raise

        self._current_track = track
        self._queue_position = position
        self._duration = max(duration, 0.0)
        self._current_time = 0.0
        self._artwork = self._read_artwork(track)
        self.backend.play()
        self._is_playing = True
        self._publish()
        self.logger.info(f"Playing '{track.title}' ({self._duration:.1f}s)")
        self.track_changed.emit(track)

    def _on_track_finished(self, generation: int) -> None:
        """Natural end of the current track: advance through the queue or go idle."""
        with self._lock:
            if generation != self._generation or self._current_track is None:
                return

            position = self._queue_position
            if position is None:
                position = self._index_of(self._current_track)

            if position is not None and position + 1 < len(self._queue):
                successor = self._queue[position + 1]
                self.logger.debug(f"Finished playing; autoplaying '{successor.title}'")
                try:
                    self._play_at(successor, position + 1)
                except PlaybackLoadError as e:
                    self.playback_error.emit(e)
                return

            self.logger.debug("Finished playing; end of queue")
            self._generation += 1
            self.backend.stop()
            self._go_idle()

    def _go_idle(self) -> None:
        had_track = self._current_track is not None
        self._current_track = None
        self._is_playing = False
        self._current_time = 0.0
        self._duration = 0.0
        self._queue_position = None
        self._artwork = None
        self.now_playing.clear()
        if had_track:
            self.track_changed.emit(None)

    def _publish(self) -> None:
        track = self._current_track
        if track is None:
            self.now_playing.clear()
            return
        self.now_playing.publish(NowPlayingInfo(
            title=track.title,
            elapsed=self._current_time,
            duration=self._duration,
            rate=1.0 if self._is_playing else 0.0,
            artwork=self._artwork,
        ))

    def _index_of(self, track: Track) -> Optional[int]:
        for index, queued in enumerate(self._queue):
            if queued.id == track.id:
                return index
        return None

    def _clamp(self, seconds: float) -> float:
        return min(max(float(seconds), 0.0), self._duration)

    def _read_artwork(self, track: Track) -> Optional[bytes]:
        try:
            return track.cover_path.read_bytes()
        except OSError as e:
            self.logger.debug(f"No artwork for '{track.title}': {e}")
            return None
