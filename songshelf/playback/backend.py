"""
Audio output backends for Songshelf.

The engine talks to an :class:`AudioBackend`; :class:`MpvBackend` drives an
idle ``mpv`` process over its JSON IPC socket.
"""

import json
import os
import socket
import subprocess
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError

from songshelf.core.errors import PlaybackLoadError
from songshelf.core.settings import Settings
from songshelf.utils.logger import get_logger

FinishedCallback = Callable[[], None]

SOCKET_WAIT_SECONDS = 5.0
COMMAND_TIMEOUT_SECONDS = 2.0


class AudioBackend(ABC):
    """
    One loaded audio resource at a time.

    ``on_finished`` passed to :meth:`load` must be invoked at most once, when
    that resource plays to its natural end, and never after :meth:`stop` or
    a later :meth:`load`.
    """

    @abstractmethod
    def load(self, path: Path, on_finished: FinishedCallback) -> float:
        """
        Load an audio file, paused at position zero.

        Returns:
            Duration in seconds

        Raises:
            PlaybackLoadError: If the file cannot be decoded or opened
        """

    @abstractmethod
    def play(self) -> None:
        """Start or continue output of the loaded resource."""

    @abstractmethod
    def pause(self) -> None:
        """Pause output, keeping the position."""

    @abstractmethod
    def stop(self) -> None:
        """Release the loaded resource."""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Move to an absolute position."""

    @abstractmethod
    def position(self) -> float:
        """Current position in seconds."""

    def close(self) -> None:
        """Shut the backend down."""
        self.stop()


def probe_duration(path: Path) -> float:
    """
    Read an audio file's duration with mutagen.

    Raises:
        PlaybackLoadError: If the file is missing or not a recognized audio format
    """
    try:
        audio_file = MutagenFile(str(path))
    except (MutagenError, OSError) as e:
        raise PlaybackLoadError(f"Cannot open {Path(path).name}: {e}")
    if audio_file is None or getattr(audio_file, "info", None) is None:
        raise PlaybackLoadError(f"Unsupported audio file: {Path(path).name}")
    return float(getattr(audio_file.info, "length", 0.0) or 0.0)


class MpvCommandError(Exception):
    """mpv answered a command with an error status."""


class MpvBackend(AudioBackend):
    """
    Audio output through an ``mpv`` subprocess.

    mpv is started lazily on the first load and kept idle between tracks.
    A listener thread watches the IPC socket for ``end-file`` events.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.logger = get_logger(__name__)
        self.socket_path = settings.mpv_socket_path or str(
            Path(tempfile.gettempdir()) / f"songshelf-mpv-{os.getpid()}"
        )
        self.process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()
        self._on_finished: Optional[FinishedCallback] = None
        self._entry_id: Optional[int] = None
        self._closing = threading.Event()
        self._listener: Optional[threading.Thread] = None

    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def _ensure_started(self) -> None:
        if self.is_running():
            return

        if os.path.exists(self.socket_path):
            os.unlink(self.socket_path)

        cmd = [
            self.settings.mpv_path,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            f"--input-ipc-server={self.socket_path}",
            f"--volume={self.settings.volume}",
            "--keep-open=no",
            "--load-scripts=no",
        ]
        self.logger.info(f"Starting mpv with socket: {self.socket_path}")
        try:
            self.process = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise PlaybackLoadError(f"Cannot start mpv ({self.settings.mpv_path}): {e}")

        deadline = time.monotonic() + SOCKET_WAIT_SECONDS
        while not os.path.exists(self.socket_path):
            if time.monotonic() > deadline or self.process.poll() is not None:
                self._kill()
                raise PlaybackLoadError("mpv did not open its control socket")
            time.sleep(0.05)

        self._closing.clear()
        self._listener = threading.Thread(target=self._listen, name="mpv-events", daemon=True)
        self._listener.start()

    def _command(self, *args: Any) -> Any:
        """Send one command on a fresh connection and return its data."""
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(COMMAND_TIMEOUT_SECONDS)
            sock.connect(self.socket_path)
            sock.sendall((json.dumps({"command": list(args)}) + "\n").encode("utf-8"))

            buffer = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    raise MpvCommandError("mpv closed the connection")
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    try:
                        message = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    # Events are broadcast to every client; replies carry "error"
                    if "error" not in message:
                        continue
                    if message["error"] != "success":
                        raise MpvCommandError(message["error"])
                    return message.get("data")

    def _listen(self) -> None:
        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            sock.connect(self.socket_path)
        except OSError as e:
            self.logger.error(f"Cannot attach to mpv events: {e}")
            return

        sock.settimeout(0.5)
        buffer = b""
        with sock:
            while not self._closing.is_set():
                try:
                    chunk = sock.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    break
                if not chunk:
                    break
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    try:
                        message = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    self._handle_event(message)
        self.logger.debug("mpv event listener stopped")

    def _handle_event(self, message: dict) -> None:
        if message.get("event") == "end-file" and message.get("reason") == "eof":
            self._dispatch_finished(message.get("playlist_entry_id"))

    def _dispatch_finished(self, entry_id: Optional[int] = None) -> None:
        with self._lock:
            # An eof still buffered for the previous file must not end the new one
            if entry_id is not None and self._entry_id is not None and entry_id != self._entry_id:
                self.logger.debug(f"Ignoring end of playlist entry {entry_id}")
                return
            callback, self._on_finished = self._on_finished, None
        if callback is not None:
            callback()

    def load(self, path: Path, on_finished: FinishedCallback) -> float:
        duration = probe_duration(path)
        self._ensure_started()
        with self._lock:
            self._on_finished = None
            self._entry_id = None
        try:
            # pause persists across files, so the new file starts paused
            self._command("set_property", "pause", True)
            reply = self._command("loadfile", str(path), "replace")
        except (OSError, MpvCommandError) as e:
            raise PlaybackLoadError(f"mpv could not load {Path(path).name}: {e}")
        with self._lock:
            # Older mpv releases do not report the entry id
            self._entry_id = reply.get("playlist_entry_id") if isinstance(reply, dict) else None
            self._on_finished = on_finished
        self.logger.debug(f"Loaded {path} ({duration:.1f}s)")
        return duration

    def play(self) -> None:
        self._set_pause(False)

    def pause(self) -> None:
        self._set_pause(True)

    def _set_pause(self, paused: bool) -> None:
        if not self.is_running():
            return
        try:
            self._command("set_property", "pause", paused)
        except (OSError, MpvCommandError) as e:
            self.logger.warning(f"mpv pause={paused} failed: {e}")

    def stop(self) -> None:
        with self._lock:
            self._on_finished = None
        if not self.is_running():
            return
        try:
            self._command("stop")
        except (OSError, MpvCommandError) as e:
            self.logger.warning(f"mpv stop failed: {e}")

    def seek(self, seconds: float) -> None:
        if not self.is_running():
            return
        try:
            self._command("seek", seconds, "absolute")
        except (OSError, MpvCommandError) as e:
            self.logger.warning(f"mpv seek failed: {e}")

    def position(self) -> float:
        if not self.is_running():
            return 0.0
        try:
            value = self._command("get_property", "time-pos")
        except (OSError, MpvCommandError):
            # time-pos is unavailable while idle
            return 0.0
        return float(value or 0.0)

    def close(self) -> None:
        self.stop()
        self._closing.set()
        self._kill()
        if self._listener is not None:
            self._listener.join(timeout=1.0)
            self._listener = None

    def _kill(self) -> None:
        if self.process:
            try:
                self.process.kill()
                self.process.wait(timeout=2.0)
            except (OSError, subprocess.TimeoutExpired) as e:
                self.logger.warning(f"Could not stop mpv cleanly: {e}")
            self.process = None
        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError as e:
                self.logger.warning(f"Could not remove mpv socket: {e}")
