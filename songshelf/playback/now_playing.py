"""
Now-playing record published for external observers (OS media controls,
status bars).
"""

import threading
from typing import Callable, List, Optional

from pydantic import BaseModel

from songshelf.utils.logger import get_logger

NowPlayingListener = Callable[[Optional["NowPlayingInfo"]], None]


class NowPlayingInfo(BaseModel):
    """What is playing, as seen from outside the engine."""
    title: str
    elapsed: float = 0.0
    duration: float = 0.0
    rate: float = 0.0
    artwork: Optional[bytes] = None


class NowPlayingCenter:
    """
    Holds the single published now-playing record.

    ``info`` is None when nothing is published. Listeners are called on
    every publish and every clear.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()
        self._info: Optional[NowPlayingInfo] = None
        self._listeners: List[NowPlayingListener] = []

    @property
    def info(self) -> Optional[NowPlayingInfo]:
        with self._lock:
            return self._info

    def subscribe(self, listener: NowPlayingListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: NowPlayingListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, info: NowPlayingInfo) -> None:
        with self._lock:
            self._info = info
            listeners = list(self._listeners)
        self._notify(listeners, info)

    def clear(self) -> None:
        with self._lock:
            self._info = None
            listeners = list(self._listeners)
        self._notify(listeners, None)

    def _notify(self, listeners: List[NowPlayingListener], info: Optional[NowPlayingInfo]) -> None:
        for listener in listeners:
            try:
                listener(info)
            except Exception as e:
                self.logger.error(f"Now-playing listener failed: {e}", exc_info=True)
