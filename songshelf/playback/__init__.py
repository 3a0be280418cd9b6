"""
Playback package for Songshelf.

This package provides the playback engine, its audio backends, the
now-playing record and the external transport command bridge.
"""

from songshelf.playback.backend import AudioBackend, MpvBackend
from songshelf.playback.engine import PlaybackEngine, PlaybackState, PlaybackStatus
from songshelf.playback.now_playing import NowPlayingCenter, NowPlayingInfo
from songshelf.playback.remote import RemoteCommandCenter, RemoteCommand, CommandStatus

__all__ = [
    'AudioBackend',
    'MpvBackend',
    'PlaybackEngine',
    'PlaybackState',
    'PlaybackStatus',
    'NowPlayingCenter',
    'NowPlayingInfo',
    'RemoteCommandCenter',
    'RemoteCommand',
    'CommandStatus',
]
