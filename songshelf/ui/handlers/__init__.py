"""
Handlers for various CLI actions.
"""
from .library_handler import LibraryHandler
from .playback_handler import PlaybackHandler
from .settings_handler import SettingsHandler

__all__ = ["LibraryHandler", "PlaybackHandler", "SettingsHandler"]
