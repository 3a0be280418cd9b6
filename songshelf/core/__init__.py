"""
Core package for Songshelf.

This package provides settings, the track store, and the library scanner.
The acquisition pipeline lives in :mod:`songshelf.core.acquisition`.
"""

from songshelf.core.settings import Settings, LibraryOrder, load_settings, save_settings
from songshelf.core.errors import (
    SongshelfError, AcquisitionError, InvalidSource, MetadataError, CoverFetchError,
    AudioFetchError, SaveError, ScanError, PlaybackLoadError, CommandRejected
)
from songshelf.core.events import Signal, LibraryChanged
from songshelf.core.track_store import TrackStore
from songshelf.core.library_scanner import LibraryScanner, LibraryIndex, Track
from songshelf.core.acquisition_models import AcquisitionPhase, ProgressEvent, AcquisitionResult

__all__ = [
    'Settings',
    'LibraryOrder',
    'load_settings',
    'save_settings',
    'SongshelfError',
    'AcquisitionError',
    'InvalidSource',
    'MetadataError',
    'CoverFetchError',
    'AudioFetchError',
    'SaveError',
    'ScanError',
    'PlaybackLoadError',
    'CommandRejected',
    'Signal',
    'LibraryChanged',
    'TrackStore',
    'LibraryScanner',
    'LibraryIndex',
    'Track',
    'AcquisitionPhase',
    'ProgressEvent',
    'AcquisitionResult',
]
