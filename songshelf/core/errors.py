"""
Exceptions raised by Songshelf.

Every error carries a one-line, human-readable ``detail`` so callers can
render a status message without inspecting the exception type.
"""


class SongshelfError(Exception):
    """Base exception for all application-specific errors."""
    kind = "Error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class AcquisitionError(SongshelfError):
    """Base exception for failures while acquiring a track."""


class InvalidSource(AcquisitionError):
    """Raised when a link does not carry an extractable media identifier."""
    kind = "InvalidSource"


class MetadataError(AcquisitionError):
    """Raised when the metadata endpoint cannot be reached or returns an unusable body."""
    kind = "MetadataError"


class CoverFetchError(AcquisitionError):
    """Raised when the cover asset cannot be downloaded."""
    kind = "CoverFetchError"


class AudioFetchError(AcquisitionError):
    """Raised when the audio asset cannot be downloaded."""
    kind = "AudioFetchError"


class SaveError(AcquisitionError):
    """Raised when committing downloaded assets into the track store fails."""
    kind = "SaveError"


class FetchError(SongshelfError):
    """Raised by the asset fetcher; mapped to a cover or audio error by its caller."""
    kind = "FetchError"


class ScanError(SongshelfError):
    """Raised when the track store cannot be created or enumerated."""
    kind = "ScanError"


class PlaybackLoadError(SongshelfError):
    """Raised when an audio asset cannot be loaded for playback."""
    kind = "PlaybackLoadError"


class CommandRejected(SongshelfError):
    """Raised when a transport command is issued in a state that does not allow it."""
    kind = "CommandRejected"
