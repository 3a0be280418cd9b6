"""
Pydantic models for acquisition jobs, progress events and results.
"""
import time
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class AcquisitionPhase(str, Enum):
    """Phases an acquisition job moves through, in order."""
    PENDING = "pending"
    RESOLVING = "resolving"
    SANITIZING = "sanitizing"
    FETCHING_COVER = "fetching_cover"
    FETCHING_AUDIO = "fetching_audio"
    COMMITTING = "committing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AcquisitionPhase.SUCCEEDED, AcquisitionPhase.FAILED)


class AcquisitionJob(BaseModel):
    """State of one user-initiated download request. Never persisted."""
    source_link: str
    source_id: Optional[str] = None
    title: Optional[str] = None
    safe_title: Optional[str] = None
    audio_url: Optional[str] = None
    cover_url: Optional[str] = None
    phase: AcquisitionPhase = AcquisitionPhase.PENDING
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    started_at: float = Field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def elapsed_time(self) -> float:
        """Elapsed time in seconds."""
        end = self.finished_at or time.time()
        return end - self.started_at


class ProgressEvent(BaseModel):
    """One step of an acquisition as reported to its caller."""
    phase: AcquisitionPhase
    message: str = ""
    title: Optional[str] = None
    downloaded_bytes: int = 0
    total_bytes: int = 0
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def progress_percentage(self) -> float:
        """Calculate the progress percentage of the current fetch."""
        if self.total_bytes == 0:
            return 0.0
        return (self.downloaded_bytes / self.total_bytes) * 100


class AcquisitionResult(BaseModel):
    """Terminal outcome of an acquisition."""
    success: bool
    title: Optional[str] = None
    track_dir: Optional[Path] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def status_message(self) -> str:
        """One-line message suitable for a status bar."""
        if self.success:
            return f"✅ “{self.title}” downloaded!"
        return f"❌ {self.error_message or 'Download failed'}"
