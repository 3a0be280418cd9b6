"""
Acquisition pipeline for Songshelf.

This module turns a user-supplied link into a committed track folder:
resolve metadata, sanitize the title, fetch the cover, fetch the audio,
then commit both into the track store.
"""

import asyncio
import time
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional, Type

from songshelf.api.client import MetadataClient
from songshelf.core.acquisition_models import (
    AcquisitionJob, AcquisitionPhase, AcquisitionResult, ProgressEvent
)
from songshelf.core.errors import (
    AcquisitionError, AudioFetchError, CoverFetchError, FetchError,
    InvalidSource, MetadataError, SaveError
)
from songshelf.core.events import LibraryChanged, Signal
from songshelf.core.fetcher import AssetFetcher
from songshelf.core.settings import Settings
from songshelf.core.track_store import TrackStore
from songshelf.utils.logger import get_logger
from songshelf.utils.paths import extract_source_id, is_usable_title, sanitize_title

EventCallback = Callable[[ProgressEvent], Awaitable[None]]

PHASE_MESSAGES = {
    AcquisitionPhase.RESOLVING: "🔍 Fetching metadata…",
    AcquisitionPhase.SANITIZING: "Preparing folder name…",
    AcquisitionPhase.FETCHING_COVER: "🎶 Downloading cover…",
    AcquisitionPhase.FETCHING_AUDIO: "🎵 Downloading audio…",
    AcquisitionPhase.COMMITTING: "💾 Saving…",
}

# Errors nothing else claims are reported under the kind of the phase they hit
UNEXPECTED_ERROR_KINDS = {
    AcquisitionPhase.FETCHING_COVER: CoverFetchError,
    AcquisitionPhase.FETCHING_AUDIO: AudioFetchError,
    AcquisitionPhase.COMMITTING: SaveError,
}


class AcquisitionPipeline:
    """
    Downloads tracks into the store.

    Every job ends in exactly one terminal event, ``SUCCEEDED`` or
    ``FAILED``. Nothing becomes visible in the store before the commit
    phase, and a failed job leaves the store untouched. Jobs are
    independent; several may run at once.
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[TrackStore] = None,
        client: Optional[MetadataClient] = None,
        fetcher: Optional[AssetFetcher] = None,
        library_changed: Optional[Signal[LibraryChanged]] = None,
    ):
        self.settings = settings
        self.store = store or TrackStore(settings.store_root, settings.staging_dir)
        self._owns_client = client is None
        self._owns_fetcher = fetcher is None
        self.client = client or MetadataClient(settings)
        self.fetcher = fetcher or AssetFetcher(settings)
        self.library_changed = library_changed or Signal("library_changed")
        self.logger = get_logger(__name__)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the HTTP sessions this pipeline created."""
        if self._owns_client:
            await self.client.close()
        if self._owns_fetcher:
            await self.fetcher.close()

    async def acquire(self, source_link: str) -> AsyncIterator[ProgressEvent]:
        """
        Acquire a track, yielding progress as it happens.

        The last event yielded is always terminal. Closing the iterator
        early cancels the job.

        Args:
            source_link: A link carrying the media identifier
        """
        queue: "asyncio.Queue[ProgressEvent]" = asyncio.Queue()
        job_task = asyncio.ensure_future(self.run(source_link, queue.put))
        job_task.add_done_callback(lambda task: self._report_crash(task, source_link, queue))
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_terminal:
                    break
            await asyncio.wait({job_task})
        finally:
            if not job_task.done():
                job_task.cancel()
                try:
                    await job_task
                except asyncio.CancelledError:
                    self.logger.info(f"Acquisition of {source_link} cancelled")

    async def run(
        self,
        source_link: str,
        progress_callback: Optional[EventCallback] = None,
    ) -> AcquisitionResult:
        """
        Acquire a track and return its outcome.

        Args:
            source_link: A link carrying the media identifier
            progress_callback: Awaited with every ProgressEvent, terminal one included

        Returns:
            The terminal result; failures are reported here, not raised
        """
        job = AcquisitionJob(source_link=source_link)
        emit = progress_callback or _discard_event

        try:
            track_dir = await self._execute(job, emit)
        except AcquisitionError as e:
            return await self._fail(job, e, emit)
        except OSError as e:
            return await self._fail(job, SaveError(f"Save error: {e}"), emit)
        except asyncio.CancelledError:
            job.phase = AcquisitionPhase.FAILED
            job.finished_at = time.time()
            raise
        except Exception as e:
            self.logger.exception(f"Unexpected error acquiring {source_link}: {e}")
            error_type = UNEXPECTED_ERROR_KINDS.get(job.phase, MetadataError)
            return await self._fail(job, error_type(f"Unexpected error: {e}"), emit)

        job.phase = AcquisitionPhase.SUCCEEDED
        job.finished_at = time.time()
        self.logger.info(f"Acquired '{job.safe_title}' in {job.elapsed_time:.1f}s")

        result = AcquisitionResult(success=True, title=job.safe_title, track_dir=track_dir)
        await emit(ProgressEvent(
            phase=AcquisitionPhase.SUCCEEDED,
            message=result.status_message,
            title=job.safe_title,
        ))
        await self.library_changed.emit_async(
            LibraryChanged(store_root=self.store.root, title=job.safe_title)
        )
        return result

    async def _execute(self, job: AcquisitionJob, emit: EventCallback) -> Path:
        source_id = extract_source_id(job.source_link)
        if not source_id:
            raise InvalidSource("Invalid YouTube URL")
        job.source_id = source_id

        await self._advance(job, AcquisitionPhase.RESOLVING, emit)
        info = await self.client.get_info(source_id)
        job.title = info.title
        job.audio_url = info.audioUrl
        job.cover_url = info.coverUrl

        await self._advance(job, AcquisitionPhase.SANITIZING, emit)
        safe_title = sanitize_title(info.title)
        if not is_usable_title(safe_title):
            raise MetadataError(f"Unusable title: {info.title!r}")
        job.safe_title = safe_title

        with self.store.staging_area() as staging:
            await self._advance(job, AcquisitionPhase.FETCHING_COVER, emit)
            staged_cover = await self._fetch(
                job, job.cover_url, staging / "cover", CoverFetchError, "cover", emit
            )

            await self._advance(job, AcquisitionPhase.FETCHING_AUDIO, emit)
            staged_audio = await self._fetch(
                job, job.audio_url, staging / "audio", AudioFetchError, "audio", emit
            )

            await self._advance(job, AcquisitionPhase.COMMITTING, emit)
            return self.store.commit(safe_title, staged_cover, staged_audio)

    async def _fetch(
        self,
        job: AcquisitionJob,
        url: str,
        destination: Path,
        error_type: Type[AcquisitionError],
        label: str,
        emit: EventCallback,
    ) -> Path:
        if not self.fetcher.is_fetchable(url):
            raise error_type(f"Invalid {label} URL")

        async def report(downloaded: int, total: int) -> None:
            await emit(ProgressEvent(
                phase=job.phase,
                message=PHASE_MESSAGES[job.phase],
                title=job.safe_title,
                downloaded_bytes=downloaded,
                total_bytes=total,
            ))

        try:
            return await self.fetcher.fetch(url, destination, report)
        except FetchError as e:
            raise error_type(f"{label.capitalize()} download failed: {e.detail}")

    async def _advance(self, job: AcquisitionJob, phase: AcquisitionPhase, emit: EventCallback) -> None:
        job.phase = phase
        self.logger.info(f"[{job.source_id}] {phase.value}")
        await emit(ProgressEvent(phase=phase, message=PHASE_MESSAGES[phase], title=job.safe_title))

    async def _fail(self, job: AcquisitionJob, error: AcquisitionError, emit: EventCallback) -> AcquisitionResult:
        failed_phase = job.phase
        job.phase = AcquisitionPhase.FAILED
        job.error_kind = error.kind
        job.error_message = error.detail
        job.finished_at = time.time()
        self.logger.warning(f"Acquisition of {job.source_link} failed during {failed_phase.value}: {error.kind}: {error.detail}")

        result = AcquisitionResult(
            success=False,
            title=job.safe_title,
            error_kind=error.kind,
            error_message=error.detail,
        )
        await emit(ProgressEvent(
            phase=AcquisitionPhase.FAILED,
            message=result.status_message,
            title=job.safe_title,
            error_kind=error.kind,
            error_message=error.detail,
        ))
        return result

    def _report_crash(self, task: "asyncio.Future[AcquisitionResult]", source_link: str, queue: asyncio.Queue) -> None:
        """Queue a terminal event for a job that died without emitting one."""
        if task.cancelled() or task.exception() is None:
            return
        error = task.exception()
        self.logger.error(f"Acquisition of {source_link} crashed: {error!r}", exc_info=error)
        queue.put_nowait(ProgressEvent(
            phase=AcquisitionPhase.FAILED,
            message=f"❌ Unexpected error: {error}",
            error_kind=AcquisitionError.kind,
            error_message=f"Unexpected error: {error}",
        ))


async def _discard_event(event: ProgressEvent) -> None:
    return None
