"""
Asset fetching for Songshelf.

This module downloads a remote resource to a local staging path.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

import aiofiles
import aiohttp

from songshelf.core.errors import FetchError
from songshelf.core.settings import Settings
from songshelf.utils.logger import get_logger

ProgressCallback = Callable[[int, int], Awaitable[None]]


class AssetFetcher:
    """
    Streams a URL to a file.

    The body is written to ``<destination>.part`` and renamed into place
    only once complete, so a destination path never holds a partial file.
    """

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        self.settings = settings
        self.logger = get_logger(__name__)
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
        if self._owns_session:
            self.session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    @staticmethod
    def is_fetchable(url: str) -> bool:
        """Whether a URL is an absolute http(s) URL."""
        parsed = urlparse(url)
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    async def fetch(
        self,
        url: str,
        destination: Path,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Download ``url`` to ``destination``.

        Args:
            url: Remote resource
            destination: Final local path; its parent must exist
            progress_callback: Awaited with (downloaded_bytes, total_bytes)

        Returns:
            The destination path

        Raises:
            FetchError: On an invalid URL, a non-2xx response, a transport
                error, a timeout (including no data for ``read_timeout``
                seconds), or a body shorter than its Content-Length
        """
        if not self.is_fetchable(url):
            raise FetchError(f"Invalid URL: {url}")

        temp_path = destination.with_name(destination.name + ".part")
        # Connection timeouts only; a slow but steady download may take as long as it needs
        timeout = aiohttp.ClientTimeout(
            total=None,
            connect=self.settings.connection_timeout,
            sock_connect=self.settings.connection_timeout,
            sock_read=self.settings.read_timeout,
        )

        try:
            session = self._get_session()
            async with session.get(url, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(f"HTTP error: {response.status}")

                total = int(response.headers.get("Content-Length", 0) or 0)
                downloaded = 0
                async with aiofiles.open(temp_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.settings.chunk_size):
                        await f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            await progress_callback(downloaded, total)

            if total and downloaded < total:
                raise FetchError(f"Incomplete download: {downloaded} of {total} bytes")

            temp_path.replace(destination)
            self.logger.debug(f"Fetched {url} -> {destination} ({downloaded} bytes)")
            return destination
        except asyncio.TimeoutError as e:
            self._discard(temp_path)
            raise FetchError(str(e) or "Download timed out")
        except aiohttp.ClientError as e:
            self._discard(temp_path)
            self.logger.warning(f"Download error for {url}: {e}")
            raise FetchError(str(e) or "Download failed")
        except OSError as e:
            self._discard(temp_path)
            raise FetchError(f"Could not write {destination.name}: {e}")
        except BaseException:
            self._discard(temp_path)
            raise

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Could not remove partial file {path}: {e}")
