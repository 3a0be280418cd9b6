"""
Metadata service client for Songshelf.

This module provides a client that resolves a media identifier to a title
and the URLs of its audio and cover assets.
"""

import asyncio
import json
from typing import Optional

import aiohttp
from pydantic import ValidationError

from songshelf.api.models import VideoInfo
from songshelf.core.errors import MetadataError
from songshelf.core.settings import Settings
from songshelf.utils.logger import get_logger


class MetadataClient:
    """
    Asynchronous client for the metadata service.

    The service exposes a single route, ``GET /info?id=<identifier>``,
    answering with ``{"title", "audioUrl", "coverUrl"}``.
    """

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the metadata client.

        Args:
            settings: Application settings
            session: Optional session to share with other clients
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self.base_url = settings.metadata_base_url
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Context manager entry."""
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        await self.close()

    async def close(self):
        """Close the session if this client created it."""
        if self.session and self._owns_session:
            self.logger.debug("Closing MetadataClient session")
            await self.session.close()
        if self._owns_session:
            self.session = None

    def _get_session(self) -> aiohttp.ClientSession:
        """Get the current session or create a new one."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def get_info(self, source_id: str) -> VideoInfo:
        """
        Resolve a media identifier.

        Args:
            source_id: Identifier extracted from the user's link

        Returns:
            The resolved metadata

        Raises:
            MetadataError: On transport errors, non-2xx responses, or a body
                that is not the expected JSON shape
        """
        url = f"{self.base_url}/info"
        timeout = aiohttp.ClientTimeout(
            total=None,
            connect=self.settings.connection_timeout,
            sock_connect=self.settings.connection_timeout,
            sock_read=self.settings.read_timeout,
        )
        self.logger.debug(f"API request: GET {url} id={source_id}")

        try:
            session = self._get_session()
            async with session.get(url, params={"id": source_id}, timeout=timeout) as response:
                self.logger.debug(f"Response status: {response.status}")
                body = await response.read()
                if not 200 <= response.status < 300:
                    raise MetadataError(f"Metadata error: HTTP {response.status}")
        except asyncio.TimeoutError:
            raise MetadataError("Metadata error: request timed out")
        except aiohttp.ClientError as e:
            self.logger.warning(f"Connection error: {e}")
            raise MetadataError(f"Metadata error: {e}")

        try:
            data = json.loads(body.decode("utf-8"))
        except ValueError:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            self.logger.error(f"Failed to parse response as JSON: {body[:500]!r}")
            raise MetadataError("Failed to parse metadata")

        if not isinstance(data, dict):
            raise MetadataError("Failed to parse metadata")

        try:
            info = VideoInfo(**data)
        except ValidationError as e:
            self.logger.error(f"Unexpected metadata shape: {e}")
            raise MetadataError("Failed to parse metadata")

        self.logger.info(f"Resolved {source_id} to '{info.title}'")
        return info
