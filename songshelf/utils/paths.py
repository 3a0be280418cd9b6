"""
Path utilities for Songshelf.

This module provides functions for locating the application's private
directories and for turning remote titles and links into names that are
safe to use inside the track store.
"""

import os
import re
from pathlib import Path
from typing import Optional

from songshelf.utils.logger import get_logger

# Name of the environment variable that relocates every application directory
HOME_ENV_VAR = "SONGSHELF_HOME"

STORE_DIR_NAME = "Songs"
STAGING_DIR_NAME = ".staging"

# The id segment that follows v/, be/, ?v=, &v= or embed/ in a URL-shaped string
_SOURCE_ID_RE = re.compile(
    r"(?:(?<=v/)|(?<=be/)|(?<=[?&]v=)|(?<=embed/))([\w-]+)",
    re.IGNORECASE,
)


def get_app_dir() -> Path:
    """
    Get the root directory for all application-private state.

    Returns:
        Path to the application directory
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        app_dir = Path(override).expanduser()
    else:
        app_dir = Path.home() / ".songshelf"
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_config_dir() -> Path:
    """
    Get the configuration directory for the application.

    Returns:
        Path to the configuration directory
    """
    config_dir = get_app_dir() / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_data_dir() -> Path:
    """
    Get the persistent data directory for the application.

    Falls back to a directory in the user's home when the configured
    location cannot be created.

    Returns:
        Path to the data directory
    """
    logger = get_logger(__name__)
    data_dir = get_app_dir() / "data"
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        logger.error(f"Permission denied when creating data directory: {data_dir}")
        fallback_dir = Path.home() / ".songshelf_data"
        logger.info(f"Using fallback data directory: {fallback_dir}")
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return fallback_dir
    return data_dir


def get_cache_dir() -> Path:
    """
    Get the cache directory for the application.

    Returns:
        Path to the cache directory
    """
    cache_dir = get_app_dir() / "cache"
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def get_store_root(data_root: Path) -> Path:
    """Location of the track store below a data root."""
    return Path(data_root) / STORE_DIR_NAME


def get_staging_dir(data_root: Path) -> Path:
    """Location of in-flight downloads; a sibling of the store so moves stay on one filesystem."""
    return Path(data_root) / STAGING_DIR_NAME


def sanitize_title(title: str) -> str:
    """
    Turn a remote title into a folder-safe name.

    Only path separators are replaced (with "-"); every other character is
    kept as-is.

    Args:
        title: The raw title

    Returns:
        The sanitized title
    """
    safe = title.replace("/", "-")
    for sep in (os.sep, os.altsep):
        if sep and sep != "/":
            safe = safe.replace(sep, "-")
    return safe


def is_usable_title(safe_title: str) -> bool:
    """Whether a sanitized title can name a folder inside the store."""
    return bool(safe_title.strip()) and safe_title not in (".", "..")


def extract_source_id(link: str) -> Optional[str]:
    """
    Extract the media identifier from a link.

    Args:
        link: A URL-shaped string such as a watch, share or embed link

    Returns:
        The identifier, or None if the link carries none
    """
    if not link:
        return None
    match = _SOURCE_ID_RE.search(link.strip())
    if match is None:
        return None
    return match.group(1) or None
