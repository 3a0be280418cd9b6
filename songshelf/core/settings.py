"""
Settings management for Songshelf.

This module provides classes and functions for managing application settings
using Pydantic for validation and type checking.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator, ConfigDict

from songshelf.utils.paths import get_config_dir, get_data_dir, get_store_root, get_staging_dir

DEFAULT_METADATA_URL = "https://owenisas.pythonanywhere.com"


class LibraryOrder(str, Enum):
    """How a library scan orders its tracks."""
    TITLE = "title"
    FILESYSTEM = "filesystem"


class Settings(BaseModel):
    """
    Application settings model.

    This class defines all the settings available in the application,
    with default values and validation.
    """
    # Storage settings
    data_root: Path = Field(default_factory=get_data_dir)
    library_order: LibraryOrder = LibraryOrder.TITLE

    # Network settings
    metadata_base_url: str = DEFAULT_METADATA_URL
    connection_timeout: int = 30
    read_timeout: int = 60
    chunk_size: int = 64 * 1024

    # Player settings
    mpv_path: str = "mpv"
    mpv_socket_path: Optional[str] = None
    volume: int = 100

    model_config = ConfigDict(
        validate_assignment=True,
        arbitrary_types_allowed=True
    )

    @field_validator("data_root", mode='before')
    def validate_data_root(cls, v):
        """Validate and convert the data root to a Path object."""
        if isinstance(v, str):
            path = Path(v).expanduser()
        elif isinstance(v, Path):
            path = v
        else:
            raise ValueError(f"Invalid path type: {type(v)}")

        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("metadata_base_url")
    def validate_metadata_base_url(cls, v: str):
        """Validate the metadata service URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("metadata_base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("connection_timeout", "read_timeout", "chunk_size")
    def validate_positive(cls, v: int):
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("volume")
    def validate_volume(cls, v: int):
        if not 0 <= v <= 100:
            raise ValueError("volume must be between 0 and 100")
        return v

    @property
    def store_root(self) -> Path:
        """Directory holding one folder per track."""
        return get_store_root(self.data_root)

    @property
    def staging_dir(self) -> Path:
        """Directory holding in-flight downloads."""
        return get_staging_dir(self.data_root)


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a configuration file.

    Args:
        config_path: Optional path to a configuration file

    Returns:
        Settings object with loaded values
    """
    if config_path:
        config_file = Path(config_path)
    else:
        config_file = get_config_dir() / "settings.json"

    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            return Settings(**config_data)
        except (json.JSONDecodeError, ValueError) as e:
            logging.getLogger(__name__).error(f"Error loading settings: {e}")
            return Settings()

    return Settings()


def save_settings(settings: Settings, config_path: Optional[Union[str, Path]] = None) -> None:
    """
    Save settings to a configuration file.

    Args:
        settings: Settings object to save
        config_path: Optional path to a configuration file
    """
    if config_path:
        config_file = Path(config_path)
    else:
        config_file = get_config_dir() / "settings.json"

    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, "w", encoding="utf-8") as f:
        json.dump(settings.model_dump(mode='json'), f, indent=2)
