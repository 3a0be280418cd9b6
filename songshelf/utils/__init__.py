"""
Utils package for Songshelf.

This package provides utility functions for the application.
"""

from songshelf.utils.logger import setup_logger, get_logger
from songshelf.utils.paths import (
    get_app_dir, get_config_dir, get_data_dir, get_cache_dir,
    get_store_root, get_staging_dir, sanitize_title, is_usable_title,
    extract_source_id
)

__all__ = [
    'setup_logger',
    'get_logger',
    'get_app_dir',
    'get_config_dir',
    'get_data_dir',
    'get_cache_dir',
    'get_store_root',
    'get_staging_dir',
    'sanitize_title',
    'is_usable_title',
    'extract_source_id',
]
