"""
API package for Songshelf.

This package provides the client for the metadata service.
"""

from songshelf.api.client import MetadataClient
from songshelf.api.models import VideoInfo

__all__ = [
    'MetadataClient',
    'VideoInfo',
]
