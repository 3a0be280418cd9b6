"""
Songshelf - a personal music library downloader and player.

This package provides functionality for:
- Downloading a YouTube video's audio and cover art into a local library
- Scanning the library folder into a playable track list
- Playing tracks with pause, seek and autoplay through the listing
- A numbered CLI menu interface
"""

__version__ = "1.0.0"
__license__ = "MIT"

# Package metadata
__all__ = ["__version__", "__license__"]
