#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Songshelf - Main Entry Point

This module serves as the entry point for the Songshelf application.
It initializes the application, parses command-line arguments, and starts the
appropriate interface based on user input.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from songshelf import __version__
from songshelf.core.settings import load_settings
from songshelf.ui.cli import CLI
from songshelf.utils.logger import setup_logger
from songshelf.utils.paths import get_data_dir


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Songshelf - Download and play music from YouTube"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show version information"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "-c", "--config", type=str, help="Path to custom config file"
    )
    parser.add_argument(
        "-r", "--root", type=str, help="Data folder holding the Songs library"
    )
    parser.add_argument(
        "--download", type=str, metavar="LINK", help="Download one link and exit"
    )

    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    if args.version:
        print(f"Songshelf v{__version__}")
        return 0

    log_level = logging.DEBUG if args.debug else logging.INFO
    log_file = get_data_dir() / "songshelf.log"
    setup_logger(log_level, log_file)
    logger = logging.getLogger(__name__)

    logger.info("Starting Songshelf")
    logger.debug(f"Python version: {sys.version}")
    logger.debug(f"Application version: {__version__}")

    settings = load_settings(args.config)
    if args.root:
        settings.data_root = Path(args.root)
        logger.debug(f"Override data root: {settings.data_root}")
    logger.debug(f"Loaded settings: {settings}")

    cli = CLI(settings)
    if args.download:
        return await cli.run_download(args.download)
    return await cli.start()


def main_cli() -> None:
    """
    Entry point for the command-line interface.

    It wraps the async main function and handles exceptions.
    """
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(1)
    except Exception as e:
        logging.getLogger(__name__).exception("Unhandled exception")
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
