"""
UI package for Songshelf.

This package provides user interface components for the application.
"""

from songshelf.ui.cli import CLI
from songshelf.ui.menu import Menu, MenuItem

__all__ = [
    'CLI',
    'Menu',
    'MenuItem',
]
