"""
Tuskfish CLI

Typer-based command-line interface for managing the content database.
"""

from tuskfish import __version__

__all__ = ['__version__']
