"""Dotstage - host-aware dotfiles renderer and stow front-end.

Renders package templates with per-host variables into a staging tree and
hands the result to GNU Stow for linking.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
