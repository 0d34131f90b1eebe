"""Command-line interface module for the indenting XML writer.

This module provides the ``indenting-xml`` tool re-serializing XML files with
indentation, self-closing empty elements and hitbox annotation.
"""

from .main import main

__all__ = ["main"]
