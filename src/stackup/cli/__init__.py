"""
Command line interface for stack lifecycle management.
"""

from .commands import main

__all__ = ["main"]
