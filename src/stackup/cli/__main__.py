#!/usr/bin/env python3
"""Main CLI entry point for stackup."""

from .commands import main

if __name__ == "__main__":
    main()
