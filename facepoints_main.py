#!/usr/bin/env python3
"""Compatibility shim for the facial landmark CLI entry point."""

import sys

from app.cli import LandmarkSystem, main

__all__ = ["LandmarkSystem", "main"]


if __name__ == "__main__":
    sys.exit(main())
