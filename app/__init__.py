"""Application entry points for the facepoints project."""

from .cli import LandmarkSystem, main

__all__ = ["LandmarkSystem", "main"]
