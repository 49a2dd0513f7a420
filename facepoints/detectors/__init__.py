"""Object detector backends consumed by the landmark pipeline."""

from .cascade import CascadeDetector, ModelLoadError, load_cascades

__all__ = ["CascadeDetector", "ModelLoadError", "load_cascades"]
