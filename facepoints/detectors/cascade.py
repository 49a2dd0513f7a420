"""Haar cascade object detector wrapper."""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Tuple

import cv2
import numpy as np

from ..geometry import Rect

logger = logging.getLogger(__name__)


class ModelLoadError(RuntimeError):
    """A cascade file is missing or OpenCV refused to load it."""


class CascadeDetector:
    """Scale-invariant object detector backed by ``cv2.CascadeClassifier``."""

    def __init__(
        self,
        model_path: str,
        *,
        scale_factor: float = 1.1,
        min_neighbors: int = 1,
    ) -> None:
        self.model_path = model_path
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self._cascade = self._load(model_path)

    @staticmethod
    def _load(model_path: str) -> "cv2.CascadeClassifier":
        if not os.path.isfile(model_path):
            raise ModelLoadError(f"Cascade file not found: {model_path}")

        cascade = cv2.CascadeClassifier()
        if not cascade.load(model_path) or cascade.empty():
            raise ModelLoadError(f"Error loading cascade: {model_path}")

        logger.info("Loaded cascade %s", model_path)
        return cascade

    def detect(self, gray: np.ndarray, min_size: int) -> List[Rect]:
        """
        Detect objects in a grayscale image
        Args:
            gray: Single channel image (read only)
            min_size: Smallest object side in pixels
        Returns:
            Boxes local to ``gray`` in detector order
        """
        if gray is None or gray.size == 0:
            return []

        detections = self._cascade.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            flags=cv2.CASCADE_SCALE_IMAGE,
            minSize=(min_size, min_size),
        )
        return [(int(x), int(y), int(w), int(h)) for (x, y, w, h) in detections]


def load_cascades(
    paths: Dict[str, str],
    settings: Dict[str, Tuple[float, int]],
) -> Dict[str, CascadeDetector]:
    """
    Load one detector per entry in ``paths``
    Args:
        paths: Feature name to cascade file
        settings: Feature name to ``(scale_factor, min_neighbors)``
    Returns:
        Feature name to ``CascadeDetector``
    Raises:
        ModelLoadError: on the first cascade that fails to load
    """
    detectors = {}
    for name, path in paths.items():
        scale_factor, min_neighbors = settings.get(name, (1.1, 1))
        detectors[name] = CascadeDetector(
            path,
            scale_factor=scale_factor,
            min_neighbors=min_neighbors,
        )
    return detectors

