"""Harris corner candidates for a feature patch."""

from __future__ import annotations

from typing import List

import cv2
import numpy as np

from .geometry import Point


class CornerExtractor:
    """Wrap ``cv2.goodFeaturesToTrack`` with fixed candidate parameters."""

    def __init__(
        self,
        *,
        max_corners: int = 20,
        quality_level: float = 0.01,
        min_distance: float = 3.0,
        block_size: int = 3,
        use_harris: bool = True,
        k: float = 0.04,
    ) -> None:
        self.max_corners = max_corners
        self.quality_level = quality_level
        self.min_distance = min_distance
        self.block_size = block_size
        self.use_harris = use_harris
        self.k = k

    def extract(self, patch: np.ndarray) -> List[Point]:
        """
        Find corner candidates in an image patch
        Args:
            patch: Grayscale or BGR patch (read only)
        Returns:
            Points local to the patch, at most ``max_corners`` of them.
            An empty list when nothing passes the quality threshold.
        """
        if patch is None or patch.size == 0:
            return []

        if len(patch.shape) == 3:
            gray = cv2.cvtColor(patch, cv2.COLOR_BGR2GRAY)
        else:
            gray = patch

        # Harris needs a full block around each pixel
        if min(gray.shape[:2]) < self.block_size:
            return []

        corners = cv2.goodFeaturesToTrack(
            gray,
            maxCorners=self.max_corners,
            qualityLevel=self.quality_level,
            minDistance=self.min_distance,
            mask=None,
            blockSize=self.block_size,
            useHarrisDetector=self.use_harris,
            k=self.k,
        )
        if corners is None:
            return []

        return [(float(x), float(y)) for x, y in corners.reshape(-1, 2)]
