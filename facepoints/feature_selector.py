"""Pick the feature boxes a face region should contribute."""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from .config_manager import FeatureProfile
from .geometry import Rect, area, clip_rect, crop, is_empty, pad, translate

logger = logging.getLogger(__name__)


def rank_boxes(boxes: Sequence[Rect]) -> List[Rect]:
    """Order boxes by area descending, then by x and y ascending."""
    return sorted(boxes, key=lambda box: (-area(box), box[0], box[1], box[2], box[3]))


def select_largest(boxes: Sequence[Rect], count: int) -> List[Rect]:
    """Keep at most ``count`` boxes, largest first (see ``rank_boxes``)."""
    return rank_boxes(boxes)[:count]


class FeatureSelector:
    """Run a detector over a feature band and map the kept boxes to the image."""

    def __init__(self, detector, profile: FeatureProfile) -> None:
        self.detector = detector
        self.profile = profile

    def select(self, gray: np.ndarray, region: Rect) -> List[Rect]:
        """
        Detect feature boxes inside ``region``
        Args:
            gray: Full grayscale image (read only)
            region: Search rectangle in the global frame
        Returns:
            Up to ``expected_count`` padded boxes in the global frame, each
            clipped to the image. Boxes that clip to nothing are dropped.
        """
        region = clip_rect(region, gray.shape)
        if is_empty(region):
            return []

        raw = self.detector.detect(crop(gray, region), self.profile.min_object_size)
        kept = select_largest(raw, self.profile.expected_count)
        logger.debug(
            "%s: %d raw boxes, kept %d", self.profile.name, len(raw), len(kept)
        )

        boxes = []
        for box in kept:
            box = translate(box, region[0], region[1])
            box = pad(box, self.profile.pad_x, self.profile.pad_top, self.profile.pad_bottom)
            box = clip_rect(box, gray.shape)
            if not is_empty(box):
                boxes.append(box)
        return boxes
