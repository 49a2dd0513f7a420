"""Per-task annotation layers composited onto the output image."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

import cv2
import numpy as np

from .geometry import Point, Rect, contains, crop, is_empty

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


class AnnotationLayer:
    """Marks recorded by one task, confined to ``bounds``.

    Nothing touches the image until ``render``. Marks whose anchor falls
    outside ``bounds`` are dropped, and rendering happens on a view of the
    bounds so strokes cannot spill past it either.
    """

    def __init__(self, bounds: Rect) -> None:
        self.bounds = bounds
        self.marks: List[tuple] = []
        self.dropped = 0

    def circle(self, point: Point, color: Color, radius: int = 1, thickness: int = 2) -> None:
        if is_empty(self.bounds) or not contains(self.bounds, point):
            self.dropped += 1
            return
        self.marks.append(("circle", point, tuple(color), radius, thickness))

    def circles(self, points: Iterable[Point], color: Color) -> None:
        for point in points:
            self.circle(point, color)

    def rectangle(self, rect: Rect, color: Color, thickness: int = 1) -> None:
        x, y, w, h = rect
        bx, by, bw, bh = self.bounds
        inside = x >= bx and y >= by and x + w <= bx + bw and y + h <= by + bh
        if is_empty(rect) or not inside:
            self.dropped += 1
            return
        self.marks.append(("rect", rect, tuple(color), thickness))

    def render(self, image: np.ndarray) -> None:
        """Draw the recorded marks onto ``image`` inside ``bounds``."""
        if is_empty(self.bounds) or not self.marks:
            return

        view = crop(image, self.bounds)
        ox, oy = self.bounds[0], self.bounds[1]
        for mark in self.marks:
            if mark[0] == "circle":
                _, (px, py), color, radius, thickness = mark
                cv2.circle(view, (int(px - ox), int(py - oy)), radius, color, thickness)
            else:
                _, (x, y, w, h), color, thickness = mark
                cv2.rectangle(
                    view,
                    (x - ox, y - oy),
                    (x - ox + w - 1, y - oy + h - 1),
                    color,
                    thickness,
                    8,
                    0,
                )

        if self.dropped:
            logger.debug("Dropped %d marks outside %s", self.dropped, self.bounds)


def composite(image: np.ndarray, layers: Sequence[AnnotationLayer]) -> np.ndarray:
    """Copy of ``image`` with ``layers`` rendered in the given order."""
    result = image.copy()
    for layer in layers:
        layer.render(result)
    return result
