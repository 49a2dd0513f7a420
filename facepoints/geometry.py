"""Rectangle and point helpers shared by the landmark stages.

Rectangles are ``(x, y, w, h)`` integer tuples and points are ``(x, y)`` float
tuples. A point is either local to a rectangle (relative to its origin) or
global to the full image; ``to_global`` and ``to_local`` move between the two.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

Rect = Tuple[int, int, int, int]
Point = Tuple[float, float]


def area(rect: Rect) -> int:
    return rect[2] * rect[3]


def region_for_band(face: Rect, min_ratio: float, max_ratio: float) -> Rect:
    """Sub-rectangle of ``face`` spanning a vertical band of its height.

    Fractional bounds are truncated toward zero.
    """
    x, y, w, h = face
    return (
        x,
        int(y + min_ratio * h),
        w,
        int((max_ratio - min_ratio) * h),
    )


def clip_rect(rect: Rect, image_shape: Sequence[int]) -> Rect:
    """Clip ``rect`` so it lies inside an image of ``image_shape``.

    The result may have zero width or height when ``rect`` falls outside.
    """
    img_h, img_w = int(image_shape[0]), int(image_shape[1])
    x, y, w, h = rect
    x0 = max(0, min(x, img_w))
    y0 = max(0, min(y, img_h))
    x1 = max(x0, min(x + w, img_w))
    y1 = max(y0, min(y + h, img_h))
    return (x0, y0, x1 - x0, y1 - y0)


def is_empty(rect: Rect) -> bool:
    return rect[2] <= 0 or rect[3] <= 0


def crop(image: np.ndarray, rect: Rect) -> np.ndarray:
    """View of ``image`` under ``rect``; ``rect`` must already be clipped."""
    x, y, w, h = rect
    return image[y : y + h, x : x + w]


def translate(rect: Rect, dx: int, dy: int) -> Rect:
    x, y, w, h = rect
    return (x + dx, y + dy, w, h)


def pad(rect: Rect, pad_x: int = 0, pad_top: int = 0, pad_bottom: int = 0) -> Rect:
    """Grow ``rect`` by ``pad_x`` on each side and by the given top/bottom amounts."""
    x, y, w, h = rect
    return (x - pad_x, y - pad_top, w + 2 * pad_x, h + pad_top + pad_bottom)


def center(rect: Rect) -> Point:
    """Center of ``rect`` in the same frame, using integer half sizes."""
    x, y, w, h = rect
    return (float(x + w // 2), float(y + h // 2))


def eyebrow_region(eye: Rect, expand_ratio: float = 0.15, height_ratio: float = 0.4) -> Rect:
    """Search rectangle for the eyebrow above an eye box (global frame).

    The eye box is widened by ``expand_ratio`` of its width on each side,
    lifted by ``expand_ratio`` of its height and cut to ``height_ratio`` of it.
    """
    x, y, w, h = eye
    return (
        int(x - w * expand_ratio),
        int(y - h * expand_ratio),
        int(w + 2 * w * expand_ratio),
        int(h * height_ratio),
    )


def to_global(points: Iterable[Point], rect: Rect) -> List[Point]:
    ox, oy = rect[0], rect[1]
    return [(float(px + ox), float(py + oy)) for px, py in points]


def to_local(points: Iterable[Point], rect: Rect) -> List[Point]:
    ox, oy = rect[0], rect[1]
    return [(float(px - ox), float(py - oy)) for px, py in points]


def contains(rect: Rect, point: Point) -> bool:
    x, y, w, h = rect
    px, py = point
    return x <= px < x + w and y <= py < y + h
