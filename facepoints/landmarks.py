"""Candidate filtering and reduction for each facial feature.

Every function here takes and returns points in the global image frame.
A reduction that has nothing to work with returns ``None`` for that landmark
rather than failing; callers keep the label with a ``None`` value.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .config_manager import FeatureProfile
from .geometry import Point, Rect, center
from .types import FeatureLandmarks

# ----------------------------------------------------------------------
# Reductions
# ----------------------------------------------------------------------


def split_by_x(points: Sequence[Point], split_x: float) -> Tuple[List[Point], List[Point]]:
    """Partition points into those strictly left of ``split_x`` and the rest."""
    left = [p for p in points if p[0] < split_x]
    right = [p for p in points if p[0] >= split_x]
    return left, right


def centroid(points: Sequence[Point]) -> Optional[Point]:
    if not points:
        return None
    n = float(len(points))
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def sort_by_x(points: Sequence[Point]) -> List[Point]:
    return sorted(points, key=lambda p: (p[0], p[1]))


def extremes_by_x(points: Sequence[Point]) -> Tuple[Optional[Point], Optional[Point]]:
    """Leftmost and rightmost point, or ``(None, None)`` for no points."""
    if not points:
        return None, None
    ordered = sort_by_x(points)
    return ordered[0], ordered[-1]


def midline_points(points: Sequence[Point], center_x: float, deviation: float) -> List[Point]:
    """Points whose horizontal distance to ``center_x`` is at most ``deviation``."""
    return [p for p in points if abs(p[0] - center_x) <= deviation]


def outer_end(points: Sequence[Point], leftmost: bool) -> Optional[Point]:
    """Extreme x of ``points`` paired with their mean y."""
    if not points:
        return None
    xs = [p[0] for p in points]
    mean_y = sum(p[1] for p in points) / float(len(points))
    return (min(xs) if leftmost else max(xs), mean_y)


# ----------------------------------------------------------------------
# Inclusion predicates
# ----------------------------------------------------------------------


def filter_eye(points: Sequence[Point], box: Rect, y_deviation: float) -> List[Point]:
    """Keep points within ``y_deviation`` of the box height from its vertical center."""
    center_y = center(box)[1]
    max_deviation = box[3] * y_deviation
    return [p for p in points if abs(p[1] - center_y) <= max_deviation]


def filter_nose(
    points: Sequence[Point],
    box: Rect,
    x_deviation: float,
    y_deviation: float,
    center_offset: float,
) -> List[Point]:
    """Keep nostril candidates.

    Dropped: points above ``center_offset`` px below the box center, points in
    the bottom ``y_deviation`` of the box, points within ``x_deviation`` of
    either side edge and points within ``x_deviation`` of the center column.
    """
    x, y, w, h = box
    center_x, center_y = center(box)
    x_margin = w * x_deviation
    y_margin = h * y_deviation

    kept = []
    for p in points:
        local_x = p[0] - x
        local_y = p[1] - y
        if p[1] < center_y + center_offset:
            continue
        if local_y > h - y_margin:
            continue
        if local_x < x_margin or local_x > w - x_margin:
            continue
        if abs(p[0] - center_x) < x_margin:
            continue
        kept.append(p)
    return kept


def filter_mouth(points: Sequence[Point], box: Rect) -> List[Point]:
    """Keep points not below the vertical center of the box."""
    center_y = center(box)[1]
    return [p for p in points if p[1] <= center_y]


# ----------------------------------------------------------------------
# Per feature
# ----------------------------------------------------------------------


def eye_landmarks(candidates: Sequence[Point], box: Rect, profile: FeatureProfile) -> FeatureLandmarks:
    kept = sort_by_x(filter_eye(candidates, box, profile.threshold("y_deviation")))
    left, right = extremes_by_x(kept)
    return FeatureLandmarks(
        feature="eyes",
        box=box,
        points={"left_corner": left, "right_corner": right, "center": center(box)},
        candidates=list(candidates),
        kept=kept,
    )


def eyebrow_landmarks(candidates: Sequence[Point], region: Rect, eye_box: Rect) -> FeatureLandmarks:
    """Eyebrow ends for the region above ``eye_box``.

    Candidates are split at the eye box's exact horizontal center; the left
    side reduces to its minimum x, the right side to its maximum x.
    """
    split_x = eye_box[0] + eye_box[2] / 2.0
    left, right = split_by_x(candidates, split_x)
    return FeatureLandmarks(
        feature="eyebrows",
        box=region,
        points={
            "left_end": outer_end(left, leftmost=True),
            "right_end": outer_end(right, leftmost=False),
        },
        candidates=list(candidates),
        kept=list(candidates),
    )


def nose_landmarks(candidates: Sequence[Point], box: Rect, profile: FeatureProfile) -> FeatureLandmarks:
    kept = filter_nose(
        candidates,
        box,
        profile.threshold("x_deviation"),
        profile.threshold("y_deviation"),
        profile.threshold("center_offset"),
    )
    box_center = center(box)
    left, right = split_by_x(kept, box_center[0])
    return FeatureLandmarks(
        feature="nose",
        box=box,
        points={
            "left_nostril": centroid(left),
            "right_nostril": centroid(right),
            "center": box_center,
        },
        candidates=list(candidates),
        kept=kept,
    )


def mouth_landmarks(candidates: Sequence[Point], box: Rect, profile: FeatureProfile) -> FeatureLandmarks:
    kept = sort_by_x(filter_mouth(candidates, box))
    left, right = extremes_by_x(kept)
    box_center = center(box)
    deviation = box[2] * profile.threshold("midline_deviation")
    midline = centroid(midline_points(kept, box_center[0], deviation))
    return FeatureLandmarks(
        feature="mouth",
        box=box,
        points={
            "left_corner": left,
            "right_corner": right,
            "midline": midline,
            "center": box_center,
        },
        candidates=list(candidates),
        kept=kept,
    )
