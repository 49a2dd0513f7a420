"""Shared landmark result structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .geometry import Point, Rect

FEATURE_ORDER = ("eyes", "eyebrows", "nose", "mouth")


@dataclass
class FeatureLandmarks:
    """Landmarks found inside one detected feature box.

    ``points`` maps a label to a global-frame point, or to ``None`` when the
    landmark could not be derived from the surviving candidates.
    """

    feature: str
    box: Rect
    points: Dict[str, Optional[Point]] = field(default_factory=dict)
    candidates: List[Point] = field(default_factory=list)
    kept: List[Point] = field(default_factory=list)

    def present(self) -> Dict[str, Point]:
        return {label: point for label, point in self.points.items() if point is not None}

    def to_dict(self) -> dict:
        return {
            "feature": self.feature,
            "box": list(self.box),
            "points": {
                label: None if point is None else [round(point[0], 3), round(point[1], 3)]
                for label, point in self.points.items()
            },
        }


@dataclass
class FaceLandmarks:
    """All feature landmarks found for one face."""

    rect: Rect
    features: Dict[str, List[FeatureLandmarks]] = field(
        default_factory=lambda: {name: [] for name in FEATURE_ORDER}
    )

    def count(self, feature: Optional[str] = None) -> int:
        """Number of Present landmark points, optionally for a single feature."""
        names = [feature] if feature else list(self.features)
        return sum(
            len(item.present())
            for name in names
            for item in self.features.get(name, [])
        )

    def to_dict(self) -> dict:
        return {
            "rect": list(self.rect),
            "features": {
                name: [item.to_dict() for item in items]
                for name, items in self.features.items()
            },
        }
