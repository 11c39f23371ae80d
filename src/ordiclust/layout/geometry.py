"""Geometric primitives for tree embeddings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Point:
    """A location in embedding space."""

    x: float
    y: float

    def translate_by_angle(self, angle: float, distance: float) -> Point:
        """Move by distance in the direction of angle (radians)."""
        return Point(
            self.x + distance * math.cos(angle),
            self.y + distance * math.sin(angle),
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def bounding(cls, points: Iterable[Point]) -> Rect:
        """Smallest rectangle containing all points (zero rect if none)."""
        points = list(points)
        if not points:
            return cls(0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
