"""Direct least-squares ellipse fitting over a 2D point cloud.

Implements the fit of Fitzgibbon, Pilu and Fisher, "Direct Least Squares
Fitting of Ellipses" (IEEE PAMI 21, 1999), in the numerically stable form
of Halir and Flusser (1998). The fit is non-iterative and always returns
an ellipse, even when a hyperbola would describe the points better.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from ..core.validation import validate_points
from ..exceptions import DegenerateFitError

logger = logging.getLogger(__name__)

MIN_POINTS = 5


@dataclass(frozen=True)
class Ellipse:
    """Ellipse geometry: center, semi-axis lengths and rotation (radians).

    ``axis_a`` is the semi-axis along ``angle``; fitted ellipses have
    ``axis_a >= axis_b``. A failed fit has NaN fields.
    """

    center_x: float
    center_y: float
    axis_a: float
    axis_b: float
    angle: float

    @classmethod
    def invalid(cls) -> Ellipse:
        nan = float("nan")
        return cls(nan, nan, nan, nan, nan)

    @property
    def is_valid(self) -> bool:
        values = (self.center_x, self.center_y, self.axis_a, self.axis_b, self.angle)
        return all(math.isfinite(v) for v in values) and self.axis_a > 0 and self.axis_b > 0

    @property
    def area(self) -> float:
        return math.pi * self.axis_a * self.axis_b

    def contains(self, x: float, y: float) -> bool:
        """True if (x, y) lies inside or on the ellipse."""
        if not self.is_valid:
            return False
        cos_t, sin_t = math.cos(self.angle), math.sin(self.angle)
        dx, dy = x - self.center_x, y - self.center_y
        u = dx * cos_t + dy * sin_t
        v = -dx * sin_t + dy * cos_t
        return (u / self.axis_a) ** 2 + (v / self.axis_b) ** 2 <= 1.0 + 1e-12

    def boundary(self, n: int = 100) -> np.ndarray:
        """n points evenly spaced in parameter along the ellipse, shape (n, 2)."""
        t = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
        cos_t, sin_t = math.cos(self.angle), math.sin(self.angle)
        u = self.axis_a * np.cos(t)
        v = self.axis_b * np.sin(t)
        x = self.center_x + u * cos_t - v * sin_t
        y = self.center_y + u * sin_t + v * cos_t
        return np.column_stack([x, y])

    def to_dict(self) -> dict:
        return {
            "centerX": self.center_x,
            "centerY": self.center_y,
            "axisA": self.axis_a,
            "axisB": self.axis_b,
            "angle": self.angle,
        }


class EllipseFitter:
    """Fits ellipses to point clouds.

    Callers must supply at least five points in general position; fewer
    points, or collinear ones, give a singular system.
    """

    @staticmethod
    def fit_conic(points: np.ndarray) -> np.ndarray:
        """Algebraic parameters [a, b, c, d, e, f] of the best-fit ellipse.

        The conic is ax^2 + bxy + cy^2 + dx + ey + f = 0. The returned
        vector has unit norm and its sign is chosen so that a + c >= 0.

        Raises numpy.linalg.LinAlgError if the scatter matrix is singular.
        """
        from scipy.linalg import eig, inv

        points = validate_points(points, min_points=MIN_POINTS)
        x_center, y_center = points.mean(axis=0)
        x = points[:, 0] - x_center
        y = points[:, 1] - y_center

        d1 = np.column_stack([x * x, x * y, y * y])  # quadratic part
        d2 = np.column_stack([x, y, np.ones_like(x)])  # linear part

        s1 = d1.T @ d1
        s2 = d1.T @ d2
        s3 = d2.T @ d2
        t = -inv(s3) @ s2.T
        m = s1 + s2 @ t
        if not np.all(np.isfinite(m)):
            raise np.linalg.LinAlgError("Reduced scatter matrix is not finite.")

        # Premultiply by the inverse of the constraint matrix
        n = np.array([
            m[2] / 2,
            -m[1],
            m[0] / 2,
        ])
        _, eigenvectors = eig(n)
        eigenvectors = np.real(eigenvectors)

        cond = 4 * eigenvectors[0] * eigenvectors[2] - eigenvectors[1] ** 2
        positive = np.flatnonzero(cond > 0)
        index = int(positive[0]) if len(positive) else 0
        a1 = eigenvectors[:, index]

        conic = np.concatenate([a1, t @ a1])
        a, b, c, d, e, f = conic
        conic[3] = d - 2 * a * x_center - b * y_center
        conic[4] = e - 2 * c * y_center - b * x_center
        conic[5] = (
            f + a * x_center * x_center + c * y_center * y_center
            + b * x_center * y_center - d * x_center - e * y_center
        )

        conic = conic / np.linalg.norm(conic)
        if conic[0] + conic[2] < 0:
            conic = -conic
        return conic

    @staticmethod
    def conic_to_ellipse(conic: np.ndarray) -> Ellipse:
        """Convert general conic parameters to ellipse geometry.

        Follows the closed form at https://mathworld.wolfram.com/Ellipse.html.
        Degenerate conics (b^2 - ac == 0) produce NaN fields.
        """
        a = float(conic[0])
        b = float(conic[1]) / 2
        c = float(conic[2])
        d = float(conic[3]) / 2
        f = float(conic[4]) / 2
        g = float(conic[5])

        with np.errstate(divide="ignore", invalid="ignore"):
            det = np.float64(b * b - a * c)
            center_x = (c * d - b * f) / det
            center_y = (a * f - b * d) / det

            numerator = 2 * (a * f * f + c * d * d + g * b * b - 2 * b * d * f - a * c * g)
            root = math.sqrt((a - c) * (a - c) + 4 * b * b)
            axis_a = np.sqrt(numerator / (det * (root - (a + c))))
            axis_b = np.sqrt(numerator / (det * (-root - (a + c))))

        if b == 0:
            angle = 0.0 if a <= c else math.pi / 2
        elif a < c:
            angle = math.atan(2 * b / (a - c)) / 2
        elif a > c:
            angle = math.atan(2 * b / (a - c)) / 2 + math.pi / 2
        else:
            angle = -math.copysign(math.pi / 4, b)

        return Ellipse(
            center_x=float(center_x),
            center_y=float(center_y),
            axis_a=float(axis_a),
            axis_b=float(axis_b),
            angle=angle,
        )

    @classmethod
    def fit(cls, points: np.ndarray, strict: bool = False) -> Ellipse:
        """Fit an ellipse to points of shape (n, 2), n >= 5.

        A singular or degenerate fit returns ``Ellipse.invalid()``, or
        raises DegenerateFitError when ``strict`` is True.
        """
        try:
            ellipse = cls.conic_to_ellipse(cls.fit_conic(points))
        except np.linalg.LinAlgError as ex:
            if strict:
                raise DegenerateFitError(f"Ellipse fit is singular: {ex}") from ex
            logger.warning("Ellipse fit is singular: %s", ex)
            return Ellipse.invalid()
        if not ellipse.is_valid:
            if strict:
                raise DegenerateFitError(f"Ellipse fit is degenerate: {ellipse}")
            logger.warning("Ellipse fit is degenerate: %s", ellipse)
        return ellipse
