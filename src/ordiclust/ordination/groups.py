"""Per-group ellipses and convex hulls over a PCoA projection."""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Mapping

import numpy as np
import pandas as pd
from scipy.spatial import ConvexHull, QhullError

from ..config import AnalysisSettings, resolve_settings
from .ellipse import Ellipse, EllipseFitter
from .pcoa import PCoA

logger = logging.getLogger(__name__)


def _normalize_groups(groups: Any) -> OrderedDict[str, list[str]]:
    """Accept {group: [samples]} or a Series mapping sample -> group.

    Group order follows first appearance; samples keep their given order.
    """
    result: OrderedDict[str, list[str]] = OrderedDict()
    if isinstance(groups, pd.Series):
        for sample, group in groups.items():
            if pd.isna(group):
                continue
            result.setdefault(str(group), []).append(str(sample))
        return result
    if not isinstance(groups, Mapping):
        raise TypeError(
            f"Groups must be a mapping {{group: [samples]}} or a pandas Series, "
            f"got {type(groups).__name__}."
        )
    for group, samples in groups.items():
        if isinstance(samples, str):
            raise TypeError(f"Samples of group '{group}' must be a sequence, not a string.")
        result[str(group)] = [str(s) for s in samples]
    return result


def group_points(
    pcoa: PCoA,
    groups: Any,
    first_pc: int = 0,
    second_pc: int = 1,
) -> OrderedDict[str, np.ndarray]:
    """Project each group's samples onto two principal coordinates.

    Returns an ordered {group: array of shape (n, 2)}. Unknown sample
    names raise KeyError.
    """
    projected: OrderedDict[str, np.ndarray] = OrderedDict()
    for group, samples in _normalize_groups(groups).items():
        coords = [pcoa.get_projection(first_pc, second_pc, 0, s)[:2] for s in samples]
        projected[group] = np.array(coords, dtype=np.float64).reshape(len(coords), 2)
    return projected


def pad_points(points: np.ndarray, padding: float) -> np.ndarray:
    """Replace every point by the four corners of a square of half-width padding."""
    if padding <= 0:
        return points
    offsets = np.array([[-1, -1], [1, -1], [1, 1], [-1, 1]], dtype=np.float64) * padding
    return (points[:, None, :] + offsets[None, :, :]).reshape(-1, 2)


def compute_group_ellipses(
    pcoa: PCoA,
    groups: Any,
    first_pc: int = 0,
    second_pc: int = 1,
    settings: AnalysisSettings | None = None,
) -> OrderedDict[str, Ellipse]:
    """Fit one ellipse per group with enough points.

    Groups with fewer than ``settings.ellipse_min_points`` samples are
    skipped with a warning. Padding is applied before counting, so a
    padded group of two samples already has eight points.
    """
    settings = resolve_settings(settings)
    ellipses: OrderedDict[str, Ellipse] = OrderedDict()
    for group, points in group_points(pcoa, groups, first_pc, second_pc).items():
        points = pad_points(points, settings.ellipse_padding)
        if len(points) < settings.ellipse_min_points:
            logger.warning(
                "Skipping ellipse for group '%s': %d point(s), need %d",
                group, len(points), settings.ellipse_min_points,
            )
            continue
        ellipses[group] = EllipseFitter.fit(points)
    return ellipses


def compute_group_hulls(
    pcoa: PCoA,
    groups: Any,
    first_pc: int = 0,
    second_pc: int = 1,
    settings: AnalysisSettings | None = None,
) -> OrderedDict[str, np.ndarray]:
    """Convex hull vertices per group, counter-clockwise.

    Groups with fewer than three points, or whose points are collinear,
    get their (padded) points back unchanged.
    """
    settings = resolve_settings(settings)
    hulls: OrderedDict[str, np.ndarray] = OrderedDict()
    for group, points in group_points(pcoa, groups, first_pc, second_pc).items():
        points = pad_points(points, settings.ellipse_padding)
        if len(points) < 3:
            hulls[group] = points
            continue
        try:
            hull = ConvexHull(points)
        except QhullError:
            logger.debug("Group '%s' is degenerate, returning its points", group)
            hulls[group] = points
            continue
        hulls[group] = points[hull.vertices]
    return hulls
