"""Shared test fixtures for ordiclust."""

import numpy as np
import pandas as pd
import pytest
from scipy.spatial.distance import pdist, squareform

from ordiclust.core.distances import Distances
from ordiclust.core.taxa import Taxa


@pytest.fixture
def triangle_df():
    """3-4-5 right triangle: exactly Euclidean in 2D."""
    data = np.array([
        [0.0, 3.0, 4.0],
        [3.0, 0.0, 5.0],
        [4.0, 5.0, 0.0],
    ])
    names = ["s1", "s2", "s3"]
    return pd.DataFrame(data, index=names, columns=names)


@pytest.fixture
def quartet():
    """Additive distances of the tree ((A:1, B:2):5, (C:3, D:4))."""
    taxa = Taxa.from_labels(["A", "B", "C", "D"])
    distances = Distances.from_array(np.array([
        [0.0, 3.0, 9.0, 10.0],
        [3.0, 0.0, 10.0, 11.0],
        [9.0, 10.0, 0.0, 7.0],
        [10.0, 11.0, 7.0, 0.0],
    ]))
    return taxa, distances


@pytest.fixture
def ultrametric():
    """Ultrametric distances: A,B join at height 1, C,D at 2, root at 4."""
    taxa = Taxa.from_labels(["A", "B", "C", "D"])
    distances = Distances.from_array(np.array([
        [0.0, 2.0, 8.0, 8.0],
        [2.0, 0.0, 8.0, 8.0],
        [8.0, 8.0, 0.0, 4.0],
        [8.0, 8.0, 4.0, 0.0],
    ]))
    return taxa, distances


@pytest.fixture
def clustered_points():
    """Two clusters of 6 samples each in the plane."""
    rng = np.random.default_rng(7)
    left = rng.normal(loc=(-5.0, 0.0), scale=(1.0, 0.5), size=(6, 2))
    right = rng.normal(loc=(5.0, 1.0), scale=(0.5, 1.5), size=(6, 2))
    return np.vstack([left, right])


@pytest.fixture
def clustered_df(clustered_points):
    """Euclidean distance frame over the clustered points."""
    names = [f"left_{i}" for i in range(6)] + [f"right_{i}" for i in range(6)]
    matrix = squareform(pdist(clustered_points))
    return pd.DataFrame(matrix, index=names, columns=names)


@pytest.fixture
def clustered_groups(clustered_df):
    names = list(clustered_df.index)
    return {"left": names[:6], "right": names[6:]}
