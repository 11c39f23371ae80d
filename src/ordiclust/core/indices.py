"""EcologicalIndices: sample distance matrices from category counts."""

from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd

from .distances import Distances
from .taxa import Taxa
from .validation import _preview, validate_count_frame

logger = logging.getLogger(__name__)


def _kulczynski(u: np.ndarray, v: np.ndarray) -> float:
    shared = np.minimum(u, v).sum()
    return 1.0 - 0.5 * (shared / u.sum() + shared / v.sum())


def _chi_square(u: np.ndarray, v: np.ndarray) -> float:
    total_u, total_v = u.sum(), v.sum()
    both = u + v
    present = both > 0
    diff = u[present] / total_u - v[present] / total_v
    return math.sqrt(float(((total_u + total_v) / both[present] * diff ** 2).sum()))


class EcologicalIndices:
    """Pairwise ecological distances between samples.

    Each sample is a row of category counts (e.g. reads per taxon).
    Method names are matched case-insensitively:

    - ``BrayCurtis``: 1 - 2 * sum(min) / sum(u + v); 0 for two empty samples
    - ``Kulczynski``: 1 - (shared / total_u + shared / total_v) / 2
    - ``Hellinger``: Euclidean distance between square-rooted proportions
    - ``ChiSquare``: chi-square distance over categories present in either sample
    - ``Euclidean``: Euclidean distance, divided by the largest one
    - ``Euclidean-normalized``: as Euclidean, on per-sample proportions
    """

    VALID_METHODS = (
        "BrayCurtis", "Kulczynski", "Hellinger", "ChiSquare",
        "Euclidean", "Euclidean-normalized",
    )
    # Methods that divide by per-sample totals
    NEED_TOTALS = {"kulczynski", "hellinger", "chisquare", "euclidean-normalized"}

    @classmethod
    def compute(
        cls,
        counts: pd.DataFrame,
        method: str = "BrayCurtis",
        normalize: bool = False,
    ) -> tuple[Taxa, Distances]:
        """Build (Taxa, Distances) from a sample x category count table.

        Parameters
        ----------
        counts : DataFrame
            Rows are samples, columns are categories. Counts must be finite
            and non-negative.
        method : str
            One of ``VALID_METHODS``.
        normalize : bool
            If True, every sample is first divided by its total count.
        """
        from scipy.spatial.distance import pdist, squareform

        key = method.lower()
        valid = {m.lower(): m for m in cls.VALID_METHODS}
        if key not in valid:
            raise ValueError(
                f"Unknown distance method '{method}'. Valid: {sorted(cls.VALID_METHODS)}"
            )

        df = validate_count_frame(counts)
        values = df.to_numpy()
        totals = values.sum(axis=1)
        if key in cls.NEED_TOTALS or normalize:
            empty = [str(s) for s, t in zip(df.index, totals) if t == 0]
            if empty:
                raise ValueError(
                    f"{valid[key]} distance needs samples with non-zero totals. "
                    f"Empty samples: {_preview(empty)}"
                )
        if normalize or key == "euclidean-normalized":
            values = values / totals[:, None]

        logger.info(
            "Computing %s distances for %d samples over %d categories",
            valid[key], values.shape[0], values.shape[1],
        )

        if key == "braycurtis":
            with np.errstate(invalid="ignore", divide="ignore"):
                condensed = np.nan_to_num(pdist(values, "braycurtis"), nan=0.0)
        elif key == "kulczynski":
            condensed = pdist(values, _kulczynski)
        elif key == "hellinger":
            proportions = values / values.sum(axis=1, keepdims=True)
            condensed = pdist(np.sqrt(proportions), "euclidean")
        elif key == "chisquare":
            condensed = pdist(values, _chi_square)
        else:
            condensed = pdist(values, "euclidean")
            if condensed.size and condensed.max() > 0:
                condensed = condensed / condensed.max()

        taxa = Taxa.from_labels(df.index)
        return taxa, Distances.from_array(squareform(condensed, checks=False))
