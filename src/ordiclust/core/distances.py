"""Distances: symmetric matrix of pairwise sample dissimilarities."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .validation import validate_distance_frame, validate_square_matrix

if TYPE_CHECKING:
    from .taxa import Taxa


class Distances:
    """Square, symmetric distance matrix indexed 1..ntax.

    ``set(i, j, v)`` writes both ``(i, j)`` and ``(j, i)``, so
    ``get(i, j) == get(j, i)`` always holds. The diagonal starts at zero.
    No triangle inequality is required.
    """

    __slots__ = ("_values",)

    def __init__(self, ntax: int) -> None:
        if ntax < 0:
            raise ValueError(f"Number of taxa must be non-negative, got {ntax}.")
        self._values: np.ndarray = np.zeros((ntax, ntax), dtype=np.float64)

    @classmethod
    def from_array(cls, values: np.ndarray) -> Distances:
        """Create from a square symmetric (n, n) array (0-based)."""
        obj = object.__new__(cls)
        obj._values = np.ascontiguousarray(validate_square_matrix(values))
        return obj

    @classmethod
    def from_condensed(cls, condensed: np.ndarray) -> Distances:
        """Create from a scipy-style condensed distance vector."""
        from scipy.spatial.distance import squareform

        return cls.from_array(squareform(np.asarray(condensed, dtype=np.float64)))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> tuple[Taxa, Distances]:
        """Create (Taxa, Distances) from a labelled square DataFrame.

        Taxon ids follow the order of the DataFrame index.
        """
        from .taxa import Taxa

        df = validate_distance_frame(df)
        taxa = Taxa.from_labels(df.index)
        return taxa, cls.from_array(df.values)

    @classmethod
    def from_counts(
        cls, counts: pd.DataFrame, method: str = "BrayCurtis", normalize: bool = False,
    ) -> tuple[Taxa, Distances]:
        """Create (Taxa, Distances) from a sample x category count table.

        See ``EcologicalIndices`` for the available methods.
        """
        from .indices import EcologicalIndices

        return EcologicalIndices.compute(counts, method=method, normalize=normalize)

    def get_ntax(self) -> int:
        return self._values.shape[0]

    def _check(self, i: int, j: int) -> None:
        n = self.get_ntax()
        if not (1 <= i <= n and 1 <= j <= n):
            raise IndexError(f"Taxon index out of range 1..{n}: ({i}, {j}).")

    def get(self, i: int, j: int) -> float:
        """Distance between taxa i and j (1-based)."""
        self._check(i, j)
        return float(self._values[i - 1, j - 1])

    def set(self, i: int, j: int, value: float) -> None:
        """Set the distance between taxa i and j (1-based), symmetrically."""
        self._check(i, j)
        self._values[i - 1, j - 1] = value
        self._values[j - 1, i - 1] = value

    @property
    def values(self) -> np.ndarray:
        """Float64 matrix (ntax, ntax), 0-based, read-only view."""
        v = self._values.view()
        v.flags.writeable = False
        return v

    def check_compatible(self, taxa: Taxa) -> None:
        """Raise ValueError unless taxa ids 1..ntax match the matrix rows."""
        n = self.get_ntax()
        if taxa.size() != n:
            raise ValueError(
                f"Number of taxa ({taxa.size()}) does not match distance "
                f"matrix dimension ({n})."
            )
        if taxa.ids() != list(range(1, n + 1)):
            raise ValueError(
                "Taxa ids must be 1..n without gaps to index a distance matrix."
            )

    def to_frame(self, taxa: Taxa) -> pd.DataFrame:
        """Return the matrix as a DataFrame labelled by taxa."""
        self.check_compatible(taxa)
        labels = taxa.labels()
        return pd.DataFrame(self._values.copy(), index=labels, columns=labels)

    def __repr__(self) -> str:
        return f"Distances(ntax={self.get_ntax()})"
