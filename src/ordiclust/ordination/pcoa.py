"""PCoA: classical multidimensional scaling of a sample distance matrix."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from ..config import AnalysisSettings, resolve_settings
from ..core import linalg
from ..core.distances import Distances
from ..core.progress import ProgressListener, resolve_progress
from ..core.taxa import Taxa
from ..core.validation import validate_counts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadingVector:
    """Direction and strength of one category on the ordination axes."""

    name: str
    vector: np.ndarray

    @property
    def squared_length(self) -> float:
        return linalg.get_squared_length(self.vector)

    def to_dict(self) -> dict:
        return {"name": self.name, "vector": self.vector.tolist()}


class PCoA:
    """Principal coordinate analysis of a Distances matrix.

    Usage::

        pcoa = PCoA(taxa, distances)
        pcoa.calculate_classic_mds()
        x, y, z = pcoa.get_projection(0, 1, 2, "sample_1")

    Results are published only when ``calculate_classic_mds`` completes.
    A canceled run raises CanceledError and leaves the previous state
    untouched.
    """

    __slots__ = (
        "_taxa", "_matrix_d", "_rank", "_settings", "_done",
        "_n_positive", "_eigenvalues", "_percent_explained",
        "_points", "_sample2point",
        "_loading_vectors_biplot", "_loading_vectors_triplot",
    )

    def __init__(
        self,
        taxa: Taxa,
        distances: Distances,
        settings: AnalysisSettings | None = None,
    ) -> None:
        distances.check_compatible(taxa)
        self._taxa = taxa
        self._rank = taxa.size()
        matrix = np.array(distances.values, dtype=np.float64)
        np.fill_diagonal(matrix, 0.0)
        self._matrix_d = matrix
        self._settings = resolve_settings(settings)
        self._done = False
        self._n_positive = 0
        self._eigenvalues = np.empty(0)
        self._percent_explained = np.empty(0)
        self._points = np.empty((self._rank, 0))
        self._sample2point: dict[str, np.ndarray] = {}
        self._loading_vectors_biplot: list[LoadingVector] = []
        self._loading_vectors_triplot: list[LoadingVector] = []

    def calculate_classic_mds(self, progress: ProgressListener | None = None) -> PCoA:
        """Run the ordination. Raises CanceledError if canceled."""
        from scipy.linalg import eigh

        progress = resolve_progress(progress)
        rank = self._rank
        threshold = self._settings.eigenvalue_threshold

        progress.set_subtask("Eigenvalue decomposition")
        progress.set_maximum(-1)
        progress.set_progress(-1)

        centered = linalg.compute_double_centering_of_squared_matrix(self._matrix_d)
        progress.check_for_cancel()
        if rank > 0:
            raw_eigenvalues, eigenvectors = eigh(centered)
        else:
            raw_eigenvalues, eigenvectors = np.empty(0), np.empty((0, 0))
        progress.check_for_cancel()

        positive = raw_eigenvalues > threshold
        n_positive = int(positive.sum())
        clipped = np.where(positive, raw_eigenvalues, 0.0)

        progress.set_subtask("Calculating PCoA")
        progress.set_maximum(2 * rank)
        progress.set_progress(0)

        # Columns of non-positive eigenvalues become zero
        scale = np.sqrt(clipped)
        scaled_eigenvectors = np.empty_like(eigenvectors)
        for i in range(rank):
            scaled_eigenvectors[i] = eigenvectors[i] * scale
            progress.increment_progress()

        logger.info("Number of positive eigenvalues: %d", n_positive)

        indices = linalg.sort_values(clipped)[:n_positive]
        eigenvalues = clipped[indices]
        total = float(eigenvalues.sum())
        if total > 0:
            percent_explained = 100.0 * eigenvalues / total
        else:
            percent_explained = np.full(n_positive, np.nan)
        logger.debug("Positive eigenvalues: %s", np.array2string(eigenvalues, precision=8))
        logger.debug("Percent explained: %s", np.array2string(percent_explained, precision=1))

        points = np.empty((rank, n_positive))
        sample2point: dict[str, np.ndarray] = {}
        for i, tid in enumerate(self._taxa.ids()):
            vector = scaled_eigenvectors[i, indices]
            points[i] = vector
            sample2point[self._taxa.get_label(tid)] = vector
            progress.increment_progress()

        # Publish only after every step completed
        self._n_positive = n_positive
        self._eigenvalues = eigenvalues
        self._percent_explained = percent_explained
        self._points = points
        self._sample2point = sample2point
        self._loading_vectors_biplot = []
        self._loading_vectors_triplot = []
        self._done = True
        return self

    # --- Accessors ---

    def is_done(self) -> bool:
        return self._done

    def get_rank(self) -> int:
        """Number of samples (dimension of the distance matrix)."""
        return self._rank

    def _require_done(self) -> None:
        if not self._done:
            raise RuntimeError(
                "PCoA has not been computed. Call calculate_classic_mds() first."
            )

    def get_number_of_positive_eigenvalues(self) -> int:
        self._require_done()
        return self._n_positive

    def get_eigenvalues(self) -> np.ndarray:
        """Positive eigenvalues in decreasing order."""
        self._require_done()
        return self._eigenvalues.copy()

    def get_percent_explained(self, pc: int) -> float:
        """Percent of total positive variance explained by axis ``pc`` (0-based)."""
        self._require_done()
        return float(self._percent_explained[pc])

    def get_point(self, sample_name: str) -> np.ndarray:
        """Full coordinate vector (length K) of a sample."""
        self._require_done()
        try:
            return self._sample2point[sample_name].copy()
        except KeyError:
            raise KeyError(f"Unknown sample '{sample_name}'.") from None

    def get_projection(self, i: int, j: int, k: int, sample_name: str) -> tuple[float, float, float]:
        """Coordinates of a sample on axes i, j, k (0-based).

        Axes beyond the number of positive eigenvalues give 0.
        """
        vector = self.get_point(sample_name)
        n = self._n_positive
        return tuple(float(vector[axis]) if axis < n else 0.0 for axis in (i, j, k))

    def coordinates_frame(self) -> pd.DataFrame:
        """Sample coordinates as a DataFrame with columns PC1..PCK."""
        self._require_done()
        columns = [f"PC{i + 1}" for i in range(self._n_positive)]
        return pd.DataFrame(self._points.copy(), index=self._taxa.labels(), columns=columns)

    # --- Loading vectors ---

    def compute_loading_vectors_biplot(
        self,
        number_of_samples: int | None = None,
        class2counts: Any = None,
    ) -> list[LoadingVector]:
        """Compute loading vectors of taxonomic classes for a biplot."""
        self._loading_vectors_biplot = self._compute_loading_vectors(number_of_samples, class2counts)
        return list(self._loading_vectors_biplot)

    def compute_loading_vectors_triplot(
        self,
        number_of_samples: int | None = None,
        attribute2counts: Any = None,
    ) -> list[LoadingVector]:
        """Compute loading vectors of sample attributes for a triplot."""
        self._loading_vectors_triplot = self._compute_loading_vectors(number_of_samples, attribute2counts)
        return list(self._loading_vectors_triplot)

    def get_loading_vectors_biplot(self) -> list[LoadingVector]:
        return list(self._loading_vectors_biplot)

    def get_loading_vectors_triplot(self) -> list[LoadingVector]:
        return list(self._loading_vectors_triplot)

    def _compute_loading_vectors(self, number_of_samples: int | None, counts: Any) -> list[LoadingVector]:
        """Covariance of counts with standardized coordinates, per axis.

        loadings = cov(M, scale(points)) * diag(1 / sqrt(eigenvalue / (n - 1))),
        scaled by ``loading_scale`` and sorted by decreasing length, then name.
        """
        self._require_done()
        n = self._rank if number_of_samples is None else number_of_samples
        if n != self._rank:
            raise ValueError(
                f"number_of_samples ({n}) must equal the number of ordinated "
                f"samples ({self._rank})."
            )
        if n < 2:
            raise ValueError("Loading vectors need at least 2 samples.")
        names, matrix_m = validate_counts(counts, n, sample_names=self._taxa.labels())

        standardized = linalg.center_and_scale(self._points)
        covariance = linalg.compute_covariance(matrix_m, standardized, bias_corrected=True)

        values = linalg.scalar_multiply(1.0 / (n - 1), self._eigenvalues)
        values = linalg.invert_values(linalg.sqrt_values(values))
        projection = linalg.multiply(covariance, linalg.diag(values))
        projection = linalg.scalar_multiply(self._settings.loading_scale, projection)

        vectors = [LoadingVector(name, projection[c]) for c, name in enumerate(names)]
        vectors.sort(key=lambda lv: (-lv.squared_length, lv.name))
        return vectors

    def to_dict(self) -> dict:
        """Serialize results for JSON transfer."""
        self._require_done()
        return {
            "rank": self._rank,
            "numberOfPositiveEigenValues": self._n_positive,
            "eigenValues": self._eigenvalues.tolist(),
            "percentExplained": self._percent_explained.tolist(),
            "points": {name: v.tolist() for name, v in self._sample2point.items()},
            "biplot": [lv.to_dict() for lv in self._loading_vectors_biplot],
            "triplot": [lv.to_dict() for lv in self._loading_vectors_triplot],
        }
