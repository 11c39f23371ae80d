"""SampleComparison: the main user-facing API (builder pattern)."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from .config import AnalysisSettings, resolve_settings
from .core.distances import Distances
from .core.progress import ProgressListener
from .core.taxa import Taxa
from .layout.tree_layout import RadialTreeLayout, RectangularTreeLayout, TreeEmbedding
from .ordination.ellipse import Ellipse
from .ordination.groups import compute_group_ellipses, compute_group_hulls
from .ordination.pcoa import PCoA, LoadingVector
from .tree.nj import NeighborJoining
from .tree.phylo import PhyloTree
from .tree.upgma import UPGMA

logger = logging.getLogger(__name__)


class SampleComparison:
    """Ordination and distance trees over one set of samples.

    Usage::

        import ordiclust as oc

        sc = oc.SampleComparison(distance_df)
        pcoa = sc.pcoa()
        ellipses = sc.group_ellipses({"healthy": [...], "sick": [...]})
        tree = sc.nj_tree()
        embedding = sc.embed(tree)

    Results are cached on the instance; calling ``pcoa()`` again reruns
    the analysis and replaces the cached result.
    """

    def __init__(
        self,
        data: pd.DataFrame | Taxa,
        distances: Distances | None = None,
        settings: AnalysisSettings | None = None,
    ) -> None:
        if isinstance(data, Taxa):
            if distances is None:
                raise TypeError("A Distances matrix is required when passing Taxa.")
            distances.check_compatible(data)
            self._taxa, self._distances = data, distances
        else:
            if distances is not None:
                raise TypeError("Pass either a labelled DataFrame or Taxa with Distances.")
            self._taxa, self._distances = Distances.from_frame(data)
        self._settings = resolve_settings(settings)

        self._pcoa: PCoA | None = None
        self._nj: PhyloTree | None = None
        self._upgma: PhyloTree | None = None

    @classmethod
    def from_counts(
        cls,
        counts: pd.DataFrame,
        method: str = "BrayCurtis",
        normalize: bool = False,
        settings: AnalysisSettings | None = None,
    ) -> SampleComparison:
        """Compare samples of a count table (rows are samples) by an ecological index."""
        taxa, distances = Distances.from_counts(counts, method=method, normalize=normalize)
        return cls(taxa, distances, settings=settings)

    @property
    def taxa(self) -> Taxa:
        return self._taxa

    @property
    def distances(self) -> Distances:
        return self._distances

    @property
    def settings(self) -> AnalysisSettings:
        return self._settings

    # --- Ordination ---

    def pcoa(self, progress: ProgressListener | None = None) -> PCoA:
        """Run (or rerun) PCoA. A canceled run keeps the previous result."""
        pcoa = PCoA(self._taxa, self._distances, settings=self._settings)
        pcoa.calculate_classic_mds(progress)
        self._pcoa = pcoa
        return pcoa

    def _computed_pcoa(self) -> PCoA:
        if self._pcoa is None:
            return self.pcoa()
        return self._pcoa

    def biplot(self, class2counts: Any) -> list[LoadingVector]:
        """Loading vectors of classes (e.g. taxa counts per sample)."""
        return self._computed_pcoa().compute_loading_vectors_biplot(
            self._taxa.size(), class2counts
        )

    def triplot(self, attribute2counts: Any) -> list[LoadingVector]:
        """Loading vectors of numeric sample attributes."""
        return self._computed_pcoa().compute_loading_vectors_triplot(
            self._taxa.size(), attribute2counts
        )

    def coordinates(self) -> pd.DataFrame:
        return self._computed_pcoa().coordinates_frame()

    def group_ellipses(
        self,
        groups: Any,
        first_pc: int = 0,
        second_pc: int = 1,
    ) -> dict[str, Ellipse]:
        """Fit an ellipse around each group of samples on two axes."""
        return dict(compute_group_ellipses(
            self._computed_pcoa(), groups, first_pc, second_pc, settings=self._settings
        ))

    def group_hulls(self, groups: Any, first_pc: int = 0, second_pc: int = 1) -> dict:
        """Convex hull around each group of samples on two axes."""
        return dict(compute_group_hulls(
            self._computed_pcoa(), groups, first_pc, second_pc, settings=self._settings
        ))

    # --- Trees ---

    def nj_tree(self, progress: ProgressListener | None = None) -> PhyloTree:
        self._nj = NeighborJoining.build(
            self._taxa, self._distances, progress=progress, settings=self._settings
        )
        return self._nj

    def upgma_tree(self, progress: ProgressListener | None = None) -> PhyloTree:
        self._upgma = UPGMA.build(
            self._taxa, self._distances, progress=progress, settings=self._settings
        )
        return self._upgma

    def embed(self, tree: PhyloTree) -> TreeEmbedding:
        """Rectangular layout for rooted trees, radial layout otherwise."""
        if tree.root is not None:
            return RectangularTreeLayout.compute(
                tree, to_scale=self._settings.embedding_to_scale
            )
        return RadialTreeLayout.compute(tree)

    def __repr__(self) -> str:
        return f"SampleComparison(samples={self._taxa.size()}, computed_pcoa={self._pcoa is not None})"
