"""NeighborJoining: unrooted tree construction from a distance matrix."""

from __future__ import annotations

import logging

import numpy as np

from ..config import AnalysisSettings, resolve_settings
from ..core.distances import Distances
from ..core.progress import ProgressListener, resolve_progress
from ..core.taxa import Taxa
from .phylo import PhyloTree

logger = logging.getLogger(__name__)


def clamp_branch(tree: PhyloTree, length: float, settings: AnalysisSettings) -> float:
    """Replace a negative branch length by zero, counting it on the tree."""
    if length < 0 and settings.clamp_negative_branches:
        tree.number_of_clamped_edges += 1
        return 0.0
    return length


class NeighborJoining:
    """Saitou-Nei neighbor joining.

    Each iteration joins the active pair (i, j), i < j, minimizing
    ``h[i, j] - (b[i] + b[j]) / (active - 2)``, where b holds row sums over
    active taxa. Ties go to the first pair in row-major order. The last two
    active nodes are joined by a single edge, so no root is created.
    """

    @staticmethod
    def build(
        taxa: Taxa,
        distances: Distances,
        progress: ProgressListener | None = None,
        settings: AnalysisSettings | None = None,
    ) -> PhyloTree:
        """Run neighbor joining and return the unrooted tree.

        Leaves are labelled with taxon labels; internal nodes are unlabelled.
        """
        distances.check_compatible(taxa)
        progress = resolve_progress(progress)
        settings = resolve_settings(settings)
        ntax = distances.get_ntax()

        tree = PhyloTree()
        nodes = [tree.new_node(taxa.get_label(i + 1)) for i in range(ntax)]
        if ntax < 2:
            return tree

        h = np.array(distances.values, dtype=np.float64)
        np.fill_diagonal(h, 0.0)
        active = np.ones(ntax, dtype=bool)
        b = h.sum(axis=1)

        progress.set_subtask("Neighbor joining")
        progress.set_maximum(ntax - 2)
        progress.set_progress(0)

        for actual in range(ntax, 2, -1):
            idx = np.flatnonzero(active)
            sub = h[np.ix_(idx, idx)]
            q = sub - (b[idx][:, None] + b[idx][None, :]) / (actual - 2)
            q[np.tril_indices(len(idx))] = np.inf
            r, c = np.unravel_index(int(np.argmin(q)), q.shape)
            i, j = int(idx[r]), int(idx[c])

            dist_e = 0.5 * (h[i, j] + b[i] / (actual - 2) - b[j] / (actual - 2))
            dist_f = 0.5 * (h[i, j] + b[j] / (actual - 2) - b[i] / (actual - 2))

            # Merge j into i
            active[j] = False
            others = np.flatnonzero(active)
            merged = (h[others, i] + h[others, j] - dist_e - dist_f) / 2
            h[others, i] = merged
            h[i, others] = merged
            h[i, i] = 0.0
            h[j, :] = 0.0
            h[:, j] = 0.0
            b = np.where(active, h[:, active].sum(axis=1), 0.0)

            v = tree.new_node()
            tree.new_edge(nodes[i], v, clamp_branch(tree, dist_e, settings))
            tree.new_edge(nodes[j], v, clamp_branch(tree, dist_f, settings))
            logger.debug(
                "Joined nodes %d and %d (branch lengths %.6g, %.6g)",
                nodes[i], nodes[j], dist_e, dist_f,
            )
            nodes[i] = v
            nodes[j] = -1
            progress.increment_progress()

        i, j = (int(k) for k in np.flatnonzero(active))
        tree.new_edge(nodes[i], nodes[j], clamp_branch(tree, h[i, j], settings))

        if tree.number_of_clamped_edges:
            logger.warning(
                "Neighbor joining clamped %d negative branch length(s) to zero",
                tree.number_of_clamped_edges,
            )
        return tree
