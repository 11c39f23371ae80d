"""UPGMA: rooted average-linkage tree construction."""

from __future__ import annotations

import logging

import numpy as np

from ..config import AnalysisSettings, resolve_settings
from ..core.distances import Distances
from ..core.progress import ProgressListener, resolve_progress
from ..core.taxa import Taxa
from .nj import clamp_branch
from .phylo import PhyloTree

logger = logging.getLogger(__name__)


class UPGMA:
    """Unweighted pair group method with arithmetic mean.

    Active clusters occupy slots 0..active-1. Each iteration merges the
    closest pair (i, j), i < j, at height d[i, j] / 2, updates distances by
    size-weighted averaging and moves the last active slot into slot j.
    """

    @staticmethod
    def build(
        taxa: Taxa,
        distances: Distances,
        progress: ProgressListener | None = None,
        settings: AnalysisSettings | None = None,
    ) -> PhyloTree:
        """Run UPGMA and return the rooted tree.

        The last two clusters hang from the root with edges
        ``0.5 * (d - delta)``, where delta is their height difference; the
        lower subtree gets delta added, so every root-to-leaf path along
        the longest branches has the same length.
        """
        distances.check_compatible(taxa)
        progress = resolve_progress(progress)
        settings = resolve_settings(settings)
        ntax = distances.get_ntax()

        tree = PhyloTree()
        subtrees = [tree.new_node(taxa.get_label(i + 1)) for i in range(ntax)]
        if ntax == 1:
            tree.set_root(subtrees[0])
        if ntax < 2:
            return tree

        values = np.asarray(distances.values, dtype=np.float64)
        d = (values + values.T) / 2.0
        np.fill_diagonal(d, 0.0)
        sizes = [1] * ntax
        heights = [0.0] * ntax

        progress.set_subtask("UPGMA")
        progress.set_maximum(ntax - 2)
        progress.set_progress(0)

        for actual in range(ntax, 2, -1):
            sub = d[:actual, :actual].copy()
            sub[np.tril_indices(actual)] = np.inf
            i, j = (int(k) for k in np.unravel_index(int(np.argmin(sub)), sub.shape))
            height = d[i, j] / 2.0

            v = tree.new_node()
            tree.new_edge(v, subtrees[i], clamp_branch(tree, height - heights[i], settings))
            tree.new_edge(v, subtrees[j], clamp_branch(tree, height - heights[j], settings))
            logger.debug("Merged slots %d and %d at height %.6g", i, j, height)

            subtrees[i] = v
            heights[i] = height
            size_i, size_j = sizes[i], sizes[j]
            sizes[i] = size_i + size_j

            others = [k for k in range(actual) if k != i and k != j]
            merged = (d[others, i] * size_i + d[others, j] * size_j) / (size_i + size_j)
            d[others, i] = merged
            d[i, others] = merged

            # Move the last active slot into the freed slot j
            last = actual - 1
            if j < last:
                row = d[last, :actual].copy()
                d[j, :actual] = row
                d[:actual, j] = row
                d[j, j] = 0.0
                subtrees[j] = subtrees[last]
                sizes[j] = sizes[last]
                heights[j] = heights[last]
            progress.increment_progress()

        # Balance the two remaining subtrees under the root
        root = tree.new_node()
        tree.set_root(root)
        delta = abs(heights[0] - heights[1])
        distance = d[0, 1] - delta
        if heights[0] <= heights[1]:
            w0, w1 = 0.5 * distance + delta, 0.5 * distance
        else:
            w0, w1 = 0.5 * distance, 0.5 * distance + delta
        tree.new_edge(root, subtrees[0], w0)
        tree.new_edge(root, subtrees[1], w1)

        if tree.number_of_clamped_edges:
            logger.warning(
                "UPGMA clamped %d negative branch length(s) to zero",
                tree.number_of_clamped_edges,
            )
        return tree
