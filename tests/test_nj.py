"""Tests for NeighborJoining."""

import numpy as np
import pytest

from ordiclust.config import AnalysisSettings
from ordiclust.core.distances import Distances
from ordiclust.core.progress import ProgressListener
from ordiclust.core.taxa import Taxa
from ordiclust.exceptions import CanceledError
from ordiclust.tree.nj import NeighborJoining


def _edge_set(tree):
    return {
        (frozenset((tree.edge(e).source, tree.edge(e).target)), round(tree.weight(e), 9))
        for e in tree.edges()
    }


class TestNeighborJoiningQuartet:
    def test_shape(self, quartet):
        tree = NeighborJoining.build(*quartet)
        assert tree.number_of_nodes == 6
        assert tree.number_of_edges == 5
        assert tree.root is None
        assert sorted(tree.label(v) for v in tree.leaves()) == ["A", "B", "C", "D"]

    def test_topology_and_branch_lengths(self, quartet):
        tree = NeighborJoining.build(*quartet)
        # Leaves 0..3, then internal nodes 4 (joins A,B) and 5 (joins 4,C)
        assert _edge_set(tree) == {
            (frozenset((0, 4)), 1.0),
            (frozenset((1, 4)), 2.0),
            (frozenset((4, 5)), 5.0),
            (frozenset((2, 5)), 3.0),
            (frozenset((3, 5)), 4.0),
        }

    def test_additive_distances_reproduced(self, quartet):
        taxa, distances = quartet
        tree = NeighborJoining.build(taxa, distances)
        labels, matrix = tree.leaf_distance_matrix()
        assert labels == taxa.labels()
        np.testing.assert_allclose(matrix, distances.values, atol=1e-9)

    def test_internal_nodes_unlabelled(self, quartet):
        tree = NeighborJoining.build(*quartet)
        assert tree.label(4) is None
        assert tree.label(5) is None


class TestNeighborJoiningEdgeCases:
    def test_two_taxa(self):
        taxa = Taxa.from_labels(["x", "y"])
        distances = Distances(2)
        distances.set(1, 2, 4.0)
        tree = NeighborJoining.build(taxa, distances)
        assert tree.number_of_nodes == 2
        assert tree.number_of_edges == 1
        assert tree.weight(0) == 4.0

    def test_single_taxon(self):
        tree = NeighborJoining.build(Taxa.from_labels(["x"]), Distances(1))
        assert tree.number_of_nodes == 1
        assert tree.number_of_edges == 0

    def test_negative_branch_clamped(self):
        taxa = Taxa.from_labels(["A", "B", "C"])
        distances = Distances.from_array([
            [0.0, 1.0, 1.0],
            [1.0, 0.0, 5.0],
            [1.0, 5.0, 0.0],
        ])
        tree = NeighborJoining.build(taxa, distances)
        assert tree.number_of_clamped_edges == 1
        assert all(tree.weight(e) >= 0 for e in tree.edges())
        assert tree.weight(0) == 0.0

    def test_clamping_disabled(self):
        taxa = Taxa.from_labels(["A", "B", "C"])
        distances = Distances.from_array([
            [0.0, 1.0, 1.0],
            [1.0, 0.0, 5.0],
            [1.0, 5.0, 0.0],
        ])
        settings = AnalysisSettings(clamp_negative_branches=False)
        tree = NeighborJoining.build(taxa, distances, settings=settings)
        assert tree.number_of_clamped_edges == 0
        assert tree.weight(0) == pytest.approx(-1.5)

    def test_size_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            NeighborJoining.build(Taxa.from_labels(["a", "b"]), Distances(3))

    def test_binary_tree_size(self, clustered_df):
        taxa, distances = Distances.from_frame(clustered_df)
        tree = NeighborJoining.build(taxa, distances)
        n = taxa.size()
        assert tree.number_of_nodes == 2 * n - 2
        assert tree.number_of_edges == 2 * n - 3
        assert len(tree.leaves()) == n

    def test_cancel(self, quartet):
        progress = ProgressListener()
        progress.cancel()
        with pytest.raises(CanceledError):
            NeighborJoining.build(*quartet, progress=progress)
