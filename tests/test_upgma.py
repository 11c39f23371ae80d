"""Tests for UPGMA."""

import pytest

from ordiclust.core.distances import Distances
from ordiclust.core.taxa import Taxa
from ordiclust.tree.upgma import UPGMA


class TestUPGMAUltrametric:
    def test_rooted_binary(self, ultrametric):
        tree = UPGMA.build(*ultrametric)
        assert tree.root == 6
        assert tree.number_of_nodes == 7
        assert tree.number_of_edges == 6
        assert tree.degree(tree.root) == 2

    def test_merge_heights(self, ultrametric):
        tree = UPGMA.build(*ultrametric)
        a, b, c, d = (tree.find_leaf(x) for x in "ABCD")
        assert tree.height(tree.lca(a, b)) == pytest.approx(1.0)
        assert tree.height(tree.lca(c, d)) == pytest.approx(2.0)
        assert tree.height(tree.root) == pytest.approx(5.5)

    def test_path_is_twice_lca_height(self, ultrametric):
        tree = UPGMA.build(*ultrametric)
        leaves = tree.leaves()
        for u in leaves:
            for v in leaves:
                if u != v:
                    assert tree.path_length(u, v) == pytest.approx(
                        2 * tree.height(tree.lca(u, v)), abs=1e-9
                    )

    def test_root_edges_balance_subtree_heights(self, ultrametric):
        # AB (height 1) and CD (height 2) at distance 8: delta 1, distance 7
        tree = UPGMA.build(*ultrametric)
        to_ab, to_cd = tree.adjacent_edges(tree.root)
        assert tree.opposite(tree.root, to_ab) == tree.lca(0, 1)
        assert tree.weight(to_ab) == pytest.approx(4.5)
        assert tree.weight(to_cd) == pytest.approx(3.5)

    def test_leaves_equidistant_from_root(self, ultrametric):
        tree = UPGMA.build(*ultrametric)
        dist = tree.distances_from(tree.root)
        for v in tree.leaves():
            assert dist[v] == pytest.approx(5.5)


class TestUPGMAEdgeCases:
    def test_single_taxon_is_root(self):
        tree = UPGMA.build(Taxa.from_labels(["x"]), Distances(1))
        assert tree.number_of_nodes == 1
        assert tree.root == 0

    def test_two_taxa(self):
        taxa = Taxa.from_labels(["x", "y"])
        distances = Distances(2)
        distances.set(1, 2, 6.0)
        tree = UPGMA.build(taxa, distances)
        assert tree.number_of_nodes == 3
        assert [tree.weight(e) for e in tree.edges()] == [3.0, 3.0]

    def test_taller_first_subtree_gets_shorter_root_edge(self):
        # AB merge first at height 1; C is then at (4 + 6) / 2 = 5 from AB
        taxa = Taxa.from_labels(["A", "B", "C"])
        distances = Distances.from_array([
            [0.0, 2.0, 4.0],
            [2.0, 0.0, 6.0],
            [4.0, 6.0, 0.0],
        ])
        tree = UPGMA.build(taxa, distances)
        to_ab, to_c = tree.adjacent_edges(tree.root)
        assert tree.weight(to_ab) == pytest.approx(2.0)
        assert tree.weight(to_c) == pytest.approx(3.0)
        assert tree.weight(to_ab) + tree.weight(to_c) == pytest.approx(5.0)
        assert tree.height(tree.root) == pytest.approx(3.0)

    def test_branch_lengths_non_negative(self, clustered_df):
        taxa, distances = Distances.from_frame(clustered_df)
        tree = UPGMA.build(taxa, distances)
        assert all(tree.weight(e) >= 0 for e in tree.edges())
        assert len(tree.leaves()) == taxa.size()
