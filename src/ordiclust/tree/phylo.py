"""PhyloTree: node/edge arena for NJ and UPGMA output.

Nodes and edges are integer handles into flat lists. Leaves carry taxon
labels; edges carry non-negative branch lengths. Only rooted trees (UPGMA)
have a root; NJ trees are unrooted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class TreeEdge:
    """An undirected edge, stored in the orientation it was created with."""

    source: int
    target: int
    weight: float

    def to_dict(self) -> dict:
        return {"source": self.source, "target": self.target, "weight": self.weight}


class PhyloTree:
    """Graph of labelled nodes joined by weighted edges.

    Built once by a tree builder; afterwards treated as read-only.
    """

    __slots__ = ("_labels", "_edges", "_adjacency", "_root", "number_of_clamped_edges")

    def __init__(self) -> None:
        self._labels: list[str | None] = []
        self._edges: list[TreeEdge] = []
        self._adjacency: list[list[int]] = []
        self._root: int | None = None
        # Edges whose negative length was replaced by zero during construction
        self.number_of_clamped_edges = 0

    # --- Construction ---

    def new_node(self, label: str | None = None) -> int:
        self._labels.append(label)
        self._adjacency.append([])
        return len(self._labels) - 1

    def new_edge(self, source: int, target: int, weight: float = 0.0) -> int:
        self._check_node(source)
        self._check_node(target)
        self._edges.append(TreeEdge(source, target, float(weight)))
        e = len(self._edges) - 1
        self._adjacency[source].append(e)
        self._adjacency[target].append(e)
        return e

    def set_root(self, v: int | None) -> None:
        if v is not None:
            self._check_node(v)
        self._root = v

    def set_label(self, v: int, label: str | None) -> None:
        self._check_node(v)
        self._labels[v] = label

    def _check_node(self, v: int) -> None:
        if not 0 <= v < len(self._labels):
            raise IndexError(f"No node {v} in tree with {len(self._labels)} nodes.")

    # --- Queries ---

    @property
    def root(self) -> int | None:
        return self._root

    @property
    def number_of_nodes(self) -> int:
        return len(self._labels)

    @property
    def number_of_edges(self) -> int:
        return len(self._edges)

    def nodes(self) -> range:
        return range(len(self._labels))

    def edges(self) -> range:
        return range(len(self._edges))

    def edge(self, e: int) -> TreeEdge:
        return self._edges[e]

    def label(self, v: int) -> str | None:
        return self._labels[v]

    def weight(self, e: int) -> float:
        return self._edges[e].weight

    def adjacent_edges(self, v: int) -> list[int]:
        """Edges incident to v, in creation order."""
        return list(self._adjacency[v])

    def degree(self, v: int) -> int:
        return len(self._adjacency[v])

    def opposite(self, v: int, e: int) -> int:
        edge = self._edges[e]
        if edge.source == v:
            return edge.target
        if edge.target == v:
            return edge.source
        raise ValueError(f"Node {v} is not incident to edge {e}.")

    def leaves(self) -> list[int]:
        """Nodes of degree <= 1, excluding a root of degree 1."""
        return [
            v for v in self.nodes()
            if self.degree(v) <= 1 and not (v == self._root and self.degree(v) == 1)
        ]

    def find_leaf(self, label: str) -> int:
        for v in self.leaves():
            if self._labels[v] == label:
                return v
        raise KeyError(f"No leaf labelled '{label}'.")

    # --- Traversal ---

    def walk(self, start: int, entry: int | None = None) -> Iterator[tuple[str, int, int | None]]:
        """Depth-first traversal from start, in adjacency order.

        Yields ("enter", v, entry_edge) before the subtree of v and
        ("exit", v, entry_edge) after it. The walk never crosses ``entry``,
        so passing a node's parent edge restricts it to that subtree.
        """
        self._check_node(start)
        yield "enter", start, entry
        stack: list[tuple[int, int | None, Iterator[int]]] = [
            (start, entry, iter(self._adjacency[start]))
        ]
        while stack:
            v, entry, remaining = stack[-1]
            for e in remaining:
                if e != entry:
                    w = self.opposite(v, e)
                    yield "enter", w, e
                    stack.append((w, e, iter(self._adjacency[w])))
                    break
            else:
                stack.pop()
                yield "exit", v, entry

    def distances_from(self, v: int) -> dict[int, float]:
        """Path length from v to every node."""
        dist = {v: 0.0}
        for event, w, e in self.walk(v):
            if event == "enter" and e is not None:
                dist[w] = dist[self.opposite(w, e)] + self.weight(e)
        return dist

    def path_length(self, u: int, v: int) -> float:
        """Sum of edge weights on the unique path between u and v."""
        return self.distances_from(u)[v]

    def leaf_distance_matrix(self) -> tuple[list[str | None], np.ndarray]:
        """Labels of the leaves and their pairwise path lengths."""
        leaves = self.leaves()
        matrix = np.zeros((len(leaves), len(leaves)))
        for i, u in enumerate(leaves):
            dist = self.distances_from(u)
            for j, v in enumerate(leaves):
                matrix[i, j] = dist[v]
        return [self._labels[v] for v in leaves], matrix

    # --- Rooted queries ---

    def _require_root(self) -> int:
        if self._root is None:
            raise ValueError("Tree is unrooted.")
        return self._root

    def parent_edges(self) -> dict[int, int | None]:
        """Map node -> edge to its parent (None for the root)."""
        root = self._require_root()
        return {v: e for event, v, e in self.walk(root) if event == "enter"}

    def children(self, v: int) -> list[int]:
        parent_edge = self.parent_edges()[v]
        return [self.opposite(v, e) for e in self._adjacency[v] if e != parent_edge]

    def height(self, v: int) -> float:
        """Largest path length from v down to a leaf of its subtree."""
        parent_edge = self.parent_edges()[v]
        dist = {v: 0.0}
        best = 0.0
        for event, w, e in self.walk(v, parent_edge):
            if event == "enter" and w != v:
                dist[w] = dist[self.opposite(w, e)] + self.weight(e)
                if self.degree(w) == 1:
                    best = max(best, dist[w])
        return best

    def lca(self, u: int, v: int) -> int:
        """Lowest common ancestor of u and v."""
        parents = self.parent_edges()
        ancestors = []
        w: int | None = u
        while w is not None:
            ancestors.append(w)
            e = parents[w]
            w = None if e is None else self.opposite(w, e)
        seen = set(ancestors)
        w = v
        while w not in seen:
            e = parents[w]
            if e is None:
                raise ValueError(f"Nodes {u} and {v} are not connected.")
            w = self.opposite(w, e)
        return w

    def to_dict(self) -> dict:
        return {
            "nodes": [{"id": v, "label": label} for v, label in enumerate(self._labels)],
            "edges": [edge.to_dict() for edge in self._edges],
            "root": self._root,
        }

    def __repr__(self) -> str:
        return (
            f"PhyloTree(nodes={self.number_of_nodes}, edges={self.number_of_edges}, "
            f"rooted={self._root is not None})"
        )
