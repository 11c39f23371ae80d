"""Tree layouts: convert a PhyloTree into 2D node coordinates.

Two styles are provided: a radial layout for unrooted NJ trees and a
rectangular cladogram for rooted UPGMA trees. Both are for display only.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from ..tree.phylo import PhyloTree
from .geometry import Point, Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeEmbedding:
    """Node locations plus optional bend points on edges.

    For rectangular layouts each edge has one elbow: the corner at the
    parent's x and the child's y.
    """

    locations: dict[int, Point]
    edge_points: dict[int, tuple[Point, ...]] = field(default_factory=dict)

    def location(self, v: int) -> Point:
        return self.locations[v]

    def elbows(self, e: int) -> tuple[Point, ...]:
        return self.edge_points.get(e, ())

    def bounding_box(self) -> Rect:
        return Rect.bounding(self.locations.values())

    def to_dict(self) -> dict:
        return {
            "locations": {str(v): p.to_dict() for v, p in self.locations.items()},
            "elbows": {
                str(e): [p.to_dict() for p in pts] for e, pts in self.edge_points.items()
            },
            "bbox": self.bounding_box().to_dict(),
        }


class RadialTreeLayout:
    """Equal-angle style layout for unrooted trees.

    The node of highest degree is placed at the origin. Leaves are numbered
    in traversal order; every edge points towards the middle of the range
    of leaves below it, spread over a half circle (0..pi), and each node is
    translated from its parent by the edge weight along that angle.
    """

    @staticmethod
    def compute(tree: PhyloTree) -> TreeEmbedding:
        if tree.number_of_nodes == 0:
            return TreeEmbedding(locations={})

        root = 0
        for v in tree.nodes():
            if tree.degree(v) > tree.degree(root):
                root = v
        leaves = {v for v in tree.nodes() if tree.degree(v) == 1}
        n_leaves = max(len(leaves), 1)

        angles: dict[int, float] = {}
        if root not in leaves:
            seen = 0
            start: dict[int, int] = {}
            for event, v, e in tree.walk(root):
                if event == "enter":
                    if e is not None:
                        start[e] = seen
                    if v in leaves:
                        seen += 1
                elif e is not None:
                    angles[e] = math.pi * (start[e] + 1 + seen) / n_leaves
            if seen != len(leaves):
                logger.warning(
                    "Number of leaves seen: %d != number of leaves: %d",
                    seen, len(leaves),
                )

        locations = {root: Point(0.0, 0.0)}
        for event, v, e in tree.walk(root):
            if event == "enter" and e is not None:
                parent = tree.opposite(v, e)
                locations[v] = locations[parent].translate_by_angle(
                    angles.get(e, 0.0), tree.weight(e)
                )
        return TreeEmbedding(locations=locations)


class RectangularTreeLayout:
    """Rectangular cladogram layout for rooted trees.

    Leaves get y = 1, 2, ... in traversal order. An internal node sits
    halfway between its first and last child. With ``to_scale`` the x
    coordinate is the distance from the root; otherwise it is one less
    than the smallest x among its children and leaves are at x = 0.
    """

    @staticmethod
    def compute(tree: PhyloTree, to_scale: bool = True) -> TreeEmbedding:
        if tree.number_of_nodes == 0:
            return TreeEmbedding(locations={})
        root = tree.root if tree.root is not None else 0

        locations: dict[int, Point] = {}
        elbows: dict[int, tuple[Point, ...]] = {}
        dist_to_root = {root: 0.0}
        child_edges: dict[int, list[int]] = {}
        leaf_number = 0

        for event, v, e in tree.walk(root):
            if event == "enter":
                child_edges[v] = []
                if e is not None:
                    parent = tree.opposite(v, e)
                    dist_to_root[v] = dist_to_root[parent] + tree.weight(e)
                    child_edges[parent].append(e)
                continue
            # exit
            if tree.degree(v) == 1 and e is not None:
                leaf_number += 1
                locations[v] = Point(dist_to_root[v] if to_scale else 0.0, float(leaf_number))
                continue
            edges = child_edges[v]
            if not edges:
                # isolated root
                leaf_number += 1
                locations[v] = Point(0.0, float(leaf_number))
                continue
            children = [tree.opposite(v, f) for f in edges]
            first = locations[children[0]]
            last = locations[children[-1]]
            if to_scale:
                x = dist_to_root[v]
            else:
                x = min(locations[w].x for w in children) - 1
            locations[v] = Point(x, 0.5 * (first.y + last.y))
            for f, w in zip(edges, children):
                elbows[f] = (Point(x, locations[w].y),)

        return TreeEmbedding(locations=locations, edge_points=elbows)
