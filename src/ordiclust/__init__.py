"""ordiclust: principal coordinate analysis, group ellipses and distance trees."""

from ._version import __version__
from .api import SampleComparison
from .config import AnalysisSettings
from .core.distances import Distances
from .core.indices import EcologicalIndices
from .core.progress import ProgressListener
from .core.taxa import Taxa
from .exceptions import CanceledError, DegenerateFitError, OrdiclustError
from .layout.tree_layout import RadialTreeLayout, RectangularTreeLayout, TreeEmbedding
from .ordination.ellipse import Ellipse, EllipseFitter
from .ordination.pcoa import PCoA, LoadingVector
from .tree.nj import NeighborJoining
from .tree.phylo import PhyloTree
from .tree.upgma import UPGMA


def compare(data, settings=None):
    """Build a SampleComparison and run PCoA on it.

    Parameters
    ----------
    data : pd.DataFrame
        Square, symmetric distance matrix labelled by sample on both axes.
    settings : AnalysisSettings, optional
        Thresholds and scalings; defaults are used when omitted.
    """
    comparison = SampleComparison(data, settings=settings)
    comparison.pcoa()
    return comparison


__all__ = [
    "__version__",
    "compare",
    "SampleComparison",
    "AnalysisSettings",
    "Taxa",
    "Distances",
    "EcologicalIndices",
    "ProgressListener",
    "PCoA",
    "LoadingVector",
    "Ellipse",
    "EllipseFitter",
    "PhyloTree",
    "NeighborJoining",
    "UPGMA",
    "RadialTreeLayout",
    "RectangularTreeLayout",
    "TreeEmbedding",
    "OrdiclustError",
    "CanceledError",
    "DegenerateFitError",
]
