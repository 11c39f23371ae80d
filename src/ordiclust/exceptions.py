"""Exceptions raised by the ordination and tree-building engines."""

from __future__ import annotations


class OrdiclustError(Exception):
    """Base exception for ordiclust errors."""

    pass


class CanceledError(OrdiclustError):
    """Raised when a long-running computation is canceled by its caller.

    No partial result is published when this is raised; the caller should
    discard the engine and start again from scratch.
    """

    pass


class DegenerateFitError(OrdiclustError, ValueError):
    """Raised when an ellipse cannot be fitted to a point cloud."""

    pass
