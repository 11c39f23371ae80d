"""AnalysisSettings: tunable constants shared by the engines."""

from __future__ import annotations

import param


class AnalysisSettings(param.Parameterized):
    """Numeric thresholds and display scalings used by the engines.

    Pass an instance to any engine; engines given no settings build a
    fresh default instance, so changing one never affects another.
    """

    # --- PCoA ---
    eigenvalue_threshold = param.Number(
        default=1e-9, bounds=(0, None),
        doc="Eigenvalues above this value count as positive.",
    )
    loading_scale = param.Number(
        default=1e-5, bounds=(0, None),
        doc="Scale applied to biplot/triplot loading vectors.",
    )

    # --- Ellipses ---
    ellipse_min_points = param.Integer(
        default=5, bounds=(5, None),
        doc="Minimum number of points for a direct least-squares ellipse fit.",
    )
    ellipse_padding = param.Number(
        default=0.0, bounds=(0, None),
        doc="If > 0, each group point is replaced by the four corners of a "
            "square of this half-width before fitting.",
    )

    # --- Trees ---
    clamp_negative_branches = param.Boolean(
        default=True,
        doc="Replace negative NJ/UPGMA branch lengths by zero.",
    )
    embedding_to_scale = param.Boolean(
        default=True,
        doc="Rectangular layout uses branch lengths (True) or uniform levels.",
    )


def resolve_settings(settings: AnalysisSettings | None) -> AnalysisSettings:
    return AnalysisSettings() if settings is None else settings
