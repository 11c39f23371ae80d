"""Input validation with clear error messages for bioinformaticians."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


def _preview(items: list) -> str:
    return f"{items[:5]}" + (f" (and {len(items) - 5} more)" if len(items) > 5 else "")


def validate_square_matrix(values: Any) -> np.ndarray:
    """Validate that values form a finite, square, symmetric float matrix.

    Returns the matrix as a float64 array (a copy).
    """
    arr = np.array(values, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise ValueError(
            f"Distance matrix must be square, got shape {arr.shape}."
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("Distance matrix contains NaN or infinite values.")
    if not np.allclose(arr, arr.T, rtol=1e-9, atol=1e-12):
        rows, cols = np.where(~np.isclose(arr, arr.T, rtol=1e-9, atol=1e-12))
        pairs = [(int(i), int(j)) for i, j in zip(rows, cols) if i < j]
        raise ValueError(
            f"Distance matrix must be symmetric. Asymmetric entries (0-based): "
            + _preview(pairs)
        )
    return arr


def validate_distance_frame(data: Any) -> pd.DataFrame:
    """Validate a labelled distance DataFrame (index == columns, numeric).

    Returns the DataFrame with columns reordered to match the index.
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError(
            f"Expected a pandas DataFrame, got {type(data).__name__}. "
            "Wrap your data with pd.DataFrame(data, index=samples, columns=samples)."
        )
    if data.empty:
        raise ValueError("DataFrame is empty. Provide at least one sample.")
    if data.index.has_duplicates:
        dupes = data.index[data.index.duplicated()].unique().tolist()
        raise ValueError(f"Sample IDs must be unique. Found duplicates: {_preview(dupes)}")
    if data.columns.has_duplicates:
        dupes = data.columns[data.columns.duplicated()].unique().tolist()
        raise ValueError(f"Sample IDs must be unique. Found duplicates: {_preview(dupes)}")
    if set(data.index) != set(data.columns):
        missing = [c for c in data.index if c not in data.columns]
        extra = [c for c in data.columns if c not in data.index]
        raise ValueError(
            f"Row and column sample IDs must match. Missing columns: "
            f"{_preview(missing)}, unexpected columns: {_preview(extra)}"
        )
    numeric_df = data.select_dtypes(include=[np.number])
    if numeric_df.shape[1] != data.shape[1]:
        non_numeric = [c for c in data.columns if c not in numeric_df.columns]
        raise TypeError(f"All columns must be numeric. Non-numeric columns: {_preview(non_numeric)}")
    return data.loc[:, list(data.index)]


def validate_points(points: Any, min_points: int = 1) -> np.ndarray:
    """Validate a 2D point cloud of shape (n, 2)."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Points must have shape (n, 2), got {arr.shape}.")
    if arr.shape[0] < min_points:
        raise ValueError(
            f"At least {min_points} points are required, got {arr.shape[0]}."
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("Points contain NaN or infinite values.")
    return arr


def validate_counts(
    counts: Any,
    n_samples: int,
    sample_names: list[str] | None = None,
) -> tuple[list[str], np.ndarray]:
    """Validate a category -> per-sample counts table.

    Parameters
    ----------
    counts : mapping {name: sequence of length n_samples} or DataFrame
        with samples as rows and categories as columns.
    n_samples : expected number of samples
    sample_names : if given and counts is a DataFrame, rows are aligned
        to this order.

    Returns
    -------
    (names, matrix) where matrix has shape (n_samples, len(names)).
    """
    if counts is None:
        return [], np.zeros((n_samples, 0))
    if isinstance(counts, pd.DataFrame):
        df = counts
        if sample_names is not None:
            missing = [s for s in sample_names if s not in df.index]
            if missing:
                raise ValueError(f"Count table is missing samples: {_preview(missing)}")
            df = df.loc[sample_names]
        if df.shape[0] != n_samples:
            raise ValueError(
                f"Count table has {df.shape[0]} rows, expected {n_samples} samples."
            )
        names = [str(c) for c in df.columns]
        return names, np.asarray(df.values, dtype=np.float64)

    names = [str(name) for name in counts]
    matrix = np.zeros((n_samples, len(names)))
    for col, name in enumerate(counts):
        values = counts[name]
        if values is None:
            continue
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1 or len(values) > n_samples:
            raise ValueError(
                f"Counts for '{name}' must be a 1D sequence of at most "
                f"{n_samples} values, got shape {values.shape}."
            )
        matrix[: len(values), col] += values
    return names, matrix


def validate_count_frame(data: Any) -> pd.DataFrame:
    """Validate a sample x category table of non-negative counts.

    Rows are samples (unique labels), columns are categories. Returns the
    DataFrame cast to float64.
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError(
            f"Expected a pandas DataFrame, got {type(data).__name__}. "
            "Rows must be samples and columns categories."
        )
    if data.shape[0] == 0:
        raise ValueError("Count table is empty. Provide at least one sample.")
    if data.index.has_duplicates:
        dupes = data.index[data.index.duplicated()].unique().tolist()
        raise ValueError(f"Sample IDs must be unique. Found duplicates: {_preview(dupes)}")
    numeric_df = data.select_dtypes(include=[np.number])
    if numeric_df.shape[1] != data.shape[1]:
        non_numeric = [c for c in data.columns if c not in numeric_df.columns]
        raise TypeError(f"All columns must be numeric. Non-numeric columns: {_preview(non_numeric)}")
    values = data.to_numpy(dtype=np.float64)
    if not np.all(np.isfinite(values)):
        raise ValueError("Count table contains NaN or infinite values.")
    if np.any(values < 0):
        raise ValueError("Counts must be non-negative.")
    return data.astype(np.float64)
