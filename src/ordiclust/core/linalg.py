"""Dense linear-algebra helpers for PCoA and biplots.

All functions return new arrays and leave their inputs untouched.
"""

from __future__ import annotations

import numpy as np


def compute_double_centering_of_squared_matrix(matrix: np.ndarray) -> np.ndarray:
    """Gower double centering of the element-wise squared matrix.

    B[i, j] = -0.5 * (D[i, j]^2 - colmean_j - rowmean_i + grandmean),
    where the means are taken over squared entries.
    """
    d2 = np.asarray(matrix, dtype=np.float64) ** 2
    col_mean = d2.mean(axis=0, keepdims=True)
    row_mean = d2.mean(axis=1, keepdims=True)
    grand_mean = d2.mean()
    return -0.5 * (d2 - col_mean - row_mean + grand_mean)


def center_and_scale(matrix: np.ndarray) -> np.ndarray:
    """Center columns on their mean, then divide by sqrt(sumsq / (n - 1)).

    Same as R's ``scale()``. Columns with zero spread are only centered.
    Matrices with fewer than two rows or no columns are returned as a copy.
    """
    result = np.array(matrix, dtype=np.float64)
    if result.ndim != 2 or result.shape[0] < 2 or result.shape[1] == 0:
        return result
    result -= result.mean(axis=0)
    scale = np.sqrt((result ** 2).sum(axis=0) / (result.shape[0] - 1))
    nonzero = scale != 0
    result[:, nonzero] /= scale[nonzero]
    return result


def compute_covariance(x: np.ndarray, y: np.ndarray, bias_corrected: bool) -> np.ndarray:
    """Covariance between the columns of x and the columns of y.

    Returns a (cols_x, cols_y) matrix. Without bias correction this is the
    population covariance (divide by n); with it, values are multiplied by
    n / (n - 1).
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape[0] != y.shape[0]:
        raise ValueError(
            f"compute_covariance: row counts differ ({x.shape[0]} vs {y.shape[0]})."
        )
    n = x.shape[0]
    x_dev = x - x.mean(axis=0)
    y_dev = y - y.mean(axis=0)
    cov = x_dev.T @ y_dev / n
    if bias_corrected:
        if n < 2:
            raise ValueError("Bias-corrected covariance needs at least 2 rows.")
        cov = cov * (n / (n - 1))
    return cov


def multiply(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Matrix product x * y."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape[1] != y.shape[0]:
        raise ValueError(
            f"multiply(x, y): incompatible dimensions {x.shape} and {y.shape}."
        )
    return x @ y


def diag(values: np.ndarray) -> np.ndarray:
    """Square matrix with the given values on the diagonal."""
    return np.diag(np.asarray(values, dtype=np.float64))


def identity(size: int) -> np.ndarray:
    return np.eye(size)


def sort_values(values: np.ndarray) -> np.ndarray:
    """Indices ordering values by decreasing absolute value.

    Ties keep their original relative order.
    """
    values = np.asarray(values, dtype=np.float64)
    return np.argsort(-np.abs(values), kind="stable")


def scalar_multiply(value: float, vector: np.ndarray) -> np.ndarray:
    return np.asarray(vector, dtype=np.float64) * value


def sqrt_values(vector: np.ndarray) -> np.ndarray:
    return np.sqrt(np.asarray(vector, dtype=np.float64))


def invert_values(vector: np.ndarray) -> np.ndarray:
    """Element-wise 1/v. Zeros map to inf."""
    with np.errstate(divide="ignore"):
        return 1.0 / np.asarray(vector, dtype=np.float64)


def truncate_rows(matrix: np.ndarray, n_cols: int) -> np.ndarray:
    """Copy of the first n_cols columns of every row."""
    return np.array(np.asarray(matrix, dtype=np.float64)[:, :n_cols])


def get_squared_length(vector: np.ndarray) -> float:
    v = np.asarray(vector, dtype=np.float64)
    return float(np.dot(v, v))
