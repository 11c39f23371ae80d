"""Tests for the linear-algebra helpers."""

import numpy as np
import pytest

from ordiclust.core import linalg


class TestDoubleCentering:
    def test_rows_and_columns_sum_to_zero(self):
        d = np.array([[0.0, 3.0, 4.0], [3.0, 0.0, 5.0], [4.0, 5.0, 0.0]])
        b = linalg.compute_double_centering_of_squared_matrix(d)
        np.testing.assert_allclose(b.sum(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(b.sum(axis=1), 0.0, atol=1e-12)

    def test_recovers_gram_matrix(self):
        points = np.array([[0.0, 0.0], [3.0, 0.0], [0.0, 4.0], [1.0, 1.0]])
        d = np.linalg.norm(points[:, None, :] - points[None, :, :], axis=2)
        centered = points - points.mean(axis=0)
        b = linalg.compute_double_centering_of_squared_matrix(d)
        np.testing.assert_allclose(b, centered @ centered.T, atol=1e-10)


class TestCenterAndScale:
    def test_unit_sample_variance(self):
        x = np.array([[1.0, 10.0], [2.0, 20.0], [3.0, 60.0]])
        scaled = linalg.center_and_scale(x)
        np.testing.assert_allclose(scaled.mean(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(scaled.std(axis=0, ddof=1), 1.0)

    def test_constant_column_is_centered_only(self):
        x = np.array([[5.0], [5.0], [5.0]])
        np.testing.assert_array_equal(linalg.center_and_scale(x), np.zeros((3, 1)))

    def test_single_row_unchanged(self):
        x = np.array([[1.0, 2.0]])
        np.testing.assert_array_equal(linalg.center_and_scale(x), x)


class TestCovariance:
    def test_self_covariance_diagonal_is_population_variance(self):
        rng = np.random.default_rng(0)
        x = rng.standard_normal((20, 3))
        cov = linalg.compute_covariance(x, x, bias_corrected=False)
        np.testing.assert_allclose(np.diag(cov), x.var(axis=0))

    def test_bias_corrected_matches_numpy(self):
        rng = np.random.default_rng(1)
        x = rng.standard_normal((10, 2))
        y = rng.standard_normal((10, 3))
        cov = linalg.compute_covariance(x, y, bias_corrected=True)
        expected = np.cov(np.hstack([x, y]), rowvar=False)[:2, 2:]
        np.testing.assert_allclose(cov, expected)

    def test_row_mismatch(self):
        with pytest.raises(ValueError, match="row counts differ"):
            linalg.compute_covariance(np.zeros((3, 1)), np.zeros((4, 1)), True)


class TestVectorOps:
    def test_multiply_identity(self):
        x = np.arange(6.0).reshape(2, 3)
        np.testing.assert_array_equal(linalg.multiply(x, linalg.identity(3)), x)

    def test_multiply_incompatible(self):
        with pytest.raises(ValueError, match="incompatible"):
            linalg.multiply(np.zeros((2, 3)), np.zeros((2, 3)))

    def test_sort_values_by_absolute_value_stable(self):
        order = linalg.sort_values(np.array([1.0, -3.0, 2.0, 3.0, 0.0]))
        assert order.tolist() == [1, 3, 2, 0, 4]

    def test_invert_zero_is_inf(self):
        result = linalg.invert_values(np.array([2.0, 0.0]))
        assert result[0] == 0.5
        assert np.isinf(result[1])

    def test_truncate_rows(self):
        x = np.arange(6.0).reshape(2, 3)
        np.testing.assert_array_equal(linalg.truncate_rows(x, 2), [[0.0, 1.0], [3.0, 4.0]])

    def test_squared_length(self):
        assert linalg.get_squared_length(np.array([3.0, 4.0])) == pytest.approx(25.0)

    def test_diag_and_scalar(self):
        np.testing.assert_array_equal(
            linalg.diag(linalg.scalar_multiply(2.0, linalg.sqrt_values([4.0, 9.0]))),
            [[4.0, 0.0], [0.0, 6.0]],
        )
