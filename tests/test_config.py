"""Tests for AnalysisSettings and ProgressListener."""

import pytest

import ordiclust as oc
from ordiclust.config import AnalysisSettings, resolve_settings
from ordiclust.core.progress import ProgressListener, resolve_progress
from ordiclust.exceptions import CanceledError, OrdiclustError


class TestAnalysisSettings:
    def test_defaults(self):
        settings = AnalysisSettings()
        assert settings.eigenvalue_threshold == 1e-9
        assert settings.loading_scale == 1e-5
        assert settings.ellipse_min_points == 5
        assert settings.ellipse_padding == 0.0
        assert settings.clamp_negative_branches is True
        assert settings.embedding_to_scale is True

    def test_bounds_enforced(self):
        with pytest.raises(ValueError):
            AnalysisSettings(ellipse_min_points=4)
        with pytest.raises(ValueError):
            AnalysisSettings(eigenvalue_threshold=-1.0)

    def test_resolve(self):
        custom = AnalysisSettings(loading_scale=1.0)
        assert resolve_settings(custom) is custom
        assert resolve_settings(None) is not resolve_settings(None)

    def test_changing_one_comparison_leaves_defaults_alone(self, triangle_df):
        first = oc.SampleComparison(triangle_df)
        first.settings.eigenvalue_threshold = 1e6
        assert first.pcoa().get_number_of_positive_eigenvalues() == 0
        second = oc.SampleComparison(triangle_df)
        assert second.settings.eigenvalue_threshold == 1e-9
        assert second.pcoa().get_number_of_positive_eigenvalues() == 2
        assert resolve_settings(None).eigenvalue_threshold == 1e-9


class TestProgressListener:
    def test_callback_receives_updates(self):
        seen = []
        progress = ProgressListener(on_progress=lambda *args: seen.append(args))
        progress.set_subtask("work")
        progress.set_maximum(2)
        progress.set_progress(0)
        progress.increment_progress()
        assert seen[-1] == ("work", 1, 2)
        assert progress.progress == 1

    def test_cancel(self):
        progress = ProgressListener()
        progress.check_for_cancel()
        progress.cancel()
        assert progress.is_canceled
        with pytest.raises(CanceledError):
            progress.increment_progress()

    def test_canceled_error_hierarchy(self):
        assert issubclass(CanceledError, OrdiclustError)

    def test_resolve(self):
        listener = ProgressListener()
        assert resolve_progress(listener) is listener
        assert isinstance(resolve_progress(None), ProgressListener)
