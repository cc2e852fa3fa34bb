"""Tests for hybrid_cstr.plotting."""

from __future__ import annotations

import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")  # non-interactive backend for testing

import matplotlib.pyplot as plt
import plotly.graph_objects as go

from hybrid_cstr.exceptions import ValidationError
from hybrid_cstr.plotting import CONCENTRATION_LABEL, TIME_LABEL, plot_comparison, save_figure
from hybrid_cstr.trajectory import Trajectory


@pytest.fixture
def trajectories() -> tuple[Trajectory, Trajectory]:
    t = np.linspace(0.0, 480.0, 25)
    ref = Trajectory(t=t, y=np.column_stack([60 - t / 10, 60 - t / 10, t / 10]), name="mechanistic")
    hyb = Trajectory(t=t, y=np.column_stack([60 - t / 11, 60 - t / 11, t / 11]), name="hybrid")
    return ref, hyb


class TestMatplotlib:
    def test_markers_and_lines(self, trajectories):
        ref, hyb = trajectories
        fig = plot_comparison(ref, hyb)
        assert isinstance(fig, plt.Figure)
        ax = fig.axes[0]
        assert len(ax.collections) == 3  # one scatter per channel
        assert len(ax.lines) == 3
        assert ax.get_xlabel() == TIME_LABEL
        assert ax.get_ylabel() == CONCENTRATION_LABEL
        plt.close(fig)

    def test_shared_colour_per_channel(self, trajectories):
        ref, hyb = trajectories
        fig = plot_comparison(ref, hyb)
        ax = fig.axes[0]
        for scatter, line in zip(ax.collections, ax.lines):
            np.testing.assert_allclose(
                scatter.get_facecolor()[0][:3],
                matplotlib.colors.to_rgb(line.get_color()),
            )
        plt.close(fig)

    def test_reference_only(self, trajectories):
        ref, _ = trajectories
        fig = plot_comparison(ref)
        assert len(fig.axes[0].lines) == 0
        plt.close(fig)

    def test_save_png(self, trajectories, tmp_path):
        fig = plot_comparison(*trajectories)
        path = save_figure(fig, tmp_path / "out" / "cmp.png")
        assert path.exists()
        assert path.stat().st_size > 0


class TestPlotly:
    def test_traces(self, trajectories):
        fig = plot_comparison(*trajectories, backend="plotly")
        assert isinstance(fig, go.Figure)
        modes = [trace.mode for trace in fig.data]
        assert modes.count("markers") == 3
        assert modes.count("lines") == 3
        assert fig.layout.xaxis.title.text == TIME_LABEL

    def test_save_html(self, trajectories, tmp_path):
        fig = plot_comparison(*trajectories, backend="plotly")
        path = save_figure(fig, tmp_path / "cmp.html")
        assert "<html" in path.read_text().lower()


class TestErrors:
    def test_unknown_backend(self, trajectories):
        with pytest.raises(ValidationError, match="Unknown plot backend"):
            plot_comparison(*trajectories, backend="bokeh")

    def test_unsupported_figure(self, tmp_path):
        with pytest.raises(ValidationError):
            save_figure(object(), tmp_path / "x.png")
