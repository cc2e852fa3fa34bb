"""Comparison plots of mechanistic and hybrid CSTR trajectories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import matplotlib.figure
import matplotlib.pyplot as plt
import plotly.graph_objects as go

from hybrid_cstr.exceptions import ValidationError
from hybrid_cstr.trajectory import Trajectory

logger = logging.getLogger(__name__)

TIME_LABEL = "Time (min)"
CONCENTRATION_LABEL = "Concentration (mM)"

# One colour per channel, shared by markers and lines
_COLORS = ("#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd")


def plot_comparison(
    reference: Trajectory,
    hybrid: Trajectory | None = None,
    title: str = "Mechanistic vs hybrid CSTR",
    backend: str = "matplotlib",
) -> Any:
    """Overlay a reference trajectory (markers) and a hybrid one (lines).

    Args:
        reference: Reference or mechanistic trajectory, drawn as markers.
        hybrid: Hybrid trajectory, drawn as solid lines.
        title: Plot title.
        backend: "matplotlib" or "plotly".

    Returns:
        Figure object (matplotlib.Figure or plotly.graph_objects.Figure)
    """
    if hybrid is not None and hybrid.labels != reference.labels:
        raise ValidationError(f"Channel mismatch: {reference.labels} vs {hybrid.labels}")

    ref_name = reference.name or "reference"
    hyb_name = (hybrid.name or "hybrid") if hybrid is not None else ""

    if backend == "plotly":
        fig = go.Figure()
        for i, label in enumerate(reference.labels):
            color = _COLORS[i % len(_COLORS)]
            fig.add_trace(go.Scatter(
                x=reference.t, y=reference.y[:, i], mode="markers",
                marker={"size": 6, "color": color},
                name=f"{label} ({ref_name})",
            ))
            if hybrid is not None:
                fig.add_trace(go.Scatter(
                    x=hybrid.t, y=hybrid.y[:, i], mode="lines",
                    line={"color": color, "width": 2},
                    name=f"{label} ({hyb_name})",
                ))
        fig.update_layout(title=title, xaxis_title=TIME_LABEL, yaxis_title=CONCENTRATION_LABEL)
        return fig

    if backend != "matplotlib":
        raise ValidationError(f"Unknown plot backend: {backend}. Use 'matplotlib' or 'plotly'.")

    fig, ax = plt.subplots(figsize=(10, 6))
    for i, label in enumerate(reference.labels):
        color = _COLORS[i % len(_COLORS)]
        ax.scatter(reference.t, reference.y[:, i], s=18, color=color, label=f"{label} ({ref_name})")
        if hybrid is not None:
            ax.plot(hybrid.t, hybrid.y[:, i], "-", color=color, linewidth=2,
                    label=f"{label} ({hyb_name})")
    ax.set_xlabel(TIME_LABEL)
    ax.set_ylabel(CONCENTRATION_LABEL)
    ax.set_title(title)
    ax.legend()
    plt.tight_layout()
    return fig


def save_figure(fig: Any, path: str | Path) -> Path:
    """Write a figure to disk.

    Matplotlib figures are saved in the format implied by the suffix
    (e.g. PNG); plotly figures are saved as standalone HTML.

    Args:
        fig: Figure returned by :func:`plot_comparison`.
        path: Output path. Parent directories are created.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(fig, go.Figure):
        fig.write_html(str(path))
    elif isinstance(fig, matplotlib.figure.Figure):
        fig.savefig(path, dpi=150)
        plt.close(fig)
    else:
        raise ValidationError(f"Unsupported figure type: {type(fig).__name__}")
    logger.info(f"Saved figure to {path}")
    return path


__all__ = ["CONCENTRATION_LABEL", "TIME_LABEL", "plot_comparison", "save_figure"]
