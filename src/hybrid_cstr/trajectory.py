"""Simulated concentration time series and comparison metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt

from hybrid_cstr.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Ordered (time, state) samples of one simulation.

    Attributes:
        t: Time points (min), shape (n,).
        y: Concentrations, shape (n, 3).
        labels: Channel names.
        name: Model variant that produced the series.
    """

    t: npt.NDArray[np.float64]
    y: npt.NDArray[np.float64]
    labels: tuple[str, ...] = ("G", "L", "Es")
    name: str = ""

    def __post_init__(self) -> None:
        t = np.array(self.t, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)
        if t.ndim != 1:
            raise ValidationError(f"t must be 1-D, got shape {t.shape}")
        if y.ndim != 2 or y.shape[0] != t.shape[0]:
            raise ValidationError(f"y must have shape ({t.shape[0]}, n_states), got {y.shape}")
        if y.shape[1] != len(self.labels):
            raise ValidationError(f"{len(self.labels)} labels for {y.shape[1]} channels")
        t.flags.writeable = False
        y.flags.writeable = False
        object.__setattr__(self, "t", t)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return int(self.t.shape[0])

    @property
    def initial_state(self) -> npt.NDArray[np.float64]:
        return self.y[0]

    @property
    def final_state(self) -> npt.NDArray[np.float64]:
        return self.y[-1]

    def channel(self, label: str) -> npt.NDArray[np.float64]:
        """Time series of one channel, e.g. ``traj.channel("Es")``."""
        if label not in self.labels:
            raise KeyError(f"Unknown channel '{label}'. Available: {', '.join(self.labels)}")
        return self.y[:, self.labels.index(label)]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"t": self.t.tolist(), "name": self.name}
        for i, label in enumerate(self.labels):
            data[label] = self.y[:, i].tolist()
        return data


@dataclass(frozen=True)
class ComparisonReport:
    """Deviation of a candidate trajectory from a reference one."""

    max_abs_error: float
    rmse: float
    per_channel_max: dict[str, float] = field(default_factory=dict)
    per_channel_rmse: dict[str, float] = field(default_factory=dict)

    def within(self, tolerance: float) -> bool:
        """True if no sample deviates by more than ``tolerance``."""
        return self.max_abs_error <= tolerance

    def __str__(self) -> str:
        channels = ", ".join(f"{k}={v:.4g}" for k, v in self.per_channel_max.items())
        return f"max|err|={self.max_abs_error:.4g}, rmse={self.rmse:.4g} ({channels})"


def compare(reference: Trajectory, candidate: Trajectory) -> ComparisonReport:
    """Compare two trajectories sampled at the same time points.

    Args:
        reference: Reference (e.g. mechanistic) trajectory.
        candidate: Trajectory under test (e.g. hybrid).

    Returns:
        ComparisonReport with overall and per-channel errors.

    Raises:
        ValidationError: If the time samplings or channels differ.
    """
    if reference.labels != candidate.labels:
        raise ValidationError(f"Channel mismatch: {reference.labels} vs {candidate.labels}")
    if reference.t.shape != candidate.t.shape or not np.allclose(
        reference.t, candidate.t, rtol=0.0, atol=1e-9
    ):
        raise ValidationError(
            "Trajectories must share their time sampling; pass the same saveat to both runs"
        )

    diff = candidate.y - reference.y
    abs_diff = np.abs(diff)
    report = ComparisonReport(
        max_abs_error=float(abs_diff.max()),
        rmse=float(np.sqrt(np.mean(diff**2))),
        per_channel_max={
            label: float(abs_diff[:, i].max()) for i, label in enumerate(reference.labels)
        },
        per_channel_rmse={
            label: float(np.sqrt(np.mean(diff[:, i] ** 2)))
            for i, label in enumerate(reference.labels)
        },
    )
    logger.info(f"Compared '{candidate.name}' against '{reference.name}': {report}")
    return report


__all__ = ["ComparisonReport", "Trajectory", "compare"]
