"""Tests for Trajectory and trajectory comparison."""

from __future__ import annotations

import numpy as np
import pytest

from hybrid_cstr.exceptions import ValidationError
from hybrid_cstr.trajectory import Trajectory, compare


def _traj(offset: float = 0.0, n: int = 5, name: str = "") -> Trajectory:
    t = np.linspace(0.0, 40.0, n)
    y = np.column_stack([60.0 - t, 60.0 - t, t]) + offset
    return Trajectory(t=t, y=y, name=name)


class TestTrajectory:
    def test_basic_properties(self):
        traj = _traj()
        assert len(traj) == 5
        np.testing.assert_array_equal(traj.initial_state, [60.0, 60.0, 0.0])
        np.testing.assert_array_equal(traj.final_state, [20.0, 20.0, 40.0])

    def test_arrays_read_only(self):
        traj = _traj()
        with pytest.raises(ValueError):
            traj.y[0, 0] = 1.0
        with pytest.raises(ValueError):
            traj.t[0] = 1.0

    def test_does_not_alias_inputs(self):
        t = np.array([0.0, 1.0])
        y = np.zeros((2, 3))
        traj = Trajectory(t=t, y=y)
        y[0, 0] = 5.0
        assert traj.y[0, 0] == 0.0

    def test_channel(self):
        np.testing.assert_array_equal(_traj().channel("Es"), np.linspace(0.0, 40.0, 5))

    def test_unknown_channel(self):
        with pytest.raises(KeyError, match="Available"):
            _traj().channel("X")

    def test_shape_mismatch(self):
        with pytest.raises(ValidationError):
            Trajectory(t=np.zeros(3), y=np.zeros((4, 3)))

    def test_label_count_mismatch(self):
        with pytest.raises(ValidationError):
            Trajectory(t=np.zeros(2), y=np.zeros((2, 2)))

    def test_to_dict(self):
        data = _traj(n=2, name="hybrid").to_dict()
        assert data["name"] == "hybrid"
        assert data["t"] == [0.0, 40.0]
        assert data["Es"] == [0.0, 40.0]


class TestCompare:
    def test_identical(self):
        report = compare(_traj(), _traj())
        assert report.max_abs_error == 0.0
        assert report.rmse == 0.0
        assert report.within(0.0)

    def test_constant_offset(self):
        report = compare(_traj(), _traj(offset=0.5))
        assert report.max_abs_error == pytest.approx(0.5)
        assert report.rmse == pytest.approx(0.5)
        assert report.per_channel_max == pytest.approx({"G": 0.5, "L": 0.5, "Es": 0.5})
        assert not report.within(0.1)

    def test_sampling_mismatch(self):
        with pytest.raises(ValidationError, match="time sampling"):
            compare(_traj(n=5), _traj(n=6))

    def test_str(self):
        assert "max|err|" in str(compare(_traj(), _traj(offset=1.0)))
