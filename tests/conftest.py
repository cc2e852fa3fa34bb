"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from hybrid_cstr.config import ReactorConfig
from hybrid_cstr.network import DEFAULT_TOPOLOGY


@pytest.fixture
def reactor_config() -> ReactorConfig:
    """The reference operating point: V=10 L, Q=0.05 L/min, 8 h run."""
    return ReactorConfig(volume=10.0, flow_rate=0.05, inlet=(60.0, 60.0, 0.0), t_end=480.0)


@pytest.fixture
def y0() -> np.ndarray:
    return np.array([60.0, 60.0, 0.0])


@pytest.fixture
def random_parameters() -> np.ndarray:
    """Small random parameters of the right length for the default topology."""
    rng = np.random.default_rng(0)
    return (0.1 * rng.standard_normal(DEFAULT_TOPOLOGY.num_parameters)).astype(np.float32)


@pytest.fixture
def zero_parameters() -> np.ndarray:
    """Parameters of a network whose output is identically zero."""
    return np.zeros(DEFAULT_TOPOLOGY.num_parameters, dtype=np.float32)


@pytest.fixture
def weight_file(tmp_path, random_parameters):
    """Weight file holding ``random_parameters``, one float per line."""
    path = tmp_path / "weights.txt"
    path.write_text("".join(f"{float(v)!r}\n" for v in random_parameters))
    return path


@pytest.fixture(autouse=True)
def _detach_package_handlers():
    """Drop handlers installed by setup_logging so they don't outlive capsys."""
    yield
    pkg_logger = logging.getLogger("hybrid_cstr")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.setLevel(logging.NOTSET)
