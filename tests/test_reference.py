"""Tests for mechanistic reference data generation."""

from __future__ import annotations

import numpy as np
import pytest

from hybrid_cstr.exceptions import ValidationError
from hybrid_cstr.reactor import mechanistic_model
from hybrid_cstr.reference import generate_reference
from hybrid_cstr.simulator import Simulator, uniform_saveat
from hybrid_cstr.trajectory import compare


class TestGenerateReference:
    def test_sampled_at_saveat(self, reactor_config, y0):
        saveat = uniform_saveat(reactor_config.t_end, 40.0)
        ref = generate_reference(reactor_config, y0, saveat)
        np.testing.assert_allclose(ref.t, saveat)
        np.testing.assert_allclose(ref.initial_state, y0)
        assert ref.name == "reference"

    def test_matches_simulator(self, reactor_config, y0):
        saveat = uniform_saveat(reactor_config.t_end, 40.0)
        ref = generate_reference(reactor_config, y0, saveat)
        sim = Simulator().run(mechanistic_model(reactor_config), y0, saveat=saveat)
        assert compare(ref, sim).max_abs_error < 1e-3

    def test_noise_is_seeded_and_non_negative(self, reactor_config, y0):
        saveat = uniform_saveat(reactor_config.t_end, 40.0)
        a = generate_reference(reactor_config, y0, saveat, noise_std=2.0, seed=7)
        b = generate_reference(reactor_config, y0, saveat, noise_std=2.0, seed=7)
        np.testing.assert_array_equal(a.y, b.y)
        assert np.all(a.y >= 0.0)

    def test_negative_noise_rejected(self, reactor_config, y0):
        with pytest.raises(ValidationError):
            generate_reference(reactor_config, y0, [0.0, 10.0], noise_std=-1.0)

    @pytest.mark.parametrize(
        "saveat",
        [[0.0, np.nan, 10.0], [-1.0, 10.0], [0.0, 500.0], [10.0, 5.0]],
    )
    def test_bad_saveat_rejected(self, reactor_config, y0, saveat):
        with pytest.raises(ValidationError):
            generate_reference(reactor_config, y0, saveat)
