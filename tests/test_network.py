"""Tests for the rate network topology and builder."""

from __future__ import annotations

import numpy as np
import pytest
import torch

from hybrid_cstr.exceptions import ShapeError, ValidationError
from hybrid_cstr.network import DEFAULT_TOPOLOGY, RateNetwork, Topology, build

# 3*20+20 + 20*8+8 + 8*1+1
EXPECTED_COUNT = 257


class TestTopology:
    def test_default_parameter_count(self):
        assert DEFAULT_TOPOLOGY.num_parameters == EXPECTED_COUNT

    def test_matches_module_parameters(self):
        net = RateNetwork(DEFAULT_TOPOLOGY)
        assert sum(p.numel() for p in net.parameters()) == EXPECTED_COUNT

    def test_dims(self):
        assert DEFAULT_TOPOLOGY.input_dim == 3
        assert DEFAULT_TOPOLOGY.output_dim == 1

    def test_activation_count_mismatch(self):
        with pytest.raises(ValidationError):
            Topology(layer_sizes=(3, 4, 1), activations=("sigmoid",))

    def test_unknown_activation(self):
        with pytest.raises(ValidationError, match="Unknown activation"):
            Topology(layer_sizes=(3, 1), activations=("gelu",))


class TestBuild:
    def test_returns_float(self, random_parameters):
        f = build(random_parameters)
        assert isinstance(f(np.array([60.0, 60.0, 0.0])), float)

    def test_deterministic(self, random_parameters):
        f = build(random_parameters)
        state = np.array([12.5, 40.0, 3.25])
        assert f(state) == f(state)

    def test_rebuild_is_identical(self, random_parameters):
        state = np.array([12.5, 40.0, 3.25])
        assert build(random_parameters)(state) == build(random_parameters)(state)

    @pytest.mark.parametrize("delta", [-1, 1, -EXPECTED_COUNT])
    def test_shape_error_on_wrong_length(self, delta):
        with pytest.raises(ShapeError):
            build(np.zeros(EXPECTED_COUNT + delta, dtype=np.float32))

    def test_exact_length_accepted(self):
        build(np.zeros(EXPECTED_COUNT, dtype=np.float32))

    def test_zero_parameters_give_zero(self, zero_parameters):
        assert build(zero_parameters)(np.array([60.0, 60.0, 0.0])) == 0.0

    def test_output_bias_only(self, zero_parameters):
        params = zero_parameters.copy()
        params[-1] = 0.75
        assert build(params)(np.array([1.0, 2.0, 3.0])) == pytest.approx(0.75)

    def test_parameter_order_matches_pytorch(self, random_parameters):
        torch.manual_seed(1)
        reference = RateNetwork()
        vector = torch.nn.utils.parameters_to_vector(reference.parameters()).detach().numpy()
        state = np.array([5.0, 7.0, 1.0], dtype=np.float32)
        with torch.no_grad():
            expected = float(reference(torch.as_tensor(state))[0])
        assert build(vector)(state) == pytest.approx(expected, rel=1e-6)

    def test_builder_does_not_alias_input(self, random_parameters):
        state = np.array([1.0, 1.0, 1.0])
        params = random_parameters.copy()
        f = build(params)
        before = f(state)
        params[:] = 0.0
        assert f(state) == before

    def test_custom_topology(self):
        topo = Topology(layer_sizes=(3, 4, 1), activations=("tanh", "identity"))
        f = build(np.zeros(topo.num_parameters, dtype=np.float32), topo)
        assert f(np.zeros(3)) == 0.0

    def test_non_scalar_output_rejected(self):
        topo = Topology(layer_sizes=(3, 2), activations=("identity",))
        with pytest.raises(ShapeError, match="scalar"):
            build(np.zeros(topo.num_parameters, dtype=np.float32), topo)
