"""Feed-forward rate network rebuilt from a flat parameter vector."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt
import torch
from torch import nn

from hybrid_cstr.exceptions import ShapeError, ValidationError
from hybrid_cstr.weights import ParameterVector, as_parameter_vector

logger = logging.getLogger(__name__)

RateFunction = Callable[[npt.NDArray[Any]], float]

_ACTIVATIONS: dict[str, type[nn.Module]] = {
    "sigmoid": nn.Sigmoid,
    "tanh": nn.Tanh,
    "softplus": nn.Softplus,
    "identity": nn.Identity,
}


@dataclass(frozen=True)
class Topology:
    """Layer sizes and per-layer activations of a dense network.

    Attributes:
        layer_sizes: Widths from input to output, e.g. (3, 20, 8, 1).
        activations: One activation name per linear layer.
    """

    layer_sizes: tuple[int, ...] = (3, 20, 8, 1)
    activations: tuple[str, ...] = ("sigmoid", "sigmoid", "identity")

    def __post_init__(self) -> None:
        if len(self.layer_sizes) < 2:
            raise ValidationError("Topology needs at least an input and an output layer")
        if len(self.activations) != len(self.layer_sizes) - 1:
            raise ValidationError(
                f"Expected {len(self.layer_sizes) - 1} activations, got {len(self.activations)}"
            )
        for name in self.activations:
            if name not in _ACTIVATIONS:
                raise ValidationError(f"Unknown activation: {name}")

    @property
    def input_dim(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_dim(self) -> int:
        return self.layer_sizes[-1]

    @property
    def num_parameters(self) -> int:
        """Total weight-plus-bias count."""
        return sum(
            n_in * n_out + n_out
            for n_in, n_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:])
        )


DEFAULT_TOPOLOGY = Topology()


class RateNetwork(nn.Module):
    """Dense network mapping a concentration state to a reaction rate.

    Parameters are laid out in PyTorch order: for each layer the weight
    matrix of shape (out, in) in row-major order, followed by its bias.
    """

    def __init__(self, topology: Topology = DEFAULT_TOPOLOGY):
        super().__init__()
        self.topology = topology

        layers: list[nn.Module] = []
        sizes = topology.layer_sizes
        for n_in, n_out, activation in zip(sizes[:-1], sizes[1:], topology.activations):
            layers.append(nn.Linear(n_in, n_out))
            if activation != "identity":
                layers.append(_ACTIVATIONS[activation]())
        self.net = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Evaluate the network.

        Args:
            x: Input, shape (batch, input_dim) or (input_dim,).

        Returns:
            Output, shape (batch, output_dim) or (output_dim,).
        """
        return self.net(x)


def build(
    parameters: ParameterVector | Any,
    topology: Topology = DEFAULT_TOPOLOGY,
) -> RateFunction:
    """Bind a flat parameter vector to the topology and return a rate function.

    The returned callable holds its own frozen copy of the network and
    never mutates it, so it is safe to call at rejected or retried solver
    steps.

    Args:
        parameters: Flat parameter vector, length ``topology.num_parameters``.
        topology: Network topology. Defaults to 3->20->8->1.

    Returns:
        Function mapping a state of shape (input_dim,) to a float rate.

    Raises:
        ShapeError: If the parameter count does not match the topology.
    """
    vector = as_parameter_vector(parameters)
    expected = topology.num_parameters
    if vector.shape[0] != expected:
        raise ShapeError(
            f"Topology {topology.layer_sizes} needs {expected} parameters, got {vector.shape[0]}"
        )
    if topology.output_dim != 1:
        raise ShapeError(f"Rate network must have a scalar output, got {topology.output_dim}")

    network = RateNetwork(topology)
    nn.utils.vector_to_parameters(torch.from_numpy(vector.copy()), network.parameters())
    network.requires_grad_(False)
    network.eval()

    def rate(state: npt.NDArray[Any]) -> float:
        x = torch.as_tensor(np.asarray(state, dtype=np.float32))
        with torch.no_grad():
            return float(network(x)[0])

    logger.debug(f"Built rate network: layers={topology.layer_sizes}, params={expected}")
    return rate


__all__ = ["DEFAULT_TOPOLOGY", "RateFunction", "RateNetwork", "Topology", "build"]
