"""Isothermal CSTR mass balance with a swappable reaction-rate strategy.

State: [G, L, Es] (mM). For each channel i:

    dC_i/dt = (Q/V) * (Cin_i - C_i) + nu_i * R

with nu = (-1, -1, +1): the rate is consumed by both substrates and
produces the ester. R comes from either the closed-form kinetics or the
trained rate network.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import numpy as np
import numpy.typing as npt

from hybrid_cstr import kinetics
from hybrid_cstr.config import ReactorConfig
from hybrid_cstr.exceptions import ValidationError
from hybrid_cstr.kinetics import DEFAULT_KINETICS, KineticParams
from hybrid_cstr.network import DEFAULT_TOPOLOGY, RateFunction, Topology, build
from hybrid_cstr.weights import ParameterVector, as_parameter_vector

logger = logging.getLogger(__name__)

STATE_LABELS = ("G", "L", "Es")
STOICHIOMETRY = np.array([-1.0, -1.0, 1.0])


class AbstractRateLaw(ABC):
    """Strategy computing the scalar reaction rate from a state."""

    name: str = "abstract"

    @abstractmethod
    def __call__(
        self,
        state: npt.NDArray[Any],
        parameters: ParameterVector | None = None,
    ) -> float:
        """Compute the reaction rate.

        Args:
            state: Concentrations [G, L, Es], shape (3,).
            parameters: Optional network parameters.

        Returns:
            Reaction rate (mM/min).
        """
        raise NotImplementedError("Subclasses must implement __call__()")


class MechanisticRateLaw(AbstractRateLaw):
    """Closed-form esterification kinetics. Ignores network parameters."""

    name = "mechanistic"

    def __init__(self, kinetic_params: KineticParams = DEFAULT_KINETICS):
        self.kinetic_params = kinetic_params

    def __call__(
        self,
        state: npt.NDArray[Any],
        parameters: ParameterVector | None = None,
    ) -> float:
        G, L, Es = state
        return kinetics.rate(G, L, Es, self.kinetic_params)

    def __repr__(self) -> str:
        return f"MechanisticRateLaw({self.kinetic_params})"


class NetworkRateLaw(AbstractRateLaw):
    """Rate supplied by the trained network.

    The network is built once for the bound parameters. Passing a
    different ParameterVector at call time builds a network for that
    vector; only the most recent such override is kept.
    """

    name = "hybrid"

    def __init__(self, parameters: Any, topology: Topology = DEFAULT_TOPOLOGY):
        self.parameters = as_parameter_vector(parameters)
        self.topology = topology
        self._rate = build(self.parameters, topology)
        self._key = self.parameters.tobytes()
        self._override: tuple[bytes, RateFunction] | None = None

    def __call__(
        self,
        state: npt.NDArray[Any],
        parameters: ParameterVector | None = None,
    ) -> float:
        if parameters is None or parameters is self.parameters:
            return self._rate(state)
        vector = as_parameter_vector(parameters)
        key = vector.tobytes()
        if key == self._key:
            return self._rate(state)
        if self._override is None or self._override[0] != key:
            self._override = (key, build(vector, self.topology))
        return self._override[1](state)

    def __repr__(self) -> str:
        return f"NetworkRateLaw(layers={self.topology.layer_sizes})"


class CSTRModel:
    """CSTR mass balance bound to a reactor configuration and a rate law.

    Attributes:
        config: Operating conditions, shared read-only by all evaluations.
        rate_law: Reaction-rate strategy.
    """

    def __init__(self, config: ReactorConfig, rate_law: AbstractRateLaw):
        self.config = config
        self.rate_law = rate_law
        self._inlet = np.asarray(config.inlet, dtype=np.float64)
        self._inlet.flags.writeable = False
        logger.debug(
            f"Initialized CSTRModel: rate_law={rate_law.name}, "
            f"V={config.volume}, Q={config.flow_rate}"
        )

    @property
    def name(self) -> str:
        return self.rate_law.name

    def rhs(
        self,
        state: npt.NDArray[Any],
        parameters: ParameterVector | None = None,
        t: float = 0.0,
    ) -> npt.NDArray[np.float64]:
        """Time derivative of the concentrations.

        Args:
            state: Concentrations [G, L, Es], shape (3,).
            parameters: Network parameters; unused by the mechanistic law.
            t: Time (min). The system is autonomous.

        Returns:
            dC/dt, shape (3,).
        """
        C = np.asarray(state, dtype=np.float64)
        if C.shape != (3,):
            raise ValidationError(f"State must have shape (3,), got {C.shape}")
        R = self.rate_law(C, parameters)
        return self.config.dilution_rate * (self._inlet - C) + STOICHIOMETRY * R

    def ode_func(
        self, parameters: ParameterVector | None = None
    ) -> Callable[[float, npt.NDArray[Any]], npt.NDArray[np.float64]]:
        """Adapt ``rhs`` to the ``f(t, y)`` signature used by scipy."""

        def f(t: float, y: npt.NDArray[Any]) -> npt.NDArray[np.float64]:
            return self.rhs(y, parameters, t)

        return f

    def __repr__(self) -> str:
        return f"CSTRModel(rate_law={self.rate_law!r}, config={self.config!r})"


def mechanistic_model(
    config: ReactorConfig,
    kinetic_params: KineticParams = DEFAULT_KINETICS,
) -> CSTRModel:
    """CSTR with the closed-form rate law."""
    return CSTRModel(config, MechanisticRateLaw(kinetic_params))


def hybrid_model(
    config: ReactorConfig,
    parameters: Any,
    topology: Topology = DEFAULT_TOPOLOGY,
) -> CSTRModel:
    """CSTR whose rate term is supplied by the trained network."""
    return CSTRModel(config, NetworkRateLaw(parameters, topology))


__all__ = [
    "AbstractRateLaw",
    "CSTRModel",
    "MechanisticRateLaw",
    "NetworkRateLaw",
    "STATE_LABELS",
    "STOICHIOMETRY",
    "hybrid_model",
    "mechanistic_model",
]
