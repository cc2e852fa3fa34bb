"""Closed-form kinetics of the enzymatic esterification G + L -> Es.

Random bi-substrate Michaelis-Menten rate with non-competitive product
inhibition:

    r = vmax * G * L / ((K_G*K_L + K_L*G + K_G*L + G*L) * (1 + Es/K_Es))

where:
- G, L: substrate concentrations (mM)
- Es: ester (product) concentration (mM)
- vmax: maximum rate (mM/min)
- K_G, K_L: Michaelis constants of the two substrates (mM)
- K_Es: product inhibition constant (mM)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KineticParams:
    """Kinetic constants of the esterification rate law."""

    vmax: float = 0.6
    k_g: float = 25.0
    k_l: float = 15.0
    k_es: float = 40.0


DEFAULT_KINETICS = KineticParams()


def rate(G: float, L: float, Es: float, kinetic_params: KineticParams = DEFAULT_KINETICS) -> float:
    """Reaction rate of G + L -> Es.

    Pure and defined for any real input with a non-zero denominator.
    Outside the physical range (negative concentrations) the value is
    non-physical but no error is raised.

    Args:
        G: First substrate concentration.
        L: Second substrate concentration.
        Es: Product concentration.
        kinetic_params: Kinetic constants.

    Returns:
        Reaction rate (mM/min).
    """
    p = kinetic_params
    saturation = p.k_g * p.k_l + p.k_l * G + p.k_g * L + G * L
    inhibition = 1.0 + Es / p.k_es
    return float(p.vmax * G * L / (saturation * inhibition))


__all__ = ["DEFAULT_KINETICS", "KineticParams", "rate"]
