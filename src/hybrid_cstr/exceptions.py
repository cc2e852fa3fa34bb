"""hybrid-cstr exception hierarchy.

All library-specific exceptions inherit from :class:`HybridCSTRError`,
enabling callers to catch the broad base class or narrow subtypes.
Every error is terminal for a simulation run.
"""

from __future__ import annotations


class HybridCSTRError(Exception):
    """Base exception for all hybrid-cstr errors."""


class ConfigurationError(HybridCSTRError):
    """Reactor, solver or run configuration errors (missing/invalid values)."""


class ValidationError(HybridCSTRError):
    """Invalid inputs, shapes, or parameter values."""


class NotFoundError(HybridCSTRError):
    """A required resource (e.g. the weight file) does not exist or cannot be read."""


class ParseError(ValidationError):
    """A weight file line is not a valid floating-point literal."""


class ShapeError(ValidationError):
    """Parameter count does not match the network topology."""


class SolverDivergedError(HybridCSTRError):
    """ODE solver failed to converge or exhausted its step budget."""


__all__ = [
    "HybridCSTRError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ParseError",
    "ShapeError",
    "SolverDivergedError",
]
