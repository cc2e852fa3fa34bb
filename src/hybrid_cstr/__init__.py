"""hybrid-cstr: mechanistic CSTR model with a neural reaction-rate term."""

from __future__ import annotations

__version__ = "0.1.0"

from hybrid_cstr.config import (
    KineticsConfig,
    LoggingConfig,
    PlotConfig,
    ReactorConfig,
    SimulationConfig,
    SolverConfig,
    load_config,
    save_config,
)
from hybrid_cstr.exceptions import (
    ConfigurationError,
    HybridCSTRError,
    NotFoundError,
    ParseError,
    ShapeError,
    SolverDivergedError,
    ValidationError,
)
from hybrid_cstr.kinetics import DEFAULT_KINETICS, KineticParams, rate
from hybrid_cstr.logging import JSONFormatter, setup_logging
from hybrid_cstr.network import DEFAULT_TOPOLOGY, RateNetwork, Topology, build
from hybrid_cstr.pipeline import ComparisonResult, run_comparison
from hybrid_cstr.plotting import plot_comparison, save_figure
from hybrid_cstr.reactor import (
    AbstractRateLaw,
    CSTRModel,
    MechanisticRateLaw,
    NetworkRateLaw,
    hybrid_model,
    mechanistic_model,
)
from hybrid_cstr.reference import generate_reference
from hybrid_cstr.simulator import Simulator, uniform_saveat
from hybrid_cstr.trajectory import ComparisonReport, Trajectory, compare
from hybrid_cstr.weights import load_parameters, save_parameters

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "HybridCSTRError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ParseError",
    "ShapeError",
    "SolverDivergedError",
    # Weights and network
    "load_parameters",
    "save_parameters",
    "Topology",
    "DEFAULT_TOPOLOGY",
    "RateNetwork",
    "build",
    # Kinetics and reactor
    "KineticParams",
    "DEFAULT_KINETICS",
    "rate",
    "AbstractRateLaw",
    "MechanisticRateLaw",
    "NetworkRateLaw",
    "CSTRModel",
    "mechanistic_model",
    "hybrid_model",
    # Simulation
    "Simulator",
    "uniform_saveat",
    "generate_reference",
    "Trajectory",
    "ComparisonReport",
    "compare",
    "ComparisonResult",
    "run_comparison",
    # Plotting
    "plot_comparison",
    "save_figure",
    # Configuration
    "ReactorConfig",
    "KineticsConfig",
    "SolverConfig",
    "PlotConfig",
    "LoggingConfig",
    "SimulationConfig",
    "load_config",
    "save_config",
    # Logging
    "JSONFormatter",
    "setup_logging",
]
