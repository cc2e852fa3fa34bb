"""Configuration management for hybrid-cstr."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hybrid_cstr.exceptions import ConfigurationError
from hybrid_cstr.kinetics import KineticParams

logger = logging.getLogger(__name__)

SCIPY_METHODS = ("RK45", "DOP853")
TORCHDIFFEQ_METHODS = ("dopri5", "dopri8")


class ReactorConfig(BaseModel):
    """Operating conditions of the CSTR, fixed for a run."""

    model_config = ConfigDict(frozen=True)

    volume: float = Field(default=10.0, gt=0, description="Reactor volume (L)")
    flow_rate: float = Field(default=0.05, ge=0, description="Volumetric flow rate (L/min)")
    inlet: tuple[float, float, float] = Field(
        default=(60.0, 60.0, 0.0),
        description="Inlet concentrations [G, L, Es] (mM)",
    )
    t_end: float = Field(default=480.0, gt=0, description="Simulation end time (min)")

    @field_validator("inlet")
    @classmethod
    def _non_negative_inlet(cls, value: tuple[float, float, float]) -> tuple[float, float, float]:
        if any(c < 0 for c in value):
            raise ValueError("inlet concentrations must be non-negative")
        return value

    @property
    def dilution_rate(self) -> float:
        """Q/V (1/min)."""
        return self.flow_rate / self.volume


class KineticsConfig(BaseModel):
    """Kinetic constants of the mechanistic rate law."""

    vmax: float = Field(default=0.6, description="Maximum rate (mM/min)")
    k_g: float = Field(default=25.0, gt=0, description="Michaelis constant of G (mM)")
    k_l: float = Field(default=15.0, gt=0, description="Michaelis constant of L (mM)")
    k_es: float = Field(default=40.0, gt=0, description="Product inhibition constant (mM)")

    def to_params(self) -> KineticParams:
        return KineticParams(vmax=self.vmax, k_g=self.k_g, k_l=self.k_l, k_es=self.k_es)


class SolverConfig(BaseModel):
    """Configuration for the explicit adaptive Runge-Kutta solver."""

    backend: Literal["scipy", "torchdiffeq"] = Field(default="scipy", description="Solver library")
    method: str = Field(default="RK45", description="Explicit RK method of the backend")
    rtol: float = Field(default=1e-6, gt=0, description="Relative tolerance")
    atol: float = Field(default=1e-8, gt=0, description="Absolute tolerance")
    max_steps: int = Field(default=100_000, gt=0, description="Step budget before giving up")
    num_points: int = Field(
        default=481, ge=2, description="Output points when the backend needs a fixed grid"
    )

    @model_validator(mode="after")
    def _method_matches_backend(self) -> SolverConfig:
        allowed = SCIPY_METHODS if self.backend == "scipy" else TORCHDIFFEQ_METHODS
        if self.method not in allowed:
            raise ValueError(
                f"method '{self.method}' is not available for backend '{self.backend}'. "
                f"Available: {', '.join(allowed)}"
            )
        return self


class PlotConfig(BaseModel):
    """Configuration for the comparison figure."""

    backend: Literal["matplotlib", "plotly"] = Field(default="matplotlib")
    output: str | None = Field(None, description="Figure output path")
    title: str = Field(default="Mechanistic vs hybrid CSTR")


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format ('text' or 'json')")
    log_file: str | None = Field(None, description="Log file path")
    module_levels: dict[str, str] = Field(
        default_factory=dict,
        description="Per-module log levels",
    )


class SimulationConfig(BaseModel):
    """Top-level configuration of a mechanistic-vs-hybrid comparison run."""

    reactor: ReactorConfig = Field(default_factory=ReactorConfig)
    kinetics: KineticsConfig = Field(default_factory=KineticsConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    plot: PlotConfig = Field(default_factory=PlotConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    initial_state: tuple[float, float, float] = Field(
        default=(60.0, 60.0, 0.0), description="Initial concentrations [G, L, Es] (mM)"
    )
    weights_path: str | None = Field(None, description="Trained network weight file")
    saveat_interval: float | None = Field(
        default=10.0, gt=0, description="Sampling interval of the compared trajectories (min)"
    )
    tolerance: float = Field(
        default=1.0, gt=0, description="Max abs deviation accepted between variants (mM)"
    )


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR:default} patterns with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(3)
        value = os.environ.get(var_name)
        if value is not None:
            return value
        if default is not None:
            return cast(str, default)
        return match.group(0)

    return re.sub(r"\$\{(\w+)(:([^}]*))?\}", _replace, text)


def load_config(path: str | Path) -> SimulationConfig:
    """Load configuration from YAML file with env var interpolation.

    Supports ``${VAR}`` and ``${VAR:default}`` syntax for environment
    variable substitution in string values.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        raw_text = path.read_text()
        interpolated = _interpolate_env_vars(raw_text)
        data = yaml.safe_load(interpolated) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root in {path} must be a mapping")

    try:
        config = SimulationConfig(**data)
    except Exception as exc:
        raise ConfigurationError(f"Invalid config structure: {exc}") from exc

    logger.info(f"Loaded config from {path}")
    return config


def save_config(config: SimulationConfig, path: str | Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration object.
        path: Output path.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        data = config.model_dump(mode="json")
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    except Exception as exc:
        raise ConfigurationError(f"Failed to save config to {path}: {exc}") from exc

    logger.info(f"Saved config to {path}")


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two configuration dictionaries.

    For nested dicts, recursively merges rather than replacing.
    For all other types, the override value wins.

    Args:
        base: Base configuration.
        override: Override values (takes precedence).

    Returns:
        New merged configuration dictionary.
    """
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


__all__ = [
    "KineticsConfig",
    "LoggingConfig",
    "PlotConfig",
    "ReactorConfig",
    "SimulationConfig",
    "SolverConfig",
    "load_config",
    "merge_configs",
    "save_config",
]
