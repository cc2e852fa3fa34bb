"""Integrate CSTR models with an explicit adaptive Runge-Kutta solver.

Two backends are supported:
- ``scipy``: ``RK45`` (Dormand-Prince 5(4)) or ``DOP853`` stepped one
  accepted step at a time, which keeps a hard step budget and gives
  access to the solver's own adaptive time points.
- ``torchdiffeq``: ``dopri5`` or ``dopri8`` evaluated at requested times.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import numpy as np
import numpy.typing as npt
import torch
from scipy.integrate import DOP853, RK45
from torchdiffeq import odeint

from hybrid_cstr.config import ReactorConfig, SolverConfig
from hybrid_cstr.exceptions import SolverDivergedError, ValidationError
from hybrid_cstr.reactor import STATE_LABELS, CSTRModel
from hybrid_cstr.trajectory import Trajectory
from hybrid_cstr.weights import ParameterVector

logger = logging.getLogger(__name__)

_SCIPY_SOLVERS = {"RK45": RK45, "DOP853": DOP853}


def _finite_rhs(
    model: CSTRModel, parameters: ParameterVector | None
) -> Callable[[float, npt.NDArray[Any]], npt.NDArray[np.float64]]:
    """Model RHS that raises instead of handing NaN/inf to the solver.

    A non-finite derivative makes the RK error norm NaN, which the step
    size controller cannot recover from.
    """

    def f(t: float, y: npt.NDArray[Any]) -> npt.NDArray[np.float64]:
        dy = model.rhs(y, parameters, t)
        if not np.all(np.isfinite(dy)):
            raise SolverDivergedError(
                f"Non-finite derivative from {model.name} model at t={t:.6g}: {dy}"
            )
        return dy

    return f


def uniform_saveat(t_end: float, interval: float) -> npt.NDArray[np.float64]:
    """Sample times 0, interval, 2*interval, ... up to and including t_end."""
    if interval <= 0:
        raise ValidationError(f"Sampling interval must be positive, got {interval}")
    n = int(np.floor(t_end / interval + 1e-9))
    # n*interval can round to just past (or short of) t_end
    points = np.minimum(np.arange(n + 1, dtype=np.float64) * interval, t_end)
    if np.isclose(points[-1], t_end, rtol=1e-9, atol=0.0):
        points[-1] = t_end
    else:
        points = np.append(points, t_end)
    return points


def check_saveat(saveat: Any, t_end: float) -> npt.NDArray[np.float64]:
    """Validate output times for a run over [0, t_end].

    Raises:
        ValidationError: If saveat is empty, non-finite, not strictly
            increasing, or outside [0, t_end].
    """
    times = np.asarray(saveat, dtype=np.float64).ravel()
    if times.size == 0:
        raise ValidationError("saveat must contain at least one time point")
    if not np.all(np.isfinite(times)):
        raise ValidationError(f"saveat must be finite, got {times}")
    if np.any(np.diff(times) <= 0):
        raise ValidationError("saveat must be strictly increasing")
    if times[0] < 0 or times[-1] > t_end:
        raise ValidationError(f"saveat must lie within [0, {t_end}]")
    return times


class Simulator:
    """Runs a CSTR model from an initial state over [0, t_end].

    Attributes:
        solver_config: Backend, method, tolerances and step budget.
    """

    def __init__(self, solver_config: SolverConfig | None = None):
        self.solver_config = solver_config or SolverConfig()
        logger.info(
            f"Initialized Simulator: backend={self.solver_config.backend}, "
            f"method={self.solver_config.method}"
        )

    def run(
        self,
        model: CSTRModel,
        y0: Any,
        reactor_config: ReactorConfig | None = None,
        parameters: ParameterVector | None = None,
        saveat: Any | None = None,
    ) -> Trajectory:
        """Integrate one model variant.

        Args:
            model: Mechanistic or hybrid CSTR model.
            y0: Initial concentrations [G, L, Es].
            reactor_config: Overrides the model's configuration if given.
            parameters: Network parameters forwarded to the rate law.
            saveat: Output times within [0, t_end]. If None, the solver's
                adaptive steps (scipy) or a uniform grid (torchdiffeq).

        Returns:
            Trajectory of the run.

        Raises:
            ValidationError: If y0 or saveat is malformed.
            SolverDivergedError: If the solver fails or exceeds its budget.
        """
        if reactor_config is not None and reactor_config != model.config:
            model = CSTRModel(reactor_config, model.rate_law)
        t_end = model.config.t_end

        y0_arr = np.array(y0, dtype=np.float64)
        if y0_arr.shape != (3,) or not np.all(np.isfinite(y0_arr)):
            raise ValidationError(f"Initial state must be 3 finite values, got {y0!r}")

        times = check_saveat(saveat, t_end) if saveat is not None else None

        if self.solver_config.backend == "scipy":
            t, y = self._run_scipy(model, parameters, y0_arr, t_end, times)
        else:
            if times is None:
                times = np.linspace(0.0, t_end, self.solver_config.num_points)
            t, y = self._run_torchdiffeq(model, parameters, y0_arr, times)

        logger.info(f"Simulated {model.name} model: {len(t)} samples over [0, {t_end}]")
        return Trajectory(t=t, y=y, labels=STATE_LABELS, name=model.name)

    def run_both(
        self,
        mechanistic: CSTRModel,
        hybrid: CSTRModel,
        y0: Any,
        saveat: Any | None = None,
    ) -> tuple[Trajectory, Trajectory]:
        """Run the mechanistic and hybrid variants from the same state."""
        if mechanistic.config != hybrid.config:
            raise ValidationError("Both variants must share one reactor configuration")
        return (
            self.run(mechanistic, y0, saveat=saveat),
            self.run(hybrid, y0, saveat=saveat),
        )

    def _run_scipy(
        self,
        model: CSTRModel,
        parameters: ParameterVector | None,
        y0: npt.NDArray[np.float64],
        t_end: float,
        saveat: npt.NDArray[np.float64] | None,
    ) -> tuple[npt.NDArray[Any], npt.NDArray[Any]]:
        cfg = self.solver_config
        solver = _SCIPY_SOLVERS[cfg.method](
            _finite_rhs(model, parameters), 0.0, y0, t_end, rtol=cfg.rtol, atol=cfg.atol
        )

        ts: list[float] = []
        ys: list[npt.NDArray[Any]] = []
        idx = 0
        if saveat is None or saveat[0] == 0.0:
            ts.append(0.0)
            ys.append(y0.copy())
            idx = 1

        n_steps = 0
        while solver.status == "running":
            if n_steps >= cfg.max_steps:
                raise SolverDivergedError(
                    f"{cfg.method} exceeded max_steps={cfg.max_steps} at t={solver.t:.6g}"
                )
            message = solver.step()
            n_steps += 1
            if solver.status == "failed":
                raise SolverDivergedError(f"{cfg.method} failed at t={solver.t:.6g}: {message}")
            if not np.all(np.isfinite(solver.y)):
                raise SolverDivergedError(f"Non-finite state at t={solver.t:.6g}")

            if saveat is None:
                ts.append(float(solver.t))
                ys.append(solver.y.copy())
                continue

            interpolant = solver.dense_output()
            while idx < len(saveat) and saveat[idx] <= solver.t:
                s = saveat[idx]
                ts.append(float(s))
                ys.append(solver.y.copy() if s == solver.t else interpolant(s))
                idx += 1

        logger.debug(f"{cfg.method} finished in {n_steps} steps, {solver.nfev} evaluations")
        return np.asarray(ts), np.vstack(ys)

    def _run_torchdiffeq(
        self,
        model: CSTRModel,
        parameters: ParameterVector | None,
        y0: npt.NDArray[np.float64],
        times: npt.NDArray[np.float64],
    ) -> tuple[npt.NDArray[Any], npt.NDArray[Any]]:
        cfg = self.solver_config

        # odeint starts at times[0]; prepend the origin if it is missing
        prepend = times[0] > 0.0
        t_grid = np.concatenate([[0.0], times]) if prepend else times
        rhs = _finite_rhs(model, parameters)

        def func(t: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
            dy = rhs(float(t), y.detach().cpu().numpy())
            return torch.as_tensor(dy, dtype=y.dtype)

        try:
            with torch.no_grad():
                y_traj = odeint(
                    func,
                    torch.as_tensor(y0, dtype=torch.float64),
                    torch.as_tensor(t_grid, dtype=torch.float64),
                    rtol=cfg.rtol,
                    atol=cfg.atol,
                    method=cfg.method,
                    options={"max_num_steps": cfg.max_steps},
                )
        # torchdiffeq signals dt underflow with AssertionError
        except (AssertionError, RuntimeError) as exc:
            raise SolverDivergedError(f"{cfg.method} failed: {exc}") from exc

        y = y_traj.numpy()
        if not np.all(np.isfinite(y)):
            raise SolverDivergedError("Non-finite state in torchdiffeq solution")
        if prepend:
            y = y[1:]
        return times.copy(), y


__all__ = ["Simulator", "check_saveat", "uniform_saveat"]
