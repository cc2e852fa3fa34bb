"""End-to-end comparison run: weights -> network -> both models -> plot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hybrid_cstr.config import SimulationConfig
from hybrid_cstr.exceptions import ConfigurationError
from hybrid_cstr.network import DEFAULT_TOPOLOGY
from hybrid_cstr.plotting import plot_comparison, save_figure
from hybrid_cstr.reactor import hybrid_model, mechanistic_model
from hybrid_cstr.simulator import Simulator, uniform_saveat
from hybrid_cstr.trajectory import ComparisonReport, Trajectory, compare
from hybrid_cstr.weights import ParameterVector, load_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonResult:
    """Outputs of one mechanistic-vs-hybrid run.

    ``figure`` is only set when the plot was built but not saved; the
    caller owns it and closes it (``matplotlib.pyplot.close``).
    """

    mechanistic: Trajectory
    hybrid: Trajectory
    report: ComparisonReport | None
    within_tolerance: bool | None
    figure: Any = None
    figure_path: Path | None = None


def run_comparison(
    config: SimulationConfig,
    parameters: ParameterVector | None = None,
    make_plot: bool = True,
) -> ComparisonResult:
    """Simulate the mechanistic and hybrid CSTR and compare them.

    Args:
        config: Run configuration.
        parameters: Network parameters. Loaded from ``config.weights_path``
            when omitted.
        make_plot: Build the comparison figure. If ``config.plot.output``
            is set the figure is saved and closed, otherwise it is
            returned open in ``ComparisonResult.figure``.

    Returns:
        ComparisonResult. ``report`` is None when ``saveat_interval`` is
        unset, since adaptive samplings cannot be compared pointwise.

    Raises:
        ConfigurationError: If neither parameters nor a weights path is given.
    """
    if parameters is None:
        if config.weights_path is None:
            raise ConfigurationError("No network parameters given and no weights_path configured")
        parameters = load_parameters(config.weights_path, DEFAULT_TOPOLOGY.num_parameters)

    reactor = config.reactor
    mechanistic = mechanistic_model(reactor, config.kinetics.to_params())
    hybrid = hybrid_model(reactor, parameters)

    saveat = None
    if config.saveat_interval is not None:
        saveat = uniform_saveat(reactor.t_end, config.saveat_interval)

    simulator = Simulator(config.solver)
    mech_traj, hyb_traj = simulator.run_both(mechanistic, hybrid, config.initial_state, saveat)

    report = None
    within = None
    if saveat is not None:
        report = compare(mech_traj, hyb_traj)
        within = report.within(config.tolerance)
        if not within:
            logger.warning(
                f"Hybrid deviates from mechanistic by {report.max_abs_error:.4g} mM "
                f"(tolerance {config.tolerance})"
            )

    figure = None
    figure_path = None
    if make_plot:
        figure = plot_comparison(
            mech_traj, hyb_traj, title=config.plot.title, backend=config.plot.backend
        )
        if config.plot.output is not None:
            figure_path = save_figure(figure, config.plot.output)
            figure = None

    return ComparisonResult(
        mechanistic=mech_traj,
        hybrid=hyb_traj,
        report=report,
        within_tolerance=within,
        figure=figure,
        figure_path=figure_path,
    )


__all__ = ["ComparisonResult", "run_comparison"]
