"""Command-line interface for hybrid-cstr.

Provides commands for running the mechanistic-vs-hybrid comparison and
for checking a weight file against the network topology.
"""

from __future__ import annotations

import argparse
import logging
import sys

from hybrid_cstr import __version__
from hybrid_cstr.exceptions import HybridCSTRError

logger = logging.getLogger(__name__)


def cmd_simulate(args: argparse.Namespace) -> None:
    """Run the comparison described by a YAML config."""
    from hybrid_cstr.config import SimulationConfig, load_config
    from hybrid_cstr.logging import setup_logging
    from hybrid_cstr.pipeline import run_comparison

    config = load_config(args.config) if args.config else SimulationConfig()

    overrides: dict[str, object] = {}
    if args.weights:
        overrides["weights_path"] = args.weights
    if args.output:
        overrides["plot"] = config.plot.model_copy(update={"output": args.output})
    if overrides:
        config = config.model_copy(update=overrides)

    log_cfg = config.logging
    setup_logging(
        level=args.log_level or log_cfg.level,
        log_format=log_cfg.format,
        log_file=log_cfg.log_file,
        module_levels=log_cfg.module_levels,
    )

    result = run_comparison(config, make_plot=config.plot.output is not None)

    final_m = ", ".join(f"{v:.3f}" for v in result.mechanistic.final_state)
    final_h = ", ".join(f"{v:.3f}" for v in result.hybrid.final_state)
    print(f"Mechanistic final state [G, L, Es]: {final_m}")
    print(f"Hybrid final state      [G, L, Es]: {final_h}")
    if result.report is not None:
        status = "OK" if result.within_tolerance else "EXCEEDED"
        print(f"Deviation: {result.report} -> tolerance {config.tolerance} {status}")
    if result.figure_path is not None:
        print(f"Figure saved to {result.figure_path}")


def cmd_inspect_weights(args: argparse.Namespace) -> None:
    """Report the parameter count of a weight file."""
    from hybrid_cstr.network import DEFAULT_TOPOLOGY
    from hybrid_cstr.weights import load_parameters

    parameters = load_parameters(args.path)
    expected = DEFAULT_TOPOLOGY.num_parameters
    print(f"{args.path}: {len(parameters)} parameters")
    print(f"Topology {DEFAULT_TOPOLOGY.layer_sizes} expects {expected}")
    if len(parameters) != expected:
        print("Parameter count does NOT match the topology")
        sys.exit(1)
    print("Parameter count matches the topology")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the hybrid-cstr CLI."""
    parser = argparse.ArgumentParser(
        prog="hybrid-cstr",
        description="Hybrid mechanistic/neural CSTR simulation",
    )
    parser.add_argument("--version", action="version", version=f"hybrid-cstr {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    sim_parser = subparsers.add_parser("simulate", help="Compare mechanistic and hybrid models")
    sim_parser.add_argument("--config", default=None, help="Path to YAML config file")
    sim_parser.add_argument("--weights", default=None, help="Path to network weight file")
    sim_parser.add_argument("--output", default=None, help="Path to save the comparison figure")
    sim_parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sim_parser.set_defaults(func=cmd_simulate)

    inspect_parser = subparsers.add_parser("inspect-weights", help="Check a weight file")
    inspect_parser.add_argument("path", help="Path to network weight file")
    inspect_parser.set_defaults(func=cmd_inspect_weights)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except HybridCSTRError as exc:
        logger.error(str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


__all__ = ["main"]
