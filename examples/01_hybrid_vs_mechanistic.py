"""Mechanistic vs hybrid CSTR.

Demonstrates:
1. Loading pretrained rate-network weights from a text file
2. Replacing the esterification rate law with the network
3. Integrating both models and comparing them at common sample times
4. Overlaying the trajectories (markers: mechanistic, lines: hybrid)

Run: python examples/01_hybrid_vs_mechanistic.py path/to/weights.txt
"""

from __future__ import annotations

import sys

import matplotlib

matplotlib.use("Agg")

from hybrid_cstr import (
    DEFAULT_TOPOLOGY,
    ReactorConfig,
    Simulator,
    compare,
    generate_reference,
    hybrid_model,
    load_parameters,
    mechanistic_model,
    plot_comparison,
    save_figure,
    uniform_saveat,
)


def main(weights_path: str) -> None:
    """Run the hybrid vs mechanistic comparison."""
    print("=" * 60)
    print("Example 01: Hybrid vs Mechanistic CSTR")
    print("=" * 60)

    # 1. Load weights
    print("\n1. Loading network weights...")
    parameters = load_parameters(weights_path, DEFAULT_TOPOLOGY.num_parameters)
    print(f"   {len(parameters)} parameters for layers {DEFAULT_TOPOLOGY.layer_sizes}")

    # 2. Build both models on one reactor configuration
    print("\n2. Building models...")
    config = ReactorConfig(volume=10.0, flow_rate=0.05, inlet=(60.0, 60.0, 0.0), t_end=480.0)
    mechanistic = mechanistic_model(config)
    hybrid = hybrid_model(config, parameters)
    print(f"   Residence time V/Q = {config.volume / config.flow_rate:.0f} min")

    # 3. Simulate
    print("\n3. Simulating 8 h of operation...")
    y0 = [60.0, 60.0, 0.0]
    saveat = uniform_saveat(config.t_end, 10.0)
    mech_traj, hyb_traj = Simulator().run_both(mechanistic, hybrid, y0, saveat)
    print(f"   Mechanistic final [G, L, Es]: {mech_traj.final_state.round(3)}")
    print(f"   Hybrid final      [G, L, Es]: {hyb_traj.final_state.round(3)}")

    # 4. Compare against a noisy reference measurement
    print("\n4. Comparing...")
    reference = generate_reference(config, y0, saveat, noise_std=0.5, seed=0)
    print(f"   hybrid vs mechanistic: {compare(mech_traj, hyb_traj)}")
    print(f"   hybrid vs noisy data:  {compare(reference, hyb_traj)}")

    # 5. Plot
    fig = plot_comparison(mech_traj, hyb_traj)
    path = save_figure(fig, "results/01_hybrid_vs_mechanistic.png")
    print(f"\n5. Figure saved to {path}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    main(sys.argv[1])
