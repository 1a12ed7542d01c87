#!/usr/bin/env python3
"""
Robot Arm Physics Demo

This script demonstrates the 3-DOF arm physics estimator with:
- Sine-wave joint motion sampled on a fixed interval
- Torque, power and battery estimation per tick
- Design warnings when ratings are exceeded
- A console table of the evolving state

Usage:
    python examples/robot/arm_physics_demo.py [--ticks N] [--payload KG] [--speed X]
"""

import sys
import argparse
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pyarmsim.simulation import SimulationConfig, ArmPhysicsSimulation
from pyarmsim.physics import RobotConfig, DesignLimits


def print_row(sim: ArmPhysicsSimulation) -> None:
    state = sim.physics_state
    angles = " ".join(f"{a:7.2f}" for a in state.joint_angles)
    torques = " ".join(f"{t:6.2f}" for t in state.joint_torques)
    x, y, _ = state.end_effector_position
    print(f"{sim.sim_time:6.2f} | {angles} | {torques} | ({x:5.2f}, {y:5.2f}) | "
          f"{state.total_power:6.3f} W | {state.battery_charge:8.4f} % | {len(sim.warnings)}")


def main():
    """Main entry point for the arm physics demo."""
    parser = argparse.ArgumentParser(description="PyArmSim Robot Arm Physics Demo")
    parser.add_argument("--ticks", type=int, default=50,
                        help="Number of ticks to simulate")
    parser.add_argument("--payload", type=float, default=5.0,
                        help="Payload mass in kg")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Motion playback speed")
    parser.add_argument("--every", type=int, default=5,
                        help="Print every N-th tick")

    args = parser.parse_args()

    config = SimulationConfig(sample_interval=0.1, speed=args.speed, realtime=False)
    sim = ArmPhysicsSimulation(
        "arm_physics_demo",
        config,
        robot_config=RobotConfig(payload_mass=args.payload),
        limits=DesignLimits(load_mass=args.payload),
    )

    print("\nPyArmSim Robot Arm Physics Demo")
    print("=" * 50)
    print(f"Payload: {args.payload} kg   Speed: x{args.speed}   Ticks: {args.ticks}")
    print()
    print("  time | joint angles (deg)      | torques (Nm)         | end effector   | "
          "power    | charge     | warnings")

    for tick in range(1, args.ticks + 1):
        sim.step()
        if tick % args.every == 0:
            print_row(sim)
    sim.shutdown()

    print()
    for warning in sim.warnings:
        print(f"  ! {warning.message}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
