"""CLI for running offline LiftCall scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from dispatch import CycleCoordinator, get_engine
from simulation import ScenarioSettings, Simulation


def build_simulation(config: Dict) -> Simulation:
    return Simulation(ScenarioSettings.from_dict(config))


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    engine = get_engine(config.get("engine", "look"), simulation.config)
    coordinator = CycleCoordinator(engine)
    interval = max(1, config.get("metrics_hook_interval", 50))
    snapshots: List[Dict] = []

    while not simulation.is_end:
        simulation.step(coordinator.run_cycle(simulation.on_calls()))
        if simulation.current_time % interval == 0:
            snapshots.append(asdict(simulation.metrics.snapshot(simulation.current_time)))
    return snapshots


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write metrics snapshots as JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every elevator decision")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = json.loads(args.config.read_text())
    simulation = build_simulation(config)
    snapshots = run_simulation(simulation, config)

    final_metrics = asdict(simulation.metrics.snapshot(simulation.current_time))
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "engine": config.get("engine", "look"),
        "ticks": simulation.current_time,
        "delivered": len(simulation.building.delivered),
        "total_calls": simulation.total_calls,
        "final_metrics": final_metrics,
        "metrics_over_time": snapshots,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Engine: {results['engine']}")
    print(f"Ticks: {results['ticks']}")
    print(f"Delivered: {results['delivered']}/{results['total_calls']}")
    print("Final metrics:")
    for key, value in final_metrics.items():
        print(f"  {key}: {value}")
    if args.output:
        print(f"Saved metrics to {args.output}")


if __name__ == "__main__":
    main()
