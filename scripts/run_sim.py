import argparse
import logging
from pathlib import Path

from empirecore.core.config import LoopConfig
from empirecore.core.sim import step
from empirecore.empire.empire import Empire
from empirecore.io.save_load import load_from_json, save_to_json
from empirecore.operations.factory import operation_factory, sync_operations
from empirecore.reports.gazette import generate_gazette
from empirecore.world.load import load_world
import empirecore.operations.outpost  # registers the "outpost" operation type


def main():
    parser = argparse.ArgumentParser(description="Run the empire control loop over a scenario.")
    parser.add_argument(
        "--scenario",
        type=str,
        default="data/scenario.yaml",
        help="Path to the scenario YAML file.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="data/empire.yaml",
        help="Path to the loop configuration YAML file.",
    )
    parser.add_argument(
        "--ticks", type=int, default=12, help="Number of ticks to run."
    )
    parser.add_argument("--seed", type=int, default=0, help="Seed for cache invalidation rolls.")
    parser.add_argument("--memory", type=str, help="Restore memory from this JSON file before running.")
    parser.add_argument(
        "--dump-memory", type=str, help="Write the final memory to this JSON file."
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    world = load_world(Path(args.scenario))
    if args.memory:
        load_from_json(world, args.memory)
    config = LoopConfig.load_from_yaml(Path(args.config)) if Path(args.config).exists() else LoopConfig()
    print(f"Loaded scenario '{args.scenario}' for {world.username} at tick {world.time}.")

    empire = Empire(world, config=config, seed=args.seed)
    for _ in range(args.ticks):
        sync_operations(world, empire, operation_factory)
        report = step(empire)
        print(generate_gazette(empire.notifier, tick=report.tick))

    if args.dump_memory:
        save_to_json(world, args.dump_memory)
        print(f"Final memory dumped to {args.dump_memory}")

if __name__ == "__main__":
    main()
