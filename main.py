"""
Alien Invasion Simulator — CLI Entry Point

Usage:
    python main.py --map maps/example.txt --aliens 10
    python main.py --generate 50 --seed 7 > maps/random.txt
    python main.py --ui
"""

import argparse
import sys
from pathlib import Path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Alien Invasion Simulator — find out which cities survive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --map maps/example.txt --aliens 10        Run an invasion
  python main.py --generate 50 > maps/random.txt           Generate a random map
  python main.py --ui                                      Launch Streamlit UI
        """,
    )

    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="Path to the map file (overrides config world.map_path)",
    )
    parser.add_argument(
        "--aliens",
        type=int,
        default=None,
        help="Number of aliens (overrides config population.alien_count)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to JSON config file (default: built-in defaults)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random seed (overrides config value)",
    )
    parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Stop after this many rounds",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--generate",
        type=int,
        default=None,
        metavar="N_CITIES",
        help="Print a random map with approximately N_CITIES cities and exit",
    )
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Launch Streamlit web UI",
    )

    return parser.parse_args(argv)


def launch_ui() -> None:
    """Launch the Streamlit web UI."""
    import subprocess
    ui_path = Path(__file__).parent / "alien_invasion" / "ui" / "app.py"
    if not ui_path.exists():
        print(f"Error: UI app not found at {ui_path}")
        sys.exit(1)
    subprocess.run(
        [
            sys.executable, "-m", "streamlit", "run", str(ui_path),
            "--server.port=8501",
            "--server.headless=true",
            "--browser.gatherUsageStats=false",
        ],
        check=True,
    )


def build_config(args: argparse.Namespace):
    """Load the config file (or defaults) and apply CLI overrides."""
    from alien_invasion.core.config import get_default_config, load_config

    config = load_config(args.config) if args.config else get_default_config()

    if args.map is not None:
        config.world.map_path = args.map
    if args.aliens is not None:
        config.population.alien_count = args.aliens
    if args.seed is not None:
        config.world.seed = args.seed
    if args.max_rounds is not None:
        config.simulation.max_rounds = args.max_rounds
    if args.log_level is not None:
        config.logging.level = args.log_level

    errors = config.validate()
    if errors:
        raise ValueError("Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors))

    return config


def run_generate(config, city_count: int) -> int:
    """Print a random map to stdout."""
    import numpy as np
    from alien_invasion.core.map_generator import MapGenerationError, generate_map_lines

    rng = np.random.default_rng(config.world.seed)
    try:
        lines = generate_map_lines(
            city_count,
            rng,
            min_name_length=config.mapgen.min_name_length,
            max_name_length=config.mapgen.max_name_length,
            max_name_attempts=config.mapgen.max_name_attempts,
        )
    except MapGenerationError as exc:
        print(f"Error: {exc}")
        return 1

    for line in lines:
        print(line)
    return 0


def run_invasion(config) -> int:
    """Run a single invasion and report the surviving world."""
    from alien_invasion.core.map_io import load_map, write_map
    from alien_invasion.simulation.engine import InvasionEngine, InvalidPopulationError

    if config.world.map_path is None:
        print("Error: Specify a map file with --map (or world.map_path in the config).")
        return 1

    world_map = load_map(config.world.map_path)

    try:
        engine = InvasionEngine(
            world_map,
            config.population.alien_count,
            seed=config.world.seed,
            max_moves=config.simulation.max_moves_per_alien,
        )
    except InvalidPopulationError as exc:
        print(f"Error: {exc}")
        return 1

    result = engine.run(max_rounds=config.simulation.max_rounds)

    if not result.world_destroyed:
        print("\nSome cities survived the alien attack, let's celebrate!")
        print("\nWorld map after the end of alien invasion:")
        print("-" * 65)
        write_map(world_map, sys.stdout)
        print("-" * 65)
    else:
        print("\nUnfortunately, the world was totally destroyed by the aliens :(")
        print("\nSee you in the heavens!")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.ui:
        launch_ui()
        return 0

    from alien_invasion.core.config import configure_logging

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}")
        return 1

    configure_logging(config)

    if args.generate is not None:
        return run_generate(config, args.generate)

    try:
        return run_invasion(config)
    except FileNotFoundError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
