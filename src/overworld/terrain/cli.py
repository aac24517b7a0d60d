"""Command-line interface for world generation."""

import argparse
import logging
import sys
import time
from pathlib import Path

import structlog


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to the console at INFO, or DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a seeded overworld map"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="TOML file with generation parameters"
    )
    parser.add_argument("--width", type=int, default=None, help="World width (default: 256)")
    parser.add_argument("--height", type=int, default=None, help="World height (default: 256)")
    parser.add_argument(
        "--seed", type=int, default=0, help="World seed, 0 for random (default: 0)"
    )
    parser.add_argument(
        "--factor", type=int, default=None, help="Overview block size (default: 4)"
    )
    parser.add_argument("--no-roads", action="store_true", help="Skip road generation")
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/world.npz",
        help="Output path (default: saves/world.npz)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for world generation."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    # Import here to avoid slow startup for --help
    from ..grid import PoiKind
    from .config import WorldGenConfig, load_config
    from .generator import WorldGenerator
    from .persistence import save_world

    config = load_config(Path(args.config)) if args.config else WorldGenConfig()
    overrides = {
        "width": args.width,
        "height": args.height,
        "simplification_factor": args.factor,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.no_roads:
        overrides["generate_roads"] = False
    if overrides:
        config = WorldGenConfig.model_validate({**config.model_dump(), **overrides})

    output_path = Path(args.output)
    if output_path.suffix != ".npz":
        output_path = output_path.with_suffix(".npz")

    print(f"Generating {config.width}x{config.height} world (seed {args.seed or 'random'})")
    print(f"Output: {output_path}")
    print()

    start_time = time.time()
    generator = WorldGenerator(config)
    grid, simplified = generator.run(args.seed)
    gen_time = time.time() - start_time

    result = generator.validation

    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_world(output_path, grid, simplified, config)

    settlements = sum(1 for site in grid.poi_sites if site.kind == PoiKind.SETTLEMENT)
    dungeons = sum(1 for site in grid.poi_sites if site.kind == PoiKind.DUNGEON)

    print()
    print(f"Generation complete in {gen_time:.1f}s")
    print(f"  Seed:            {grid.seed}")
    print(f"  River tiles:     {int(grid.river_mask.sum())}")
    print(f"  Settlements:     {settlements}/{config.settlement_count}")
    print(f"  Dungeons:        {dungeons}/{config.dungeon_count}")
    print(f"  Road tiles:      {int(grid.road_mask.sum())}")
    print(f"  Overview grid:   {simplified.width}x{simplified.height}")
    print(f"Saved to {output_path}")

    if not result.passed:
        print("Validation failed:", file=sys.stderr)
        for error in result.errors:
            print(f"  - {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
