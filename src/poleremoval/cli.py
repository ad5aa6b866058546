"""Command-line interface for bottom image pole removal."""

import argparse
import logging
import sys
from pathlib import Path

from poleremoval.config import PoleRemovalConfig
from poleremoval.errors import PoleRemovalError
from poleremoval.flow import available_flow_providers


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Silence noisy third-party loggers
    for name in ("matplotlib", "PIL"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _load_config(config_path: Path) -> PoleRemovalConfig:
    if not config_path.exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)

    try:
        return PoleRemovalConfig.from_yaml(config_path)
    except Exception as e:
        print(f"Error: Failed to load config: {e}", file=sys.stderr)
        sys.exit(1)


def init_config(
    config_path: Path,
    images_dir: str = "",
    pole_mask_dir: str = "",
    output_dir: str = "",
    rig_path: str = "",
    flow_algorithm: str | None = None,
) -> PoleRemovalConfig:
    """Write a config YAML with defaults and the given paths.

    Args:
        config_path: Where to write the YAML file.
        images_dir: Directory with the bottom camera images.
        pole_mask_dir: Directory with the painted pole masks.
        output_dir: Output directory.
        rig_path: Camera rig JSON file.
        flow_algorithm: Optional flow algorithm override.

    Returns:
        The generated config.
    """
    config = PoleRemovalConfig()
    config.paths.images_dir = images_dir
    config.paths.pole_mask_dir = pole_mask_dir
    config.paths.output_dir = output_dir
    config.paths.rig_path = rig_path
    if flow_algorithm is not None:
        if flow_algorithm not in available_flow_providers():
            print(
                f"Error: Unknown flow algorithm {flow_algorithm!r}. "
                f"Valid algorithms: {available_flow_providers()}",
                file=sys.stderr,
            )
            sys.exit(1)
        config.alignment.flow_algorithm = flow_algorithm

    config.to_yaml(config_path)
    print(f"Config written to {config_path}")
    return config


def run_command(
    config_path: Path,
    verbose: bool = False,
    prev_frame_dir: str | None = None,
    flow_algorithm: str | None = None,
) -> None:
    """Run pole removal for one frame from a config file.

    Args:
        config_path: Path to the config YAML file.
        verbose: If True, set logging to DEBUG level.
        prev_frame_dir: Optional override of paths.prev_frame_dir ("NONE"
            disables the previous frame).
        flow_algorithm: Optional override of alignment.flow_algorithm.
    """
    _configure_logging(verbose)
    config = _load_config(config_path)

    # CLI overrides are re-validated through the model
    overrides = config.model_dump()
    if prev_frame_dir is not None:
        overrides["paths"]["prev_frame_dir"] = prev_frame_dir
    if flow_algorithm is not None:
        overrides["alignment"]["flow_algorithm"] = flow_algorithm
    try:
        config = PoleRemovalConfig.model_validate(overrides)
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    from poleremoval.pipeline import run_pipeline

    try:
        output_path = run_pipeline(config)
    except (PoleRemovalError, ValueError) as e:
        print(f"Error: Pole removal failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Bottom image written to {output_path}")


def sequence_command(
    config_path: Path, frames_root: Path, verbose: bool = False
) -> None:
    """Run pole removal over every frame directory under frames_root."""
    _configure_logging(verbose)
    config = _load_config(config_path)

    if not frames_root.is_dir():
        print(f"Error: Frame directory does not exist: {frames_root}", file=sys.stderr)
        sys.exit(1)

    from poleremoval.pipeline import run_sequence

    try:
        outputs = run_sequence(config, frames_root)
    except (PoleRemovalError, ValueError) as e:
        print(f"Error: Pole removal failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Processed {len(outputs)} frame(s) into {config.paths.output_dir}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="poleremoval",
        description=(
            "Fuse the two bottom camera images of a panoramic rig, "
            "removing the support pole."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init subcommand
    init_parser = subparsers.add_parser("init", help="Generate a config YAML")
    init_parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to output config YAML file (default: config.yaml)",
    )
    for flag, help_text in (
        ("--images-dir", "Directory with the bottom camera images"),
        ("--pole-mask-dir", "Directory with the painted pole masks"),
        ("--output-dir", "Output directory"),
        ("--rig", "Camera rig JSON file"),
    ):
        init_parser.add_argument(flag, type=str, default="", help=help_text)
    init_parser.add_argument(
        "--flow", type=str, default=None, help="Flow algorithm name"
    )

    # run subcommand
    run_parser = subparsers.add_parser("run", help="Remove the pole from one frame")
    run_parser.add_argument("config", type=Path, help="Path to config YAML file")
    run_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose (DEBUG) logging"
    )
    run_parser.add_argument(
        "--prev-frame-dir",
        type=str,
        default=None,
        help="Previous frame output directory ('NONE' for no previous frame)",
    )
    run_parser.add_argument(
        "--flow", type=str, default=None, help="Override flow algorithm"
    )

    # sequence subcommand
    sequence_parser = subparsers.add_parser(
        "sequence", help="Remove the pole from every frame directory in order"
    )
    sequence_parser.add_argument("config", type=Path, help="Path to config YAML file")
    sequence_parser.add_argument(
        "frames_root", type=Path, help="Directory of per-frame image directories"
    )
    sequence_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose (DEBUG) logging"
    )

    # flows subcommand
    subparsers.add_parser("flows", help="List available flow algorithms")

    args = parser.parse_args()

    # Dispatch
    if args.command == "init":
        init_config(
            config_path=args.config,
            images_dir=args.images_dir,
            pole_mask_dir=args.pole_mask_dir,
            output_dir=args.output_dir,
            rig_path=args.rig,
            flow_algorithm=args.flow,
        )
    elif args.command == "run":
        run_command(
            config_path=args.config,
            verbose=args.verbose,
            prev_frame_dir=args.prev_frame_dir,
            flow_algorithm=args.flow,
        )
    elif args.command == "sequence":
        sequence_command(
            config_path=args.config,
            frames_root=args.frames_root,
            verbose=args.verbose,
        )
    elif args.command == "flows":
        for name in available_flow_providers():
            print(name)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
