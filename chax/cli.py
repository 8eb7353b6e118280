"""Headless command line runner.

Runs a ROM for a number of frames without any window or audio, then
optionally writes the final frame to an image. Exits with status 1 if the
program hits a fatal error.
"""

import argparse
import sys

from chax.config import MachineConfig
from chax.errors import Chip8Error
from chax.logging import ConsoleLogger, LEVELS
from chax.machine import Machine
from chax.rendering import COLOR_SCHEMES, display_to_text, save_frame


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chax", description="Run a CHIP-8 ROM headlessly"
    )
    parser.add_argument("rom", help="Path to the CHIP-8 ROM file")
    parser.add_argument(
        "--frames",
        type=int,
        default=600,
        help="Number of 60 Hz frames to run (default: 600)",
    )
    parser.add_argument(
        "--ips",
        type=int,
        default=700,
        help="Instructions per second (default: 700)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random number source (default: 0)",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace execution to wall-clock time instead of running flat out",
    )
    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        help="Write the final frame to this image file",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=8,
        help="Snapshot upscaling factor (default: 8)",
    )
    parser.add_argument(
        "--color-scheme",
        type=str,
        default="classic",
        choices=sorted(COLOR_SCHEMES),
        help="Snapshot color scheme (default: classic)",
    )
    parser.add_argument(
        "--print-frame",
        action="store_true",
        help="Print the final frame as text",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LEVELS,
        default="INFO",
        help="Console log level (default: INFO)",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger = ConsoleLogger("chax", log_level=args.log_level)

    config = MachineConfig(
        instructions_per_second=args.ips,
        seed=args.seed,
        throttle=args.realtime,
    )

    try:
        machine = Machine(config, logger=logger)
        machine.load_file(args.rom)
    except (Chip8Error, OSError, ValueError) as e:
        logger.error(str(e))
        return 1

    status = 0
    try:
        frames = machine.run(frames=args.frames)
        logger.info(f"Ran {frames} frames")
    except Chip8Error:
        # Already logged by the machine; still report the last frame
        status = 1

    if args.print_frame:
        print(display_to_text(machine.display))
    if args.snapshot:
        save_frame(machine.display, args.snapshot, args.scale, args.color_scheme)
        logger.info(f"Saved frame to {args.snapshot}")
    return status


if __name__ == "__main__":
    sys.exit(main())
