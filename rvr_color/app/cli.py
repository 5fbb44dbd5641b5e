"""Replay recorded sensor samples through a controller.

``scan`` mirrors the robot program that calibrates on a surface: it scans
the replayed samples and reports the derived color spec. ``stabilize``
prints each stable color transition, which is handy when tuning stability.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Optional, TextIO

from rvr_color.core.logging_config import LOG_LEVELS, configure_logging
from rvr_color.core.logging_utils import get_module_logger
from rvr_color.modules.ColorSensor.color_core import (
    OFF,
    ColorSensorController,
    ColorSensorError,
    RetentionPolicy,
    SequenceSampleSource,
    load_samples_csv,
)
from rvr_color.modules.ColorSensor.config import ColorSensorConfig


logger = get_module_logger(__name__)

_CHANNEL_NAMES = (("r", "red"), ("g", "green"), ("b", "blue"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rvr-color",
        description="Replay recorded RGB samples through the color sensor controller",
    )
    parser.add_argument("--config", type=Path, default=None, help="key = value config file (default: config.txt)")
    parser.add_argument("--log-level", choices=sorted(LOG_LEVELS.keys()), default=None, help="Logging verbosity")
    parser.add_argument("--log-file", type=Path, default=None, help="Optional rotating log file")
    console_group = parser.add_mutually_exclusive_group()
    console_group.add_argument("--console", dest="console_output", action="store_true", default=None,
                               help="Log to stdout")
    console_group.add_argument("--no-console", dest="console_output", action="store_false",
                               help="Do not log to stdout")
    parser.add_argument("--stability", type=int, default=None, help="Window size for stable colors")
    parser.add_argument("--stability-threshold", type=float, default=None,
                        help="Max channel std-dev of running averages for a settled window")
    parser.add_argument("--retention", choices=[policy.value for policy in RetentionPolicy], default=None,
                        help="Keep unsettled channels individually or the whole previous color")

    commands = parser.add_subparsers(dest="command", required=True)

    scan = commands.add_parser("scan", help="Derive a color spec from recorded samples")
    scan.add_argument("samples", type=Path, help="CSV file with r,g,b columns")
    scan.add_argument("--frequency", dest="scan_frequency", type=float, default=None, help="Scan rate in Hz")
    scan.add_argument("--duration", type=float, default=None,
                      help="Stop after this many seconds (default: when the samples run out)")

    stabilize = commands.add_parser("stabilize", help="Print stable color transitions")
    stabilize.add_argument("samples", type=Path, help="CSV file with r,g,b columns")

    return parser


def format_spec_report(spec, count: int) -> list[str]:
    lines = [f"From {count} samples."]
    for attr, label in _CHANNEL_NAMES:
        channel = getattr(spec, attr)
        lines.append(f"{label}: {channel.value}; delta {channel.tolerance}")
    return lines


async def run_scan(config: ColorSensorConfig, samples_path: Path, duration: Optional[float], out: TextIO) -> int:
    source = SequenceSampleSource(load_samples_csv(samples_path), fallback=OFF)
    async with ColorSensorController.from_config(config, source, logger=logger) as controller:
        scan = controller.start_scan(config.scan_frequency)
        started = time.monotonic()
        period = 1.0 / config.scan_frequency
        while not source.exhausted:
            if duration is not None and time.monotonic() - started >= duration:
                break
            await asyncio.sleep(period)
        scan.stop()

        spec = scan.get_color_spec()
        if spec is None:
            print(f"No colors observed in {samples_path} (only off readings).", file=out)
            return 1
        for line in format_spec_report(spec, scan.get_count()):
            print(line, file=out)
    return 0


def run_stabilize(config: ColorSensorConfig, samples_path: Path, out: TextIO) -> int:
    samples = load_samples_csv(samples_path)
    if not samples:
        print(f"{samples_path} holds no samples.", file=out)
        return 1
    controller = ColorSensorController.from_config(config, SequenceSampleSource(samples), logger=logger)
    # Replay is always on demand: one sample per read.
    previous = controller.stable_color
    print(f"start: {previous}", file=out)
    for index in range(len(samples)):
        color = controller.get_color()
        if color != previous:
            print(f"{index}: {color}", file=out)
            previous = color
    return 0


async def main(argv: Optional[list[str]] = None, *, out: TextIO = sys.stdout) -> int:
    args = build_parser().parse_args(argv)

    config = ColorSensorConfig.from_file(args.config).apply_args_override(args)
    if args.command == "stabilize":
        config = config.apply_args_override(argparse.Namespace(sample_frequency=0.0))

    configure_logging(config.log_level, console=config.console_output, log_file=config.log_file)
    logger.debug("Running %s with %s", args.command, config.to_dict())

    try:
        if args.command == "scan":
            return await run_scan(config, args.samples, args.duration, out)
        return run_stabilize(config, args.samples, out)
    except (OSError, ColorSensorError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2


__all__ = ["build_parser", "format_spec_report", "main", "run_scan", "run_stabilize"]
