"""Stabilized color readings, color specs and calibration scans for RGB sensors."""

from __future__ import annotations

import asyncio
from importlib import metadata
from typing import Optional, Sequence

from .modules.ColorSensor import ColorSensorConfig, ColorSensorController

try:
    __version__ = metadata.version("rvr-color-sensor")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Convenience wrapper that runs the async command-line entry point."""
    from .app.cli import main

    return asyncio.run(main(list(argv) if argv is not None else None))


__all__ = ["ColorSensorConfig", "ColorSensorController", "__version__", "run"]
