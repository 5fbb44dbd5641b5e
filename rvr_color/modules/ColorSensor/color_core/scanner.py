"""Calibration scans: derive a ColorSpec from the range of observed colors."""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from rvr_color.core.asyncio_utils import create_logged_task
from rvr_color.core.logging_utils import LoggerLike, ensure_structured_logger
from rvr_color.modules.base.task_manager import AsyncTaskManager

from .color_types import Color, ColorSpec, ToleranceChannel, round_half_up
from .constants import CHANNEL_MAX, CHANNEL_MIN, DEFAULT_SCAN_FREQUENCY

SpecT = TypeVar("SpecT")


class ScanPhase(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(slots=True)
class ChannelRange:
    """Observed extrema of one channel, inverted until the first reading."""

    min_value: int = CHANNEL_MAX
    max_value: int = CHANNEL_MIN

    def widen(self, value: int) -> None:
        self.min_value = min(self.min_value, value)
        self.max_value = max(self.max_value, value)

    def to_tolerance(self) -> ToleranceChannel:
        # The tolerance is measured from the unrounded midpoint, so a single
        # observed value gives tolerance 0 and {1..6} gives 4 +/- 3.
        midpoint = (self.max_value + self.min_value) / 2
        return ToleranceChannel(round_half_up(midpoint), round_half_up(self.max_value - midpoint))


def _identity(spec: ColorSpec) -> Any:
    return spec


class ColorScanner(Generic[SpecT]):
    """Timed sampling loop accumulating per-channel min/max of non-off colors.

    ``read_color`` is polled once per tick; the all-zero start-up reading is
    skipped entirely and does not count. ``stop()`` is observed by the loop
    on its next tick.
    """

    def __init__(
        self,
        read_color: Callable[[], Color],
        *,
        spec_factory: Callable[[ColorSpec], SpecT] = _identity,
        task_manager: Optional[AsyncTaskManager] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._read_color = read_color
        self._spec_factory = spec_factory
        self._tasks = task_manager
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

        self._phase = ScanPhase.IDLE
        self._enabled = False
        self._generation = 0
        self._count = 0
        self._frequency = DEFAULT_SCAN_FREQUENCY
        self._r = ChannelRange()
        self._g = ChannelRange()
        self._b = ChannelRange()
        self._task: Optional[asyncio.Task] = None

    @property
    def phase(self) -> ScanPhase:
        return self._phase

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def frequency(self) -> float:
        return self._frequency

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def arm(self) -> None:
        """Enable accumulation and reset count and extrema, without a timer."""
        self._generation += 1
        self._enabled = True
        self._count = 0
        self._r, self._g, self._b = ChannelRange(), ChannelRange(), ChannelRange()
        self._phase = ScanPhase.RUNNING

    def start(self, frequency: float = DEFAULT_SCAN_FREQUENCY) -> "ColorScanner[SpecT]":
        """Arm the scan and poll at ``frequency`` Hz on the running loop."""
        if frequency <= 0:
            raise ValueError(f"scan frequency must be positive, got {frequency}")
        loop = asyncio.get_running_loop()

        self._frequency = float(frequency)
        self.arm()
        coro = self._scan_loop(self._generation, 1.0 / self._frequency)
        name = f"color-scan-{self._generation}"
        if self._tasks is not None:
            self._task = self._tasks.create(coro, name=name)
        else:
            self._task = create_logged_task(coro, logger=self._logger, context=name, loop=loop)
        self._logger.info("Scan started at %.1f Hz", self._frequency)
        return self

    async def _scan_loop(self, generation: int, period: float) -> None:
        while self._enabled and generation == self._generation:
            self.tick()
            await asyncio.sleep(period)

    def tick(self) -> bool:
        """Take one reading. Returns True when it was accumulated."""
        if not self._enabled:
            return False
        color = self._read_color()
        if color.is_off():
            return False
        self._r.widen(color.r)
        self._g.widen(color.g)
        self._b.widen(color.b)
        self._count += 1
        return True

    def stop(self) -> None:
        if not self._enabled:
            return
        self._enabled = False
        self._phase = ScanPhase.STOPPED
        self._logger.info("Scan stopped after %d sample(s)", self._count)

    def get_count(self) -> int:
        return self._count

    def get_color_spec(self) -> Optional[SpecT]:
        """Midpoint and half-range of the observed colors.

        Returns None when no non-off color has been observed yet. Repeated
        calls without a tick derive equal regions, but each call goes through
        ``spec_factory``; a controller scan therefore hands out a new
        BoundColorSpec (new ``spec_id``) each time, equal only on ``.region``.
        """
        if self._count == 0:
            self._logger.debug("No colors observed; no spec to derive")
            return None
        region = ColorSpec(self._r.to_tolerance(), self._g.to_tolerance(), self._b.to_tolerance())
        return self._spec_factory(region)


__all__ = ["ChannelRange", "ColorScanner", "ScanPhase"]
