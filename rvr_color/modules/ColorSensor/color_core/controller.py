"""Controller facade wrapping a raw RGB sample source.

The controller owns one stabilizer, one event registry and the background
loops that feed them. Everything runs on a single asyncio loop: sampling
ticks, scan ticks and handler dispatch each run to completion, so the
windows, the stable color and the handler flags need no locking.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from rvr_color.core.asyncio_utils import has_running_loop
from rvr_color.core.logging_utils import LoggerLike, ensure_structured_logger
from rvr_color.modules.base.task_manager import AsyncTaskManager

from .color_types import Color, ColorSpec
from .constants import (
    CONFIGURE_DEFAULT_SAMPLE_FREQUENCY,
    CONFIGURE_DEFAULT_STABILITY,
    DEFAULT_SAMPLE_FREQUENCY,
    DEFAULT_SCAN_FREQUENCY,
    DEFAULT_STABILITY,
    DEFAULT_STABILITY_THRESHOLD,
)
from .errors import SampleSourceError
from .event_registry import EventRegistry
from .scanner import ColorScanner
from .sources import SampleSource, missing_sample_source
from .spec_matcher import BoundColorSpec, SpecLike, is_match
from .stabilizer import ColorStabilizer, RetentionPolicy, validate_stability

if TYPE_CHECKING:
    from ..config import ColorSensorConfig


def validate_frequency(frequency: float) -> float:
    if isinstance(frequency, bool) or not isinstance(frequency, (int, float)):
        raise ValueError(f"sample frequency must be a number, got {frequency!r}")
    if frequency < 0:
        raise ValueError(f"sample frequency must be >= 0, got {frequency}")
    return float(frequency)


class ColorSensorController:
    """Stabilized colors, color specs, match events and scans for one sensor.

    ``sample_source`` is a zero-argument callable returning the sensor's
    instantaneous color. With ``sample_frequency == 0`` a sample is taken on
    every ``get_color()``; with a positive frequency a background loop samples
    at that rate and ``get_color()`` only reads the latest stable color. A
    positive frequency needs a running event loop and a real sample source.
    """

    def __init__(
        self,
        sample_source: Optional[SampleSource] = None,
        *,
        stability: int = DEFAULT_STABILITY,
        sample_frequency: float = DEFAULT_SAMPLE_FREQUENCY,
        stability_threshold: float = DEFAULT_STABILITY_THRESHOLD,
        retention: Union[RetentionPolicy, str] = RetentionPolicy.CHANNEL,
        logger: LoggerLike = None,
    ) -> None:
        self._logger = ensure_structured_logger(logger, fallback_name="ColorSensor")
        self._sample_source: SampleSource = sample_source if sample_source is not None else missing_sample_source
        self._sample_frequency = validate_frequency(sample_frequency)
        if self._sample_frequency > 0:
            self._check_autonomous()
        self._registry = EventRegistry(logger=self._logger.getChild("events"))
        self._stabilizer = ColorStabilizer(
            stability,
            threshold=stability_threshold,
            retention=RetentionPolicy(retention),
            on_change=self._on_stable_change,
            logger=self._logger.getChild("stabilizer"),
        )
        self._tasks = AsyncTaskManager("ColorSensorController", logger=self._logger)
        self._spec_ids = itertools.count(1)
        self._sampling_generation = 0
        self._sampling_task: Optional[asyncio.Task] = None
        self._sampling_error: Optional[SampleSourceError] = None

        if self._sample_frequency > 0:
            self._restart_sampling()

    @classmethod
    def from_config(
        cls,
        config: "ColorSensorConfig",
        sample_source: Optional[SampleSource] = None,
        *,
        logger: LoggerLike = None,
    ) -> "ColorSensorController":
        return cls(
            sample_source,
            stability=config.stability,
            sample_frequency=config.sample_frequency,
            stability_threshold=config.stability_threshold,
            retention=config.retention,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Properties

    @property
    def stable_color(self) -> Color:
        """Last published stable color; never takes a sample."""
        return self._stabilizer.stable_color

    @property
    def stability(self) -> int:
        return self._stabilizer.stability

    @property
    def sample_frequency(self) -> float:
        return self._sample_frequency

    @property
    def is_sampling(self) -> bool:
        return self._sampling_task is not None and not self._sampling_task.done()

    @property
    def stabilizer(self) -> ColorStabilizer:
        return self._stabilizer

    @property
    def registry(self) -> EventRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Sampling

    def configure(self, stability: Optional[int] = None, sample_frequency: Optional[float] = None) -> None:
        """Apply new sampling settings and restart the sampling loop.

        Omitted values fall back to 20 samples and 100 Hz. Accumulated windows
        are kept. A loop started by an earlier configuration is not preempted;
        it exits at its next tick.
        """
        stability = CONFIGURE_DEFAULT_STABILITY if stability is None else stability
        frequency = CONFIGURE_DEFAULT_SAMPLE_FREQUENCY if sample_frequency is None else sample_frequency
        validate_stability(stability)
        frequency = validate_frequency(frequency)
        if frequency > 0:
            self._check_autonomous()

        self._stabilizer.stability = stability
        self._sample_frequency = frequency
        self._logger.info("Sampling configured: stability=%d frequency=%.1f Hz", stability, frequency)
        self._restart_sampling()

    def _check_autonomous(self) -> None:
        if not has_running_loop():
            raise RuntimeError("autonomous sampling needs a running event loop; use sample_frequency=0 instead")
        if self._sample_source is missing_sample_source:
            missing_sample_source()

    def start_sampling(self) -> None:
        """(Re)start the background loop for the current positive frequency."""
        if self._sample_frequency <= 0:
            raise RuntimeError("sampling frequency is 0; samples are taken on demand")
        self._check_autonomous()
        self._restart_sampling()

    def _restart_sampling(self) -> None:
        self._sampling_generation += 1
        self._sampling_error = None
        if self._sample_frequency <= 0:
            self._sampling_task = None
            return
        generation = self._sampling_generation
        self._sampling_task = self._tasks.create(
            self._sampling_loop(generation, 1.0 / self._sample_frequency),
            name=f"color-sampling-{generation}",
        )

    async def _sampling_loop(self, generation: int, period: float) -> None:
        self._logger.debug("Sampling loop %d started (period %.3fs)", generation, period)
        while generation == self._sampling_generation:
            try:
                self.collect_sample()
            except SampleSourceError as exc:
                # get_color() re-raises this until sampling is restarted.
                self._sampling_error = exc
                self._logger.error("Sampling loop %d stopped: %s", generation, exc)
                return
            await asyncio.sleep(period)
        self._logger.debug("Sampling loop %d superseded", generation)

    def collect_sample(self) -> Color:
        """Pull one raw sample and feed it to the stabilizer."""
        raw = self._sample_source()
        try:
            sample = Color.coerce(raw)
        except (TypeError, ValueError) as exc:
            raise SampleSourceError(f"sample source returned {raw!r}, not a color") from exc
        self._stabilizer.add_sample(sample)
        return sample

    def _on_stable_change(self, color: Color, previous: Color) -> None:
        invoked = self._registry.dispatch(color)
        if invoked:
            self._logger.debug("%s matched; %d handler(s) invoked", color, invoked)

    def get_color(self) -> Color:
        """Current stable color, sampling first when sampling is on demand.

        Raises the SampleSourceError that stopped the background loop, if any.
        """
        if self._sample_frequency == 0:
            self.collect_sample()
        elif self._sampling_error is not None:
            raise self._sampling_error
        return self._stabilizer.stable_color

    # ------------------------------------------------------------------
    # Specs

    def new_spec(self, region: Union[ColorSpec, Mapping[str, Any]]) -> BoundColorSpec:
        """Wrap a tolerance region so it can be matched and watched."""
        spec_region = region if isinstance(region, ColorSpec) else ColorSpec.from_mapping(region)
        return BoundColorSpec(next(self._spec_ids), spec_region, self.get_color, self._registry.register)

    def is_matching(self, spec: SpecLike) -> bool:
        return is_match(spec, self.get_color())

    # ------------------------------------------------------------------
    # Scans

    def start_scan(self, frequency: float = DEFAULT_SCAN_FREQUENCY) -> ColorScanner[BoundColorSpec]:
        """Start a scan polling the stable color; stop it with ``scan.stop()``."""
        scanner: ColorScanner[BoundColorSpec] = ColorScanner(
            self.get_color,
            spec_factory=self.new_spec,
            task_manager=self._tasks,
            logger=self._logger.getChild("scan"),
        )
        return scanner.start(frequency)

    # ------------------------------------------------------------------
    # Shutdown

    async def aclose(self, *, timeout: float = 2.0) -> bool:
        """Stop background loops and cancel unfinished async handlers."""
        self._sampling_generation += 1
        cancelled = self._registry.cancel_pending()
        if cancelled:
            self._logger.info("Cancelled %d unfinished match handler(s)", cancelled)
        return await self._tasks.shutdown(timeout=timeout)

    async def __aenter__(self) -> "ColorSensorController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = ["ColorSensorController", "validate_frequency"]
