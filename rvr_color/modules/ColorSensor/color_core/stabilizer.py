"""Rolling-window debouncer that turns raw samples into a stable color.

Every raw sample is appended to a window together with the running average
of that window. Once ``stability`` averages have accumulated, their
standard deviation decides whether the averages have settled:

* settled channels take the rounded running average,
* unsettled channels keep the previously published value
  (``RetentionPolicy.CHANNEL``), or, with ``RetentionPolicy.COLOR``, a single
  unsettled channel keeps the whole previous color.

After each decision both windows are trimmed to their newest
``stability - 1`` entries, so the next sample triggers the next decision.
Listeners are notified only when the published color actually changes.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Optional

from rvr_color.core.logging_utils import LoggerLike, ensure_structured_logger

from .color_types import ChannelStats, Color, OFF, round_half_up
from .constants import DEFAULT_STABILITY, DEFAULT_STABILITY_THRESHOLD
from .statistics import average, standard_deviation

ChangeListener = Callable[[Color, Color], None]


class RetentionPolicy(str, enum.Enum):
    """What an unsettled window keeps from the previous stable color."""

    CHANNEL = "channel"
    COLOR = "color"


def validate_stability(stability: int) -> int:
    if isinstance(stability, bool) or not isinstance(stability, int):
        raise ValueError(f"stability must be an integer, got {stability!r}")
    if stability < 1:
        raise ValueError(f"stability must be >= 1, got {stability}")
    return stability


class ColorStabilizer:

    def __init__(
        self,
        stability: int = DEFAULT_STABILITY,
        *,
        threshold: float = DEFAULT_STABILITY_THRESHOLD,
        retention: RetentionPolicy = RetentionPolicy.CHANNEL,
        on_change: Optional[ChangeListener] = None,
        logger: LoggerLike = None,
    ) -> None:
        if threshold <= 0:
            raise ValueError(f"stability threshold must be positive, got {threshold}")
        self._stability = validate_stability(stability)
        self._threshold = float(threshold)
        self._retention = RetentionPolicy(retention)
        self._on_change = on_change
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)

        self._raw: list[Color] = []
        self._averages: list[ChannelStats] = []
        self._stable: Color = OFF
        self._sample_count = 0

    @property
    def stable_color(self) -> Color:
        return self._stable

    @property
    def stability(self) -> int:
        return self._stability

    @stability.setter
    def stability(self, value: int) -> None:
        # Windows are kept; a smaller value trims them at the next decision.
        self._stability = validate_stability(value)

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def retention(self) -> RetentionPolicy:
        return self._retention

    @property
    def window_length(self) -> int:
        return len(self._averages)

    @property
    def sample_count(self) -> int:
        return self._sample_count

    def set_listener(self, listener: Optional[ChangeListener]) -> None:
        self._on_change = listener

    def reset(self) -> None:
        self._raw.clear()
        self._averages.clear()
        self._stable = OFF
        self._sample_count = 0

    def add_sample(self, sample: Color) -> bool:
        """Feed one raw sample. Returns True when the stable color changed."""
        self._sample_count += 1
        self._raw.append(sample)
        current = average(self._raw)
        self._averages.append(current)

        if len(self._averages) < self._stability:
            return False

        deviation = standard_deviation(self._averages)
        candidate = self._decide(current, deviation)

        keep = self._stability - 1
        del self._raw[: len(self._raw) - keep]
        del self._averages[: len(self._averages) - keep]

        if candidate == self._stable:
            return False
        return self._publish(candidate)

    def _decide(self, current: ChannelStats, deviation: ChannelStats) -> Color:
        previous = self._stable
        if self._retention is RetentionPolicy.COLOR:
            if deviation.all_below(self._threshold):
                return current.rounded()
            self._logger.debug("Window unsettled (std %s); keeping %s", deviation.as_tuple(), previous)
            return previous

        threshold = self._threshold
        return Color(
            round_half_up(current.r) if deviation.r < threshold else previous.r,
            round_half_up(current.g) if deviation.g < threshold else previous.g,
            round_half_up(current.b) if deviation.b < threshold else previous.b,
        )

    def _publish(self, color: Color) -> bool:
        previous, self._stable = self._stable, color
        self._logger.debug("Stable color %s -> %s after %d samples", previous, color, self._sample_count)
        if self._on_change is not None:
            self._on_change(color, previous)
        return True


__all__ = ["ColorStabilizer", "RetentionPolicy", "validate_stability"]
