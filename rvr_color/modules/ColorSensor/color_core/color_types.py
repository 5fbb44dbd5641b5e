"""Value types for colors, tolerance regions and channel statistics."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .constants import CHANNELS


def round_half_up(value: float) -> int:
    """Round like JavaScript's ``Math.round``: halves go towards +infinity."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class Color:
    """An RGB reading; channels are expected in 0-255 but not clamped."""

    r: int = 0
    g: int = 0
    b: int = 0

    @classmethod
    def coerce(cls, value: "ColorLike") -> "Color":
        """Build a Color from a Color, an r/g/b mapping or a 3-item sequence."""
        if isinstance(value, Color):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(int(value["r"]), int(value["g"]), int(value["b"]))
            except KeyError as exc:
                raise TypeError(f"color mapping is missing channel {exc.args[0]!r}") from None
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 3:
            r, g, b = value
            return cls(int(r), int(g), int(b))
        raise TypeError(f"cannot interpret {value!r} as a color")

    def is_off(self) -> bool:
        """True for the all-zero reading the sensor reports at start-up."""
        return self.r == 0 and self.g == 0 and self.b == 0

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_dict(self) -> dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b}

    def __str__(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


ColorLike = Union[Color, Mapping[str, Any], Sequence[int]]

OFF = Color(0, 0, 0)


@dataclass(frozen=True, slots=True)
class ChannelStats:
    """Per-channel floating point result of a statistic over colors."""

    r: float
    g: float
    b: float

    def rounded(self) -> Color:
        return Color(round_half_up(self.r), round_half_up(self.g), round_half_up(self.b))

    def all_below(self, threshold: float) -> bool:
        return self.r < threshold and self.g < threshold and self.b < threshold

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True, slots=True)
class ToleranceChannel:
    """Inclusive range ``[value - tolerance, value + tolerance]`` on one channel."""

    value: int
    tolerance: int = 0

    def __post_init__(self) -> None:
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")

    @classmethod
    def coerce(cls, value: Any) -> "ToleranceChannel":
        if isinstance(value, ToleranceChannel):
            return value
        if isinstance(value, Mapping):
            return cls(int(value["value"]), int(value.get("tolerance", 0)))
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 2:
            return cls(int(value[0]), int(value[1]))
        raise TypeError(f"cannot interpret {value!r} as a tolerance channel")

    @property
    def low(self) -> int:
        return self.value - self.tolerance

    @property
    def high(self) -> int:
        return self.value + self.tolerance

    def contains(self, channel_value: float) -> bool:
        return self.low <= channel_value <= self.high

    def to_dict(self) -> dict[str, int]:
        return {"value": self.value, "tolerance": self.tolerance}


@dataclass(frozen=True, slots=True)
class ColorSpec:
    """A tolerance region: one ToleranceChannel per color channel."""

    r: ToleranceChannel
    g: ToleranceChannel
    b: ToleranceChannel

    @classmethod
    def from_mapping(cls, region: Mapping[str, Any]) -> "ColorSpec":
        """Build from ``{"r": {"value": .., "tolerance": ..}, "g": .., "b": ..}``."""
        if isinstance(region, ColorSpec):
            return region
        missing = [name for name in CHANNELS if name not in region]
        if missing:
            raise ValueError(f"color spec is missing channel(s): {', '.join(missing)}")
        return cls(*(ToleranceChannel.coerce(region[name]) for name in CHANNELS))

    @classmethod
    def around(cls, color: ColorLike, tolerance: int = 0) -> "ColorSpec":
        """Region centred on ``color`` with the same tolerance on every channel."""
        c = Color.coerce(color)
        return cls(
            ToleranceChannel(c.r, tolerance),
            ToleranceChannel(c.g, tolerance),
            ToleranceChannel(c.b, tolerance),
        )

    def contains(self, color: Color) -> bool:
        return self.r.contains(color.r) and self.g.contains(color.g) and self.b.contains(color.b)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"r": self.r.to_dict(), "g": self.g.to_dict(), "b": self.b.to_dict()}


__all__ = [
    "ChannelStats",
    "Color",
    "ColorLike",
    "ColorSpec",
    "OFF",
    "ToleranceChannel",
    "round_half_up",
]
