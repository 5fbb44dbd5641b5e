"""Channel-wise mean and population standard deviation over colors."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Union

import numpy as np

from .color_types import ChannelStats, Color
from .errors import EmptyWindowError

ChannelTriple = Union[Color, ChannelStats]


def _as_matrix(colors: Sequence[ChannelTriple]) -> np.ndarray:
    if len(colors) == 0:
        raise EmptyWindowError("statistics need at least one color")
    return np.array([c.as_tuple() for c in colors], dtype=np.float64)


def _stats(values: np.ndarray) -> ChannelStats:
    r, g, b = (float(v) for v in values)
    return ChannelStats(r, g, b)


def average(colors: Sequence[ChannelTriple]) -> ChannelStats:
    """Arithmetic mean of each channel. Raises EmptyWindowError on no input."""
    return _stats(_as_matrix(colors).mean(axis=0))


def standard_deviation(colors: Sequence[ChannelTriple]) -> ChannelStats:
    """Population standard deviation (divides by N) of each channel."""
    return _stats(_as_matrix(colors).std(axis=0, ddof=0))


__all__ = ["average", "standard_deviation"]
