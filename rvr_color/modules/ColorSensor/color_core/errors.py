"""Exceptions raised by the color sensor core."""


class ColorSensorError(Exception):
    """Base class for color sensor failures."""


class SampleSourceError(ColorSensorError, RuntimeError):
    """The raw sample source is missing or returned something unusable."""


class EmptyWindowError(ColorSensorError, ValueError):
    """Statistics were requested over zero samples."""


class HandlerLoopError(ColorSensorError, RuntimeError):
    """An async match handler was dispatched with no running event loop."""
