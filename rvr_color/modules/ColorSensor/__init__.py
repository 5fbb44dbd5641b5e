"""RVR color sensor module."""

from .color_core import ColorSensorController
from .config import ColorSensorConfig

__all__ = ["ColorSensorConfig", "ColorSensorController"]
