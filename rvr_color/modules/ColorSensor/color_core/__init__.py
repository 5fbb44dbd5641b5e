"""Color sensor core - stabilization, specs, match events and scans."""

from .color_types import OFF, ChannelStats, Color, ColorSpec, ToleranceChannel, round_half_up
from .constants import (
    CONFIGURE_DEFAULT_SAMPLE_FREQUENCY,
    CONFIGURE_DEFAULT_STABILITY,
    DEFAULT_SAMPLE_FREQUENCY,
    DEFAULT_SCAN_FREQUENCY,
    DEFAULT_STABILITY,
    DEFAULT_STABILITY_THRESHOLD,
)
from .controller import ColorSensorController
from .errors import ColorSensorError, EmptyWindowError, HandlerLoopError, SampleSourceError
from .event_registry import CompletionToken, EventRegistry, HandlerRecord
from .scanner import ChannelRange, ColorScanner, ScanPhase
from .sources import SequenceSampleSource, load_samples_csv, missing_sample_source
from .spec_matcher import BoundColorSpec, is_match
from .stabilizer import ColorStabilizer, RetentionPolicy
from .statistics import average, standard_deviation

__all__ = [
    # Constants
    "CONFIGURE_DEFAULT_SAMPLE_FREQUENCY",
    "CONFIGURE_DEFAULT_STABILITY",
    "DEFAULT_SAMPLE_FREQUENCY",
    "DEFAULT_SCAN_FREQUENCY",
    "DEFAULT_STABILITY",
    "DEFAULT_STABILITY_THRESHOLD",
    # Types
    "OFF",
    "ChannelStats",
    "Color",
    "ColorSpec",
    "ToleranceChannel",
    "round_half_up",
    # Errors
    "ColorSensorError",
    "EmptyWindowError",
    "HandlerLoopError",
    "SampleSourceError",
    # Statistics
    "average",
    "standard_deviation",
    # Components
    "ColorStabilizer",
    "RetentionPolicy",
    "BoundColorSpec",
    "is_match",
    "CompletionToken",
    "EventRegistry",
    "HandlerRecord",
    "ChannelRange",
    "ColorScanner",
    "ScanPhase",
    # Sources
    "SequenceSampleSource",
    "load_samples_csv",
    "missing_sample_source",
    # Facade
    "ColorSensorController",
]
