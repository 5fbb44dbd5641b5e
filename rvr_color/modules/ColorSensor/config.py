"""Typed configuration for the color sensor module."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from rvr_color.core.config_manager import get_config_manager
from rvr_color.core.logging_config import LOG_LEVELS
from rvr_color.core.logging_utils import get_module_logger
from rvr_color.core.paths import resolve_config_path

from .color_core.constants import (
    DEFAULT_SAMPLE_FREQUENCY,
    DEFAULT_SCAN_FREQUENCY,
    DEFAULT_STABILITY,
    DEFAULT_STABILITY_THRESHOLD,
)
from .color_core.stabilizer import RetentionPolicy

logger = get_module_logger(__name__)


@dataclass(slots=True)
class ColorSensorConfig:
    """Typed configuration for the color sensor module."""

    # Stabilizer
    stability: int = DEFAULT_STABILITY
    sample_frequency: float = DEFAULT_SAMPLE_FREQUENCY
    stability_threshold: float = DEFAULT_STABILITY_THRESHOLD
    retention: str = RetentionPolicy.CHANNEL.value

    # Scanner
    scan_frequency: float = DEFAULT_SCAN_FREQUENCY

    # Logging
    log_level: str = "info"
    console_output: bool = True
    log_file: Optional[Path] = None

    @property
    def retention_policy(self) -> RetentionPolicy:
        return RetentionPolicy(self.retention)

    @classmethod
    def from_config(cls, values: Mapping[str, str]) -> "ColorSensorConfig":
        """Build config from parsed ``key = value`` pairs.

        Out-of-range values are replaced by their defaults with a warning.
        """
        manager = get_config_manager()
        defaults = cls()

        stability = manager.get_int(values, "stability", defaults.stability)
        if stability < 1:
            logger.warning("stability must be >= 1, got %d; using %d", stability, defaults.stability)
            stability = defaults.stability

        sample_frequency = manager.get_float(values, "sample_frequency", defaults.sample_frequency)
        if sample_frequency < 0:
            logger.warning("sample_frequency must be >= 0, got %s; using %s", sample_frequency, defaults.sample_frequency)
            sample_frequency = defaults.sample_frequency

        threshold = manager.get_float(values, "stability_threshold", defaults.stability_threshold)
        if threshold <= 0:
            logger.warning("stability_threshold must be positive, got %s; using %s", threshold, defaults.stability_threshold)
            threshold = defaults.stability_threshold

        retention = manager.get_str(values, "retention", defaults.retention).strip().lower()
        if retention not in {policy.value for policy in RetentionPolicy}:
            logger.warning("Unknown retention policy %r; using %r", retention, defaults.retention)
            retention = defaults.retention

        scan_frequency = manager.get_float(values, "scan_frequency", defaults.scan_frequency)
        if scan_frequency <= 0:
            logger.warning("scan_frequency must be positive, got %s; using %s", scan_frequency, defaults.scan_frequency)
            scan_frequency = defaults.scan_frequency

        log_level = manager.get_str(values, "log_level", defaults.log_level).strip().lower()
        if log_level not in LOG_LEVELS:
            logger.warning("Unknown log level %r; using %r", log_level, defaults.log_level)
            log_level = defaults.log_level

        log_file = manager.get_str(values, "log_file", "").strip()

        return cls(
            stability=stability,
            sample_frequency=sample_frequency,
            stability_threshold=threshold,
            retention=retention,
            scan_frequency=scan_frequency,
            log_level=log_level,
            console_output=manager.get_bool(values, "console_output", defaults.console_output),
            log_file=Path(log_file).expanduser() if log_file else None,
        )

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "ColorSensorConfig":
        config_path = Path(path) if path is not None else resolve_config_path()
        return cls.from_config(get_config_manager().read_config(config_path))

    @classmethod
    async def from_file_async(cls, path: Optional[Union[str, Path]] = None) -> "ColorSensorConfig":
        config_path = Path(path) if path is not None else resolve_config_path()
        return cls.from_config(await get_config_manager().read_config_async(config_path))

    def apply_args_override(self, args: Any) -> "ColorSensorConfig":
        """Apply CLI argument overrides (attributes left as None are ignored)."""
        overrides = {}
        for name in ("stability", "sample_frequency", "stability_threshold", "retention",
                     "scan_frequency", "log_level", "console_output", "log_file"):
            value = getattr(args, name, None)
            if value is not None:
                overrides[name] = value
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        return asdict(self)


__all__ = ["ColorSensorConfig"]
