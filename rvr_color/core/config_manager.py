"""Reader for the plain ``key = value`` configuration files."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Iterable, Mapping

import aiofiles

from .logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

_TRUE_VALUES = ('true', '1', 'yes', 'on')


class ConfigManager:

    def __init__(self):
        self.logger = logger

    # ------------------------------------------------------------------
    # Parsing

    def _parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if '#' in value:
                value = value.split('#')[0].strip()

            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]

            config[key] = value

        return config

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read a config file; a missing or unreadable file yields ``{}``."""
        config_path = Path(config_path)
        if not config_path.exists():
            logger.debug("Config %s not found; using defaults", config_path)
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return self._parse_config_lines(f)
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async version for use in async contexts."""
        config_path = Path(config_path)
        if not await asyncio.to_thread(config_path.exists):
            logger.debug("Config %s not found; using defaults", config_path)
            return {}

        try:
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                lines = await f.readlines()
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}
        return self._parse_config_lines(lines)

    # ------------------------------------------------------------------
    # Typed getters

    def get_bool(self, config: Mapping[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        return str(config[key]).strip().lower() in _TRUE_VALUES

    def get_int(self, config: Mapping[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default

        try:
            return int(config[key])
        except (TypeError, ValueError):
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_float(self, config: Mapping[str, str], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default

        try:
            return float(config[key])
        except (TypeError, ValueError):
            logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    def get_str(self, config: Mapping[str, str], key: str, default: str = "") -> str:
        value = config.get(key)
        return default if value is None else str(value)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager


__all__ = ["ConfigManager", "get_config_manager"]
