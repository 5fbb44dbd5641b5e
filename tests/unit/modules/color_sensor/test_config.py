"""Unit tests for ColorSensorConfig."""

import argparse
from pathlib import Path

import pytest

from rvr_color.modules.ColorSensor import ColorSensorConfig
from rvr_color.modules.ColorSensor.color_core import RetentionPolicy


class TestFromConfig:

    def test_defaults(self):
        config = ColorSensorConfig.from_config({})

        assert config.stability == 1
        assert config.sample_frequency == 0.0
        assert config.stability_threshold == 3.0
        assert config.retention_policy is RetentionPolicy.CHANNEL
        assert config.scan_frequency == 10.0
        assert config.log_level == "info"
        assert config.console_output is True
        assert config.log_file is None

    def test_parsed_values(self):
        config = ColorSensorConfig.from_config({
            "stability": "20",
            "sample_frequency": "100",
            "stability_threshold": "2.5",
            "retention": "COLOR",
            "scan_frequency": "5",
            "log_level": "debug",
            "console_output": "false",
            "log_file": "/tmp/rvr/color.log",
        })

        assert config.stability == 20
        assert config.sample_frequency == 100.0
        assert config.stability_threshold == 2.5
        assert config.retention_policy is RetentionPolicy.COLOR
        assert config.scan_frequency == 5.0
        assert config.log_level == "debug"
        assert config.console_output is False
        assert config.log_file == Path("/tmp/rvr/color.log")

    @pytest.mark.parametrize(
        "key,value,attr,expected",
        [
            ("stability", "0", "stability", 1),
            ("stability", "many", "stability", 1),
            ("sample_frequency", "-1", "sample_frequency", 0.0),
            ("stability_threshold", "0", "stability_threshold", 3.0),
            ("retention", "pixel", "retention", "channel"),
            ("scan_frequency", "0", "scan_frequency", 10.0),
            ("log_level", "loud", "log_level", "info"),
        ],
    )
    def test_invalid_values_fall_back(self, key, value, attr, expected):
        config = ColorSensorConfig.from_config({key: value})
        assert getattr(config, attr) == expected


class TestFromFile:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert ColorSensorConfig.from_file(tmp_path / "missing.txt") == ColorSensorConfig()

    def test_reads_file(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("# comment\nstability = 5  # window\nretention = 'color'\n", encoding="utf-8")

        config = ColorSensorConfig.from_file(path)

        assert config.stability == 5
        assert config.retention == "color"

    @pytest.mark.asyncio
    async def test_reads_file_async(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("scan_frequency = 25\n", encoding="utf-8")

        config = await ColorSensorConfig.from_file_async(path)

        assert config.scan_frequency == 25.0

    def test_project_config_matches_defaults(self, project_root):
        assert ColorSensorConfig.from_file(project_root / "config.txt") == ColorSensorConfig()


class TestOverrides:

    def test_none_values_are_ignored(self):
        args = argparse.Namespace(stability=None, retention="color", log_level=None, unrelated="x")
        config = ColorSensorConfig(stability=4).apply_args_override(args)

        assert config.stability == 4
        assert config.retention == "color"
        assert config.log_level == "info"

    def test_to_dict(self):
        data = ColorSensorConfig().to_dict()
        assert data["stability"] == 1
        assert data["retention"] == "channel"
