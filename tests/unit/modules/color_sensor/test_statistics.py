"""Unit tests for channel-wise statistics."""

import math

import pytest

from rvr_color.modules.ColorSensor.color_core import (
    ChannelStats,
    Color,
    EmptyWindowError,
    average,
    standard_deviation,
)


class TestAverage:
    """Tests for average()."""

    def test_single_color(self):
        assert average([Color(10, 20, 30)]) == ChannelStats(10.0, 20.0, 30.0)

    def test_identical_colors(self):
        colors = [Color(100, 101, 99)] * 7
        assert average(colors) == ChannelStats(100.0, 101.0, 99.0)

    def test_fractional_mean(self):
        result = average([Color(1, 40, 101), Color(2, 45, 101)])
        assert result == ChannelStats(1.5, 42.5, 101.0)

    def test_accepts_channel_stats(self):
        result = average([ChannelStats(1.0, 2.0, 3.0), ChannelStats(3.0, 4.0, 5.0)])
        assert result == ChannelStats(2.0, 3.0, 4.0)

    def test_empty_input_fails_fast(self):
        with pytest.raises(EmptyWindowError):
            average([])

    def test_empty_window_error_is_value_error(self):
        with pytest.raises(ValueError):
            average([])


class TestStandardDeviation:
    """Tests for standard_deviation()."""

    def test_identical_colors_have_zero_deviation(self):
        colors = [Color(255, 0, 17)] * 5
        assert standard_deviation(colors) == ChannelStats(0.0, 0.0, 0.0)

    def test_single_color_has_zero_deviation(self):
        assert standard_deviation([Color(1, 2, 3)]) == ChannelStats(0.0, 0.0, 0.0)

    def test_population_not_sample_deviation(self):
        # Population std of [0, 2] is 1; the N-1 sample std would be sqrt(2).
        result = standard_deviation([Color(0, 0, 0), Color(2, 4, 0)])
        assert result.r == pytest.approx(1.0)
        assert result.g == pytest.approx(2.0)
        assert result.b == pytest.approx(0.0)

    def test_known_values(self):
        colors = [Color(2, 0, 0), Color(4, 0, 0), Color(4, 0, 0), Color(4, 0, 0),
                  Color(5, 0, 0), Color(5, 0, 0), Color(7, 0, 0), Color(9, 0, 0)]
        assert standard_deviation(colors).r == pytest.approx(2.0)

    def test_channels_are_independent(self):
        result = standard_deviation([Color(0, 10, 5), Color(10, 10, 5)])
        assert result.r == pytest.approx(5.0)
        assert result.g == 0.0
        assert result.b == 0.0

    def test_returns_plain_floats(self):
        result = standard_deviation([Color(0, 1, 2), Color(3, 4, 8)])
        assert all(type(value) is float for value in result.as_tuple())
        assert not any(math.isnan(value) for value in result.as_tuple())

    def test_empty_input_fails_fast(self):
        with pytest.raises(EmptyWindowError):
            standard_deviation([])
