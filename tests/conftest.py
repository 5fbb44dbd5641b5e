"""Shared pytest configuration and fixtures for the color sensor test suite."""

import sys
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rvr_color.modules.ColorSensor.color_core import ColorSensorController, SequenceSampleSource  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def test_data_dir() -> Path:
    """Return the test fixtures directory."""
    return PROJECT_ROOT / "tests" / "infrastructure" / "fixtures"


@pytest.fixture
def grey_to_red_csv(test_data_dir) -> Path:
    """101 recorded samples: noisy grey with glitches, then noisy red."""
    return test_data_dir / "grey_to_red.csv"


@pytest.fixture
def scan_surface_csv(test_data_dir) -> Path:
    """An off reading followed by three readings of one surface."""
    return test_data_dir / "scan_surface.csv"


@pytest.fixture
def sequence_source() -> Callable[..., SequenceSampleSource]:
    """Factory for replaying sample sources."""

    def _factory(samples: Iterable, fallback: Optional[tuple] = None) -> SequenceSampleSource:
        return SequenceSampleSource(samples, fallback=fallback)

    return _factory


@pytest.fixture
def constant_controller() -> Callable[[tuple], ColorSensorController]:
    """Factory for on-demand controllers whose sensor always reads one color."""

    def _factory(color: tuple, **kwargs) -> ColorSensorController:
        return ColorSensorController(lambda: color, **kwargs)

    return _factory
