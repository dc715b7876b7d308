import os

os.environ.setdefault("MPLBACKEND", "Agg")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QCoreApplication

from springforming.model.process import EndType, SpringProcessInput


@pytest.fixture(scope="session", autouse=True)
def qt_core_app():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def scenario_a() -> SpringProcessInput:
    """8 active of 10 total coils: one closed coil on each end."""
    return SpringProcessInput(
        wire_diameter=2.0,
        mean_diameter=16.0,
        active_coils=8,
        total_coils=10,
        pitch=4.0,
        end_type=EndType.CLOSED,
        feed_speed=50.0,
    )


@pytest.fixture
def scenario_b() -> SpringProcessInput:
    """No closed coils at all."""
    return SpringProcessInput(
        wire_diameter=2.0,
        mean_diameter=16.0,
        active_coils=10,
        total_coils=10,
        pitch=4.0,
        end_type=EndType.OPEN,
        feed_speed=50.0,
    )
