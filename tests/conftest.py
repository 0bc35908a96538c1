"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil

from perfguard.core.config import PerformanceConfig
from perfguard.core.events import EventBus
from perfguard.control.engine import DecisionEngine
from tests.fixtures.mock_services import (
    FakeClock,
    MockActuator,
    FakeRecoveryScheduler,
)


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def perf_config():
    """Default thresholds (minFPS=25, tolerance=3, dwell 5000ms)."""
    return PerformanceConfig()


@pytest.fixture
def clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def actuator():
    return MockActuator()


@pytest.fixture
def scheduler():
    return FakeRecoveryScheduler()


@pytest.fixture
def engine(perf_config, actuator, clock, scheduler):
    """Active engine bound to a mock actuator and a loop-free scheduler."""
    engine = DecisionEngine(
        perf_config,
        actuator=actuator,
        clock=clock,
        scheduler=scheduler,
    )
    engine.activate()
    return engine


@pytest.fixture
async def event_bus():
    """Create and start event bus."""
    bus = EventBus()
    await bus.start()
    yield bus
    await bus.stop()
