"""Pytest configuration for stochray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    import stochray

    stochray.init(arch=ti.cpu, seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_device_scene():
    """Clear every device-side registry before and after each test."""
    # Field-bearing modules must be imported after the runtime is initialized
    from stochray.scene.world import reset_device_scene

    reset_device_scene()
    yield
    reset_device_scene()
