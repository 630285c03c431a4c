# tests/conftest.py

"""Shared pytest fixtures for all price_scout tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry loops run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def production_mode() -> Generator[None, None, None]:
    """Pin deployment switches so a local .env cannot leak into tests."""
    with (
        patch.object(Settings, "DEMO_MODE", False),
        patch.object(Settings, "RESOURCE_CONSTRAINED", False),
        patch.object(Settings, "RENDERING_ENABLED", True),
    ):
        yield
