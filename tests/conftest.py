"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from craftstudio.models import AngleRequest, DesignParameters, ImageAsset
from tests.fixtures.fakes import FakeImageProvider, FakeReasoner, make_asset


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def params() -> DesignParameters:
    return DesignParameters(theme="Spring", style="Minimal", color="Pastel", material="Canvas")


@pytest.fixture
def top_template() -> ImageAsset:
    return make_asset("top-template")


@pytest.fixture
def two_angles() -> AngleRequest:
    return AngleRequest.of("top", "45degree")


@pytest.fixture
def reasoner() -> FakeReasoner:
    return FakeReasoner()


@pytest.fixture
def image_provider() -> FakeImageProvider:
    return FakeImageProvider()
