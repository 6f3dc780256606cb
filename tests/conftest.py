"""Shared fixtures"""

import pytest

from tests.mock_upstream import UpstreamStub


@pytest.fixture
def stub() -> UpstreamStub:
    """Fresh in-memory Hue bridge, weather API and quote page"""
    return UpstreamStub()
