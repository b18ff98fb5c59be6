"""
Pytest configuration and fixtures for chat request tests.
"""

import sys
from pathlib import Path

import pytest

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from chat_request.application.image_materializer import ImageMaterializer
from chat_request.application.turn_builder import TurnBuilder
from chat_request.core.config import get_settings
from chat_request.dependencies import clear_image_resizers
from chat_request.infrastructure.asset_store import InMemoryAssetStore
from tests.helpers import FakeResizer, RecordingEventLogger, make_image_base64


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Make every test see settings and shared resizers built from its own environment."""
    get_settings.cache_clear()
    clear_image_resizers()
    yield
    get_settings.cache_clear()
    clear_image_resizers()


@pytest.fixture
def png_base64() -> str:
    """A small 100x100 PNG image."""
    return make_image_base64((100, 100))


@pytest.fixture
def large_png_base64() -> str:
    """A 1024x768 PNG image, larger than the low-res policy box."""
    return make_image_base64((1024, 768), color=(0, 0, 255))


@pytest.fixture
def asset_store() -> InMemoryAssetStore:
    return InMemoryAssetStore()


@pytest.fixture
def events() -> RecordingEventLogger:
    return RecordingEventLogger()


@pytest.fixture
def fake_resizer() -> FakeResizer:
    """Resizer that reports every image as already within bounds."""
    return FakeResizer(result=None)


@pytest.fixture
def materializer(asset_store, fake_resizer, events) -> ImageMaterializer:
    return ImageMaterializer(asset_store, fake_resizer, events=events)


@pytest.fixture
def turn_builder(materializer, events) -> TurnBuilder:
    return TurnBuilder(materializer, events=events)
