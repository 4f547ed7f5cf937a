"""Shared fixtures for levelcard tests."""

import io

import pytest
from PIL import Image

from levelcard.config import Settings
from levelcard.models.user import UserData
from levelcard.workers.avatar import AvatarResolver
from levelcard.workers.card_renderer import CardRenderer
from levelcard.workers.encoder import CardEncoder
from levelcard.workers.fonts import FontResolver


def make_png(size=(64, 64), color=(0, 0, 255, 255)) -> bytes:
    """Encode a solid-color image as PNG."""
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def avatar_png():
    """A small solid blue PNG avatar."""
    return make_png()


@pytest.fixture
def png_factory():
    """Build PNG bytes of a given size and color."""
    return make_png


@pytest.fixture
def corrupt_bytes():
    """Bytes that are not any image format."""
    return b"this is not an image"


@pytest.fixture
def test_settings():
    """Settings isolated from the environment's font directories."""
    return Settings(font_search_dirs=[], fonts_dir=None)


@pytest.fixture
def user(avatar_png):
    """A user halfway through level 5."""
    return UserData(
        username="Steve",
        rank=3,
        level=5,
        min_xp=0,
        max_xp=1000,
        current_xp=500,
        avatar_bytes=avatar_png,
    )


@pytest.fixture
def renderer(test_settings):
    """A card renderer with its own avatar resolver."""
    with AvatarResolver(settings=test_settings) as avatars:
        yield CardRenderer(avatars, FontResolver(test_settings), CardEncoder())
