import pytest
from PIL import Image

from spritepacker.sprite import PackSprite

RED = (255, 0, 0, 255)


@pytest.fixture
def make_sprite():
    """Factory for sprites backed by a solid RGBA image."""
    def _make(width, height, name=None, color=RED):
        img = Image.new('RGBA', (width, height), color)
        return PackSprite(img, name or f"sprite_{width}x{height}.png")
    return _make


