"""
Loads sprite images from a folder and orders them for packing.
"""
import enum
import logging
import os
from typing import List

from PIL import Image, UnidentifiedImageError

from .sprite import ConfigurationError, PackSprite

logger = logging.getLogger(__name__)


class SortOrder(enum.Enum):
    NAME = 1    # ascending file name
    AREA = 2    # descending area
    WIDTH = 3   # descending width
    HEIGHT = 4  # descending height


def load_sprites(input_dir: str) -> List[PackSprite]:
    """Open every readable image in the folder (subfolders are ignored)."""
    if not os.path.isdir(input_dir):
        raise ConfigurationError(f"Could not open the input folder: {input_dir}")

    sprites = []
    # We could check extensions, but instead we just try to open everything
    for file in sorted(os.listdir(input_dir)):
        full_path = os.path.join(input_dir, file)
        if not os.path.isfile(full_path):
            continue
        try:
            with Image.open(full_path) as img:
                img.load()
                # Keep palette transparency as real alpha for cropping
                if img.mode not in ('RGBA', 'RGB', 'L', 'LA'):
                    img = img.convert('RGBA')
                else:
                    img = img.copy()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning("Skipping %s: %s", file, e)
            continue
        sprites.append(PackSprite(img, full_path))

    logger.info("Loaded %d sprites from %s", len(sprites), input_dir)
    return sprites


def sort_sprites(sprites: List[PackSprite], order: SortOrder) -> List[PackSprite]:
    """Return a new list in the requested packing order. Ties keep their current order."""
    if order == SortOrder.NAME:
        return sorted(sprites, key=lambda s: s.file_name)
    if order == SortOrder.AREA:
        return sorted(sprites, key=lambda s: s.original_image.width * s.original_image.height
                      if s.original_image is not None else 0, reverse=True)
    if order == SortOrder.WIDTH:
        return sorted(sprites, key=lambda s: s.original_image.width
                      if s.original_image is not None else 0, reverse=True)
    if order == SortOrder.HEIGHT:
        return sorted(sprites, key=lambda s: s.original_image.height
                      if s.original_image is not None else 0, reverse=True)
    raise ValueError(f"Unsupported sort order: {order}")
