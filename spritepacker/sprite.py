"""
Sprite records and the sheet properties they are packed against.

A PackSprite keeps its original image untouched; cropping, expanding and
scaling always produce a new current image, so a packing run can be repeated
with different options after reset_for_packing().
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from .maxrects import Rectangle

logger = logging.getLogger(__name__)

# Sub-pixel remainder above which a scaled size is rounded up.
SCALE_ROUND_UP_THRESHOLD = 0.1


class ConfigurationError(ValueError):
    """Raised when sheet or input settings prevent a packing run from starting."""


@dataclass
class SheetProperties:
    """Basic sheet data. Packing happens inside the border; padding surrounds each sprite."""
    width: int = 512
    height: int = 512
    padding: int = 2   # added pixel gap around each sprite
    border: int = 2    # border around edges of sheet
    expand: int = 0    # increases sprite size
    extrude: int = 0   # duplicates edge pixels of sprites
    scale: float = 1.0  # sprite scaling (doesn't affect sheet size)

    @property
    def interior_width(self) -> int:
        return self.width - 2 * self.border

    @property
    def interior_height(self) -> int:
        return self.height - 2 * self.border

    def validate(self):
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Sheet size must be positive, got {self.width}×{self.height}")
        for name in ("padding", "border", "expand", "extrude"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Sheet {name} must not be negative, got {getattr(self, name)}")
        if self.scale <= 0:
            raise ConfigurationError(f"Sprite scale must be positive, got {self.scale}")
        if self.interior_width <= 0 or self.interior_height <= 0:
            raise ConfigurationError(
                f"Border {self.border} leaves no packable area on a {self.width}×{self.height} sheet")


def opaque_bounds(img: Image.Image) -> Optional[Tuple[int, int, int, int]]:
    """
    Bounding box (left, top, right, bottom) of all pixels with alpha above zero.
    Images without transparency are fully opaque. Returns None for an entirely
    transparent image.
    """
    if img.mode == 'RGBA':
        alpha = img.getchannel('A')
    elif img.mode == 'LA' or (img.mode == 'P' and 'transparency' in img.info):
        alpha = img.convert('RGBA').getchannel('A')
    else:
        # No alpha, so the whole image counts as opaque
        return 0, 0, img.width, img.height
    return alpha.getbbox()


def scaled_size(size: int, factor: float) -> int:
    """Scale one dimension, rounding up when the remainder would leave a partial pixel."""
    exact = size * factor
    result = int(exact)
    if exact - result > SCALE_ROUND_UP_THRESHOLD:
        result += 1
    return max(result, 1)


class PackSprite:
    """A source image plus its packing state on the sheet."""

    def __init__(self, image: Optional[Image.Image], file_path: str):
        self.file_path = file_path
        self.file_name = os.path.basename(file_path)
        self.base_name = self.file_name.split('.', 1)[0]
        self.original_image = image
        self.image = image
        self.packed_rect = Rectangle()
        self.is_rotated = False
        self.is_cropped = False
        self.is_expanded = False
        self.is_scaled = False

    def __repr__(self):
        return f"PackSprite({self.file_name}, packed={self.packed_rect!r}, rotated={self.is_rotated})"

    @property
    def width(self) -> int:
        return self.image.width if self.image is not None else 0

    @property
    def height(self) -> int:
        return self.image.height if self.image is not None else 0

    def is_valid(self) -> bool:
        """False for a missing or zero-sized image, which can never be packed."""
        return self.image is not None and self.image.width > 0 and self.image.height > 0

    def is_packed(self) -> bool:
        return not self.packed_rect.is_empty()

    def reset_for_packing(self):
        """Clear placement, rotation and provenance, and restore the original image."""
        self.packed_rect = Rectangle()
        self.is_rotated = False
        self.restore_original_image()

    def restore_original_image(self):
        self.image = self.original_image
        self.is_cropped = False
        self.is_expanded = False
        self.is_scaled = False

    def crop_image(self):
        """Crop the current image to its opaque bounding area."""
        if not self.is_valid():
            return
        bbox = opaque_bounds(self.image)
        # Fully transparent images are left alone
        if bbox is None:
            return
        left, top, right, bottom = bbox
        if right - left < self.image.width or bottom - top < self.image.height:
            self.image = self.image.crop(bbox)
            self.is_cropped = True
            logger.debug("%s cropped to %d×%d", self.file_name, self.image.width, self.image.height)

    def expand_image(self, npixels: int = 0):
        """Grow the current image by npixels of transparency on every side."""
        if npixels <= 0 or not self.is_valid():
            return
        src = self.image if self.image.mode == 'RGBA' else self.image.convert('RGBA')
        expanded = Image.new('RGBA', (src.width + 2 * npixels, src.height + 2 * npixels), (0, 0, 0, 0))
        expanded.paste(src, (npixels, npixels))
        self.image = expanded
        self.is_expanded = True

    def scale_image(self, factor: float):
        if factor <= 0 or not self.is_valid():
            return
        new_size = (scaled_size(self.image.width, factor), scaled_size(self.image.height, factor))
        if new_size == self.image.size:
            return
        self.image = self.image.resize(new_size, Image.Resampling.LANCZOS)
        self.is_scaled = True

    def preprocess(self, crop: bool = False, expand: int = 0, scale: float = 1.0):
        """Last chance to modify the image before it is packed: crop, then expand, then scale."""
        if crop:
            self.crop_image()
        self.expand_image(expand)
        self.scale_image(scale)
