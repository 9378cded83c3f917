"""
Renders the packed sprites to a sheet image.
"""
import logging
from typing import List

from PIL import Image

from .exporter import export_rect
from .sprite import PackSprite, SheetProperties

logger = logging.getLogger(__name__)


def sprite_sheet_image(sprite: PackSprite) -> Image.Image:
    """The sprite's current image as drawn on the sheet (rotated 90° clockwise if the packer rotated it)."""
    if sprite.is_rotated:
        return sprite.image.transpose(Image.Transpose.ROTATE_270)
    return sprite.image


def extrude_edges(sheet_img: Image.Image, img: Image.Image, x: int, y: int, extrude: int):
    """Stretch the outermost pixel rows and columns of img outwards by extrude pixels."""
    w, h = img.size
    top = img.crop((0, 0, w, 1)).resize((w, extrude), Image.Resampling.NEAREST)
    bottom = img.crop((0, h - 1, w, h)).resize((w, extrude), Image.Resampling.NEAREST)
    left = img.crop((0, 0, 1, h)).resize((extrude, h), Image.Resampling.NEAREST)
    right = img.crop((w - 1, 0, w, h)).resize((extrude, h), Image.Resampling.NEAREST)
    sheet_img.paste(top, (x, y - extrude))
    sheet_img.paste(bottom, (x, y + h))
    sheet_img.paste(left, (x - extrude, y))
    sheet_img.paste(right, (x + w, y))


def render_sheet(sheet: SheetProperties, sprites: List[PackSprite], extrude: int = 0) -> Image.Image:
    """Create the full-size, transparent sheet image with every packed sprite drawn on it."""
    sheet_img = Image.new('RGBA', (sheet.width, sheet.height), (0, 0, 0, 0))

    placed = 0
    for sprite in sprites:
        if not sprite.is_packed() or not sprite.is_valid():
            continue
        img = sprite_sheet_image(sprite)
        if img.mode != 'RGBA':
            img = img.convert('RGBA')
        r = export_rect(sheet, sprite)
        sheet_img.paste(img, (r.x, r.y))
        if extrude > 0:
            extrude_edges(sheet_img, img, r.x, r.y, extrude)
        placed += 1

    logger.debug("Rendered %d sprites to a %d×%d sheet", placed, sheet.width, sheet.height)
    return sheet_img
