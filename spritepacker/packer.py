"""
Packing strategies. Both pack sprites in list order into the sheet interior
(the border is added back at export time) and return the number of sprites
that could not be placed.
"""
import logging
from typing import List

from .maxrects import HeuristicType, MaxRectsBin, Rectangle
from .sprite import PackSprite, SheetProperties

logger = logging.getLogger(__name__)


def is_rotated_fit(width: int, height: int, packed_rect: Rectangle) -> bool:
    """True when the packed rect's orientation differs from the requested one."""
    return ((width > height and packed_rect.width < packed_rect.height) or
            (width < height and packed_rect.width > packed_rect.height))


def pack_maxrects(sheet: SheetProperties, sprites: List[PackSprite],
                  heuristic: HeuristicType = HeuristicType.BEST_AREA_FIT,
                  allow_rotation: bool = False, allow_crop: bool = False,
                  expand: int = 0, scale: float = 1.0) -> int:
    """MaxRects packing of the sprite list. Sprites are updated in place and packed in order."""
    # Reset previous rect data, incl rotation and cropping.
    for sprite in sprites:
        sprite.reset_for_packing()

    valid_items = 0
    ignored_items = 0
    fail_items = 0
    bin_ = MaxRectsBin(sheet.interior_width, sheet.interior_height, allow_rotation)

    for sprite in sprites:
        sprite.preprocess(allow_crop, expand, scale)

        if not sprite.is_valid():
            logger.warning("Ignoring %s - not a valid image", sprite.file_name)
            ignored_items += 1
            continue

        # Packed rects must include the padding
        packed_rect = bin_.insert(sprite.width + sheet.padding, sprite.height + sheet.padding, heuristic)
        sprite.packed_rect = packed_rect

        if is_rotated_fit(sprite.width, sprite.height, packed_rect):
            sprite.is_rotated = True

        if packed_rect.height > 0:
            logger.debug("Packed %s to %d,%d w:%d h:%d free space=%.1f%%",
                         sprite.file_name, packed_rect.x, packed_rect.y,
                         packed_rect.width, packed_rect.height, 100.0 - bin_.occupancy() * 100.0)
            valid_items += 1
        else:
            logger.debug("Could not pack %s - skipping this one", sprite.file_name)
            fail_items += 1

    logger.info("MaxRects (%s): %d packed, %d failed, %d ignored",
                heuristic.name, valid_items, fail_items, ignored_items)
    return fail_items


def pack_rows(sheet: SheetProperties, sprites: List[PackSprite],
              allow_rotation: bool = False, allow_crop: bool = False,
              expand: int = 0, scale: float = 1.0) -> int:
    """Simple packing into rows ('shelves'). Rotation is not supported and allow_rotation is ignored."""
    for sprite in sprites:
        sprite.reset_for_packing()

    valid_items = 0
    ignored_items = 0
    fail_items = 0

    interior_width = sheet.interior_width
    interior_height = sheet.interior_height
    sheet_x = 0
    sheet_y = 0
    row_height = 0

    for sprite in sprites:
        sprite.preprocess(allow_crop, expand, scale)

        if not sprite.is_valid():
            logger.warning("Ignoring %s - not a valid image", sprite.file_name)
            ignored_items += 1
            continue

        box_width = sprite.width + sheet.padding
        box_height = sprite.height + sheet.padding
        packed_rect = Rectangle()

        if sheet_x + box_width <= interior_width:
            # Fits the current row in x, now check it doesn't flow beyond y space
            if sheet_y + box_height > interior_height:
                logger.debug("%s doesn't fit in y", sprite.file_name)
            else:
                packed_rect = Rectangle(sheet_x, sheet_y, box_width, box_height)
                sheet_x += box_width
                row_height = max(row_height, box_height)
        else:
            # Try a new row, it must fit the remaining y space and the full width
            if (sheet_y + row_height + box_height > interior_height or
                    box_width > interior_width):
                logger.debug("Tried new row but %s doesn't fit", sprite.file_name)
            else:
                sheet_x = 0
                sheet_y += row_height
                logger.debug("New row at y=%d for %s", sheet_y, sprite.file_name)
                packed_rect = Rectangle(sheet_x, sheet_y, box_width, box_height)
                sheet_x += box_width
                row_height = box_height

        sprite.packed_rect = packed_rect
        if not packed_rect.is_empty():
            logger.debug("Packed %s to %d,%d w:%d h:%d", sprite.file_name,
                         packed_rect.x, packed_rect.y, packed_rect.width, packed_rect.height)
            valid_items += 1
        else:
            fail_items += 1

    logger.info("Rows: %d packed, %d failed, %d ignored", valid_items, fail_items, ignored_items)
    return fail_items
