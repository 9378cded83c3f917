"""
Layout orchestration: picks a packing strategy and runs it over the sprite list.

Packed rects are left in sheet-interior coordinates. The border and padding
offsets are applied once, by exporter.export_rect(), for every consumer.
"""
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .loader import SortOrder
from .maxrects import HeuristicType
from .packer import pack_maxrects, pack_rows
from .sprite import PackSprite, SheetProperties

logger = logging.getLogger(__name__)


class PackStrategy(enum.Enum):
    """Enum for packing algorithms."""
    MAXRECTS = 1  # Maximal Rectangles algorithm
    ROWS = 2      # Equal height rows ('shelves')


class PackMethod(enum.Enum):
    """Packing methods as offered to users. Values are stored in settings files, don't renumber."""
    MAXRECTS_BESTAREA = 0
    MAXRECTS_SHORTSIDE = 1
    MAXRECTS_LONGSIDE = 2
    MAXRECTS_BOTTOMLEFT = 3
    MAXRECTS_CONTACTPOINT = 4
    ROWS_BY_NAME = 5
    ROWS_BY_AREA = 6
    ROWS_BY_HEIGHT = 7
    ROWS_BY_WIDTH = 8

    @property
    def strategy(self) -> PackStrategy:
        if self.name.startswith('MAXRECTS'):
            return PackStrategy.MAXRECTS
        return PackStrategy.ROWS

    @property
    def heuristic(self) -> Optional[HeuristicType]:
        return _METHOD_HEURISTICS.get(self)

    @property
    def sort_order(self) -> SortOrder:
        # MaxRects methods always take the largest sprites first
        return _METHOD_SORT_ORDERS.get(self, SortOrder.AREA)


_METHOD_HEURISTICS = {
    PackMethod.MAXRECTS_BESTAREA: HeuristicType.BEST_AREA_FIT,
    PackMethod.MAXRECTS_SHORTSIDE: HeuristicType.BEST_SHORT_SIDE_FIT,
    PackMethod.MAXRECTS_LONGSIDE: HeuristicType.BEST_LONG_SIDE_FIT,
    PackMethod.MAXRECTS_BOTTOMLEFT: HeuristicType.BOTTOM_LEFT,
    PackMethod.MAXRECTS_CONTACTPOINT: HeuristicType.CONTACT_POINT,
}

_METHOD_SORT_ORDERS = {
    PackMethod.ROWS_BY_NAME: SortOrder.NAME,
    PackMethod.ROWS_BY_AREA: SortOrder.AREA,
    PackMethod.ROWS_BY_HEIGHT: SortOrder.HEIGHT,
    PackMethod.ROWS_BY_WIDTH: SortOrder.WIDTH,
}


@dataclass
class LayoutOptions:
    heuristic: HeuristicType = HeuristicType.BEST_AREA_FIT
    allow_rotation: bool = False
    allow_crop: bool = False
    expand: int = 0
    extrude: int = 0
    scale: float = 1.0

    @classmethod
    def from_sheet(cls, sheet: SheetProperties, method: PackMethod,
                   allow_rotation: bool = False, allow_crop: bool = False) -> 'LayoutOptions':
        """Options for a pack method, taking expand/extrude/scale from the sheet properties."""
        return cls(
            heuristic=method.heuristic or HeuristicType.BEST_AREA_FIT,
            allow_rotation=allow_rotation,
            allow_crop=allow_crop,
            expand=sheet.expand,
            extrude=sheet.extrude,
            scale=sheet.scale,
        )


def run_layout(sheet: SheetProperties, sprites: List[PackSprite],
               strategy: PackStrategy = PackStrategy.MAXRECTS,
               options: Optional[LayoutOptions] = None) -> int:
    """
    Pack the sprites, in list order, onto the sheet.

    Previous packing data is always discarded first, so repeated runs never
    build on each other. Raises ConfigurationError for an unusable sheet;
    sprites that don't fit are not an error and are reported by the
    returned failure count.
    """
    sheet.validate()
    options = options or LayoutOptions()

    if options.extrude > 0 and (sheet.padding < 2 * options.extrude or sheet.border < options.extrude):
        logger.warning("Extrude of %d px needs padding >= %d and border >= %d (have %d and %d); "
                       "extruded edges may overlap", options.extrude, 2 * options.extrude,
                       options.extrude, sheet.padding, sheet.border)

    for sprite in sprites:
        sprite.reset_for_packing()

    if not sprites:
        logger.info("Empty list - nothing to pack")
        return 0

    if strategy == PackStrategy.MAXRECTS:
        failures = pack_maxrects(sheet, sprites, options.heuristic, options.allow_rotation,
                                 options.allow_crop, options.expand, options.scale)
    elif strategy == PackStrategy.ROWS:
        failures = pack_rows(sheet, sprites, options.allow_rotation, options.allow_crop,
                             options.expand, options.scale)
    else:
        raise ValueError(f"Unsupported packing strategy: {strategy}")

    return failures
