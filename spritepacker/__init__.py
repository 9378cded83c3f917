"""Packs sprites onto a sprite sheet and writes atlas data for game engines."""

__app_name__ = "SpritePacker"
__version__ = "1.2.0"

from .exporter import DataFormat, export, export_rect  # noqa: E402
from .layout import LayoutOptions, PackMethod, PackStrategy, run_layout  # noqa: E402
from .loader import SortOrder, load_sprites, sort_sprites  # noqa: E402
from .maxrects import HeuristicType, MaxRectsBin, Rectangle  # noqa: E402
from .sprite import ConfigurationError, PackSprite, SheetProperties  # noqa: E402
