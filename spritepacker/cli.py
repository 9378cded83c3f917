import argparse
import logging
import os
import sys
from typing import List, Optional

from .exporter import SHEET_IMAGE_EXT, DataFormat, export
from .layout import LayoutOptions, PackMethod, PackStrategy, run_layout
from .loader import load_sprites, sort_sprites
from .render import render_sheet
from .settings import PackSettings, load_settings, save_settings
from .sprite import ConfigurationError, PackSprite, SheetProperties

METHOD_CHOICES = {
    'area': PackMethod.MAXRECTS_BESTAREA,
    'shortside': PackMethod.MAXRECTS_SHORTSIDE,
    'longside': PackMethod.MAXRECTS_LONGSIDE,
    'bottomleft': PackMethod.MAXRECTS_BOTTOMLEFT,
    'contactpoint': PackMethod.MAXRECTS_CONTACTPOINT,
    'rows-name': PackMethod.ROWS_BY_NAME,
    'rows-area': PackMethod.ROWS_BY_AREA,
    'rows-height': PackMethod.ROWS_BY_HEIGHT,
    'rows-width': PackMethod.ROWS_BY_WIDTH,
}

FORMAT_CHOICES = {
    'xml': DataFormat.GENERIC_XML,
    'text': DataFormat.PLAINTEXT,
    'libgdx': DataFormat.LIBGDX,
    'sparrow': DataFormat.SPARROW,
    'json': DataFormat.JSON,
    'unity': DataFormat.UNITY,
    'gideros': DataFormat.GIDEROS,
    'cocos2d': DataFormat.COCOS2D,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Pack sprite images onto a sprite sheet and export atlas data')
    parser.add_argument('input_dir', help='Directory containing sprite images')
    parser.add_argument('output_dir', help='Directory to save the sprite sheet, atlas data and settings')
    parser.add_argument('--width', type=int, help='Width of the sprite sheet')
    parser.add_argument('--height', type=int, help='Height of the sprite sheet')
    parser.add_argument('--padding', type=int, help='Padding between sprites')
    parser.add_argument('--border', type=int, help='Border around the sheet edges')
    parser.add_argument('--expand', type=int, help='Expand every sprite by this many transparent pixels per side')
    parser.add_argument('--extrude', type=int, help='Duplicate sprite edge pixels outwards by this many pixels')
    parser.add_argument('--scale', type=float, help='Scale sprites by this factor')
    parser.add_argument('--method', choices=list(METHOD_CHOICES), help='Packing method')
    parser.add_argument('--format', choices=list(FORMAT_CHOICES), help='Atlas data format')
    parser.add_argument('--name', help='Base name for the output files')
    parser.add_argument('--rotate', action='store_true', default=None,
                        help='Allow rotation of sprites by 90 degrees (MaxRects only)')
    parser.add_argument('--crop', action='store_true', default=None,
                        help='Crop transparent borders from sprites')
    parser.add_argument('--optimal', action='store_true',
                        help='Try every MaxRects heuristic and keep the best result')
    parser.add_argument('--save-settings', action='store_true',
                        help='Store the settings used in the output directory')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    return parser


def apply_arguments(settings: PackSettings, args: argparse.Namespace) -> PackSettings:
    """Command line values override the ones from the settings file."""
    sheet = settings.sheet
    for attr in ('width', 'height', 'padding', 'border', 'expand', 'extrude', 'scale'):
        value = getattr(args, attr)
        if value is not None:
            setattr(sheet, attr, value)
    if args.method is not None:
        settings.method = METHOD_CHOICES[args.method]
    if args.format is not None:
        settings.data_format = FORMAT_CHOICES[args.format]
    if args.name:
        settings.basename = args.name
    if args.rotate is not None:
        settings.rotation = args.rotate
    if args.crop is not None:
        settings.cropping = args.crop
    return settings


def packed_efficiency(sheet: SheetProperties, sprites: List[PackSprite]) -> float:
    """Percentage of the sheet interior covered by packed boxes."""
    interior = sheet.interior_width * sheet.interior_height
    used = sum(s.packed_rect.area() for s in sprites if s.is_packed())
    return (used / interior) * 100 if interior > 0 else 0


def pack(settings: PackSettings, sprites: List[PackSprite], method: Optional[PackMethod] = None) -> int:
    method = method or settings.method
    options = LayoutOptions.from_sheet(settings.sheet, method, settings.rotation, settings.cropping)
    return run_layout(settings.sheet, sprites, method.strategy, options)


def pack_optimal(settings: PackSettings, sprites: List[PackSprite]) -> int:
    """Pack with every MaxRects heuristic and keep the one with fewest failures, then best efficiency."""
    print("Finding optimal placement heuristic...")
    best = None
    for method in PackMethod:
        if method.strategy != PackStrategy.MAXRECTS:
            continue
        failures = pack(settings, sprites, method)
        efficiency = packed_efficiency(settings.sheet, sprites)
        print(f"  {method.name}: {failures} failed, efficiency {efficiency:.2f}%")
        if best is None or (failures, -efficiency) < (best[1], -best[2]):
            best = (method, failures, efficiency)

    method = best[0]
    print(f"\nBest placement heuristic: {method.name} with {best[2]:.2f}% efficiency")
    settings.method = method
    # Repack so the sprites hold the winning layout
    return pack(settings, sprites, method)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")

    # Create output directory if it doesn't exist
    os.makedirs(args.output_dir, exist_ok=True)
    settings = apply_arguments(load_settings(args.output_dir), args)
    sheet = settings.sheet

    print(f"Scanning directory: {args.input_dir}")
    try:
        sprites = load_sprites(args.input_dir)
    except ConfigurationError as e:
        print(f"Error scanning directory: {e}")
        return 2

    if not sprites:
        print(f"No sprite files found in {args.input_dir}")
        return 1

    print(f"Found {len(sprites)} sprite files")
    # All MaxRects methods share the same ordering
    order = PackMethod.MAXRECTS_BESTAREA.sort_order if args.optimal else settings.method.sort_order
    sprites = sort_sprites(sprites, order)

    try:
        if args.optimal:
            failures = pack_optimal(settings, sprites)
        else:
            print(f"Using {settings.method.name} packing on a {sheet.width}×{sheet.height} sheet")
            failures = pack(settings, sprites)
    except ConfigurationError as e:
        print(f"Invalid sheet settings: {e}")
        return 2

    packed = len([s for s in sprites if s.is_packed()])
    if failures > 0:
        print(f"{failures} image(s) failed to pack ({packed} Ok). Nothing exported.")
        return 1
    print(f"{packed} images successfully packed!")

    sheet_path = os.path.join(args.output_dir, settings.basename + SHEET_IMAGE_EXT)
    print(f"Saving sheet: {sheet_path} ({sheet.width}×{sheet.height})")
    try:
        render_sheet(sheet, sprites, sheet.extrude).save(sheet_path)
    except OSError as e:
        print(f"Could not save the sheet image: {e}")
        return 1

    ok = export(sheet, settings.data_format, args.output_dir, settings.basename, sprites)
    if ok:
        print(f"{settings.data_format.display_name} files exported successfully!")
    else:
        print(f"Could not write the {settings.data_format.display_name} data file.")

    if args.save_settings and not save_settings(args.output_dir, settings):
        print("Could not save settings.")

    print(f"\nFinal packing efficiency: {packed_efficiency(sheet, sprites):.2f}%")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
