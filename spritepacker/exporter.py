"""
Atlas data file export.

Every serializer is a pure function of (sheet, filename, sprites) returning
the file text, and all of them take sprite positions from export_rect(). Add
new formats to DataFormat and _FORMAT_INFO.
"""
import enum
import json
import logging
import os
import tempfile
from typing import Callable, List, NamedTuple
from xml.sax.saxutils import escape, quoteattr

from . import __app_name__, __version__
from .sprite import PackSprite, SheetProperties

logger = logging.getLogger(__name__)

# Sheet images are always written as png.
SHEET_IMAGE_EXT = ".png"


class ExportRect(NamedTuple):
    x: int
    y: int
    width: int
    height: int


def export_rect(sheet: SheetProperties, sprite: PackSprite) -> ExportRect:
    """
    Sheet-space position and visible size of a packed sprite.

    Packed rects are relative to the sheet interior and include the padding,
    so the border and padding are added to the position and the padding is
    taken off the size.
    """
    rect = sprite.packed_rect
    return ExportRect(
        rect.x + sheet.border + sheet.padding,
        rect.y + sheet.border + sheet.padding,
        rect.width - sheet.padding,
        rect.height - sheet.padding,
    )


def quoted(value) -> str:
    return quoteattr(str(value))


def serialize_xml(sheet: SheetProperties, filename: str, sprites: List[PackSprite],
                  starling_style: bool = False) -> str:
    """Generic XML, or the Sparrow/Starling variant which has no rotation or sheet size."""
    sprite_tag, name_tag, width_tag, height_tag = "sprite", "n", "w", "h"
    if starling_style:
        sprite_tag, name_tag, width_tag, height_tag = "SubTexture", "name", "width", "height"

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<!-- Exported from {__app_name__} -->',
    ]
    header = f'<TextureAtlas imagePath={quoted(filename + SHEET_IMAGE_EXT)}'
    if not starling_style:
        header += f' width={quoted(sheet.width)} height={quoted(sheet.height)}'
    lines.append(header + '>')

    for sprite in sprites:
        r = export_rect(sheet, sprite)
        line = (f'    <{sprite_tag} {name_tag}={quoted(sprite.file_name)}'
                f' x={quoted(r.x)} y={quoted(r.y)}'
                f' {width_tag}={quoted(r.width)} {height_tag}={quoted(r.height)}')
        if not starling_style and sprite.is_rotated:
            line += ' r="y"'
        lines.append(line + '/>')

    lines.append('</TextureAtlas>')
    return "\n".join(lines) + "\n"


def serialize_starling(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    return serialize_xml(sheet, filename, sprites, starling_style=True)


def serialize_json(sheet: SheetProperties, filename: str, sprites: List[PackSprite],
                   unity_style: bool = False) -> str:
    """JSON (array) atlas. The Unity variant wraps each frame in an object keyed by file name."""
    frames = []
    for sprite in sprites:
        r = export_rect(sheet, sprite)
        frame = {
            "frame": {"x": r.x, "y": r.y, "w": r.width, "h": r.height},
            "rotated": sprite.is_rotated,
            "trimmed": False,  # (not the same as cropped)
            "spriteSourceSize": {"x": r.x, "y": r.y, "w": r.width, "h": r.height},
            "sourceSize": {"w": r.width, "h": r.height},
        }
        if unity_style:
            frames.append({sprite.file_name: frame})
        else:
            frame["filename"] = sprite.file_name
            frames.append(frame)

    atlas = {
        "frames": frames,
        "meta": {
            "image": filename + SHEET_IMAGE_EXT,
            "app": __app_name__,
            "version": __version__,
            "scale": 1,
            "format": "RGBA8888",
            "size": {"w": sheet.width, "h": sheet.height},
        },
    }
    return json.dumps(atlas, indent=4, sort_keys=True, ensure_ascii=False) + "\n"


def serialize_unity(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    return serialize_json(sheet, filename, sprites, unity_style=True)


def serialize_libgdx(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    lines = [
        filename + SHEET_IMAGE_EXT,
        "format: RGBA8888",
        "filter: Linear,Linear",
        "repeat: none",
    ]
    for sprite in sprites:
        r = export_rect(sheet, sprite)
        lines += [
            sprite.base_name,  # name without extension
            "  rotate: false",
            f"  xy: {r.x}, {r.y}",
            f"  size: {r.width}, {r.height}",
            f"  orig: {r.width}, {r.height}",
            "  offset: 0, 0",
            "  index: -1",
        ]
    return "\n".join(lines) + "\n"


def serialize_plain_text(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    """A simple all-purpose text format, one tab separated line per sprite."""
    text = ""
    for sprite in sprites:
        r = export_rect(sheet, sprite)
        text += (f'image="{sprite.file_name}"\t x={r.x}\t y={r.y}'
                 f'\t width={r.width}\t height={r.height}\t rotated={int(sprite.is_rotated)}\n')
    return text


def serialize_gideros(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    # Trim data is not written, so the four trailing offsets are always zero.
    text = ""
    for sprite in sprites:
        r = export_rect(sheet, sprite)
        text += f"{sprite.file_name}, {r.x}, {r.y}, {r.width}, {r.height}, 0, 0, 0, 0\n"
    return text


def serialize_cocos2d(sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
    """
    Cocos2d style property list.

    The rotated flag is written inverted (<true/> for unrotated sprites) and
    sourceSize is wrapped in an extra pair of braces. Existing atlases depend
    on both, so they are kept as-is.
    """
    tab = "    "
    tab2x = tab * 2
    tab3x = tab * 3
    tab4x = tab * 4

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<!DOCTYPE plist PUBLIC "-//Apple Computer//DTD PLIST 1.0//EN" '
        '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">',
        '<plist version="1.0">',
        f"{tab}<dict>",
        f"{tab2x}<key>frames</key>",
        f"{tab2x}<dict>",
    ]
    for sprite in sprites:
        r = export_rect(sheet, sprite)
        pos = f"{{{r.x},{r.y}}}"
        size = f"{{{r.width},{r.height}}}"
        lines += [
            f"{tab3x}<key>{escape(sprite.file_name)}</key>",
            f"{tab4x}<dict>",
            f"{tab4x}<key>frame</key>",
            f"{tab4x}<string>{{{pos},{size}}}</string>",
            f"{tab4x}<key>offset</key>",
            f"{tab4x}<string>{{0,0}}</string>",
            f"{tab4x}<key>rotated</key>",
            f"{tab4x}{'<false/>' if sprite.is_rotated else '<true/>'}",
            f"{tab4x}<key>sourceColorRect</key>",
            f"{tab4x}<string>{{{{0,0}},{size}}}</string>",
            f"{tab4x}<key>sourceSize</key>",
            f"{tab4x}<string>{{{size}}}</string>",
            f"{tab3x}</dict>",
        ]
    lines += [
        f"{tab2x}</dict>",
        f"{tab2x}<key>metadata</key>",
        f"{tab2x}<dict>",
        f"{tab3x}<key>textureFileName</key>",
        f"{tab3x}<string>{escape(filename + SHEET_IMAGE_EXT)}</string>",
        f"{tab2x}</dict>",
        f"{tab}</dict>",
        "</plist>",
    ]
    return "\n".join(lines) + "\n"


Serializer = Callable[[SheetProperties, str, List[PackSprite]], str]


class FormatInfo(NamedTuple):
    display_name: str
    extension: str
    serializer: Serializer


class DataFormat(enum.Enum):
    """Supported data file formats. Values are stored in settings files, don't renumber."""
    GENERIC_XML = 0
    PLAINTEXT = 1
    LIBGDX = 2
    SPARROW = 3
    JSON = 4
    UNITY = 5
    GIDEROS = 6
    COCOS2D = 7

    @property
    def display_name(self) -> str:
        return _FORMAT_INFO[self].display_name

    @property
    def extension(self) -> str:
        return _FORMAT_INFO[self].extension

    def serialize(self, sheet: SheetProperties, filename: str, sprites: List[PackSprite]) -> str:
        return _FORMAT_INFO[self].serializer(sheet, filename, sprites)


_FORMAT_INFO = {
    DataFormat.GENERIC_XML: FormatInfo("Generic XML", ".xml", serialize_xml),
    DataFormat.PLAINTEXT: FormatInfo("Plain text", ".txt", serialize_plain_text),
    DataFormat.LIBGDX: FormatInfo("LibGDX", ".atlas", serialize_libgdx),
    DataFormat.SPARROW: FormatInfo("Sparrow / Starling", ".xml", serialize_starling),
    DataFormat.JSON: FormatInfo("JSON", ".json", serialize_json),
    DataFormat.UNITY: FormatInfo("Unity3d (JSON)", ".json", serialize_unity),
    DataFormat.GIDEROS: FormatInfo("Gideros", ".txt", serialize_gideros),
    DataFormat.COCOS2D: FormatInfo("Cocos2d (PLIST)", ".xml", serialize_cocos2d),
}


def _current_umask() -> int:
    # os.umask can only be read by setting it
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_file(path: str, filename: str, extension: str, text: str) -> bool:
    """Replace path/filename+extension with text. Returns False if it couldn't be written."""
    target = os.path.join(path, filename + extension)
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{filename}", suffix=extension + ".tmp", dir=path)
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, target)
    except OSError as e:
        logger.error("Could not write %s: %s", target, e)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        return False
    return True


def export(sheet: SheetProperties, data_format: DataFormat, path: str, filename: str,
           sprites: List[PackSprite]) -> bool:
    """Write the atlas data file for the packed sprites. Returns True on success."""
    text = data_format.serialize(sheet, filename, sprites)
    ok = write_file(path, filename, data_format.extension, text)
    if ok:
        logger.info("Exported %s data to %s", data_format.display_name,
                    os.path.join(path, filename + data_format.extension))
    return ok
