from PIL import Image

from spritepacker.maxrects import Rectangle
from spritepacker.render import render_sheet
from spritepacker.sprite import PackSprite, SheetProperties

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


def test_sheet_is_full_size_and_transparent():
    sheet = SheetProperties(width=40, height=30, padding=0, border=0)
    img = render_sheet(sheet, [])
    assert img.size == (40, 30)
    assert img.mode == 'RGBA'
    assert img.getpixel((10, 10)) == CLEAR


def test_sprite_drawn_at_export_position(make_sprite):
    sheet = SheetProperties(width=20, height=20, padding=2, border=3)
    sprite = make_sprite(4, 2)
    sprite.packed_rect = Rectangle(1, 0, 6, 4)

    img = render_sheet(sheet, [sprite])
    assert img.getpixel((6, 5)) == RED
    assert img.getpixel((9, 6)) == RED
    assert img.getpixel((5, 5)) == CLEAR
    assert img.getpixel((10, 5)) == CLEAR


def test_rotated_sprite_is_turned_clockwise():
    src = Image.new('RGBA', (4, 2), RED)
    src.paste(Image.new('RGBA', (1, 2), BLUE), (0, 0))
    sprite = PackSprite(src, "a.png")
    sprite.packed_rect = Rectangle(0, 0, 2, 4)
    sprite.is_rotated = True

    img = render_sheet(SheetProperties(width=10, height=10, padding=0, border=0), [sprite])
    # the left column ends up along the top
    assert img.getpixel((0, 0)) == BLUE
    assert img.getpixel((1, 0)) == BLUE
    assert img.getpixel((0, 3)) == RED
    assert img.getpixel((2, 0)) == CLEAR


def test_unpacked_sprites_are_skipped(make_sprite):
    sprite = make_sprite(4, 4)
    img = render_sheet(SheetProperties(width=10, height=10, padding=0, border=0), [sprite])
    assert img.getbbox() is None


def test_extrude_copies_edges_outwards(make_sprite):
    sheet = SheetProperties(width=20, height=20, padding=2, border=2)
    sprite = make_sprite(4, 4)
    sprite.packed_rect = Rectangle(0, 0, 6, 6)

    img = render_sheet(sheet, [sprite], extrude=1)
    assert img.getpixel((4, 3)) == RED   # top
    assert img.getpixel((3, 4)) == RED   # left
    assert img.getpixel((8, 4)) == RED   # right
    assert img.getpixel((4, 8)) == RED   # bottom
    assert img.getpixel((3, 3)) == CLEAR
    assert img.getpixel((4, 2)) == CLEAR
