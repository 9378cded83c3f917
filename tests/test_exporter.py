import json
import os
import plistlib
import re
import xml.etree.ElementTree as ET

import pytest

from spritepacker import __version__
from spritepacker.exporter import (DataFormat, export, export_rect, serialize_cocos2d, serialize_gideros,
                                   serialize_json, serialize_libgdx, serialize_plain_text, serialize_starling,
                                   serialize_unity, serialize_xml, write_file)
from spritepacker.maxrects import Rectangle
from spritepacker.sprite import SheetProperties


@pytest.fixture
def sheet():
    return SheetProperties(width=128, height=64, padding=2, border=3)


@pytest.fixture
def sprites(make_sprite):
    a = make_sprite(10, 20, "/in/a.png")
    a.packed_rect = Rectangle(0, 0, 12, 22)
    b = make_sprite(8, 4, "/in/b.png")
    b.packed_rect = Rectangle(12, 0, 6, 10)
    b.is_rotated = True
    return [a, b]


def test_export_rect_adds_border_and_padding(sheet, sprites):
    assert export_rect(sheet, sprites[0]) == (5, 5, 10, 20)
    assert export_rect(sheet, sprites[1]) == (17, 5, 4, 8)


def test_generic_xml(sheet, sprites):
    assert serialize_xml(sheet, "atlas", sprites) == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!-- Exported from SpritePacker -->\n'
        '<TextureAtlas imagePath="atlas.png" width="128" height="64">\n'
        '    <sprite n="a.png" x="5" y="5" w="10" h="20"/>\n'
        '    <sprite n="b.png" x="17" y="5" w="4" h="8" r="y"/>\n'
        '</TextureAtlas>\n'
    )


def test_starling_xml_has_no_rotation_or_size(sheet, sprites):
    assert serialize_starling(sheet, "atlas", sprites) == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!-- Exported from SpritePacker -->\n'
        '<TextureAtlas imagePath="atlas.png">\n'
        '    <SubTexture name="a.png" x="5" y="5" width="10" height="20"/>\n'
        '    <SubTexture name="b.png" x="17" y="5" width="4" height="8"/>\n'
        '</TextureAtlas>\n'
    )


def test_json(sheet, sprites):
    text = serialize_json(sheet, "atlas", sprites)
    doc = json.loads(text)

    first = doc["frames"][0]
    assert first["filename"] == "a.png"
    assert first["frame"] == {"x": 5, "y": 5, "w": 10, "h": 20}
    assert first["rotated"] is False
    assert first["trimmed"] is False
    assert first["spriteSourceSize"] == {"x": 5, "y": 5, "w": 10, "h": 20}
    assert first["sourceSize"] == {"w": 10, "h": 20}
    assert doc["frames"][1]["rotated"] is True
    assert doc["meta"] == {
        "app": "SpritePacker",
        "format": "RGBA8888",
        "image": "atlas.png",
        "scale": 1,
        "size": {"w": 128, "h": 64},
        "version": __version__,
    }
    assert '"filename": "a.png"' in text
    assert text.endswith("}\n")


def test_unity_json_wraps_frames_by_file_name(sheet, sprites):
    doc = json.loads(serialize_unity(sheet, "atlas", sprites))
    first = doc["frames"][0]
    assert list(first) == ["a.png"]
    assert "filename" not in first["a.png"]
    assert first["a.png"]["frame"] == {"x": 5, "y": 5, "w": 10, "h": 20}
    assert doc["meta"]["image"] == "atlas.png"


def test_libgdx(sheet, sprites):
    assert serialize_libgdx(sheet, "atlas", sprites) == (
        "atlas.png\n"
        "format: RGBA8888\n"
        "filter: Linear,Linear\n"
        "repeat: none\n"
        "a\n"
        "  rotate: false\n"
        "  xy: 5, 5\n"
        "  size: 10, 20\n"
        "  orig: 10, 20\n"
        "  offset: 0, 0\n"
        "  index: -1\n"
        "b\n"
        "  rotate: false\n"
        "  xy: 17, 5\n"
        "  size: 4, 8\n"
        "  orig: 4, 8\n"
        "  offset: 0, 0\n"
        "  index: -1\n"
    )


def test_plain_text(sheet, sprites):
    assert serialize_plain_text(sheet, "atlas", sprites) == (
        'image="a.png"\t x=5\t y=5\t width=10\t height=20\t rotated=0\n'
        'image="b.png"\t x=17\t y=5\t width=4\t height=8\t rotated=1\n'
    )


def test_gideros(sheet, sprites):
    assert serialize_gideros(sheet, "atlas", sprites) == (
        "a.png, 5, 5, 10, 20, 0, 0, 0, 0\n"
        "b.png, 17, 5, 4, 8, 0, 0, 0, 0\n"
    )


def test_cocos2d_plist(sheet, sprites):
    text = serialize_cocos2d(sheet, "atlas", sprites)
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<!DOCTYPE plist PUBLIC')
    assert "            <key>a.png</key>\n                <dict>\n" in text

    doc = plistlib.loads(text.encode("utf-8"))
    a = doc["frames"]["a.png"]
    assert a == {
        "frame": "{{5,5},{10,20}}",
        "offset": "{0,0}",
        "rotated": True,
        "sourceColorRect": "{{0,0},{10,20}}",
        "sourceSize": "{{10,20}}",
    }
    # rotated flag is written inverted
    assert doc["frames"]["b.png"]["rotated"] is False
    assert doc["metadata"] == {"textureFileName": "atlas.png"}


def _positions(data_format, text):
    """(x, y, w, h) per sprite, parsed back out of a serialized atlas."""
    if data_format in (DataFormat.GENERIC_XML, DataFormat.SPARROW):
        root = ET.fromstring(text.encode("utf-8"))
        return [tuple(int(el.get(k) or el.get(k2)) for k, k2 in
                      (("x", "x"), ("y", "y"), ("w", "width"), ("h", "height"))) for el in root]
    if data_format in (DataFormat.JSON, DataFormat.UNITY):
        frames = json.loads(text)["frames"]
        if data_format == DataFormat.UNITY:
            frames = [next(iter(f.values())) for f in frames]
        return [(f["frame"]["x"], f["frame"]["y"], f["frame"]["w"], f["frame"]["h"]) for f in frames]
    if data_format == DataFormat.LIBGDX:
        xy = re.findall(r"xy: (\d+), (\d+)", text)
        size = re.findall(r"size: (\d+), (\d+)", text)
        return [(int(x), int(y), int(w), int(h)) for (x, y), (w, h) in zip(xy, size)]
    if data_format == DataFormat.PLAINTEXT:
        rows = re.findall(r"x=(\d+)\t y=(\d+)\t width=(\d+)\t height=(\d+)", text)
        return [tuple(map(int, row)) for row in rows]
    if data_format == DataFormat.GIDEROS:
        return [tuple(int(v) for v in line.split(", ")[1:5]) for line in text.splitlines()]
    if data_format == DataFormat.COCOS2D:
        frames = plistlib.loads(text.encode("utf-8"))["frames"]
        return [tuple(map(int, re.findall(r"-?\d+", frames[name]["frame"]))) for name in ("a.png", "b.png")]
    raise AssertionError(data_format)


@pytest.mark.parametrize("data_format", list(DataFormat))
def test_every_format_uses_export_rect(sheet, sprites, data_format):
    text = data_format.serialize(sheet, "atlas", sprites)
    expected = [tuple(export_rect(sheet, s)) for s in sprites]
    assert _positions(data_format, text) == expected


def test_format_registry():
    assert DataFormat(0) is DataFormat.GENERIC_XML
    assert DataFormat(7) is DataFormat.COCOS2D
    assert DataFormat.LIBGDX.extension == ".atlas"
    assert DataFormat.UNITY.extension == ".json"
    assert DataFormat.GIDEROS.extension == ".txt"
    assert DataFormat.SPARROW.display_name == "Sparrow / Starling"


def test_export_writes_file(tmp_path, sheet, sprites):
    assert export(sheet, DataFormat.JSON, str(tmp_path), "atlas", sprites)
    path = tmp_path / "atlas.json"
    assert path.read_text(encoding="utf-8") == serialize_json(sheet, "atlas", sprites)
    assert os.listdir(tmp_path) == ["atlas.json"]


def test_export_truncates_previous_content(tmp_path, sheet, sprites):
    (tmp_path / "atlas.txt").write_text("x" * 10000)
    assert export(sheet, DataFormat.GIDEROS, str(tmp_path), "atlas", sprites[:1])
    assert (tmp_path / "atlas.txt").read_text() == "a.png, 5, 5, 10, 20, 0, 0, 0, 0\n"


def test_export_to_missing_folder_fails(tmp_path, sheet, sprites):
    missing = tmp_path / "nope"
    assert not export(sheet, DataFormat.GENERIC_XML, str(missing), "atlas", sprites)
    assert not missing.exists()


def test_write_file_leaves_no_temp_file(tmp_path):
    assert write_file(str(tmp_path), "data", ".txt", "hello\n")
    assert os.listdir(tmp_path) == ["data.txt"]


@pytest.mark.skipif(os.name != 'posix', reason="file modes are POSIX only")
def test_write_file_respects_umask(tmp_path):
    old = os.umask(0o077)
    try:
        assert write_file(str(tmp_path), "data", ".txt", "hello\n")
    finally:
        os.umask(old)
    assert os.stat(tmp_path / "data.txt").st_mode & 0o777 == 0o600
