"""
Per-folder packing settings, stored as JSON next to the exported files.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .exporter import DataFormat, write_file
from .layout import PackMethod
from .sprite import SheetProperties

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "spritepacker"
SETTINGS_EXT = ".json"
# Bump when the meaning of the stored method/format indices changes.
SETTINGS_VERSION = 1


@dataclass
class PackSettings:
    sheet: SheetProperties = field(default_factory=SheetProperties)
    method: PackMethod = PackMethod.MAXRECTS_BESTAREA
    data_format: DataFormat = DataFormat.GENERIC_XML
    rotation: bool = False
    cropping: bool = False
    basename: str = "sheet"


class StoredSettings(BaseModel):
    """
    Shape of the settings file. Every key is optional, and a value that fails
    validation reads as missing so the default is kept.
    """
    model_config = ConfigDict(extra="ignore")

    sheetw: Optional[int] = Field(None, ge=1, strict=True)
    sheeth: Optional[int] = Field(None, ge=1, strict=True)
    expand: Optional[int] = Field(None, ge=0, strict=True)
    extrude: Optional[int] = Field(None, ge=0, strict=True)
    padding: Optional[int] = Field(None, ge=0, strict=True)
    border: Optional[int] = Field(None, ge=0, strict=True)
    scale: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    method: Optional[PackMethod] = None
    format: Optional[DataFormat] = None
    rotation: Optional[bool] = Field(None, strict=True)
    cropping: Optional[bool] = Field(None, strict=True)
    basename: Optional[str] = Field(None, min_length=1, strict=True)
    version: Optional[str] = None
    settings_version: Optional[int] = Field(None, strict=True)

    @field_validator('*', mode='wrap')
    @classmethod
    def _ignore_invalid(cls, value, handler, info):
        try:
            return handler(value)
        except ValidationError:
            logger.warning("Ignoring invalid setting %s=%r", info.field_name, value)
            return None


def settings_path(folder: str) -> str:
    return os.path.join(folder, SETTINGS_FILENAME + SETTINGS_EXT)


def settings_from_dict(obj: dict) -> PackSettings:
    """Build settings from a loaded JSON object, keeping defaults for anything missing or invalid."""
    stored = StoredSettings.model_validate(obj)
    settings = PackSettings()
    sheet = settings.sheet

    for key, attr in (("sheetw", "width"), ("sheeth", "height"), ("padding", "padding"),
                      ("border", "border"), ("expand", "expand"), ("extrude", "extrude"),
                      ("scale", "scale")):
        value = getattr(stored, key)
        if value is not None:
            setattr(sheet, attr, value)

    stored_version = SETTINGS_VERSION if stored.settings_version is None else stored.settings_version
    if stored_version != SETTINGS_VERSION:
        logger.warning("Settings version %r differs from %d, method and format are ignored",
                       stored_version, SETTINGS_VERSION)
    else:
        if stored.method is not None:
            settings.method = stored.method
        if stored.format is not None:
            settings.data_format = stored.format

    if stored.rotation is not None:
        settings.rotation = stored.rotation
    if stored.cropping is not None:
        settings.cropping = stored.cropping
    if stored.basename is not None:
        settings.basename = stored.basename
    if stored.version is not None:
        logger.debug("Settings written by version %s", stored.version)
    return settings


def settings_to_dict(settings: PackSettings) -> dict:
    sheet = settings.sheet
    stored = StoredSettings(
        sheetw=sheet.width,
        sheeth=sheet.height,
        expand=sheet.expand,
        extrude=sheet.extrude,
        padding=sheet.padding,
        border=sheet.border,
        scale=sheet.scale,
        method=settings.method,
        format=settings.data_format,
        rotation=settings.rotation,
        cropping=settings.cropping,
        basename=settings.basename,
        version=__version__,
        settings_version=SETTINGS_VERSION,
    )
    return stored.model_dump(mode='json')


def load_settings(folder: str) -> PackSettings:
    """Load the folder's settings file. Returns defaults if there isn't a usable one."""
    path = settings_path(folder)
    if not os.path.exists(path):
        logger.debug("No previous settings file in %s", folder)
        return PackSettings()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            obj = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read settings file %s: %s", path, e)
        return PackSettings()
    if not isinstance(obj, dict):
        logger.warning("Settings file %s does not hold a JSON object", path)
        return PackSettings()
    return settings_from_dict(obj)


def save_settings(folder: str, settings: PackSettings) -> bool:
    text = json.dumps(settings_to_dict(settings), indent=4) + "\n"
    return write_file(folder, SETTINGS_FILENAME, SETTINGS_EXT, text)
