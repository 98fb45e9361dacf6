"""
Read the GPS tags of image files.

Two sources are available. `ExifToolSource` drives the ExifTool binary through
PyExifTool and is the default. `PillowSource` reads the EXIF GPS IFD with
Pillow and renders the values the way ExifTool prints them, so the rest of the
pipeline does not need to know which one was used.
"""

import enum
import math
import pathlib
from typing import Optional, Union

import exiftool
import exiftool.exceptions
import PIL.ExifTags
import PIL.Image

from .common.constants import GPS_TAGS
from .common.logs import logger
from .common.types import FilePath
from .schemas import GPSMetadata, MetadataError

MetadataResult = Union[GPSMetadata, MetadataError]

ALTITUDE_REFS = {0: "Above Sea Level", 1: "Below Sea Level"}


class MetadataSourceError(Exception):
    """The metadata source cannot be used at all, e.g. ExifTool is not installed."""


class MetadataSourceChoice(str, enum.Enum):
    exiftool = "exiftool"
    pillow = "pillow"


class MetadataSource:
    """
    Base class for metadata readers. Subclasses implement `get_metadata`.

    Sources are context managers so that a long running helper process
    can be started once per run and stopped afterwards.
    """

    name: str = "base"

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self):
        pass

    def get_metadata(self, path: FilePath) -> MetadataResult:
        raise NotImplementedError


class ExifToolSource(MetadataSource):
    name = "exiftool"

    def __init__(self, executable: Optional[str] = None):
        self.executable = executable
        self._helper: Optional[exiftool.ExifToolHelper] = None

    @property
    def helper(self) -> exiftool.ExifToolHelper:
        if self._helper is None:
            # No common args: keep ExifTool's print conversion (`40 deg 26' 46.00" N`)
            # and plain tag names without group prefixes.
            try:
                helper = exiftool.ExifToolHelper(
                    executable=self.executable, common_args=[]
                )
                logger.debug(f"Starting ExifTool process: {helper.executable}")
                helper.run()
            except FileNotFoundError as e:
                raise MetadataSourceError(
                    f"ExifTool executable not found, install it or use the pillow source: {e}"
                ) from e
            self._helper = helper
        return self._helper

    def close(self):
        if self._helper is not None and self._helper.running:
            logger.debug("Stopping ExifTool process")
            self._helper.terminate()
        self._helper = None

    def get_metadata(self, path: FilePath) -> MetadataResult:
        filename = str(path)
        try:
            results = self.helper.get_tags([filename], tags=list(GPS_TAGS))
        except exiftool.exceptions.ExifToolException as e:
            return MetadataError(filename=filename, error=str(e))

        if not results:
            return MetadataError(filename=filename, error="No metadata returned")

        tags = results[0]
        if "Error" in tags:
            return MetadataError(filename=filename, error=str(tags["Error"]))
        return GPSMetadata.from_tags(filename, tags)


def format_dms(value) -> str:
    """
    Render a (degrees, minutes, seconds) EXIF value like ExifTool does.

    Fractional degrees or minutes are carried down into the smaller units.

    >>> format_dms((40, 26, 46))
    '40 deg 26\\' 46.00"'
    >>> format_dms((40.5, 0, 0))
    '40 deg 30\\' 0.00"'
    """
    degrees, minutes, seconds = (float(v) for v in value)
    total = abs(degrees) + minutes / 60 + seconds / 3600

    d = math.floor(total)
    m = math.floor((total - d) * 60)
    s = round((total - d - m / 60) * 3600, 2)
    if s >= 60:
        s = 0.0
        m += 1
    if m >= 60:
        m = 0
        d += 1
    return f"{d} deg {m}' {s:.2f}\""


def format_altitude(value) -> str:
    """
    >>> format_altitude(123.4)
    '123.4 m'
    """
    return f"{float(value):g} m"


def format_altitude_ref(value) -> str:
    """
    >>> format_altitude_ref(b"\\x01")
    'Below Sea Level'
    """
    if isinstance(value, bytes):
        value = value[0] if value else 0
    return ALTITUDE_REFS.get(int(value), str(value))


def gps_ifd_to_tags(gps_ifd: dict) -> dict[str, str]:
    """
    Convert a Pillow GPS IFD (numeric keys) into ExifTool style tag values.
    """
    named = {PIL.ExifTags.GPSTAGS.get(key, key): val for key, val in gps_ifd.items()}
    tags = {}
    for name in ("GPSLatitude", "GPSLongitude"):
        if named.get(name):
            tags[name] = format_dms(named[name])
    for name in ("GPSLatitudeRef", "GPSLongitudeRef"):
        if named.get(name):
            tags[name] = str(named[name]).strip("\x00 ")
    if named.get("GPSAltitude") is not None:
        tags["GPSAltitude"] = format_altitude(named["GPSAltitude"])
    if named.get("GPSAltitudeRef") is not None:
        tags["GPSAltitudeRef"] = format_altitude_ref(named["GPSAltitudeRef"])
    return tags


class PillowSource(MetadataSource):
    name = "pillow"

    def get_metadata(self, path: FilePath) -> MetadataResult:
        filename = str(path)
        try:
            with PIL.Image.open(pathlib.Path(path)) as img:
                gps_ifd = dict(img.getexif().get_ifd(PIL.ExifTags.IFD.GPSInfo))
        except (OSError, SyntaxError) as e:
            return MetadataError(filename=filename, error=str(e))

        try:
            tags = gps_ifd_to_tags(gps_ifd)
        except (TypeError, ValueError, OverflowError, ZeroDivisionError) as e:
            return MetadataError(filename=filename, error=f"Invalid GPS tags: {e}")
        return GPSMetadata.from_tags(filename, tags)


def get_metadata_source(
    choice: Union[MetadataSourceChoice, str] = MetadataSourceChoice.exiftool,
    exiftool_executable: Optional[str] = None,
) -> MetadataSource:
    choice = MetadataSourceChoice(choice)
    if choice is MetadataSourceChoice.pillow:
        return PillowSource()
    return ExifToolSource(executable=exiftool_executable)
