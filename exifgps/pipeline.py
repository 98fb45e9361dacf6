"""
Extract GPS data from every image in a directory and write it to a CSV file.

Which optional steps run, and therefore which columns are written, is
controlled by `PipelineOptions`. The named `Variant` presets cover the
common combinations.
"""

import enum
import os
import pathlib
from typing import Callable, Iterator, Optional

import pydantic

from .common.constants import SUPPORTED_IMAGE_EXTENSIONS
from .common.logs import logger
from .common.types import FilePath
from .common.utils import export_rows
from .coordinates import (
    CoordinateParseError,
    dms_to_decimal,
    longitude_sign,
    parse_altitude,
)
from .geocoding import GeocodingError
from .metadata import MetadataSource
from .schemas import GPSMetadata, ImageRecord, MetadataError, RunSummary

Geocoder = Callable[[float, float], str]


class DirectoryReadError(Exception):
    pass


class PipelineOptions(pydantic.BaseModel):
    convert_coordinates: bool = True
    # Take the longitude sign from the GPSLongitudeRef tag instead of
    # the hemisphere letter embedded in the raw value.
    adjust_longitude_sign: bool = True
    reverse_geocode: bool = True
    include_altitude: bool = False

    @pydantic.model_validator(mode="after")
    def check_geocode_needs_coordinates(self):
        if self.reverse_geocode and not self.convert_coordinates:
            raise ValueError("reverse_geocode requires convert_coordinates")
        return self


class Variant(str, enum.Enum):
    raw = "raw"
    altitude = "altitude"
    decimal = "decimal"
    geocode = "geocode"

    @property
    def options(self) -> PipelineOptions:
        return VARIANT_OPTIONS[self]


VARIANT_OPTIONS = {
    Variant.raw: PipelineOptions(
        convert_coordinates=False,
        adjust_longitude_sign=False,
        reverse_geocode=False,
    ),
    Variant.altitude: PipelineOptions(
        convert_coordinates=False,
        adjust_longitude_sign=False,
        reverse_geocode=False,
        include_altitude=True,
    ),
    Variant.decimal: PipelineOptions(reverse_geocode=False),
    Variant.geocode: PipelineOptions(),
}


def is_supported_image(filename: str) -> bool:
    """
    >>> is_supported_image("IMG_0001.JPG")
    True
    >>> is_supported_image("notes.txt")
    False
    """
    return pathlib.Path(filename).suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS


def list_images(directory: FilePath) -> list[pathlib.Path]:
    """
    Return the supported image files directly inside `directory`, sorted by name.

    Sub-directories are not searched.
    """
    directory = pathlib.Path(directory).expanduser()
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as e:
        raise DirectoryReadError(f"Could not read directory {directory}: {e}") from e

    images = [
        directory / entry.name
        for entry in entries
        if not entry.is_dir() and is_supported_image(entry.name)
    ]
    logger.info(f"Found {len(images)} images in '{directory}'")
    return images


def build_header(options: PipelineOptions) -> list[str]:
    header = ["Filename", "Raw Latitude", "Raw Longitude"]
    if options.convert_coordinates:
        header += ["Formatted Latitude", "Formatted Longitude"]
    if options.include_altitude:
        header += ["Raw Altitude", "Altitude Ref"]
        if options.convert_coordinates:
            header += ["Formatted Altitude"]
    if options.reverse_geocode:
        header += ["Reverse Geocode Response"]
    return header


def format_decimal(value: Optional[float]) -> str:
    """
    Shortest fixed-point text for a rounded coordinate.

    >>> format_decimal(-79.97666700)
    '-79.976667'
    >>> format_decimal(10.0)
    '10'
    >>> format_decimal(-0.0)
    '0'
    """
    if value is None:
        return ""
    if value == 0:
        value = 0.0
    return f"{value:.6f}".rstrip("0").rstrip(".")


def resolve_longitude(metadata: GPSMetadata, options: PipelineOptions) -> float:
    """
    Convert the raw longitude, letting an explicit GPSLongitudeRef win
    over any sign carried by the raw value when enabled.
    """
    if options.adjust_longitude_sign and metadata.longitude_ref:
        magnitude = abs(dms_to_decimal(metadata.longitude, "E"))
        return magnitude * longitude_sign(metadata.as_tags()) or 0.0
    return dms_to_decimal(metadata.longitude)


def build_record(
    metadata: GPSMetadata,
    options: PipelineOptions,
    geocoder: Optional[Geocoder] = None,
) -> ImageRecord:
    """
    Turn the GPS tags of one image into an output record.

    Raises `CoordinateParseError` or `GeocodingError` if a step fails.
    """
    record = ImageRecord(
        filename=metadata.filename,
        raw_latitude=metadata.latitude,
        raw_longitude=metadata.longitude,
    )

    if options.include_altitude:
        record.raw_altitude = metadata.altitude
        record.altitude_ref = metadata.altitude_ref

    if options.convert_coordinates:
        record.formatted_latitude = dms_to_decimal(
            metadata.latitude, metadata.latitude_ref
        )
        record.formatted_longitude = resolve_longitude(metadata, options)
        if options.include_altitude:
            record.formatted_altitude = parse_altitude(
                metadata.altitude, metadata.altitude_ref
            )

    if options.reverse_geocode:
        if geocoder is None:
            raise ValueError("A geocoder is required when reverse_geocode is enabled")
        record.geocode_response = geocoder(
            record.formatted_latitude, record.formatted_longitude
        )

    return record


def record_to_row(record: ImageRecord, options: PipelineOptions) -> list[str]:
    row = [record.filename, record.raw_latitude, record.raw_longitude]
    if options.convert_coordinates:
        row += [
            format_decimal(record.formatted_latitude),
            format_decimal(record.formatted_longitude),
        ]
    if options.include_altitude:
        row += [record.raw_altitude, record.altitude_ref]
        if options.convert_coordinates:
            row += [format_decimal(record.formatted_altitude)]
    if options.reverse_geocode:
        row += [record.geocode_response or ""]
    return row


def iter_rows(
    images: list[pathlib.Path],
    source: MetadataSource,
    options: PipelineOptions,
    summary: RunSummary,
    geocoder: Optional[Geocoder] = None,
) -> Iterator[list[str]]:
    """
    Yield one CSV row per image, logging and skipping images that fail.
    """
    for path in images:
        metadata = source.get_metadata(path)
        if isinstance(metadata, MetadataError):
            logger.error(f"Error concerning {metadata.filename}: {metadata.error}")
            summary.skipped += 1
            continue

        try:
            record = build_record(metadata, options, geocoder=geocoder)
        except CoordinateParseError as e:
            logger.error(f"Error converting coordinates for {metadata.filename}: {e}")
            summary.skipped += 1
            continue
        except GeocodingError as e:
            logger.error(
                f"Error during reverse geocoding for {metadata.filename}: {e}"
            )
            summary.skipped += 1
            continue

        summary.processed += 1
        yield record_to_row(record, options)


def process_directory(
    directory: FilePath,
    outfile: FilePath,
    source: MetadataSource,
    options: Optional[PipelineOptions] = None,
    geocoder: Optional[Geocoder] = None,
) -> RunSummary:
    """
    Write a CSV row for every supported image in `directory`.

    Rows are written as they are produced, so rows already written stay in
    the output file if the run is interrupted. Raises `DirectoryReadError`
    if the directory cannot be listed and `OSError` if the output file
    cannot be created.
    """
    options = options or PipelineOptions()
    images = list_images(directory)
    summary = RunSummary(outfile=str(outfile))

    with source:
        rows = iter_rows(images, source, options, summary, geocoder=geocoder)
        export_rows(rows, header=build_header(options), filepath=outfile)

    logger.info(
        f"Wrote {summary.processed} rows to '{outfile}', skipped {summary.skipped} images"
    )
    return summary
