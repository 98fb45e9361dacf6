import functools
import pathlib
from typing import Optional

import typer
from rich import print

from exifgps import logger
from exifgps.cli import settings, show
from exifgps.common.utils import get_http_session
from exifgps.coordinates import CoordinateParseError, dms_to_decimal
from exifgps.geocoding import reverse_geocode
from exifgps.metadata import (
    MetadataSourceChoice,
    MetadataSourceError,
    get_metadata_source,
)
from exifgps.pipeline import DirectoryReadError, Variant, process_directory

cli = typer.Typer(no_args_is_help=True)
cli.add_typer(show.cli, name="show", help="Show settings and output variants")


@cli.command()
def extract(
    directory: pathlib.Path = typer.Argument(..., help="Directory containing images"),
    outfile: Optional[pathlib.Path] = typer.Option(
        None, help="CSV file to write, defaults to the configured outfile"
    ),
    variant: Optional[Variant] = typer.Option(
        None, help="Preset of optional steps and columns"
    ),
    geocode: Optional[bool] = typer.Option(
        None, help="Override whether reverse geocoding runs"
    ),
    altitude: Optional[bool] = typer.Option(
        None, help="Override whether altitude columns are written"
    ),
    source: Optional[MetadataSourceChoice] = typer.Option(
        None, help="Read metadata with ExifTool or Pillow"
    ),
):
    """
    Extract the GPS coordinates of every image in DIRECTORY into a CSV file.
    """
    variant = variant or settings.variant
    outfile = outfile or settings.outfile
    options = variant.options.model_copy()
    if geocode is not None:
        options.reverse_geocode = geocode
        if geocode:
            options.convert_coordinates = True
    if altitude is not None:
        options.include_altitude = altitude

    geocoder = None
    if options.reverse_geocode:
        session = get_http_session(
            max_retries=settings.geocode_retry_max,
            backoff_factor=settings.geocode_retry_backoff,
        )
        geocoder = functools.partial(
            reverse_geocode,
            session=session,
            url=settings.geocode_url,
            lang_code=settings.geocode_lang_code,
            timeout=settings.geocode_timeout,
        )

    metadata_source = get_metadata_source(
        source or settings.metadata_source,
        exiftool_executable=settings.exiftool_executable,
    )

    logger.info(f"Extracting GPS data from '{directory}' using the {variant.value} variant")
    try:
        summary = process_directory(
            directory,
            outfile,
            source=metadata_source,
            options=options,
            geocoder=geocoder,
        )
    except (DirectoryReadError, MetadataSourceError) as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        raise typer.Exit(code=1)

    print(summary)


@cli.command()
def convert(
    raw: str = typer.Argument(..., help='Coordinate such as "40 deg 26\' 46.00\\""'),
    reference: str = typer.Argument("", help="Hemisphere reference: N, S, E or W"),
):
    """
    Convert a single degrees/minutes/seconds coordinate to decimal degrees.
    """
    try:
        value = dms_to_decimal(raw, reference)
    except CoordinateParseError as e:
        logger.error(str(e))
        raise typer.Exit(code=1)
    print(value)


if __name__ == "__main__":
    cli()
