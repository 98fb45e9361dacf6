import pathlib
import sys
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich import print as rprint

from exifgps.common.constants import ARCGIS_REVERSE_GEOCODE_URL, DEFAULT_OUTFILE
from exifgps.metadata import MetadataSourceChoice
from exifgps.pipeline import Variant


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="exifgps_",
        extra="ignore",
    )

    outfile: pathlib.Path = Field(
        default=pathlib.Path(DEFAULT_OUTFILE),
        title="Output file",
        description="CSV file written by `exifgps extract`. Existing files are overwritten.",
    )
    variant: Variant = Field(
        default=Variant.geocode,
        title="Output variant",
        description="Which optional steps and columns are active, see `exifgps show variants`.",
    )
    metadata_source: MetadataSourceChoice = Field(
        default=MetadataSourceChoice.exiftool,
        title="Metadata source",
        description="Read GPS tags with the ExifTool binary or with Pillow.",
    )
    exiftool_executable: Optional[str] = Field(
        default=None,
        title="ExifTool executable",
        description="Path to the exiftool binary. Defaults to `exiftool` on the PATH.",
    )
    geocode_url: str = ARCGIS_REVERSE_GEOCODE_URL
    geocode_lang_code: str = "en"
    geocode_timeout: float = 30
    geocode_retry_max: int = 0
    geocode_retry_backoff: float = 0.5

    @field_validator("outfile")
    @classmethod
    def validate_path(cls, v):
        """
        Expand `~` in the output path.
        """
        return pathlib.Path(v).expanduser()

    @field_validator("geocode_retry_max")
    @classmethod
    def validate_retries(cls, v):
        if v < 0:
            raise ValueError("geocode_retry_max must be zero or greater")
        return v


cli_help_message = """
    Configuration for the CLI is currently set in the following sources, in order of priority:
        - Command line options
        - The system environment (os.environ)
        - ".env" file, prefix settings with "EXIFGPS_"
    """


@lru_cache
def read_settings(*args, **kwargs):
    try:
        return Settings(*args, **kwargs)
    except ValidationError as e:
        rprint(cli_help_message)
        rprint(e)
        sys.exit(1)


if __name__ == "__main__":
    rprint(read_settings())
