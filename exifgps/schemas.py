from typing import Optional

import pydantic


class GPSMetadata(pydantic.BaseModel):
    """
    GPS tags read from a single image, as printed by the metadata tool.

    Missing tags are stored as empty strings.
    """

    filename: str
    latitude: str = ""
    latitude_ref: str = ""
    longitude: str = ""
    longitude_ref: str = ""
    altitude: str = ""
    altitude_ref: str = ""

    @classmethod
    def from_tags(cls, filename: str, tags: dict) -> "GPSMetadata":
        def _text(name):
            value = tags.get(name)
            return "" if value is None else str(value)

        return cls(
            filename=filename,
            latitude=_text("GPSLatitude"),
            latitude_ref=_text("GPSLatitudeRef"),
            longitude=_text("GPSLongitude"),
            longitude_ref=_text("GPSLongitudeRef"),
            altitude=_text("GPSAltitude"),
            altitude_ref=_text("GPSAltitudeRef"),
        )

    def as_tags(self) -> dict[str, str]:
        return {
            "GPSLatitude": self.latitude,
            "GPSLatitudeRef": self.latitude_ref,
            "GPSLongitude": self.longitude,
            "GPSLongitudeRef": self.longitude_ref,
            "GPSAltitude": self.altitude,
            "GPSAltitudeRef": self.altitude_ref,
        }


class MetadataError(pydantic.BaseModel):
    """Metadata could not be read from a single file."""

    filename: str
    error: str


class ImageRecord(pydantic.BaseModel):
    """One row of the output CSV."""

    filename: str
    raw_latitude: str = ""
    raw_longitude: str = ""
    formatted_latitude: Optional[float] = None
    formatted_longitude: Optional[float] = None
    raw_altitude: str = ""
    altitude_ref: str = ""
    formatted_altitude: Optional[float] = None
    geocode_response: Optional[str] = None


class RunSummary(pydantic.BaseModel):
    outfile: str
    processed: int = 0
    skipped: int = 0
