"""
Conversion of sexagesimal GPS coordinates to signed decimal degrees.

Coordinates are read from image metadata in the form ExifTool prints them,
e.g. `40 deg 26' 46.00" N`, together with a hemisphere reference tag such as
`GPSLatitudeRef`. The hemisphere decides the sign, the numbers decide the
magnitude.
"""

import math
import re
from typing import Any, Mapping, Optional

from .common.constants import COORDINATE_PRECISION
from .common.logs import logger

DMS_SEPARATORS = re.compile(r"[ deg'\"]+")
HEMISPHERE_WORDS = {"NORTH": "N", "SOUTH": "S", "EAST": "E", "WEST": "W"}
HEMISPHERE_LETTERS = ("N", "S", "E", "W")
BELOW_SEA_LEVEL = ("BELOW SEA LEVEL", "1")


class CoordinateParseError(ValueError):
    pass


def split_dms(raw: str) -> list[str]:
    """
    Split a DMS string on the separator characters, dropping empty tokens.

    >>> split_dms("40 deg 26' 46.00\\" N")
    ['40', '26', '46.00', 'N']
    """
    return [token for token in DMS_SEPARATORS.split(raw or "") if token]


def normalize_reference(reference: Optional[str]) -> str:
    """
    Upper-case a hemisphere reference and reduce full words to their letter.

    >>> normalize_reference(" south ")
    'S'
    >>> normalize_reference("e")
    'E'
    """
    reference = (reference or "").strip().upper()
    return HEMISPHERE_WORDS.get(reference, reference)


def is_negative_hemisphere(reference: Optional[str]) -> bool:
    """
    True if the reference points south of the equator or west of the
    prime meridian.

    Full words are reduced to their letter first, so "East" is positive even
    though it contains an S.

    >>> [is_negative_hemisphere(r) for r in ("N", "s", "South", "East", "W", "")]
    [False, True, True, False, True, False]
    """
    reference = normalize_reference(reference)
    return "S" in reference or "W" in reference


def round_coordinate(value: float, precision: int = COORDINATE_PRECISION) -> float:
    """
    Round half away from zero to a fixed number of decimal places.

    >>> round_coordinate(1.23456789)
    1.234568
    >>> round_coordinate(-1.23456789)
    -1.234568
    >>> round_coordinate(-0.0000001)
    0.0
    """
    factor = 10**precision
    rounded = math.copysign(math.floor(abs(value) * factor + 0.5) / factor, value)
    # No negative zero
    return rounded or 0.0


def embedded_hemisphere(tokens: list[str]) -> str:
    """
    Return the hemisphere letter ExifTool appends after the seconds, if any.
    """
    if len(tokens) > 3 and tokens[3].upper() in HEMISPHERE_LETTERS:
        return tokens[3].upper()
    return ""


def dms_to_decimal(raw: str, reference: Optional[str] = "") -> float:
    """
    Convert a degrees/minutes/seconds string to signed decimal degrees.

    The sign comes from the first of these that is available:
    the explicit `reference`, a hemisphere letter trailing the raw string,
    then the sign of the degrees. Only one of them is ever applied.

    >>> dms_to_decimal("40 deg 26' 46.00\\"", "N")
    40.446111
    >>> dms_to_decimal("79 deg 58' 36.00\\"", "W")
    -79.976667
    >>> dms_to_decimal("79 deg 58' 36.00\\" W", "")
    -79.976667
    """
    tokens = split_dms(raw)
    if len(tokens) < 3:
        raise CoordinateParseError(
            f"Expected degrees, minutes and seconds in '{raw}', found {len(tokens)} value(s)"
        )

    try:
        degrees, minutes, seconds = (float(token) for token in tokens[:3])
    except ValueError as e:
        raise CoordinateParseError(f"Could not parse coordinate '{raw}': {e}") from e
    if not all(math.isfinite(v) for v in (degrees, minutes, seconds)):
        raise CoordinateParseError(f"Coordinate '{raw}' is not a finite number")

    decimal = abs(degrees) + minutes / 60 + seconds / 3600
    logger.debug(
        f"Parsed '{raw}' with reference '{reference}'",
        decimal=decimal,
    )

    hemisphere = normalize_reference(reference) or embedded_hemisphere(tokens)
    if hemisphere:
        negative = is_negative_hemisphere(hemisphere)
    else:
        negative = math.copysign(1, degrees) < 0

    if negative:
        decimal = -decimal
    logger.debug(f"Value after hemisphere adjustment: {decimal}")

    return round_coordinate(decimal)


def longitude_sign(fields: Mapping[str, Any]) -> int:
    """
    Sign implied by an explicit `GPSLongitudeRef` field, positive by default.

    >>> longitude_sign({"GPSLongitudeRef": "West"})
    -1
    >>> longitude_sign({})
    1
    """
    ref = fields.get("GPSLongitudeRef")
    if isinstance(ref, str) and normalize_reference(ref) == "W":
        return -1
    return 1


def parse_altitude(raw: str, reference: Optional[str] = "") -> Optional[float]:
    """
    Read the altitude in metres from a value such as `123.4 m`.

    >>> parse_altitude("123.4 m", "Above Sea Level")
    123.4
    >>> parse_altitude("12 m", "Below Sea Level")
    -12.0
    >>> parse_altitude("") is None
    True
    """
    if not raw or not raw.strip():
        return None
    match = re.search(r"-?\d+(?:\.\d+)?", raw)
    if not match:
        raise CoordinateParseError(f"Could not parse altitude '{raw}'")
    altitude = abs(float(match.group()))
    if (reference or "").strip().upper() in BELOW_SEA_LEVEL:
        altitude = -altitude
    return altitude
