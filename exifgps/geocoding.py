"""Reverse geocoding client for the ArcGIS World GeocodeServer."""

import json
from typing import Optional

import requests

from .common.constants import ARCGIS_REVERSE_GEOCODE_URL
from .common.logs import logger
from .common.utils import get_http_session


class GeocodingError(Exception):
    pass


def build_location(latitude: float, longitude: float) -> str:
    """
    Format the `location` query parameter expected by the ArcGIS API.

    >>> build_location(40.446111, -79.976667)
    '{"x": -79.976667, "y": 40.446111}'
    """
    return json.dumps({"x": longitude, "y": latitude})


def reverse_geocode(
    latitude: float,
    longitude: float,
    session: Optional[requests.Session] = None,
    url: str = ARCGIS_REVERSE_GEOCODE_URL,
    lang_code: str = "en",
    timeout: float = 30,
) -> str:
    """
    Look up the address nearest to a coordinate pair.

    Calls: GET {url}?location={"x": <lon>, "y": <lat>}&f=json&langCode=<lang>

    Args:
        latitude: Decimal latitude
        longitude: Decimal longitude
        session: Session to reuse, a new one without retries is created if None
        url: Reverse geocode endpoint
        lang_code: Language of the returned address
        timeout: Seconds to wait for the server

    Returns:
        The response body, re-indented with tabs for readability.

    Raises:
        GeocodingError: on transport failures, error statuses or a body
            that is not JSON.
    """
    params = {
        "location": build_location(latitude, longitude),
        "f": "json",
        "langCode": lang_code,
    }
    session = session or get_http_session(max_retries=0)

    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise GeocodingError(f"Reverse geocode request to {url} failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise GeocodingError(f"Reverse geocode response is not valid JSON: {e}") from e

    logger.debug(f"Reverse geocode response for ({latitude}, {longitude})", data=data)
    return json.dumps(data, indent="\t")
