"""Observer location helpers: reverse geocoding and timezone lookup."""

import logging
import os

import httpx
from pytz import timezone, utc
from pytz.tzinfo import BaseTzInfo
from timezonefinder import TimezoneFinder

logger = logging.getLogger(__name__)

_NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
_DEFAULT_USER_AGENT = "ThatNightMoon/1.0 (https://github.com/tae0y/that-night-sky)"

_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Reverse geocoder call failure."""


def coordinate_label(lat: float, lon: float) -> str:
    """Raw coordinate pair shown when no place name is available."""
    return f"{lat:.4f}°, {lon:.4f}°"


def _format_address(address: dict) -> str | None:
    place = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("county")
    )
    region = address.get("state") or address.get("country")
    if place and region:
        return f"{place}, {region}"
    return place or region or None


def reverse_geocode(lat: float, lon: float) -> str:
    """Resolve coordinates to a short place name via Nominatim (OpenStreetMap).

    Args:
        lat: Latitude (decimal degrees).
        lon: Longitude (decimal degrees).

    Returns:
        "place, region", or whichever of the two is known.

    Raises:
        GeocodingError: On HTTP/transport failure or when the response
            carries no usable address.
    """
    params = {"lat": lat, "lon": lon, "format": "json", "addressdetails": 1}
    headers = {"User-Agent": os.environ.get("NOMINATIM_USER_AGENT", _DEFAULT_USER_AGENT)}
    try:
        resp = httpx.get(_NOMINATIM_REVERSE_URL, params=params, headers=headers, timeout=10)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        raise GeocodingError(f"Nominatim request failed: {e}") from e

    if not isinstance(data, dict):
        raise GeocodingError("Unexpected Nominatim response")
    name = _format_address(data.get("address") or {})
    if name is None:
        raise GeocodingError(f"No place found at {coordinate_label(lat, lon)}")
    return name


def location_name(lat: float, lon: float) -> str:
    """Place name for display; falls back to the coordinate pair, never raises."""
    try:
        return reverse_geocode(lat, lon)
    except GeocodingError as e:
        logger.warning("Geocoding failed: %s", e)
        return coordinate_label(lat, lon)


def timezone_for(lat: float, lon: float) -> BaseTzInfo:
    """Local timezone at the coordinates; UTC over open ocean or unknown areas."""
    try:
        tz_str = _tf.timezone_at(lat=lat, lng=lon)
    except ValueError:
        # Out-of-range coordinates
        tz_str = None
    if tz_str is None:
        return utc
    return timezone(tz_str)
