"""Ephemeris provider layer: skyfield positions plus analytic lunar orientation models."""

import logging
import math
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Protocol

import numpy as np
from skyfield import almanac
from skyfield.api import Loader, wgs84
from skyfield.framelib import ecliptic_frame

from thatnightmoon.models import (
    Body,
    EquatorialPosition,
    Illumination,
    Libration,
    RotationAxis,
    Vector3,
)

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent
_J2000 = 2451545.0

# Mean inclination of the lunar equator to the ecliptic (Meeus ch. 53)
_LUNAR_EQUATOR_INCLINATION_DEG = 1.54242


class EphemerisProvider(Protocol):
    """Capabilities the Moon solver needs. All instants are aware UTC datetimes."""

    def covers(self, instant: datetime) -> bool: ...

    def position(self, body: Body, instant: datetime) -> Vector3: ...

    def topocentric_equatorial(
        self,
        body: Body,
        instant: datetime,
        latitude: float,
        longitude: float,
        elevation: float = 0.0,
    ) -> EquatorialPosition: ...

    def topocentric_direction(
        self,
        body: Body,
        instant: datetime,
        latitude: float,
        longitude: float,
        elevation: float = 0.0,
    ) -> Vector3: ...

    def illumination(self, body: Body, instant: datetime) -> Illumination: ...

    def sidereal_time(self, instant: datetime) -> float: ...

    def rotation_axis(self, body: Body, instant: datetime) -> RotationAxis: ...

    def libration(self, instant: datetime) -> Libration: ...


def moon_rotation_axis(jd_tdb: float) -> RotationAxis:
    """IAU WGCCRE lunar pole and prime meridian (ICRF), including periodic terms.

    Args:
        jd_tdb: Julian date (TDB).

    Returns:
        RotationAxis with pole RA in hours, pole Dec and spin angle W in degrees.
    """
    d = jd_tdb - _J2000
    T = d / 36525.0

    e1 = math.radians(125.045 - 0.0529921 * d)
    e2 = math.radians(250.089 - 0.1059842 * d)
    e3 = math.radians(260.008 + 13.0120009 * d)
    e4 = math.radians(176.625 + 13.3407154 * d)
    e5 = math.radians(357.529 + 0.9856003 * d)
    e6 = math.radians(311.589 + 26.4057084 * d)
    e7 = math.radians(134.963 + 13.0649930 * d)
    e8 = math.radians(276.617 + 0.3287146 * d)
    e9 = math.radians(34.226 + 1.7484877 * d)
    e10 = math.radians(15.134 - 0.1589763 * d)
    e11 = math.radians(119.743 + 0.0036096 * d)
    e12 = math.radians(239.961 + 0.1643573 * d)
    e13 = math.radians(25.053 + 12.9590088 * d)

    ra = (
        269.9949
        + 0.0031 * T
        - 3.8787 * math.sin(e1)
        - 0.1204 * math.sin(e2)
        + 0.0700 * math.sin(e3)
        - 0.0172 * math.sin(e4)
        + 0.0072 * math.sin(e6)
        - 0.0052 * math.sin(e10)
        + 0.0043 * math.sin(e13)
    )
    dec = (
        66.5392
        + 0.0130 * T
        + 1.5419 * math.cos(e1)
        + 0.0239 * math.cos(e2)
        - 0.0278 * math.cos(e3)
        + 0.0068 * math.cos(e4)
        - 0.0029 * math.cos(e6)
        + 0.0009 * math.cos(e7)
        + 0.0008 * math.cos(e10)
        - 0.0009 * math.cos(e13)
    )
    spin = (
        38.3213
        + 13.17635815 * d
        - 1.4e-12 * d * d
        + 3.5610 * math.sin(e1)
        + 0.1208 * math.sin(e2)
        - 0.0642 * math.sin(e3)
        + 0.0158 * math.sin(e4)
        + 0.0252 * math.sin(e5)
        - 0.0066 * math.sin(e6)
        - 0.0047 * math.sin(e7)
        - 0.0046 * math.sin(e8)
        + 0.0028 * math.sin(e9)
        + 0.0052 * math.sin(e10)
        + 0.0040 * math.sin(e11)
        + 0.0019 * math.sin(e12)
        - 0.0044 * math.sin(e13)
    )
    return RotationAxis(ra_hours=(ra % 360.0) / 15.0, dec_deg=dec, spin_deg=spin % 360.0)


def optical_libration(lon_deg: float, lat_deg: float, jd_tt: float) -> Libration:
    """Optical libration from the Moon's geocentric ecliptic position (Meeus ch. 53).

    Nutation in longitude is neglected; the error is below 0.01°.

    Args:
        lon_deg: Apparent ecliptic longitude of the Moon (degrees, of date).
        lat_deg: Apparent ecliptic latitude of the Moon (degrees, of date).
        jd_tt: Julian date (TT).

    Returns:
        Libration in latitude and longitude (degrees, longitude in [-180, 180)).
    """
    T = (jd_tt - _J2000) / 36525.0
    T2 = T * T
    T3 = T2 * T
    T4 = T3 * T
    # Argument of latitude and ascending node of the mean lunar orbit
    F = 93.2720950 + 483202.0175233 * T - 0.0036539 * T2 - T3 / 3526000.0 + T4 / 863310000.0
    node = 125.0445479 - 1934.1362891 * T + 0.0020754 * T2 + T3 / 467441.0 - T4 / 60616000.0

    inc = math.radians(_LUNAR_EQUATOR_INCLINATION_DEG)
    W = math.radians(lon_deg - node)
    beta = math.radians(lat_deg)

    A = math.degrees(
        math.atan2(
            math.sin(W) * math.cos(beta) * math.cos(inc) - math.sin(beta) * math.sin(inc),
            math.cos(W) * math.cos(beta),
        )
    )
    mlon = (A - F + 180.0) % 360.0 - 180.0
    sin_b = -math.sin(W) * math.cos(beta) * math.sin(inc) - math.sin(beta) * math.cos(inc)
    mlat = math.degrees(math.asin(max(-1.0, min(1.0, sin_b))))
    return Libration(mlat_deg=mlat, mlon_deg=mlon)


def _as_vector(a: np.ndarray) -> Vector3:
    return (float(a[0]), float(a[1]), float(a[2]))


class SkyfieldEphemeris:
    """EphemerisProvider backed by a JPL kernel loaded through skyfield."""

    def __init__(self, data_dir: Path | str | None = None, kernel: str | None = None):
        data_dir = data_dir or os.environ.get("THATNIGHTMOON_DATA_DIR") or _ROOT / "resources"
        kernel = kernel or os.environ.get("THATNIGHTMOON_EPHEMERIS", "de421.bsp")
        self._loader = Loader(str(data_dir))
        self._eph = self._loader(kernel)
        self._ts = self._loader.timescale()
        self._earth = self._eph["earth"]
        segments = [s.spk_segment for s in self._eph.segments]
        self._start_jd = max(s.start_jd for s in segments)
        self._end_jd = min(s.end_jd for s in segments)
        logger.info(
            "Loaded ephemeris %s from %s (JD %.1f - %.1f)",
            kernel,
            data_dir,
            self._start_jd,
            self._end_jd,
        )

    def _time(self, instant: datetime):
        return self._ts.from_datetime(instant)

    def covers(self, instant: datetime) -> bool:
        t = self._time(instant)
        return bool(self._start_jd <= t.tdb <= self._end_jd)

    def position(self, body: Body, instant: datetime) -> Vector3:
        t = self._time(instant)
        apparent = self._earth.at(t).observe(self._eph[body]).apparent()  # type: ignore[union-attr]
        return _as_vector(apparent.position.au)

    def _topocentric(
        self, body: Body, instant: datetime, latitude: float, longitude: float, elevation: float
    ):
        t = self._time(instant)
        site = self._earth + wgs84.latlon(
            latitude_degrees=latitude,
            longitude_degrees=longitude,
            elevation_m=elevation,
        )
        return site.at(t).observe(self._eph[body]).apparent()

    def topocentric_equatorial(
        self,
        body: Body,
        instant: datetime,
        latitude: float,
        longitude: float,
        elevation: float = 0.0,
    ) -> EquatorialPosition:
        apparent = self._topocentric(body, instant, latitude, longitude, elevation)
        ra, dec, distance = apparent.radec(epoch="date")
        return EquatorialPosition(
            ra_hours=float(ra.hours), dec_deg=float(dec.degrees), distance_au=float(distance.au)
        )

    def topocentric_direction(
        self,
        body: Body,
        instant: datetime,
        latitude: float,
        longitude: float,
        elevation: float = 0.0,
    ) -> Vector3:
        apparent = self._topocentric(body, instant, latitude, longitude, elevation)
        p = apparent.position.au
        return _as_vector(p / np.linalg.norm(p))

    def illumination(self, body: Body, instant: datetime) -> Illumination:
        t = self._time(instant)
        phase = almanac.phase_angle(self._eph, body, t)
        fraction = almanac.fraction_illuminated(self._eph, body, t)
        return Illumination(
            fraction=min(1.0, max(0.0, float(fraction))),
            phase_angle_deg=float(phase.degrees) % 360.0,
        )

    def sidereal_time(self, instant: datetime) -> float:
        return float(self._time(instant).gast)

    def rotation_axis(self, body: Body, instant: datetime) -> RotationAxis:
        if body != "moon":
            raise ValueError(f"No rotation model for {body}")
        return moon_rotation_axis(float(self._time(instant).tdb))

    def libration(self, instant: datetime) -> Libration:
        t = self._time(instant)
        moon = self._earth.at(t).observe(self._eph["moon"]).apparent()  # type: ignore[union-attr]
        lat, lon, _ = moon.frame_latlon(ecliptic_frame)
        return optical_libration(float(lon.degrees), float(lat.degrees), float(t.tt))


@lru_cache(maxsize=1)
def get_default_provider() -> SkyfieldEphemeris:
    """Process-wide provider; the kernel is loaded (and downloaded if missing) on first use."""
    return SkyfieldEphemeris()
