"""Data model definitions — explicit boundaries between input, ephemeris, solve, and render layers."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

Vector3 = tuple[float, float, float]
Body = Literal["sun", "moon"]


@dataclass(frozen=True)
class ObserverInput:
    """Raw solver input. The instant is not yet sanitized."""

    date: datetime | str | float | None  # Instant; invalid values fall back to "now"
    lat: float  # Latitude (decimal degrees)
    lon: float  # Longitude (decimal degrees)
    elevation: float = 0.0  # Metres above the ellipsoid


@dataclass(frozen=True)
class EquatorialPosition:
    """Apparent equatorial coordinates returned by the ephemeris provider."""

    ra_hours: float  # Right ascension (hours, 0-24)
    dec_deg: float  # Declination (degrees)
    distance_au: float  # Distance (astronomical units)


@dataclass(frozen=True)
class Illumination:
    fraction: float  # Illuminated fraction of the disk (0-1)
    phase_angle_deg: float  # Sun-Moon-Earth angle (0=full, 180=new)


@dataclass(frozen=True)
class RotationAxis:
    """Body north pole direction (ICRF) and prime meridian angle."""

    ra_hours: float
    dec_deg: float
    spin_deg: float


@dataclass(frozen=True)
class Libration:
    mlat_deg: float  # Libration in latitude
    mlon_deg: float  # Libration in longitude


@dataclass(frozen=True)
class MoonSolution:
    """The sole output of the solver. Fully derived snapshot for renderers."""

    sun_dir: Vector3  # Unit light direction, camera on +Z looking at the origin
    illum_fraction: float  # 0 (new) .. 1 (full)
    phase_angle_deg: float  # Sun-Moon-Earth angle
    distance_km: float  # Moon -> observer
    parallactic_angle_rad: float  # Zenith position angle at the Moon
    ra: float  # Topocentric right ascension (hours)
    dec: float  # Topocentric declination (degrees)
    phase_name: str
    phase_emoji: str
    bright_limb_angle_rad: float  # Measured east of celestial north
    pole_angle_rad: float  # Moon's north pole, measured east of celestial north
    mlat: float  # Libration latitude (degrees)
    mlon: float  # Libration longitude (degrees)
    is_waxing: bool = True
