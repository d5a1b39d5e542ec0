"""Moon solver: observer location + instant to the quantities that light and orient a lunar sphere.

The solver is a pure function: it reads no global state and keeps none.
The only clock read happens when the supplied instant is unusable and
"now" is substituted for it.

Scene convention for ``sun_dir``: the tidally locked Moon sits at the
origin, the camera is on +Z looking at the origin, +X is right and +Y is
up. New Moon puts the light behind the body (-Z), Full Moon in front (+Z),
First Quarter on the right (+X), Last Quarter on the left (-X).
"""

import logging
import math
from datetime import date as calendar_date
from datetime import datetime, timedelta, timezone

from thatnightmoon.ephemeris import EphemerisProvider, get_default_provider
from thatnightmoon.models import MoonSolution, ObserverInput, Vector3
from thatnightmoon.vectors import (
    cross,
    disk_frame,
    equatorial_to_vector,
    normalize,
    position_angle,
)

logger = logging.getLogger(__name__)

AU_KM = 149_597_870.7
SYNODIC_MONTH_DAYS = 29.530588853
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=timezone.utc)

# (waxing name, waning name, northern waxing emoji, northern waning emoji)
_NEW = ("New Moon", "🌑")
_FULL = ("Full Moon", "🌕")
_QUARTER = ("First Quarter", "Last Quarter", "🌓", "🌗")
_CRESCENT = ("Waxing Crescent", "Waning Crescent", "🌒", "🌘")
_GIBBOUS = ("Waxing Gibbous", "Waning Gibbous", "🌔", "🌖")

PHASE_NAMES: tuple[str, ...] = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_instant(value: object) -> datetime | None:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError:
            # Offset pushes the instant past year 1 or 9999
            return None
    if isinstance(value, calendar_date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return _coerce_instant(parsed)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def sanitize_instant(value: object, provider: EphemerisProvider | None = None) -> datetime:
    """Coerce an instant-like value to an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), dates, ISO-8601
    strings and POSIX timestamps. Anything unusable, including an instant
    the provider's ephemeris does not cover, is replaced with the current
    instant instead of raising.
    """
    instant = _coerce_instant(value)
    if instant is None:
        logger.warning("Unusable instant %r, using the current time", value)
        return _now()
    if provider is not None and not provider.covers(instant):
        logger.warning("Instant %s outside ephemeris coverage, using the current time", instant)
        return _now()
    return instant


def normalize_hours(hours: float) -> float:
    """Map any real number of hours into [0, 24)."""
    h = hours % 24.0
    return 0.0 if h >= 24.0 else h


def local_sidereal_time(gst_hours: float, lon_deg: float) -> float:
    return normalize_hours(gst_hours + lon_deg / 15.0)


def hour_angle(lst_hours: float, ra_hours: float) -> float:
    """Hour angle in radians (15° per hour), in [0, 2π)."""
    return normalize_hours(lst_hours - ra_hours) * (math.pi / 12.0)


def parallactic_angle(hour_angle_rad: float, lat_deg: float, dec_deg: float) -> float:
    """Parallactic angle q = atan2(sin H, tan φ cos δ − sin δ cos H), radians."""
    phi = math.radians(lat_deg)
    dec = math.radians(dec_deg)
    denom = math.tan(phi) * math.cos(dec) - math.sin(dec) * math.cos(hour_angle_rad)
    return math.atan2(math.sin(hour_angle_rad), denom)


def is_waxing(sun_geo: Vector3, moon_geo: Vector3) -> bool:
    """Waxing when the Moon lies east of the Sun: z of (sun × moon) is non-negative."""
    return cross(sun_geo, moon_geo)[2] >= 0.0


def classify_phase(illum_fraction: float, waxing: bool, southern: bool = False) -> tuple[str, str]:
    """Name and emoji of one of the eight phases.

    The quarter and the new/full bands are tolerance windows; an exact
    equality test would almost never fire. South of the equator the disk
    appears inverted, so the emoji within each waxing/waning pair swap
    while the name does not.

    Returns:
        Tuple (phase_name, phase_emoji).
    """
    if illum_fraction < 0.01:
        return _NEW
    if illum_fraction > 0.99:
        return _FULL
    if abs(illum_fraction - 0.5) < 0.05:
        pair = _QUARTER
    elif illum_fraction < 0.5:
        pair = _CRESCENT
    else:
        pair = _GIBBOUS
    waxing_name, waning_name, waxing_emoji, waning_emoji = pair
    if southern:
        waxing_emoji, waning_emoji = waning_emoji, waxing_emoji
    if waxing:
        return waxing_name, waxing_emoji
    return waning_name, waning_emoji


def orbital_angle_deg(phase_angle_deg: float, waxing: bool) -> float:
    """Position in the synodic cycle: 0° new, 90° first quarter, 180° full, 270° last quarter."""
    if waxing:
        return (180.0 - phase_angle_deg) % 360.0
    return (180.0 + phase_angle_deg) % 360.0


def sun_direction(phase_angle_deg: float, waxing: bool) -> Vector3:
    """Light direction for a fixed Moon viewed from +Z.

    A sphere lit from this direction shows (1 + cos phase) / 2 of its
    disk to the camera, the same fraction the ephemeris reports.
    """
    theta = math.radians(orbital_angle_deg(phase_angle_deg, waxing))
    return normalize((math.sin(theta), 0.0, -math.cos(theta)))


def synodic_age_days(instant: datetime) -> float:
    """Mean moon age: days since the last new moon of the mean synodic cycle."""
    elapsed = (instant - REFERENCE_NEW_MOON) / timedelta(days=1)
    return elapsed % SYNODIC_MONTH_DAYS


def solve(
    date: object,
    lat: float,
    lon: float,
    elevation: float = 0.0,
    provider: EphemerisProvider | None = None,
) -> MoonSolution:
    """Compute the Moon's phase and orientation for an observer.

    Args:
        date: Instant-like value; unusable values fall back to "now".
        lat: Observer latitude (degrees), not range-checked.
        lon: Observer longitude (degrees, east positive).
        elevation: Metres above the ellipsoid, passed to the provider.
        provider: Ephemeris provider. Defaults to the shared skyfield one.

    Returns:
        A fully populated MoonSolution.
    """
    provider = provider or get_default_provider()
    instant = sanitize_instant(date, provider)

    illum = provider.illumination("moon", instant)
    sun_geo = provider.position("sun", instant)
    moon_geo = provider.position("moon", instant)
    topo = provider.topocentric_equatorial("moon", instant, lat, lon, elevation)
    moon_dir = normalize(provider.topocentric_direction("moon", instant, lat, lon, elevation))
    gst = provider.sidereal_time(instant)
    axis = provider.rotation_axis("moon", instant)
    lib = provider.libration(instant)

    distance_km = topo.distance_au * AU_KM

    lst = local_sidereal_time(gst, lon)
    H = hour_angle(lst, topo.ra_hours)
    q = parallactic_angle(H, lat, topo.dec_deg)

    waxing = is_waxing(sun_geo, moon_geo)
    phase_name, phase_emoji = classify_phase(illum.fraction, waxing, southern=lat < 0)
    sun_dir = sun_direction(illum.phase_angle_deg, waxing)

    # Position angles on the apparent disk, all directions in ICRF
    frame = disk_frame(moon_dir)
    bright_limb = position_angle(frame, moon_dir, normalize(sun_geo))
    pole = position_angle(frame, moon_dir, equatorial_to_vector(axis.ra_hours, axis.dec_deg))

    logger.debug(
        "Moon at %s (%.4f, %.4f): %s %.1f%% phase=%.1f° sun_dir=[%.2f, %.2f, %.2f]",
        instant.isoformat(timespec="minutes"),
        lat,
        lon,
        phase_name,
        illum.fraction * 100,
        illum.phase_angle_deg,
        *sun_dir,
    )

    return MoonSolution(
        sun_dir=sun_dir,
        illum_fraction=illum.fraction,
        phase_angle_deg=illum.phase_angle_deg,
        distance_km=distance_km,
        parallactic_angle_rad=q,
        ra=topo.ra_hours,
        dec=topo.dec_deg,
        phase_name=phase_name,
        phase_emoji=phase_emoji,
        bright_limb_angle_rad=bright_limb,
        pole_angle_rad=pole,
        mlat=lib.mlat_deg,
        mlon=lib.mlon_deg,
        is_waxing=waxing,
    )


def solve_input(query: ObserverInput, provider: EphemerisProvider | None = None) -> MoonSolution:
    """Top-level entry point: takes an ObserverInput and returns a MoonSolution."""
    return solve(query.date, query.lat, query.lon, query.elevation, provider=provider)
