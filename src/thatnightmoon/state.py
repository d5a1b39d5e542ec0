"""Application state and the UI boundary. Owned by the Streamlit controller; the solver never reads it."""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Literal

from thatnightmoon.ephemeris import EphemerisProvider
from thatnightmoon.geocode import timezone_for
from thatnightmoon.models import MoonSolution
from thatnightmoon.solver import solve

logger = logging.getLogger(__name__)

LocationStatus = Literal["unknown", "requesting", "granted", "denied", "unavailable"]
Orientation = Literal["phase", "sky"]

SCRUB_STEP_HOURS = 2
SCRUB_MAX_STEPS = 360  # ±30 days

# Shown when the solver fails unexpectedly
FALLBACK_SOLUTION = MoonSolution(
    sun_dir=(1.0, 0.0, 0.0),
    illum_fraction=0.5,
    phase_angle_deg=90.0,
    distance_km=384_400.0,
    parallactic_angle_rad=0.0,
    ra=0.0,
    dec=0.0,
    phase_name="Unknown",
    phase_emoji="🌕",
    bright_limb_angle_rad=0.0,
    pole_angle_rad=0.0,
    mlat=0.0,
    mlon=0.0,
)


def _now_local_minute() -> datetime.datetime:
    return datetime.datetime.now().replace(second=0, microsecond=0)


@dataclass
class AppState:
    """Everything the UI controller owns between reruns."""

    lat: float = -37.8136  # Melbourne
    lon: float = 144.9631
    elevation: float = 0.0
    local_date: datetime.date = field(default_factory=lambda: _now_local_minute().date())
    local_time: datetime.time = field(default_factory=lambda: _now_local_minute().time())
    scrub_steps: int = 0  # 2-hour increments
    speed_days_per_sec: float = 0.0  # playback speed, 0 = paused
    location_status: LocationStatus = "unknown"
    location_name: str = "Melbourne, Victoria"
    lang: str = "en"
    orientation: Orientation = "phase"


def scrub_hours(steps: int) -> int:
    """Time-travel offset in hours, clamped to ±30 days."""
    steps = max(-SCRUB_MAX_STEPS, min(SCRUB_MAX_STEPS, steps))
    return steps * SCRUB_STEP_HOURS


def format_scrub(total_hours: int) -> str:
    """Readable time-travel offset: ``+26h (+1d 2h)``, ``-4h (-4h)``, ``+0h (0h)``."""
    sign = "-" if total_hours < 0 else "+"
    days, hours = divmod(abs(total_hours), 24)
    if days:
        detail = f"{sign}{days}d {hours}h"
    elif total_hours:
        detail = f"{sign}{hours}h"
    else:
        detail = "0h"
    return f"{sign}{abs(total_hours)}h ({detail})"


def observation_instant(state: AppState) -> datetime.datetime:
    """UTC instant for the state's local date/time at its location, plus the scrub offset."""
    local_tz = timezone_for(state.lat, state.lon)
    naive = datetime.datetime.combine(state.local_date, state.local_time)
    local_dt = local_tz.localize(naive)
    utc_dt = local_dt.astimezone(datetime.timezone.utc)
    return utc_dt + datetime.timedelta(hours=scrub_hours(state.scrub_steps))


def playback_instants(
    start: datetime.datetime,
    days: float,
    fps: int = 12,
    speed_days_per_sec: float = 1.0,
) -> list[datetime.datetime]:
    """Instants sampled for animated playback at ``speed_days_per_sec``.

    Args:
        start: First instant.
        days: Span to cover.
        fps: Frames per second of the animation.
        speed_days_per_sec: Simulated days per second of playback.

    Returns:
        Ascending list of instants starting at ``start``.
    """
    if speed_days_per_sec <= 0 or days <= 0 or fps <= 0:
        return [start]
    step_days = speed_days_per_sec / fps
    count = int(days / step_days) + 1
    return [start + datetime.timedelta(days=i * step_days) for i in range(count)]


def solve_for_display(
    instant: datetime.datetime,
    lat: float,
    lon: float,
    elevation: float = 0.0,
    provider: EphemerisProvider | None = None,
) -> MoonSolution:
    """Solver call guarded by the UI boundary: any failure yields FALLBACK_SOLUTION."""
    try:
        return solve(instant, lat, lon, elevation, provider=provider)
    except Exception:
        logger.exception("Moon solver failed for %s (%.4f, %.4f)", instant, lat, lon)
        return FALLBACK_SOLUTION
