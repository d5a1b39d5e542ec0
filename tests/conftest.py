import math
from dataclasses import dataclass, field
from datetime import datetime

import matplotlib
import pytest

matplotlib.use("Agg")

from thatnightmoon.models import (  # noqa: E402
    EquatorialPosition,
    Illumination,
    Libration,
    RotationAxis,
    Vector3,
)
from thatnightmoon.vectors import equatorial_to_vector  # noqa: E402

MOON_AU = 384_400 / 149_597_870.7


@dataclass
class FakeEphemeris:
    """Deterministic provider: Sun on +x, Moon on the equator at a given elongation."""

    elongation_deg: float = 90.0
    fraction: float = 0.5
    phase_angle_deg: float = 90.0
    dec_deg: float = 0.0
    distance_au: float = MOON_AU
    gst_hours: float = 0.0
    axis: RotationAxis = RotationAxis(ra_hours=18.0, dec_deg=66.5, spin_deg=0.0)
    lib: Libration = Libration(mlat_deg=1.5, mlon_deg=-2.5)
    covered: bool = True
    instants: list[datetime] = field(default_factory=list)

    @property
    def ra_hours(self) -> float:
        return (self.elongation_deg % 360.0) / 15.0

    def covers(self, instant: datetime) -> bool:
        return self.covered

    def position(self, body: str, instant: datetime) -> Vector3:
        self.instants.append(instant)
        if body == "sun":
            return (1.0, 0.0, 0.0)
        e = math.radians(self.elongation_deg)
        return (MOON_AU * math.cos(e), MOON_AU * math.sin(e), 0.0)

    def topocentric_equatorial(self, body, instant, latitude, longitude, elevation=0.0):
        return EquatorialPosition(self.ra_hours, self.dec_deg, self.distance_au)

    def topocentric_direction(self, body, instant, latitude, longitude, elevation=0.0):
        return equatorial_to_vector(self.ra_hours, self.dec_deg)

    def illumination(self, body, instant):
        return Illumination(self.fraction, self.phase_angle_deg)

    def sidereal_time(self, instant):
        return self.gst_hours

    def rotation_axis(self, body, instant):
        return self.axis

    def libration(self, instant):
        return self.lib


def fake_for_elongation(elongation_deg: float) -> FakeEphemeris:
    """Fake whose illumination matches the Sun-Moon geometry at this elongation."""
    phase = 180.0 - abs(((elongation_deg + 180.0) % 360.0) - 180.0)
    fraction = (1.0 + math.cos(math.radians(phase))) / 2.0
    return FakeEphemeris(elongation_deg=elongation_deg, fraction=fraction, phase_angle_deg=phase)


@pytest.fixture
def fake() -> FakeEphemeris:
    return FakeEphemeris()


@pytest.fixture(scope="session")
def sky():
    """Real skyfield provider; skipped when the kernel cannot be loaded or downloaded."""
    from thatnightmoon.ephemeris import get_default_provider

    try:
        return get_default_provider()
    except Exception as e:  # network or filesystem
        pytest.skip(f"ephemeris unavailable: {e}")
