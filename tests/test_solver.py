# tests/test_solver.py

import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from conftest import FakeEphemeris, fake_for_elongation
from thatnightmoon import solver
from thatnightmoon.models import ObserverInput
from thatnightmoon.solver import (
    AU_KM,
    PHASE_NAMES,
    classify_phase,
    hour_angle,
    is_waxing,
    local_sidereal_time,
    normalize_hours,
    orbital_angle_deg,
    parallactic_angle,
    sanitize_instant,
    solve,
    solve_input,
    sun_direction,
    synodic_age_days,
)

WHEN = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_normalize_hours_wraps_into_day():
    assert normalize_hours(25.5) == pytest.approx(1.5)
    assert normalize_hours(-1.0) == pytest.approx(23.0)
    assert normalize_hours(-49.0) == pytest.approx(23.0)
    assert normalize_hours(24.0) == 0.0
    assert 0.0 <= normalize_hours(-1e-18) < 24.0


def test_local_sidereal_time_and_hour_angle():
    assert local_sidereal_time(23.0, 30.0) == pytest.approx(1.0)
    assert local_sidereal_time(1.0, -30.0) == pytest.approx(23.0)
    assert hour_angle(6.0, 0.0) == pytest.approx(math.pi / 2)
    assert hour_angle(0.0, 6.0) == pytest.approx(3 * math.pi / 2)


def test_parallactic_angle_on_meridian():
    # South of the zenith: zenith is straight "up" from north
    assert parallactic_angle(0.0, 45.0, 0.0) == pytest.approx(0.0)
    # North of the zenith: flipped
    assert parallactic_angle(0.0, 10.0, 40.0) == pytest.approx(math.pi)


def test_parallactic_angle_sign_follows_hour_angle():
    assert parallactic_angle(1.0, 40.0, 10.0) > 0
    assert parallactic_angle(2 * math.pi - 1.0, 40.0, 10.0) < 0


def test_parallactic_angle_degenerate_inputs():
    for lat in (90.0, -90.0, 0.0):
        q = parallactic_angle(0.0, lat, 0.0)
        assert math.isfinite(q)


def test_is_waxing_by_cross_product_sign():
    sun = (1.0, 0.0, 0.0)
    assert is_waxing(sun, (0.0, 0.002, 0.0))
    assert not is_waxing(sun, (0.0, -0.002, 0.0))


@pytest.mark.parametrize(
    "fraction, waxing, name",
    [
        (0.005, True, "New Moon"),
        (0.005, False, "New Moon"),
        (0.995, False, "Full Moon"),
        (0.2, True, "Waxing Crescent"),
        (0.2, False, "Waning Crescent"),
        (0.52, True, "First Quarter"),
        (0.47, False, "Last Quarter"),
        (0.7, True, "Waxing Gibbous"),
        (0.7, False, "Waning Gibbous"),
    ],
)
def test_classify_phase_bands(fraction, waxing, name):
    assert classify_phase(fraction, waxing)[0] == name


def test_classify_phase_is_total():
    for fraction in np.linspace(0.0, 1.0, 1001):
        for waxing in (True, False):
            name, emoji = classify_phase(float(fraction), waxing)
            assert name in PHASE_NAMES
            assert emoji


def test_classify_phase_southern_emoji_mirrored():
    for fraction in (0.2, 0.5, 0.8):
        for waxing in (True, False):
            north = classify_phase(fraction, waxing, southern=False)
            south = classify_phase(fraction, waxing, southern=True)
            assert north[0] == south[0]
            assert north[1] != south[1]
    assert classify_phase(0.0, True, southern=True) == classify_phase(0.0, True)
    assert classify_phase(1.0, False, southern=True) == classify_phase(1.0, False)


def test_orbital_angle_cardinal_points():
    assert orbital_angle_deg(180.0, True) == pytest.approx(0.0)
    assert orbital_angle_deg(90.0, True) == pytest.approx(90.0)
    assert orbital_angle_deg(0.0, True) == pytest.approx(180.0)
    assert orbital_angle_deg(90.0, False) == pytest.approx(270.0)


@pytest.mark.parametrize(
    "phase, waxing, expected",
    [
        (180.0, True, (0.0, 0.0, -1.0)),  # new: light behind the Moon
        (0.0, True, (0.0, 0.0, 1.0)),  # full: light from the camera side
        (90.0, True, (1.0, 0.0, 0.0)),  # first quarter: lit on the right
        (90.0, False, (-1.0, 0.0, 0.0)),  # last quarter: lit on the left
    ],
)
def test_sun_direction_cardinal_phases(phase, waxing, expected):
    assert sun_direction(phase, waxing) == pytest.approx(expected, abs=1e-12)


def test_sun_direction_lights_reported_fraction():
    grid = np.linspace(-1.0, 1.0, 801)
    x, y = np.meshgrid(grid, grid)
    disk = x * x + y * y <= 1.0
    z = np.sqrt(np.clip(1.0 - x * x - y * y, 0.0, 1.0))
    for phase in (20.0, 60.0, 90.0, 135.0, 170.0):
        for waxing in (True, False):
            L = sun_direction(phase, waxing)
            lit = (x * L[0] + y * L[1] + z * L[2]) > 0
            fraction = (lit & disk).sum() / disk.sum()
            expected = (1.0 + math.cos(math.radians(phase))) / 2.0
            assert fraction == pytest.approx(expected, abs=0.01)


def test_synodic_age_days():
    assert synodic_age_days(solver.REFERENCE_NEW_MOON) == pytest.approx(0.0)
    later = solver.REFERENCE_NEW_MOON + timedelta(days=3 * solver.SYNODIC_MONTH_DAYS + 5)
    assert synodic_age_days(later) == pytest.approx(5.0, abs=1e-6)
    earlier = solver.REFERENCE_NEW_MOON - timedelta(days=1)
    assert synodic_age_days(earlier) == pytest.approx(solver.SYNODIC_MONTH_DAYS - 1, abs=1e-6)


def test_sanitize_instant_accepts_instant_like_values():
    assert sanitize_instant(WHEN) == WHEN
    assert sanitize_instant(datetime(2024, 3, 1, 12, 0)) == WHEN
    assert sanitize_instant("2024-03-01T12:00:00Z") == WHEN
    assert sanitize_instant("2024-03-01T21:00:00+09:00") == WHEN
    assert sanitize_instant(WHEN.timestamp()) == WHEN


@pytest.mark.parametrize(
    "bad",
    [
        None,
        "not a date",
        float("nan"),
        float("inf"),
        1e20,
        object(),
        datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5))),
        "0001-01-01T00:00:00+05:00",
        datetime(9999, 12, 31, 23, tzinfo=timezone(timedelta(hours=-5))),
    ],
)
def test_sanitize_instant_falls_back_to_now(bad):
    before = datetime.now(timezone.utc)
    instant = sanitize_instant(bad)
    after = datetime.now(timezone.utc)
    assert before <= instant <= after


def test_sanitize_instant_outside_coverage_uses_now():
    provider = FakeEphemeris(covered=False)
    instant = sanitize_instant(datetime(1600, 1, 1, tzinfo=timezone.utc), provider)
    assert abs(instant - datetime.now(timezone.utc)) < timedelta(seconds=5)


def test_solve_populates_solution(fake):
    sol = solve(WHEN, 40.0, -3.0, provider=fake)

    assert sol.phase_name == "First Quarter"
    assert sol.phase_emoji == "🌓"
    assert sol.is_waxing
    assert sol.illum_fraction == 0.5
    assert sol.phase_angle_deg == 90.0
    assert sol.distance_km == pytest.approx(384_400.0)
    assert sol.ra == pytest.approx(6.0)
    assert sol.dec == 0.0
    assert sol.mlat == 1.5
    assert sol.mlon == -2.5
    assert sol.sun_dir == pytest.approx((1.0, 0.0, 0.0), abs=1e-12)


def test_solve_distance_conversion():
    sol = solve(WHEN, 0.0, 0.0, provider=FakeEphemeris(distance_au=1.0))
    assert sol.distance_km == pytest.approx(AU_KM)


def test_solve_bright_limb_faces_sun(fake):
    # Moon at RA 6h, Sun at RA 0h: the Sun lies due west of the Moon
    sol = solve(WHEN, 0.0, 0.0, provider=fake)
    assert sol.bright_limb_angle_rad == pytest.approx(-math.pi / 2)

    waning = FakeEphemeris(elongation_deg=270.0)
    sol = solve(WHEN, 0.0, 0.0, provider=waning)
    assert sol.bright_limb_angle_rad == pytest.approx(math.pi / 2)


def test_solve_pole_angle(fake):
    # Pole at RA 18h projects straight onto celestial north for a Moon at RA 6h
    sol = solve(WHEN, 0.0, 0.0, provider=fake)
    assert sol.pole_angle_rad == pytest.approx(0.0, abs=1e-12)


def test_solve_parallactic_angle_uses_local_sidereal_time():
    # GST 6h at lon 0: Moon (RA 6h) on the meridian, south of the zenith
    provider = FakeEphemeris(gst_hours=6.0)
    sol = solve(WHEN, 45.0, 0.0, provider=provider)
    assert sol.parallactic_angle_rad == pytest.approx(0.0, abs=1e-12)
    # Same sky, observer 30° further east: Moon two hours west of the meridian
    sol = solve(WHEN, 45.0, 30.0, provider=provider)
    assert sol.parallactic_angle_rad > 0


def test_solve_hemisphere_mirroring():
    for elongation in (45.0, 90.0, 135.0, 225.0, 270.0, 315.0):
        provider = fake_for_elongation(elongation)
        north = solve(WHEN, 35.0, 10.0, provider=provider)
        south = solve(WHEN, -35.0, 10.0, provider=provider)
        assert north.phase_name == south.phase_name
        assert north.phase_emoji != south.phase_emoji


def test_solve_sun_dir_unit_length_and_ranges():
    for elongation in range(0, 360, 7):
        sol = solve(WHEN, 51.5, -0.1, provider=fake_for_elongation(float(elongation)))
        assert math.hypot(*sol.sun_dir) == pytest.approx(1.0, abs=1e-9)
        assert 0.0 <= sol.illum_fraction <= 1.0
        assert 0.0 <= sol.phase_angle_deg < 360.0


def test_solve_is_deterministic(fake):
    assert solve(WHEN, 12.0, 34.0, 100.0, provider=fake) == solve(WHEN, 12.0, 34.0, 100.0, provider=fake)


def test_solve_invalid_date_uses_now(fake):
    before = datetime.now(timezone.utc)
    sol = solve("2024-13-45", 0.0, 0.0, provider=fake)
    assert sol.phase_name
    assert fake.instants
    assert fake.instants[-1] >= before


def test_solve_instant_at_calendar_edge_uses_now(fake):
    before = datetime.now(timezone.utc)
    sol = solve(datetime(9999, 12, 31, 23, tzinfo=timezone(timedelta(hours=-5))), 0.0, 0.0, provider=fake)
    assert sol.phase_name
    assert fake.instants[-1] >= before


def test_solve_degenerate_moon_at_pole():
    provider = FakeEphemeris(dec_deg=90.0)
    sol = solve(WHEN, 90.0, 0.0, provider=provider)
    assert math.isfinite(sol.bright_limb_angle_rad)
    assert math.isfinite(sol.pole_angle_rad)
    assert math.isfinite(sol.parallactic_angle_rad)


def test_solve_input_passes_fields(fake):
    query = ObserverInput(date=WHEN, lat=10.0, lon=20.0, elevation=5.0)
    assert solve_input(query, provider=fake) == solve(WHEN, 10.0, 20.0, 5.0, provider=fake)
