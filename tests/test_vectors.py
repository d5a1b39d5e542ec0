import math

import pytest

from thatnightmoon.vectors import (
    cross,
    disk_frame,
    dot,
    equatorial_to_vector,
    normalize,
    position_angle,
    project_onto_plane,
    rotate_z,
)


def test_dot_and_cross():
    assert dot((1.0, 2.0, 3.0), (4.0, -5.0, 6.0)) == pytest.approx(12.0)
    assert cross((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == (0.0, 0.0, 1.0)
    assert cross((0.0, 1.0, 0.0), (1.0, 0.0, 0.0)) == (0.0, 0.0, -1.0)


def test_normalize():
    assert normalize((3.0, 0.0, 4.0)) == pytest.approx((0.6, 0.0, 0.8))
    assert normalize((0.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "ra, dec, expected",
    [
        (0.0, 0.0, (1.0, 0.0, 0.0)),
        (6.0, 0.0, (0.0, 1.0, 0.0)),
        (12.0, 0.0, (-1.0, 0.0, 0.0)),
        (3.0, 90.0, (0.0, 0.0, 1.0)),
        (0.0, -90.0, (0.0, 0.0, -1.0)),
    ],
)
def test_equatorial_to_vector(ra, dec, expected):
    assert equatorial_to_vector(ra, dec) == pytest.approx(expected, abs=1e-12)


def test_project_onto_plane_removes_normal_component():
    p = project_onto_plane((1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
    assert p == pytest.approx((1.0, 2.0, 0.0))


def test_disk_frame_east_points_to_increasing_ra():
    los = equatorial_to_vector(2.0, 20.0)
    north, east = disk_frame(los)
    assert dot(north, los) == pytest.approx(0.0, abs=1e-12)
    assert dot(east, los) == pytest.approx(0.0, abs=1e-12)
    assert dot(north, east) == pytest.approx(0.0, abs=1e-12)
    assert north[2] > 0
    # A point slightly further along in right ascension sits to the east
    ahead = equatorial_to_vector(2.1, 20.0)
    assert dot(east, ahead) > 0


def test_position_angle_cardinal_directions():
    los = equatorial_to_vector(6.0, 0.0)
    frame = disk_frame(los)
    assert position_angle(frame, los, (0.0, 0.0, 1.0)) == pytest.approx(0.0, abs=1e-12)
    assert position_angle(frame, los, equatorial_to_vector(12.0, 0.0)) == pytest.approx(math.pi / 2)
    assert position_angle(frame, los, equatorial_to_vector(0.0, 0.0)) == pytest.approx(-math.pi / 2)
    assert abs(position_angle(frame, los, (0.0, 0.0, -1.0))) == pytest.approx(math.pi)


def test_disk_frame_degenerate_at_pole():
    los = (0.0, 0.0, 1.0)
    frame = disk_frame(los)
    assert frame == ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    assert position_angle(frame, los, (1.0, 0.0, 0.0)) == 0.0


def test_rotate_z():
    assert rotate_z((1.0, 0.0, 0.5), math.pi / 2) == pytest.approx((0.0, 1.0, 0.5), abs=1e-12)
    assert rotate_z((0.0, 1.0, 0.0), -math.pi / 2) == pytest.approx((1.0, 0.0, 0.0), abs=1e-12)
