"""Small 3-vector helpers used by the solver and the renderers."""

import math

from thatnightmoon.models import Vector3


def dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def normalize(v: Vector3) -> Vector3:
    """Unit vector along v. A zero vector is returned unchanged."""
    m = math.hypot(v[0], v[1], v[2]) or 1.0
    return (v[0] / m, v[1] / m, v[2] / m)


def equatorial_to_vector(ra_hours: float, dec_deg: float) -> Vector3:
    """Unit vector for equatorial coordinates (x toward the equinox, z toward the pole)."""
    ra = ra_hours * math.pi / 12.0
    dec = math.radians(dec_deg)
    cos_dec = math.cos(dec)
    return (cos_dec * math.cos(ra), cos_dec * math.sin(ra), math.sin(dec))


def project_onto_plane(v: Vector3, normal: Vector3) -> Vector3:
    """Remove the component of v along the (unit) normal."""
    k = dot(v, normal)
    return (v[0] - k * normal[0], v[1] - k * normal[1], v[2] - k * normal[2])


def disk_frame(line_of_sight: Vector3, pole: Vector3 = (0.0, 0.0, 1.0)) -> tuple[Vector3, Vector3]:
    """Build the (north, east) basis on the apparent disk of a body.

    The disk plane is perpendicular to ``line_of_sight`` (observer -> body).
    ``north`` is the celestial pole projected onto that plane and
    ``east = north × line_of_sight`` points toward increasing right
    ascension, so position angles taken in this frame grow from north
    through east.

    Args:
        line_of_sight: Unit vector from the observer toward the body.
        pole: Reference pole, celestial north by default.

    Returns:
        Tuple (north, east) of unit vectors. Degenerate inputs (body at
        the pole) yield zero vectors rather than raising.
    """
    north = normalize(project_onto_plane(pole, line_of_sight))
    east = normalize(cross(north, line_of_sight))
    return north, east


def position_angle(frame: tuple[Vector3, Vector3], line_of_sight: Vector3, direction: Vector3) -> float:
    """Position angle (radians, east of north) of a direction seen on the disk."""
    north, east = frame
    p = normalize(project_onto_plane(direction, line_of_sight))
    return math.atan2(dot(east, p), dot(north, p))


def rotate_z(v: Vector3, angle: float) -> Vector3:
    """Rotate v counterclockwise about +z by angle (radians)."""
    c = math.cos(angle)
    s = math.sin(angle)
    return (c * v[0] - s * v[1], s * v[0] + c * v[1], v[2])
