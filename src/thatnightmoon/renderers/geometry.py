"""Shared scene geometry for the moon renderers.

Scene frame: Moon at the origin, camera on +Z, +X right, +Y up.
Screen angles are measured counterclockwise from +Y (up), the way
position angles grow from north through east on a north-up sky.
"""

import math

import numpy as np

from thatnightmoon.models import MoonSolution, Vector3
from thatnightmoon.vectors import rotate_z

EARTHSHINE = 0.04  # Brightness floor of the unlit hemisphere


def disk_rotation(solution: MoonSolution, orientation: str = "phase") -> float:
    """Rotation (radians, counterclockwise about the view axis) applied to the scene.

    "phase" keeps the textbook layout (waxing limb on the right). "sky"
    turns the bright limb to its position angle on the observer's
    zenith-up sky, i.e. the bright-limb angle minus the parallactic angle.
    """
    if orientation != "sky":
        return 0.0
    # Screen angle of the lit limb before rotation: +X for waxing, -X for waning
    base = -math.pi / 2 if solution.is_waxing else math.pi / 2
    return solution.bright_limb_angle_rad - solution.parallactic_angle_rad - base


def scene_light(solution: MoonSolution, orientation: str = "phase") -> Vector3:
    return rotate_z(solution.sun_dir, disk_rotation(solution, orientation))


def screen_direction(angle: float) -> Vector3:
    """Unit vector in the screen plane at a counterclockwise angle from up."""
    return (-math.sin(angle), math.cos(angle), 0.0)


def pole_screen_angle(solution: MoonSolution) -> float:
    """Screen angle of the lunar north pole on the observer's zenith-up sky."""
    return solution.pole_angle_rad - solution.parallactic_angle_rad


def sphere_mesh(n_lon: int = 120, n_lat: int = 60) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Unit sphere grid with the rotation axis along +Y."""
    u = np.linspace(0.0, 2.0 * np.pi, n_lon)
    v = np.linspace(0.0, np.pi, n_lat)
    uu, vv = np.meshgrid(u, v)
    x = np.sin(vv) * np.cos(uu)
    y = np.cos(vv)
    z = np.sin(vv) * np.sin(uu)
    return x, y, z


def lambert(x: np.ndarray, y: np.ndarray, z: np.ndarray, light: Vector3) -> np.ndarray:
    """Diffuse brightness in [EARTHSHINE, 1] for unit normals (x, y, z)."""
    shade = np.clip(x * light[0] + y * light[1] + z * light[2], 0.0, 1.0)
    return EARTHSHINE + (1.0 - EARTHSHINE) * shade
