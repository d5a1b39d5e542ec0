"""Matplotlib static PNG renderer."""

from datetime import datetime
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from thatnightmoon.models import MoonSolution
from thatnightmoon.renderers.geometry import (
    lambert,
    pole_screen_angle,
    scene_light,
    screen_direction,
)

_ROOT = Path(__file__).parent.parent.parent.parent


def render_static_disk(
    solution: MoonSolution,
    orientation: str = "phase",
    chart_size: int = 6,
    resolution: int = 512,
) -> Figure:
    """Render a MoonSolution as the Moon's disk seen from +Z.

    Args:
        solution: Solver output.
        orientation: "phase" or "sky".
        chart_size: Output image size in inches.
        resolution: Pixels across the disk.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(chart_size, chart_size))
    fig.patch.set_facecolor("black")
    ax.set_facecolor("black")

    # Orthographic view of the near hemisphere
    grid = np.linspace(-1.0, 1.0, resolution)
    x, y = np.meshgrid(grid, grid)
    r2 = x * x + y * y
    inside = r2 <= 1.0
    z = np.sqrt(np.clip(1.0 - r2, 0.0, 1.0))
    brightness = lambert(x, y, z, scene_light(solution, orientation))
    image = np.where(inside, brightness, np.nan)

    ax.imshow(
        image,
        cmap="gray",
        vmin=0.0,
        vmax=1.0,
        origin="lower",
        extent=(-1.0, 1.0, -1.0, 1.0),
        interpolation="bilinear",
    )

    if orientation == "sky":
        dx, dy, _ = screen_direction(pole_screen_angle(solution))
        ax.plot([1.05 * dx, 1.25 * dx], [1.05 * dy, 1.25 * dy], color="#c9a96e", linewidth=2)

    ax.text(
        0.0,
        -1.3,
        f"{solution.phase_name}  {solution.illum_fraction * 100:.1f}%",
        color="#e8d5a3",
        ha="center",
        va="center",
        fontsize=12,
    )
    ax.set_xlim(-1.4, 1.4)
    ax.set_ylim(-1.4, 1.4)
    ax.set_aspect("equal")
    ax.axis("off")

    return fig


def save_static_disk(
    solution: MoonSolution,
    when: datetime,
    place: str,
    output_path: Path | None = None,
    orientation: str = "phase",
) -> Path:
    """Save a MoonSolution as a PNG file.

    Args:
        solution: Solver output.
        when: Instant the solution was computed for (used in the file name).
        place: Location label (used in the file name).
        output_path: Destination path. Auto-generated under results/ if None.
        orientation: "phase" or "sky".

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        when_str = when.strftime("%Y_%m_%d_%H_%M")
        filename = f"{place}__{when_str}.png".replace(" ", "_").replace(",", "").replace("°", "")
        output_path = _ROOT / "results" / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_static_disk(solution, orientation)
    fig.savefig(output_path, facecolor="black")
    plt.close(fig)
    return output_path
