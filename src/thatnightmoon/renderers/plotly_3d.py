"""Plotly 3D interactive moon renderer.

The Moon is a fixed, tidally locked sphere; phases come entirely from the
light direction. Shading is computed here (Lambert + earthshine floor) and
passed as ``surfacecolor`` so the terminator lands exactly where the
solver puts it; Plotly's own lighting is switched off.
"""

import plotly.graph_objects as go

from thatnightmoon.models import MoonSolution
from thatnightmoon.renderers.geometry import (
    lambert,
    pole_screen_angle,
    scene_light,
    screen_direction,
    sphere_mesh,
)

_BG = "#0d1b35"
_MOON_COLORSCALE = [[0.0, "#0b0d14"], [0.5, "#6f6c66"], [1.0, "#f2efe6"]]
_POLE_COLOR = "#c9a96e"
_AXIS_RANGE = [-1.35, 1.35]

_x, _y, _z = sphere_mesh()


def _moon_trace(solution: MoonSolution, orientation: str) -> go.Surface:
    light = scene_light(solution, orientation)
    return go.Surface(
        x=_x,
        y=_y,
        z=_z,
        surfacecolor=lambert(_x, _y, _z, light),
        colorscale=_MOON_COLORSCALE,
        cmin=0.0,
        cmax=1.0,
        showscale=False,
        lighting=dict(ambient=1.0, diffuse=0.0, specular=0.0, roughness=1.0, fresnel=0.0),
        hoverinfo="skip",
        name="moon",
    )


def _pole_trace(solution: MoonSolution, orientation: str) -> go.Scatter3d:
    # North pole marker: a short tick outside the limb, only meaningful on the sky view
    if orientation == "sky":
        dx, dy, _ = screen_direction(pole_screen_angle(solution))
        xs, ys, zs = [1.05 * dx, 1.3 * dx], [1.05 * dy, 1.3 * dy], [0.0, 0.0]
    else:
        xs, ys, zs = [], [], []
    return go.Scatter3d(
        x=xs,
        y=ys,
        z=zs,
        mode="lines",
        line=dict(color=_POLE_COLOR, width=4),
        hoverinfo="skip",
        name="pole",
    )


def _layout(fig: go.Figure) -> None:
    axis = dict(visible=False, range=_AXIS_RANGE, autorange=False)
    fig.update_layout(
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=600,
        height=600,
        scene=dict(
            xaxis=axis,
            yaxis=axis,
            zaxis=axis,
            aspectmode="cube",
            bgcolor=_BG,
            camera=dict(
                eye=dict(x=0.0, y=0.0, z=2.0),
                up=dict(x=0.0, y=1.0, z=0.0),
                projection=dict(type="orthographic"),
            ),
        ),
    )


def render_moon_figure(solution: MoonSolution, orientation: str = "phase") -> go.Figure:
    """Render a MoonSolution as an interactive Plotly 3D sphere.

    Args:
        solution: Solver output.
        orientation: "phase" (textbook layout) or "sky" (as seen by the observer).

    Returns:
        Plotly Figure object.
    """
    fig = go.Figure(data=[_moon_trace(solution, orientation), _pole_trace(solution, orientation)])
    _layout(fig)
    return fig


def render_moon_animation(
    solutions: list[MoonSolution],
    labels: list[str],
    orientation: str = "phase",
    frame_ms: int = 80,
) -> go.Figure:
    """Animated sphere with one frame per solution, a play button and a time slider.

    Args:
        solutions: Solver outputs in playback order (at least one).
        labels: Slider label per solution.
        orientation: "phase" or "sky".
        frame_ms: Duration of each frame in milliseconds.

    Returns:
        Plotly Figure object with frames.
    """
    if not solutions:
        raise ValueError("render_moon_animation needs at least one solution")
    if len(labels) != len(solutions):
        raise ValueError("labels and solutions differ in length")

    fig = render_moon_figure(solutions[0], orientation)
    fig.frames = [
        go.Frame(
            data=[_moon_trace(s, orientation), _pole_trace(s, orientation)],
            traces=[0, 1],
            name=label,
        )
        for s, label in zip(solutions, labels)
    ]
    play_args = dict(frame=dict(duration=frame_ms, redraw=True), fromcurrent=True, mode="immediate")
    fig.update_layout(
        updatemenus=[
            dict(
                type="buttons",
                showactive=False,
                x=0.02,
                y=0.02,
                xanchor="left",
                yanchor="bottom",
                buttons=[
                    dict(label="▶", method="animate", args=[None, play_args]),
                    dict(
                        label="❚❚",
                        method="animate",
                        args=[[None], dict(frame=dict(duration=0, redraw=False), mode="immediate")],
                    ),
                ],
            )
        ],
        sliders=[
            dict(
                active=0,
                x=0.15,
                len=0.83,
                y=0.02,
                font=dict(color="#aaaaaa"),
                currentvalue=dict(visible=True, prefix="", font=dict(color="#e8d5a3")),
                steps=[
                    dict(
                        label=label,
                        method="animate",
                        args=[[label], dict(frame=dict(duration=0, redraw=True), mode="immediate")],
                    )
                    for label in labels
                ],
            )
        ],
    )
    return fig
