"""Plotly rendering of a :class:`~calculus_art.render_state.RenderState`.

Purpose
-------
Compose the visual: background gradient, base curve, derivative-colored
segments and critical-point markers. All numbers come precomputed in the
render state; this module only maps them onto Plotly traces and layout.

Important gotchas
-----------------
- Plotly backgrounds cannot be CSS gradients, so the critical-point gradient
  is rasterized into vertical ``layout.shapes`` bands drawn below the traces.
- Adjacent segments with the same color are merged into one trace to keep the
  trace count small.
- A state with no function samples, or any failure while building traces,
  produces a figure showing "Error plotting function" instead of raising.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence

import plotly.graph_objects as go

from .critical_gradient import interpolate_gradient, marker_color
from .derivative_colors import ColorScheme
from .render_state import RenderState, Segment
from .sampling import evaluate_expression, nearest_sample

__all__ = ["ERROR_MESSAGE", "SCHEME_STYLES", "build_plot_figure", "error_figure"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ERROR_MESSAGE = "Error plotting function"
GRADIENT_BANDS = 64
GRID_DIVISIONS = 20
MARKER_TOLERANCE = 0.1

SCHEME_STYLES: dict[ColorScheme, dict[str, str]] = {
    ColorScheme.LIGHT: {
        "background": "#f8fafc",
        "grid": "#e2e8f0",
        "axis": "#64748b",
        "curve": "#0f172a",
        "text": "#0f172a",
    },
    ColorScheme.DARK: {
        "background": "#1e293b",
        "grid": "#334155",
        "axis": "#94a3b8",
        "curve": "#f8fafc",
        "text": "#f8fafc",
    },
}


def _base_layout(
    scheme: ColorScheme,
    domain: tuple[float, float],
    y_range: tuple[float, float],
) -> dict[str, Any]:
    style = SCHEME_STYLES[scheme]

    def _axis(bounds: tuple[float, float]) -> dict[str, Any]:
        return {
            "range": [bounds[0], bounds[1]],
            "showgrid": True,
            "gridcolor": style["grid"],
            "dtick": (bounds[1] - bounds[0]) / GRID_DIVISIONS,
            "zeroline": True,
            "zerolinecolor": style["axis"],
            "zerolinewidth": 2,
            "color": style["axis"],
            "fixedrange": False,
        }

    return {
        "plot_bgcolor": style["background"],
        "paper_bgcolor": style["background"],
        "font": {"color": style["text"]},
        "showlegend": False,
        "margin": {"l": 40, "r": 20, "t": 20, "b": 40},
        "xaxis": _axis(domain),
        "yaxis": _axis(y_range),
    }


def error_figure(
    scheme: ColorScheme = ColorScheme.LIGHT,
    domain: tuple[float, float] = (-10.0, 10.0),
    y_range: tuple[float, float] = (-10.0, 10.0),
    message: str = ERROR_MESSAGE,
) -> go.Figure:
    """Empty axes with ``message`` centered on the plot."""
    scheme = ColorScheme.coerce(scheme)
    fig = go.Figure(layout=_base_layout(scheme, domain, y_range))
    fig.add_annotation(
        text=message,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        showarrow=False,
        font={"size": 16, "color": SCHEME_STYLES[scheme]["text"]},
    )
    return fig


def _gradient_shapes(state: RenderState) -> list[dict[str, Any]]:
    x_min, x_max = state.domain
    width = (x_max - x_min) / GRADIENT_BANDS
    shapes = []
    for band in range(GRADIENT_BANDS):
        center = (band + 0.5) / GRADIENT_BANDS * 100.0
        color = interpolate_gradient(state.gradient, center)
        shapes.append(
            {
                "type": "rect",
                "xref": "x",
                "yref": "paper",
                "x0": x_min + band * width,
                "x1": x_min + (band + 1) * width,
                "y0": 0,
                "y1": 1,
                "fillcolor": color.css(),
                "opacity": 0.35,
                "line": {"width": 0},
                "layer": "below",
            }
        )
    return shapes


def _merge_segments(segments: Sequence[Segment]) -> list[tuple[str, list[float], list[float]]]:
    """Group runs of touching, same-colored segments into polylines."""
    runs: list[tuple[str, list[float], list[float]]] = []
    previous: Optional[Segment] = None
    for segment in segments:
        css = segment.color.css()
        joined = (
            previous is not None
            and runs
            and runs[-1][0] == css
            and previous.end.index == segment.start.index
        )
        if joined:
            runs[-1][1].append(segment.end.x)
            runs[-1][2].append(segment.end.y)
        else:
            runs.append((css, [segment.start.x, segment.end.x], [segment.start.y, segment.end.y]))
        previous = segment
    return runs


def _marker_y(state: RenderState, x: float, tolerance: float) -> float:
    sample = nearest_sample(state.function_samples, x, tolerance)
    if sample is not None:
        return sample.y
    value = evaluate_expression(state.expression, x)
    return value if math.isfinite(value) else 0.0


def _add_traces(fig: go.Figure, state: RenderState, marker_tolerance: float) -> None:
    style = SCHEME_STYLES[state.scheme]

    fig.add_scatter(
        x=[sample.x for sample in state.function_samples],
        y=[sample.y for sample in state.function_samples],
        mode="lines",
        line={"color": style["curve"], "width": 3},
        name="f(x)",
        hoverinfo="x+y",
    )

    for color, xs, ys in _merge_segments(state.segments):
        fig.add_scatter(
            x=xs,
            y=ys,
            mode="lines",
            line={"color": color, "width": 5},
            name="slope",
            hoverinfo="skip",
        )

    if state.critical_points:
        fig.add_scatter(
            x=[point.x for point in state.critical_points],
            y=[_marker_y(state, point.x, marker_tolerance) for point in state.critical_points],
            mode="markers+text",
            marker={
                "size": 16,
                "color": [marker_color(point.kind, state.scheme) for point in state.critical_points],
            },
            text=[point.kind.value[0].upper() for point in state.critical_points],
            textposition="middle center",
            textfont={"color": style["text"], "size": 12},
            name="critical points",
            hovertext=[point.kind.value for point in state.critical_points],
            hoverinfo="x+text",
        )


def build_plot_figure(state: RenderState, *, marker_tolerance: float = MARKER_TOLERANCE) -> go.Figure:
    """Draw ``state`` as a Plotly figure.

    Parameters
    ----------
    state : RenderState
        Output of :func:`~calculus_art.render_state.compute_render_state`.

    Returns
    -------
    plotly.graph_objects.Figure
        The composed plot, or an error figure when there is nothing to draw.
    """
    if state.is_empty:
        logger.info("No finite samples for %r", state.expression)
        return error_figure(state.scheme, state.domain, state.range)

    try:
        fig = go.Figure(layout=_base_layout(state.scheme, state.domain, state.range))
        fig.update_layout(shapes=_gradient_shapes(state))
        _add_traces(fig, state, marker_tolerance)
    except Exception:
        logger.exception("Error plotting %r", state.expression)
        return error_figure(state.scheme, state.domain, state.range)
    return fig
