"""Pure recompute of everything a plot surface needs.

:func:`compute_render_state` takes an analysis and a color scheme and returns
a :class:`RenderState`: function and derivative samples on a shared grid,
derivative-colored curve segments, and the critical-point gradient. Hosts call
it whenever any input changes; there is no incremental update and no caching
between calls.

Function and derivative samples are paired by grid index, not by list
position, so a point dropped from one pass cannot shift the colors of the
other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .AnalysisResult import AnalysisResult
from .critical_gradient import CriticalPoint, GradientStop, gradient_css, gradient_stops
from .derivative_colors import RGB, ColorScheme, colors_from_derivatives
from .sampling import Sample, generate_points
from .settings import DEFAULT_STEP_COUNT

__all__ = ["RenderState", "Segment", "build_segments", "compute_render_state"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Segment:
    """Straight piece of the curve between two consecutive grid samples.

    ``derivative`` is the derivative sample at ``start``; ``color`` is its
    mapped stroke color.
    """

    start: Sample
    end: Sample
    derivative: float
    color: RGB


@dataclass(frozen=True)
class RenderState:
    """Everything needed to draw one plot."""

    expression: str
    function_samples: tuple[Sample, ...]
    derivative_samples: tuple[Sample, ...]
    segments: tuple[Segment, ...]
    gradient: tuple[GradientStop, ...]
    gradient_css: str
    critical_points: tuple[CriticalPoint, ...]
    domain: tuple[float, float]
    range: tuple[float, float]
    scheme: ColorScheme
    step_count: int

    @property
    def is_empty(self) -> bool:
        return not self.function_samples


def build_segments(
    function_samples: tuple[Sample, ...],
    derivative_samples: tuple[Sample, ...],
    scheme: Union[ColorScheme, str],
) -> list[Segment]:
    """Pair consecutive function samples and color them by the derivative at the start.

    A segment is formed only between samples with adjacent grid indices, and
    only when the derivative survived at the start index.
    """
    derivative_at = {sample.index: sample.y for sample in derivative_samples}
    pieces = [
        (start, end, derivative_at[start.index])
        for start, end in zip(function_samples, function_samples[1:])
        if end.index == start.index + 1 and start.index in derivative_at
    ]
    colors = colors_from_derivatives((slope for _, _, slope in pieces), scheme)
    return [
        Segment(start=start, end=end, derivative=slope, color=color)
        for (start, end, slope), color in zip(pieces, colors)
    ]


def compute_render_state(
    analysis: AnalysisResult,
    scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
    step_count: int = DEFAULT_STEP_COUNT,
) -> RenderState:
    """Sample, colorize and build the gradient for ``analysis``.

    Parameters
    ----------
    analysis : AnalysisResult
        Expression, derivative, domain/range and critical points to draw.
    scheme : ColorScheme or str
        Light or dark palette.
    step_count : int
        Grid steps over ``analysis.domain`` for both sampling passes.

    Returns
    -------
    RenderState
    """
    scheme = ColorScheme.coerce(scheme)
    x_min, x_max = analysis.domain

    function_samples = tuple(generate_points(analysis.parsed, x_min, x_max, step_count))
    derivative_samples = tuple(generate_points(analysis.derivative, x_min, x_max, step_count))
    segments = tuple(build_segments(function_samples, derivative_samples, scheme))

    logger.debug(
        "Render state for %r: %d function samples, %d derivative samples, %d segments",
        analysis.parsed,
        len(function_samples),
        len(derivative_samples),
        len(segments),
    )

    return RenderState(
        expression=analysis.parsed,
        function_samples=function_samples,
        derivative_samples=derivative_samples,
        segments=segments,
        gradient=tuple(gradient_stops(analysis.critical_points, scheme)),
        gradient_css=gradient_css(analysis.critical_points, scheme),
        critical_points=tuple(analysis.critical_points),
        domain=(float(x_min), float(x_max)),
        range=(float(analysis.range[0]), float(analysis.range[1])),
        scheme=scheme,
        step_count=int(step_count),
    )
