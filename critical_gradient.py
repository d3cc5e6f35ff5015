"""Background gradients built from labeled critical points.

Critical points arrive unordered from the analysis service. They are sorted by
``x`` and each becomes one stop of a left-to-right gradient: maxima red,
minima blue, inflection points green. Positions are the points' ``x`` values
rescaled so the leftmost sits at 0% and the rightmost at 100%.

Edge cases
----------
- No critical points: a fixed two-stop placeholder per scheme.
- All points share one ``x`` (including a single point): every stop sits at
  50%.
- Equal ``x`` values keep their input order (stable sort) and get equal
  positions.
"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence, Union

from .derivative_colors import RGB, ColorScheme

__all__ = [
    "CriticalPoint",
    "CriticalPointKind",
    "DEGENERATE_POSITION",
    "GradientStop",
    "PLACEHOLDER_STOPS",
    "gradient_css",
    "gradient_stops",
    "interpolate_gradient",
    "marker_color",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEGENERATE_POSITION = 50.0


class CriticalPointKind(str, Enum):
    """Qualitative kind of a critical point."""

    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    INFLECTION = "inflection"

    @classmethod
    def coerce(cls, value: Union["CriticalPointKind", str]) -> "CriticalPointKind":
        """Map a label to a kind; anything unrecognized is treated as inflection."""
        if isinstance(value, cls):
            return value
        label = str(value).strip().lower()
        for kind in cls:
            if label == kind.value or label.endswith(" " + kind.value):
                return kind
        if label in ("max", "min"):
            return cls.MAXIMUM if label == "max" else cls.MINIMUM
        logger.info("Unrecognized critical point type %r; treating as inflection", value)
        return cls.INFLECTION


_KIND_COLORS: dict[CriticalPointKind, dict[ColorScheme, str]] = {
    CriticalPointKind.MAXIMUM: {ColorScheme.LIGHT: "#ef4444", ColorScheme.DARK: "#f87171"},
    CriticalPointKind.MINIMUM: {ColorScheme.LIGHT: "#3b82f6", ColorScheme.DARK: "#60a5fa"},
    CriticalPointKind.INFLECTION: {ColorScheme.LIGHT: "#10b981", ColorScheme.DARK: "#34d399"},
}


@dataclass(frozen=True)
class CriticalPoint:
    """A labeled location on the x axis.

    Parameters
    ----------
    x : float
        Abscissa of the point.
    kind : CriticalPointKind
        Maximum, minimum or inflection.
    """

    x: float
    kind: CriticalPointKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "kind", CriticalPointKind.coerce(self.kind))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CriticalPoint":
        """Build from ``{"x": ..., "type": ...}``; raises ``ValueError`` on bad ``x``."""
        try:
            x_value = float(data["x"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Critical point needs a numeric 'x', got {data!r}") from exc
        if not math.isfinite(x_value):
            raise ValueError(f"Critical point 'x' must be finite, got {data!r}")
        return cls(x=x_value, kind=CriticalPointKind.coerce(data.get("type", "")))

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "type": self.kind.value}


@dataclass(frozen=True)
class GradientStop:
    """One ``(color, position%)`` stop of a linear gradient."""

    color: str
    position: float

    def css(self) -> str:
        return f"{self.color} {self.position:g}%"


PLACEHOLDER_STOPS: dict[ColorScheme, tuple[GradientStop, GradientStop]] = {
    ColorScheme.LIGHT: (GradientStop("#f0f9ff", 0.0), GradientStop("#e6f7ff", 100.0)),
    ColorScheme.DARK: (GradientStop("#0f172a", 0.0), GradientStop("#1e293b", 100.0)),
}


def marker_color(kind: Union[CriticalPointKind, str], scheme: Union[ColorScheme, str]) -> str:
    """Hex color used for ``kind`` under ``scheme``."""
    return _KIND_COLORS[CriticalPointKind.coerce(kind)][ColorScheme.coerce(scheme)]


def gradient_stops(
    points: Iterable[CriticalPoint],
    scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
) -> list[GradientStop]:
    """Build ordered gradient stops from critical points.

    Parameters
    ----------
    points : iterable of CriticalPoint
        Unordered critical points; duplicates are kept.
    scheme : ColorScheme or str
        Palette selector.

    Returns
    -------
    list[GradientStop]
        Stops with non-decreasing positions in ``[0, 100]``. Never empty.

    Examples
    --------
    >>> pts = [CriticalPoint(5, "minimum"), CriticalPoint(-5, "maximum")]
    >>> [s.css() for s in gradient_stops(pts, "light")]
    ['#ef4444 0%', '#3b82f6 100%']
    """
    scheme = ColorScheme.coerce(scheme)
    ordered = sorted(points, key=lambda point: point.x)
    if not ordered:
        return list(PLACEHOLDER_STOPS[scheme])

    x_min, x_max = ordered[0].x, ordered[-1].x
    # Halve before subtracting when the span overflows, e.g. points at +/-1e308.
    scale = 1.0 if math.isfinite(x_max - x_min) else 0.5
    span = x_max * scale - x_min * scale

    stops = []
    for point in ordered:
        if span > 0:
            position = (point.x * scale - x_min * scale) / span * 100.0
        else:
            position = DEGENERATE_POSITION
        stops.append(GradientStop(_KIND_COLORS[point.kind][scheme], position))
    return stops


def gradient_css(
    points: Iterable[CriticalPoint],
    scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
) -> str:
    """Render :func:`gradient_stops` as a CSS ``linear-gradient`` value."""
    stops = gradient_stops(points, scheme)
    if len(stops) == 1:
        stops = stops * 2
    return "linear-gradient(to right, " + ", ".join(stop.css() for stop in stops) + ")"


def interpolate_gradient(stops: Sequence[GradientStop], position: float) -> RGB:
    """Color of the gradient at ``position`` percent.

    Positions before the first stop or after the last one take the end color,
    matching CSS gradient semantics.
    """
    if not stops:
        raise ValueError("interpolate_gradient requires at least one stop")
    positions = [stop.position for stop in stops]
    colors = [RGB.from_hex(stop.color) for stop in stops]

    if position <= positions[0]:
        return colors[0]
    if position >= positions[-1]:
        return colors[-1]

    hi = bisect_right(positions, position)
    lo = hi - 1
    width = positions[hi] - positions[lo]
    t = 0.0 if width <= 0 else (position - positions[lo]) / width
    return RGB(
        *(
            int(math.floor(a + (b - a) * t + 0.5))
            for a, b in zip(colors[lo], colors[hi])
        )
    )
