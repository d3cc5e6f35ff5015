"""Immutable record of one expression analysis.

An ``AnalysisResult`` carries what the analysis service reports about an
expression: its normalized text, derivative and integral text, the display
domain and range, and its critical points. It is also what the fallback path
produces when the service cannot be used.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from .critical_gradient import CriticalPoint, CriticalPointKind
from .settings import DEFAULT_DOMAIN, DEFAULT_RANGE

__all__ = ["AnalysisResult", "MalformedAnalysisError", "fallback_analysis"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

Interval = tuple[float, float]


class MalformedAnalysisError(ValueError):
    """Raised when a payload lacks the fields needed to plot anything."""


@dataclass(frozen=True)
class AnalysisResult:
    """Structured analysis of one expression.

    Parameters
    ----------
    parsed : str
        Expression text to plot.
    derivative : str
        Derivative expression text.
    integral : str
        Antiderivative expression text (display only).
    domain : tuple[float, float]
        Plotted x interval.
    range : tuple[float, float]
        Plotted y interval.
    critical_points : tuple[CriticalPoint, ...]
        Critical points in the order reported.
    """

    parsed: str
    derivative: str
    integral: str = ""
    domain: Interval = DEFAULT_DOMAIN
    range: Interval = DEFAULT_RANGE
    critical_points: tuple[CriticalPoint, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape used on the wire (``criticalPoints``/``type`` keys)."""
        return {
            "parsed": self.parsed,
            "derivative": self.derivative,
            "integral": self.integral,
            "domain": [self.domain[0], self.domain[1]],
            "range": [self.range[0], self.range[1]],
            "criticalPoints": [point.to_dict() for point in self.critical_points],
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], expression: str) -> "AnalysisResult":
        """Coerce a decoded JSON payload into an ``AnalysisResult``.

        ``parsed`` and ``derivative`` must be non-empty strings, otherwise
        :class:`MalformedAnalysisError` is raised. The other fields fall back
        to defaults individually: ``integral`` to ``""``, ``domain``/``range``
        to ``(-10, 10)``, and unusable critical points are dropped.
        """
        if not isinstance(payload, Mapping):
            raise MalformedAnalysisError(f"Expected a JSON object, got {type(payload).__name__}")

        parsed = _required_text(payload, "parsed")
        derivative = _required_text(payload, "derivative")
        integral = payload.get("integral")
        integral = integral.strip() if isinstance(integral, str) else ""

        return cls(
            parsed=parsed,
            derivative=derivative,
            integral=integral,
            domain=_interval(payload.get("domain"), DEFAULT_DOMAIN, "domain", expression),
            range=_interval(payload.get("range"), DEFAULT_RANGE, "range", expression),
            critical_points=_critical_points(payload.get("criticalPoints"), expression),
        )


def fallback_analysis(expression: str) -> AnalysisResult:
    """Deterministic stand-in used whenever the analysis service fails."""
    return AnalysisResult(
        parsed=expression,
        derivative="x^2",
        integral="x^3/3",
        domain=(-10.0, 10.0),
        range=(-10.0, 10.0),
        critical_points=(CriticalPoint(0.0, CriticalPointKind.MINIMUM),),
    )


def _required_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedAnalysisError(f"Payload field {key!r} must be a non-empty string, got {value!r}")
    return value.strip()


def _interval(value: Any, default: Interval, name: str, expression: str) -> Interval:
    if isinstance(value, (str, bytes)):
        logger.debug("Using default %s for %r: got %r", name, expression, value)
        return default
    try:
        lo, hi = (float(v) for v in value)
    except (TypeError, ValueError):
        logger.debug("Using default %s for %r: got %r", name, expression, value)
        return default
    if not (math.isfinite(lo) and math.isfinite(hi) and lo < hi):
        logger.debug("Using default %s for %r: got %r", name, expression, value)
        return default
    return (lo, hi)


def _critical_points(value: Any, expression: str) -> tuple[CriticalPoint, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    points = []
    for item in value:
        if not isinstance(item, Mapping):
            logger.debug("Dropping critical point %r for %r", item, expression)
            continue
        try:
            points.append(CriticalPoint.from_mapping(item))
        except ValueError as exc:
            logger.debug("Dropping critical point for %r: %s", expression, exc)
    return tuple(points)
