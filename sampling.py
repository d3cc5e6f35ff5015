"""Expression sampling over a fixed grid.

Purpose
-------
Evaluate a user-supplied expression at ``step_count + 1`` equally spaced
abscissae and keep the finite results. Every :class:`Sample` remembers its
nominal grid index so that two passes over the same grid (function and
derivative) can be paired explicitly instead of by list position.

Failure policy
--------------
- A point whose evaluation raises, or whose value is NaN, infinite or
  non-real, is dropped; the pass always continues.
- An expression that cannot be parsed or compiled at all evaluates to the
  sentinel ``0.0`` everywhere. The sampler reuses that policy unchanged, so a
  malformed expression yields a full grid of ``y == 0`` samples. Consumers
  should tolerate such flat-zero artifacts.

Examples
--------
>>> [s.y for s in generate_points("x^2", -1.0, 1.0, 2)]
[1.0, 0.0, 1.0]
>>> len(generate_points("1/x", -1.0, 1.0, 4))
4
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Union

import numpy as np
import sympy as sp

from .expression_parsing import X, ExpressionParseError, parse_expression
from .numpify import NumericFunction, numpify

__all__ = [
    "SENTINEL_VALUE",
    "Sample",
    "compile_expression",
    "evaluate_expression",
    "generate_points",
    "nearest_sample",
    "pair_samples",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SENTINEL_VALUE = 0.0

ExpressionLike = Union[str, sp.Expr]


@dataclass(frozen=True)
class Sample:
    """One evaluated point of a sampled expression.

    Parameters
    ----------
    x : float
        Abscissa.
    y : float
        Finite value of the expression at ``x``.
    index : int
        Nominal grid index in ``0..step_count``.
    """

    x: float
    y: float
    index: int


def compile_expression(expression: ExpressionLike) -> NumericFunction:
    """Parse (when given text) and compile ``expression`` into a NumPy callable.

    Raises
    ------
    ExpressionParseError
        If the expression cannot be parsed or compiled.
    """
    try:
        expr = parse_expression(expression) if isinstance(expression, str) else expression
        return numpify(expr, var=X)
    except ExpressionParseError:
        raise
    except (TypeError, ValueError) as exc:
        raise ExpressionParseError(f"Could not compile expression {expression!r}: {exc}") from exc


def _sentinel_evaluator(x: Any) -> np.ndarray:
    return np.full(np.shape(x), SENTINEL_VALUE, dtype=float)


def _evaluator_or_sentinel(expression: ExpressionLike) -> Callable[[Any], Any]:
    """Return a compiled evaluator, or the constant sentinel evaluator on failure."""
    try:
        return compile_expression(expression)
    except ExpressionParseError as exc:
        logger.warning("Substituting %s for malformed expression: %s", SENTINEL_VALUE, exc)
        return _sentinel_evaluator


def _real_or_nan(value: Any) -> float:
    arr = np.asarray(value)
    if arr.size != 1:
        raise ValueError(f"Expected a scalar result, got shape {arr.shape}")
    item = arr.reshape(()).item()
    if isinstance(item, complex):
        return item.real if item.imag == 0 else math.nan
    return float(item)


def evaluate_expression(expression: ExpressionLike, x: float) -> float:
    """Evaluate ``expression`` at a single ``x``.

    Returns :data:`SENTINEL_VALUE` when the expression cannot be parsed or
    compiled. Domain errors at ``x`` come back as ``nan`` or ``inf``; non-real
    results come back as ``nan``.
    """
    evaluator = _evaluator_or_sentinel(expression)
    with np.errstate(all="ignore"):
        return _real_or_nan(evaluator(float(x)))


def _validate_grid(x_min: float, x_max: float, step_count: int) -> tuple[float, float, int]:
    if isinstance(step_count, bool) or not isinstance(step_count, (int, np.integer)):
        raise TypeError(f"step_count must be an integer, got {type(step_count).__name__}")
    if step_count < 1:
        raise ValueError(f"step_count must be >= 1, got {step_count}")
    lo, hi = float(x_min), float(x_max)
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValueError(f"Sampling interval must be finite, got [{x_min}, {x_max}]")
    if not lo < hi:
        raise ValueError(f"Sampling interval requires x_min < x_max, got [{x_min}, {x_max}]")
    return lo, hi, int(step_count)


def _evaluate_vectorized(evaluator: Callable[[Any], Any], xs: np.ndarray) -> Optional[np.ndarray]:
    """Evaluate the whole grid in one call; ``None`` means fall back to per-point."""
    try:
        with np.errstate(all="ignore"):
            values = np.asarray(evaluator(xs))
        values = np.broadcast_to(values, xs.shape)
        if np.iscomplexobj(values):
            values = np.where(values.imag == 0, values.real, np.nan)
        return np.asarray(values, dtype=float)
    except Exception as exc:
        logger.debug("Vectorized evaluation failed, evaluating point by point: %s", exc)
        return None


def _evaluate_pointwise(evaluator: Callable[[Any], Any], xs: np.ndarray) -> np.ndarray:
    values = np.full(xs.shape, np.nan, dtype=float)
    for i, x_value in enumerate(xs):
        try:
            with np.errstate(all="ignore"):
                values[i] = _real_or_nan(evaluator(float(x_value)))
        except Exception as exc:
            logger.debug("Dropping sample at x=%r: %s", float(x_value), exc)
    return values


def generate_points(
    expression: ExpressionLike,
    x_min: float,
    x_max: float,
    step_count: int,
) -> list[Sample]:
    """Sample ``expression`` at ``step_count + 1`` equally spaced points.

    Parameters
    ----------
    expression : str or sympy.Expr
        Expression in ``x``.
    x_min, x_max : float
        Closed sampling interval; requires ``x_min < x_max``.
    step_count : int
        Number of steps; the grid is ``x_min + i * (x_max - x_min) / step_count``
        for ``i = 0..step_count``, with the last point pinned to ``x_max``.

    Returns
    -------
    list[Sample]
        Finite samples in increasing ``x`` order. May hold fewer than
        ``step_count + 1`` entries, or none at all.

    Raises
    ------
    TypeError, ValueError
        If the interval or step count is invalid. Evaluation problems never
        raise.
    """
    lo, hi, steps = _validate_grid(x_min, x_max, step_count)
    step = (hi - lo) / steps
    xs = lo + np.arange(steps + 1, dtype=float) * step
    xs[-1] = hi

    evaluator = _evaluator_or_sentinel(expression)
    ys = _evaluate_vectorized(evaluator, xs)
    if ys is None:
        ys = _evaluate_pointwise(evaluator, xs)

    keep = np.isfinite(ys)
    dropped = int(keep.size - np.count_nonzero(keep))
    if dropped:
        logger.debug("Dropped %d of %d samples for %r", dropped, keep.size, expression)

    return [
        Sample(x=float(xs[i]), y=float(ys[i]), index=int(i))
        for i in np.flatnonzero(keep)
    ]


def pair_samples(
    function_samples: Sequence[Sample],
    derivative_samples: Sequence[Sample],
) -> list[tuple[Sample, Sample]]:
    """Pair function and derivative samples that share a grid index.

    Both sequences must come from the same grid. Indices present in only one
    of them are skipped.
    """
    by_index = {sample.index: sample for sample in derivative_samples}
    return [
        (sample, by_index[sample.index])
        for sample in function_samples
        if sample.index in by_index
    ]


def nearest_sample(
    samples: Sequence[Sample],
    x: float,
    tolerance: float,
) -> Optional[Sample]:
    """Return the sample closest to ``x`` within ``tolerance``, or ``None``."""
    best: Optional[Sample] = None
    best_distance = float(tolerance)
    for sample in samples:
        distance = abs(sample.x - x)
        if distance < best_distance:
            best, best_distance = sample, distance
    return best
