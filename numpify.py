"""
numpify: Compile single-variable SymPy expressions to NumPy callables
====================================================================

Purpose
-------
Turn a parsed SymPy expression in one variable into a vectorized Python
function that evaluates with NumPy. Sampling a curve over a few hundred grid
points then costs one NumPy call instead of one SymPy ``subs`` per point.

The generated function is produced by SymPy's :class:`NumPyPrinter` and
``exec``; the source text is kept on the returned object for inspection.

Public API
----------
- :func:`numpify`
- :class:`NumericFunction`

Examples
--------
>>> import numpy as np
>>> from calculus_art.expression_parsing import X, parse_expression
>>> f = numpify(parse_expression("x^2 + 1"), var=X)
>>> f(np.array([0.0, 1.0, 2.0]))
array([1., 2., 5.])

Constant compiled with broadcasting:

>>> g = numpify(5, var=X)
>>> g(np.array([1.0, 2.0, 3.0]))
array([5., 5., 5.])

Logging
-------
This module uses Python's standard :mod:`logging` library and is silent by
default. Enable ``logging.getLogger("calculus_art.numpify")`` at DEBUG level to
see generated sources and compile timings.

Notes
-----
Compilation is uncached: every submission recompiles its
expressions from scratch.
"""

from __future__ import annotations

import logging
import textwrap
import time
from typing import Any, Callable, Dict, Optional, cast

import numpy as np
import sympy as sp
from sympy.printing.numpy import NumPyPrinter

from .expression_parsing import X

__all__ = ["NumericFunction", "numpify"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_ARG_NAME = "x"


class NumericFunction:
    """Compiled SymPy->NumPy callable of a single variable."""

    __slots__ = ("_fn", "symbolic", "var", "source")

    def __init__(
        self,
        fn: Callable[[Any], Any],
        symbolic: sp.Basic,
        var: sp.Symbol,
        source: str,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.var = var
        self.source = source

    def __call__(self, x: Any) -> Any:
        return self._fn(x)

    def __repr__(self) -> str:
        return f"NumericFunction({self.symbolic!r}, var={self.var!r})"


def numpify(expr: Any, *, var: Optional[sp.Symbol] = None) -> NumericFunction:
    """Compile a SymPy expression into a NumPy-evaluable function of ``var``.

    Parameters
    ----------
    expr:
        A SymPy expression or anything accepted by :func:`sympy.sympify`.
    var:
        The independent variable. Defaults to :data:`calculus_art.expression_parsing.X`.

    Returns
    -------
    NumericFunction
        Callable taking a scalar or array ``x`` and returning NumPy values of
        the same shape. Constant expressions are broadcast to the input shape.

    Raises
    ------
    TypeError
        If ``expr`` cannot be converted to a SymPy expression.
    ValueError
        If ``expr`` contains free symbols other than ``var``.

    Notes
    -----
    This function uses ``exec`` to define the generated function. The printed
    code only references ``numpy`` and the argument, so no user names reach
    the generated namespace.
    """
    var = X if var is None else var
    if not isinstance(var, sp.Symbol):
        raise TypeError(f"var must be a SymPy Symbol, got {type(var).__name__}")

    try:
        expr_sym = sp.sympify(expr)
    except Exception as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr)}") from e
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym)}")
    expr_sym = cast(sp.Basic, expr_sym)

    extra = sorted(s.name for s in expr_sym.free_symbols if s != var)
    if extra:
        raise ValueError(
            f"Expression contains unbound symbols: {', '.join(extra)}. "
            f"Only {var.name} may appear."
        )

    log_debug = logger.isEnabledFor(logging.DEBUG)
    t0: float | None = time.perf_counter() if log_debug else None

    printer = NumPyPrinter(settings={"user_functions": {}, "allow_unknown_functions": False})
    expr_code = printer.doprint(expr_sym.xreplace({var: sp.Symbol(_ARG_NAME)}))

    lines = [
        f"def _generated({_ARG_NAME}):",
        f"    {_ARG_NAME} = numpy.asarray({_ARG_NAME}, dtype=float)",
    ]
    if not expr_sym.free_symbols:
        lines.append(f"    return ({expr_code}) + numpy.zeros({_ARG_NAME}.shape)")
    else:
        lines.append(f"    return {expr_code}")
    src = "\n".join(lines)

    glb: Dict[str, Any] = {"numpy": np}
    loc: Dict[str, Any] = {}
    exec(src, glb, loc)
    fn = cast(Callable[[Any], Any], loc["_generated"])
    fn.__doc__ = textwrap.dedent(
        f"""
        Auto-generated NumPy function from SymPy expression.

        expr: {expr_sym!r}

        Source:
        {src}
        """
    ).strip()

    if log_debug:
        logger.debug(
            "numpify: compiled %r in %.2f ms\n%s",
            expr_sym,
            1000.0 * (time.perf_counter() - (t0 or 0.0)),
            src,
        )

    return NumericFunction(fn=fn, symbolic=expr_sym, var=var, source=src)
