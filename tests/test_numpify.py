from __future__ import annotations

import numpy as np
import pytest
import sympy as sp

from calculus_art.expression_parsing import X, parse_expression
from calculus_art.numpify import NumericFunction, numpify


def test_numpify_vectorizes_over_arrays() -> None:
    fn = numpify(parse_expression("x^2 + 1"), var=X)
    assert isinstance(fn, NumericFunction)
    np.testing.assert_allclose(fn(np.array([0.0, 1.0, 2.0])), [1.0, 2.0, 5.0])


def test_numpify_broadcasts_constants() -> None:
    fn = numpify(sp.Integer(5), var=X)
    np.testing.assert_allclose(fn(np.array([1.0, 2.0, 3.0])), [5.0, 5.0, 5.0])
    assert float(fn(0.0)) == 5.0


def test_numpify_keeps_source_and_symbolic() -> None:
    expr = parse_expression("sin(x)")
    fn = numpify(expr, var=X)
    assert fn.symbolic == expr
    assert "numpy.sin" in fn.source
    assert "NumericFunction" in repr(fn)


def test_numpify_rejects_foreign_symbols() -> None:
    y = sp.Symbol("y")
    with pytest.raises(ValueError, match="unbound symbols: y"):
        numpify(X + y, var=X)


def test_numpify_domain_errors_yield_non_finite_values() -> None:
    fn = numpify(parse_expression("log(x)"), var=X)
    with np.errstate(all="ignore"):
        values = fn(np.array([-1.0, 0.0, 1.0]))
    assert np.isnan(values[0])
    assert np.isinf(values[1])
    assert values[2] == 0.0
