from __future__ import annotations

import pytest
import sympy as sp

from calculus_art.expression_parsing import X, ExpressionParseError, parse_expression


def test_caret_is_power_and_implicit_multiplication() -> None:
    assert parse_expression("x^2 + 2x") == X**2 + 2 * X


def test_e_caret_becomes_exp() -> None:
    assert parse_expression("e^(-x^2)") == sp.exp(-X**2)


def test_named_functions_and_ln_alias() -> None:
    assert parse_expression("sin(x) + ln(x)") == sp.sin(X) + sp.log(X)
    assert parse_expression("abs(x)") == sp.Abs(X)


def test_constant_expression_is_accepted() -> None:
    assert parse_expression("2*pi") == 2 * sp.pi


@pytest.mark.parametrize("text", ["", "   ", "x +", "sin(", "y + x", "x > 1"])
def test_invalid_input_raises_parse_error(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_expression(text)


def test_parse_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_expression("foo(x)")


def test_non_string_input_is_type_error() -> None:
    with pytest.raises(TypeError):
        parse_expression(3)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "text",
    [
        "x + 0*len(open('out.txt', 'w').name)",
        "__import__('os').getcwd()",
        "x.__class__.__mro__",
        "x + [1][0]",
        "(lambda: 1)()",
        "x if x else 1",
        "x; 1",
    ],
)
def test_code_injection_is_rejected(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_expression(text)


def test_decimal_points_inside_numbers_are_allowed() -> None:
    assert parse_expression("2.5x + .5") == sp.Float(2.5) * X + sp.Float(0.5)


def test_cbrt_is_the_real_cube_root() -> None:
    expr = parse_expression("cbrt(x)")
    assert float(expr.subs(X, -8)) == pytest.approx(-2.0)
    assert float(expr.subs(X, 27)) == pytest.approx(3.0)
