"""Infix expression parsing with a fixed single-variable namespace.

User input arrives in calculator notation (``x^2 + 3x``, ``e^(-x^2)``,
``ln(x)``). This module turns that text into a SymPy expression in ``x`` using
SymPy's own parser with the ``convert_xor`` and implicit-multiplication
transformations, and an explicit local namespace so only the supported
function names resolve.
"""

from __future__ import annotations

import io
import tokenize
from typing import Any

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

__all__ = ["X", "ExpressionParseError", "parse_expression"]


X = sp.Symbol("x", real=True)

_TRANSFORMATIONS = standard_transformations + (
    convert_xor,
    implicit_multiplication_application,
)

_LOCAL_NAMES: dict[str, Any] = {
    "x": X,
    "e": sp.E,
    "E": sp.E,
    "pi": sp.pi,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": lambda arg: 1 / sp.cos(arg),
    "csc": lambda arg: 1 / sp.sin(arg),
    "cot": lambda arg: 1 / sp.tan(arg),
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "exp": sp.exp,
    "sqrt": sp.sqrt,
    "cbrt": lambda arg: sp.real_root(arg, 3),
    "abs": sp.Abs,
    "log": sp.log,
    "ln": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
}


_ALLOWED_OPERATORS = frozenset({"+", "-", "*", "/", "**", "^", "(", ")", ","})
_LAYOUT_TOKENS = frozenset({tokenize.NEWLINE, tokenize.NL, tokenize.ENDMARKER})

# Names the generated code may reference; everything else is unreachable.
_GLOBAL_NAMES: dict[str, Any] = {
    "__builtins__": {},
    "Integer": sp.Integer,
    "Float": sp.Float,
    "Rational": sp.Rational,
    "Symbol": sp.Symbol,
}


class ExpressionParseError(ValueError):
    """Raised when expression text cannot be turned into a SymPy expression in ``x``."""


def _reject_unsafe_tokens(source: str, text: str) -> None:
    """Raise unless ``source`` holds only known names, numbers and arithmetic."""
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (tokenize.TokenError, SyntaxError) as exc:
        raise ExpressionParseError(f"Could not parse expression {text!r}: {exc}") from exc

    for tok in tokens:
        if tok.type in _LAYOUT_TOKENS or tok.type == tokenize.NUMBER:
            continue
        if tok.type == tokenize.NAME and tok.string in _LOCAL_NAMES:
            continue
        if tok.type == tokenize.OP and tok.string in _ALLOWED_OPERATORS:
            continue
        if tok.type == tokenize.NAME:
            raise ExpressionParseError(
                f"Expression {text!r} uses unknown name {tok.string!r}. "
                "Only the variable x and the supported functions are allowed."
            )
        raise ExpressionParseError(f"Expression {text!r} contains unsupported token {tok.string!r}.")


def parse_expression(text: str) -> sp.Expr:
    """Parse calculator-style infix text into a SymPy expression in ``x``.

    Parameters
    ----------
    text : str
        Expression such as ``"sin(x) + x^2"``. ``^`` is exponentiation and
        ``e^u`` becomes ``exp(u)``.

    Returns
    -------
    sympy.Expr
        Parsed expression whose only free symbol (if any) is :data:`X`.

    Raises
    ------
    ExpressionParseError
        If the text is blank, does not parse, or references names other than
        ``x`` and the supported functions/constants.

    Examples
    --------
    >>> parse_expression("x^2 + 2x")
    x**2 + 2*x
    >>> parse_expression("e^(-x^2)")
    exp(-x**2)
    """
    if not isinstance(text, str):
        raise TypeError(f"parse_expression expects a string, got {type(text).__name__}")
    source = text.strip()
    if not source:
        raise ExpressionParseError("Cannot parse an empty expression.")

    _reject_unsafe_tokens(source, text)

    try:
        parsed = parse_expr(
            source,
            local_dict=dict(_LOCAL_NAMES),
            global_dict=dict(_GLOBAL_NAMES),
            transformations=_TRANSFORMATIONS,
            evaluate=True,
        )
    except Exception as exc:
        raise ExpressionParseError(f"Could not parse expression {text!r}: {exc}") from exc

    if not isinstance(parsed, sp.Expr):
        raise ExpressionParseError(
            f"Expression {text!r} did not evaluate to a scalar expression "
            f"(got {type(parsed).__name__})."
        )

    undefined = sorted({str(app.func) for app in parsed.atoms(AppliedUndef)})
    if undefined:
        raise ExpressionParseError(
            f"Expression {text!r} calls unknown function(s): {', '.join(undefined)}."
        )

    unknown = sorted(str(sym) for sym in parsed.free_symbols if sym != X)
    if unknown:
        raise ExpressionParseError(
            f"Expression {text!r} uses unknown name(s): {', '.join(unknown)}. "
            "Only the variable x is supported."
        )
    return parsed
