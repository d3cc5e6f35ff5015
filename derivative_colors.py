"""Derivative-to-color mapping for slope-shaded curves.

A derivative value is squashed with ``tanh(value / 5)`` into ``[0, 1]`` and
then mapped to an RGB triple. Slopes beyond roughly +/-15 all land on the same
end color, so extreme or near-singular derivatives cannot blow out the scale.

Light scheme: blue for steep descent, green near zero slope, red for steep
ascent. Dark scheme: cyan to magenta with every channel kept at or above 55 so
strokes stay visible on a dark background.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, NamedTuple, Union

import numpy as np

__all__ = [
    "SATURATION_SCALE",
    "ColorScheme",
    "RGB",
    "color_from_derivative",
    "colors_from_derivatives",
    "normalize_derivative",
]


SATURATION_SCALE = 5.0


class ColorScheme(str, Enum):
    """Light or dark presentation scheme."""

    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def coerce(cls, value: Union["ColorScheme", str]) -> "ColorScheme":
        """Return ``value`` as a :class:`ColorScheme`, accepting names like ``"Dark"``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Unknown color scheme {value!r}; expected 'light' or 'dark'.")


class RGB(NamedTuple):
    """8-bit RGB color."""

    r: int
    g: int
    b: int

    def css(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"

    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @classmethod
    def from_hex(cls, text: str) -> "RGB":
        """Parse ``#rrggbb`` (or ``#rgb``) into an :class:`RGB`."""
        digits = text.strip().lstrip("#")
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            raise ValueError(f"Expected a #rrggbb color, got {text!r}")
        try:
            return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
        except ValueError as exc:
            raise ValueError(f"Expected a #rrggbb color, got {text!r}") from exc


def _round_half_up(value):
    # Half-up rounding, so 127.5 -> 128 rather than banker's rounding.
    return np.floor(np.asarray(value, dtype=float) + 0.5).astype(int)


def normalize_derivative(value: float) -> float:
    """Map a derivative to ``[0, 1]`` with a saturating ``tanh`` curve."""
    return float(np.clip(np.tanh(float(value) / SATURATION_SCALE), -1.0, 1.0) * 0.5 + 0.5)


def _channels(n: np.ndarray, scheme: ColorScheme) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    if scheme is ColorScheme.LIGHT:
        r = _round_half_up(n * 255)
        g = _round_half_up((1 - np.abs(n - 0.5) * 2) * 200)
        b = _round_half_up((1 - n) * 255)
    else:
        r = _round_half_up(n * 200 + 55)
        g = _round_half_up((1 - n) * 200 + 55)
        b = _round_half_up(200 + n * 55)
    return r, g, b


def color_from_derivative(value: float, scheme: Union[ColorScheme, str] = ColorScheme.LIGHT) -> RGB:
    """Return the stroke color for a curve segment with slope ``value``.

    Parameters
    ----------
    value : float
        Finite derivative value. Any finite magnitude is accepted.
    scheme : ColorScheme or str
        ``"light"`` or ``"dark"``.

    Returns
    -------
    RGB
        Channels are ints in ``[0, 255]``.

    Examples
    --------
    >>> color_from_derivative(0.0, "light")
    RGB(r=128, g=200, b=128)
    >>> color_from_derivative(1e6, "dark").css()
    'rgb(255, 55, 255)'
    """
    scheme = ColorScheme.coerce(scheme)
    n = np.asarray(normalize_derivative(value))
    r, g, b = _channels(n, scheme)
    return RGB(int(r), int(g), int(b))


def colors_from_derivatives(
    values: Iterable[float],
    scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
) -> list[RGB]:
    """Vectorized :func:`color_from_derivative` over many derivative values."""
    scheme = ColorScheme.coerce(scheme)
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return []
    n = np.clip(np.tanh(arr / SATURATION_SCALE), -1.0, 1.0) * 0.5 + 0.5
    r, g, b = _channels(n, scheme)
    return [RGB(int(ri), int(gi), int(bi)) for ri, gi, bi in zip(r, g, b)]
