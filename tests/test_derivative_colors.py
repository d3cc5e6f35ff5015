from __future__ import annotations

import pytest

from calculus_art.derivative_colors import (
    RGB,
    ColorScheme,
    color_from_derivative,
    colors_from_derivatives,
    normalize_derivative,
)


def test_zero_slope_light_is_green_peak() -> None:
    assert color_from_derivative(0.0, ColorScheme.LIGHT) == RGB(128, 200, 128)


def test_zero_slope_dark_midpoint() -> None:
    assert color_from_derivative(0.0, ColorScheme.DARK) == RGB(155, 155, 228)


def test_steep_slopes_saturate_to_end_colors() -> None:
    assert color_from_derivative(1e9, "light") == RGB(255, 0, 0)
    assert color_from_derivative(-1e9, "light") == RGB(0, 0, 255)
    assert color_from_derivative(1e9, "dark") == RGB(255, 55, 255)
    assert color_from_derivative(-1e9, "dark") == RGB(55, 255, 200)


@pytest.mark.parametrize("scheme", list(ColorScheme))
def test_large_magnitudes_are_indistinguishable(scheme: ColorScheme) -> None:
    assert color_from_derivative(100.0, scheme) == color_from_derivative(1000.0, scheme)
    assert color_from_derivative(-100.0, scheme) == color_from_derivative(-1000.0, scheme)


def test_normalize_derivative_is_bounded_and_centered() -> None:
    assert normalize_derivative(0.0) == 0.5
    assert normalize_derivative(1e300) == 1.0
    assert normalize_derivative(-1e300) == 0.0
    assert 0.5 < normalize_derivative(5.0) < 1.0


def test_css_and_hex_formatting() -> None:
    color = RGB(255, 0, 16)
    assert color.css() == "rgb(255, 0, 16)"
    assert color.hex() == "#ff0010"
    assert RGB.from_hex("#ff0010") == color
    assert RGB.from_hex("#fff") == RGB(255, 255, 255)


def test_from_hex_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        RGB.from_hex("#12345")
    with pytest.raises(ValueError):
        RGB.from_hex("#gggggg")


def test_scheme_coercion() -> None:
    assert ColorScheme.coerce("Dark") is ColorScheme.DARK
    assert ColorScheme.coerce(ColorScheme.LIGHT) is ColorScheme.LIGHT
    with pytest.raises(ValueError, match="Unknown color scheme"):
        ColorScheme.coerce("sepia")
    with pytest.raises(ValueError):
        color_from_derivative(1.0, "sepia")


def test_vectorized_colors_match_scalar_colors() -> None:
    values = [-50.0, -3.0, -0.1, 0.0, 0.2, 4.0, 12.0]
    for scheme in ColorScheme:
        vectorized = colors_from_derivatives(values, scheme)
        scalar = [color_from_derivative(v, scheme) for v in values]
        for a, b in zip(vectorized, scalar):
            assert all(abs(ca - cb) <= 1 for ca, cb in zip(a, b))
    assert colors_from_derivatives([], "light") == []
