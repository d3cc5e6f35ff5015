from __future__ import annotations

import logging

import pytest

from calculus_art.critical_gradient import (
    PLACEHOLDER_STOPS,
    CriticalPoint,
    CriticalPointKind,
    GradientStop,
    gradient_css,
    gradient_stops,
    interpolate_gradient,
    marker_color,
)
from calculus_art.derivative_colors import RGB, ColorScheme


def test_empty_points_give_scheme_placeholders() -> None:
    assert gradient_stops([], "light") == [GradientStop("#f0f9ff", 0.0), GradientStop("#e6f7ff", 100.0)]
    assert gradient_stops([], "dark") == [GradientStop("#0f172a", 0.0), GradientStop("#1e293b", 100.0)]
    assert gradient_css([], "light") == "linear-gradient(to right, #f0f9ff 0%, #e6f7ff 100%)"
    assert gradient_css([], "dark") == "linear-gradient(to right, #0f172a 0%, #1e293b 100%)"


def test_stops_are_sorted_by_x_and_colored_by_kind() -> None:
    points = [
        CriticalPoint(5, CriticalPointKind.MINIMUM),
        CriticalPoint(-5, CriticalPointKind.MAXIMUM),
        CriticalPoint(0, CriticalPointKind.INFLECTION),
    ]
    stops = gradient_stops(points, ColorScheme.LIGHT)
    assert stops == [
        GradientStop("#ef4444", 0.0),
        GradientStop("#10b981", 50.0),
        GradientStop("#3b82f6", 100.0),
    ]
    dark = gradient_stops(points, ColorScheme.DARK)
    assert [s.color for s in dark] == ["#f87171", "#34d399", "#60a5fa"]
    assert gradient_css(points, "light") == (
        "linear-gradient(to right, #ef4444 0%, #10b981 50%, #3b82f6 100%)"
    )


def test_ties_keep_input_order_and_share_positions() -> None:
    points = [
        CriticalPoint(2, "maximum"),
        CriticalPoint(0, "minimum"),
        CriticalPoint(2, "inflection"),
    ]
    stops = gradient_stops(points, "light")
    assert [s.position for s in stops] == [0.0, 100.0, 100.0]
    assert [s.color for s in stops] == ["#3b82f6", "#ef4444", "#10b981"]


def test_single_point_sits_in_the_middle() -> None:
    stops = gradient_stops([CriticalPoint(3, "maximum")], "light")
    assert stops == [GradientStop("#ef4444", 50.0)]
    assert gradient_css([CriticalPoint(3, "maximum")], "light") == (
        "linear-gradient(to right, #ef4444 50%, #ef4444 50%)"
    )


def test_all_points_sharing_x_sit_in_the_middle() -> None:
    stops = gradient_stops([CriticalPoint(1, "maximum"), CriticalPoint(1, "minimum")], "dark")
    assert [s.position for s in stops] == [50.0, 50.0]


def test_kind_coercion(caplog) -> None:
    assert CriticalPointKind.coerce("Maximum") is CriticalPointKind.MAXIMUM
    assert CriticalPointKind.coerce("local minimum") is CriticalPointKind.MINIMUM
    assert CriticalPointKind.coerce("max") is CriticalPointKind.MAXIMUM
    with caplog.at_level(logging.INFO, logger="calculus_art.critical_gradient"):
        assert CriticalPointKind.coerce("saddle") is CriticalPointKind.INFLECTION
    assert "saddle" in caplog.text


def test_from_mapping_validates_x() -> None:
    point = CriticalPoint.from_mapping({"x": "1.5", "type": "minimum"})
    assert point == CriticalPoint(1.5, CriticalPointKind.MINIMUM)
    assert point.to_dict() == {"x": 1.5, "type": "minimum"}
    for bad in ({"type": "minimum"}, {"x": None}, {"x": "abc"}, {"x": float("nan")}):
        with pytest.raises(ValueError):
            CriticalPoint.from_mapping(bad)


def test_marker_color_palette() -> None:
    assert marker_color("maximum", "light") == "#ef4444"
    assert marker_color(CriticalPointKind.MINIMUM, ColorScheme.DARK) == "#60a5fa"


def test_interpolate_gradient_between_and_beyond_stops() -> None:
    stops = [GradientStop("#000000", 0.0), GradientStop("#ffffff", 100.0)]
    assert interpolate_gradient(stops, -10.0) == RGB(0, 0, 0)
    assert interpolate_gradient(stops, 150.0) == RGB(255, 255, 255)
    assert interpolate_gradient(stops, 50.0) == RGB(128, 128, 128)
    assert interpolate_gradient(list(PLACEHOLDER_STOPS[ColorScheme.LIGHT]), 0.0) == RGB.from_hex("#f0f9ff")
    with pytest.raises(ValueError):
        interpolate_gradient([], 10.0)


def test_extreme_x_values_keep_positions_in_range() -> None:
    points = [
        CriticalPoint(1e308, "minimum"),
        CriticalPoint(-1e308, "maximum"),
        CriticalPoint(0.0, "inflection"),
    ]
    stops = gradient_stops(points, "light")
    assert [s.position for s in stops] == [0.0, 50.0, 100.0]
    assert "nan" not in gradient_css(points, "light")
