from __future__ import annotations

import pytest

pytest.importorskip("ipywidgets")

from calculus_art.AnalysisResult import AnalysisResult, fallback_analysis
from calculus_art.app import NO_CRITICAL_POINTS_MESSAGE, CalculusArtApp, format_details_html
from calculus_art.critical_gradient import CriticalPoint
from calculus_art.derivative_colors import ColorScheme
from calculus_art.oracle import ExpressionAnalyzer
from calculus_art.session import EMPTY_INPUT_MESSAGE
from calculus_art.settings import PlotSettings


def test_details_list_critical_points() -> None:
    markup = format_details_html(fallback_analysis("sin(x)"))
    assert "f(x) = sin(x)" in markup
    assert "f'(x) = x^2" in markup
    assert "x^3/3 + C" in markup
    assert "[-10, 10]" in markup
    assert "x = 0.00</strong>: Minimum" in markup


def test_details_without_critical_points_and_escaping() -> None:
    analysis = AnalysisResult(parsed="x<1>", derivative="1")
    markup = format_details_html(analysis)
    assert NO_CRITICAL_POINTS_MESSAGE in markup
    assert "x&lt;1&gt;" in markup
    assert format_details_html(None) == ""


def test_details_round_x_to_two_places() -> None:
    analysis = AnalysisResult(parsed="x", derivative="1", critical_points=(CriticalPoint(1.23456, "maximum"),))
    assert "x = 1.23</strong>: Maximum" in format_details_html(analysis)


@pytest.fixture
def app(fake_client_factory, fenced_reply):
    analyzer = ExpressionAnalyzer(fake_client_factory(fenced_reply))
    return CalculusArtApp(analyzer, settings=PlotSettings(step_count=20))


def test_generate_button_runs_analysis(app) -> None:
    app.expression_input.value = "x^3 - 3x"
    app.generate_button.click()

    assert app.session.analysis.parsed == "x^3 - 3*x"
    assert "linear-gradient" in app.gradient_html.value
    assert "x = -1.00</strong>: Maximum" in app.details_html.value
    assert app.error_html.value == ""
    assert app.generate_button.disabled is False
    assert app.generate_button.description == "Generate"


def test_blank_input_shows_message(app) -> None:
    app.submit("  ")
    assert EMPTY_INPUT_MESSAGE in app.error_html.value
    assert app.details_html.value == ""


def test_scheme_toggle_switches_session_palette(app) -> None:
    app.submit("x^3 - 3x")
    app.scheme_toggle.value = ColorScheme.DARK.value
    assert app.session.scheme is ColorScheme.DARK
    assert "#f87171" in app.gradient_html.value
