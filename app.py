"""Notebook shell for the calculus art visualizer.

The widget tree is thin: a text box with a Generate button, a
light/dark toggle, the Plotly output, a gradient strip and an analysis panel.
All state lives in :class:`~calculus_art.session.VisualizerSession`; widgets
only forward user actions to it and redraw from its change notifications.

Examples
--------
>>> from calculus_art import CalculusArtApp, ExpressionAnalyzer, GeminiClient  # doctest: +SKIP
>>> app = CalculusArtApp(ExpressionAnalyzer(GeminiClient()))  # doctest: +SKIP
>>> app  # doctest: +SKIP
"""

from __future__ import annotations

import html
import logging
from typing import Any, Optional, Union

import ipywidgets as widgets
from IPython.display import display

from .AnalysisResult import AnalysisResult
from .derivative_colors import ColorScheme
from .figure_render import build_plot_figure
from .oracle import ExpressionAnalyzer
from .session import VisualizerSession
from .settings import PlotSettings

__all__ = ["CalculusArtApp", "format_details_html"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

NO_CRITICAL_POINTS_MESSAGE = "No critical points found in the specified domain."


def _format_number(value: float) -> str:
    return f"{value:g}"


def format_details_html(analysis: Optional[AnalysisResult]) -> str:
    """Render the analysis panel markup for ``analysis`` (empty string for ``None``)."""
    if analysis is None:
        return ""

    esc = html.escape
    rows = [
        ("Expression", f"f(x) = {esc(analysis.parsed)}"),
        ("Derivative", f"f'(x) = {esc(analysis.derivative)}"),
        ("Integral", f"∫f(x)dx = {esc(analysis.integral)} + C"),
        ("Domain", f"[{_format_number(analysis.domain[0])}, {_format_number(analysis.domain[1])}]"),
        ("Range", f"[{_format_number(analysis.range[0])}, {_format_number(analysis.range[1])}]"),
    ]
    parts = ["<div class='calculus-art-details'>"]
    for title, body in rows:
        parts.append(f"<h4>{title}</h4><p><code>{body}</code></p>")

    parts.append("<h4>Critical Points</h4>")
    if analysis.critical_points:
        parts.append("<ul>")
        for point in analysis.critical_points:
            label = point.kind.value.capitalize()
            parts.append(f"<li><strong>x = {point.x:.2f}</strong>: {label}</li>")
        parts.append("</ul>")
    else:
        parts.append(f"<p><em>{NO_CRITICAL_POINTS_MESSAGE}</em></p>")
    parts.append("</div>")
    return "".join(parts)


class CalculusArtApp:
    """ipywidgets front end around a :class:`VisualizerSession`.

    Parameters
    ----------
    analyzer : ExpressionAnalyzer
        Analysis boundary passed to the session.
    scheme : ColorScheme or str, optional
        Initial palette.
    settings : PlotSettings, optional
        Sampling settings.
    """

    def __init__(
        self,
        analyzer: ExpressionAnalyzer,
        *,
        scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
        settings: Optional[PlotSettings] = None,
    ) -> None:
        self.session = VisualizerSession(analyzer, scheme=scheme, settings=settings)

        self.expression_input = widgets.Text(
            placeholder="Enter a mathematical expression (e.g., sin(x) + x^2)",
            layout=widgets.Layout(flex="1 1 auto"),
        )
        self.generate_button = widgets.Button(description="Generate", button_style="primary")
        self.scheme_toggle = widgets.ToggleButtons(
            options=[("Light", ColorScheme.LIGHT.value), ("Dark", ColorScheme.DARK.value)],
            value=self.session.scheme.value,
        )
        self.error_html = widgets.HTML()
        self.gradient_html = widgets.HTML()
        self.details_html = widgets.HTML()
        self.plot_output = widgets.Output(layout=widgets.Layout(width="100%"))

        self.generate_button.on_click(self._on_generate)
        self.scheme_toggle.observe(self._on_scheme_change, names="value")
        self.session.on_change(self._refresh)

        self.root = widgets.VBox(
            [
                widgets.HBox([self.expression_input, self.generate_button, self.scheme_toggle]),
                widgets.HTML(
                    "<small>Try functions like <code>sin(x)</code>, <code>x^2</code>, "
                    "<code>e^x</code>, or combinations</small>"
                ),
                self.error_html,
                widgets.HBox(
                    [
                        widgets.VBox([self.plot_output, self.gradient_html], layout=widgets.Layout(width="60%")),
                        widgets.VBox([self.details_html], layout=widgets.Layout(width="40%")),
                    ]
                ),
            ]
        )

    def _on_generate(self, _button: Any) -> None:
        self.submit(self.expression_input.value)

    def _on_scheme_change(self, change: dict[str, Any]) -> None:
        self.session.set_scheme(change["new"])

    def submit(self, expression: str) -> None:
        """Analyze ``expression`` and redraw (the Generate button handler)."""
        logger.debug("Submitting %r from the notebook shell", expression)
        self.generate_button.disabled = True
        self.generate_button.description = "Processing"
        try:
            self.session.submit(expression)
        finally:
            self.generate_button.disabled = False
            self.generate_button.description = "Generate"

    def _refresh(self, session: VisualizerSession) -> None:
        self.error_html.value = (
            f"<div style='color:#b91c1c'>{html.escape(session.error)}</div>" if session.error else ""
        )
        state = session.render_state
        if state is None:
            return

        self.details_html.value = format_details_html(session.analysis)
        self.gradient_html.value = (
            f"<div style='height:12px;border-radius:6px;background:{state.gradient_css}'></div>"
        )
        figure = build_plot_figure(state, marker_tolerance=session.settings.marker_tolerance)
        self.plot_output.clear_output(wait=True)
        with self.plot_output:
            display(figure)

    def _ipython_display_(self) -> None:
        display(self.root)
