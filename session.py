"""Submission and recompute state for one visualizer instance.

``VisualizerSession`` is the UI-agnostic core of the application shell. It
holds the current analysis and color scheme, and recomputes the
:class:`~calculus_art.render_state.RenderState` explicitly whenever either
changes. Hosts subscribe with :meth:`VisualizerSession.on_change`.

Concurrency
-----------
Each submission is an independent request. With :meth:`submit_async`,
overlapping submissions are neither queued nor cancelled: whichever response
resolves last is the one left on display.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from .AnalysisResult import AnalysisResult
from .derivative_colors import ColorScheme
from .oracle import ExpressionAnalyzer
from .render_state import RenderState, compute_render_state
from .settings import PlotSettings

__all__ = ["EMPTY_INPUT_MESSAGE", "VisualizerSession"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

EMPTY_INPUT_MESSAGE = "Please enter a mathematical expression."

ChangeListener = Callable[["VisualizerSession"], None]


class VisualizerSession:
    """Current analysis, scheme and render state of one visualizer.

    Parameters
    ----------
    analyzer : ExpressionAnalyzer
        Analysis boundary used for submissions.
    scheme : ColorScheme or str, optional
        Initial palette.
    settings : PlotSettings, optional
        Sampling settings for every recompute.
    """

    def __init__(
        self,
        analyzer: ExpressionAnalyzer,
        *,
        scheme: Union[ColorScheme, str] = ColorScheme.LIGHT,
        settings: Optional[PlotSettings] = None,
    ) -> None:
        self._analyzer = analyzer
        self._scheme = ColorScheme.coerce(scheme)
        self.settings = settings or PlotSettings()
        self._analysis: Optional[AnalysisResult] = None
        self._render_state: Optional[RenderState] = None
        self._listeners: list[ChangeListener] = []
        self.error: Optional[str] = None
        self.submissions = 0

    @property
    def analysis(self) -> Optional[AnalysisResult]:
        return self._analysis

    @property
    def scheme(self) -> ColorScheme:
        return self._scheme

    @property
    def render_state(self) -> Optional[RenderState]:
        return self._render_state

    def on_change(self, callback: ChangeListener) -> ChangeListener:
        """Register ``callback(session)`` to run after every recompute."""
        self._listeners.append(callback)
        return callback

    def _reject_blank(self, expression: str) -> bool:
        if expression is None or not str(expression).strip():
            self.error = EMPTY_INPUT_MESSAGE
            self._notify()
            return True
        self.error = None
        self.submissions += 1
        return False

    def submit(self, expression: str) -> Optional[RenderState]:
        """Analyze ``expression`` and recompute.

        Blank input sets :attr:`error` and leaves the current result in place.
        """
        if self._reject_blank(expression):
            return None
        return self._apply(self._analyzer.analyze(expression))

    async def submit_async(self, expression: str) -> Optional[RenderState]:
        """Asynchronous :meth:`submit`; results apply in completion order."""
        if self._reject_blank(expression):
            return None
        analysis = await self._analyzer.analyze_async(expression)
        return self._apply(analysis)

    def set_analysis(self, analysis: AnalysisResult) -> RenderState:
        """Replace the current analysis directly and recompute."""
        return self._apply(analysis)

    def set_scheme(self, scheme: Union[ColorScheme, str]) -> Optional[RenderState]:
        """Switch palette and recompute."""
        self._scheme = ColorScheme.coerce(scheme)
        return self.recompute()

    def _apply(self, analysis: Optional[AnalysisResult]) -> Optional[RenderState]:
        if analysis is None:
            self.error = EMPTY_INPUT_MESSAGE
            self._notify()
            return None
        self._analysis = analysis
        return self.recompute()

    def recompute(self) -> Optional[RenderState]:
        """Rebuild the render state from the current analysis and scheme."""
        if self._analysis is None:
            self._render_state = None
        else:
            self._render_state = compute_render_state(
                self._analysis,
                self._scheme,
                step_count=self.settings.step_count,
            )
        self._notify()
        return self._render_state

    def _notify(self) -> None:
        for callback in tuple(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception("VisualizerSession listener failed: %r", callback)
