"""Top-level public API for the ``calculus_art`` package.

This module re-exports the pieces needed to turn an expression into a
slope-shaded plot, so users can import from a single namespace:

>>> from calculus_art import generate_points, color_from_derivative, gradient_stops  # doctest: +SKIP

It exposes the numeric core (sampling, derivative colors, critical-point
gradients), the analysis boundary and its clients, the pure recompute step,
the Plotly renderer and the notebook shell.
"""

from .AnalysisResult import AnalysisResult, MalformedAnalysisError, fallback_analysis
from .critical_gradient import (
    CriticalPoint,
    CriticalPointKind,
    GradientStop,
    gradient_css,
    gradient_stops,
    interpolate_gradient,
    marker_color,
)
from .derivative_colors import (
    RGB,
    ColorScheme,
    color_from_derivative,
    colors_from_derivatives,
    normalize_derivative,
)
from .expression_parsing import ExpressionParseError, parse_expression
from .figure_render import build_plot_figure, error_figure
from .numpify import NumericFunction, numpify
from .oracle import (
    ExpressionAnalyzer,
    GeminiClient,
    OracleClient,
    OracleConfigurationError,
    OracleError,
    OracleResponseError,
    build_prompt,
    extract_json_payload,
)
from .render_state import RenderState, Segment, compute_render_state
from .sampling import (
    Sample,
    evaluate_expression,
    generate_points,
    nearest_sample,
    pair_samples,
)
from .session import VisualizerSession
from .settings import OracleSettings, PlotSettings
from .app import CalculusArtApp, format_details_html
