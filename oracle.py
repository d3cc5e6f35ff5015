"""Language-model analysis of expressions behind a fail-safe boundary.

Purpose
-------
Ask an external language model to analyze an expression (derivative,
integral, domain/range, critical points) and return the answer as an
:class:`~calculus_art.AnalysisResult.AnalysisResult`.

Concepts and structure
----------------------
- :class:`OracleClient` is the one-method protocol the analyzer needs:
  ``generate(prompt) -> str``. :class:`GeminiClient` implements it with the
  Google Gen AI SDK; tests pass small fakes.
- :class:`ExpressionAnalyzer` owns prompt construction, JSON extraction and
  payload coercion. The client is injected through the constructor; there is
  no module-level client.

Important gotchas
-----------------
- ``analyze`` never raises for service problems. A network error, an SDK
  error, text without JSON, or a payload without ``parsed``/``derivative`` all
  produce :func:`~calculus_art.AnalysisResult.fallback_analysis`, which looks
  like a valid answer (derivative ``x^2``). The substitution is logged at
  WARNING level but not shown to the user.
- Blank input returns ``None`` without contacting the service.
- No timeout is enforced here beyond what the client itself applies.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Optional, Protocol

from .AnalysisResult import AnalysisResult, fallback_analysis
from .settings import OracleSettings

__all__ = [
    "ExpressionAnalyzer",
    "GeminiClient",
    "OracleClient",
    "OracleConfigurationError",
    "OracleError",
    "OracleResponseError",
    "build_prompt",
    "extract_json_payload",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class OracleError(RuntimeError):
    """Base class for analysis-service failures."""


class OracleResponseError(OracleError):
    """Raised when the service reply holds no usable JSON object."""


class OracleConfigurationError(OracleError):
    """Raised when a client cannot be constructed (missing SDK or API key)."""


class OracleClient(Protocol):
    """Minimal text-generation interface used by :class:`ExpressionAnalyzer`."""

    def generate(self, prompt: str) -> str:
        ...


_PROMPT_TEMPLATE = """\
Parse and analyze this mathematical expression: {expression}

Provide a structured JSON response with:
1. The parsed expression in a standardized format
2. The derivative of the expression
3. Any integrals in the expression (computed if possible)
4. Domain and range information
5. Critical points (maxima, minima, inflection points)

Use calculator notation in x: ^ for powers, * for products, and the functions
sin, cos, tan, exp, log, sqrt, abs.

Format the response as valid JSON with these keys:
{{
  "parsed": "string representation",
  "derivative": "string representation",
  "integral": "string representation",
  "domain": [min, max],
  "range": [min, max],
  "criticalPoints": [{{"x": value, "type": "maximum/minimum/inflection"}}]
}}
"""

_FENCED_JSON = re.compile(r"```json[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL | re.IGNORECASE)
_FENCED_ANY = re.compile(r"```[a-zA-Z]*[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL)
_BARE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def build_prompt(expression: str) -> str:
    """Return the analysis prompt for ``expression``."""
    return _PROMPT_TEMPLATE.format(expression=expression.strip())


def extract_json_payload(text: str) -> dict[str, Any]:
    """Locate and decode the JSON object in a free-text reply.

    A fenced ```` ```json ```` block wins over an unlabeled fence, which wins
    over the outermost bare ``{...}`` span. The first candidate that decodes
    to a JSON object is returned.

    Raises
    ------
    OracleResponseError
        If no candidate decodes to a JSON object.

    Examples
    --------
    >>> extract_json_payload('Sure!\\n```json\\n{"parsed": "x"}\\n```')
    {'parsed': 'x'}
    >>> extract_json_payload('result: {"a": 1} done')
    {'a': 1}
    """
    if not isinstance(text, str):
        raise OracleResponseError(f"Expected response text, got {type(text).__name__}")

    candidates: list[str] = []
    for pattern in (_FENCED_JSON, _FENCED_ANY):
        candidates.extend(match.group(1) for match in pattern.finditer(text))
    bare = _BARE_OBJECT.search(text)
    if bare is not None:
        candidates.append(bare.group(0))

    errors: list[str] = []
    for candidate in candidates:
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError as exc:
            errors.append(str(exc))
            continue
        if isinstance(decoded, dict):
            return decoded
        errors.append(f"decoded {type(decoded).__name__}, not an object")

    if not candidates:
        raise OracleResponseError("No JSON object found in response")
    raise OracleResponseError("Invalid JSON in response: " + "; ".join(errors))


class ExpressionAnalyzer:
    """Analyze expressions through an injected :class:`OracleClient`.

    Parameters
    ----------
    client : OracleClient
        Object with ``generate(prompt) -> str``.
    prompt_builder : callable, optional
        Override for :func:`build_prompt`.

    Examples
    --------
    >>> class Canned:
    ...     def generate(self, prompt):
    ...         return '{"parsed": "x^2", "derivative": "2*x"}'
    >>> ExpressionAnalyzer(Canned()).analyze("x^2").derivative
    '2*x'
    """

    def __init__(self, client: OracleClient, *, prompt_builder=build_prompt) -> None:
        self._client = client
        self._prompt_builder = prompt_builder

    @property
    def client(self) -> OracleClient:
        return self._client

    def analyze(self, expression: str) -> Optional[AnalysisResult]:
        """Return the analysis of ``expression``, the fallback on failure, or ``None`` for blank input."""
        if expression is None or not str(expression).strip():
            return None
        expression = str(expression)

        try:
            text = self._client.generate(self._prompt_builder(expression))
            payload = extract_json_payload(text)
            return AnalysisResult.from_payload(payload, expression)
        except Exception as exc:
            logger.warning(
                "Analysis of %r failed (%s: %s); using fallback analysis",
                expression,
                type(exc).__name__,
                exc,
            )
            return fallback_analysis(expression)

    async def analyze_async(self, expression: str) -> Optional[AnalysisResult]:
        """:meth:`analyze` on a worker thread, for use from an event loop."""
        return await asyncio.to_thread(self.analyze, expression)


class GeminiClient:
    """:class:`OracleClient` backed by the Google Gen AI SDK (``google-genai``).

    The SDK client is built once in the constructor from explicit settings.
    """

    def __init__(self, settings: Optional[OracleSettings] = None, *, client: Any = None) -> None:
        self.settings = settings or OracleSettings.from_env()

        if client is not None:
            self._client = client
            return

        try:
            from google import genai
        except ImportError as exc:
            raise OracleConfigurationError(
                "GeminiClient requires the `google-genai` package; install `google-genai` to use it."
            ) from exc

        if not self.settings.api_key:
            raise OracleConfigurationError(
                "No Gemini API key configured; set GEMINI_API_KEY or pass OracleSettings(api_key=...)."
            )

        self._client = genai.Client(
            api_key=self.settings.api_key,
            http_options={"timeout": int(self.settings.timeout_seconds * 1000)},
        )

    def generate(self, prompt: str) -> str:
        from google.genai import types

        response = self._client.models.generate_content(
            model=self.settings.model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=self.settings.temperature),
        )
        text = getattr(response, "text", None)
        if not text:
            raise OracleResponseError("Empty response from Gemini")
        return text
