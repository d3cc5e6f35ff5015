"""Runtime settings for the analysis client and the plot pipeline.

Settings are plain frozen dataclasses. Nothing reads the environment at
import time; :meth:`OracleSettings.from_env` does so only when called.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

__all__ = [
    "DEFAULT_DOMAIN",
    "DEFAULT_RANGE",
    "DEFAULT_STEP_COUNT",
    "OracleSettings",
    "PlotSettings",
]


DEFAULT_STEP_COUNT = 200
DEFAULT_DOMAIN: tuple[float, float] = (-10.0, 10.0)
DEFAULT_RANGE: tuple[float, float] = (-10.0, 10.0)

MODEL_ENV_VAR = "CALCULUS_ART_GEMINI_MODEL"
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class OracleSettings:
    """Configuration for the expression-analysis language model.

    Parameters
    ----------
    model : str
        Gemini model identifier.
    api_key : str or None
        API key; ``None`` leaves the lookup to :meth:`from_env` callers.
    temperature : float
        Sampling temperature.
    timeout_seconds : float
        HTTP timeout handed to the SDK client.
    """

    model: str = "gemini-2.0-flash"
    api_key: Optional[str] = field(default=None, repr=False)
    temperature: float = 0.1
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OracleSettings":
        """Read model and API key from environment variables."""
        env = os.environ if environ is None else environ
        api_key = next((env[name] for name in API_KEY_ENV_VARS if env.get(name)), None)
        model = env.get(MODEL_ENV_VAR) or cls.model
        return cls(model=model, api_key=api_key)


@dataclass(frozen=True)
class PlotSettings:
    """Sampling and marker placement settings for a render pass."""

    step_count: int = DEFAULT_STEP_COUNT
    marker_tolerance: float = 0.1

    def __post_init__(self) -> None:
        if int(self.step_count) < 1:
            raise ValueError(f"step_count must be >= 1, got {self.step_count}")
