from __future__ import annotations

import json
from typing import Any

import pytest


class FakeOracleClient:
    """Records prompts and replies with canned text, or raises a canned error."""

    def __init__(self, reply: str = "", *, error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def cubic_payload() -> dict[str, Any]:
    return {
        "parsed": "x^3 - 3*x",
        "derivative": "3*x^2 - 3",
        "integral": "x^4/4 - 3*x^2/2",
        "domain": [-3, 3],
        "range": [-5, 5],
        "criticalPoints": [
            {"x": 1, "type": "minimum"},
            {"x": -1, "type": "maximum"},
            {"x": 0, "type": "inflection"},
        ],
    }


@pytest.fixture
def fenced_reply(cubic_payload: dict[str, Any]) -> str:
    return "Here is the analysis:\n```json\n" + json.dumps(cubic_payload, indent=2) + "\n```\n"


@pytest.fixture
def fake_client_factory():
    return FakeOracleClient
