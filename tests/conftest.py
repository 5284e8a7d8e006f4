"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from vibeframe.storage.sessions import InMemorySessionStore


# Sample elements, desktop landing page with the classic theme

HEADER_BG = {
    "type": "rectangle", "id": "header-bg", "x": 0, "y": 0, "width": 1440, "height": 80,
    "backgroundColor": "#f5f5f5", "strokeColor": "#9e9e9e", "fillStyle": "solid",
    "strokeWidth": 1, "roughness": 0,
}

LOGO = {
    "type": "text", "id": "logo", "x": 40, "y": 28, "width": 80, "height": 24,
    "text": "LOGO", "fontSize": 24, "fontFamily": 1, "textAlign": "left",
    "verticalAlign": "top", "strokeColor": "#424242",
}

FEAT1 = {
    "type": "rectangle", "id": "feat1", "x": 60, "y": 540, "width": 300, "height": 200,
    "backgroundColor": "#fafafa", "strokeColor": "#e0e0e0", "fillStyle": "solid",
    "strokeWidth": 1, "roughness": 0,
}

FEAT1_TITLE = {
    "type": "text", "id": "feat1-title", "x": 140, "y": 620, "width": 140, "height": 24,
    "text": "Feature 1", "fontSize": 20,
}

CTA_ARROW = {
    "type": "arrow", "id": "cta-arrow", "x": 700, "y": 360, "points": [[0, 0], [20, 0]],
    "startBinding": {"elementId": "feat1"},
}

LANDING_ELEMENTS = [HEADER_BG, LOGO, FEAT1]


def result(**fields: Any) -> dict[str, Any]:
    """A structured result payload with the required fields filled in."""
    payload: dict[str, Any] = {
        "current_step": "complete",
        "commentary": "완료했습니다.",
        "awaiting_input": False,
    }
    payload.update(fields)
    return payload


class FakeGenerationClient:
    """Generation collaborator that replays queued results or raises queued errors."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def generate(self, system, messages, schema, task="chat"):
        self.calls.append({"system": system, "messages": list(messages), "schema": schema, "task": task})
        if not self.responses:
            raise AssertionError("FakeGenerationClient has no queued response")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return schema.model_validate(response)
        return response


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


class StatusError(Exception):
    """Stand-in for an SDK error that carries an HTTP status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
