"""Task to model selection. Cheap models for questions, mid-tier for chat and edits, frontier for full generation."""

from __future__ import annotations

from vibeframe.config import Settings, settings

_TASK_MODEL_MAP = {
    "elicit": "cheap",
    "title": "cheap",
    "chat": "mid",
    "modify": "mid",
    "generate": "frontier",
}


def get_model_for_task(task: str, config: Settings | None = None) -> str:
    config = config or settings
    tier = _TASK_MODEL_MAP.get(task, "mid")
    if tier == "cheap":
        return config.model_cheap
    elif tier == "mid":
        return config.model_mid
    else:
        return config.model_frontier
