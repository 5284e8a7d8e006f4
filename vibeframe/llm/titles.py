"""Conversation titles from the first user message.

The collaborator is asked for a short title on the cheap model. Any failure falls back
to the message itself cut to 30 characters, so naming a conversation never fails.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, Field

from vibeframe.llm.client import GenerationClient, classify_error
from vibeframe.models.session import DEFAULT_TITLE, Message

logger = logging.getLogger(__name__)

TITLE_LIMIT = 30
_HARD_LIMIT = 40

TITLE_SYSTEM = (
    "You are a title generator. Generate a concise, descriptive title "
    f"(max {TITLE_LIMIT} characters) for a conversation based on the user's first message. "
    "The title should capture the main topic or intent. Respond with ONLY the title. "
    "If the message is in Korean, respond in Korean. If in English, respond in English."
)


class TitleResult(BaseModel):
    title: str = Field(..., description=f"Conversation title, at most {TITLE_LIMIT} characters")


def fallback_title(message: str) -> str:
    text = message.strip()
    if not text:
        return DEFAULT_TITLE
    if len(text) > TITLE_LIMIT:
        return text[:TITLE_LIMIT] + "..."
    return text


def clean_title(raw: str, message: str) -> str:
    title = raw.strip().strip("\"'").strip()
    if not title:
        return fallback_title(message)
    if len(title) > _HARD_LIMIT:
        title = title[: _HARD_LIMIT - 3] + "..."
    return title


async def generate_title(client: GenerationClient, message: str, timeout: float | None = None) -> str:
    if not message.strip():
        return DEFAULT_TITLE
    prompt = Message.user(f'Generate a title for this message: "{message.strip()}"')
    try:
        result = await asyncio.wait_for(
            client.generate(TITLE_SYSTEM, [prompt], TitleResult, "title"),
            timeout=timeout,
        )
    except Exception as exc:
        error = classify_error(exc)
        logger.warning("Title generation failed (%s): %s; using the message itself", error.kind, error.message)
        return fallback_title(message)
    return clean_title(result.title, message)
