"""LangChain ChatAnthropic wrapper returning schema-validated structured results."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol, TypeVar

import anthropic
from pydantic import BaseModel, ValidationError

from vibeframe.config import Settings, settings
from vibeframe.errors import (
    AUTHENTICATION,
    MALFORMED_OUTPUT,
    RATE_LIMITED,
    TIMEOUT,
    TRANSPORT,
    GenerationError,
)
from vibeframe.llm.model_router import get_model_for_task
from vibeframe.models.session import Message

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# 529 is Anthropic's "overloaded"; capacity rejections are reported like quota ones
_RATE_LIMIT_STATUSES = {429, 529}
_AUTH_STATUSES = {401, 403}


class GenerationClient(Protocol):
    """The generation collaborator: instructions + history + schema in, structured object out."""

    async def generate(
        self,
        system: str,
        messages: list[Message],
        schema: type[SchemaT],
        task: str = "chat",
    ) -> SchemaT: ...


class AnthropicGenerationClient:
    def __init__(self, config: Settings | None = None) -> None:
        self.config = config or settings

    async def generate(
        self,
        system: str,
        messages: list[Message],
        schema: type[SchemaT],
        task: str = "chat",
    ) -> SchemaT:
        if not self.config.anthropic_api_key:
            raise GenerationError(AUTHENTICATION, "LLM not configured — set ANTHROPIC_API_KEY in .env")

        from langchain_anthropic import ChatAnthropic

        model_id = get_model_for_task(task, self.config)
        llm = ChatAnthropic(
            model=model_id,
            api_key=self.config.anthropic_api_key,
            max_tokens=self.config.generation_max_tokens,
        )
        structured = llm.with_structured_output(schema, include_raw=True)

        try:
            response = await structured.ainvoke(to_langchain_messages(system, messages))
        except Exception as exc:
            raise classify_error(exc) from exc

        parsed = response.get("parsed")
        error = response.get("parsing_error")
        if error is not None or parsed is None:
            raise GenerationError(
                MALFORMED_OUTPUT,
                str(error) if error else "Model returned no structured result",
                raw=response.get("raw"),
            )
        if not isinstance(parsed, schema):
            parsed = schema.model_validate(parsed)

        logger.debug("Structured result from %s for task %s", model_id, task)
        return parsed


def to_langchain_messages(system: str, history: list[Message]) -> list:
    """Convert stored messages to LangChain messages, skipping aborted turns."""
    from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

    messages: list = [SystemMessage(content=system)]
    for msg in history:
        if msg.error:
            continue
        text = msg.text
        if msg.role == "user":
            images = msg.images
            if images:
                content: list[dict] = [{"type": "text", "text": text or "(image)"}]
                content.extend({"type": "image_url", "image_url": {"url": url}} for url in images)
                messages.append(HumanMessage(content=content))
            elif text:
                messages.append(HumanMessage(content=text))
        elif msg.role == "assistant" and text:
            messages.append(AIMessage(content=text))
    return messages


def classify_error(exc: BaseException) -> GenerationError:
    """Map a collaborator exception onto a GenerationError kind."""
    if isinstance(exc, GenerationError):
        return exc
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, anthropic.APITimeoutError)):
        return GenerationError(TIMEOUT, "Generation timed out")

    status = getattr(exc, "status_code", None)
    if status in _RATE_LIMIT_STATUSES or isinstance(exc, anthropic.RateLimitError):
        return GenerationError(RATE_LIMITED, str(exc) or "Rate limited")
    if status in _AUTH_STATUSES or isinstance(
        exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)
    ):
        return GenerationError(AUTHENTICATION, str(exc) or "Authentication failed")
    if isinstance(exc, anthropic.APIConnectionError):
        return GenerationError(TRANSPORT, str(exc) or "Connection failed")
    if isinstance(exc, (ValidationError, json.JSONDecodeError, ValueError, KeyError)):
        return GenerationError(MALFORMED_OUTPUT, str(exc))
    return GenerationError(TRANSPORT, str(exc) or type(exc).__name__)
