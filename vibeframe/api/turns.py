"""POST /api/conversations/{id}/messages: run one generation turn."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from vibeframe.api import errors
from vibeframe.api.conversations import load_or_404, progress_for
from vibeframe.canvas.sync import CanvasHub
from vibeframe.dependencies import get_canvas_hub, get_orchestrator, get_store, get_turns, get_usage
from vibeframe.engine.orchestrator import GenerationOrchestrator
from vibeframe.engine.turns import TurnRegistry
from vibeframe.errors import PersistenceError, TurnFailed, TurnSuperseded
from vibeframe.models.requests import TurnRequest
from vibeframe.models.responses import StepOverrideInfo, TurnResponse
from vibeframe.storage.sessions import SessionStore
from vibeframe.usage.recorder import UsageEvent, UsageRecorder, record_usage_background

router = APIRouter(prefix="/conversations")
logger = logging.getLogger(__name__)


@router.post("/{session_id}/messages", response_model=TurnResponse)
async def post_message(
    session_id: str,
    req: TurnRequest,
    background_tasks: BackgroundTasks,
    store: SessionStore = Depends(get_store),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    turns: TurnRegistry = Depends(get_turns),
    hub: CanvasHub = Depends(get_canvas_hub),
    usage: UsageRecorder = Depends(get_usage),
) -> TurnResponse:
    session = load_or_404(store, session_id)

    try:
        outcome = await turns.run(
            session_id,
            lambda: orchestrator.handle_turn(
                session, req.text, images=req.images, timeout=req.timeout_seconds
            ),
        )
    except TurnSuperseded as e:
        raise errors.superseded(e) from e
    except TurnFailed as e:
        raise errors.turn_failed(e) from e
    except PersistenceError as e:
        raise errors.persistence_failed(e) from e

    updated = outcome.session
    # The renderer now shows what the turn produced; its echo must not commit back
    hub.push(session_id, updated.elements)

    background_tasks.add_task(
        record_usage_background,
        usage,
        UsageEvent(
            idempotency_key=req.idempotency_key or outcome.assistant_message.id,
            session_id=session_id,
            task=outcome.task,
            model=outcome.model,
            step=updated.workflow.step,
            update_mode=outcome.update_mode,
            element_count=len(updated.elements),
        ),
    )

    override = None
    if outcome.override is not None:
        override = StepOverrideInfo(
            prior=outcome.override.prior,
            expected=outcome.override.expected,
            claimed=outcome.override.claimed,
        )

    state = updated.workflow
    return TurnResponse(
        message=outcome.assistant_message,
        conversation=updated,
        progress=progress_for(updated),
        step=state.step,
        awaiting_input=state.awaiting_input,
        input_prompt=state.input_prompt,
        input_options=state.input_options,
        update_mode=outcome.update_mode,
        dropped_element_ids=outcome.dropped_ids,
        override=override,
    )
