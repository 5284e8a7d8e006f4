"""Generation orchestrator: runs one user turn end to end.

A turn runs: advance the workflow machine, assemble system instructions, call the
generation collaborator under a deadline, reconcile the proposed element changes,
normalize every resulting element, merge collected answers, settle the workflow
step, persist.

Either the whole turn applies or none of it does. Collaborator failures raise
``TurnFailed`` carrying the untouched input session; nothing is persisted.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field

from vibeframe.canvas.normalizer import normalize_all
from vibeframe.canvas.reconciler import reconcile_update
from vibeframe.config import Settings, settings
from vibeframe.errors import PersistenceError, TurnFailed
from vibeframe.llm.client import GenerationClient, classify_error
from vibeframe.llm.model_router import get_model_for_task
from vibeframe.llm.prompts import PromptConfig, build_system_instructions, default_prompt_config
from vibeframe.models.edit_ops import Element
from vibeframe.models.session import (
    DEFAULT_TITLE,
    Message,
    MessageContent,
    SessionDocument,
    WorkflowState,
    default_title,
)
from vibeframe.models.wireframe import WireframeResult, WorkflowAnswers
from vibeframe.storage.sessions import SessionStore
from vibeframe.workflow.catalog import get_catalog
from vibeframe.workflow.machine import Action, Transition, WorkflowStateMachine

logger = logging.getLogger(__name__)

_DEFAULT_CHOICE_PROMPT = "선택해주세요:"


@dataclass
class StepOverride:
    """The collaborator claimed a step other than the locally computed successor, and it was accepted."""

    prior: str
    expected: str
    claimed: str


@dataclass
class TurnOutcome:
    session: SessionDocument
    user_message: Message
    assistant_message: Message
    transition: Transition
    result: WireframeResult
    task: str
    model: str
    override: StepOverride | None = None
    rejected_claim: str | None = None
    dropped_ids: list[str] = field(default_factory=list)
    update_mode: str = "none"


def task_for(transition: Transition, session: SessionDocument) -> str:
    if transition.action is Action.GENERATE:
        return "generate"
    if transition.action is Action.FREEFORM:
        return "modify" if session.elements else "chat"
    return "elicit"


class GenerationOrchestrator:
    def __init__(
        self,
        client: GenerationClient,
        store: SessionStore | None = None,
        prompt_config: PromptConfig | None = None,
        config: Settings | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.prompt_config = prompt_config or default_prompt_config()
        self.config = config or settings

    def machine_for(self, session: SessionDocument) -> WorkflowStateMachine:
        return WorkflowStateMachine(get_catalog(session.workflow.version))

    async def handle_turn(
        self,
        session: SessionDocument,
        text: str,
        *,
        images: list[str] | None = None,
        timeout: float | None = None,
    ) -> TurnOutcome:
        machine = self.machine_for(session)
        user_message = Message.user(text, images)
        transition = machine.advance(session.workflow, session.answers, text)
        task = task_for(transition, session)

        system = build_system_instructions(
            self.prompt_config, transition, transition.answers, session.elements
        )
        history = [*session.messages, user_message]
        deadline = timeout if timeout is not None else self.config.generation_timeout_seconds

        try:
            result = await asyncio.wait_for(
                self.client.generate(system, history, WireframeResult, task),
                timeout=deadline,
            )
        except Exception as exc:
            error = classify_error(exc)
            logger.warning("Turn on %s failed (%s): %s", session.id, error.kind, error.message)
            annotation = aborted_turn_message(error.message)
            raise TurnFailed(error.kind, error.message, session, annotation=annotation) from exc

        outcome = self.apply_result(session, user_message, transition, result, machine)
        outcome.task = task
        outcome.model = get_model_for_task(task, self.config)

        if self.store is not None:
            self._persist(outcome)
        return outcome

    def apply_result(
        self,
        session: SessionDocument,
        user_message: Message,
        transition: Transition,
        result: WireframeResult,
        machine: WorkflowStateMachine,
    ) -> TurnOutcome:
        """Fold a structured result into a copy of ``session``."""
        update = result.element_update()
        elements = reconcile_update(session.elements, update)
        dropped: list[str] = []
        if update.mode != "none":
            elements, dropped = normalize_all(elements)

        answers = transition.answers.merged(result.answers())
        # The user's explicit selection this turn wins over whatever the result echoes
        for path, value in transition.recorded.items():
            answers = answers.with_answer(path, value)
        state, override, rejected = self._resolve_step(machine, session.workflow, transition, answers, result)

        assistant = build_assistant_message(result, state, elements)

        updated = session.copy_for_turn()
        updated.elements = elements
        updated.answers = answers
        updated.workflow = state
        if result.title:
            updated.wireframe_title = result.title
        if result.description:
            updated.wireframe_description = result.description
        if updated.title == DEFAULT_TITLE and not session.messages:
            updated.title = default_title(user_message.text)
        updated.messages = [*session.messages, user_message, assistant]
        updated.touch()

        return TurnOutcome(
            session=updated,
            user_message=user_message,
            assistant_message=assistant,
            transition=transition,
            result=result,
            task="",
            model="",
            override=override,
            rejected_claim=rejected,
            dropped_ids=dropped,
            update_mode=update.mode,
        )

    def _resolve_step(
        self,
        machine: WorkflowStateMachine,
        prior: WorkflowState,
        transition: Transition,
        answers: WorkflowAnswers,
        result: WireframeResult,
    ) -> tuple[WorkflowState, StepOverride | None, str | None]:
        if transition.full_generation:
            expected = machine.finish_generation(transition.state, answers)
        elif transition.accepted:
            expected = machine.settle(transition.state, answers)
        else:
            expected = transition.state

        claimed = result.current_step
        if claimed == expected.step:
            return expected, None, None

        if not transition.accepted:
            logger.warning(
                "Rejected step claim %r: input did not answer %s, asking again", claimed, expected.step
            )
            return expected, None, claimed

        if not machine.catalog.has_step(expected.mode, claimed):
            logger.warning(
                "Rejected step claim %r: not a %s step in catalog %s (expected %s)",
                claimed, expected.mode, machine.catalog.version, expected.step,
            )
            return expected, None, claimed

        override = StepOverride(prior=prior.step, expected=expected.step, claimed=claimed)
        logger.warning(
            "Accepted step override: prior=%s expected=%s claimed=%s",
            override.prior, override.expected, override.claimed,
        )
        spec = machine.catalog.spec(expected.mode, claimed)
        state = WorkflowState(
            version=expected.version,
            mode=expected.mode,
            step=claimed,
            awaiting_input=spec.asks,
            input_prompt=spec.prompt if spec.asks else None,
            input_options=(spec.option_labels() or None) if spec.asks else None,
        )
        return state, override, None

    def _persist(self, outcome: TurnOutcome) -> None:
        session = outcome.session
        try:
            self.store.save_session(session)
            self.store.append_message(session.id, outcome.user_message)
            self.store.append_message(session.id, outcome.assistant_message)
        except PersistenceError as e:
            logger.warning("Persisting turn on %s failed: %s", session.id, e.message)
            raise PersistenceError(e.message, session=session) from e


def aborted_turn_message(error: str) -> Message:
    return Message(role="assistant", error=error)


def build_assistant_message(
    result: WireframeResult,
    state: WorkflowState,
    elements: list[Element],
) -> Message:
    blocks = [MessageContent(type="text", text=result.commentary)]

    if state.awaiting_input and state.input_options:
        listing = "\n".join(f"{i}. {label}" for i, label in enumerate(state.input_options, 1))
        prompt = state.input_prompt or _DEFAULT_CHOICE_PROMPT
        blocks.append(MessageContent(type="text", text=f"{prompt}\n{listing}"))

    if result.structure_plan is not None:
        plan = result.structure_plan.model_dump(by_alias=True, exclude_none=True)
        blocks.append(
            MessageContent(
                type="code",
                language="json",
                text=json.dumps(plan, ensure_ascii=False, indent=2),
            )
        )

    return Message(
        role="assistant",
        content=blocks,
        wireframe=[dict(el) for el in elements],
    )
