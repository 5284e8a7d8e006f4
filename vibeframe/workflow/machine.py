"""Workflow state machine. Decides what the assistant must do next.

Given the session's workflow state, its collected answers and the latest user input,
``advance`` returns a ``Transition``: the new state, the updated answers and one of
four actions (ask with options, ask for text, advance silently, generate) plus the
free-form action used by chat mode and by modification turns after completion.

Steps are visited strictly in catalog order for the active mode. Steps whose branch
condition does not hold, internal steps and steps already answered are passed over.
A selection that does not match the pending question never advances; the same
prompt is issued again.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vibeframe.models.session import WorkflowState
from vibeframe.models.wireframe import WorkflowAnswers
from vibeframe.workflow.catalog import (
    CHOICE,
    CONFIRM,
    CONFIRM_REVISE,
    GENERATE,
    INTERNAL,
    MULTI,
    OPEN,
    TERMINAL,
    TEXT,
    THEME_COLORS,
    Option,
    StepSpec,
    WorkflowCatalog,
)

logger = logging.getLogger(__name__)

MODE_FIELD = "user_profile.mode"
THEME_FIELD = "style_info.theme"

_INDEX_RE = re.compile(r"^\s*(\d+)\s*(?:\.|\)|번)?\s*$")
_NUMBER_PREFIX_RE = re.compile(r"^\s*\d+\s*[.)]\s*")
_LIST_SEPARATORS_RE = re.compile(r"[,，、;/]")


class Action(str, Enum):
    ASK_CHOICE = "ask_choice"
    ASK_TEXT = "ask_text"
    ADVANCE = "advance"
    GENERATE = "generate"
    FREEFORM = "freeform"


@dataclass
class Transition:
    state: WorkflowState
    answers: WorkflowAnswers
    action: Action
    # False when the input did not answer the pending question
    accepted: bool = True
    # Steps passed over on the way to ``state.step``
    skipped: list[str] = field(default_factory=list)
    # Answer fields set from this input, keyed by dotted path
    recorded: dict[str, Any] = field(default_factory=dict)

    @property
    def prompt(self) -> str | None:
        return self.state.input_prompt

    @property
    def options(self) -> list[str] | None:
        return self.state.input_options

    @property
    def full_generation(self) -> bool:
        return self.action is Action.GENERATE


# ---------------------------------------------------------------------------
# Answer parsing
# ---------------------------------------------------------------------------


def match_option(opts: tuple[Option, ...], token: str) -> Option | None:
    """Resolve one selection: a 1-based index, an option label or its value."""
    token = token.strip()
    if not token:
        return None
    m = _INDEX_RE.match(token)
    if m:
        index = int(m.group(1))
        if 1 <= index <= len(opts):
            return opts[index - 1]
        # out of range: only a literal label or value can still match
    bare = _NUMBER_PREFIX_RE.sub("", token).strip().casefold()
    for opt in opts:
        if opt.label.casefold() == bare or str(opt.value).casefold() == bare:
            return opt
    return None


def parse_answer(spec: StepSpec, text: str) -> tuple[bool, Any]:
    """Return (ok, semantic value) for ``text`` given at ``spec``."""
    text = (text or "").strip()
    if not text:
        return False, None

    if spec.kind == TEXT:
        return True, text

    if spec.kind in (CHOICE, CONFIRM):
        opt = match_option(spec.options, text)
        return (True, opt.value) if opt is not None else (False, None)

    if spec.kind == MULTI:
        whole = match_option(spec.options, text)
        if whole is not None:
            return True, [whole.value]
        parts = [p for p in _LIST_SEPARATORS_RE.split(text) if p.strip()]
        if len(parts) == 1:
            parts = text.split()
        values: list[Any] = []
        for part in parts:
            opt = match_option(spec.options, part)
            if opt is None:
                return False, None
            if opt.value not in values:
                values.append(opt.value)
        return (True, values) if values else (False, None)

    return False, None


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------


class WorkflowStateMachine:
    """Traversal over one catalog. Holds no per-session state."""

    def __init__(self, catalog: WorkflowCatalog) -> None:
        self.catalog = catalog

    def initial_state(self, mode: str = "guided") -> WorkflowState:
        first = self.catalog.first_step(mode)
        return WorkflowState(version=self.catalog.version, mode=mode, step=first.id)

    def reset(self, mode: str) -> tuple[WorkflowState, WorkflowAnswers]:
        """Fresh state for ``mode`` with every collected answer cleared."""
        return self.initial_state(mode), WorkflowAnswers()

    def advance(
        self,
        state: WorkflowState,
        answers: WorkflowAnswers,
        user_input: str,
    ) -> Transition:
        mode = state.mode
        if not self.catalog.has_step(mode, state.step):
            logger.warning(
                "Step %r is not part of mode %s in catalog %s; restarting traversal",
                state.step, mode, self.catalog.version,
            )
            return self._arrive(mode, 0, answers)

        spec = self.catalog.spec(mode, state.step)

        if spec.kind == OPEN:
            return self._arrive(mode, self.catalog.index(spec.id) + 1, answers)
        if spec.kind == TERMINAL:
            return Transition(state=self._settled(state, spec), answers=answers, action=Action.FREEFORM)
        if spec.kind == GENERATE:
            return Transition(state=self._settled(state, spec), answers=answers, action=Action.GENERATE)
        if spec.kind == INTERNAL or not state.awaiting_input:
            # Nothing asked yet: the input is the request itself, present the step
            return self._arrive(mode, self.catalog.index(spec.id), answers)

        ok, value = parse_answer(spec, user_input)
        if not ok:
            logger.debug("Input %r does not answer %s; asking again", user_input, spec.id)
            return Transition(
                state=self._asking(state, spec),
                answers=answers,
                action=_ask_action(spec),
                accepted=False,
            )

        recorded: dict[str, Any] = {}
        if spec.kind == CONFIRM:
            if value == CONFIRM_REVISE:
                return Transition(state=self._asking(state, spec), answers=answers, action=Action.ASK_CHOICE)
            answers = answers.with_confirmation(spec.id)
        else:
            answers = self.apply_answer(spec, answers, value)
            recorded = self.recorded_fields(spec, answers)

        if spec.field == MODE_FIELD and value != mode:
            mode = value
            if not any(s.asks or s.kind == GENERATE for s in self.catalog.steps_for(mode)):
                # chat has no structured steps; land on its open state
                first = self.catalog.first_step(mode)
                return Transition(
                    state=WorkflowState(version=self.catalog.version, mode=mode, step=first.id),
                    answers=answers,
                    action=Action.ADVANCE,
                    recorded=recorded,
                )

        transition = self._arrive(mode, self.catalog.index(spec.id) + 1, answers)
        transition.recorded = recorded
        return transition

    def apply_answer(self, spec: StepSpec, answers: WorkflowAnswers, value: Any) -> WorkflowAnswers:
        if spec.field is None:
            return answers
        answers = answers.with_answer(spec.field, value)
        if spec.field == THEME_FIELD and value in THEME_COLORS:
            answers = answers.with_answer("theme_colors", THEME_COLORS[value])
        return answers

    def recorded_fields(self, spec: StepSpec, answers: WorkflowAnswers) -> dict[str, Any]:
        """The fields ``apply_answer`` wrote for ``spec``, as found in ``answers``."""
        if spec.field is None:
            return {}
        recorded = {spec.field: answers.get(spec.field)}
        if spec.field == THEME_FIELD and answers.get(THEME_FIELD) in THEME_COLORS:
            recorded["theme_colors"] = answers.theme_colors
        return recorded

    def settle(self, state: WorkflowState, answers: WorkflowAnswers) -> WorkflowState:
        """Move past the pending question when ``answers`` already cover it."""
        if not self.catalog.has_step(state.mode, state.step):
            return state
        spec = self.catalog.spec(state.mode, state.step)
        if not spec.asks or (spec.applies(answers) and not spec.is_answered(answers)):
            return state
        return self._arrive(state.mode, self.catalog.index(spec.id), answers).state

    def finish_generation(self, state: WorkflowState, answers: WorkflowAnswers) -> WorkflowState:
        """State after a full generation completed at a generate step."""
        spec = self.catalog.spec(state.mode, state.step)
        if spec.kind != GENERATE:
            return state
        return self._arrive(state.mode, self.catalog.index(spec.id) + 1, answers).state

    def next_step(self, mode: str, step: str, answers: WorkflowAnswers) -> str:
        """The step that follows ``step`` once it is answered."""
        return self._arrive(mode, self.catalog.index(step) + 1, answers).state.step

    def _arrive(self, mode: str, start: int, answers: WorkflowAnswers) -> Transition:
        skipped: list[str] = []
        for spec in self.catalog.steps_for(mode):
            if self.catalog.index(spec.id) < start:
                continue
            if not spec.applies(answers) or spec.kind == INTERNAL:
                skipped.append(spec.id)
                continue
            if spec.asks and spec.is_answered(answers):
                skipped.append(spec.id)
                continue

            state = WorkflowState(version=self.catalog.version, mode=mode, step=spec.id)
            if spec.asks:
                return Transition(
                    state=self._asking(state, spec),
                    answers=answers,
                    action=_ask_action(spec),
                    skipped=skipped,
                )
            if spec.kind == GENERATE:
                return Transition(state=state, answers=answers, action=Action.GENERATE, skipped=skipped)
            return Transition(state=state, answers=answers, action=Action.FREEFORM, skipped=skipped)

        raise RuntimeError(f"Catalog {self.catalog.version} has no terminal step for mode {mode!r}")

    @staticmethod
    def _asking(state: WorkflowState, spec: StepSpec) -> WorkflowState:
        return state.model_copy(
            update={
                "step": spec.id,
                "awaiting_input": True,
                "input_prompt": spec.prompt,
                "input_options": spec.option_labels() or None,
            }
        )

    @staticmethod
    def _settled(state: WorkflowState, spec: StepSpec) -> WorkflowState:
        return state.model_copy(
            update={"step": spec.id, "awaiting_input": False, "input_prompt": None, "input_options": None}
        )


def _ask_action(spec: StepSpec) -> Action:
    return Action.ASK_TEXT if spec.kind == TEXT else Action.ASK_CHOICE
