"""System instruction templates and their assembly for one turn.

Templates live on an immutable ``PromptConfig`` handed to the orchestrator at
construction time, so several configurations can coexist in one process.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vibeframe.models.edit_ops import Element
    from vibeframe.models.wireframe import WorkflowAnswers
    from vibeframe.workflow.machine import Transition

_RESPONSE_RULES = """# RESPONSE FORMAT
Always answer with the structured result schema.
- current_step: the workflow step this reply belongs to.
- commentary: 1-3 sentences for the user, in the user's language.
- awaiting_input / input_prompt / input_options: set when you are asking the user something.
- Copy every answer the user gave (or that you can infer with confidence) into
  user_profile, service_info, structure_info, platform_info and style_info.
  Omit fields you know nothing about; never blank out earlier answers.

# ELEMENT CHANGES
- To change a few existing elements, return element_updates:
  {"operation": "update", "element_id": "logo", "changes": {"text": "MyBrand"}}
  {"operation": "delete", "element_id": "feat1"}
- Return excalidraw_elements only for a brand-new wireframe or a major reorganization;
  it replaces the whole canvas.
- Leave both empty when nothing on the canvas should change.
- Every element needs type, id, x and y. Rectangles, ellipses, diamonds and text need
  width and height; lines and arrows need points (at least two [x, y] pairs); text needs
  a text string. Snap coordinates to a 20px grid. Ids must be unique."""

_CHAT_TEMPLATE = """You are VibeFrame. You help users create and modify Excalidraw wireframes through natural conversation.

You can create new wireframes, modify colors, sizes, positions and text of existing
elements, align and group elements, delete elements, and explain what is on the canvas.
When the request is vague, make a sensible wireframe anyway and offer follow-up options.

""" + _RESPONSE_RULES

_WORKFLOW_TEMPLATE = """You are VibeFrame operating in a structured wireframe workflow.
You guide the user through a fixed sequence of questions, then generate the wireframe.

The application decides which step comes next; the CURRENT STEP section tells you what
to ask. Ask exactly that question with exactly those options, in the user's language.
If you can already infer the answer from the conversation you may say so in commentary
and fill the answer fields, but keep current_step as instructed unless the answer is
certain.

""" + _RESPONSE_RULES

_MODE_GUIDES = {
    "guided": "MODE: guided. Ask about goals, audience and context; infer implementation details yourself.",
    "expert": "MODE: expert. The user decides implementation details; do not assume them.",
    "auto": "MODE: auto. Ask as little as possible and apply sensible defaults for everything else.",
    "chat": "MODE: chat. There is no questionnaire; respond to each request directly.",
}

_GENERATION_TEMPLATE = """# GENERATE NOW
All required answers are collected and confirmed. Generate the COMPLETE wireframe now as
excalidraw_elements (full replacement, not element_updates). Follow the structure plan
screen by screen and apply the theme colors consistently:
shapes use the container color, borders the border color, text the text color.
Set current_step to "complete" and awaiting_input to false."""

_CANVAS_TEMPLATE = """# CURRENT CANVAS STATE
The user's canvas currently has these elements:
```json
{elements}
```
Prefer element_updates that address these ids when the user asks for changes."""

_REASK_TEMPLATE = """The user's last reply did not answer this question (no option matched).
Ask the same question again, briefly clarifying the options. Do not advance the step."""


@dataclass(frozen=True)
class PromptConfig:
    chat_template: str = _CHAT_TEMPLATE
    workflow_template: str = _WORKFLOW_TEMPLATE
    generation_template: str = _GENERATION_TEMPLATE
    canvas_template: str = _CANVAS_TEMPLATE
    reask_template: str = _REASK_TEMPLATE
    mode_guides: dict[str, str] = field(default_factory=lambda: dict(_MODE_GUIDES))

    def as_dict(self) -> dict[str, object]:
        return asdict(self)


def default_prompt_config() -> PromptConfig:
    return PromptConfig()


def build_system_instructions(
    config: PromptConfig,
    transition: "Transition",
    answers: "WorkflowAnswers",
    elements: "list[Element]",
) -> str:
    """Assemble the system instructions for one turn."""
    state = transition.state
    base = config.chat_template if state.mode == "chat" else config.workflow_template
    sections = [base]

    guide = config.mode_guides.get(state.mode)
    if guide:
        sections.append(guide)

    if state.mode != "chat":
        sections.append(_step_section(config, transition))

        collected = answers.model_dump(exclude_none=True, by_alias=True)
        collected = {k: v for k, v in collected.items() if v not in ({}, [])}
        if collected:
            sections.append(
                "# COLLECTED ANSWERS\n```json\n"
                + json.dumps(collected, ensure_ascii=False, indent=2)
                + "\n```"
            )

    if transition.full_generation:
        sections.append(config.generation_template)

    if elements:
        sections.append(
            config.canvas_template.format(
                elements=json.dumps(elements, ensure_ascii=False, indent=2)
            )
        )

    return "\n\n".join(sections)


def _step_section(config: PromptConfig, transition: "Transition") -> str:
    state = transition.state
    lines = ["# CURRENT STEP", f"current_step: {state.step}"]
    if transition.skipped:
        lines.append(f"(skipped: {', '.join(transition.skipped)})")
    if state.awaiting_input:
        lines.append("awaiting_input: true")
        if state.input_prompt:
            lines.append(f"input_prompt: {state.input_prompt}")
        if state.input_options:
            lines.append("input_options:")
            lines.extend(f"{i}. {label}" for i, label in enumerate(state.input_options, 1))
        else:
            lines.append("Free-text answer; do not offer options.")
    else:
        lines.append("awaiting_input: false")
    if not transition.accepted:
        lines.append(config.reask_template)
    return "\n".join(lines)
