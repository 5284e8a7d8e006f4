"""Step catalogs: the workflow vocabulary as versioned data.

A catalog is an ordered table of ``StepSpec`` rows plus a phase table. The state
machine only ever reads rows by ``(mode, step)``; adding a step or a mode means adding
rows, never touching the traversal algorithm.

Usage:
    catalog = get_catalog("v2")
    spec = catalog.spec("guided", "service_platform")
    spec.prompt, spec.option_labels()
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from vibeframe.models.wireframe import ThemeColors, WorkflowAnswers

logger = logging.getLogger(__name__)

# Step kinds
CHOICE = "choice"  # one option from a fixed menu
MULTI = "multi"  # one or more options from a fixed menu
TEXT = "text"  # free text
CONFIRM = "confirm"  # yes / revise
INTERNAL = "internal"  # advanced silently
GENERATE = "generate"  # full element generation
OPEN = "open"  # free conversation, chat mode only
TERMINAL = "terminal"

QUESTION_KINDS = frozenset({CHOICE, MULTI, TEXT, CONFIRM})

CONFIRM_YES = "yes"
CONFIRM_REVISE = "revise"

THEME_COLORS: dict[str, ThemeColors] = {
    "classic_wireframe": ThemeColors(
        background="#ffffff", container="#f5f5f5", border="#9e9e9e", text="#424242"
    ),
    "high_contrast": ThemeColors(
        background="#ffffff", container="#eeeeee", border="#212121", text="#000000"
    ),
    "blueprint": ThemeColors(
        background="#1a237e", container="#3949ab", border="#7986cb", text="#ffffff"
    ),
}


@dataclass(frozen=True)
class Option:
    label: str
    value: Any


@dataclass
class StepSpec:
    id: str
    phase: int
    modes: frozenset[str]
    kind: str
    label: str = ""
    prompt: str = ""
    options: tuple[Option, ...] = ()
    field: str | None = None  # dotted answer path owned by this step
    when: Callable[[WorkflowAnswers], bool] | None = None
    description: str = ""

    @property
    def asks(self) -> bool:
        return self.kind in QUESTION_KINDS

    def option_labels(self) -> list[str]:
        return [opt.label for opt in self.options]

    def applies(self, answers: WorkflowAnswers) -> bool:
        return self.when is None or bool(self.when(answers))

    def is_answered(self, answers: WorkflowAnswers) -> bool:
        if self.kind == CONFIRM:
            return self.id in answers.confirmed_steps
        if self.field is None:
            return False
        value = answers.get(self.field)
        if isinstance(value, (list, str)):
            return len(value) > 0
        return value is not None


class Progress(BaseModel):
    phase: int | None
    phase_label: str
    step_label: str
    position: int
    total: int
    percent: int


class WorkflowCatalog:
    """Ordered step table for one vocabulary version."""

    def __init__(
        self,
        version: str,
        phases: list[str],
        steps: list[StepSpec],
        description: str = "",
    ) -> None:
        self.version = version
        self.phases = phases
        self.description = description
        self._steps: list[StepSpec] = []
        self._index: dict[str, int] = {}
        for spec in steps:
            if spec.id in self._index:
                raise ValueError(f"Duplicate step ID in catalog {version}: {spec.id}")
            self._index[spec.id] = len(self._steps)
            self._steps.append(spec)

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, step: str) -> bool:
        return step in self._index

    def has_step(self, mode: str, step: str) -> bool:
        index = self._index.get(step)
        return index is not None and mode in self._steps[index].modes

    def spec(self, mode: str, step: str) -> StepSpec:
        if not self.has_step(mode, step):
            raise KeyError(f"Step {step!r} is not part of mode {mode!r} in catalog {self.version}")
        return self._steps[self._index[step]]

    def index(self, step: str) -> int:
        return self._index[step]

    def steps_for(self, mode: str) -> list[StepSpec]:
        return [s for s in self._steps if mode in s.modes]

    def first_step(self, mode: str) -> StepSpec:
        steps = self.steps_for(mode)
        if not steps:
            raise KeyError(f"Catalog {self.version} has no steps for mode {mode!r}")
        return steps[0]

    def modes(self) -> list[str]:
        seen: list[str] = []
        for spec in self._steps:
            for mode in sorted(spec.modes):
                if mode not in seen:
                    seen.append(mode)
        return seen

    def progress(self, mode: str, step: str, answers: WorkflowAnswers) -> Progress:
        """Position of ``step`` among the steps that apply to ``mode`` given ``answers``."""
        applicable = [s for s in self.steps_for(mode) if s.applies(answers)]
        spec = self.spec(mode, step)
        step_index = self._index[step]
        position = 1 + sum(1 for s in applicable if self._index[s.id] < step_index)
        total = max(len(applicable), 1)
        if spec.kind == TERMINAL:
            percent = 100
        elif total > 1:
            percent = round((position - 1) / (total - 1) * 100)
        else:
            percent = 0
        is_phased = spec.phase >= 0
        return Progress(
            phase=spec.phase if is_phased else None,
            phase_label=self.phases[spec.phase] if is_phased else "",
            step_label=spec.label or spec.id,
            position=min(position, total),
            total=total,
            percent=percent,
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_VOCABULARY_MODULES = ("vibeframe.workflow.vocab_v2", "vibeframe.workflow.vocab_v1")

_catalogs: dict[str, WorkflowCatalog] = {}
_loaded = False


def register_catalog(catalog: WorkflowCatalog) -> None:
    if catalog.version in _catalogs:
        raise ValueError(f"Duplicate catalog version: {catalog.version}")
    _catalogs[catalog.version] = catalog
    logger.debug("Registered workflow catalog %s (%d steps)", catalog.version, len(catalog))


def _load_vocabularies() -> None:
    """Import the vocabulary modules so their catalogs register themselves."""
    global _loaded
    if _loaded:
        return
    for module_name in _VOCABULARY_MODULES:
        importlib.import_module(module_name)
    _loaded = True


def get_catalog(version: str) -> WorkflowCatalog:
    _load_vocabularies()
    try:
        return _catalogs[version]
    except KeyError:
        raise KeyError(f"Unknown workflow catalog version: {version!r}") from None


def catalog_versions() -> list[str]:
    _load_vocabularies()
    return sorted(_catalogs)


# Helpers shared by the vocabulary tables


def mode_set(spec: str) -> frozenset[str]:
    """Mode set from a compact code: G=guided, E=expert, A=auto, C=chat."""
    names = {"G": "guided", "E": "expert", "A": "auto", "C": "chat"}
    return frozenset(names[c] for c in spec)


def options(*pairs: tuple[str, Any]) -> tuple[Option, ...]:
    return tuple(Option(label, value) for label, value in pairs)
