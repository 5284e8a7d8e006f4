"""Structured result schema returned by the generation collaborator, and the
workflow answers collected across turns."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from vibeframe.models.edit_ops import Element, ElementUpdate, ElementUpdateOp

WorkflowMode = Literal["chat", "guided", "expert", "auto"]
WORKFLOW_MODES: tuple[str, ...] = ("chat", "guided", "expert", "auto")

WireframeType = Literal[
    "website_desktop",
    "mobile_app",
    "web_app_responsive",
    "webapp_saas",
    "tablet_app",
]
ServiceType = Literal[
    "landing", "ecommerce", "dashboard", "saas", "blog", "portfolio", "community", "other"
]
UserRole = Literal["designer", "developer", "pm", "founder", "marketer"]
StyleTone = Literal["light_clean", "dark_modern", "colorful", "minimal", "corporate", "friendly"]
ThemeStyle = Literal["classic_wireframe", "high_contrast", "blueprint", "auto"]


class UserProfile(BaseModel):
    role: UserRole | None = None
    purpose: str | None = None
    mode: WorkflowMode | None = None


class ServiceInfo(BaseModel):
    platform: WireframeType | None = None
    type: ServiceType | None = None
    description: str | None = None
    goal: str | None = None
    target: str | None = None
    context: str | None = None


class StructureInfo(BaseModel):
    hero_style: str | None = None
    primary_action: str | None = None
    key_info: str | None = None
    sections: list[str] | None = None
    features_detail: str | None = None
    pricing_layout: str | None = None
    header_elements: list[str] | None = None
    footer_style: str | None = None
    menu_count: int | None = None
    fidelity: Literal["low", "medium", "high"] | None = None


class PlatformInfo(BaseModel):
    mobile_nav: str | None = None
    bottom_nav_count: int | None = None
    has_fab: bool | None = None
    dashboard_elements: list[str] | None = None
    chart_types: list[str] | None = None
    product_grid: str | None = None
    product_card_info: list[str] | None = None


class StyleInfo(BaseModel):
    tone: StyleTone | None = None
    density: Literal["spacious", "balanced", "compact"] | None = None
    corners: Literal["sharp", "slightly_rounded", "rounded", "pill"] | None = None
    theme: ThemeStyle | None = None


class ThemeColors(BaseModel):
    background: str
    container: str
    border: str
    text: str


class PlannedScreen(BaseModel):
    name: str
    purpose: str
    ui_elements: list[str] = Field(default_factory=list)


class NavigationLink(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_screen: str = Field(..., alias="from")
    to: str
    action: str


class StructurePlan(BaseModel):
    screens: list[PlannedScreen]
    navigation_flow: list[NavigationLink] | None = None


# Answer records merged field-wise; a missing field never erases a stored value.
ANSWER_SECTIONS: tuple[str, ...] = (
    "user_profile",
    "service_info",
    "structure_info",
    "platform_info",
    "style_info",
)


_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "user_profile": UserProfile,
    "service_info": ServiceInfo,
    "structure_info": StructureInfo,
    "platform_info": PlatformInfo,
    "style_info": StyleInfo,
}


class WorkflowAnswers(BaseModel):
    """Everything the workflow has collected so far. Each record is independently optional."""

    user_profile: UserProfile | None = None
    service_info: ServiceInfo | None = None
    structure_info: StructureInfo | None = None
    platform_info: PlatformInfo | None = None
    style_info: StyleInfo | None = None
    structure_plan: StructurePlan | None = None
    theme_colors: ThemeColors | None = None
    confirmed_steps: list[str] = Field(default_factory=list)

    def get(self, path: str) -> Any:
        """Read a dotted answer field such as ``service_info.platform``."""
        section, _, field = path.partition(".")
        record = getattr(self, section, None)
        if not field:
            return record
        if record is None:
            return None
        return getattr(record, field, None)

    def with_answer(self, path: str, value: Any) -> "WorkflowAnswers":
        """Return a copy with ``path`` set to ``value``."""
        updated = self.model_copy(deep=True)
        section, _, field = path.partition(".")
        if not field:
            setattr(updated, section, value)
            return updated
        record = getattr(updated, section)
        if record is None:
            record = _SECTION_MODELS[section]()
        setattr(updated, section, record.model_copy(update={field: value}))
        return updated

    def with_confirmation(self, step: str) -> "WorkflowAnswers":
        updated = self.model_copy(deep=True)
        if step not in updated.confirmed_steps:
            updated.confirmed_steps.append(step)
        return updated

    def merged(self, other: "WorkflowAnswers") -> "WorkflowAnswers":
        """Overlay every field ``other`` actually populated onto a copy of self."""
        updated = self.model_copy(deep=True)
        for section in ANSWER_SECTIONS:
            incoming = getattr(other, section)
            if incoming is None:
                continue
            changes = incoming.model_dump(exclude_none=True)
            if not changes:
                continue
            current = getattr(updated, section)
            if current is None:
                setattr(updated, section, incoming.model_copy(deep=True))
            else:
                setattr(updated, section, current.model_copy(update=changes))
        if other.structure_plan is not None:
            updated.structure_plan = other.structure_plan.model_copy(deep=True)
        if other.theme_colors is not None:
            updated.theme_colors = other.theme_colors.model_copy(deep=True)
        for step in other.confirmed_steps:
            if step not in updated.confirmed_steps:
                updated.confirmed_steps.append(step)
        return updated


class WireframeResult(BaseModel):
    """One turn's structured output from the generation collaborator."""

    current_step: str = Field(..., description="Current step in the workflow")
    workflow_mode: WorkflowMode | None = Field(default=None, description="Current workflow mode")

    user_profile: UserProfile | None = None
    service_info: ServiceInfo | None = None
    structure_info: StructureInfo | None = None
    platform_info: PlatformInfo | None = None
    style_info: StyleInfo | None = None

    wireframe_type: WireframeType | None = None
    theme_style: ThemeStyle | None = None
    theme_colors: ThemeColors | None = None
    structure_plan: StructurePlan | None = None

    excalidraw_elements: list[Element] | None = Field(
        default=None, description="Full element array (new wireframe or major reorganization)"
    )
    element_updates: list[ElementUpdateOp] | None = Field(
        default=None, description="Partial update/delete operations against existing elements"
    )

    commentary: str = Field(..., description="AI explanation")
    title: str = Field(default="", description="Short title")
    description: str = Field(default="", description="Brief description")

    awaiting_input: bool = Field(..., description="Whether AI is waiting for user input")
    input_prompt: str | None = None
    input_options: list[str] | None = None

    def element_update(self) -> ElementUpdate:
        return ElementUpdate(
            full_replacement=self.excalidraw_elements,
            partial_ops=self.element_updates,
        )

    def answers(self) -> WorkflowAnswers:
        """Collected answers carried by this result, including the legacy top-level fields."""
        answers = WorkflowAnswers(
            user_profile=self.user_profile,
            service_info=self.service_info,
            structure_info=self.structure_info,
            platform_info=self.platform_info,
            style_info=self.style_info,
            structure_plan=self.structure_plan,
            theme_colors=self.theme_colors,
        )
        if self.wireframe_type and answers.get("service_info.platform") is None:
            answers = answers.with_answer("service_info.platform", self.wireframe_type)
        if self.theme_style and answers.get("style_info.theme") is None:
            answers = answers.with_answer("style_info.theme", self.theme_style)
        return answers
