"""Legacy ten-step guided vocabulary.

Kept so conversations started on it stay resumable. Its analysis, loading and
validation steps are internal and advance silently.
"""

from __future__ import annotations

from vibeframe.workflow.catalog import (
    CHOICE,
    CONFIRM,
    CONFIRM_REVISE,
    CONFIRM_YES,
    GENERATE,
    INTERNAL,
    OPEN,
    TERMINAL,
    StepSpec,
    WorkflowCatalog,
    mode_set,
    options,
    register_catalog,
)

PHASES = [
    "Analyzing Request",
    "Select Type",
    "Requirements",
    "Checking Theme",
    "Select Theme",
    "Planning Structure",
    "Loading Resources",
    "Building Elements",
    "Optimizing",
    "Validating JSON",
    "Final Validation",
    "Complete",
]

_STRUCTURED = mode_set("GEA")

STEPS = [
    StepSpec(id="open", phase=-1, modes=mode_set("C"), kind=OPEN, label="Free chat"),
    StepSpec(
        id="contextual_analysis",
        phase=0,
        modes=_STRUCTURED,
        kind=INTERNAL,
        label=PHASES[0],
        description="Extract type, fidelity and screen count from the initial request.",
    ),
    StepSpec(
        id="wireframe_type_selection",
        phase=1,
        modes=_STRUCTURED,
        kind=CHOICE,
        label=PHASES[1],
        prompt="와이어프레임 타입을 선택해주세요",
        options=options(
            ("Website (Desktop)", "website_desktop"),
            ("Mobile App", "mobile_app"),
            ("Web App (Responsive)", "web_app_responsive"),
            ("Tablet App", "tablet_app"),
        ),
        field="service_info.platform",
    ),
    StepSpec(
        id="requirements_gathering",
        phase=2,
        modes=_STRUCTURED,
        kind=CHOICE,
        label=PHASES[2],
        prompt="세부 요구사항을 선택해주세요",
        options=options(
            ("Low fidelity", "low"),
            ("Medium fidelity", "medium"),
            ("High fidelity", "high"),
        ),
        field="structure_info.fidelity",
    ),
    StepSpec(id="theme_detection", phase=3, modes=_STRUCTURED, kind=INTERNAL, label=PHASES[3]),
    StepSpec(
        id="theme_selection",
        phase=4,
        modes=_STRUCTURED,
        kind=CHOICE,
        label=PHASES[4],
        prompt="테마 스타일을 선택해주세요",
        options=options(
            ("Classic Wireframe", "classic_wireframe"),
            ("High Contrast", "high_contrast"),
            ("Blueprint Style", "blueprint"),
        ),
        field="style_info.theme",
    ),
    StepSpec(
        id="structure_planning",
        phase=5,
        modes=_STRUCTURED,
        kind=CONFIRM,
        label=PHASES[5],
        prompt="이 구조로 진행할까요?",
        options=options(
            ("네, 진행해주세요", CONFIRM_YES),
            ("수정이 필요해요", CONFIRM_REVISE),
        ),
    ),
    StepSpec(id="resource_loading", phase=6, modes=_STRUCTURED, kind=INTERNAL, label=PHASES[6]),
    StepSpec(id="element_building", phase=7, modes=_STRUCTURED, kind=GENERATE, label=PHASES[7]),
    StepSpec(id="optimization", phase=8, modes=_STRUCTURED, kind=INTERNAL, label=PHASES[8]),
    StepSpec(id="json_validation", phase=9, modes=_STRUCTURED, kind=INTERNAL, label=PHASES[9]),
    StepSpec(id="content_validation", phase=10, modes=_STRUCTURED, kind=INTERNAL, label=PHASES[10]),
    StepSpec(id="complete", phase=11, modes=mode_set("GEAC"), kind=TERMINAL, label=PHASES[11]),
]

CATALOG = WorkflowCatalog(
    version="v1",
    phases=PHASES,
    steps=STEPS,
    description="Legacy ten-step guided flow",
)

register_catalog(CATALOG)
