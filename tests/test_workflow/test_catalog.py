"""Tests for step catalogs and the catalog registry."""

from __future__ import annotations

import pytest

from vibeframe.models.wireframe import WorkflowAnswers
from vibeframe.workflow import catalog as catalog_module
from vibeframe.workflow.catalog import (
    CHOICE,
    INTERNAL,
    StepSpec,
    WorkflowCatalog,
    catalog_versions,
    get_catalog,
    mode_set,
    register_catalog,
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_versions(self):
        assert catalog_versions() == ["v1", "v2"]

    def test_unknown_version(self):
        with pytest.raises(KeyError):
            get_catalog("v9")

    def test_failed_vocabulary_import_is_retried(self, monkeypatch):
        real_modules = catalog_module._VOCABULARY_MODULES
        monkeypatch.setattr(catalog_module, "_loaded", False)
        monkeypatch.setattr(catalog_module, "_VOCABULARY_MODULES", ("vibeframe.workflow.vocab_missing",))
        with pytest.raises(ModuleNotFoundError):
            get_catalog("v2")
        assert catalog_module._loaded is False

        monkeypatch.setattr(catalog_module, "_VOCABULARY_MODULES", real_modules)
        assert get_catalog("v2").version == "v2"
        assert catalog_module._loaded is True

    def test_duplicate_version_rejected(self):
        get_catalog("v2")
        with pytest.raises(ValueError, match="Duplicate catalog"):
            register_catalog(WorkflowCatalog("v2", [], []))

    def test_duplicate_step_id_rejected(self):
        steps = [
            StepSpec(id="a", phase=0, modes=mode_set("G"), kind=CHOICE),
            StepSpec(id="a", phase=0, modes=mode_set("G"), kind=INTERNAL),
        ]
        with pytest.raises(ValueError, match="Duplicate step ID"):
            WorkflowCatalog("test", ["p"], steps)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class TestLookup:
    def test_modes(self):
        assert set(get_catalog("v2").modes()) == {"chat", "guided", "expert", "auto"}

    def test_mode_membership(self):
        catalog = get_catalog("v2")
        assert catalog.has_step("expert", "nav_header")
        assert not catalog.has_step("guided", "nav_header")
        assert not catalog.has_step("guided", "no_such_step")
        with pytest.raises(KeyError):
            catalog.spec("auto", "service_platform")

    def test_chat_has_no_questions(self):
        steps = get_catalog("v2").steps_for("chat")
        assert [s.id for s in steps] == ["open", "complete"]

    def test_every_structured_mode_ends_in_generate_then_terminal(self):
        catalog = get_catalog("v2")
        for mode in ("guided", "expert", "auto"):
            ids = [s.id for s in catalog.steps_for(mode)]
            assert ids[-3:] == ["final_confirm", "building", "complete"]

    def test_profile_mode_options(self):
        spec = get_catalog("v2").spec("guided", "profile_mode")
        assert [o.value for o in spec.options] == ["chat", "guided", "expert", "auto"]
        assert spec.option_labels()[1] == "가이드 받으면서"


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

class TestConditions:
    def test_section_branches(self):
        catalog = get_catalog("v2")
        features = catalog.spec("expert", "content_features")
        pricing = catalog.spec("expert", "content_pricing")
        answers = WorkflowAnswers().with_answer("structure_info.sections", ["features", "faq"])
        assert features.applies(answers)
        assert not pricing.applies(answers)

    def test_platform_branches(self):
        catalog = get_catalog("v2")
        mobile = WorkflowAnswers().with_answer("service_info.platform", "mobile_app")
        saas = WorkflowAnswers().with_answer("service_info.platform", "webapp_saas")
        assert catalog.spec("guided", "platform_mobile_nav").applies(mobile)
        assert not catalog.spec("guided", "platform_mobile_nav").applies(saas)
        assert catalog.spec("guided", "platform_dashboard").applies(saas)
        bottom = mobile.with_answer("platform_info.mobile_nav", "bottom_tabs")
        assert catalog.spec("expert", "platform_mobile_bottom").applies(bottom)
        assert not catalog.spec("expert", "platform_mobile_bottom").applies(mobile)

    def test_is_answered(self):
        catalog = get_catalog("v2")
        sections = catalog.spec("guided", "content_sections")
        assert not sections.is_answered(WorkflowAnswers().with_answer("structure_info.sections", []))
        assert sections.is_answered(WorkflowAnswers().with_answer("structure_info.sections", ["faq"]))
        confirm = catalog.spec("guided", "final_confirm")
        assert not confirm.is_answered(WorkflowAnswers())
        assert confirm.is_answered(WorkflowAnswers().with_confirmation("final_confirm"))


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

class TestProgress:
    def test_first_step(self):
        p = get_catalog("v2").progress("auto", "profile_role", WorkflowAnswers())
        assert p.position == 1
        assert p.total == 8
        assert p.percent == 0
        assert p.phase == 0
        assert p.phase_label == "프로필"

    def test_terminal_is_complete(self):
        p = get_catalog("v2").progress("auto", "complete", WorkflowAnswers())
        assert p.percent == 100
        assert p.position == p.total

    def test_open_step_has_no_phase(self):
        p = get_catalog("v2").progress("chat", "open", WorkflowAnswers())
        assert p.phase is None
        assert p.phase_label == ""

    def test_total_follows_branches(self):
        catalog = get_catalog("v2")
        desktop = WorkflowAnswers().with_answer("service_info.platform", "website_desktop")
        mobile = WorkflowAnswers().with_answer("service_info.platform", "mobile_app")
        assert (
            catalog.progress("expert", "profile_role", mobile).total
            > catalog.progress("expert", "profile_role", desktop).total
        )
