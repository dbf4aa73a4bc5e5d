"""Unit tests for description rendering.

Covers the masonry scenarios end to end (resolve + render), template
expansion, punctuation cleanup and the non-empty fallback labels.
"""

from __future__ import annotations

from uuid import UUID

import pytest

from paramtasks.engine.models import ResolvedParam
from paramtasks.engine.renderer import (
    expand_template,
    finish_sentence,
    render,
    short_id,
)
from paramtasks.engine.resolver import resolve

TASK_ID = UUID("3f2a9c1e-5b7d-4e8f-9a10-b2c3d4e5f607")


def _param(option_label: str, template: str | None = "{value}", position: int = 0) -> ResolvedParam:
    return ResolvedParam(
        slug=f"p{position}",
        label=f"P{position}",
        option_label=option_label,
        position=position,
        expression_template=template,
    )


class TestMasonryScenarios:
    """Resolve + render for the masonry template."""

    def test_full_chain(self, parameters, options):
        resolved = resolve({"tipo_elemento": "o1", "tipo_ladrillo": "o2"}, parameters, options)

        assert render("Mampostería", resolved) == "Mampostería Elemento de pared tipo hueco."

    def test_child_without_parent(self, parameters, options):
        resolved = resolve({"tipo_ladrillo": "o2"}, parameters, options)

        assert render("Mampostería", resolved) == "Mampostería tipo hueco."

    def test_missing_option(self, parameters, options):
        resolved = resolve({"tipo_elemento": "o_missing"}, parameters, options)

        assert resolved == []
        assert render("Mampostería", resolved) == "Mampostería."

    def test_deterministic(self, parameters, options):
        values = {"tipo_elemento": "o1", "tipo_ladrillo": "o3"}

        first = render("Mampostería", resolve(values, parameters, options), task_id=TASK_ID)
        second = render("Mampostería", resolve(dict(reversed(values.items())), parameters, options), task_id=TASK_ID)

        assert first == second == "Mampostería Elemento de pared tipo macizo."


class TestExpandTemplate:
    """Test expand_template()."""

    def test_substitutes_value(self):
        assert expand_template("Elemento de {value}", "pared") == "Elemento de pared"

    @pytest.mark.parametrize("template", [None, "", "   "])
    def test_blank_template_renders_value(self, template):
        assert expand_template(template, "hueco") == "hueco"

    def test_only_first_placeholder_replaced(self):
        assert expand_template("{value} y {value}", "cal") == "cal y {value}"

    def test_template_without_placeholder(self):
        assert expand_template("con revoque", "x") == "con revoque"

    def test_custom_placeholder(self):
        assert expand_template("espesor [v] cm", "15", placeholder="[v]") == "espesor 15 cm"


class TestFinishSentence:
    """Test whitespace and punctuation cleanup."""

    def test_appends_period(self):
        assert finish_sentence("Revoque grueso") == "Revoque grueso."

    def test_collapses_whitespace(self):
        assert finish_sentence("  Revoque   grueso \n interior ") == "Revoque grueso interior."

    def test_trailing_comma_becomes_period(self):
        assert finish_sentence("Contrapiso de hormigón,") == "Contrapiso de hormigón."

    def test_collapses_repeated_punctuation(self):
        assert finish_sentence("Pintura, , látex..") == "Pintura, látex."

    def test_trailing_comma_after_period(self):
        assert finish_sentence("Muro c/ refuerzo esp.,") == "Muro c/ refuerzo esp."

    def test_lone_comma(self):
        assert finish_sentence(" , ") == ""

    def test_existing_period_kept(self):
        assert finish_sentence("Carpeta.") == "Carpeta."

    def test_empty(self):
        assert finish_sentence("   ") == ""


class TestRender:
    """Test render() edge cases."""

    def test_no_base_name(self):
        assert render("", [_param("pared", "Elemento de {value}")]) == "Elemento de pared."

    def test_fragment_with_trailing_comma(self):
        resolved = [_param("hueco", "ladrillo {value},", 0), _param("cal", "{value},", 1)]

        assert render("Muro", resolved) == "Muro ladrillo hueco, cal."

    def test_abbreviated_label_before_comma_template(self):
        resolved = [_param("c/ refuerzo esp.", "{value},")]

        assert render("Muro", resolved) == "Muro c/ refuerzo esp."

    def test_fallback_with_task_id(self):
        assert render(None, [], task_id=TASK_ID) == "Tarea 3f2a9c1e."

    def test_fallback_without_task_id(self):
        assert render("  ", []) == "Tarea."

    def test_fallback_custom_label(self):
        assert render("", [], task_id=TASK_ID, default_label="Task", short_id_length=4) == "Task 3f2a."

    def test_never_empty(self):
        cases = [("", []), (None, []), ("", [_param("", "")]), ("\t\n", [_param(" ", None)])]
        for base_name, resolved in cases:
            result = render(base_name, resolved, task_id=TASK_ID)
            assert result
            assert result.endswith(".")

    def test_short_id(self):
        assert short_id(TASK_ID) == "3f2a9c1e"
        assert short_id(str(TASK_ID), length=12) == "3f2a9c1e5b7d"
