"""Unit tests for parameter dependency helpers."""

from __future__ import annotations

from paramtasks.engine.dependencies import (
    available_parameters,
    orphaned_selections,
    selections_by_parameter_id,
)
from paramtasks.models import Parameter, ParameterDependency


class TestAvailableParameters:
    """Test available_parameters()."""

    def test_root_offered_first(self, parameters, dependencies):
        root = Parameter(id="p-tipo", slug="tipo_tarea", label="Tipo de tarea", position=0)

        assert available_parameters({}, [root, *parameters], dependencies) == ["p-tipo"]

    def test_parent_option_unlocks_child(self, parameters, dependencies):
        available = available_parameters(
            {"p-elemento": "o1"}, parameters, dependencies, root_slug="tipo_elemento"
        )

        assert available == ["p-elemento", "p-ladrillo"]

    def test_other_option_does_not_unlock(self, parameters, dependencies):
        available = available_parameters(
            {"p-elemento": "o-losa"}, parameters, dependencies, root_slug="tipo_elemento"
        )

        assert available == ["p-elemento"]

    def test_selected_child_not_repeated(self, parameters, dependencies):
        available = available_parameters(
            {"p-elemento": "o1", "p-ladrillo": "o2"}, parameters, dependencies
        )

        assert available == ["p-elemento", "p-ladrillo"]


class TestOrphanedSelections:
    """Test orphaned_selections()."""

    def test_child_without_parent(self, dependencies):
        assert orphaned_selections({"p-ladrillo": "o2"}, dependencies) == ["p-ladrillo"]

    def test_child_with_wrong_parent_option(self, dependencies):
        assert orphaned_selections({"p-elemento": "o9", "p-ladrillo": "o2"}, dependencies) == [
            "p-ladrillo"
        ]

    def test_satisfied(self, dependencies):
        assert orphaned_selections({"p-elemento": "o1", "p-ladrillo": "o2"}, dependencies) == []

    def test_any_declared_parent_suffices(self):
        deps = [
            ParameterDependency(parent_parameter_id="a", parent_option_id="a1", child_parameter_id="c"),
            ParameterDependency(parent_parameter_id="b", parent_option_id="b1", child_parameter_id="c"),
        ]

        assert orphaned_selections({"b": "b1", "c": "c1"}, deps) == []


class TestSelectionsByParameterId:
    """Test selections_by_parameter_id()."""

    def test_rekeys_known_slugs(self, parameters):
        selections = selections_by_parameter_id(
            {"tipo_elemento": "o1", "desconocido": "x"}, parameters
        )

        assert selections == {"p-elemento": "o1"}
