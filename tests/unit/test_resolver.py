"""Unit tests for parameter-chain resolution.

Tests ordering by position, graceful skipping of stale option references,
and defensive parsing of stored param_values.
"""

from __future__ import annotations

import itertools

from paramtasks.engine.models import OptionNotFound
from paramtasks.engine.resolver import (
    lookup_option,
    normalize_param_values,
    order_slugs,
    parse_param_values,
    resolve,
)
from paramtasks.models import Parameter


class TestResolve:
    """Test resolve()."""

    def test_resolves_in_position_order(self, parameters, options):
        resolved = resolve({"tipo_ladrillo": "o2", "tipo_elemento": "o1"}, parameters, options)

        assert [p.slug for p in resolved] == ["tipo_elemento", "tipo_ladrillo"]
        assert [p.option_label for p in resolved] == ["pared", "hueco"]
        assert resolved[0].label == "Tipo de elemento"
        assert resolved[0].expression_template == "Elemento de {value}"
        assert resolved[1].option_id == "o2"

    def test_empty_param_values(self, parameters, options):
        assert resolve({}, parameters, options) == []

    def test_missing_option_is_skipped(self, parameters, options):
        resolved = resolve(
            {"tipo_elemento": "o_missing", "tipo_ladrillo": "o2"}, parameters, options
        )

        assert [p.slug for p in resolved] == ["tipo_ladrillo"]

    def test_only_missing_option_yields_empty(self, parameters, options):
        assert resolve({"tipo_elemento": "o_missing"}, parameters, options) == []

    def test_child_without_parent_still_resolves(self, parameters, options):
        resolved = resolve({"tipo_ladrillo": "o2"}, parameters, options)

        assert len(resolved) == 1
        assert resolved[0].position == 1

    def test_blank_values_are_ignored(self, parameters, options):
        resolved = resolve({"tipo_elemento": "", "tipo_ladrillo": "o3"}, parameters, options)

        assert [p.option_label for p in resolved] == ["macizo"]

    def test_unknown_slug_is_ignored(self, parameters, options):
        resolved = resolve({"tipo_mortero": "o1", "tipo_elemento": "o1"}, parameters, options)

        assert [p.slug for p in resolved] == ["tipo_elemento"]

    def test_parameter_permutation_does_not_change_order(self, parameters, options):
        extra = Parameter(id="p-a", slug="aditivos", label="Aditivos", position=1)
        catalog = [*parameters, extra]
        values = {"tipo_elemento": "o1", "tipo_ladrillo": "o2", "aditivos": "o3"}

        outputs = {
            tuple(resolve(values, list(perm), options))
            for perm in itertools.permutations(catalog)
        }

        assert len(outputs) == 1

    def test_out_of_order_positions(self, options):
        params = [
            Parameter(id="p-ladrillo", slug="tipo_ladrillo", label="Ladrillo", position=7),
            Parameter(id="p-elemento", slug="tipo_elemento", label="Elemento", position=-2),
        ]

        resolved = resolve({"tipo_ladrillo": "o2", "tipo_elemento": "o1"}, params, options)

        assert [p.position for p in resolved] == [-2, 7]


class TestLookupOption:
    """Test lookup_option()."""

    def test_hit(self, options):
        assert lookup_option(options, "o1") is options["o1"]

    def test_miss(self, options):
        result = lookup_option(options, "nope")

        assert isinstance(result, OptionNotFound)
        assert result.option_id == "nope"


class TestParseParamValues:
    """Test parse_param_values()."""

    def test_dict_passthrough(self):
        assert parse_param_values({"tipo_elemento": "o1"}) == {"tipo_elemento": "o1"}

    def test_json_string(self):
        assert parse_param_values('{"tipo_elemento": "o1"}') == {"tipo_elemento": "o1"}

    def test_invalid_json_yields_empty(self):
        assert parse_param_values("{not json") == {}

    def test_wrong_shape_yields_empty(self):
        assert parse_param_values('["o1", "o2"]') == {}
        assert parse_param_values(42) == {}

    def test_none_yields_empty(self):
        assert parse_param_values(None) == {}

    def test_drops_empty_and_nested_values(self):
        raw = {"a": "", "b": None, "c": {"x": 1}, "d": "  o4 "}

        assert parse_param_values(raw) == {"d": "o4"}


class TestNormalizeParamValues:
    """Test legacy param_values normalization."""

    def test_parameter_id_keys_become_slugs(self, parameters, options):
        assert normalize_param_values({"p-elemento": "o1"}, parameters, options) == {
            "tipo_elemento": "o1"
        }

    def test_label_values_become_option_ids(self, parameters, options):
        assert normalize_param_values({"tipo_ladrillo": "macizo"}, parameters, options) == {
            "tipo_ladrillo": "o3"
        }

    def test_case_insensitive_label(self, parameters, options):
        assert normalize_param_values({"tipo_ladrillo": "HUECO"}, parameters, options) == {
            "tipo_ladrillo": "o2"
        }

    def test_option_of_other_parameter_not_matched(self, parameters, options):
        # "pared" belongs to tipo_elemento, not tipo_ladrillo
        assert normalize_param_values({"tipo_ladrillo": "pared"}, parameters, options) == {
            "tipo_ladrillo": "pared"
        }

    def test_unknown_entries_kept(self, parameters, options):
        assert normalize_param_values({"otro": "x"}, parameters, options) == {"otro": "x"}


class TestOrderSlugs:
    """Test display ordering of selected slugs."""

    def test_saved_order_first(self, parameters):
        ordered = order_slugs(
            ["tipo_elemento", "tipo_ladrillo"], ["tipo_ladrillo"], parameters
        )

        assert ordered == ["tipo_ladrillo", "tipo_elemento"]

    def test_without_saved_order_uses_position(self, parameters):
        assert order_slugs(["tipo_ladrillo", "tipo_elemento"], None, parameters) == [
            "tipo_elemento",
            "tipo_ladrillo",
        ]

    def test_unselected_saved_slugs_dropped(self, parameters):
        assert order_slugs(["tipo_elemento"], ["tipo_ladrillo", "tipo_elemento"], parameters) == [
            "tipo_elemento"
        ]
