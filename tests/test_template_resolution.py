"""
Tests for {{reference}} resolution: recursive lookup, cycle detection,
special-variable deferral and error propagation.
"""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from flowresolver.variables import (
    SpecialVariables,
    Status,
    expand_variable,
    resolve_variables,
)


class TestBasicResolution:
    """Test substitution of plain references."""

    def test_template_without_references_is_unchanged(self):
        result = resolve_variables({"a": 1}, "plain text")

        assert result.status is Status.OK
        assert result.data == "plain text"

    def test_single_reference(self):
        result = resolve_variables({"flow": {"name": "door"}}, "Flow {{flow.name}} fired")

        assert result.status is Status.OK
        assert result.data == "Flow door fired"

    def test_bare_json_value_gets_quoted(self):
        result = resolve_variables({"a": {"b": 5}}, '{"x": {{a.b}}}')

        assert result.status is Status.OK
        assert result.data == '{"x": "5"}'

    def test_quoted_json_value_not_double_quoted(self):
        result = resolve_variables({"a": "v"}, '{"x": "{{a}}", "y": 1}')

        assert result.data == '{"x": "v", "y": 1}'

    def test_sequence_index_in_reference(self):
        data = {"items": [{"id": "first"}, {"id": "second"}]}

        result = resolve_variables(data, "{{items.1.id}}")

        assert result.data == "second"

    @pytest.mark.parametrize("value,expected", [
        (True, "true"),
        (False, "false"),
        (None, "null"),
        (3, "3"),
        (2.5, "2.5"),
        ({"k": 1}, '{"k": 1}'),
        ([1, "two"], '[1, "two"]'),
        (date(2024, 1, 2), "2024-01-02"),
        (datetime(2024, 1, 2, 3, 4, 5), "2024-01-02 03:04:05"),
        (Decimal("1.50"), "1.50"),
    ])
    def test_non_string_values_are_rendered_as_text(self, value, expected):
        result = resolve_variables({"v": value}, "<{{v}}>")

        assert result.status is Status.OK
        assert result.data == "<" + expected + ">"

    def test_date_in_json_body_is_quoted_once(self):
        result = resolve_variables({"when": date(2024, 1, 2)}, '{"d": {{when}}}')

        assert result.status is Status.OK
        assert result.data == '{"d": "2024-01-02"}'

    @pytest.mark.parametrize("value", [42, None, {"a": "{{b}}"}, ["{{b}}"]])
    def test_non_string_template_passes_through(self, value):
        result = resolve_variables({"b": "x"}, value)

        assert result.status is Status.OK
        assert result.data == value


class TestRecursiveResolution:
    """Test values that themselves contain references."""

    def test_chained_references(self):
        data = {"a": "{{b}}", "b": "{{c}}", "c": "5"}

        result = resolve_variables(data, "{{a}}")

        assert result.status is Status.OK
        assert result.data == "5"

    def test_value_with_surrounding_text(self):
        data = {"greeting": "Hello {{user.name}}", "user": {"name": "Ada"}}

        result = resolve_variables(data, "{{greeting}}!")

        assert result.data == "Hello Ada!"

    def test_siblings_sharing_an_ancestor(self):
        data = {"a": {"b": "{{a.c}}", "c": "C"}}

        result = resolve_variables(data, "{{a.b}} {{a.c}}")

        assert result.status is Status.OK
        assert result.data == "C C"

    def test_same_reference_twice_is_not_circular(self):
        data = {"x": "{{y}} and {{y}}", "y": "v"}

        result = resolve_variables(data, "{{x}} / {{x}}")

        assert result.status is Status.OK
        assert result.data == "v and v / v and v"

    def test_long_chain_resolves(self):
        links = 3000
        data = {"v%d" % i: "{{v%d}}" % (i + 1) for i in range(links)}
        data["v%d" % links] = "end"

        result = resolve_variables(data, "<{{v0}}>")

        assert result.status is Status.OK
        assert result.data == "<end>"

    def test_long_chain_ending_in_a_cycle(self):
        links = 3000
        data = {"v%d" % i: "{{v%d}}" % (i + 1) for i in range(links)}
        data["v%d" % links] = "{{v0}}"

        result = resolve_variables(data, "{{v0}}")

        assert result.status is Status.CIRCULAR_REFERENCE

    def test_long_chain_collects_deferred_expressions(self):
        special = SpecialVariables(tags=["payload"])
        links = 3000
        data = {"v%d" % i: "{{payload.p%d}}{{v%d}}" % (i, i + 1) for i in range(links)}
        data["v%d" % links] = "."

        result = resolve_variables(data, "{{v0}}", special)

        assert result.status is Status.OK
        assert result.data.endswith("${p%d}." % (links - 1))
        assert special.used == ["p%d" % i for i in range(links)]


class TestCircularReferences:
    """Test cycle detection."""

    def test_self_reference(self):
        result = resolve_variables({"a": "{{a}}"}, "{{a}}")

        assert result.status is Status.CIRCULAR_REFERENCE
        assert result.data is None

    @pytest.mark.parametrize("template", ["{{x}}", "{{a.b.c}}"])
    def test_mutual_reference(self, template):
        data = {"a": {"b": {"c": "{{x}}"}}, "x": "{{a.b.c}}"}

        result = resolve_variables(data, template)

        assert result.status is Status.CIRCULAR_REFERENCE

    def test_longer_cycle(self):
        data = {"a": "{{b}}", "b": "{{c}}", "c": "pre {{a}}"}

        result = resolve_variables(data, "start {{a}}")

        assert result.status is Status.CIRCULAR_REFERENCE

    def test_cycle_aborts_whole_resolution(self):
        data = {"ok": "fine", "loop": "{{loop}}"}

        result = resolve_variables(data, "{{ok}} then {{loop}}")

        assert result.status is Status.CIRCULAR_REFERENCE

    def test_expand_variable_with_name_already_tracked(self):
        result = expand_variable({"a": "1"}, "a", tracking=frozenset({"a"}))

        assert result.status is Status.CIRCULAR_REFERENCE

    def test_tracking_argument_is_not_mutated(self):
        tracking = frozenset({"outer"})

        resolve_variables({"a": "{{b}}", "b": "1"}, "{{a}}", tracking=tracking)

        assert tracking == frozenset({"outer"})


class TestNotFound:
    """Test propagation of missing paths."""

    def test_missing_path_mid_walk(self):
        result = resolve_variables({"a": {"b": {}}}, "value {{a.b.c}}")

        assert result.status is Status.NOT_FOUND
        assert result.data == ["a", "b", "c"]

    def test_missing_path_inside_fetched_value(self):
        data = {"x": "uses {{missing.key}}"}

        result = resolve_variables(data, "{{x}}")

        assert result.status is Status.NOT_FOUND
        assert result.data == ["missing", "key"]

    def test_first_error_wins(self):
        data = {"ok": "fine"}

        result = resolve_variables(data, "{{ok}} {{nope}} {{also.nope}}")

        assert result.status is Status.NOT_FOUND
        assert result.data == ["nope"]

    def test_special_tag_without_descriptor_is_a_plain_lookup(self):
        result = resolve_variables({}, "{{payload.attr1}}")

        assert result.status is Status.NOT_FOUND
        assert result.data == ["payload", "attr1"]


class TestSpecialVariables:
    """Test deferral of special references and the used list."""

    def test_special_references_become_placeholders(self):
        special = SpecialVariables(tags=["payload"])

        result = resolve_variables(
            {}, "Attributes {{payload.attr1}} and {{payload.attr2}}", special
        )

        assert result.status is Status.OK
        assert result.data == "Attributes ${attr1} and ${attr2}"
        assert result.used == ["attr1", "attr2"]
        assert special.used == ["attr1", "attr2"]

    def test_special_reference_reached_through_a_chain(self):
        special = SpecialVariables(tags=["payload"])
        data = {"msg": "T={{payload.temp}}", "wrapper": "[{{msg}}]"}

        result = resolve_variables(data, "{{wrapper}} {{payload.hum}}", special)

        assert result.data == "[T=${temp}] ${hum}"
        assert special.used == ["temp", "hum"]

    def test_special_placeholder_in_json_body(self):
        special = SpecialVariables(tags=["payload"])
        data = {"flow": {"id": "f1"}}

        result = resolve_variables(
            data, '{"id": {{flow.id}}, "value": {{payload.level}}}', special
        )

        assert result.data == '{"id": "f1", "value": "${level}"}'
        assert special.used == ["level"]

    def test_used_recorded_once_per_reference(self):
        special = SpecialVariables(tags=["payload"])

        resolve_variables({"a": "{{b}}", "b": "{{payload.x}}"}, "{{a}}", special)

        assert special.used == ["x"]

    def test_separate_descriptors_do_not_mix(self):
        first = SpecialVariables(tags=["payload"])
        second = SpecialVariables(tags=["payload"])

        resolve_variables({}, "{{payload.a}}", first)
        resolve_variables({}, "{{payload.b}}", second)

        assert first.used == ["a"]
        assert second.used == ["b"]

    def test_used_kept_when_resolution_aborts(self):
        special = SpecialVariables(tags=["payload"])

        result = resolve_variables({}, "{{payload.a}} {{missing}}", special)

        assert result.status is Status.NOT_FOUND
        assert result.used == ["a"]
        assert special.used == ["a"]

    def test_expand_variable_records_used(self):
        special = SpecialVariables(tags=["event"])

        result = expand_variable({}, "event.source.id", special)

        assert result.data == "${source.id}"
        assert special.used == ["source.id"]


class TestDelimiterQuirks:
    """
    Documented, possibly surprising behaviors of the left-to-right scan.

    After each substitution the whole text is scanned again from the start,
    so spliced text takes part in later matches. A close delimiter ahead of
    the next open one stops substitution without an error unless strict.
    """

    def test_spliced_text_is_rescanned_from_the_start(self):
        data = {"brace": "{{", "name": "N"}

        result = resolve_variables(data, "{{brace}}name}}")

        assert result.status is Status.OK
        assert result.data == "N"

    def test_stray_close_stops_substitution(self):
        result = resolve_variables({"b": "B"}, "a }} {{b}}")

        assert result.status is Status.OK
        assert result.data == "a }} {{b}}"

    def test_stray_close_after_substitution_keeps_earlier_splices(self):
        result = resolve_variables({"a": "A", "b": "B"}, "{{a}} x }} {{b}}")

        assert result.status is Status.OK
        assert result.data == "A x }} {{b}}"

    def test_stray_close_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="flowresolver"):
            resolve_variables({}, "a }} {{b}}")

        assert any("unpaired" in record.message for record in caplog.records)

    def test_unmatched_open_is_left_alone(self):
        result = resolve_variables({"a": "A"}, "x {{a")

        assert result.status is Status.OK
        assert result.data == "x {{a"

    @pytest.mark.parametrize("template", ["a }} {{b}}", "x {{a"])
    def test_strict_mode_reports_malformed(self, template):
        result = resolve_variables({"a": "A", "b": "B"}, template, strict=True)

        assert result.status is Status.MALFORMED
        assert result.data == template

    def test_strict_mode_accepts_natural_json_braces(self):
        result = resolve_variables({"a": "A"}, '{"x": {"y": "{{a}}"}}', strict=True)

        assert result.status is Status.OK
        assert result.data == '{"x": {"y": "A"}}'


def test_result_to_dict():
    special = SpecialVariables(tags=["payload"])

    result = resolve_variables({"a": 1}, "{{a}} {{payload.p}}", special)

    assert result.to_dict() == {"status": "ok", "data": "1 ${p}", "used": ["p"]}
