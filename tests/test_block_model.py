"""Tests for the declarative block model: condition shapes, field variants, block validation"""

import pytest
from pydantic import TypeAdapter, ValidationError

from block_model import (
    AllCondition,
    AnyCondition,
    BlockConfig,
    Condition,
    FieldCondition,
    FieldSpec,
    NotCondition,
    WorkflowGraph,
    referenced_fields,
)

condition_adapter = TypeAdapter(Condition)


class TestConditionParsing:
    """Predicates are parsed into the right variant by shape"""

    def test_leaf_with_negation_and_conjunction(self):
        """
        Given: the legacy leaf shape with `not` and `and`
        When: parsing it
        Then: a FieldCondition with the chained predicate is produced
        """
        condition = condition_adapter.validate_python({
            "field": "operation",
            "value": ["insert", "update"],
            "not": True,
            "and": {"field": "mode", "value": "advanced"},
        })

        assert isinstance(condition, FieldCondition)
        assert condition.negate is True
        assert condition.value == ["insert", "update"]
        assert condition.and_.field == "mode"

    def test_composite_shapes(self):
        condition = condition_adapter.validate_python({
            "all": [
                {"field": "a", "value": 1},
                {"any": [{"field": "b", "value": True}, {"not": {"field": "c", "value": "x"}}]},
            ]
        })

        assert isinstance(condition, AllCondition)
        assert isinstance(condition.all[1], AnyCondition)
        assert isinstance(condition.all[1].any[1], NotCondition)

    def test_value_and_value_from_are_exclusive(self):
        with pytest.raises(ValidationError, match="mutually exclusive"):
            condition_adapter.validate_python(
                {"field": "model", "value": "x", "value_from": "keyless_models"}
            )

    def test_unrecognized_shape_is_rejected(self):
        with pytest.raises(ValidationError):
            condition_adapter.validate_python({"operation": "write"})

    def test_referenced_fields_walks_every_branch(self):
        condition = condition_adapter.validate_python({
            "any": [
                {"field": "a", "value": 1, "and": {"field": "b", "value": 2}},
                {"not": {"field": "c", "value": 3}},
            ]
        })

        assert referenced_fields(condition) == ["a", "b", "c"]


class TestFieldSpec:
    """Field defaults, requirement rules and operation variants"""

    def test_title_defaults_to_id_and_options_accept_strings(self):
        spec = FieldSpec.model_validate({"id": "ssl", "ui": "dropdown", "options": ["disabled", "required"]})

        assert spec.title == "ssl"
        assert [option.id for option in spec.options] == ["disabled", "required"]
        assert spec.options[0].label == "disabled"

    def test_operation_specific_requirement(self):
        spec = FieldSpec(id="table", required=["insert", "update"])

        assert spec.is_required("insert") is True
        assert spec.is_required("query") is False
        assert spec.is_required(None) is False

    def test_variant_overrides_only_the_fields_it_sets(self):
        """
        Given: a field with an `execute` variant that only changes the title
        When: taking the effective spec for execute and for another operation
        Then: the variant applies to execute only and keeps the other attributes
        """
        spec = FieldSpec.model_validate({
            "id": "query",
            "title": "SQL Query",
            "placeholder": "SELECT 1",
            "required": ["query", "execute"],
            "variants": {"execute": {"title": "Raw SQL"}},
        })

        execute = spec.for_operation("execute")
        assert execute.title == "Raw SQL"
        assert execute.placeholder == "SELECT 1"
        assert execute.is_required("execute") is True
        assert spec.for_operation("query") is spec

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValidationError):
            FieldSpec.model_validate({"id": "x", "hidden": True})


class TestBlockConfigValidation:
    """Cross-field rules of a block definition"""

    @staticmethod
    def _block(**overrides):
        data = {
            "type": "demo",
            "name": "Demo",
            "operation_field": "operation",
            "tools": {"access": ["demo_read"], "operations": {"read": "demo_read"}},
            "fields": [{"id": "operation"}],
        }
        data.update(overrides)
        return data

    def test_valid_block(self):
        block = BlockConfig.model_validate(self._block())

        assert block.get_field("operation") is not None
        assert block.get_field("missing") is None

    def test_duplicate_field_ids(self):
        with pytest.raises(ValidationError, match="duplicate field ids"):
            BlockConfig.model_validate(self._block(fields=[{"id": "operation"}, {"id": "operation"}]))

    def test_condition_on_unknown_field(self):
        fields = [{"id": "operation"}, {"id": "table", "condition": {"field": "mode", "value": "x"}}]
        with pytest.raises(ValidationError, match='unknown field "mode"'):
            BlockConfig.model_validate(self._block(fields=fields))

    def test_mapped_tool_must_be_in_access(self):
        tools = {"access": ["demo_read"], "operations": {"read": "demo_read", "write": "demo_write"}}
        with pytest.raises(ValidationError, match="not declared in access"):
            BlockConfig.model_validate(self._block(tools=tools))

    def test_exactly_one_tool_strategy(self):
        tools = {"access": ["demo_read"], "tool": "demo_read", "operations": {"read": "demo_read"}}
        with pytest.raises(ValidationError, match="exactly one of"):
            BlockConfig.model_validate(self._block(tools=tools))

    def test_canonical_group_must_share_type(self):
        fields = [
            {"id": "operation"},
            {"id": "sheet", "canonical_param_id": "sheetId"},
            {"id": "manualSheet", "canonical_param_id": "sheetId", "type": "number"},
        ]
        with pytest.raises(ValidationError, match="must share one type"):
            BlockConfig.model_validate(self._block(fields=fields))

    def test_field_groups_keep_declared_order(self, sheet_block):
        groups = sheet_block.field_groups()

        assert [spec.id for spec in groups["spreadsheetId"]] == ["spreadsheetId", "manualSpreadsheetId"]
        assert list(groups) == ["operation", "spreadsheetId", "table", "rows"]

    def test_initial_values_use_defaults_and_first_dropdown_option(self, sheet_block):
        assert sheet_block.initial_values() == {"operation": "read"}


class TestWorkflowGraph:
    """Graph snapshot validation and traversal"""

    def test_connection_to_unknown_block(self):
        with pytest.raises(ValidationError, match="non-existent block"):
            WorkflowGraph.model_validate({
                "blocks": [{"id": "r", "type": "router"}],
                "connections": [{"source": "r", "target": "missing"}],
            })

    def test_outgoing_is_ordered_and_deduplicated(self):
        graph = WorkflowGraph.model_validate({
            "blocks": [
                {"id": "r", "type": "router"},
                {"id": "b", "type": "slack"},
                {"id": "a", "type": "mysql"},
            ],
            "connections": [
                {"source": "r", "target": "b"},
                {"source": "r", "target": "a"},
                {"source": "r", "target": "b", "source_handle": "other"},
            ],
        })

        assert [block.id for block in graph.outgoing("r")] == ["b", "a"]
        assert graph.outgoing("a") == []
