import pytest

from filterbox.application.serialization import (
    condition_value_from_raw,
    deserialize,
    from_query_string,
    serialize,
    to_display_string,
    to_query_string,
)
from filterbox.domain.errors import DeserializationError
from filterbox.domain.types import ConditionValue, SerializedExpression


class TestSerialize:
    def test_wire_form(self, make_expression):
        expressions = [
            make_expression("status", "open", connector="AND"),
            make_expression("priority", "3", operator_key="gt"),
        ]

        wire = [item.to_dict() for item in serialize(expressions)]

        assert wire == [
            {"field": "status", "operator": "eq", "value": "open", "connector": "AND"},
            {"field": "priority", "operator": "gt", "value": "3"},
        ]

    def test_field_serializer_hook(self, schema, make_expression):
        schema.find_field("priority").serialize = lambda value: int(value.raw)

        wire = serialize([make_expression("priority", "3")], schema)

        assert wire[0].value == 3
        assert serialize([make_expression("priority", "3")], schema, use_field_serializers=False)[0].value == "3"

    def test_schema_serializer_wins(self, schema, make_expression):
        schema.serialize = lambda expressions: [{"field": "custom", "operator": "x", "value": len(expressions)}]

        wire = serialize([make_expression("status", "open")], schema)

        assert wire == [SerializedExpression(field="custom", operator="x", value=1)]


class TestDeserialize:
    def test_rebuilds_expressions(self, schema):
        expressions = deserialize(
            [
                {"field": "status", "operator": "in", "value": ["open", "closed"], "connector": "OR"},
                SerializedExpression(field="priority", operator="gte", value="2"),
            ],
            schema,
        )

        first, second = expressions
        assert first.condition.field.label == "Status"
        assert first.condition.value.raw == ["open", "closed"]
        assert first.condition.value.display == "open, closed"
        assert first.connector == "OR"
        assert second.condition.operator.label == "greater or equal"
        assert second.connector is None

    def test_unknown_field_raises(self, schema):
        with pytest.raises(DeserializationError, match="Unknown field: team"):
            deserialize([{"field": "team", "operator": "eq", "value": "x"}], schema)

    def test_unknown_operator_raises(self, schema):
        with pytest.raises(DeserializationError, match="Unknown operator: like"):
            deserialize([{"field": "status", "operator": "like", "value": "x"}], schema)

    def test_freeform_fields_resolve(self, schema):
        schema.allow_freeform_fields = True

        expressions = deserialize([{"field": "team", "operator": "contains", "value": "core"}], schema)

        assert expressions[0].condition.field.key == "team"

    def test_field_deserializer_hook(self, schema):
        schema.find_field("priority").deserialize = lambda raw: ConditionValue(raw=int(raw), display=f"P{raw}", serialized=str(raw))

        expressions = deserialize([{"field": "priority", "operator": "eq", "value": "2"}], schema)

        assert expressions[0].condition.value.display == "P2"

    def test_round_trip(self, schema, make_expression):
        expressions = [make_expression("status", "open", connector="AND"), make_expression("name", "bob")]

        assert deserialize(serialize(expressions, schema), schema) == expressions

    def test_wire_values_survive_a_round_trip(self, schema):
        wire = [
            {"field": "priority", "operator": "eq", "value": 3, "connector": "AND"},
            {"field": "status", "operator": "in", "value": ["open", "closed"], "connector": "OR"},
            {"field": "name", "operator": "contains", "value": "bob"},
        ]

        result = serialize(deserialize(wire, schema), schema)

        assert [item.to_dict() for item in result] == wire
        assert isinstance(result[0].value, int)

    def test_list_values_join_in_query_string(self, schema):
        expressions = deserialize([{"field": "status", "operator": "in", "value": ["open", "closed"]}], schema)

        assert to_query_string(expressions) == "status=open%2Cclosed"
        assert expressions[0].condition.value.display == "open, closed"


class TestTextForms:
    def test_display_string(self, make_expression):
        expressions = [
            make_expression("status", "open", connector="AND"),
            make_expression("priority", "3", operator_key="gt"),
        ]

        assert to_display_string(expressions) == "Status is open AND Priority greater than 3"

    def test_display_string_formatters(self, make_expression):
        expressions = [make_expression("status", "open", connector="OR"), make_expression("name", "bob")]

        text = to_display_string(
            expressions,
            format_field=lambda field: field.key,
            format_connector=lambda connector: connector.lower(),
            format_value=lambda value, field, operator: f"'{value.display}'",
        )

        assert text == "status is 'open' or name contains 'bob'"

    def test_trailing_connector_not_shown(self, make_expression):
        assert to_display_string([make_expression("status", "open", connector="AND")]) == "Status is open"

    def test_query_string_last_value_wins(self, make_expression):
        expressions = [
            make_expression("status", "open", connector="AND"),
            make_expression("name", "bob smith", connector="AND"),
            make_expression("status", "closed"),
        ]

        assert to_query_string(expressions) == "status=closed&name=bob+smith"

    def test_from_query_string(self, schema):
        expressions = from_query_string("?status=open&team=core&priority=3", schema)

        assert [e.condition.field.key for e in expressions] == ["status", "priority"]
        assert [e.condition.operator.key for e in expressions] == ["eq", "eq"]
        assert [e.connector for e in expressions] == ["AND", None]
        assert expressions[1].condition.value.raw == "3"


def test_condition_value_from_raw():
    assert condition_value_from_raw(["a", "b"]).display == "a, b"
    assert condition_value_from_raw(None).display == ""
    assert condition_value_from_raw(5).serialized == 5
    assert condition_value_from_raw(5).display == "5"
