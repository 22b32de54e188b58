from filterbox.application.autocompleters import StaticAutocompleter
from filterbox.application.schema_builder import (
    create_schema,
    extend_schema,
    merge_schemas,
    omit_fields,
    pick_fields,
)
from filterbox.domain.schema import ConnectorConfig, FieldConfig, OperatorConfig
from filterbox.domain.types import FieldType


def test_fluent_schema():
    autocompleter = StaticAutocompleter(["bob"])
    schema = (
        create_schema()
        .field("status", "Status")
        .type(FieldType.ENUM)
        .operators(["neq", "eq"])
        .description("Workflow state")
        .group("Tracking")
        .done()
        .field("owner", "Owner")
        .value_autocompleter(autocompleter)
        .default_operator("contains")
        .allow_multiple(False)
        .value_required(True)
        .done()
        .max(3)
        .with_connectors([ConnectorConfig(key="AND", label="and")])
        .allow_freeform_fields()
        .build()
    )

    status, owner = schema.fields
    assert [op.key for op in status.operators] == ["eq", "neq"]
    assert status.description == "Workflow state"
    assert status.group == "Tracking"
    assert owner.type == FieldType.STRING
    assert [op.key for op in owner.operators][:3] == ["eq", "neq", "contains"]
    assert owner.value_autocompleter is autocompleter
    assert owner.default_operator == "contains"
    assert not owner.allow_multiple
    assert schema.max_expressions == 3
    assert schema.default_connector == "AND"
    assert schema.allow_freeform_fields


def test_custom_operators():
    near = OperatorConfig(key="near", label="near")
    schema = create_schema().field("location", "Location").operators([near]).add_operator(
        OperatorConfig(key="far", label="far from")
    ).done().build()

    assert [op.key for op in schema.fields[0].operators] == ["near", "far"]


def test_merge_first_definition_wins():
    first = create_schema().field("a", "First A").done().max(1).build()
    second = create_schema().field("a", "Second A").done().field("b", "B").done().max(4).build()

    merged = merge_schemas(first, second)

    assert [field.label for field in merged.fields] == ["First A", "B"]
    assert merged.max_expressions == 4


def test_pick_and_omit(schema):
    assert [field.key for field in pick_fields(schema, ["priority", "status"]).fields] == ["status", "priority"]
    assert [field.key for field in omit_fields(schema, ["status"]).fields] == ["priority", "name", "created"]
    assert len(schema.fields) == 4


def test_extend(schema):
    extended = extend_schema(schema, [FieldConfig(key="team", label="Team")], max_expressions=2)

    assert extended.fields[-1].key == "team"
    assert extended.max_expressions == 2
    assert schema.max_expressions is None
