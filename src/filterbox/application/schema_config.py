"""JSON schema file parser.

Parses JSON files describing the filterable fields and converts them into
a :class:`~filterbox.domain.schema.FilterSchema`. Example file::

    {
      "fields": [
        {"key": "status", "label": "Status", "type": "enum",
         "values": ["open", "closed"], "allow_multiple": false},
        {"key": "priority", "label": "Priority", "type": "number",
         "operators": ["eq", "gt", "lt"]}
      ],
      "max_expressions": 5
    }
"""

import json
import re
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from filterbox.domain.errors import SchemaConfigError
from filterbox.domain.operators import get_default_operators
from filterbox.domain.protocols import Autocompleter
from filterbox.domain.schema import (
    ConnectorConfig,
    FieldConfig,
    FilterSchema,
    FreeformFieldConfig,
    MultiValueConfig,
    OperatorConfig,
)
from filterbox.domain.types import Connector, FieldType, SerializedExpression
from filterbox.logger import get_logger

from .autocompleters import (
    DateAutocompleter,
    DateTimeAutocompleter,
    EnumAutocompleter,
    EnumValue,
    NumberAutocompleter,
    StaticAutocompleter,
)

logger = get_logger("schema_config")

__all__ = [
    "OperatorSpec",
    "ValueSpec",
    "FieldSpec",
    "ConnectorSpec",
    "FreeformSpec",
    "SchemaSpec",
    "load_schema_config",
    "load_serialized_expressions",
]


class MultiValueSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = Field(..., description="Number of values (-1 for unlimited)")
    separator: str = Field(default=",", description="Separator between typed values")
    labels: list[str] = Field(default_factory=list)


class OperatorSpec(BaseModel):
    """An operator declared in full instead of by key."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    symbol: Optional[str] = None
    value_required: bool = True
    multi_value: Optional[MultiValueSpec] = None

    def to_config(self) -> OperatorConfig:
        multi_value = (
            MultiValueConfig(
                count=self.multi_value.count,
                separator=self.multi_value.separator,
                labels=list(self.multi_value.labels),
            )
            if self.multi_value
            else None
        )
        return OperatorConfig(
            key=self.key,
            label=self.label,
            symbol=self.symbol,
            value_required=self.value_required,
            multi_value=multi_value,
        )


class ValueSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    description: Optional[str] = None


class FieldSpec(BaseModel):
    """One filterable field."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Field key used in the API")
    label: str = Field(..., description="Display label")
    type: FieldType = Field(default=FieldType.STRING, description="Value type; selects default operators")
    operators: list[Union[str, OperatorSpec]] = Field(
        default_factory=list, description="Operator keys from the type's defaults, or full operator specs"
    )
    values: list[Union[str, ValueSpec]] = Field(
        default_factory=list, description="Suggested values for the value step"
    )
    description: Optional[str] = None
    group: Optional[str] = None
    default_operator: Optional[str] = None
    allow_multiple: bool = True
    value_required: bool = True
    min: Optional[float] = Field(None, description="Lower bound for number fields")
    max: Optional[float] = Field(None, description="Upper bound for number fields")

    def _operators(self) -> list[OperatorConfig]:
        defaults = get_default_operators(self.type)
        if not self.operators:
            return defaults
        by_key = {op.key: op for op in defaults}
        operators: list[OperatorConfig] = []
        for entry in self.operators:
            if isinstance(entry, OperatorSpec):
                operators.append(entry.to_config())
            elif entry in by_key:
                operators.append(by_key[entry])
            else:
                raise SchemaConfigError(f'Unknown operator "{entry}" for {self.type.value} field "{self.key}"')
        return operators

    def _value_autocompleter(self) -> Optional[Autocompleter]:
        if self.values:
            if self.type == FieldType.ENUM or any(isinstance(v, ValueSpec) for v in self.values):
                return EnumAutocompleter(
                    [
                        EnumValue(key=v, label=v)
                        if isinstance(v, str)
                        else EnumValue(key=v.key, label=v.label, description=v.description)
                        for v in self.values
                    ]
                )
            return StaticAutocompleter([v for v in self.values if isinstance(v, str)])
        if self.type == FieldType.NUMBER:
            return NumberAutocompleter(min_value=self.min, max_value=self.max)
        if self.type == FieldType.DATE:
            return DateAutocompleter()
        if self.type == FieldType.DATETIME:
            return DateTimeAutocompleter()
        return None

    def to_config(self) -> FieldConfig:
        return FieldConfig(
            key=self.key,
            label=self.label,
            type=self.type,
            operators=self._operators(),
            description=self.description,
            group=self.group,
            default_operator=self.default_operator,
            allow_multiple=self.allow_multiple,
            value_required=self.value_required,
            value_autocompleter=self._value_autocompleter(),
        )


class ConnectorSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: Connector
    label: str


class FreeformSpec(BaseModel):
    """Settings for user-created fields."""

    model_config = ConfigDict(frozen=True)

    placeholder: Optional[str] = None
    create_label: Optional[str] = None
    type: FieldType = FieldType.STRING
    operators: list[str] = Field(default_factory=list)
    field_name_pattern: Optional[str] = Field(None, description="Regex a new field name must fully match")

    def to_config(self) -> FreeformFieldConfig:
        config = FreeformFieldConfig(placeholder=self.placeholder, type=self.type)
        if self.create_label is not None:
            config.create_label = self.create_label
        if self.operators:
            wanted = set(self.operators)
            config.operators = [op for op in get_default_operators(self.type) if op.key in wanted]
        if self.field_name_pattern:
            pattern = re.compile(self.field_name_pattern)
            config.validate_field_name = lambda name: pattern.fullmatch(name) is not None
        return config


class SchemaSpec(BaseModel):
    """Top level of a schema file."""

    model_config = ConfigDict(frozen=True)

    fields: list[FieldSpec] = Field(default_factory=list)
    connectors: Optional[list[ConnectorSpec]] = None
    max_expressions: Optional[int] = Field(None, ge=1)
    allow_freeform_fields: bool = False
    freeform: Optional[FreeformSpec] = None

    def to_filter_schema(self) -> FilterSchema:
        return FilterSchema(
            fields=[field.to_config() for field in self.fields],
            connectors=[ConnectorConfig(key=c.key, label=c.label) for c in self.connectors]
            if self.connectors
            else None,
            max_expressions=self.max_expressions,
            allow_freeform_fields=self.allow_freeform_fields,
            freeform_field_config=self.freeform.to_config() if self.freeform else None,
        )


def _read_json(path: Path, what: str):
    if not path.exists():
        logger.error(f"{what} file not found: {path}")
        raise SchemaConfigError(f"{what} file not found: {path}")

    logger.info(f"Loading {what.lower()} from: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        raise SchemaConfigError(f"Invalid JSON in {path}: {e}") from e


def load_schema_config(config_path: Union[str, Path]) -> FilterSchema:
    """
    Load a filter schema from a JSON file.

    Args:
        config_path: Path to the JSON schema file

    Returns:
        FilterSchema: Schema with default operators and value autocompleters filled in

    Raises:
        SchemaConfigError: If the file is missing, is not JSON, or does not describe a schema
    """
    path = Path(config_path)
    data = _read_json(path, "Schema")
    try:
        spec = SchemaSpec.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid schema in {path}: {e}")
        raise SchemaConfigError(f"Invalid schema in {path}: {e}") from e

    schema = spec.to_filter_schema()
    logger.info(f"Loaded schema with {len(schema.fields)} fields")
    return schema


def load_serialized_expressions(path: Union[str, Path]) -> list[SerializedExpression]:
    """Read a JSON list of ``{field, operator, value, connector?}`` objects."""
    path = Path(path)
    data = _read_json(path, "Expressions")
    if not isinstance(data, list):
        logger.error(f"Expected a JSON list in {path}")
        raise SchemaConfigError(f"Expected a JSON list in {path}")
    try:
        return [SerializedExpression.model_validate(item) for item in data]
    except ValidationError as e:
        logger.error(f"Invalid expressions in {path}: {e}")
        raise SchemaConfigError(f"Invalid expressions in {path}: {e}") from e
