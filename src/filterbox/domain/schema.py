"""Schema configuration consumed by the engine.

A schema lists the fields a user can filter on, the operators each field
accepts, and the optional hooks (autocompleters, validators, serializers)
that customize each step. Schemas hold callables, so they are plain
dataclasses rather than pydantic models; see
:mod:`filterbox.application.schema_config` for the JSON-loadable form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from .types import (
    AutocompleteItem,
    ConditionValue,
    Connector,
    FieldType,
    FieldValue,
    FilterExpression,
    OperatorValue,
    SuggestionType,
    ValidationResult,
)

if TYPE_CHECKING:
    from .protocols.autocompleter import Autocompleter, CustomWidget

__all__ = [
    "MultiValueConfig",
    "OperatorConfig",
    "FieldConfig",
    "ConnectorConfig",
    "FreeformFieldConfig",
    "ValidationContext",
    "FilterSchema",
    "DEFAULT_CONNECTORS",
    "DEFAULT_CREATE_LABEL",
]

DEFAULT_CREATE_LABEL = "Create field: "


@dataclass
class MultiValueConfig:
    """Operators such as ``between`` or ``in`` that take several values."""

    count: int
    """Number of values required (-1 for unlimited)."""
    separator: str = ","
    labels: list[str] = field(default_factory=list)


@dataclass
class OperatorConfig:
    key: str
    label: str
    symbol: Optional[str] = None
    value_type: Optional[FieldType] = None
    value_required: bool = True
    value_autocompleter: Optional["Autocompleter"] = None
    custom_input: Optional["CustomWidget"] = None
    multi_value: Optional[MultiValueConfig] = None

    def to_value(self) -> OperatorValue:
        return OperatorValue(key=self.key, label=self.label, symbol=self.symbol)

    def to_item(self) -> AutocompleteItem:
        return AutocompleteItem(
            type=SuggestionType.OPERATOR,
            key=self.key,
            label=self.label,
            description=f"Symbol: {self.symbol}" if self.symbol else None,
        )


@dataclass
class FieldConfig:
    key: str
    label: str
    type: FieldType = FieldType.STRING
    operators: list[OperatorConfig] = field(default_factory=list)
    description: Optional[str] = None
    group: Optional[str] = None
    default_operator: Optional[str] = None
    allow_multiple: bool = True
    value_required: bool = True
    value_autocompleter: Optional["Autocompleter"] = None
    validate: Optional[Callable[[ConditionValue, "ValidationContext"], ValidationResult]] = None
    serialize: Optional[Callable[[ConditionValue], Any]] = None
    deserialize: Optional[Callable[[Any], ConditionValue]] = None

    def find_operator(self, key: str) -> Optional[OperatorConfig]:
        return next((op for op in self.operators if op.key == key), None)

    def to_value(self) -> FieldValue:
        return FieldValue(key=self.key, label=self.label, type=self.type)

    def to_item(self) -> AutocompleteItem:
        return AutocompleteItem(
            type=SuggestionType.FIELD,
            key=self.key,
            label=self.label,
            description=self.description,
            group=self.group,
        )


@dataclass
class ConnectorConfig:
    key: Connector
    label: str

    def to_item(self) -> AutocompleteItem:
        return AutocompleteItem(type=SuggestionType.CONNECTOR, key=self.key, label=self.label)


DEFAULT_CONNECTORS: tuple[ConnectorConfig, ...] = (
    ConnectorConfig(key="AND", label="AND"),
    ConnectorConfig(key="OR", label="OR"),
)


@dataclass
class FreeformFieldConfig:
    """Settings for fields the user types in that are not part of the schema."""

    placeholder: Optional[str] = None
    create_label: str = DEFAULT_CREATE_LABEL
    operators: Optional[list[OperatorConfig]] = None
    type: FieldType = FieldType.STRING
    validate_field_name: Optional[Callable[[str], bool]] = None


@dataclass
class ValidationContext:
    """Passed to field-level validators."""

    field: FieldConfig
    operator: OperatorConfig
    expressions: list[FilterExpression]
    schema: "FilterSchema"


@dataclass
class FilterSchema:
    fields: list[FieldConfig]
    connectors: Optional[list[ConnectorConfig]] = None
    validate: Optional[Callable[[list[FilterExpression]], ValidationResult]] = None
    serialize: Optional[Callable[[list[FilterExpression]], Any]] = None
    deserialize: Optional[Callable[[Any], list[FilterExpression]]] = None
    max_expressions: Optional[int] = None
    allow_freeform_fields: bool = False
    freeform_field_config: Optional[FreeformFieldConfig] = None

    def find_field(self, key: str) -> Optional[FieldConfig]:
        return next((f for f in self.fields if f.key == key), None)

    def resolve_field(self, key: str) -> Optional[FieldConfig]:
        """Find a configured field, or build the freeform field for ``key`` when allowed."""
        config = self.find_field(key)
        if config is None and self.allow_freeform_fields:
            config = self.freeform_field(key)
        return config

    def freeform_field(self, name: str) -> FieldConfig:
        # Local import: the default operator tables depend on this module
        from .operators import get_default_operators

        options = self.freeform_field_config or FreeformFieldConfig()
        operators = options.operators if options.operators else get_default_operators(options.type)
        return FieldConfig(key=name, label=name, type=options.type, operators=list(operators))

    def get_connectors(self) -> list[ConnectorConfig]:
        return list(self.connectors) if self.connectors else list(DEFAULT_CONNECTORS)

    @property
    def default_connector(self) -> Connector:
        return self.get_connectors()[0].key
