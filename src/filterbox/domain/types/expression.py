"""Domain models for filter expressions.

Expressions are immutable: every edit produces new model instances via
``model_copy(update=...)`` so that callers holding an older list never see
it change underneath them.
"""

from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .step import FieldType, SuggestionType, TokenType

__all__ = [
    "Connector",
    "FieldValue",
    "OperatorValue",
    "ConditionValue",
    "ConnectorValue",
    "FilterCondition",
    "FilterExpression",
    "AutocompleteItem",
    "SerializedExpression",
    "TokenValue",
    "TokenData",
]

Connector = Literal["AND", "OR"]


class FieldValue(BaseModel):
    """The field part of a condition as it was selected."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Field key used in the API")
    label: str = Field(..., description="Display label")
    type: FieldType = Field(default=FieldType.STRING, description="Value type of the field")


class OperatorValue(BaseModel):
    """The operator part of a condition as it was selected."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Operator key (e.g. 'eq')")
    label: str = Field(..., description="Display label (e.g. 'equals')")
    symbol: str | None = Field(None, description="Compact symbol (e.g. '=')")


class ConditionValue(BaseModel):
    """A condition value in its three representations."""

    model_config = ConfigDict(frozen=True)

    raw: Any = Field(None, description="Value as produced by the input (str, number, list, ...)")
    display: str = Field(..., description="Human readable form shown in the token")
    serialized: Any = Field(..., description="Form sent over the wire (string, number, list, ...)")

    @classmethod
    def from_text(cls, text: str) -> "ConditionValue":
        """Build a value whose three forms are all ``text``."""
        return cls(raw=text, display=text, serialized=text)


class ConnectorValue(BaseModel):
    """Connector shown as a token."""

    model_config = ConfigDict(frozen=True)

    key: Connector
    label: str


class FilterCondition(BaseModel):
    """field → operator → value."""

    model_config = ConfigDict(frozen=True)

    field: FieldValue
    operator: OperatorValue
    value: ConditionValue


class FilterExpression(BaseModel):
    """A condition optionally linked to the *next* expression by a connector."""

    model_config = ConfigDict(frozen=True)

    condition: FilterCondition
    connector: Connector | None = Field(None, description="Connector to the next expression")

    def with_connector(self, connector: Connector | None) -> "FilterExpression":
        return self.model_copy(update={"connector": connector})

    def with_operator(self, operator: OperatorValue) -> "FilterExpression":
        return self.model_copy(update={"condition": self.condition.model_copy(update={"operator": operator})})

    def with_value(self, value: ConditionValue) -> "FilterExpression":
        return self.model_copy(update={"condition": self.condition.model_copy(update={"value": value})})


class AutocompleteItem(BaseModel):
    """One entry in the suggestion dropdown."""

    model_config = ConfigDict(frozen=True)

    type: SuggestionType = Field(default=SuggestionType.VALUE, description="What kind of suggestion this is")
    key: str = Field(..., description="Machine value of the suggestion")
    label: str = Field(..., description="Text shown in the dropdown")
    description: str | None = Field(None, description="Secondary text")
    disabled: bool = Field(default=False, description="Whether the item can be selected")
    group: str | None = Field(None, description="Group heading for the item")
    metadata: Any = Field(None, description="Free-form payload for custom sources")


class SerializedExpression(BaseModel):
    """Wire form of an expression: ``{field, operator, value, connector?}``."""

    field: str
    operator: str
    value: Any = None
    connector: Connector | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


TokenValue = Union[FieldValue, OperatorValue, ConditionValue, ConnectorValue]


@dataclass(frozen=True, slots=True)
class TokenData:
    """A display/interaction unit derived from expressions.

    Never stored; always produced by :func:`filterbox.core.tokens.project_tokens`.
    """

    id: str
    type: TokenType
    value: TokenValue
    position: int
    expression_index: int
    """Index of the owning expression, or -1 for pending tokens."""
    is_pending: bool = False
