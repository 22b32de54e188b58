"""Default operator tables per field type."""

from .schema import MultiValueConfig, OperatorConfig
from .types import FieldType

__all__ = [
    "STRING_OPERATORS",
    "NUMBER_OPERATORS",
    "DATE_OPERATORS",
    "BOOLEAN_OPERATORS",
    "ENUM_OPERATORS",
    "ID_OPERATORS",
    "get_default_operators",
]

STRING_OPERATORS: tuple[OperatorConfig, ...] = (
    OperatorConfig(key="eq", label="equals", symbol="="),
    OperatorConfig(key="neq", label="not equals", symbol="≠"),
    OperatorConfig(key="contains", label="contains"),
    OperatorConfig(key="startsWith", label="starts with"),
    OperatorConfig(key="endsWith", label="ends with"),
    OperatorConfig(key="like", label="like"),
)

NUMBER_OPERATORS: tuple[OperatorConfig, ...] = (
    OperatorConfig(key="eq", label="equals", symbol="="),
    OperatorConfig(key="neq", label="not equals", symbol="≠"),
    OperatorConfig(key="gt", label="greater than", symbol=">"),
    OperatorConfig(key="gte", label="greater or equal", symbol="≥"),
    OperatorConfig(key="lt", label="less than", symbol="<"),
    OperatorConfig(key="lte", label="less or equal", symbol="≤"),
    OperatorConfig(
        key="between",
        label="between",
        multi_value=MultiValueConfig(count=2, separator="and", labels=["from", "to"]),
    ),
)

DATE_OPERATORS: tuple[OperatorConfig, ...] = (
    OperatorConfig(key="before", label="before"),
    OperatorConfig(key="after", label="after"),
    OperatorConfig(key="on", label="on"),
    OperatorConfig(
        key="between",
        label="between",
        multi_value=MultiValueConfig(count=2, separator="and", labels=["from", "to"]),
    ),
)

BOOLEAN_OPERATORS: tuple[OperatorConfig, ...] = (OperatorConfig(key="is", label="is"),)

ENUM_OPERATORS: tuple[OperatorConfig, ...] = (
    OperatorConfig(key="eq", label="is", symbol="="),
    OperatorConfig(key="neq", label="is not", symbol="≠"),
    OperatorConfig(key="in", label="in", multi_value=MultiValueConfig(count=-1, separator=",")),
)

ID_OPERATORS: tuple[OperatorConfig, ...] = (
    OperatorConfig(key="eq", label="equals", symbol="="),
    OperatorConfig(key="in", label="in list"),
)

_OPERATORS_BY_TYPE: dict[FieldType, tuple[OperatorConfig, ...]] = {
    FieldType.STRING: STRING_OPERATORS,
    FieldType.NUMBER: NUMBER_OPERATORS,
    FieldType.DATE: DATE_OPERATORS,
    FieldType.DATETIME: DATE_OPERATORS,
    FieldType.BOOLEAN: BOOLEAN_OPERATORS,
    FieldType.ENUM: ENUM_OPERATORS,
    FieldType.ID: ID_OPERATORS,
}


def get_default_operators(field_type: FieldType | str) -> list[OperatorConfig]:
    """Return a fresh list of the default operators for ``field_type``.

    Custom and unknown types fall back to the string operators.
    """
    try:
        field_type = FieldType(field_type)
    except ValueError:
        return list(STRING_OPERATORS)
    return list(_OPERATORS_BY_TYPE.get(field_type, STRING_OPERATORS))
