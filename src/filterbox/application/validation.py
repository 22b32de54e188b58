"""Validation of expressions against a schema, and of schemas themselves."""

from typing import Any, Optional, Sequence

from filterbox.domain.schema import FilterSchema, ValidationContext
from filterbox.domain.types import FilterExpression, ValidationError, ValidationResult, ValidationWarning

__all__ = ["validate_expression", "validate_expressions", "validate_schema", "is_empty_value"]


def is_empty_value(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _validate_multi_value(
    value: Any, count: int, field_key: str, operator_key: str, index: Optional[int]
) -> list[ValidationError]:
    if not isinstance(value, (list, tuple)):
        return [
            ValidationError(
                type="value",
                message=f'Value for "{operator_key}" operator on field "{field_key}" must be a list',
                expression_index=index,
                field=field_key,
            )
        ]
    if count == -1 and not value:
        return [
            ValidationError(
                type="value",
                message=f'Operator "{operator_key}" on field "{field_key}" requires at least one value',
                expression_index=index,
                field=field_key,
            )
        ]
    if count != -1 and len(value) != count:
        return [
            ValidationError(
                type="value",
                message=(
                    f'Operator "{operator_key}" on field "{field_key}" requires exactly {count} values, '
                    f"but got {len(value)}"
                ),
                expression_index=index,
                field=field_key,
            )
        ]
    return []


def validate_expression(
    expression: FilterExpression,
    schema: FilterSchema,
    expression_index: Optional[int] = None,
    expressions: Optional[Sequence[FilterExpression]] = None,
) -> ValidationResult:
    """
    Check one expression: known field, operator valid for the field,
    multi-value arity, required value and the field's own validator.
    """
    condition = expression.condition
    field_key = condition.field.key
    field = schema.resolve_field(field_key)
    if field is None:
        return ValidationResult.failed(
            ValidationError(
                type="field",
                message=f'Field "{field_key}" not found in schema',
                expression_index=expression_index,
                field=field_key,
            )
        )

    errors: list[ValidationError] = []
    operator = field.find_operator(condition.operator.key)
    if operator is None:
        errors.append(
            ValidationError(
                type="operator",
                message=f'Operator "{condition.operator.key}" is not valid for field "{field_key}"',
                expression_index=expression_index,
                field=field_key,
            )
        )

    if operator is not None and operator.multi_value is not None:
        errors.extend(
            _validate_multi_value(
                condition.value.raw, operator.multi_value.count, field_key, operator.key, expression_index
            )
        )
    elif field.value_required and is_empty_value(condition.value.raw):
        errors.append(
            ValidationError(
                type="value",
                message=f'Value is required for field "{field_key}"',
                expression_index=expression_index,
                field=field_key,
            )
        )

    if operator is not None and field.validate is not None:
        context = ValidationContext(
            field=field, operator=operator, expressions=list(expressions or [expression]), schema=schema
        )
        result = field.validate(condition.value, context)
        for error in result.errors:
            errors.append(
                error.model_copy(
                    update={
                        "expression_index": error.expression_index
                        if error.expression_index is not None
                        else expression_index,
                        "field": error.field or field_key,
                    }
                )
            )

    return ValidationResult(valid=not errors, errors=errors)


def validate_expressions(expressions: Sequence[FilterExpression], schema: FilterSchema) -> ValidationResult:
    """Validate every expression plus the list-wide rules of ``schema``."""
    errors: list[ValidationError] = []
    warnings: list[ValidationWarning] = []

    if schema.max_expressions is not None and len(expressions) > schema.max_expressions:
        errors.append(
            ValidationError(
                type="schema",
                message=(
                    f"Maximum of {schema.max_expressions} expressions allowed, "
                    f"but {len(expressions)} provided"
                ),
            )
        )

    usage: dict[str, list[int]] = {}
    last = len(expressions) - 1
    for index, expression in enumerate(expressions):
        errors.extend(validate_expression(expression, schema, index, expressions).errors)
        usage.setdefault(expression.condition.field.key, []).append(index)
        if index < last and not expression.connector:
            warnings.append(
                ValidationWarning(
                    message=f"Expression {index + 1} has no connector to the next expression",
                    expression_index=index,
                    field=expression.condition.field.key,
                )
            )

    for field in schema.fields:
        occurrences = usage.get(field.key, [])
        if not field.allow_multiple and len(occurrences) > 1:
            errors.append(
                ValidationError(
                    type="field",
                    message=(
                        f'Field "{field.label}" can only be used once, '
                        f"but appears {len(occurrences)} times"
                    ),
                    expression_index=occurrences[1],
                    field=field.key,
                )
            )

    if schema.validate is not None:
        result = schema.validate(list(expressions))
        if not result.valid:
            errors.extend(result.errors)
        warnings.extend(result.warnings)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_schema(schema: FilterSchema) -> ValidationResult:
    """Structural checks: at least one field, unique keys, every field has operators."""
    if not schema.fields:
        return ValidationResult.failed(ValidationError(type="schema", message="Schema must have at least one field"))

    errors: list[ValidationError] = []
    seen: set[str] = set()
    for field in schema.fields:
        if field.key in seen:
            errors.append(
                ValidationError(type="schema", message=f'Duplicate field key: "{field.key}"', field=field.key)
            )
        seen.add(field.key)
        if not field.operators:
            errors.append(
                ValidationError(
                    type="schema",
                    message=f'Field "{field.key}" must have at least one operator',
                    field=field.key,
                )
            )
    return ValidationResult(valid=not errors, errors=errors)
