"""Token projection.

Tokens are never stored. They are recomputed from the expression list and
the pending field/operator each time they are needed, which keeps them from
drifting out of sync with the expressions they describe.
"""

from typing import Optional, Sequence

from filterbox.domain.types import (
    ConnectorValue,
    FieldValue,
    FilterExpression,
    OperatorValue,
    TokenData,
    TokenType,
)

__all__ = ["PENDING_BLOCK_SIZE", "project_tokens", "count_tokens"]

PENDING_BLOCK_SIZE = 4
"""Slots reserved per committed expression when positioning pending tokens."""


def project_tokens(
    expressions: Sequence[FilterExpression],
    current_field: Optional[FieldValue] = None,
    current_operator: Optional[OperatorValue] = None,
) -> tuple[TokenData, ...]:
    """
    Project expressions and the in-progress condition onto tokens.

    Committed expressions yield field, operator and value tokens, plus a
    connector token when the expression has one, with dense positions.
    A pending field/operator is appended with ``expression_index == -1``
    at ``len(expressions) * 4`` (and ``+ 1`` for the operator).

    Args:
        expressions: Committed expressions in order
        current_field: Field of the expression being built, if any
        current_operator: Operator of the expression being built, if any

    Returns:
        Tokens in display order
    """
    tokens: list[TokenData] = []
    position = 0

    for index, expression in enumerate(expressions):
        condition = expression.condition
        parts: list[tuple[TokenType, object]] = [
            (TokenType.FIELD, condition.field),
            (TokenType.OPERATOR, condition.operator),
            (TokenType.VALUE, condition.value),
        ]
        if expression.connector:
            parts.append(
                (TokenType.CONNECTOR, ConnectorValue(key=expression.connector, label=expression.connector))
            )
        for token_type, value in parts:
            tokens.append(
                TokenData(
                    id=f"{index}-{token_type.value}",
                    type=token_type,
                    value=value,  # type: ignore[arg-type]
                    position=position,
                    expression_index=index,
                )
            )
            position += 1

    base_position = len(expressions) * PENDING_BLOCK_SIZE
    if current_field is not None:
        tokens.append(
            TokenData(
                id="pending-field",
                type=TokenType.FIELD,
                value=current_field,
                position=base_position,
                expression_index=-1,
                is_pending=True,
            )
        )
    if current_operator is not None:
        tokens.append(
            TokenData(
                id="pending-operator",
                type=TokenType.OPERATOR,
                value=current_operator,
                position=base_position + 1,
                expression_index=-1,
                is_pending=True,
            )
        )

    return tuple(tokens)


def count_tokens(expressions: Sequence[FilterExpression]) -> int:
    """Number of committed tokens: three per expression plus one per connector."""
    return sum(4 if expression.connector else 3 for expression in expressions)
