"""Structured validation results."""

from typing import Literal

from pydantic import BaseModel, Field

__all__ = ["ValidationErrorType", "ValidationError", "ValidationWarning", "ValidationResult"]

ValidationErrorType = Literal["field", "operator", "value", "expression", "schema"]


class ValidationError(BaseModel):
    """A problem that makes an expression list invalid."""

    type: ValidationErrorType
    message: str
    expression_index: int | None = None
    field: str | None = None


class ValidationWarning(BaseModel):
    """A problem worth reporting that does not invalidate the list."""

    message: str
    expression_index: int | None = None
    field: str | None = None


class ValidationResult(BaseModel):
    """Outcome of a validation pass."""

    valid: bool = True
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, *errors: ValidationError) -> "ValidationResult":
        return cls(valid=False, errors=list(errors))
