"""
Validation result types shared by the attribute and schema-definition validators
"""
from typing import Any, List, Optional

from pydantic import BaseModel, Field, computed_field


class ValidationError(BaseModel):
    """A single problem found in a payload or a schema definition"""
    field: str
    value: Any = None
    message: str
    rule: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Outcome of one validation pass.

    Errors and warnings keep the order in which they were found. Warnings
    never affect ``is_valid``.
    """
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, error: ValidationError) -> None:
        self.errors.append(error)

    def add_warning(self, warning: ValidationError) -> None:
        self.warnings.append(warning)
