"""fieldguard validation system.

Usage:
    from fieldguard.validation import (
        FieldValidationManager,
        FieldValidatorRegistry,
        field_validator,
    )

    @field_validator("fieldguard.FieldValidators.VarcharType")
    class VarcharType:
        def check_required(self, entity, field, value):
            return bool(entity.get(field))

    manager.check(record, "name", "required")
"""

from fieldguard.validation.manager import (
    DEFAULT_VALIDATOR_NAMESPACE,
    FieldValidationManager,
)
from fieldguard.validation.registry import FieldValidatorRegistry, field_validator
from fieldguard.validation.types import (
    FieldValidationError,
    FieldValidationFailure,
    FieldValidator,
    check_method_name,
    raw_check_method_name,
    ucfirst,
)

__all__ = [
    # Types
    "FieldValidationError",
    "FieldValidationFailure",
    "FieldValidator",
    "check_method_name",
    "raw_check_method_name",
    "ucfirst",
    # Registry
    "FieldValidatorRegistry",
    "field_validator",
    # Manager
    "DEFAULT_VALIDATOR_NAMESPACE",
    "FieldValidationManager",
]
