"""Core types for the fieldguard validation system.

This module defines the types shared by the manager and its callers:
- FieldValidator: the duck-typed contract a per-field validator follows
- FieldValidationFailure: a single failed (field, rule type) check
- FieldValidationError: raised when a bulk validation run finds failures
"""

import re
from dataclasses import dataclass
from typing import Any, Protocol

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def ucfirst(value: str) -> str:
    """Upper-case the first character only ("maxLength" -> "MaxLength")."""
    return value[:1].upper() + value[1:]


def rule_method_suffix(rule_type: str) -> str:
    """Convert a rule type tag to the snake_case suffix of its check methods.

    "required" -> "required", "maxLength" -> "max_length",
    "validUrl" -> "valid_url", "max-count" -> "max_count".
    """
    snake = _CAMEL_BOUNDARY.sub("_", rule_type)
    return re.sub(r"[^0-9a-zA-Z_]", "_", snake).lower()


def check_method_name(rule_type: str) -> str:
    """Name of the entity-based check method for a rule type."""
    return f"check_{rule_method_suffix(rule_type)}"


def raw_check_method_name(rule_type: str) -> str:
    """Name of the raw-data check method for a rule type."""
    return f"raw_check_{rule_method_suffix(rule_type)}"


class FieldValidator(Protocol):
    """Contract for per-field-type validators.

    Validators do not implement a fixed interface. For each rule type they
    may expose either or both of:

        def check_<rule>(self, entity: Entity, field: str, value: Any) -> bool
        def raw_check_<rule>(self, data: dict, field: str, value: Any) -> bool

    where <rule> is the snake_case form of the rule type. A missing method
    means the rule does not apply to this field type and is treated as a pass.

    Example:
        @field_validator("fieldguard.FieldValidators.VarcharType")
        class VarcharType:
            def check_required(self, entity, field, value):
                return bool(entity.get(field))

            def check_max_length(self, entity, field, value):
                return len(entity.get(field) or "") <= value
    """


@dataclass(frozen=True)
class FieldValidationFailure:
    """A single failed rule check.

    Attributes:
        entity_type: Entity type the record belongs to (e.g., "Lead")
        field: Field whose value failed the check
        rule_type: The rule that failed (e.g., "required", "maxLength")
        value: The configured rule value (pattern, threshold, flag), if any
    """

    entity_type: str
    field: str
    rule_type: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "entityType": self.entity_type,
            "field": self.field,
            "type": self.rule_type,
            "value": self.value,
        }

    def __str__(self) -> str:
        return f"{self.entity_type}.{self.field}: {self.rule_type}"


class FieldValidationError(Exception):
    """Raised by FieldValidationManager.process when any check fails."""

    def __init__(self, failures: list[FieldValidationFailure]):
        self.failures = list(failures)
        super().__init__(str(self))

    @property
    def first(self) -> FieldValidationFailure | None:
        return self.failures[0] if self.failures else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": "validationFailure",
            "failures": [f.to_dict() for f in self.failures],
        }

    def __str__(self) -> str:
        if not self.failures:
            return "Field validation failed"
        details = ", ".join(str(f) for f in self.failures)
        return f"Field validation failed: {details}"

