"""Field validator registry for fieldguard.

Maps validator class identifiers (as written in metadata under
``validatorClassName``) to the classes that implement them.
"""

from typing import Callable


class FieldValidatorRegistry:
    """Registry for field validator classes.

    Validators must be explicitly registered before metadata can reference
    them. The manager's convention fallback
    (``<namespace>.<FieldType>Type``) only applies to identifiers found here.

    Example:
        # Register a validator for the "varchar" field type
        FieldValidatorRegistry.register(
            "fieldguard.FieldValidators.VarcharType", VarcharType
        )

        # Later, resolved from metadata by the object factory
        validator_class = FieldValidatorRegistry.get(
            "fieldguard.FieldValidators.VarcharType"
        )
    """

    _validators: dict[str, type] = {}

    @classmethod
    def register(cls, name: str, validator_class: type) -> None:
        """Register a validator class by identifier.

        Idempotent - re-registering the same name is a no-op.

        Args:
            name: Class identifier (e.g., "fieldguard.FieldValidators.EnumType")
            validator_class: Class implementing check_<rule> / raw_check_<rule> methods
        """
        if name in cls._validators:
            return  # Already registered, no-op
        cls._validators[name] = validator_class

    @classmethod
    def get(cls, name: str) -> type:
        """Get a registered validator class by identifier.

        Raises:
            ValueError: If the identifier is not registered
        """
        if name not in cls._validators:
            raise ValueError(
                f"Field validator '{name}' is not registered. "
                "Field validators must be explicitly registered at application startup."
            )
        return cls._validators[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if a validator identifier is registered."""
        return name in cls._validators

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered validator identifiers."""
        return sorted(cls._validators.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._validators.clear()


def field_validator(name: str) -> Callable[[type], type]:
    """Class decorator registering a field validator.

    Usage:
        @field_validator("fieldguard.FieldValidators.EmailType")
        class EmailType:
            def check_required(self, entity, field, value):
                ...
    """

    def decorator(validator_class: type) -> type:
        FieldValidatorRegistry.register(name, validator_class)
        return validator_class

    return decorator
