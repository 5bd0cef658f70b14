"""Field validation manager.

Decides whether a field value satisfies a validation rule by dispatching to
a per-field validator resolved from metadata:

1. Field type and configured rule value come from the entity's field definition
2. Optional rules with no configured value (None or False) pass immediately
3. Otherwise the validator's check_<rule> runs against the entity, then its
   raw_check_<rule> runs against the raw input data

Validators are instantiated once per (entity type, field) and cached for the
lifetime of the manager, including the "no validator" outcome.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fieldguard.validation.registry import FieldValidatorRegistry
from fieldguard.validation.types import (
    FieldValidationError,
    FieldValidationFailure,
    FieldValidator,
    check_method_name,
    raw_check_method_name,
    ucfirst,
)

if TYPE_CHECKING:
    from fieldguard.core.entity import Entity
    from fieldguard.core.injection import InjectableFactory
    from fieldguard.metadata.store import FieldUtil, Metadata

logger = logging.getLogger(__name__)

DEFAULT_VALIDATOR_NAMESPACE = "fieldguard.FieldValidators"


class FieldValidationManager:
    """Runs field-level validation rules against entities.

    Not thread-safe: the validator cache is a plain dict mutated during
    check(). Share an instance across threads only with external locking.
    """

    def __init__(
        self,
        metadata: Metadata,
        field_util: FieldUtil,
        injectable_factory: InjectableFactory,
        validator_namespace: str = DEFAULT_VALIDATOR_NAMESPACE,
        registry: type[FieldValidatorRegistry] = FieldValidatorRegistry,
    ):
        self.metadata = metadata
        self.field_util = field_util
        self.injectable_factory = injectable_factory
        self.validator_namespace = validator_namespace
        self._registry = registry
        self._checker_cache: dict[tuple[str, str], FieldValidator | None] = {}

    def check(
        self,
        entity: Entity,
        field: str,
        rule_type: str,
        data: Any = None,
    ) -> bool:
        """Check whether ``field`` of ``entity`` satisfies ``rule_type``.

        Args:
            entity: The record being validated
            field: Field name
            rule_type: Rule to check (e.g., "required", "maxLength")
            data: Raw input payload for raw checks; defaults to an empty dict

        Returns:
            True if the rule passes or does not apply, False otherwise
        """
        if data is None:
            data = {}

        entity_type = entity.entity_type

        field_type = self.field_util.get_entity_type_field_param(entity_type, field, "type")
        validation_value = self.field_util.get_entity_type_field_param(
            entity_type, field, rule_type
        )

        mandatory_validation_list = self.metadata.get(
            ["fields", field_type, "mandatoryValidationList"], []
        ) or []

        if rule_type not in mandatory_validation_list:
            if validation_value is None or validation_value is False:
                return True

        if not self._process_field_check(
            entity_type, field_type, rule_type, entity, field, validation_value
        ):
            logger.debug("%s.%s failed %s check", entity_type, field, rule_type)
            return False

        if not self._process_field_raw_check(
            entity_type, field_type, rule_type, data, field, validation_value
        ):
            logger.debug("%s.%s failed %s raw check", entity_type, field, rule_type)
            return False

        return True

    def validate(
        self,
        entity: Entity,
        data: Any = None,
        fields: list[str] | None = None,
        rule_types: list[str] | None = None,
    ) -> list[FieldValidationFailure]:
        """Run every applicable rule for each field and collect the failures.

        Rule types come from the field type's validationList followed by its
        mandatoryValidationList, unless ``rule_types`` names them explicitly.
        Fields without a declared type are skipped.

        Args:
            entity: The record being validated
            data: Raw input payload passed to raw checks
            fields: Fields to validate; defaults to all declared fields
            rule_types: Rules to check on every field; defaults to each
                field type's rule list

        Returns:
            Failures in field order, then rule order. Empty list means valid.
        """
        entity_type = entity.entity_type
        if fields is None:
            fields = self.field_util.get_entity_type_field_list(entity_type)

        failures: list[FieldValidationFailure] = []
        for field in fields:
            field_type = self.field_util.get_entity_type_field_param(
                entity_type, field, "type"
            )
            if not field_type:
                continue

            if rule_types is None:
                field_rule_types = self.field_util.get_field_type_validation_list(field_type)
            else:
                field_rule_types = rule_types

            for rule_type in field_rule_types:
                if self.check(entity, field, rule_type, data):
                    continue
                failures.append(
                    FieldValidationFailure(
                        entity_type=entity_type,
                        field=field,
                        rule_type=rule_type,
                        value=self.field_util.get_entity_type_field_param(
                            entity_type, field, rule_type
                        ),
                    )
                )

        return failures

    def process(
        self,
        entity: Entity,
        data: Any = None,
        fields: list[str] | None = None,
        rule_types: list[str] | None = None,
    ) -> None:
        """Validate like validate() but raise on any failure.

        Raises:
            FieldValidationError: Carrying every failure found
        """
        failures = self.validate(entity, data, fields, rule_types)
        if failures:
            raise FieldValidationError(failures)

    def resolve_validator_class_name(
        self, entity_type: str, field: str, field_type: str | None = None
    ) -> str | None:
        """Resolve the validator identifier for a field without instantiating it.

        Resolution order:
        1. entityDefs.<entityType>.fields.<field>.validatorClassName
        2. fields.<fieldType>.validatorClassName
        3. <namespace>.<FieldType>Type, if registered
        """
        if field_type is None:
            field_type = self.field_util.get_entity_type_field_param(
                entity_type, field, "type"
            )

        class_name = self.metadata.get(
            ["entityDefs", entity_type, "fields", field, "validatorClassName"]
        )
        if class_name:
            logger.debug(
                "Validator for %s.%s from entity definition: %s",
                entity_type,
                field,
                class_name,
            )
            return class_name

        if not field_type:
            return None

        class_name = self.metadata.get(["fields", field_type, "validatorClassName"])
        if class_name:
            logger.debug(
                "Validator for %s.%s from field type '%s': %s",
                entity_type,
                field,
                field_type,
                class_name,
            )
            return class_name

        class_name = f"{self.validator_namespace}.{ucfirst(field_type)}Type"
        if self._registry.is_registered(class_name):
            logger.debug(
                "Validator for %s.%s by convention: %s", entity_type, field, class_name
            )
            return class_name

        return None

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _process_field_check(
        self,
        entity_type: str,
        field_type: str | None,
        rule_type: str,
        entity: Entity,
        field: str,
        validation_value: Any,
    ) -> bool:
        checker = self._get_field_type_checker(entity_type, field, field_type)
        if checker is None:
            return True

        method = getattr(checker, check_method_name(rule_type), None)
        if not callable(method):
            return True

        return bool(method(entity, field, validation_value))

    def _process_field_raw_check(
        self,
        entity_type: str,
        field_type: str | None,
        rule_type: str,
        data: Any,
        field: str,
        validation_value: Any,
    ) -> bool:
        checker = self._get_field_type_checker(entity_type, field, field_type)
        if checker is None:
            return True

        method = getattr(checker, raw_check_method_name(rule_type), None)
        if not callable(method):
            return True

        return bool(method(data, field, validation_value))

    def _get_field_type_checker(
        self, entity_type: str, field: str, field_type: str | None
    ) -> FieldValidator | None:
        key = (entity_type, field)
        if key not in self._checker_cache:
            self._load_field_type_checker(entity_type, field, field_type)
        return self._checker_cache[key]

    def _load_field_type_checker(
        self, entity_type: str, field: str, field_type: str | None
    ) -> None:
        key = (entity_type, field)
        class_name = self.resolve_validator_class_name(entity_type, field, field_type)

        if not class_name:
            logger.debug("No validator for %s.%s", entity_type, field)
            self._checker_cache[key] = None
            return

        self._checker_cache[key] = self.injectable_factory.create(class_name)
