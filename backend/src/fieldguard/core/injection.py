"""Object factory with constructor injection.

Instantiates registered classes by identifier, filling constructor
parameters from a mapping of named services.
"""

import inspect
import logging
import typing
from typing import Any

from fieldguard.validation.registry import FieldValidatorRegistry

logger = logging.getLogger(__name__)


class InjectionError(Exception):
    """A constructor dependency could not be resolved."""

    def __init__(self, class_name: str, parameter: str):
        self.class_name = class_name
        self.parameter = parameter
        super().__init__(
            f"Cannot resolve parameter '{parameter}' for '{class_name}'. "
            "Register a service with that name or give the parameter a default."
        )


class InjectableFactory:
    """Creates instances of registered classes, injecting their dependencies.

    Each ``__init__`` parameter is resolved in order:
    1. Explicit override passed to create_with()
    2. A service registered under the parameter's name
    3. A service that is an instance of the parameter's annotated type
    4. The parameter's default value

    Example:
        factory = InjectableFactory({"metadata": metadata, "field_util": field_util})
        validator = factory.create("fieldguard.FieldValidators.EnumType")
    """

    def __init__(
        self,
        services: dict[str, Any] | None = None,
        registry: type[FieldValidatorRegistry] = FieldValidatorRegistry,
    ):
        self._services: dict[str, Any] = dict(services or {})
        self._registry = registry

    def register_service(self, name: str, instance: Any) -> None:
        """Make an instance available for injection under ``name``."""
        self._services[name] = instance

    def get_service(self, name: str) -> Any:
        return self._services.get(name)

    def create(self, class_name: str) -> Any:
        """Instantiate the class registered as ``class_name``.

        Raises:
            ValueError: If the identifier is not registered
            InjectionError: If a required constructor parameter cannot be resolved
        """
        return self.create_with(class_name)

    def create_with(self, class_name: str, **overrides: Any) -> Any:
        """Instantiate ``class_name``, preferring ``overrides`` for parameters."""
        cls = self._registry.get(class_name)
        kwargs = self._resolve_arguments(class_name, cls, overrides)
        logger.debug("Creating %s with %s", class_name, sorted(kwargs))
        return cls(**kwargs)

    def _resolve_arguments(
        self, class_name: str, cls: type, overrides: dict[str, Any]
    ) -> dict[str, Any]:
        signature = inspect.signature(cls)
        hints = self._type_hints(cls)
        kwargs: dict[str, Any] = {}

        for name, param in signature.parameters.items():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            if name in overrides:
                kwargs[name] = overrides[name]
                continue

            if name in self._services:
                kwargs[name] = self._services[name]
                continue

            by_type = self._find_by_type(hints.get(name))
            if by_type is not None:
                kwargs[name] = by_type
                continue

            if param.default is not param.empty:
                continue

            raise InjectionError(class_name, name)

        return kwargs

    def _find_by_type(self, annotation: Any) -> Any:
        if not isinstance(annotation, type) or annotation is object:
            return None
        for service in self._services.values():
            if isinstance(service, annotation):
                return service
        return None

    @staticmethod
    def _type_hints(cls: type) -> dict[str, Any]:
        init = cls.__init__
        if init is object.__init__:
            return {}
        try:
            return typing.get_type_hints(init)
        except (NameError, TypeError):
            # Unresolvable forward references; fall back to name-only injection
            logger.debug("Could not resolve type hints for %s", cls.__name__)
            return {}
