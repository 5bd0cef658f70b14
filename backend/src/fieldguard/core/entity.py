"""Entity contract consumed by the validation manager."""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Entity(Protocol):
    """Protocol for records passed to field validators.

    The manager itself only reads ``entity_type``. Validators read field
    values through ``get`` and ``has``.
    """

    @property
    def entity_type(self) -> str:
        ...

    def get(self, field: str, default: Any = None) -> Any:
        ...

    def has(self, field: str) -> bool:
        ...


@dataclass
class Record:
    """Dict-backed Entity implementation.

    Attributes:
        entity_type: Entity type name (e.g., "Lead")
        values: Field values keyed by field name
    """

    entity_type: str
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, field: str, default: Any = None) -> Any:
        return self.values.get(field, default)

    def has(self, field: str) -> bool:
        return field in self.values

    def set(self, field: str, value: Any) -> None:
        self.values[field] = value

    @classmethod
    def from_dict(cls, entity_type: str, data: dict[str, Any]) -> "Record":
        return cls(entity_type=entity_type, values=dict(data))
