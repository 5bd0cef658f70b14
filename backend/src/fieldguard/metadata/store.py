"""Load and query field and entity metadata.

Metadata is a nested mapping assembled from YAML/JSON files laid out as:

    metadata/
      fields/<fieldType>.yaml        # field type definitions
      entityDefs/<EntityType>.yaml   # entity field definitions

Each file becomes the value under ``<subdirectory>/<file stem>``. Several
roots can be layered; later roots are deep-merged over earlier ones.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

import yaml

logger = logging.getLogger(__name__)

METADATA_SUFFIXES = (".yaml", ".yml", ".json")


class MetadataError(ValueError):
    """A metadata file could not be parsed into a mapping."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


def _split_path(path: str | Sequence[Any]) -> list[Any]:
    if isinstance(path, str):
        return path.split(".") if path else []
    return list(path)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new mapping with ``override`` merged recursively into ``base``.

    Nested mappings merge key by key; any other value (lists included)
    replaces the base value.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


class Metadata:
    """Key-path access to merged metadata.

    Example:
        metadata = Metadata.load(Path("metadata"))
        metadata.get(["fields", "varchar", "mandatoryValidationList"], [])
        metadata.get("entityDefs.Lead.fields.emailAddress.type")
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(data or {})

    @classmethod
    def load(cls, *roots: Path) -> "Metadata":
        """Load and merge metadata from one or more root directories."""
        metadata = cls()
        for root in roots:
            metadata.merge(load_metadata_dir(root))
        return metadata

    def get(self, path: str | Sequence[Any], default: Any = None) -> Any:
        """Get the value at a key path.

        Args:
            path: Sequence of keys, or a dot-separated string
            default: Returned if any segment is missing or not a mapping

        Returns:
            The stored value, or ``default``
        """
        segments = _split_path(path)
        if not segments:
            return self._data

        current: Any = self._data
        for segment in segments:
            if segment is None or not isinstance(current, dict):
                return default
            if segment not in current:
                return default
            current = current[segment]
        return current

    def set(self, path: str | Sequence[Any], value: Any) -> None:
        """Set the value at a key path, creating intermediate mappings."""
        segments = _split_path(path)
        if not segments:
            raise ValueError("Cannot set metadata at an empty path")

        current = self._data
        for segment in segments[:-1]:
            child = current.get(segment)
            if not isinstance(child, dict):
                child = {}
                current[segment] = child
            current = child
        current[segments[-1]] = value

    def merge(self, data: dict[str, Any]) -> None:
        """Deep-merge ``data`` over the current metadata."""
        self._data = deep_merge(self._data, data)

    def to_dict(self) -> dict[str, Any]:
        return self._data


class FieldUtil:
    """Field-level lookups over entity metadata."""

    def __init__(self, metadata: Metadata):
        self.metadata = metadata

    def get_entity_type_field_param(
        self, entity_type: str, field: str, param: str
    ) -> Any:
        """Get a parameter of a field definition, or None if undefined."""
        return self.metadata.get(["entityDefs", entity_type, "fields", field, param])

    def get_entity_type_field_list(self, entity_type: str) -> list[str]:
        """List the fields declared for an entity type, in declared order."""
        fields = self.metadata.get(["entityDefs", entity_type, "fields"], {})
        if not isinstance(fields, dict):
            return []
        return list(fields.keys())

    def get_field_type_validation_list(self, field_type: str) -> list[str]:
        """Rule types applicable to a field type.

        ``validationList`` entries come first, followed by any
        ``mandatoryValidationList`` entries not already listed.
        """
        validation_list = self.metadata.get(["fields", field_type, "validationList"], [])
        mandatory = self.metadata.get(
            ["fields", field_type, "mandatoryValidationList"], []
        )
        result = list(validation_list or [])
        for rule_type in mandatory or []:
            if rule_type not in result:
                result.append(rule_type)
        return result


# =============================================================================
# Loading
# =============================================================================


def _load_file(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as fh:
            if path.suffix == ".json":
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise MetadataError(path, f"parse error: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MetadataError(path, f"not valid UTF-8: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MetadataError(path, f"expected a mapping, got {type(data).__name__}")
    return data


def _metadata_files(directory: Path) -> Iterable[Path]:
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix in METADATA_SUFFIXES
    )


def load_metadata_dir(root: Path) -> dict[str, Any]:
    """Read every metadata file under ``root`` into a nested mapping.

    A missing root yields an empty mapping.
    """
    data: dict[str, Any] = {}
    if not root.is_dir():
        logger.warning("Metadata directory not found: %s", root)
        return data

    for subdir in sorted(p for p in root.iterdir() if p.is_dir()):
        section: dict[str, Any] = {}
        for path in _metadata_files(subdir):
            logger.debug("Loading metadata file %s", path)
            content = _load_file(path)
            existing = section.get(path.stem)
            if isinstance(existing, dict):
                section[path.stem] = deep_merge(existing, content)
            else:
                section[path.stem] = content
        if section:
            data[subdir.name] = section

    return data
