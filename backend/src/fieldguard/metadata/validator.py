"""
metadata/validator.py: JSON Schema validation for fieldguard metadata files.

Validates field type and entity definition files against JSON Schemas, then
cross-checks that every entity field's ``type`` has a field type definition.

Usage:
    from fieldguard.metadata.validator import validate_metadata_roots, validate_yaml_file

    issues = validate_metadata_roots([Path("metadata"), Path("custom/metadata")])
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from fieldguard.metadata.store import METADATA_SUFFIXES

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Public data types
# ---------------------------------------------------------------------------

_SCHEMAS_DIR = Path(__file__).parent / "schemas"

# Map subdirectory name → schema filename
_SUBDIR_SCHEMA: dict[str, str] = {
    "fields": "field_type.schema.json",
    "entityDefs": "entity_defs.schema.json",
}


@dataclass
class ValidationIssue:
    """A single validation finding for a metadata file."""

    file: Path
    message: str
    path: str = ""          # JSON pointer path within the document, e.g. "fields/name/type"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _load_registry() -> Registry:
    """Build a jsonschema Registry containing all fieldguard schemas."""
    schema_names = [
        "_defs.schema.json",
        "field_type.schema.json",
        "entity_defs.schema.json",
    ]
    resources = []
    for name in schema_names:
        schema = _load_schema(name)
        resources.append(
            (schema["$id"], Resource(contents=schema, specification=DRAFT202012))
        )
    return Registry().with_resources(resources)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _metadata_files(directory: Path) -> list[Path]:
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix in METADATA_SUFFIXES
    )


def _parse(path: Path) -> tuple[Any, list[ValidationIssue]]:
    try:
        with path.open(encoding="utf-8") as fh:
            return yaml.safe_load(fh), []
    except yaml.YAMLError as exc:
        return None, [ValidationIssue(file=path, message=f"YAML parse error: {exc}")]
    except UnicodeDecodeError as exc:
        return None, [ValidationIssue(file=path, message=f"Encoding error (expected UTF-8): {exc}")]


def _check_field_type_references(
    metadata_dirs: list[Path],
) -> list[ValidationIssue]:
    """Warn about entity fields whose type has no fields/ definition.

    Roots are layered in order: field types from every root are known, and a
    field's type is the one set by the last root that sets it.
    """
    known_types: set[str] = set()
    for metadata_dir in metadata_dirs:
        fields_dir = metadata_dir / "fields"
        if fields_dir.is_dir():
            known_types.update(p.stem for p in _metadata_files(fields_dir))

    # (entity type, field) -> (field type, file that set it)
    field_types: dict[tuple[str, str], tuple[str, Path]] = {}
    for metadata_dir in metadata_dirs:
        entity_dir = metadata_dir / "entityDefs"
        if not entity_dir.is_dir():
            continue
        for path in _metadata_files(entity_dir):
            doc, parse_issues = _parse(path)
            if parse_issues or not isinstance(doc, dict):
                continue  # Reported by the schema pass
            fields = doc.get("fields")
            if not isinstance(fields, dict):
                continue
            for field_name, definition in fields.items():
                if not isinstance(definition, dict):
                    continue
                field_type = definition.get("type")
                if isinstance(field_type, str):
                    field_types[(path.stem, field_name)] = (field_type, path)

    issues: list[ValidationIssue] = []
    for (_, field_name), (field_type, path) in field_types.items():
        if field_type not in known_types:
            issues.append(
                ValidationIssue(
                    file=path,
                    message=f"Unknown field type '{field_type}'",
                    path=f"fields/{field_name}/type",
                    severity="warning",
                )
            )
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_yaml_file(
    yaml_path: Path,
    schema_name: str,
    *,
    registry: Registry | None = None,
) -> list[ValidationIssue]:
    """
    Validate a single metadata file (YAML or JSON) against the named schema.

    Args:
        yaml_path:   Path to the file to validate.
        schema_name: Filename of the schema (e.g. ``"entity_defs.schema.json"``).
        registry:    Pre-built schema registry.  Built automatically if omitted.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    raw, issues = _parse(yaml_path)
    if issues:
        return issues

    if raw is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if registry is None:
        registry = _load_registry()

    schema = _load_schema(schema_name)
    validator = Draft202012Validator(schema, registry=registry)

    for error in sorted(validator.iter_errors(raw), key=lambda e: e.path):
        issues.append(
            ValidationIssue(
                file=yaml_path,
                message=error.message,
                path=_json_path(error),
            )
        )

    return issues


def validate_metadata_roots(
    metadata_dirs: list[Path],
    *,
    strict: bool = False,
) -> list[ValidationIssue]:
    """
    Validate layered metadata roots as one metadata tree.

    Every file under each root's ``fields/`` and ``entityDefs/`` is checked
    against its JSON Schema. Field type references are then checked once
    across all roots, so an overlay may refer to field types that only a
    base root defines.

    Args:
        metadata_dirs: Metadata roots in load order (later roots override).
        strict:        If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of :class:`ValidationIssue` objects across all roots.
        Empty list means all files are valid.
    """
    all_issues: list[ValidationIssue] = []
    existing: list[Path] = []
    for metadata_dir in metadata_dirs:
        if metadata_dir.is_dir():
            existing.append(metadata_dir)
        else:
            all_issues.append(
                ValidationIssue(
                    file=metadata_dir,
                    message=f"Metadata directory does not exist: {metadata_dir}",
                )
            )
    if not existing:
        return all_issues

    # Build registry once, shared across all file validations
    try:
        registry = _load_registry()
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            ValidationIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema files: {exc}",
            )
        ]

    for metadata_dir in existing:
        for subdir, schema_name in _SUBDIR_SCHEMA.items():
            target = metadata_dir / subdir
            if not target.is_dir():
                continue
            for path in _metadata_files(target):
                logger.debug("Validating %s against %s", path, schema_name)
                all_issues.extend(validate_yaml_file(path, schema_name, registry=registry))

    all_issues.extend(_check_field_type_references(existing))

    if strict:
        for issue in all_issues:
            if issue.severity == "warning":
                issue.severity = "error"

    return all_issues


def validate_metadata_dir(
    metadata_dir: Path,
    *,
    strict: bool = False,
) -> list[ValidationIssue]:
    """Validate a single metadata root. See :func:`validate_metadata_roots`."""
    return validate_metadata_roots([metadata_dir], strict=strict)
