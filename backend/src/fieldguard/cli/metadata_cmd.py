"""Metadata CLI commands: validate and get."""

from pathlib import Path

import click
import yaml

from fieldguard.metadata.store import Metadata
from fieldguard.metadata.validator import (
    _SUBDIR_SCHEMA,
    ValidationIssue,
    validate_metadata_roots,
    validate_yaml_file,
)


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single metadata file instead of the metadata directories.",
)
@click.pass_obj
def validate(config, strict: bool, target_path: Path | None):
    """Validate metadata files against JSON Schemas."""
    issues: list[ValidationIssue] = []

    if target_path is not None:
        # Single-file mode: infer schema from parent directory name
        parent = target_path.parent.name
        schema_name = _SUBDIR_SCHEMA.get(parent)
        if schema_name is None:
            click.echo(
                f"Warning: cannot determine schema for directory '{parent}'. "
                "Expected one of: fields, entityDefs.",
                err=True,
            )
        else:
            issues = validate_yaml_file(target_path, schema_name)
    else:
        for metadata_path in config.metadata_paths:
            if not metadata_path.exists():
                click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
                raise SystemExit(1)
        issues = validate_metadata_roots(list(config.metadata_paths), strict=strict)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors:
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s) found"
                + (f", {len(warnings)} warning(s)" if warnings else ""),
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    if target_path is None:
        loaded = Metadata.load(*config.metadata_paths)
        entity_types = sorted(loaded.get("entityDefs", {}))
        field_types = sorted(loaded.get("fields", {}))
        click.echo(f"\nLoaded {len(field_types)} field types, {len(entity_types)} entity types:")
        for name in entity_types:
            field_count = len(loaded.get(["entityDefs", name, "fields"], {}) or {})
            click.echo(f"  ✓ {name} ({field_count} fields)")

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))


@metadata.command("get")
@click.argument("key_path")
@click.pass_obj
def get_cmd(config, key_path: str):
    """Print the metadata value at a dotted KEY_PATH (e.g. fields.varchar)."""
    loaded = Metadata.load(*config.metadata_paths)
    value = loaded.get(key_path)
    if value is None:
        click.echo(f"Error: No metadata at '{key_path}'", err=True)
        raise SystemExit(1)
    click.echo(yaml.safe_dump(value, sort_keys=False, default_flow_style=False).rstrip())
