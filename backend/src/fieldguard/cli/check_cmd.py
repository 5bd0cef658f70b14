"""Validation CLI commands: check a record, resolve a validator."""

from pathlib import Path

import click
import yaml

from fieldguard.config import build_manager
from fieldguard.core.entity import Record


def _load_record(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except UnicodeDecodeError as exc:
        raise click.BadParameter(
            f"{path} is not valid UTF-8: {exc}", param_hint="RECORD_FILE"
        ) from exc
    except yaml.YAMLError as exc:
        raise click.BadParameter(
            f"{path} could not be parsed: {exc}", param_hint="RECORD_FILE"
        ) from exc
    if not isinstance(data, dict):
        raise click.BadParameter(
            f"{path} must contain a mapping of field values", param_hint="RECORD_FILE"
        )
    return data


@click.command()
@click.argument("entity_type")
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Field to validate. Repeatable (default: all declared fields).",
)
@click.option(
    "--rule",
    default=None,
    help="Single rule type to check (default: every rule for each field type).",
)
@click.pass_obj
def check(config, entity_type: str, record_file: Path, fields: tuple, rule: str | None):
    """Validate the record in RECORD_FILE (YAML or JSON) as an ENTITY_TYPE."""
    manager = build_manager(config)
    data = _load_record(record_file)
    record = Record.from_dict(entity_type, data)

    failures = manager.validate(
        record, data, list(fields) or None, rule_types=[rule] if rule else None
    )

    if failures:
        for failure in failures:
            click.echo(click.style(f"✗ {failure}", fg="red"))
        click.echo(click.style(f"\n{len(failures)} failure(s)", fg="red", bold=True))
        raise SystemExit(1)

    click.echo(click.style("✓ Record is valid.", fg="green"))


@click.command()
@click.argument("entity_type")
@click.argument("field")
@click.pass_obj
def resolve(config, entity_type: str, field: str):
    """Show which validator class handles FIELD of ENTITY_TYPE."""
    manager = build_manager(config)
    class_name = manager.resolve_validator_class_name(entity_type, field)
    click.echo(class_name or "(none)")
