"""Tests for fieldguard CLI commands."""

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from fieldguard.cli.main import cli
from fieldguard.validation import FieldValidatorRegistry

_METADATA_DIR = Path(__file__).resolve().parents[2] / "metadata"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clear_registry(monkeypatch):
    """Start each test without registered validators or env overrides."""
    for name in (
        "FIELDGUARD_METADATA_PATH",
        "FIELDGUARD_PLUGINS",
        "FIELDGUARD_VALIDATOR_NAMESPACE",
        "FIELDGUARD_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    FieldValidatorRegistry.clear()
    yield
    FieldValidatorRegistry.clear()


@pytest.fixture
def with_plugin(monkeypatch):
    """Re-import the sample plugin so its decorators register again."""
    import sys

    monkeypatch.delitem(sys.modules, "sample_validators", raising=False)
    monkeypatch.syspath_prepend(str(Path(__file__).parent))
    return ["--plugin", "sample_validators"]


def invoke(runner, *args):
    return runner.invoke(cli, ["--metadata-path", str(_METADATA_DIR), *args])


def write_record(tmp_path: Path, data: dict, name: str = "lead.yaml") -> Path:
    path = tmp_path / name
    if name.endswith(".json"):
        path.write_text(json.dumps(data))
    else:
        path.write_text(yaml.dump(data))
    return path


class TestMetadataValidate:
    def test_validate_succeeds(self, runner):
        result = invoke(runner, "metadata", "validate")
        assert result.exit_code == 0, result.output
        assert "All metadata is valid" in result.output

    def test_validate_shows_entity_types(self, runner):
        result = invoke(runner, "metadata", "validate")
        assert "Lead (6 fields)" in result.output
        assert "Opportunity (4 fields)" in result.output

    def test_validate_reports_errors(self, runner, tmp_path):
        (tmp_path / "entityDefs").mkdir()
        (tmp_path / "entityDefs" / "Lead.yaml").write_text("fields:\n  name:\n    type: 5\n")
        result = runner.invoke(cli, ["--metadata-path", str(tmp_path), "metadata", "validate"])
        assert result.exit_code == 1
        assert "5 is not of type 'string'" in result.output
        assert "1 schema error(s) found" in result.output

    def test_validate_reports_bad_encoding(self, runner, tmp_path):
        (tmp_path / "fields").mkdir()
        (tmp_path / "fields" / "bad.yaml").write_bytes(b"validationList: [\xff\xfe]")
        result = runner.invoke(cli, ["--metadata-path", str(tmp_path), "metadata", "validate"])
        assert result.exit_code == 1
        assert "Encoding error" in result.output

    def test_validate_strict_escalates(self, runner, tmp_path):
        (tmp_path / "entityDefs").mkdir()
        (tmp_path / "entityDefs" / "Lead.yaml").write_text("fields:\n  name:\n    type: url\n")
        lenient = runner.invoke(cli, ["--metadata-path", str(tmp_path), "metadata", "validate"])
        assert lenient.exit_code == 0
        assert "1 warning(s) found." in lenient.output
        strict = runner.invoke(
            cli, ["--metadata-path", str(tmp_path), "metadata", "validate", "--strict"]
        )
        assert strict.exit_code == 1

    def test_validate_missing_directory(self, runner, tmp_path):
        result = runner.invoke(
            cli, ["--metadata-path", str(tmp_path / "missing"), "metadata", "validate"]
        )
        assert result.exit_code == 1
        assert "Metadata directory not found" in result.output

    def test_validate_single_file(self, runner):
        result = invoke(
            runner, "metadata", "validate", "--path", str(_METADATA_DIR / "fields" / "email.yaml")
        )
        assert result.exit_code == 0
        assert "All metadata is valid" in result.output


class TestMetadataValidateLayered:
    @pytest.fixture
    def roots(self, tmp_path):
        base = tmp_path / "base"
        (base / "fields").mkdir(parents=True)
        (base / "entityDefs").mkdir()
        (base / "fields" / "varchar.yaml").write_text("validationList: [required, maxLength]\n")
        (base / "entityDefs" / "Lead.yaml").write_text(
            "fields:\n  lastName:\n    type: varchar\n    required: true\n"
        )
        overlay = tmp_path / "overlay"
        (overlay / "entityDefs").mkdir(parents=True)
        (overlay / "entityDefs" / "Lead.yaml").write_text(
            "fields:\n  lastName:\n    validatorClassName: app.LeadName\n"
        )
        return ["--metadata-path", str(base), "--metadata-path", str(overlay)]

    def test_overlay_without_types(self, runner, roots):
        result = runner.invoke(cli, [*roots, "metadata", "validate"])
        assert result.exit_code == 0, result.output
        assert "Loaded 1 field types, 1 entity types:" in result.output
        assert "Lead (1 fields)" in result.output

    def test_overlay_uses_base_field_types_strict(self, runner, roots, tmp_path):
        (tmp_path / "overlay" / "entityDefs" / "Account.yaml").write_text(
            "fields:\n  name:\n    type: varchar\n"
        )
        result = runner.invoke(cli, [*roots, "metadata", "validate", "--strict"])
        assert result.exit_code == 0, result.output
        assert "Unknown field type" not in result.output
        assert "All metadata is valid" in result.output


class TestMetadataGet:
    def test_prints_yaml(self, runner):
        result = invoke(runner, "metadata", "get", "fields.email.mandatoryValidationList")
        assert result.exit_code == 0
        assert result.output.strip() == "- valid"

    def test_missing_path(self, runner):
        result = invoke(runner, "metadata", "get", "fields.nope")
        assert result.exit_code == 1
        assert "No metadata at 'fields.nope'" in result.output


class TestResolve:
    def test_none_without_plugins(self, runner):
        result = invoke(runner, "resolve", "Lead", "lastName")
        assert result.exit_code == 0
        assert result.output.strip() == "(none)"

    def test_convention_with_plugin(self, runner, with_plugin):
        result = invoke(runner, *with_plugin, "resolve", "Lead", "lastName")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "fieldguard.FieldValidators.VarcharType"


class TestCheck:
    def test_valid_record(self, runner, tmp_path, with_plugin):
        record = write_record(tmp_path, {"lastName": "Doe", "emailAddress": "jane@example.com"})
        result = invoke(runner, *with_plugin, "check", "Lead", str(record))
        assert result.exit_code == 0, result.output
        assert "Record is valid" in result.output

    def test_failures_listed(self, runner, tmp_path, with_plugin):
        record = write_record(
            tmp_path, {"lastName": "", "emailAddress": "broken"}, name="lead.json"
        )
        result = invoke(runner, *with_plugin, "check", "Lead", str(record))
        assert result.exit_code == 1
        assert "Lead.lastName: required" in result.output
        assert "Lead.emailAddress: valid" in result.output
        assert "2 failure(s)" in result.output

    def test_single_rule_and_field(self, runner, tmp_path, with_plugin):
        record = write_record(tmp_path, {"lastName": "x" * 101, "emailAddress": "broken"})
        result = invoke(
            runner, *with_plugin, "check", "Lead", str(record), "--field", "lastName", "--rule", "maxLength"
        )
        assert result.exit_code == 1
        assert "Lead.lastName: maxLength" in result.output
        assert "emailAddress" not in result.output

    def test_rule_across_all_fields(self, runner, tmp_path, with_plugin):
        record = write_record(
            tmp_path, {"firstName": "x" * 101, "lastName": "x" * 101, "emailAddress": "broken"}
        )
        result = invoke(runner, *with_plugin, "check", "Lead", str(record), "--rule", "maxLength")
        assert result.exit_code == 1
        assert "Lead.firstName: maxLength" in result.output
        assert "Lead.lastName: maxLength" in result.output
        assert "emailAddress" not in result.output
        assert "2 failure(s)" in result.output

    def test_record_must_be_utf8(self, runner, tmp_path):
        record = tmp_path / "lead.yaml"
        record.write_bytes(b"lastName: \xff\xfe\n")
        result = invoke(runner, "check", "Lead", str(record))
        assert result.exit_code == 2
        assert "not valid UTF-8" in result.output

    def test_record_must_be_mapping(self, runner, tmp_path):
        record = tmp_path / "lead.yaml"
        record.write_text("- a\n- b\n")
        result = invoke(runner, "check", "Lead", str(record))
        assert result.exit_code == 2
        assert "must contain a mapping" in result.output
