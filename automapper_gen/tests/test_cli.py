"""
Tests for the automapper-gen command line.
"""

import json

import pytest
from click.testing import CliRunner

from automapper_gen.automapper_gen import automapper_gen

SCHEMA = {
    "package": "dtos",
    "targets": [
        {
            "name": "UserDTO",
            "from": ["User"],
            "fields": [{"name": "ID", "type": "int64"}, {"name": "Nickname", "type": "string"}],
        }
    ],
    "sources": [{"name": "User", "fields": {"ID": "int64"}}],
}


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(SCHEMA))
    return path


class TestCli:
    def test_validate_only(self, schema_path):
        result = CliRunner().invoke(automapper_gen, [str(schema_path), "--validate-only"])

        assert result.exit_code == 0, result.output
        assert "[WARN]  User.Nickname -> UserDTO.Nickname" in result.output
        assert "Checked 1 targets, 1 sources, 2 fields: 0 errors, 1 warnings" in result.output
        assert "Validation passed" in result.output
        assert not (schema_path.parent / "automappers.go").exists()

    def test_generate_default_output(self, schema_path):
        result = CliRunner().invoke(automapper_gen, [str(schema_path)])

        output = schema_path.resolve().parent / "automappers.go"
        assert result.exit_code == 0, result.output
        assert f"Generated {output}" in result.output
        code = output.read_text()
        assert code.startswith("// Generated by automapper-gen v1.0.0 : automapper-gen schema.json\n")
        assert "func (d *UserDTO) MapFrom(src *User) {" in code

    def test_existing_output_needs_force(self, schema_path, tmp_path):
        output = tmp_path / "out.go"
        output.write_text("package dtos\n")

        result = CliRunner().invoke(automapper_gen, [str(schema_path), str(output)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert output.read_text() == "package dtos\n"

        result = CliRunner().invoke(automapper_gen, [str(schema_path), str(output), "--force"])
        assert result.exit_code == 0, result.output
        assert "MapFrom" in output.read_text()

    def test_config_and_package(self, schema_path, tmp_path):
        config = tmp_path / "automapper.json"
        config.write_text(json.dumps({"output": "mappers.go", "generate_registry": False}))

        result = CliRunner().invoke(automapper_gen, [str(schema_path), "-c", str(config), "-p", "mappers"])

        assert result.exit_code == 0, result.output
        code = (tmp_path / "mappers.go").read_text()
        assert "\npackage mappers\n" in code
        assert "ConverterRegistry" not in code

    def test_validation_errors_exit_with_status_one(self, tmp_path):
        schema = dict(SCHEMA, sources=[{"name": "User", "fields": {"ID": "string", "Nickname": "string"}}])
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema))

        result = CliRunner().invoke(automapper_gen, [str(path)])

        assert result.exit_code == 1
        assert "[ERROR] User.ID -> UserDTO.ID: Type mismatch: int64 <- string" in result.output
        assert not (tmp_path / "automappers.go").exists()

        result = CliRunner().invoke(automapper_gen, [str(path), "--validate-only"])
        assert result.exit_code == 1

    def test_malformed_schema(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"package": "dtos", "targets": [{"name": "UserDTO", "fields": []}]}))

        result = CliRunner().invoke(automapper_gen, [str(path)])

        assert result.exit_code == 1
        assert "declares no source" in result.output
