"""
Tests for the generator configuration.
"""

import json

import pytest

from automapper_gen.pipeline.config import CodeGeneratorConfig, OutputMode
from automapper_gen.pipeline.errors import SchemaLoadError


class TestCodeGeneratorConfig:
    def test_defaults(self):
        config = CodeGeneratorConfig()

        assert config.output == "automappers.go"
        assert config.field_name_transform == "snake_to_camel"
        assert config.generate_registry
        assert not config.formatter.enabled
        assert config.output_options.mode == OutputMode.ERROR_IF_EXISTS

    def test_from_dict(self):
        config = CodeGeneratorConfig.from_dict(
            {
                "package": "dtos",
                "converters": [{"name": "Money", "function": "CentsToString", "safe": True}],
                "external_packages": [{"alias": "db", "import_path": "example.com/app/db"}],
                "formatter": {"enabled": True, "simplify": True},
                "output_options": {"mode": "force", "atomic_write": False},
                "unknown_key": 1,
            }
        )

        assert config.package == "dtos"
        assert config.converters[0].function == "CentsToString"
        assert config.converters[0].safe
        assert config.external_packages[0].alias == "db"
        assert config.formatter.command == "gofmt"
        assert config.formatter.simplify
        assert config.output_options.mode == OutputMode.FORCE
        assert not config.output_options.atomic_write
        assert config.output_options.validate_before_write

    def test_round_trip(self):
        data = {
            "package": "dtos",
            "output": "mappers.go",
            "field_name_transform": "none",
            "converters": [{"name": "Money", "function": "CentsToString", "safe": True, "inverter": "StringToCents"}],
            "external_packages": [{"alias": "db", "import_path": "example.com/app/db"}],
            "generate_registry": False,
            "add_generation_comment": False,
            "formatter": {"enabled": True, "command": "gofmt", "simplify": False},
            "output_options": {"mode": "force", "validate_before_write": False, "atomic_write": True},
        }

        assert CodeGeneratorConfig.from_dict(data).to_dict() == data

    def test_from_file(self, tmp_path):
        path = tmp_path / "automapper.json"
        path.write_text(json.dumps({"output": "out.go"}))

        assert CodeGeneratorConfig.from_file(path).output == "out.go"

    def test_from_file_errors(self, tmp_path):
        with pytest.raises(SchemaLoadError):
            CodeGeneratorConfig.from_file(tmp_path / "missing.json")

        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(SchemaLoadError):
            CodeGeneratorConfig.from_file(path)

        path = tmp_path / "bad_mode.json"
        path.write_text(json.dumps({"output_options": {"mode": "append"}}))
        with pytest.raises(SchemaLoadError):
            CodeGeneratorConfig.from_file(path)

        path = tmp_path / "bad_converter.json"
        path.write_text(json.dumps({"converters": [{"name": "x", "unknown": 1}]}))
        with pytest.raises(SchemaLoadError):
            CodeGeneratorConfig.from_file(path)
