"""
Configuration for the automapper generation pipeline.

Carries the converter catalogue, external package imports, formatter and
output options. Loaded from a JSON file by the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import SchemaLoadError


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Default: raise error if file exists
    FORCE = "force"  # Overwrite


@dataclass
class OutputConfig:
    """Configuration for output file handling.

    Attributes:
        mode: How to handle existing output files
        validate_before_write: Whether to check generated code before writing
        atomic_write: Whether to use atomic file writes
    """

    mode: OutputMode = OutputMode.ERROR_IF_EXISTS
    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Configuration for the post-processing formatter."""

    # Whether formatting is enabled
    enabled: bool = False

    # Formatter executable
    command: str = "gofmt"

    # Apply gofmt's simplification rewrites (-s)
    simplify: bool = False


@dataclass
class ConverterConfig:
    """A converter catalogue entry."""

    name: str = ""
    function: str = ""
    safe: bool = False  # func(T) U instead of func(T) (U, error)
    inverter: str | None = None


@dataclass
class ExternalPackage:
    """An import alias used by qualified source type names."""

    alias: str = ""
    import_path: str = ""


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Package clause of the generated file (overrides the schema document)
    package: str = ""

    # Output file name
    output: str = "automappers.go"

    # Naming policy applied to source field names ("snake_to_camel" or "none")
    field_name_transform: str = "snake_to_camel"

    # Converter catalogue
    converters: list[ConverterConfig] = field(default_factory=list)

    # Import aliases of external source packages
    external_packages: list[ExternalPackage] = field(default_factory=list)

    # Emit the runtime converter registry
    generate_registry: bool = True

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Formatter configuration
    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    # Output configuration
    output_options: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "formatter" and isinstance(v, dict):
                config.formatter = FormatterConfig(**v)
            elif k == "output_options" and isinstance(v, dict):
                mode = v.get("mode", OutputMode.ERROR_IF_EXISTS)
                if isinstance(mode, str):
                    mode = OutputMode(mode)
                config.output_options = OutputConfig(
                    mode=mode,
                    validate_before_write=v.get("validate_before_write", True),
                    atomic_write=v.get("atomic_write", True),
                )
            elif k == "converters":
                config.converters = [ConverterConfig(**c) if isinstance(c, dict) else c for c in v]
            elif k == "external_packages":
                config.external_packages = [ExternalPackage(**p) if isinstance(p, dict) else p for p in v]
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    @staticmethod
    def from_file(path: str | Path) -> CodeGeneratorConfig:
        """Load a config from a JSON file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaLoadError(f"Cannot read config {path}: {e}") from e

        if not isinstance(data, dict):
            raise SchemaLoadError(f"Config {path} must be a JSON object")

        try:
            return CodeGeneratorConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            raise SchemaLoadError(f"Invalid config {path}: {e}") from e

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "package": self.package,
            "output": self.output,
            "field_name_transform": self.field_name_transform,
            "converters": [
                {"name": c.name, "function": c.function, "safe": c.safe, "inverter": c.inverter}
                for c in self.converters
            ],
            "external_packages": [{"alias": p.alias, "import_path": p.import_path} for p in self.external_packages],
            "generate_registry": self.generate_registry,
            "add_generation_comment": self.add_generation_comment,
            "formatter": {
                "enabled": self.formatter.enabled,
                "command": self.formatter.command,
                "simplify": self.formatter.simplify,
            },
            "output_options": {
                "mode": self.output_options.mode.value,
                "validate_before_write": self.output_options.validate_before_write,
                "atomic_write": self.output_options.atomic_write,
            },
        }
