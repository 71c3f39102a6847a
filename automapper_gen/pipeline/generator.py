"""
Pipeline generator.

Runs the whole pipeline for one schema:

1. Load: schema document -> Schema model
2. Validate: static analysis, gating on errors
3. Plan: per (target, source) procedure plans and the registry plan
4. Emit: plans -> statement sequences
5. Render: statements -> Go source via the backend
6. Format: optional gofmt pass
7. Write: atomic write honoring the output mode
"""

from __future__ import annotations

import logging
from pathlib import Path

from .analyzer.diagnostics import ValidationResult
from .analyzer.field_resolver import NamingPolicy
from .analyzer.ir_nodes import IR
from .analyzer.planner import MappingPlanner
from .analyzer.validator import SchemaValidator
from .ast_backends.go_backend import GoBackend
from .config import CodeGeneratorConfig, OutputMode
from .emitter.driver import EmissionDriver
from .errors import GenerationError, SchemaLoadError
from .formatters.gofmt_formatter import GofmtFormatter
from .schema.loader import SchemaLoader
from .schema.nodes import Schema
from .writer.atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates Go mapping code for a schema."""

    def __init__(self, schema: Schema | dict, config: CodeGeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            schema: A loaded Schema, or a schema document to load
            config: Code generation configuration
        """
        self.config = config or CodeGeneratorConfig()

        if isinstance(schema, Schema):
            self.schema = schema
            if self.config.package:
                self.schema.package_name = self.config.package
        else:
            self.schema = SchemaLoader(self.config).load(schema)

        try:
            self.naming_policy = NamingPolicy(self.config.field_name_transform)
        except ValueError as e:
            raise SchemaLoadError(f"Unknown field_name_transform: {self.config.field_name_transform!r}") from e

        self.result: ValidationResult | None = None

    def validate(self) -> ValidationResult:
        """Run the validator and keep its result."""
        self.result = SchemaValidator(self.schema, self.naming_policy).validate()
        return self.result

    def build_ir(self) -> IR:
        """Plan every procedure and the registry."""
        planner = MappingPlanner(self.schema, self.naming_policy)
        return IR(
            package_name=self.schema.package_name,
            procedures=planner.plan_all(),
            registry=planner.plan_registry() if self.config.generate_registry else None,
            import_map=dict(self.schema.import_map),
            generation_comment=self._generate_command_comment() or None,
        )

    def generate(self) -> str:
        """
        Generate the Go source.

        Returns:
            Generated code

        Raises:
            GenerationError: If validation reports errors
        """
        result = self.validate()
        if not result.is_valid():
            raise GenerationError(f"Validation failed with {len(result.errors)} error(s)", result)

        ir = self.build_ir()
        driver = EmissionDriver()
        procedures = [driver.emit(procedure) for procedure in ir.procedures]

        backend = GoBackend(self.config)
        code = backend.generate(ir, procedures)

        if self.config.formatter.enabled:
            formatter = GofmtFormatter(self.config.formatter.command)
            code = formatter.format(code, self.config.formatter)

        logger.info("Generated %d mapping procedures for package %s", len(procedures), ir.package_name)
        return code

    def write(self, path: str | Path) -> Path:
        """
        Generate and write the output file.

        Args:
            path: Output file path

        Returns:
            The written path

        Raises:
            GenerationError: If validation reports errors
            FileExistsError: If the file exists and the mode is ERROR_IF_EXISTS
            OutputValidationError: If the generated code fails the pre-write check
        """
        path = Path(path)
        options = self.config.output_options

        if options.mode == OutputMode.ERROR_IF_EXISTS and path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")

        code = self.generate()

        if options.atomic_write:
            AtomicWriter().write(path, code, validate=options.validate_before_write)
        else:
            if options.validate_before_write:
                AtomicWriter().validate(code)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")

        logger.info("Wrote %s", path)
        return path

    def _generate_command_comment(self) -> str:
        """Generate a simplified command line comment for the generated file"""
        if not self.config.add_generation_comment:
            return ""

        from .. import __version__
        from ..cli_utils import reconstruct_command_line

        try:
            from ..automapper_gen import automapper_gen as click_command  # noqa

            command_line = reconstruct_command_line(click_command)
        except (ImportError, AttributeError):
            command_line = "automapper-gen"

        return f"// Generated by automapper-gen v{__version__} : {command_line}"
