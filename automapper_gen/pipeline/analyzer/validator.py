"""
Schema validator.

Runs every static check over a schema in one pass and returns the collected
diagnostics. Nothing here raises for a schema problem: an error in one target
never stops the analysis of the others, so a single run reports everything
the author has to fix.
"""

from __future__ import annotations

import logging

from ..schema.nodes import Schema, SourceField, SourceRecordType, TargetField, TargetRecordType
from .converters import describe_mismatch, resolve_inverter, signature_matches
from .diagnostics import IGNORE_TAG, Diagnostic, Severity, ValidationResult
from .field_resolver import FieldResolver, NamingPolicy
from .reference_graph import NestedReferenceGraph
from .shapes import base_type, types_compatible

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Validates target-to-source mappings before code generation."""

    def __init__(self, schema: Schema, naming_policy: NamingPolicy = NamingPolicy.NONE):
        """
        Initialize the validator.

        Args:
            schema: The schema to validate
            naming_policy: Naming policy used to bind target fields
        """
        self.schema = schema
        self.resolver = FieldResolver(naming_policy)
        self.graph = NestedReferenceGraph(schema.targets)

    def validate(self) -> ValidationResult:
        """
        Validate the whole schema.

        Returns:
            ValidationResult with every diagnostic and the aggregate counts
        """
        result = ValidationResult()
        result.stats["targets"] = len(self.schema.targets)
        result.stats["sources"] = len(self.schema.sources)

        self._validate_converter_catalogue(result)

        total_fields = 0
        for target in self.schema.targets:
            total_fields += len(target.fields)
            logger.debug("Validating target %s (sources: %s)", target.name, ", ".join(target.declared_sources))
            for source_name in target.declared_sources:
                self._validate_mapping(target, source_name, result)

        result.stats["fields"] = total_fields
        result.stats["errors"] = len(result.errors)
        result.stats["warnings"] = len(result.warnings)

        self._log_summary(result)
        return result

    def _validate_converter_catalogue(self, result: ValidationResult) -> None:
        """Check that every catalogued converter is bound to a function with the declared signature."""
        for converter in self.schema.converters.values():
            function = self.schema.functions.get(converter.bound_function)
            if function is None:
                result.add(
                    Diagnostic(
                        severity=Severity.ERROR,
                        message=(
                            f"Converter function '{converter.bound_function}' "
                            f"(for converter '{converter.name}') not found"
                        ),
                        suggestion=(
                            f"Declare function '{converter.bound_function}' or fix the function name in the configuration"
                        ),
                    )
                )
                continue

            if not signature_matches(function, converter.signature_kind):
                result.add(
                    Diagnostic(
                        severity=Severity.ERROR,
                        message=(
                            f"Converter function '{converter.bound_function}' is declared "
                            f"{converter.signature_kind.value} but has the wrong signature "
                            f"({describe_mismatch(function, converter.signature_kind)})"
                        ),
                        suggestion="Fix the function signature or the converter's 'safe' flag",
                    )
                )
            else:
                logger.debug("Converter '%s' (%s) validated", converter.name, converter.bound_function)

    def _validate_mapping(self, target: TargetRecordType, source_name: str, result: ValidationResult) -> None:
        source = self.schema.sources.get(source_name)
        if source is None:
            result.add(
                Diagnostic(
                    severity=Severity.ERROR,
                    target_name=target.name,
                    source_name=source_name,
                    message="Source record type not found",
                    suggestion=f"Ensure {source_name} is declared or its module is listed in external packages",
                )
            )
            return

        for target_field in target.fields:
            if target_field.ignored:
                logger.debug("Skipping ignored field %s.%s", target.name, target_field.name)
                continue
            self._validate_field(target, source, target_field, result)

    def _validate_field(
        self,
        target: TargetRecordType,
        source: SourceRecordType,
        target_field: TargetField,
        result: ValidationResult,
    ) -> None:
        binding = self.resolver.resolve(target_field, source)

        def report(severity: Severity, message: str, suggestion: str | None = None, fixable: bool = False):
            result.add(
                Diagnostic(
                    severity=severity,
                    target_name=target.name,
                    source_name=source.name,
                    field_name=target_field.name,
                    message=message,
                    fixable=fixable,
                    suggestion=suggestion,
                )
            )

        if binding.is_ambiguous:
            report(
                Severity.ERROR,
                f"Ambiguous source field: {', '.join(binding.candidates)} all map to '{target_field.name}'",
                suggestion=f'Pick one with `automapper:"field={binding.candidates[0]}"`',
            )

        if binding.source_field is None:
            if target_field.has_directive:
                report(
                    Severity.ERROR,
                    f"Source field '{binding.source_field_name}' not found",
                    suggestion="Check if the field name is correct or remove the mapping configuration",
                )
            else:
                report(
                    Severity.WARNING,
                    f"Source field '{binding.source_field_name}' not found, will use zero value",
                    suggestion=f"Add '{IGNORE_TAG}' tag to explicitly ignore, or add the source field",
                    fixable=True,
                )
            return

        source_field = binding.source_field
        logger.debug(
            "Field %s: %s <- %s: %s",
            target_field.name,
            target_field.declared_shape,
            source_field.name,
            source_field.shape,
        )

        # Nested reference takes precedence over a converter
        if target_field.nested_target_ref:
            self._validate_nested(target, target_field, source_field, report)
            return

        if target_field.converter_ref:
            self._validate_converter(target, target_field, source_field, report)
            return

        self._validate_direct(target_field, source_field, report)

    def _validate_nested(self, target: TargetRecordType, target_field: TargetField, source_field: SourceField, report):
        nested_name = target_field.nested_target_ref
        nested = self.schema.get_target(nested_name)

        if nested is None:
            report(
                Severity.ERROR,
                f"Nested target '{nested_name}' not found",
                suggestion=f"Ensure {nested_name} is declared with an automapper:from annotation",
            )
            return

        if self.graph.closes_cycle(target.name, nested_name):
            report(
                Severity.ERROR,
                f"Circular dependency detected with {nested_name}",
                suggestion="Remove circular references or use a converter instead",
            )
            return

        if target_field.declared_shape.is_sequence != source_field.shape.is_sequence:
            report(
                Severity.ERROR,
                f"Incompatible sequence/non-sequence types: {target_field.declared_shape} vs {source_field.shape}",
                suggestion="Both source and destination must be sequences or both must be single values",
            )
            return

        source_type = source_field.shape.base_type_name
        if not any(types_compatible(declared, source_type) for declared in nested.declared_sources):
            report(
                Severity.ERROR,
                f"Nested target '{nested_name}' does not map from {source_type}",
                suggestion=f"Add {source_type} to the automapper:from annotation of {nested_name}",
            )
            return

        logger.debug("Nested mapping %s -> %s valid", target_field.name, nested_name)

    def _validate_converter(self, target: TargetRecordType, target_field: TargetField, source_field: SourceField, report):
        converter_name = target_field.converter_ref
        converter = self.schema.resolve_converter(converter_name)

        if converter is None:
            report(
                Severity.ERROR,
                f"Converter '{converter_name}' not found",
                suggestion="Register the converter in the configuration or annotate a function as a converter",
            )
            return

        if converter_name not in self.schema.converters:
            # Referenced by function name: the declaration must itself be a valid converter
            function = self.schema.functions[converter.bound_function]
            if function.inferred_kind() is None:
                report(
                    Severity.ERROR,
                    f"Function '{function.name}' cannot be used as a converter "
                    f"({len(function.param_types)} params, {len(function.return_types)} returns)",
                    suggestion="Use a func(T) U or func(T) (U, error) function",
                )
                return

        source_type = source_field.shape.base_type_name
        target_type = target_field.declared_shape.base_type_name
        if source_type == target_type and not self._transforms_in_place(converter.bound_function, source_type):
            report(
                Severity.WARNING,
                f"Converter specified but types are identical: {source_type}",
                suggestion="Remove the converter tag for direct assignment or verify this is intentional",
                fixable=True,
            )

        if target.bidirectional:
            inverter = resolve_inverter(self.schema, converter)
            if not inverter.usable:
                report(
                    Severity.WARNING,
                    f"{inverter.problem}, field skipped in reverse mapping",
                    suggestion=f"Annotate a function with automapper:inverter={converter.bound_function}",
                )

    def _transforms_in_place(self, function_name: str, type_name: str) -> bool:
        """Whether ``function_name`` is declared as ``func(type_name) type_name``, e.g. an upper-casing converter."""
        function = self.schema.functions.get(function_name)
        if function is None or not function.param_types or not function.return_types:
            return False
        return base_type(function.param_types[0]) == type_name and base_type(function.return_types[0]) == type_name

    def _validate_direct(self, target_field: TargetField, source_field: SourceField, report):
        target_shape = target_field.declared_shape
        source_shape = source_field.shape

        if not types_compatible(target_shape.base_type_name, source_shape.base_type_name):
            report(
                Severity.ERROR,
                f"Type mismatch: {target_shape} <- {source_shape} (cannot convert without converter)",
                suggestion='Add converter tag: `automapper:"converter=YourConverter"`',
                fixable=True,
            )
            return

        if target_shape.is_sequence != source_shape.is_sequence:
            report(
                Severity.ERROR,
                f"Incompatible sequence/non-sequence types: {target_shape} <- {source_shape}",
                suggestion='Add converter tag: `automapper:"converter=YourConverter"`',
                fixable=True,
            )
            return

        if target_shape.is_pointer != source_shape.is_pointer:
            report(
                Severity.WARNING,
                f"Pointer conversion: {target_shape} <- {source_shape}",
                suggestion="Verify this pointer conversion is intentional",
            )

    def _log_summary(self, result: ValidationResult) -> None:
        for warning in result.warnings:
            logger.warning("%s", warning)

        if result.errors:
            logger.error("Found %d errors that will prevent code generation", len(result.errors))
            for error in result.errors:
                logger.error("%s", error)
        else:
            logger.info("Validation passed")

        logger.info(
            "Validation statistics: targets=%d sources=%d fields=%d errors=%d warnings=%d",
            result.stats["targets"],
            result.stats["sources"],
            result.stats["fields"],
            result.stats["errors"],
            result.stats["warnings"],
        )


def validate(schema: Schema, naming_policy: NamingPolicy = NamingPolicy.NONE) -> ValidationResult:
    """Validate ``schema`` and return its diagnostics."""
    return SchemaValidator(schema, naming_policy).validate()
