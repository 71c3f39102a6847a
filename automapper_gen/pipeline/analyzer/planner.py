"""
Mapping planner.

Selects one strategy per target field and decides the exact pointer and
sequence adaptation the emitted code performs. The planner trusts the schema
to have been validated; on an unvalidated schema it still produces a plan,
degrading to comments, skips and raw assignments instead of raising.
"""

from __future__ import annotations

import logging

from ...utils import unqualified_name
from ..schema.nodes import (
    Schema,
    SourceField,
    SourceRecordType,
    TargetField,
    TargetRecordType,
)
from .converters import resolve_inverter
from .field_resolver import FieldResolver, NamingPolicy
from .ir_nodes import (
    ConverterPlan,
    DirectPlan,
    Direction,
    FieldPlan,
    NestedScalarPlan,
    NestedSequencePlan,
    ProcedurePlan,
    Registration,
    RegistryPlan,
    SequenceElementCase,
    ShapeAdaptation,
    SkippedField,
    UnsupportedPlan,
)
from .shapes import types_compatible

logger = logging.getLogger(__name__)

FORWARD_PREFIX = "MapFrom"
REVERSE_PREFIX = "MapTo"


def procedure_is_safe(fields: list[FieldPlan]) -> bool:
    """
    Decide whether a procedure can be emitted without a failure-return contract.

    Every plan must be Direct or a Safe converter; skipped fields are neutral.
    Any nested plan makes the procedure fallible.
    """
    for plan in fields:
        if isinstance(plan, (SkippedField, DirectPlan)):
            continue
        if isinstance(plan, ConverterPlan) and not plan.fallible:
            continue
        return False
    return True


class MappingPlanner:
    """Plans mapping procedures for every (target, source) pair of a schema."""

    def __init__(self, schema: Schema, naming_policy: NamingPolicy = NamingPolicy.NONE):
        """
        Initialize the planner.

        Args:
            schema: The (validated) schema
            naming_policy: Naming policy used to bind target fields
        """
        self.schema = schema
        self.resolver = FieldResolver(naming_policy)

        # Safety of forward procedures, keyed by (target, source)
        self._safety: dict[tuple[str, str], bool] = {}
        self._in_progress: set[tuple[str, str]] = set()

    # --- naming -------------------------------------------------------------

    def is_external_source(self, source_name: str) -> bool:
        source = self.schema.sources.get(source_name)
        if source is not None and source.is_external:
            return True
        return "." in source_name

    def procedure_name(self, target: TargetRecordType, source_name: str, direction: Direction) -> str:
        """
        Name of the procedure mapping between ``target`` and ``source_name``.

        The bare prefix is used when the target declares a single local
        source; otherwise the unqualified source name is appended so every
        procedure of a target is distinct.
        """
        prefix = FORWARD_PREFIX if direction == Direction.FORWARD else REVERSE_PREFIX
        if len(target.declared_sources) > 1 or self.is_external_source(source_name):
            return prefix + unqualified_name(source_name)
        return prefix

    # --- field plans ----------------------------------------------------------

    def plan(self, target_field: TargetField, source_field: SourceField) -> FieldPlan:
        """
        Plan a forward mapping for a bound field.

        Priority: nested sequence, nested scalar, converter, direct.

        Args:
            target_field: The field being populated
            source_field: The bound source field

        Returns:
            The field plan
        """
        common = {
            "field_name": target_field.name,
            "read_field": source_field.name,
            "write_field": target_field.name,
            "read_shape": source_field.shape,
            "write_shape": target_field.declared_shape,
        }

        if target_field.nested_target_ref:
            return self._plan_nested(target_field, source_field, common)

        if target_field.converter_ref:
            return self._plan_converter(target_field, source_field, common)

        return self._plan_direct(target_field, source_field, common)

    def _plan_nested(self, target_field: TargetField, source_field: SourceField, common: dict) -> FieldPlan:
        write_shape = target_field.declared_shape
        read_shape = source_field.shape
        nested_name = target_field.nested_target_ref
        nested = self.schema.get_target(nested_name)

        if nested is None:
            return UnsupportedPlan(reason=f"nested target {nested_name} not found", **common)

        if write_shape.is_sequence != read_shape.is_sequence:
            return UnsupportedPlan(reason="unsupported sequence mapping", **common)

        procedure_name, nested_is_safe = self._nested_procedure(nested, read_shape.base_type_name)

        if write_shape.is_sequence:
            return NestedSequencePlan(
                nested_target=nested.name,
                procedure_name=procedure_name,
                nested_is_safe=nested_is_safe,
                element_case=SequenceElementCase.between(read_shape.element_is_pointer, write_shape.element_is_pointer),
                **common,
            )

        return NestedScalarPlan(
            nested_target=nested.name,
            procedure_name=procedure_name,
            nested_is_safe=nested_is_safe,
            adaptation=ShapeAdaptation.between(read_shape.is_pointer, write_shape.is_pointer),
            **common,
        )

    def _nested_procedure(self, nested: TargetRecordType, source_type: str) -> tuple[str, bool]:
        """Find the forward procedure of ``nested`` that accepts ``source_type``, preferring an exact match."""
        exact = [declared for declared in nested.declared_sources if declared == source_type]
        for declared in exact or nested.declared_sources:
            if types_compatible(declared, source_type):
                name = self.procedure_name(nested, declared, Direction.FORWARD)
                return name, self.is_safe(nested.name, declared)

        # Not declared: call the conventional name, assume it can fail
        return FORWARD_PREFIX + unqualified_name(source_type), False

    def _plan_converter(self, target_field: TargetField, source_field: SourceField, common: dict) -> FieldPlan:
        converter = self.schema.resolve_converter(target_field.converter_ref)
        if converter is None:
            return SkippedField(reason=f"converter '{target_field.converter_ref}' not found", **common)

        kind = converter.signature_kind
        if target_field.converter_ref not in self.schema.converters:
            function = self.schema.functions[converter.bound_function]
            kind = function.inferred_kind() or kind

        return ConverterPlan(
            function=converter.bound_function,
            kind=kind,
            adaptation=ShapeAdaptation.between(source_field.shape.is_pointer, target_field.declared_shape.is_pointer),
            result_type=target_field.declared_shape.base_type_name,
            **common,
        )

    def _plan_direct(self, target_field: TargetField, source_field: SourceField, common: dict) -> FieldPlan:
        write_shape = target_field.declared_shape
        read_shape = source_field.shape

        raw = (
            not types_compatible(write_shape.base_type_name, read_shape.base_type_name)
            or write_shape.is_sequence != read_shape.is_sequence
        )
        if raw:
            logger.debug("Field %s: base types differ, raw assignment", target_field.name)

        return DirectPlan(
            adaptation=ShapeAdaptation.between(read_shape.is_pointer, write_shape.is_pointer),
            raw=raw,
            **common,
        )

    # --- procedures ----------------------------------------------------------

    def _source(self, source_name: str) -> SourceRecordType:
        return self.schema.sources.get(source_name) or SourceRecordType(name=source_name)

    def _plan_forward_fields(self, target: TargetRecordType, source: SourceRecordType) -> list[FieldPlan]:
        fields: list[FieldPlan] = []

        for target_field in target.fields:
            if target_field.ignored:
                fields.append(SkippedField(field_name=target_field.name, write_field=target_field.name))
                continue

            binding = self.resolver.resolve(target_field, source)
            if binding.source_field is None:
                fields.append(
                    SkippedField(
                        field_name=target_field.name,
                        read_field=binding.source_field_name,
                        write_field=target_field.name,
                        reason="not found in source, will be zero value",
                    )
                )
                continue

            fields.append(self.plan(target_field, binding.source_field))

        return fields

    def is_safe(self, target_name: str, source_name: str) -> bool:
        """Whether the forward procedure of (target, source) has no failure-return contract."""
        key = (target_name, source_name)
        if key in self._safety:
            return self._safety[key]

        # Re-entered through a nested cycle: only reachable on unvalidated schemas
        if key in self._in_progress:
            return False

        self._in_progress.add(key)
        try:
            target = self.schema.get_target(target_name)
            safe = target is not None and procedure_is_safe(self._plan_forward_fields(target, self._source(source_name)))
        finally:
            self._in_progress.discard(key)

        self._safety[key] = safe
        return safe

    def plan_procedure(self, target: TargetRecordType, source_name: str) -> ProcedurePlan:
        """
        Plan the forward procedure populating ``target`` from ``source_name``.

        Args:
            target: The target record type
            source_name: One of the target's declared sources

        Returns:
            The procedure plan
        """
        fields = self._plan_forward_fields(target, self._source(source_name))
        is_safe = procedure_is_safe(fields)
        self._safety[(target.name, source_name)] = is_safe

        procedure = ProcedurePlan(
            target_name=target.name,
            source_name=source_name,
            procedure_name=self.procedure_name(target, source_name, Direction.FORWARD),
            direction=Direction.FORWARD,
            receiver_type=target.name,
            parameter_type=source_name,
            fields=fields,
            is_safe=is_safe,
        )
        logger.debug(
            "Planned %s.%s (%d fields, safe=%s)", target.name, procedure.procedure_name, len(fields), is_safe
        )
        return procedure

    def plan_reverse_procedure(self, target: TargetRecordType, source_name: str) -> ProcedurePlan:
        """
        Plan the reverse procedure populating ``source_name`` from ``target``.

        Converter fields go through the converter's inverter. Fields that
        cannot be reversed are skipped with a recorded reason; skips never
        make the procedure fail.
        """
        source = self._source(source_name)
        fields: list[FieldPlan] = []

        for target_field in target.fields:
            fields.append(self._plan_reverse_field(target_field, source))

        is_safe = procedure_is_safe(fields)
        procedure = ProcedurePlan(
            target_name=target.name,
            source_name=source_name,
            procedure_name=self.procedure_name(target, source_name, Direction.REVERSE),
            direction=Direction.REVERSE,
            receiver_type=target.name,
            parameter_type=source_name,
            fields=fields,
            is_safe=is_safe,
        )
        logger.debug(
            "Planned %s.%s (%d fields, safe=%s)", target.name, procedure.procedure_name, len(fields), is_safe
        )
        return procedure

    def _plan_reverse_field(self, target_field: TargetField, source: SourceRecordType) -> FieldPlan:
        if target_field.ignored:
            return SkippedField(field_name=target_field.name, read_field=target_field.name)

        binding = self.resolver.resolve(target_field, source)
        if binding.source_field is None:
            return SkippedField(
                field_name=target_field.name,
                read_field=target_field.name,
                write_field=binding.source_field_name,
                reason="source field not found, skipped",
            )

        source_field = binding.source_field
        common = {
            "field_name": target_field.name,
            "read_field": target_field.name,
            "write_field": source_field.name,
            "read_shape": target_field.declared_shape,
            "write_shape": source_field.shape,
        }
        adaptation = ShapeAdaptation.between(target_field.declared_shape.is_pointer, source_field.shape.is_pointer)

        if target_field.nested_target_ref:
            return SkippedField(reason="nested mapping is not reversed, skipped", **common)

        if target_field.converter_ref:
            converter = self.schema.resolve_converter(target_field.converter_ref)
            if converter is None:
                return SkippedField(reason=f"converter '{target_field.converter_ref}' not found, skipped", **common)

            inverter = resolve_inverter(self.schema, converter)
            if not inverter.usable:
                return SkippedField(reason="converter has no inverter, skipped", **common)

            return ConverterPlan(
                function=inverter.function.name,
                kind=inverter.kind,
                adaptation=adaptation,
                result_type=source_field.shape.base_type_name,
                **common,
            )

        mismatched = (
            not types_compatible(target_field.declared_shape.base_type_name, source_field.shape.base_type_name)
            or target_field.declared_shape.is_sequence != source_field.shape.is_sequence
        )
        if mismatched:
            return SkippedField(reason="type mismatch without converter, skipped", **common)

        return DirectPlan(adaptation=adaptation, **common)

    def plan_all(self) -> list[ProcedurePlan]:
        """Plan every forward procedure, plus reverse procedures for bidirectional targets."""
        procedures: list[ProcedurePlan] = []

        for target in self.schema.targets:
            for source_name in target.declared_sources:
                procedures.append(self.plan_procedure(target, source_name))
            if target.bidirectional:
                for source_name in target.declared_sources:
                    procedures.append(self.plan_reverse_procedure(target, source_name))

        return procedures

    # --- registry -------------------------------------------------------------

    def plan_registry(self) -> RegistryPlan:
        """Plan the registrations of the default converter registry, ordered by converter name."""
        registry = RegistryPlan()

        for name in sorted(self.schema.converters):
            converter = self.schema.converters[name]
            function = self.schema.functions.get(converter.bound_function)
            if function is None or not function.param_types or not function.return_types:
                logger.warning("Converter '%s' has no usable function, not registered", name)
                continue

            registry.registrations.append(
                Registration(
                    name=name,
                    function=function.name,
                    input_type=function.param_types[0],
                    output_type=function.return_types[0],
                    fallible=not converter.is_safe,
                )
            )

        return registry
