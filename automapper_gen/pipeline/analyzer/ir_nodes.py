"""
IR (Intermediate Representation) node definitions.

These nodes represent the planned mapping procedures, ready for emission.
Every field carries exactly one plan, every nested call names the procedure it
targets, and every shape adaptation is decided.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..schema.nodes import SignatureKind, TypeShape


class Strategy(str, Enum):
    """Kind of field plan."""

    DIRECT = "direct"
    CONVERTER = "converter"
    NESTED_SCALAR = "nested_scalar"
    NESTED_SEQUENCE = "nested_sequence"
    UNSUPPORTED = "unsupported"  # Emitted as a comment only
    SKIPPED = "skipped"  # Listed in the ignored summary


class Direction(str, Enum):
    """Direction of a mapping procedure."""

    FORWARD = "forward"  # Source record -> target record
    REVERSE = "reverse"  # Target record -> source record


class ShapeAdaptation(str, Enum):
    """Pointer-axis adaptation between the read side and the written side."""

    VALUE_TO_VALUE = "value_to_value"  # Pass-through
    VALUE_TO_POINTER = "value_to_pointer"  # Address of a local copy
    POINTER_TO_VALUE = "pointer_to_value"  # Guarded, zero value on nil
    POINTER_TO_POINTER = "pointer_to_pointer"  # Guarded, nil on nil, re-wrapped

    @classmethod
    def between(cls, read_is_pointer: bool, write_is_pointer: bool) -> ShapeAdaptation:
        if read_is_pointer:
            return cls.POINTER_TO_POINTER if write_is_pointer else cls.POINTER_TO_VALUE
        return cls.VALUE_TO_POINTER if write_is_pointer else cls.VALUE_TO_VALUE

    @property
    def guarded(self) -> bool:
        """Whether the read side must be checked for nil first."""
        return self in (ShapeAdaptation.POINTER_TO_VALUE, ShapeAdaptation.POINTER_TO_POINTER)

    @property
    def wraps(self) -> bool:
        """Whether the written side is a pointer to the produced value."""
        return self in (ShapeAdaptation.VALUE_TO_POINTER, ShapeAdaptation.POINTER_TO_POINTER)


class SequenceElementCase(str, Enum):
    """Element pointer-ness of a nested sequence mapping."""

    VALUE_TO_VALUE = "value_to_value"
    POINTER_TO_POINTER = "pointer_to_pointer"
    VALUE_TO_POINTER = "value_to_pointer"
    POINTER_TO_VALUE = "pointer_to_value"

    @classmethod
    def between(cls, read_element_is_pointer: bool, write_element_is_pointer: bool) -> SequenceElementCase:
        return cls(ShapeAdaptation.between(read_element_is_pointer, write_element_is_pointer).value)

    @property
    def compacts(self) -> bool:
        """Nil source elements are dropped, so the destination may be shorter."""
        return self == SequenceElementCase.POINTER_TO_VALUE


@dataclass
class FieldPlan:
    """Base of all field plans."""

    strategy: Strategy = Strategy.DIRECT
    field_name: str = ""  # Target field name, used in notes and error messages
    read_field: str = ""  # Field read on the input record
    write_field: str = ""  # Field written on the output record
    read_shape: TypeShape = field(default_factory=TypeShape)
    write_shape: TypeShape = field(default_factory=TypeShape)


@dataclass
class DirectPlan(FieldPlan):
    """Plain assignment with shape adaptation."""

    strategy: Strategy = Strategy.DIRECT
    adaptation: ShapeAdaptation = ShapeAdaptation.VALUE_TO_VALUE

    # Base types differ: emitted as an unguarded assignment
    raw: bool = False


@dataclass
class ConverterPlan(FieldPlan):
    """Invocation of a converter (or, in reverse procedures, an inverter) function."""

    strategy: Strategy = Strategy.CONVERTER
    function: str = ""
    kind: SignatureKind = SignatureKind.FALLIBLE
    adaptation: ShapeAdaptation = ShapeAdaptation.VALUE_TO_VALUE
    result_type: str = ""  # Base type of the converted value

    @property
    def fallible(self) -> bool:
        return self.kind == SignatureKind.FALLIBLE


@dataclass
class NestedScalarPlan(FieldPlan):
    """Recursive call into the procedure of a nested target."""

    strategy: Strategy = Strategy.NESTED_SCALAR
    nested_target: str = ""
    procedure_name: str = ""
    nested_is_safe: bool = False
    adaptation: ShapeAdaptation = ShapeAdaptation.VALUE_TO_VALUE


@dataclass
class NestedSequencePlan(FieldPlan):
    """Element-wise recursive calls into the procedure of a nested target."""

    strategy: Strategy = Strategy.NESTED_SEQUENCE
    nested_target: str = ""
    procedure_name: str = ""
    nested_is_safe: bool = False
    element_case: SequenceElementCase = SequenceElementCase.VALUE_TO_VALUE


@dataclass
class UnsupportedPlan(FieldPlan):
    """A combination no code can be emitted for; becomes a comment."""

    strategy: Strategy = Strategy.UNSUPPORTED
    reason: str = ""


@dataclass
class SkippedField(FieldPlan):
    """A field that produces no assignment and is listed as ignored.

    An empty reason means the field was explicitly ignored and nothing is
    emitted for it at all.
    """

    strategy: Strategy = Strategy.SKIPPED
    reason: str = ""


@dataclass
class ProcedurePlan:
    """One generated mapping procedure for a (target, source) pair."""

    target_name: str = ""
    source_name: str = ""
    procedure_name: str = ""
    direction: Direction = Direction.FORWARD
    receiver_type: str = ""
    parameter_type: str = ""
    fields: list[FieldPlan] = field(default_factory=list)

    # No failure-return contract
    is_safe: bool = False

    @property
    def ignored_fields(self) -> list[str]:
        return [plan.field_name for plan in self.fields if isinstance(plan, SkippedField)]


@dataclass
class Registration:
    """A converter entry of the emitted runtime registry."""

    name: str = ""
    function: str = ""
    input_type: str = ""
    output_type: str = ""
    fallible: bool = True


@dataclass
class RegistryPlan:
    """Registrations the default converter registry is populated with."""

    registrations: list[Registration] = field(default_factory=list)


@dataclass
class IR:
    """Complete intermediate representation of one generation run."""

    package_name: str = ""
    procedures: list[ProcedurePlan] = field(default_factory=list)
    registry: RegistryPlan | None = None

    # alias -> import path, for qualified type names
    import_map: dict[str, str] = field(default_factory=dict)

    # Optional generation comment
    generation_comment: str | None = None

    def get_procedure(self, target_name: str, procedure_name: str) -> ProcedurePlan | None:
        for procedure in self.procedures:
            if procedure.target_name == target_name and procedure.procedure_name == procedure_name:
                return procedure
        return None
