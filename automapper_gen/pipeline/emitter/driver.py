"""
Emission driver.

Lowers procedure plans into ordered statement sequences. Purely
translational: every decision was taken by the planner.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import (
    ConverterPlan,
    DirectPlan,
    Direction,
    FieldPlan,
    NestedScalarPlan,
    NestedSequencePlan,
    ProcedurePlan,
    SequenceElementCase,
    ShapeAdaptation,
    SkippedField,
    UnsupportedPlan,
)
from .statements import (
    AddressOf,
    Allocate,
    AllocateSequence,
    AppendTo,
    Assign,
    Call,
    Comment,
    Declare,
    Deref,
    EmittedProcedure,
    Expr,
    FailureCheck,
    Guard,
    Index,
    Invoke,
    Length,
    Literal,
    Loop,
    MethodCall,
    Name,
    NilArgumentGuard,
    ReturnSuccess,
    Scope,
    Selector,
    Statement,
)

RECEIVER = "d"
SOURCE_PARAMETER = "src"
DESTINATION_PARAMETER = "dst"

ERR = Name("err")
RESULT = Name("result")
NESTED = Name("nested")
ITEM = Name("item")
INDEX = Name("i")


def nil_note(field_name: str) -> str:
    return f"{field_name}: nil pointer will result in nil"


def zero_note(field_name: str) -> str:
    return f"{field_name}: nil pointer will result in zero value"


class EmissionDriver:
    """Turns ProcedurePlans into EmittedProcedures."""

    def __init__(self):
        # Record read from and record written to; swapped for reverse procedures
        self._input: Name = Name(SOURCE_PARAMETER)
        self._output: Name = Name(RECEIVER)

    def emit(self, procedure: ProcedurePlan) -> EmittedProcedure:
        """
        Lower a procedure plan.

        The statement sequence always starts with a nil-argument guard and
        ends with an explicit success return. Ignored fields produce no
        statement but are listed in the ignored summary.

        Args:
            procedure: The planned procedure

        Returns:
            The emitted procedure
        """
        forward = procedure.direction == Direction.FORWARD
        if forward:
            parameter = SOURCE_PARAMETER
            self._input, self._output = Name(SOURCE_PARAMETER), Name(RECEIVER)
            doc = f"{procedure.procedure_name} maps from {procedure.source_name} to {procedure.target_name}"
        else:
            parameter = DESTINATION_PARAMETER
            self._input, self._output = Name(RECEIVER), Name(DESTINATION_PARAMETER)
            doc = f"{procedure.procedure_name} maps from {procedure.target_name} to {procedure.source_name}"

        with_error = not procedure.is_safe
        statements: list[Statement] = [
            NilArgumentGuard(
                argument=parameter,
                message="source is nil" if forward else "destination is nil",
                with_error=with_error,
            )
        ]

        for plan in procedure.fields:
            statements.extend(self.emit_field(plan))

        statements.append(ReturnSuccess(with_error=with_error))

        return EmittedProcedure(
            name=procedure.procedure_name,
            doc=doc,
            receiver_name=RECEIVER,
            receiver_type=procedure.receiver_type,
            parameter_name=parameter,
            parameter_type=procedure.parameter_type,
            returns_error=with_error,
            statements=statements,
            ignored_fields=procedure.ignored_fields,
        )

    def emit_field(self, plan: FieldPlan) -> list[Statement]:
        """Lower one field plan."""
        if isinstance(plan, SkippedField):
            if not plan.reason:
                return []
            return [Comment(f"{plan.field_name}: {plan.reason}")]

        if isinstance(plan, UnsupportedPlan):
            return [Comment(f"{plan.field_name}: {plan.reason}")]

        if isinstance(plan, DirectPlan):
            return self._direct(plan)

        if isinstance(plan, ConverterPlan):
            return self._converter(plan)

        if isinstance(plan, NestedScalarPlan):
            return self._nested_scalar(plan)

        if isinstance(plan, NestedSequencePlan):
            return self._nested_sequence(plan)

        raise TypeError(f"Unknown field plan: {type(plan).__name__}")

    def _read(self, plan: FieldPlan) -> Selector:
        return Selector(self._input, plan.read_field)

    def _write(self, plan: FieldPlan) -> Selector:
        return Selector(self._output, plan.write_field)

    @staticmethod
    def _adapt(
        adaptation: ShapeAdaptation, read: Expr, field_name: str, body: list[Statement]
    ) -> list[Statement]:
        """Wrap ``body`` in the guard or scope the adaptation requires."""
        if adaptation == ShapeAdaptation.POINTER_TO_POINTER:
            return [Guard(subject=read, body=body, note=nil_note(field_name))]
        if adaptation == ShapeAdaptation.POINTER_TO_VALUE:
            return [Guard(subject=read, body=body, note=zero_note(field_name))]
        if len(body) == 1:
            return body
        return [Scope(body=body)]

    # --- direct -----------------------------------------------------------------

    def _direct(self, plan: DirectPlan) -> list[Statement]:
        read, write = self._read(plan), self._write(plan)

        if plan.raw or plan.adaptation == ShapeAdaptation.VALUE_TO_VALUE:
            return [Assign(write, read)]

        if plan.adaptation == ShapeAdaptation.POINTER_TO_VALUE:
            body: list[Statement] = [Assign(write, Deref(read))]
        else:
            # Copy so the written pointer never aliases the input
            value = Deref(read) if plan.adaptation.guarded else read
            body = [Declare("v", value=value), Assign(write, AddressOf(Name("v")))]

        return self._adapt(plan.adaptation, read, plan.field_name, body)

    # --- converter --------------------------------------------------------------

    def _converter(self, plan: ConverterPlan) -> list[Statement]:
        read, write = self._read(plan), self._write(plan)
        argument = Deref(read) if plan.adaptation.guarded else read
        call = Call(plan.function, (argument,))
        context = f"converting field {plan.field_name}"

        if not plan.fallible:
            if plan.adaptation.wraps:
                body: list[Statement] = [
                    Invoke(call, results=[RESULT], declare=True),
                    Assign(write, AddressOf(RESULT)),
                ]
            else:
                body = [Assign(write, call)]
            return self._adapt(plan.adaptation, read, plan.field_name, body)

        if plan.adaptation.wraps:
            body = [
                Declare(RESULT.ident, type_name=plan.result_type),
                Declare(ERR.ident, type_name="error"),
                Invoke(call, results=[RESULT, ERR]),
                FailureCheck(ERR.ident, context),
                Assign(write, AddressOf(RESULT)),
            ]
        else:
            body = [
                Declare(ERR.ident, type_name="error"),
                Invoke(call, results=[write, ERR]),
                FailureCheck(ERR.ident, context),
            ]

        return self._adapt(plan.adaptation, read, plan.field_name, body)

    # --- nested -----------------------------------------------------------------

    def _nested_call(
        self,
        receiver: Expr,
        plan: NestedScalarPlan | NestedSequencePlan,
        argument: Expr,
        index: str | None = None,
    ) -> list[Statement]:
        call = MethodCall(receiver, plan.procedure_name, (argument,))
        if plan.nested_is_safe:
            return [Invoke(call)]
        return [
            Invoke(call, results=[ERR], declare=True),
            FailureCheck(ERR.ident, f"mapping nested field {plan.field_name}", index=index),
        ]

    def _nested_scalar(self, plan: NestedScalarPlan) -> list[Statement]:
        read, write = self._read(plan), self._write(plan)

        if plan.adaptation.wraps:
            body: list[Statement] = [Allocate(NESTED.ident, plan.nested_target)]
        else:
            body = [Declare(NESTED.ident, type_name=plan.nested_target)]

        argument = read if plan.adaptation.guarded else AddressOf(read)
        body.extend(self._nested_call(NESTED, plan, argument))
        body.append(Assign(write, NESTED))

        if plan.adaptation.guarded:
            return self._adapt(plan.adaptation, read, plan.field_name, body)
        return [Scope(body=body)]

    def _nested_sequence(self, plan: NestedSequencePlan) -> list[Statement]:
        read, write = self._read(plan), self._write(plan)
        case = plan.element_case
        index = INDEX.ident

        if case == SequenceElementCase.VALUE_TO_VALUE:
            allocate = AllocateSequence(write, plan.nested_target, False, Length(read))
            loop_body = self._nested_call(Index(write, INDEX), plan, AddressOf(ITEM), index)
            return [Scope(body=[allocate, Loop(ITEM.ident, read, loop_body, index=index)])]

        if case == SequenceElementCase.POINTER_TO_POINTER:
            allocate = AllocateSequence(write, plan.nested_target, True, Length(read))
            element = [Allocate(NESTED.ident, plan.nested_target)]
            element.extend(self._nested_call(NESTED, plan, ITEM, index))
            element.append(Assign(Index(write, INDEX), NESTED))
            loop_body: list[Statement] = [Guard(subject=ITEM, body=element)]
            return [Scope(body=[allocate, Loop(ITEM.ident, read, loop_body, index=index)])]

        if case == SequenceElementCase.VALUE_TO_POINTER:
            allocate = AllocateSequence(write, plan.nested_target, True, Length(read))
            loop_body = [Allocate(NESTED.ident, plan.nested_target)]
            loop_body.extend(self._nested_call(NESTED, plan, AddressOf(ITEM), index))
            loop_body.append(Assign(Index(write, INDEX), NESTED))
            return [Scope(body=[allocate, Loop(ITEM.ident, read, loop_body, index=index)])]

        # Pointer elements into values: nil elements are dropped, destination is compacted
        allocate = AllocateSequence(write, plan.nested_target, False, Literal("0"), capacity=Length(read))
        loop_index = None if plan.nested_is_safe else index
        element = [Declare(NESTED.ident, type_name=plan.nested_target)]
        element.extend(self._nested_call(NESTED, plan, ITEM, loop_index))
        element.append(AppendTo(write, NESTED))
        loop_body = [Guard(subject=ITEM, body=element)]
        return [Scope(body=[allocate, Loop(ITEM.ident, read, loop_body, index=loop_index)])]
