"""
Converter and inverter signature checks.

Shared by the validator, which reports problems, and by the planner, which
needs to know whether a converter can be called or inverted at all.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..schema.nodes import ConverterDef, FunctionSignature, Schema, SignatureKind

EXPECTED_SIGNATURES = {
    SignatureKind.SAFE: "func(T) U",
    SignatureKind.FALLIBLE: "func(T) (U, error)",
}


def signature_matches(function: FunctionSignature, kind: SignatureKind) -> bool:
    """Whether ``function`` has exactly the arity and outputs ``kind`` demands."""
    if kind == SignatureKind.SAFE:
        return function.is_safe_signature
    return function.is_fallible_signature


def describe_mismatch(function: FunctionSignature, kind: SignatureKind) -> str:
    return (
        f"expected: {EXPECTED_SIGNATURES[kind]}, "
        f"got: {len(function.param_types)} params, {len(function.return_types)} returns"
    )


@dataclass
class ResolvedInverter:
    """Outcome of looking up the inverter of a converter."""

    function: FunctionSignature | None = None
    kind: SignatureKind | None = None
    problem: str = ""  # Why the inverter is unusable, empty when usable

    @property
    def usable(self) -> bool:
        return self.function is not None and self.kind is not None


def resolve_inverter(schema: Schema, converter: ConverterDef) -> ResolvedInverter:
    """
    Find and check the inverter of ``converter``.

    The converter definition may name its inverter explicitly; otherwise a
    declared function annotated as inverting the converter's bound function
    is used. The inverter's own signature decides whether it is Safe or
    Fallible, independently of the converter.
    """
    inverter_name = converter.inverter_function or schema.find_inverter(converter.bound_function)
    if not inverter_name:
        return ResolvedInverter(problem=f"Converter '{converter.name}' has no inverter")

    function = schema.functions.get(inverter_name)
    if function is None:
        return ResolvedInverter(problem=f"Inverter function '{inverter_name}' not found")

    kind = function.inferred_kind()
    if kind is None:
        return ResolvedInverter(
            function=function,
            problem=(
                f"Inverter function '{inverter_name}' has an invalid signature "
                f"(expected func(U) T or func(U) (T, error), got: "
                f"{len(function.param_types)} params, {len(function.return_types)} returns)"
            ),
        )

    return ResolvedInverter(function=function, kind=kind)
