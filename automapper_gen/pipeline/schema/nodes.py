"""
Schema model node definitions.

These nodes are the passive description of what to generate: the target
record types carrying a mapping intent, the catalogue of source record types,
and the converter functions available to bridge field types. They are built
once per generation run by the schema loader and only read afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ShapeKind(str, Enum):
    """Wrapper level of a declared field type."""

    SCALAR = "scalar"  # T
    POINTER = "pointer"  # *T
    SEQUENCE = "sequence"  # []T


@dataclass(frozen=True)
class TypeShape:
    """A declared type reduced to at most one wrapper level."""

    kind: ShapeKind = ShapeKind.SCALAR
    text: str = ""  # Declared text, e.g. "[]*Address"
    base_type_name: str = ""  # Innermost scalar name, e.g. "Address"

    # Only meaningful for sequences: whether the element is itself a pointer
    element_is_pointer: bool = False

    @property
    def is_pointer(self) -> bool:
        return self.kind == ShapeKind.POINTER

    @property
    def is_sequence(self) -> bool:
        return self.kind == ShapeKind.SEQUENCE

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class SourceField:
    """A field of a source record type."""

    name: str = ""
    shape: TypeShape = field(default_factory=TypeShape)


@dataclass
class SourceRecordType:
    """A record type that target records can be populated from."""

    name: str = ""  # Catalogue key, qualified for external types ("db.UserDB")
    fields: dict[str, SourceField] = field(default_factory=dict)
    origin_module: str = ""
    is_external: bool = False
    import_path: str = ""


@dataclass
class TargetField:
    """A field of a target record type and its mapping directives."""

    name: str = ""
    declared_shape: TypeShape = field(default_factory=TypeShape)
    explicit_source_name: str | None = None
    converter_ref: str | None = None
    nested_target_ref: str | None = None
    ignored: bool = False

    @property
    def has_directive(self) -> bool:
        """Whether the field carries an explicit mapping directive."""
        return bool(self.explicit_source_name or self.converter_ref or self.nested_target_ref)


@dataclass
class TargetRecordType:
    """A record type whose instances are populated by generated mapping code."""

    name: str = ""
    declared_sources: list[str] = field(default_factory=list)
    fields: list[TargetField] = field(default_factory=list)
    bidirectional: bool = False


class SignatureKind(str, Enum):
    """Declared calling convention of a converter or inverter."""

    SAFE = "safe"  # func(T) U
    FALLIBLE = "fallible"  # func(T) (U, error)


@dataclass
class FunctionSignature:
    """A function declaration discovered by the schema provider."""

    name: str = ""
    param_types: list[str] = field(default_factory=list)
    return_types: list[str] = field(default_factory=list)
    is_converter: bool = False
    inverts: str | None = None  # Name of the converter function this inverts

    @property
    def is_safe_signature(self) -> bool:
        return len(self.param_types) == 1 and len(self.return_types) == 1

    @property
    def is_fallible_signature(self) -> bool:
        return len(self.param_types) == 1 and len(self.return_types) == 2 and self.return_types[1] == "error"

    def inferred_kind(self) -> SignatureKind | None:
        """The signature kind matching this declaration, if any."""
        if self.is_safe_signature:
            return SignatureKind.SAFE
        if self.is_fallible_signature:
            return SignatureKind.FALLIBLE
        return None


@dataclass
class ConverterDef:
    """A registered converter."""

    name: str = ""
    bound_function: str = ""
    signature_kind: SignatureKind = SignatureKind.FALLIBLE
    inverter_function: str | None = None

    @property
    def is_safe(self) -> bool:
        return self.signature_kind == SignatureKind.SAFE


@dataclass
class Schema:
    """Everything the schema provider hands over to the core."""

    package_name: str = ""
    targets: list[TargetRecordType] = field(default_factory=list)
    sources: dict[str, SourceRecordType] = field(default_factory=dict)
    converters: dict[str, ConverterDef] = field(default_factory=dict)
    functions: dict[str, FunctionSignature] = field(default_factory=dict)

    # alias -> import path, for qualified type names
    import_map: dict[str, str] = field(default_factory=dict)

    def get_target(self, name: str) -> TargetRecordType | None:
        for target in self.targets:
            if target.name == name:
                return target
        return None

    def resolve_converter(self, name: str) -> ConverterDef | None:
        """Resolve a converter reference.

        The catalogue is consulted first, by converter name. A reference that
        is not in the catalogue may still name a declared function directly,
        in which case a definition is derived from its signature.
        """
        if name in self.converters:
            return self.converters[name]

        function = self.functions.get(name)
        if function is None:
            return None

        return ConverterDef(
            name=name,
            bound_function=function.name,
            signature_kind=function.inferred_kind() or SignatureKind.FALLIBLE,
            inverter_function=self.find_inverter(function.name),
        )

    def find_inverter(self, function_name: str) -> str | None:
        """Find a declared function annotated as the inverter of ``function_name``."""
        for candidate in sorted(self.functions):
            if self.functions[candidate].inverts == function_name:
                return candidate
        return None
