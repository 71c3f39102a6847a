"""
Analyzer module.

Contains field resolution, shape classification, validation and mapping
planning.
"""

from __future__ import annotations

from .diagnostics import Diagnostic, Severity, ValidationResult
from .field_resolver import FieldBinding, FieldResolver, NamingPolicy
from .ir_nodes import (
    IR,
    ConverterPlan,
    DirectPlan,
    Direction,
    FieldPlan,
    NestedScalarPlan,
    NestedSequencePlan,
    ProcedurePlan,
    RegistryPlan,
    SequenceElementCase,
    ShapeAdaptation,
    SkippedField,
    UnsupportedPlan,
)
from .planner import MappingPlanner
from .shapes import classify, types_compatible
from .validator import SchemaValidator, validate

__all__ = [
    "IR",
    "ConverterPlan",
    "Diagnostic",
    "DirectPlan",
    "Direction",
    "FieldBinding",
    "FieldPlan",
    "FieldResolver",
    "MappingPlanner",
    "NamingPolicy",
    "NestedScalarPlan",
    "NestedSequencePlan",
    "ProcedurePlan",
    "RegistryPlan",
    "SchemaValidator",
    "SequenceElementCase",
    "Severity",
    "ShapeAdaptation",
    "SkippedField",
    "UnsupportedPlan",
    "ValidationResult",
    "classify",
    "types_compatible",
    "validate",
]
