"""
Schema model module.

Contains the schema node definitions, the struct tag parser and the
schema document loader.
"""

from __future__ import annotations

from .loader import SchemaLoader, load_schema
from .nodes import (
    ConverterDef,
    FunctionSignature,
    Schema,
    ShapeKind,
    SignatureKind,
    SourceField,
    SourceRecordType,
    TargetField,
    TargetRecordType,
    TypeShape,
)
from .tags import MappingTag, parse_annotations, parse_mapping_tag

__all__ = [
    "ConverterDef",
    "FunctionSignature",
    "MappingTag",
    "Schema",
    "SchemaLoader",
    "ShapeKind",
    "SignatureKind",
    "SourceField",
    "SourceRecordType",
    "TargetField",
    "TargetRecordType",
    "TypeShape",
    "load_schema",
    "parse_annotations",
    "parse_mapping_tag",
]
