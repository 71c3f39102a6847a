"""
Struct tag and doc-comment annotation parsing.

Tags follow the struct tag grammar of the mapped Go code:

    `json:"name" automapper:"field=FullName,converter=Upper"`
    `automapper:"dto=AddressDTO"`
    `automapper:"-"`

Annotations are doc-comment lines on target types and functions:

    // automapper:from=User,db.UserDB
    // automapper:bidirectional
    // automapper:converter
    // automapper:inverter=TimeToString
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..errors import SchemaLoadError

TAG_PATTERN = re.compile(r'automapper:"([^"]*)"')

FROM_ANNOTATION = "automapper:from="
BIDIRECTIONAL_ANNOTATION = "automapper:bidirectional"
CONVERTER_ANNOTATION = "automapper:converter"
INVERTER_ANNOTATION = "automapper:inverter="


@dataclass
class MappingTag:
    """Directives carried by the automapper struct tag of a target field."""

    field: str | None = None
    converter: str | None = None
    nested: str | None = None
    ignored: bool = False


def parse_mapping_tag(tag: str | None) -> MappingTag:
    """
    Parse the automapper part of a struct tag.

    Args:
        tag: Full struct tag text, backquotes optional

    Returns:
        The parsed directives; an empty MappingTag when there is no automapper key

    Raises:
        SchemaLoadError: If a directive key is unknown or has no value
    """
    if not tag:
        return MappingTag()

    match = TAG_PATTERN.search(tag.strip("`"))
    if match is None:
        return MappingTag()

    value = match.group(1).strip()
    if value == "-":
        return MappingTag(ignored=True)

    result = MappingTag()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue

        key, sep, directive = part.partition("=")
        key = key.strip()
        directive = directive.strip()
        if not sep or not directive:
            raise SchemaLoadError(f"Malformed automapper tag directive '{part}' in {tag!r}")

        if key == "field":
            result.field = directive
        elif key == "converter":
            result.converter = directive
        elif key == "dto":
            result.nested = directive
        else:
            raise SchemaLoadError(f"Unknown automapper tag directive '{key}' in {tag!r}")

    return result


def _comment_text(line: str) -> str:
    text = line.strip()
    if text.startswith("//"):
        return text[2:].strip()
    if text.startswith("/*") and text.endswith("*/"):
        return text[2:-2].strip()
    return text


def split_names(text: str) -> list[str]:
    """Split a comma-separated name list, dropping blanks."""
    return [name.strip() for name in text.split(",") if name.strip()]


@dataclass
class Annotations:
    """Automapper annotations found in a doc comment."""

    sources: list[str] = field(default_factory=list)
    bidirectional: bool = False
    converter: bool = False
    inverts: str | None = None


def parse_annotations(doc: list[str] | str | None) -> Annotations:
    """Parse automapper annotations from doc-comment lines."""
    if not doc:
        return Annotations()

    lines = doc.splitlines() if isinstance(doc, str) else doc
    result = Annotations()

    for line in lines:
        text = _comment_text(line)
        if text.startswith(FROM_ANNOTATION):
            result.sources = split_names(text[len(FROM_ANNOTATION) :])
        elif text.startswith(INVERTER_ANNOTATION):
            result.inverts = text[len(INVERTER_ANNOTATION) :].strip() or None
        elif text == CONVERTER_ANNOTATION:
            result.converter = True
        elif BIDIRECTIONAL_ANNOTATION in text:
            result.bidirectional = True

    return result
