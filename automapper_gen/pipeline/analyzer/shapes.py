"""
Type shape classification.

Reduces declared type text to a TypeShape so that both sides of every field
comparison are normalized before validation and planning.
"""

from __future__ import annotations

from ...utils import POINTER_SIGIL, SEQUENCE_SIGIL
from ..schema.nodes import ShapeKind, TypeShape


def base_type(type_text: str) -> str:
    """Strip every leading pointer and sequence sigil from a type."""
    text = type_text.strip()
    while True:
        if text.startswith(POINTER_SIGIL):
            text = text[len(POINTER_SIGIL) :]
        elif text.startswith(SEQUENCE_SIGIL):
            text = text[len(SEQUENCE_SIGIL) :]
        else:
            return text


def classify(type_text: str) -> TypeShape:
    """
    Classify declared type text.

    Never fails: text that is neither a pointer nor a sequence (maps, fixed
    arrays, channels, anything unrecognized) is an opaque scalar.

    Args:
        type_text: Declared type, e.g. "*string" or "[]*Address"

    Returns:
        The TypeShape of the declaration
    """
    text = type_text.strip()

    if text.startswith(POINTER_SIGIL):
        return TypeShape(kind=ShapeKind.POINTER, text=text, base_type_name=base_type(text))

    if text.startswith(SEQUENCE_SIGIL):
        element = text[len(SEQUENCE_SIGIL) :]
        return TypeShape(
            kind=ShapeKind.SEQUENCE,
            text=text,
            base_type_name=base_type(text),
            element_is_pointer=element.startswith(POINTER_SIGIL),
        )

    return TypeShape(kind=ShapeKind.SCALAR, text=text, base_type_name=text)


def types_compatible(left: str, right: str) -> bool:
    """
    Relaxed base-type equality.

    Equal base names match; so does a qualified name whose trailing segment
    equals the unqualified name on the other side (``db.Role`` ~ ``Role``).
    """
    left = base_type(left)
    right = base_type(right)

    if left == right:
        return True

    if "." in left and "." not in right:
        return left.split(".")[-1] == right

    if "." in right and "." not in left:
        return right.split(".")[-1] == left

    return False
