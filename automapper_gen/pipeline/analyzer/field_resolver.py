"""
Field binding resolution.

Determines which source field backs a target field.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ...utils import snake_to_camel
from ..schema.nodes import SourceField, SourceRecordType, TargetField


class NamingPolicy(str, Enum):
    """How source field names may be transliterated before matching."""

    NONE = "none"
    SNAKE_TO_CAMEL = "snake_to_camel"


TRANSLITERATIONS: dict[NamingPolicy, Callable[[str], str]] = {
    NamingPolicy.SNAKE_TO_CAMEL: snake_to_camel,
}


class BindingKind(str, Enum):
    """Which resolution step produced a binding."""

    EXPLICIT = "explicit"
    TRANSLITERATED = "transliterated"
    IDENTICAL = "identical"


@dataclass
class FieldBinding:
    """The resolved source field name for a target field."""

    source_field_name: str = ""
    kind: BindingKind = BindingKind.IDENTICAL
    source_field: SourceField | None = None

    # Every source field name the naming policy maps onto the target name
    candidates: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.source_field is not None

    @property
    def is_ambiguous(self) -> bool:
        return len(self.candidates) > 1


class FieldResolver:
    """Resolves target fields against source record types."""

    def __init__(self, naming_policy: NamingPolicy = NamingPolicy.NONE):
        self.naming_policy = naming_policy

    def transliteration_candidates(self, target_field: TargetField, source: SourceRecordType) -> list[str]:
        """Source field names whose transliteration equals the target field name, in lexicographic order."""
        transliterate = TRANSLITERATIONS.get(self.naming_policy)
        if transliterate is None:
            return []
        return [name for name in sorted(source.fields) if transliterate(name) == target_field.name]

    def resolve(self, target_field: TargetField, source: SourceRecordType) -> FieldBinding:
        """
        Resolve the source field name for ``target_field``.

        First match wins: the explicit source name, then the naming policy's
        transliteration (lexicographically first candidate), then the
        identical name. A binding that does not exist in ``source`` is still
        returned, with ``found`` false, so callers can report it.

        Args:
            target_field: The field to bind
            source: The source record type to bind against

        Returns:
            FieldBinding describing the outcome
        """
        if target_field.explicit_source_name:
            name = target_field.explicit_source_name
            return FieldBinding(
                source_field_name=name,
                kind=BindingKind.EXPLICIT,
                source_field=source.fields.get(name),
            )

        candidates = self.transliteration_candidates(target_field, source)
        if candidates:
            name = candidates[0]
            return FieldBinding(
                source_field_name=name,
                kind=BindingKind.TRANSLITERATED,
                source_field=source.fields[name],
                candidates=candidates,
            )

        return FieldBinding(
            source_field_name=target_field.name,
            kind=BindingKind.IDENTICAL,
            source_field=source.fields.get(target_field.name),
        )
