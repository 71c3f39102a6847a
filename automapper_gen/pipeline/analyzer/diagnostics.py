"""
Validation diagnostics.

Diagnostics are accumulated, never raised: a validation run always returns
every finding for the schema together with aggregate counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

IGNORE_TAG = 'automapper:"-"'


class Severity(str, Enum):
    """Severity of a diagnostic."""

    ERROR = "error"  # Blocks generation
    WARNING = "warning"  # Reported, generation proceeds


@dataclass
class Diagnostic:
    """A structured validation finding with location and remedy."""

    severity: Severity = Severity.ERROR
    message: str = ""
    target_name: str = ""
    source_name: str = ""
    field_name: str = ""
    fixable: bool = False
    suggestion: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def location(self) -> str:
        if not self.target_name:
            return "converters"
        if not self.field_name:
            return f"{self.source_name} -> {self.target_name}"
        return f"{self.source_name}.{self.field_name} -> {self.target_name}.{self.field_name}"

    def __str__(self) -> str:
        prefix = "[ERROR]" if self.is_error else "[WARN] "
        text = f"{prefix} {self.location()}: {self.message}"
        if self.suggestion:
            text += f"\n         Suggestion: {self.suggestion}"
        return text


@dataclass
class ValidationResult:
    """All diagnostics of one validation run plus aggregate counts."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    def is_valid(self) -> bool:
        """True when there are no errors; warnings never invalidate a schema."""
        return not self.errors

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def for_field(self, target_name: str, field_name: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.target_name == target_name and d.field_name == field_name]
