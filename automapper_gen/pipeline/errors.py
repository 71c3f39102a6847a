"""
Exceptions raised at the edges of the generation pipeline.

Schema problems found by the validator are diagnostics, not exceptions; these
classes cover what the pipeline cannot continue from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analyzer.diagnostics import ValidationResult


class AutomapperError(Exception):
    """Base class of all automapper generator errors."""

    pass


class SchemaLoadError(AutomapperError):
    """Raised when a schema document or config file is malformed.

    This can happen when:
    - The file cannot be read or is not valid JSON
    - A required key is missing or has the wrong type
    - A struct tag cannot be parsed
    """

    pass


class GenerationError(AutomapperError):
    """Raised when validation finds errors; no code is produced."""

    def __init__(self, message: str, result: ValidationResult):
        super().__init__(message)
        self.result = result


class OutputValidationError(AutomapperError):
    """Raised when rendered code fails the pre-write check."""

    pass
