"""Automapper Generator

A Python package for generating reflection-free Go mapping code between
annotated target record types and their source record types, with static
validation of every mapping before any code is written.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    AutomapperError,
    CodeGeneratorConfig,
    FormatterConfig,
    GenerationError,
    OutputConfig,
    OutputMode,
    OutputValidationError,
    PipelineGenerator,
    SchemaLoadError,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "AutomapperError",
    "GenerationError",
    "OutputValidationError",
    "SchemaLoadError",
    "AtomicWriter",
]
