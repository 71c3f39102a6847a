"""
Pipeline - static mapping code generator.

This module provides a multi-phase architecture for generating
reflection-free Go mapping code from annotated record types:

1. Phase 1 (Loader): Parse the schema document into the Schema model
2. Phase 2 (Validator): Static analysis; errors block generation
3. Phase 3 (Planner): Per-field strategy and shape adaptation plans
4. Phase 4 (Emitter): Plans to backend-agnostic statements
5. Phase 5 (Backend): Statements to Go source
6. Phase 6 (Formatter): Optional post-processing with gofmt
7. Phase 7 (Writer): Atomic write of the output file
"""

from __future__ import annotations

from .config import CodeGeneratorConfig, ConverterConfig, ExternalPackage, FormatterConfig, OutputConfig, OutputMode
from .errors import AutomapperError, GenerationError, OutputValidationError, SchemaLoadError
from .generator import PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "ConverterConfig",
    "ExternalPackage",
    "FormatterConfig",
    "OutputConfig",
    "OutputMode",
    "AutomapperError",
    "GenerationError",
    "OutputValidationError",
    "SchemaLoadError",
    "AtomicWriter",
]
