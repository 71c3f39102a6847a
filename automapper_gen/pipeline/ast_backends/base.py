"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.ir_nodes import IR
from ..config import CodeGeneratorConfig
from ..emitter.statements import EmittedProcedure


class AstBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Indentation unit
    INDENT: str = "\t"

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

    @abstractmethod
    def generate(self, ir: IR, procedures: list[EmittedProcedure]) -> str:
        """
        Generate code for a whole output file.

        Args:
            ir: The intermediate representation (package, imports, registry)
            procedures: Emitted procedures, in output order

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def render_procedure(self, procedure: EmittedProcedure) -> str:
        """
        Render a single procedure.

        Args:
            procedure: The emitted procedure

        Returns:
            Source text of the procedure
        """

    def indent(self, depth: int) -> str:
        return self.INDENT * depth

    def _get_comment_prefix(self) -> str:
        """Get the comment prefix for the language."""
        return "#" if self.FILE_EXTENSION == "py" else "//"
