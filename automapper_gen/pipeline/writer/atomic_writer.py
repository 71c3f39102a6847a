"""
Atomic file writer for safe code generation.

Ensures that file writes are atomic to prevent data corruption
from interrupted operations.
"""

from __future__ import annotations

import re
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import OutputValidationError

PACKAGE_CLAUSE = re.compile(r"^package\s+\w+\s*$", re.MULTILINE)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file

    This ensures that an interrupted write operation never leaves
    the target file in an incomplete state.
    """

    def __init__(self, validate_go: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_go: Optional validation function for Go code
        """
        self._validate_go = validate_go or self._default_validate_go

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )

        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate:
                self.validate(content)

            temp_path.replace(path)

        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def write_if_not_exists(self, path: Path, content: str, validate: bool = True) -> bool:
        """Write content only if the file doesn't exist.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate before finalizing

        Returns:
            True if file was written

        Raises:
            FileExistsError: If the file already exists
            OutputValidationError: If validation fails
        """
        if path.exists():
            raise FileExistsError(f"Output file already exists: {path}. Use force mode to overwrite.")

        self.write(path, content, validate)
        return True

    def validate(self, content: str) -> None:
        """Run the configured Go validation on ``content``."""
        self._validate_go(content)

    def _default_validate_go(self, content: str) -> None:
        """Default Go validation.

        Args:
            content: Go code to validate

        Raises:
            OutputValidationError: If validation fails
        """
        # Basic structural checks (no full parsing without the Go toolchain)
        if not PACKAGE_CLAUSE.search(content):
            raise OutputValidationError("Generated Go code is missing a package clause")

        open_braces = content.count("{")
        close_braces = content.count("}")
        if open_braces != close_braces:
            raise OutputValidationError(
                f"Generated Go code has unbalanced braces: {open_braces} open, {close_braces} close"
            )

        open_parens = content.count("(")
        close_parens = content.count(")")
        if open_parens != close_parens:
            raise OutputValidationError(
                f"Generated Go code has unbalanced parentheses: {open_parens} open, {close_parens} close"
            )
