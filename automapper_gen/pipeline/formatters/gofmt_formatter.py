"""
gofmt formatter for Go code.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from ..config import FormatterConfig
from .base import Formatter

logger = logging.getLogger(__name__)


class GofmtFormatter(Formatter):
    """Formatter using gofmt for Go code."""

    def __init__(self, command: str = "gofmt"):
        self.command = command
        self._available = None

    def is_available(self) -> bool:
        """Check if gofmt is installed."""
        if self._available is None:
            self._available = shutil.which(self.command) is not None
        return self._available

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Format Go code using gofmt.

        Args:
            code: Go source code to format
            config: Formatter configuration

        Returns:
            Formatted code, or the input unchanged when gofmt is missing or fails
        """
        if not self.is_available():
            logger.warning("%s not found, output left unformatted", self.command)
            return code

        cmd = [self.command]
        if config.simplify:
            cmd.append("-s")

        try:
            # gofmt reads stdin and writes stdout when given no file
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                timeout=30,
            )
        except subprocess.SubprocessError as e:
            logger.warning("%s failed: %s", self.command, e)
            return code

        if result.returncode != 0:
            logger.warning("%s rejected the generated code: %s", self.command, result.stderr.strip())
            return code

        return result.stdout
