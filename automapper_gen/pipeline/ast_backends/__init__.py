"""
Code generation backends.
"""

from __future__ import annotations

from .base import AstBackend
from .go_backend import GoBackend

__all__ = [
    "AstBackend",
    "GoBackend",
]
