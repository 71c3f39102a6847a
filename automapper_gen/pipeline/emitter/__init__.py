"""
Emitter module.

Lowers procedure plans into backend-agnostic statement sequences.
"""

from __future__ import annotations

from .driver import EmissionDriver
from .statements import EmittedProcedure, Statement, StatementBuilder

__all__ = [
    "EmissionDriver",
    "EmittedProcedure",
    "Statement",
    "StatementBuilder",
]
