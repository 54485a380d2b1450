"""
Statement generation for lookups and updates by identifier.
"""

from .statements import StatementBuilder

__all__ = ["StatementBuilder"]
