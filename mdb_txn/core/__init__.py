"""
Core connection handling for MDB_TXN.
"""

from .connection import ConnectionManager

__all__ = ["ConnectionManager"]
