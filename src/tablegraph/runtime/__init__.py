"""
Runtime module - query execution.
"""

from __future__ import annotations

from .context import ExecutionContext
from .executor import QueryExecutor, QueryResult

__all__ = [
    "ExecutionContext",
    "QueryExecutor",
    "QueryResult",
]
