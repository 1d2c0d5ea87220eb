"""
Execution context for query processing.

Passed to graphql-core as `context_value`; every resolver reaches the
row fetcher through it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.provider import RowFetcher


@dataclass
class ExecutionContext:
    """Context passed through query execution."""
    fetcher: RowFetcher
