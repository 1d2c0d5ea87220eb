"""
Database utilities for tablegraph.

Provides:
- Engine configuration from DATABASE_URL / config
- StaticPool for in-memory SQLite
"""

from __future__ import annotations

import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool


def get_database_url(url: Optional[str] = None) -> str:
    """Explicit URL, then $DATABASE_URL, then a local SQLite file."""
    return url or os.getenv("DATABASE_URL", "sqlite:///tablegraph.db")


def make_engine(url: Optional[str] = None) -> Engine:
    """Create a synchronous engine for the given URL."""
    url = get_database_url(url)
    kwargs = {"echo": os.getenv("SQL_ECHO", "").lower() == "true"}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory SQLite must share one connection across threads
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)

