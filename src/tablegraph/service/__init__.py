"""
Service module - SQLAlchemy-backed collaborators and the FastAPI app.

Provides:
- SqlAlchemyMetadataProvider: table metadata through reflection
- SqlAlchemyRowFetcher: row reads through Core selects
- create_app: Factory for the FastAPI application
- Database utilities (make_engine, get_database_url)
"""

from __future__ import annotations

from .app import create_app
from .database import get_database_url, make_engine
from .fetcher import SqlAlchemyRowFetcher
from .metadata import SqlAlchemyMetadataProvider, native_type_for

__all__ = [
    # App factory
    "create_app",
    # Database
    "make_engine",
    "get_database_url",
    # Collaborators
    "SqlAlchemyMetadataProvider",
    "SqlAlchemyRowFetcher",
    "native_type_for",
]
