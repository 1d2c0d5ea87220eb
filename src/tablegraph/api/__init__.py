"""
API module - FastAPI endpoints.
"""

from __future__ import annotations

from .router import configure, get_config, get_engine, get_executor, router

__all__ = [
    "router",
    "configure",
    "get_config",
    "get_engine",
    "get_executor",
]
