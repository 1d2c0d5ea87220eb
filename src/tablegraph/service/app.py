"""
App factory for tablegraph.

Creates a pre-configured FastAPI application with:
- CORS middleware
- Health check endpoint
- Query / GraphQL / SDL endpoints
- GraphiQL playground
- Access log filter for noisy paths (healthchecks)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from ..config import TablegraphConfig, load_config
from ..playground import mount_playground
from .database import make_engine


class AccessLogFilter(logging.Filter):
    """
    Drops uvicorn access lines for a set of request paths.

    uvicorn logs access lines with args (client, method, path, version,
    status); the path is compared without its query string.
    """

    def __init__(self, paths: Iterable[str]):
        super().__init__()
        self.paths = frozenset(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if not isinstance(args, tuple) or len(args) < 3:
            return True
        path = str(args[2]).split("?", 1)[0]
        return path not in self.paths


def quiet_access_log(paths: Iterable[str]) -> AccessLogFilter:
    """Install an AccessLogFilter on uvicorn.access, replacing any earlier one."""
    uvicorn_access = logging.getLogger("uvicorn.access")
    for existing in [f for f in uvicorn_access.filters if isinstance(f, AccessLogFilter)]:
        uvicorn_access.removeFilter(existing)
    access_filter = AccessLogFilter(paths)
    uvicorn_access.addFilter(access_filter)
    return access_filter


def create_app(
    config: Optional[TablegraphConfig] = None,
    *,
    engine: Optional[Engine] = None,
    cors_origins: Optional[list[str]] = None,
    playground: bool = True,
    playground_path: str = "/playground",
    quiet_paths: Iterable[str] = ("/health",),
) -> FastAPI:
    """
    Create the tablegraph FastAPI app.

    Args:
        config: Configuration (default: load_config())
        engine: Engine to query (default: built from config.database_url / DATABASE_URL)
        cors_origins: CORS allowed origins (default: all)
        playground: Enable the GraphiQL page
        playground_path: URL path for the playground
        quiet_paths: Request paths left out of the uvicorn access log

    Returns:
        Configured FastAPI application
    """
    from ..api.router import configure, router

    config = config or load_config()
    owns_engine = engine is None
    engine = engine or make_engine(config.database_url)
    configure(engine, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        quiet_access_log(quiet_paths)
        yield
        if owns_engine:
            engine.dispose()

    app = FastAPI(
        title="tablegraph",
        description="GraphQL over relational table metadata",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    if playground:
        mount_playground(app, path=playground_path, graphql_url="/graphql")

    return app
