"""
FastAPI router for tablegraph.

Endpoints:
- POST /query    - {schemaName, queryName, q, variables?} -> raw data
- POST /graphql  - standard GraphQL request for ?schemaName=&queryName=
- GET  /__schema - SDL of the schema built for ?schemaName=&queryName=

Example request:
    POST /query
    {
        "schemaName": "main",
        "queryName": "Item",
        "q": "{ Item(id: 1) { name, links { rel, href }, ownerId { name } } }"
    }

Every request builds its own schema; nothing is cached between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from graphql import print_schema
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import Engine

from ..config import TablegraphConfig
from ..core.errors import NotFoundError, QueryError, SchemaBuildError
from ..runtime.executor import QueryExecutor
from ..service.fetcher import SqlAlchemyRowFetcher
from ..service.metadata import SqlAlchemyMetadataProvider

logger = logging.getLogger(__name__)


# Create router
router = APIRouter()

# Global instances (set by create_app)
_engine: Engine | None = None
_config: TablegraphConfig | None = None


class QueryRequest(BaseModel):
    """Body of POST /query."""
    model_config = ConfigDict(populate_by_name=True)

    schema_name: str = Field(alias="schemaName")
    query_name: str = Field(alias="queryName")
    q: str
    variables: Optional[dict[str, Any]] = None


class GraphQLRequest(BaseModel):
    """Body of POST /graphql."""
    model_config = ConfigDict(populate_by_name=True)

    query: str
    variables: Optional[dict[str, Any]] = None
    operation_name: Optional[str] = Field(default=None, alias="operationName")


def configure(engine: Engine, config: TablegraphConfig):
    """Set the engine and configuration used by the API."""
    global _engine, _config
    _engine = engine
    _config = config


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call configure() first.")
    return _engine


def get_config() -> TablegraphConfig:
    if _config is None:
        raise RuntimeError("Config not initialized. Call configure() first.")
    return _config


def get_executor(
    engine: Engine = Depends(get_engine),
    config: TablegraphConfig = Depends(get_config),
) -> QueryExecutor:
    """Request-scoped executor with its own provider and fetcher."""
    return QueryExecutor(
        SqlAlchemyMetadataProvider(engine, config),
        SqlAlchemyRowFetcher(engine),
        scalar_policy=config.scalar_policy,
    )


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail={"error": str(e)})


def _build_failed(e: SchemaBuildError) -> HTTPException:
    logger.error(f"Schema build failed: {e}")
    return HTTPException(status_code=500, detail={"error": str(e)})


@router.post("/query")
def execute_query(
    request: QueryRequest,
    executor: QueryExecutor = Depends(get_executor),
) -> Any:
    """Run a query document and return its data, or the first error."""
    try:
        return executor.run(request.schema_name, request.query_name, request.q, request.variables)
    except NotFoundError as e:
        raise _not_found(e)
    except SchemaBuildError as e:
        raise _build_failed(e)
    except QueryError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": e.message, "locations": [list(loc) for loc in e.locations]},
        )


@router.post("/graphql")
def execute_graphql(
    request: GraphQLRequest,
    schema_name: str = Query(alias="schemaName"),
    query_name: str = Query(alias="queryName"),
    executor: QueryExecutor = Depends(get_executor),
) -> dict[str, Any]:
    """Standard GraphQL endpoint (used by the playground)."""
    try:
        result = executor.execute(
            schema_name,
            query_name,
            request.query,
            request.variables,
            request.operation_name,
        )
    except NotFoundError as e:
        raise _not_found(e)
    except SchemaBuildError as e:
        raise _build_failed(e)
    return result.formatted()


@router.get("/__schema", response_class=PlainTextResponse)
def get_schema_sdl(
    schema_name: str = Query(alias="schemaName"),
    query_name: str = Query(alias="queryName"),
    executor: QueryExecutor = Depends(get_executor),
) -> str:
    """Return the schema built for a table in SDL form."""
    try:
        return print_schema(executor.build_schema(schema_name, query_name))
    except NotFoundError as e:
        raise _not_found(e)
    except SchemaBuildError as e:
        raise _build_failed(e)
