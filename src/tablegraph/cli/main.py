#!/usr/bin/env python3
"""
tablegraph CLI - Main entry point.

Usage:
    tablegraph serve [--host HOST] [--port PORT]       # Run the HTTP API
    tablegraph query <schema> <table> '<document>'     # Run one query, print JSON
    tablegraph sdl <schema> <table>                    # Print the compiled schema
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from graphql import print_schema

from ..config import TablegraphConfig, load_config
from ..core.errors import QueryError, TablegraphError
from ..runtime.executor import QueryExecutor
from ..service.database import make_engine
from ..service.fetcher import SqlAlchemyRowFetcher
from ..service.metadata import SqlAlchemyMetadataProvider


def _load(args: argparse.Namespace) -> TablegraphConfig:
    config = load_config(args.config)
    if args.database_url:
        config.database_url = args.database_url
    return config


def _executor(config: TablegraphConfig) -> QueryExecutor:
    engine = make_engine(config.database_url)
    return QueryExecutor(
        SqlAlchemyMetadataProvider(engine, config),
        SqlAlchemyRowFetcher(engine),
        scalar_policy=config.scalar_policy,
    )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from ..service.app import create_app

    app = create_app(_load(args))
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    """Execute a query document and print the result as JSON."""
    config = _load(args)
    variables = json.loads(args.variables) if args.variables else None

    try:
        data = _executor(config).run(args.schema, args.table, args.document, variables)
    except QueryError as e:
        locations = "".join(f" (line {line}, column {column})" for line, column in e.locations)
        print(f"Error: {e.message}{locations}", file=sys.stderr)
        return 1
    except TablegraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(data, indent=2, default=str))
    return 0


def cmd_sdl(args: argparse.Namespace) -> int:
    """Print the schema built for a table."""
    config = _load(args)

    try:
        schema = _executor(config).build_schema(args.schema, args.table)
    except TablegraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(print_schema(schema))
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tablegraph",
        description="GraphQL over relational table metadata",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--config", help="Path to tablegraph.yaml (default: $TABLEGRAPH_CONFIG)")
    parser.add_argument("--database-url", help="Database URL (overrides config and $DATABASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind host")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # query
    query_parser = subparsers.add_parser("query", help="Run a query document")
    query_parser.add_argument("schema", help="Schema name")
    query_parser.add_argument("table", help="Table name")
    query_parser.add_argument("document", help="GraphQL query document")
    query_parser.add_argument("--variables", help="Variables as a JSON object")

    # sdl
    sdl_parser = subparsers.add_parser("sdl", help="Print the schema for a table")
    sdl_parser.add_argument("schema", help="Schema name")
    sdl_parser.add_argument("table", help="Table name")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "serve": cmd_serve,
        "query": cmd_query,
        "sdl": cmd_sdl,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
