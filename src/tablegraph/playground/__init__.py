"""
tablegraph Playground - GraphiQL for a single table's schema.

Usage:
    from tablegraph.playground import mount_playground

    mount_playground(app, path="/playground")
    # then open /playground?schemaName=main&queryName=Item
"""

from __future__ import annotations

import html
import json

from fastapi import FastAPI
from fastapi.responses import HTMLResponse


_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>__TITLE__</title>
  <link rel="stylesheet" href="https://unpkg.com/graphiql@3/graphiql.min.css" />
</head>
<body style="margin: 0;">
  <div id="app" style="height: 100vh;"></div>
  <script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>
  <script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>
  <script crossorigin src="https://unpkg.com/graphiql@3/graphiql.min.js"></script>
  <script>
    const params = new URLSearchParams(window.location.search);
    const target = new URLSearchParams({
      schemaName: params.get("schemaName") || "",
      queryName: params.get("queryName") || "",
    });
    const fetcher = GraphiQL.createFetcher({ url: __GRAPHQL_URL__ + "?" + target.toString() });
    ReactDOM.createRoot(document.getElementById("app")).render(
      React.createElement(GraphiQL, { fetcher: fetcher })
    );
  </script>
</body>
</html>
"""


def get_playground_html(
    *,
    graphql_url: str = "/graphql",
    title: str = "tablegraph Playground",
) -> str:
    """
    Get Playground HTML with injected configuration.

    Args:
        graphql_url: URL of the GraphQL endpoint
        title: Page title

    Returns:
        HTML string
    """
    return (
        _TEMPLATE
        .replace("__TITLE__", html.escape(title))
        .replace("__GRAPHQL_URL__", json.dumps(graphql_url))
    )


def mount_playground(
    app: FastAPI,
    *,
    path: str = "/playground",
    graphql_url: str = "/graphql",
    title: str = "tablegraph Playground",
) -> None:
    """
    Mount the playground page on a FastAPI app.

    Args:
        app: FastAPI application
        path: URL path for the page
        graphql_url: URL of the GraphQL endpoint
        title: Page title
    """
    page = get_playground_html(graphql_url=graphql_url, title=title)

    @app.get(path, response_class=HTMLResponse, include_in_schema=False)
    def playground() -> str:
        return page


__all__ = ["get_playground_html", "mount_playground"]
