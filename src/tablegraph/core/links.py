"""
Link affordances - {rel, href} pairs describing what can be done with a row.

Every object type built by tablegraph exposes the same field:

    links: [Link!]

resolved from the table's details/update URL templates.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from graphql import GraphQLField, GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLString

from .defs import LINK_DISABLED, LinkSpec, TableDescriptor, UrlTemplate


LINKS_FIELD_NAME = "links"

LINK_TYPE = GraphQLObjectType(
    name="Link",
    description="An action available on a row",
    fields={
        "rel": GraphQLField(GraphQLString),
        "href": GraphQLField(GraphQLString),
    },
)


def _evaluate(spec: LinkSpec, row: Mapping[str, Any]) -> Optional[str]:
    if spec is None or spec is LINK_DISABLED:
        return None
    if isinstance(spec, UrlTemplate):
        return spec.evaluate(row)
    raise TypeError(f"Unsupported link template: {spec!r}")


def build_links(table: TableDescriptor, row: Mapping[str, Any]) -> list[dict[str, str]]:
    """
    Build the links for one row, details first, then update.

    Absent or disabled templates are skipped, so the result is always a
    list (possibly empty).
    """
    links = []
    for rel, spec in (("details", table.details_url), ("update", table.update_url)):
        href = _evaluate(spec, row)
        if href is not None:
            links.append({"rel": rel, "href": href})
    return links


class LinksResolver:
    """Field resolver for `links`, bound to one table."""

    def __init__(self, table: TableDescriptor):
        self.table = table

    def __call__(self, source: Any, info: Any) -> Optional[list[dict[str, str]]]:
        if not isinstance(source, Mapping):
            return None
        return build_links(self.table, source)


def links_field(table: TableDescriptor) -> GraphQLField:
    """The shared `links` field definition for a table's object type."""
    return GraphQLField(
        GraphQLList(GraphQLNonNull(LINK_TYPE)),
        description="Links for this row",
        resolve=LinksResolver(table),
    )
