import logging

import pytest
from graphql import GraphQLInt, GraphQLList, GraphQLNonNull, GraphQLString

from conftest import lookup
from tablegraph.core import (
    ColumnDescriptor,
    ForeignKeyKind,
    NativeType,
    NonNull,
    ObjectTypeBuilder,
    Reference,
    ScalarMapper,
    SchemaBuildError,
    StaticMetadataProvider,
    TableDescriptor,
    TypeRegistry,
    UnsupportedScalarError,
)
from tablegraph.core.links import LINK_TYPE


def build(table, *tables, user_table=None, policy="fallback"):
    registry = TypeRegistry()
    provider = StaticMetadataProvider([table, *tables], user_table=user_table)
    builder = ObjectTypeBuilder(registry, provider, ScalarMapper(policy))
    builder.register_user_type()
    ref = builder.ensure_table_type(table)
    return registry, registry.get(ref.name)


def test_plain_table_has_one_field_per_column_plus_links(user_table):
    registry, user_type = build(user_table)

    assert user_type.name == "main__User"
    assert list(user_type.fields) == ["id", "name", "links"]
    assert registry.names() == ["main__User"]


def test_column_types_and_descriptions(user_table):
    _, user_type = build(user_table)

    id_type = user_type.fields["id"].type
    assert isinstance(id_type, GraphQLNonNull)
    assert id_type.of_type is GraphQLInt
    assert user_type.fields["name"].type is GraphQLString
    assert user_type.fields["name"].description == "Display name"


def test_links_field_type(user_table):
    _, user_type = build(user_table)

    links_type = user_type.fields["links"].type
    assert isinstance(links_type, GraphQLList)
    assert isinstance(links_type.of_type, GraphQLNonNull)
    assert links_type.of_type.of_type is LINK_TYPE


def test_self_referencing_table_builds_one_type():
    employee = TableDescriptor(
        schema_name="main",
        name="Employee",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("managerId", NativeType.INTEGER, fk=lookup("Employee")),
        ],
        pk_column_names=["id"],
    )

    registry, employee_type = build(employee)

    assert registry.names() == ["main__Employee"]
    assert employee_type.fields["managerId"].type is employee_type


def test_mutually_referencing_tables_terminate():
    left = TableDescriptor(
        schema_name="main",
        name="Left",
        columns=[ColumnDescriptor("id", NativeType.INTEGER), ColumnDescriptor("rightId", NativeType.INTEGER, fk=lookup("Right"))],
        pk_column_names=["id"],
    )
    right = TableDescriptor(
        schema_name="main",
        name="Right",
        columns=[ColumnDescriptor("id", NativeType.INTEGER), ColumnDescriptor("leftId", NativeType.INTEGER, fk=lookup("Left"))],
        pk_column_names=["id"],
    )

    registry, left_type = build(left, right)
    right_type = registry.get("main__Right")

    assert sorted(registry.names()) == ["main__Left", "main__Right"]
    assert left_type.fields["rightId"].type is right_type
    assert right_type.fields["leftId"].type is left_type


def test_row_id_key_keeps_scalar():
    table = TableDescriptor(
        schema_name="main",
        name="Item",
        columns=[
            ColumnDescriptor(
                "RowId",
                NativeType.INTEGER,
                required=True,
                fk=lookup("Item", "RowId", kind=ForeignKeyKind.SELF),
            ),
        ],
        pk_column_names=["RowId"],
    )

    registry, item_type = build(table)

    row_id = item_type.fields["RowId"]
    assert isinstance(row_id.type, GraphQLNonNull)
    assert row_id.type.of_type is GraphQLInt
    assert row_id.resolve.mode == "passthrough"
    assert registry.names() == ["main__Item"]


def test_two_columns_share_one_lookup_type(user_table):
    doc = TableDescriptor(
        schema_name="main",
        name="Doc",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("ownerId", NativeType.INTEGER, fk=lookup("User")),
            ColumnDescriptor("editorId", NativeType.INTEGER, fk=lookup("User")),
        ],
        pk_column_names=["id"],
    )

    registry, doc_type = build(doc, user_table)

    assert registry.names() == ["main__Doc", "main__User"]
    assert doc_type.fields["ownerId"].type is doc_type.fields["editorId"].type
    assert doc_type.fields["ownerId"].type is registry.get("main__User")


def test_multi_valued_key_is_list_of_reference(item_table, user_table, tag_table):
    registry, item_type = build(item_table, user_table, tag_table)

    tags = item_type.fields["tags"]
    assert isinstance(tags.type, GraphQLList)
    assert tags.type.of_type is registry.get("main__Tag")
    assert tags.resolve.mode == "multi_valued"


def test_required_lookup_column_drops_non_null(user_table):
    table = TableDescriptor(
        schema_name="main",
        name="Doc",
        columns=[ColumnDescriptor("ownerId", NativeType.INTEGER, required=True, fk=lookup("User"))],
    )

    registry, doc_type = build(table, user_table)

    assert doc_type.fields["ownerId"].type is registry.get("main__User")


def test_missing_lookup_table_degrades_to_scalar(caplog):
    table = TableDescriptor(
        schema_name="main",
        name="Doc",
        columns=[ColumnDescriptor("parentId", NativeType.INTEGER, required=True, fk=lookup("Missing"))],
    )

    with caplog.at_level(logging.WARNING):
        registry, doc_type = build(table)

    field = doc_type.fields["parentId"]
    assert isinstance(field.type, GraphQLNonNull)
    assert field.type.of_type is GraphQLInt
    assert field.resolve.mode == "passthrough"
    assert registry.names() == ["main__Doc"]
    assert "main.Missing" in caplog.text


def test_owning_user_keys_converge_on_user_type(user_table):
    table = TableDescriptor(
        schema_name="main",
        name="Doc",
        columns=[
            ColumnDescriptor("createdBy", NativeType.INTEGER, fk=lookup("Users", schema="core", kind=ForeignKeyKind.USER)),
            ColumnDescriptor("modifiedBy", NativeType.INTEGER, fk=lookup("Users", schema="core", kind=ForeignKeyKind.USER)),
        ],
    )

    registry, doc_type = build(table, user_table, user_table="main.User")

    user_type = registry.get("main__User")
    assert registry.names() == ["main__User", "main__Doc"]
    assert doc_type.fields["createdBy"].type is user_type
    assert doc_type.fields["modifiedBy"].type is user_type
    assert doc_type.fields["createdBy"].resolve.target is user_table


def test_owning_user_key_without_user_table_stays_scalar():
    table = TableDescriptor(
        schema_name="main",
        name="Doc",
        columns=[ColumnDescriptor("createdBy", NativeType.INTEGER, fk=lookup("Users", schema="core", kind=ForeignKeyKind.USER))],
    )

    _, doc_type = build(table)

    assert doc_type.fields["createdBy"].type is GraphQLInt


def test_column_type_expressions(item_table, provider):
    builder = ObjectTypeBuilder(TypeRegistry(), provider)

    expr, target = builder.column_type(item_table.get_column("id"))
    assert expr == NonNull(GraphQLInt)
    assert target is None

    expr, target = builder.column_type(item_table.get_column("ownerid"))
    assert expr == Reference("main__User")
    assert target.name == "User"


def test_column_named_links_is_shadowed(caplog):
    table = TableDescriptor(
        schema_name="main",
        name="Page",
        columns=[ColumnDescriptor("id", NativeType.INTEGER), ColumnDescriptor("links", NativeType.VARCHAR)],
    )

    with caplog.at_level(logging.WARNING):
        _, page_type = build(table)

    assert list(page_type.fields) == ["id", "links"]
    assert page_type.fields["links"].type is not GraphQLString
    assert "shadowed" in caplog.text


def test_sanitized_name_collision_fails():
    table = TableDescriptor(
        schema_name="main",
        name="Page",
        columns=[ColumnDescriptor("created by", NativeType.VARCHAR), ColumnDescriptor("created_by", NativeType.VARCHAR)],
    )

    with pytest.raises(SchemaBuildError):
        build(table)


def test_strict_policy_fails_the_build():
    table = TableDescriptor(
        schema_name="main",
        name="File",
        columns=[ColumnDescriptor("content", NativeType.LONGVARBINARY)],
    )

    with pytest.raises(UnsupportedScalarError):
        build(table, policy="strict")

    _, file_type = build(table)
    assert file_type.fields["content"].type is GraphQLString


def test_tables_sharing_a_sanitized_type_name_fail():
    dashed = TableDescriptor(
        schema_name="main",
        name="my-tab",
        columns=[ColumnDescriptor("id", NativeType.INTEGER, required=True), ColumnDescriptor("alpha", NativeType.VARCHAR)],
        pk_column_names=["id"],
    )
    underscored = TableDescriptor(
        schema_name="main",
        name="my_tab",
        columns=[ColumnDescriptor("id", NativeType.INTEGER, required=True), ColumnDescriptor("beta", NativeType.VARCHAR)],
        pk_column_names=["id"],
    )
    root = TableDescriptor(
        schema_name="main",
        name="Root",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("dashedId", NativeType.INTEGER, fk=lookup("my-tab")),
            ColumnDescriptor("underscoredId", NativeType.INTEGER, fk=lookup("my_tab")),
        ],
        pk_column_names=["id"],
    )

    with pytest.raises(SchemaBuildError) as exc_info:
        build(root, dashed, underscored)
    assert "main__my_tab" in str(exc_info.value)


def test_same_table_reached_twice_reuses_its_type(user_table):
    registry = TypeRegistry()
    builder = ObjectTypeBuilder(registry, StaticMetadataProvider([user_table]))

    first = builder.ensure_table_type(user_table)
    second = builder.ensure_table_type(user_table)

    assert first == second == Reference("main__User")
    assert registry.names() == ["main__User"]
