import pytest
from sqlalchemy import Column, Date, ForeignKey, Integer, MetaData, String, Table, create_engine
from sqlalchemy.pool import StaticPool

from tablegraph.config import MultiValuedConfig, TableConfig, TablegraphConfig
from tablegraph.core import (
    ColumnDescriptor,
    ForeignKeyDescriptor,
    ForeignKeyKind,
    JunctionDescriptor,
    NativeType,
    Row,
    StaticMetadataProvider,
    TableDescriptor,
    UrlTemplate,
)


# =============================================================================
# Descriptors
# =============================================================================


def lookup(table, column="id", schema="main", kind=ForeignKeyKind.LOOKUP):
    return ForeignKeyDescriptor(
        kind=kind,
        lookup_schema_name=schema,
        lookup_table_name=table,
        lookup_column_name=column,
    )


TAGS_JUNCTION = JunctionDescriptor(
    schema_name="main",
    table_name="ItemTag",
    child_match_field="item_id",
    target_key_field="tag_id",
    parent_key="id",
)


@pytest.fixture
def user_table():
    return TableDescriptor(
        schema_name="main",
        name="User",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("name", NativeType.VARCHAR, description="Display name"),
        ],
        pk_column_names=["id"],
    )


@pytest.fixture
def tag_table():
    return TableDescriptor(
        schema_name="main",
        name="Tag",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("label", NativeType.VARCHAR),
        ],
        pk_column_names=["id"],
    )


@pytest.fixture
def item_table():
    return TableDescriptor(
        schema_name="main",
        name="Item",
        description="Things for sale",
        columns=[
            ColumnDescriptor("id", NativeType.INTEGER, required=True),
            ColumnDescriptor("name", NativeType.VARCHAR),
            ColumnDescriptor("ownerId", NativeType.INTEGER, fk=lookup("User")),
            ColumnDescriptor(
                "tags",
                NativeType.INTEGER,
                fk=ForeignKeyDescriptor(
                    kind=ForeignKeyKind.MULTI_VALUED,
                    lookup_schema_name="main",
                    lookup_table_name="Tag",
                    lookup_column_name="id",
                    junction=TAGS_JUNCTION,
                ),
            ),
        ],
        pk_column_names=["id"],
        details_url=UrlTemplate("/items/${id}"),
    )


@pytest.fixture
def provider(item_table, user_table, tag_table):
    return StaticMetadataProvider([item_table, user_table, tag_table])


# =============================================================================
# In-memory row fetcher
# =============================================================================


class MemoryFetcher:
    """RowFetcher over lists of dicts, recording every call."""

    def __init__(self, data=None):
        self.data = {key.lower(): rows for key, rows in (data or {}).items()}
        self.calls = []

    def _rows(self, schema_name, table_name):
        return [Row(row) for row in self.data.get(f"{schema_name}.{table_name}".lower(), [])]

    @staticmethod
    def _matches(row, filters):
        return all(row.get(column) == value for column, value in filters.items())

    def select_one(self, table, filters, columns=None):
        self.calls.append(("select_one", table.name, dict(filters)))
        for row in self._rows(table.schema_name, table.name):
            if self._matches(row, filters):
                return row
        return None

    def select_many(self, table, filters, columns=None):
        self.calls.append(("select_many", table.name, dict(filters)))
        return [row for row in self._rows(table.schema_name, table.name) if self._matches(row, filters)]

    def select_related(self, table, lookup_column, junction, value, columns=None):
        self.calls.append(("select_related", table.name, value))
        keys = [
            row[junction.target_key_field]
            for row in self._rows(junction.schema_name, junction.table_name)
            if row.get(junction.child_match_field) == value
        ]
        rows = [row for row in self._rows(table.schema_name, table.name) if row.get(lookup_column) in keys]
        return sorted(rows, key=lambda row: row[lookup_column])


@pytest.fixture
def fetcher():
    return MemoryFetcher({
        "main.Item": [
            {"id": 1, "name": "widget", "ownerId": 7, "tags": None},
            {"id": 2, "name": "gadget", "ownerId": None, "tags": None},
        ],
        "main.User": [
            {"id": 7, "name": "bob"},
        ],
        "main.Tag": [
            {"id": 10, "label": "red"},
            {"id": 11, "label": "blue"},
            {"id": 12, "label": "green"},
        ],
        "main.ItemTag": [
            {"item_id": 1, "tag_id": 12},
            {"item_id": 1, "tag_id": 10},
        ],
    })


# =============================================================================
# SQLite database
# =============================================================================


def create_sample_database(engine):
    """Item/User/Tag/ItemTag tables with a few rows."""
    metadata = MetaData()
    user = Table(
        "User", metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(50), nullable=False),
    )
    item = Table(
        "Item", metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String(50)),
        Column("ownerId", Integer, ForeignKey("User.id")),
        Column("created", Date),
    )
    tag = Table(
        "Tag", metadata,
        Column("id", Integer, primary_key=True),
        Column("label", String(50)),
    )
    item_tag = Table(
        "ItemTag", metadata,
        Column("item_id", Integer, ForeignKey("Item.id"), primary_key=True),
        Column("tag_id", Integer, ForeignKey("Tag.id"), primary_key=True),
    )
    metadata.create_all(engine)

    with engine.begin() as conn:
        conn.execute(user.insert(), [{"id": 7, "name": "bob"}])
        conn.execute(item.insert(), [
            {"id": 1, "name": "widget", "ownerId": 7, "created": None},
            {"id": 2, "name": "gadget", "ownerId": None, "created": None},
        ])
        conn.execute(tag.insert(), [
            {"id": 10, "label": "red"},
            {"id": 11, "label": "blue"},
            {"id": 12, "label": "green"},
        ])
        conn.execute(item_tag.insert(), [
            {"item_id": 1, "tag_id": 12},
            {"item_id": 1, "tag_id": 10},
        ])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_sample_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'sample.db'}"
    engine = create_engine(url)
    create_sample_database(engine)
    engine.dispose()
    return url


@pytest.fixture
def config():
    return TablegraphConfig(
        user_table="main.User",
        tables={
            "main.Item": TableConfig(
                details_url=UrlTemplate("/items/${id}"),
                multi_valued={
                    "tags": MultiValuedConfig(
                        target="main.Tag",
                        junction="main.ItemTag",
                        child_match_field="item_id",
                        target_key_field="tag_id",
                    ),
                },
            ),
        },
    )
