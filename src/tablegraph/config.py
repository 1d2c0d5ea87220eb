"""
Configuration loading for tablegraph.

Example tablegraph.yaml:

    database_url: sqlite:///app.db
    default_schema: main
    user_table: core.Users
    scalar_policy: fallback
    tables:
      main.Item:
        details_url: /items/${id}
        update_url: false
        multi_valued:
          tags:
            target: main.Tag
            lookup_column: id
            junction: main.ItemTag
            child_match_field: item_id
            target_key_field: tag_id
            parent_key: id
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .core.defs import LINK_DISABLED, LinkSpec, UrlTemplate
from .core.scalars import SCALAR_POLICIES
from .core.utils import parse_qualified_name


CONFIG_ENV_VAR = "TABLEGRAPH_CONFIG"
DEFAULT_CONFIG_PATH = "tablegraph.yaml"


@dataclass
class MultiValuedConfig:
    """Virtual multi-valued column resolved through a junction table."""
    target: str  # "main.Tag"
    junction: str  # "main.ItemTag"
    child_match_field: str
    target_key_field: str
    lookup_column: str = "id"
    parent_key: str = "id"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultiValuedConfig":
        missing = [key for key in ("target", "junction", "child_match_field", "target_key_field") if not data.get(key)]
        if missing:
            raise ValueError(f"Multi-valued column missing {missing}")
        return cls(
            target=data["target"],
            junction=data["junction"],
            child_match_field=data["child_match_field"],
            target_key_field=data["target_key_field"],
            lookup_column=data.get("lookup_column", "id"),
            parent_key=data.get("parent_key", "id"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "lookup_column": self.lookup_column,
            "junction": self.junction,
            "child_match_field": self.child_match_field,
            "target_key_field": self.target_key_field,
            "parent_key": self.parent_key,
        }


def _link_from_config(value: Union[str, bool, None]) -> LinkSpec:
    # false disables the link, a string is a template, null leaves it unset
    if value is False:
        return LINK_DISABLED
    if value is None or value is True:
        return None
    return UrlTemplate(str(value))


def _link_to_config(spec: LinkSpec) -> Union[str, bool, None]:
    if spec is LINK_DISABLED:
        return False
    if isinstance(spec, UrlTemplate):
        return spec.template
    return None


@dataclass
class TableConfig:
    """Per-table settings that reflection cannot provide."""
    details_url: LinkSpec = None
    update_url: LinkSpec = None
    multi_valued: dict[str, MultiValuedConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TableConfig":
        return cls(
            details_url=_link_from_config(data.get("details_url")),
            update_url=_link_from_config(data.get("update_url")),
            multi_valued={
                name: MultiValuedConfig.from_dict(mv)
                for name, mv in (data.get("multi_valued") or {}).items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        details = _link_to_config(self.details_url)
        if details is not None:
            result["details_url"] = details
        update = _link_to_config(self.update_url)
        if update is not None:
            result["update_url"] = update
        if self.multi_valued:
            result["multi_valued"] = {name: mv.to_dict() for name, mv in self.multi_valued.items()}
        return result


@dataclass
class TablegraphConfig:
    """Main tablegraph configuration."""
    database_url: Optional[str] = None
    default_schema: str = "main"
    user_table: Optional[str] = None
    scalar_policy: str = "fallback"
    tables: dict[str, TableConfig] = field(default_factory=dict)

    def __post_init__(self):
        if self.scalar_policy not in SCALAR_POLICIES:
            raise ValueError(
                f"Invalid scalar_policy '{self.scalar_policy}', must be one of {SCALAR_POLICIES}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TablegraphConfig":
        """Create config from dictionary."""
        return cls(
            database_url=data.get("database_url"),
            default_schema=data.get("default_schema", "main"),
            user_table=data.get("user_table"),
            scalar_policy=data.get("scalar_policy", "fallback"),
            tables={
                name: TableConfig.from_dict(table_data or {})
                for name, table_data in (data.get("tables") or {}).items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "database_url": self.database_url,
            "default_schema": self.default_schema,
            "user_table": self.user_table,
            "scalar_policy": self.scalar_policy,
            "tables": {name: table.to_dict() for name, table in self.tables.items()},
        }

    def table_config(self, schema_name: str, table_name: str) -> TableConfig:
        """Settings for a table (case-insensitive), or defaults."""
        wanted = (schema_name.lower(), table_name.lower())
        for name, table in self.tables.items():
            schema_part, table_part = parse_qualified_name(name, self.default_schema)
            if (schema_part.lower(), table_part.lower()) == wanted:
                return table
        return TableConfig()

    def user_table_name(self) -> Optional[tuple[str, str]]:
        if not self.user_table:
            return None
        return parse_qualified_name(self.user_table, self.default_schema)

    def save(self, path: Path | str = DEFAULT_CONFIG_PATH) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str | None = None) -> TablegraphConfig:
    """
    Load configuration from YAML.

    The path defaults to $TABLEGRAPH_CONFIG, then ./tablegraph.yaml. A
    missing file yields the default configuration.
    """
    path = Path(path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return TablegraphConfig()

    data = yaml.safe_load(path.read_text()) or {}
    return TablegraphConfig.from_dict(data)
