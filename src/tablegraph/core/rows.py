"""
Row - the unit of data flowing through resolvers.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional


class Row(Mapping[str, Any]):
    """
    Ordered, read-only mapping from column name to value with
    case-insensitive key lookup.

    Iteration yields the original column names in their original order.

    Example:
        row = Row({"RowId": 7, "Name": "widget"})
        row["rowid"]  # 7
    """

    __slots__ = ("_data", "_keys")

    def __init__(self, data: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        self._data: dict[str, Any] = {}
        self._keys: dict[str, str] = {}
        items = dict(data or {}, **kwargs)
        for key, value in items.items():
            lowered = key.lower()
            previous = self._keys.get(lowered)
            if previous is not None:
                del self._data[previous]
            self._keys[lowered] = key
            self._data[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._data[self._keys[key.lower()]]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Row({self._data!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)
