"""JSON column types for per-user token lists and preference maps.

Rows written by older app builds can hold ``null`` or a scalar where a
list or object is expected. These types normalise such values on read so
the dispatch path only ever sees the shape it expects.
"""

from typing import Any

import sqlalchemy as sa
from sqlalchemy.types import TypeDecorator


class JSONBCompatible(TypeDecorator):
    """JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)."""

    impl = sa.JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: sa.Dialect) -> sa.types.TypeEngine:
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import JSONB

            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(sa.JSON())


class StringList(JSONBCompatible):
    """A JSON array of strings; anything else loads as an empty list."""

    cache_ok = True

    def process_result_value(self, value: Any, dialect: sa.Dialect) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


class JSONObject(JSONBCompatible):
    """A JSON object; a non-object loads as None (or ``{}`` when required)."""

    cache_ok = True

    def __init__(self, empty_as_dict: bool = False) -> None:
        super().__init__()
        self.empty_as_dict = empty_as_dict

    def process_result_value(
        self, value: Any, dialect: sa.Dialect
    ) -> dict[str, Any] | None:
        if isinstance(value, dict):
            return value
        return {} if self.empty_as_dict else None
