"""Custom SQLAlchemy types for Notu models with cross-DB support."""

import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import String, Text, TypeDecorator


class GUID(TypeDecorator):
    """
    Platform-independent GUID/UUID type.

    - Uses PostgreSQL UUID type when available
    - Falls back to CHAR(36) storing hex string form on other DBs (e.g., SQLite)
    """

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID as PG_UUID

            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        # PostgreSQL expects uuid.UUID when as_uuid=True, others expect string
        if dialect.name == "postgresql":
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class GUIDListType(TypeDecorator):
    """
    Store a list of user ids:

    - On PostgreSQL: UUID[]
    - On SQLite (and others): JSON text in a TEXT column

    Always hands back List[uuid.UUID]. Values are replaced, never mutated in
    place, so assign a new list to persist a change.
    """

    cache_ok = True
    impl = Text  # placeholder, real impl decided per-dialect

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import ARRAY
            from sqlalchemy.dialects.postgresql import UUID as PG_UUID

            return dialect.type_descriptor(ARRAY(PG_UUID(as_uuid=True)))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Optional[List[Any]], dialect):
        if value is None:
            return None
        ids = [v if isinstance(v, uuid.UUID) else uuid.UUID(str(v)) for v in value]
        if dialect.name == "postgresql":
            return ids
        return json.dumps([str(v) for v in ids])

    def process_result_value(self, value, dialect) -> Optional[List[uuid.UUID]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = json.loads(value)
        return [v if isinstance(v, uuid.UUID) else uuid.UUID(str(v)) for v in value]


class JSONListType(TypeDecorator):
    """
    Store a list of small JSON objects (embedded documents):

    - On PostgreSQL: JSONB
    - On SQLite (and others): JSON text in a TEXT column
    """

    cache_ok = True
    impl = Text

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import JSONB

            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Optional[List[Dict[str, Any]]], dialect):
        if value is None:
            return None
        items = [dict(item) for item in value]
        if dialect.name == "postgresql":
            return items
        return json.dumps(items)

    def process_result_value(self, value, dialect) -> Optional[List[Dict[str, Any]]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = json.loads(value)
        return [dict(item) for item in value]
