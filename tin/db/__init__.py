"""Database layer: SQLite with serialized transactions and repositories."""

from tin.db.database import Database
from tin.db.schema import SCHEMA_DDL

__all__ = ["Database", "SCHEMA_DDL"]
