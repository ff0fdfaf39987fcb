"""Database module for PostgreSQL operations."""

from invoicing.db.connection import (
    DataSource,
    get_database_url,
    get_sqlalchemy_url,
)
from invoicing.db.schema import init_schema

__all__ = [
    "DataSource",
    "get_database_url",
    "get_sqlalchemy_url",
    "init_schema",
]
