"""Database connection management."""

from __future__ import annotations

import os
from typing import Optional

import psycopg2
from dotenv import load_dotenv
from psycopg2.extensions import connection as PgConnection

load_dotenv()


def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise ValueError(
            "DATABASE_URL environment variable not set. "
            "Set it in .env or in the process environment."
        )
    return url


def get_sqlalchemy_url(url: Optional[str] = None) -> str:
    """
    Get a database URL usable by SQLAlchemy 2.0.

    Hosted Postgres providers hand out postgres:// URLs, but SQLAlchemy 2.0
    only accepts postgresql://.
    """
    url = url or get_database_url()
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


class DataSource:
    """Connection factory handed to the DAO."""

    def __init__(self, dsn: Optional[str] = None):
        self._dsn = dsn or get_database_url()

    def get_connection(self) -> PgConnection:
        """Open a new database connection. The caller closes it."""
        return psycopg2.connect(self._dsn)
