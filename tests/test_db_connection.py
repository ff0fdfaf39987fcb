"""Tests for database configuration and the DataSource connection factory."""

from unittest.mock import patch

import pytest

from invoicing.db.connection import DataSource, get_database_url, get_sqlalchemy_url


class TestGetDatabaseUrl:
    """Tests for get_database_url function."""

    def test_returns_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@localhost/invoices")

        assert get_database_url() == "postgresql://user:pw@localhost/invoices"

    def test_raises_when_not_set(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValueError, match="DATABASE_URL"):
            get_database_url()


class TestGetSqlalchemyUrl:
    """Tests for get_sqlalchemy_url function."""

    def test_converts_postgres_scheme(self):
        result = get_sqlalchemy_url("postgres://user:pw@host:5432/db")
        assert result == "postgresql://user:pw@host:5432/db"

    def test_only_replaces_scheme(self):
        result = get_sqlalchemy_url("postgres://postgres://weird")
        assert result == "postgresql://postgres://weird"

    def test_leaves_postgresql_scheme_alone(self):
        result = get_sqlalchemy_url("postgresql://user:pw@host/db")
        assert result == "postgresql://user:pw@host/db"

    def test_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://env/db")

        assert get_sqlalchemy_url() == "postgresql://env/db"


class TestDataSource:
    """Tests for the DataSource connection factory."""

    def test_uses_explicit_dsn(self):
        with patch("invoicing.db.connection.psycopg2.connect") as mock_connect:
            source = DataSource("postgresql://explicit/db")
            conn = source.get_connection()

        mock_connect.assert_called_once_with("postgresql://explicit/db")
        assert conn is mock_connect.return_value

    def test_defaults_to_database_url(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://env/db")

        with patch("invoicing.db.connection.psycopg2.connect") as mock_connect:
            DataSource().get_connection()

        mock_connect.assert_called_once_with("postgresql://env/db")

    def test_new_connection_per_call(self):
        with patch("invoicing.db.connection.psycopg2.connect") as mock_connect:
            source = DataSource("postgresql://explicit/db")
            source.get_connection()
            source.get_connection()

        assert mock_connect.call_count == 2

    def test_missing_configuration_fails_at_construction(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValueError):
            DataSource()
