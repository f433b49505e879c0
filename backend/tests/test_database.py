"""Tests for engine construction across database backends."""

from sqlalchemy import create_engine, text

from leadintel.config import Settings
from leadintel.database import engine_options


class TestEngineOptions:
    def test_sqlite_gets_no_pool_sizing(self):
        options = engine_options("sqlite://")
        assert "pool_size" not in options
        assert "max_overflow" not in options

    def test_in_memory_sqlite_engine_builds(self):
        engine = create_engine("sqlite://", **engine_options("sqlite://"))
        with engine.connect() as conn:
            assert conn.execute(text("SELECT 1")).scalar() == 1
        engine.dispose()

    def test_postgres_gets_pool_sizing(self):
        options = engine_options("postgresql+psycopg2://u:p@localhost/db")
        assert options["pool_size"] == 5
        assert options["max_overflow"] == 2
        assert options["pool_pre_ping"] is True

    def test_default_url_names_its_driver(self):
        assert Settings.model_fields["database_url"].default.startswith("postgresql+psycopg2://")
