"""Tests for engine options derived from settings"""
from tankcare.config import Settings
from tankcare.infrastructure.db.session import engine_options


def test_postgres_gets_pool_and_statement_timeout():
    settings = Settings(
        DATABASE_URL="postgresql://u:p@db:5432/tankcare",
        DB_POOL_SIZE=3,
        DB_STATEMENT_TIMEOUT_MS=15000,
    )

    options = engine_options(settings)

    assert options["pool_pre_ping"] is True
    assert options["pool_size"] == 3
    assert options["connect_args"] == {"options": "-c statement_timeout=15000"}


def test_statement_timeout_can_be_disabled():
    settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/tankcare", DB_STATEMENT_TIMEOUT_MS=0)
    assert "connect_args" not in engine_options(settings)


def test_sqlite_keeps_driver_defaults():
    assert engine_options(Settings(DATABASE_URL="sqlite:///tankcare.db")) == {"pool_pre_ping": True}
