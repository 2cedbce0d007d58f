from pathlib import Path

import pytest

from rehearsal.config import (
    DEV_DEFAULT_DB_URL,
    Settings,
    ensure_dev_database_schema,
    validate_database_url,
)


def test_cors_origin_list_splits_and_strips() -> None:
    cfg = Settings(cors_origins=" http://a.test , ,http://b.test")
    assert cfg.cors_origin_list() == ["http://a.test", "http://b.test"]


def test_validate_database_url_defaults_and_rejects_memory_in_dev() -> None:
    assert validate_database_url("dev", "") == DEV_DEFAULT_DB_URL
    assert validate_database_url("prod", None) == ""
    assert validate_database_url("prod", "sqlite://") == "sqlite://"
    with pytest.raises(RuntimeError, match="memory"):
        validate_database_url("dev", "sqlite:///:memory:")


def test_ensure_dev_database_schema_reports_missing_tables(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'empty.db'}"
    with pytest.raises(RuntimeError, match="alembic upgrade head"):
        ensure_dev_database_schema(url)
    ensure_dev_database_schema(url, required_tables=())
