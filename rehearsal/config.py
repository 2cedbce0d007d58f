import logging
import os
from collections.abc import Iterable

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, inspect

DEV_DEFAULT_DB_URL = "sqlite+pysqlite:///./rehearsal.db"
DEV_REQUIRED_TABLES = (
    "users",
    "scripts",
    "script_enhancements",
    "script_analyses",
    "conversations",
    "rehearsal_sessions",
)


class Settings(BaseSettings):
    app_name: str = "the_rehearsal_ai"
    app_version: str = "1.0.0"
    env: str = "dev"
    database_url: str = DEV_DEFAULT_DB_URL

    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4-turbo-preview"
    llm_timeout_s: float = 30.0
    llm_max_attempts: int = 1

    jwt_secret: str = ""
    jwt_exp_minutes: int = 60 * 24 * 7

    cors_origins: str = "http://localhost:3000"
    port: int = 3000
    log_level: str = "INFO"
    scenarios_path: str = ""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def cors_origin_list(self) -> list[str]:
        return [item.strip() for item in str(self.cors_origins or "").split(",") if item.strip()]


def _is_sqlite_memory_url(db_url: str) -> bool:
    candidate = (db_url or "").strip().lower()
    if not candidate.startswith("sqlite"):
        return False
    if ":memory:" in candidate:
        return True
    return candidate in {
        "sqlite://",
        "sqlite:///",
        "sqlite+pysqlite://",
        "sqlite+pysqlite:///",
    }


def validate_database_url(env: str, db_url: str | None) -> str:
    env_value = (env or "").strip().lower()
    if not db_url or not db_url.strip():
        return DEV_DEFAULT_DB_URL if env_value == "dev" else ""

    if env_value == "dev" and _is_sqlite_memory_url(db_url):
        raise RuntimeError(
            "DATABASE_URL cannot be sqlite :memory: when ENV=dev because scripts and rehearsals will disappear. "
            f"Set DATABASE_URL={DEV_DEFAULT_DB_URL} or another file-based sqlite url."
        )
    return db_url


def ensure_dev_database_schema(db_url: str, required_tables: Iterable[str] = DEV_REQUIRED_TABLES) -> None:
    if not db_url:
        return
    engine = create_engine(db_url, future=True)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    missing_tables = sorted(name for name in required_tables if name not in tables)
    if missing_tables:
        raise RuntimeError(
            f"dev database schema is incomplete (missing tables: {', '.join(missing_tables)}). "
            "Run: alembic upgrade head"
        )


def configure_logging(level: str | None = None) -> None:
    resolved = str(level or settings.log_level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
settings.database_url = validate_database_url(settings.env, os.getenv("DATABASE_URL") or settings.database_url)
