"""Engine, sessions and schema bootstrap for LRH Flow.

SQLite is the default for local development and tests; production points
`DATABASE_URL` at PostgreSQL and applies Alembic migrations.
"""

import logging
import os
from typing import Optional, Set

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lrhflow.db")

# Pool knobs for server databases: kwarg -> (env var, default).
POOL_SETTINGS = {
    "pool_size": ("DB_POOL_SIZE", 5),
    "max_overflow": ("DB_MAX_OVERFLOW", 5),
    "pool_timeout": ("DB_POOL_TIMEOUT_SEC", 30),
}

# Columns added to `tasks` when recurrence was introduced: (name, sqlite type, postgres type).
RECURRENCE_COLUMNS = [
    ("is_recurring", "BOOLEAN NOT NULL DEFAULT 0", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("recurrence_type", "VARCHAR NOT NULL DEFAULT 'NONE'", "VARCHAR NOT NULL DEFAULT 'NONE'"),
    ("recurrence_interval", "INTEGER DEFAULT 1", "INTEGER DEFAULT 1"),
    ("recurrence_day_of_week", "INTEGER", "INTEGER"),
    ("recurrence_day_of_month", "INTEGER", "INTEGER"),
    ("recurrence_end_date", "DATETIME", "TIMESTAMP"),
    ("parent_recurring_task_id", "VARCHAR", "VARCHAR"),
    ("occurrence_date", "DATETIME", "TIMESTAMP"),
]

RECURRENCE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS ix_tasks_parent_recurring_task_id ON tasks (parent_recurring_task_id)",
    "CREATE INDEX IF NOT EXISTS ix_tasks_chain_status_due ON tasks (parent_recurring_task_id, status, due_date)",
    # A unique index stands in for the table constraint on tables that predate it.
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_task_recurring_occurrence "
    "ON tasks (parent_recurring_task_id, occurrence_date)",
]


def _is_sqlite_url(database_url: Optional[str]) -> bool:
    return (database_url or "").startswith("sqlite")


def get_engine_kwargs(database_url: str) -> dict:
    """create_engine kwargs for a URL, kept separate so they can be tested without connecting."""
    kwargs: dict = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }
    if _is_sqlite_url(database_url):
        # FastAPI runs sync endpoints in a threadpool.
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        for key, (env_name, default) in POOL_SETTINGS.items():
            kwargs[key] = int(os.getenv(env_name, str(default)))
    return kwargs


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def build_engine(database_url: str) -> Engine:
    built = create_engine(database_url, **get_engine_kwargs(database_url))
    if _is_sqlite_url(database_url):
        event.listen(built, "connect", _set_sqlite_pragmas)
    return built


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _table_columns(target: Engine, table_name: str) -> Set[str]:
    """Column names of a table; empty if the table does not exist."""
    inspector = inspect(target)
    if not inspector.has_table(table_name):
        return set()
    return {column["name"] for column in inspector.get_columns(table_name)}


def ensure_legacy_schema_compat(*, engine_override: Engine = None, database_url_override: str = None) -> None:
    """Patch SQLite task tables created before recurrence support.

    `create_all()` never alters an existing table, so missing recurrence columns are
    added in place. No-op for other databases and for fresh files.
    """
    if not _is_sqlite_url(database_url_override or DATABASE_URL):
        return

    target = engine_override or engine
    existing = _table_columns(target, "tasks")
    if not existing:
        return
    missing = [(name, sqlite_type) for name, sqlite_type, _ in RECURRENCE_COLUMNS if name not in existing]
    if not missing:
        return

    logger.info(f"Adding recurrence columns to legacy tasks table: {', '.join(n for n, _ in missing)}")
    with target.begin() as conn:
        for name, sqlite_type in missing:
            conn.execute(text(f"ALTER TABLE tasks ADD COLUMN {name} {sqlite_type}"))
        for statement in RECURRENCE_INDEXES:
            conn.execute(text(statement))


def _upgrade_postgres_without_migrations() -> None:
    with engine.begin() as conn:
        for name, _, pg_type in RECURRENCE_COLUMNS:
            conn.execute(text(f"ALTER TABLE tasks ADD COLUMN IF NOT EXISTS {name} {pg_type}"))
        for statement in RECURRENCE_INDEXES:
            conn.execute(text(statement))


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create or upgrade the schema.

    With `RUN_MIGRATIONS=true` on a server database this runs `alembic upgrade head`;
    otherwise tables are created directly and older tables patched.
    """
    if os.getenv("RUN_MIGRATIONS", "False").lower() == "true" and not _is_sqlite_url(DATABASE_URL):
        from alembic import command
        from alembic.config import Config

        alembic_cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
        alembic_cfg.set_main_option("sqlalchemy.url", DATABASE_URL)
        command.upgrade(alembic_cfg, "head")
        return

    Base.metadata.create_all(bind=engine)
    if _is_sqlite_url(DATABASE_URL):
        ensure_legacy_schema_compat()
    else:
        _upgrade_postgres_without_migrations()
