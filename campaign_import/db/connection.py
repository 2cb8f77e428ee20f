from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..config.loader import ImportConfig

"""Backend client construction.

The connection (or Supabase client) is created once by the CLI and injected into
the writer; nothing in the pipeline imports a module-level client.

Connection parameter priority:
    1. environment variables (.env is loaded by the CLI with override=True)
       - DATABASE_URL / PGDSN: DSN used as-is
       - PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    2. `database` section of config/import.yml
"""

logger = logging.getLogger(__name__)


class BackendConnectionError(Exception):
    """Raised when the backend client cannot be created."""


def resolve_dsn(cfg: ImportConfig) -> str:
    db_cfg = cfg.database
    dsn_env = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn_env:
        return dsn_env
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def pg_cursor(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor; transactions are issued explicitly by the writer."""
    try:
        import psycopg2
    except ImportError as e:
        raise BackendConnectionError(f"psycopg2 not available: {e}") from e

    try:
        conn = psycopg2.connect(resolve_dsn(cfg))
    except psycopg2.Error as e:
        raise BackendConnectionError(f"failed to connect to PostgreSQL: {e}") from e
    conn.autocommit = True  # BEGIN/COMMIT は PostgresBulkWriter が明示発行
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def resolve_supabase_credentials(cfg: ImportConfig) -> tuple[str, str]:
    url = os.getenv("SUPABASE_URL") or cfg.supabase.url
    key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_KEY")
        or cfg.supabase.key
    )
    if not url or not key:
        raise BackendConnectionError(
            "Missing Supabase credentials: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY "
            "(or SUPABASE_KEY), or the supabase section of the config"
        )
    return url, key


def create_supabase_client(cfg: ImportConfig) -> Any:
    from supabase import create_client

    url, key = resolve_supabase_credentials(cfg)
    try:
        client = create_client(url, key)
    except Exception as e:
        raise BackendConnectionError(f"failed to initialize Supabase client: {e}") from e
    logger.debug("Supabase client created")
    return client
