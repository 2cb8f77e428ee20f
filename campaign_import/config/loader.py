from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.target_field import ImportKind

"""Config loader for the import CLI.

Responsibilities:
- Load YAML config (config/import.yml by default)
- Validate against the packaged config_schema.json
- Apply defaults for optional keys
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/import.yml")

class ConfigError(Exception):
    pass

@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection fallback (environment variables take precedence)."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None

@dataclass(frozen=True)
class SupabaseConfig:
    url: str | None = None
    key: str | None = None

@dataclass(frozen=True)
class ImportConfig:
    backend: str  # postgres | supabase | dry-run
    tables: dict[str, str]  # ImportKind.value -> table name
    preview_rows: int = 10
    error_display_limit: int = 50
    success_reset_seconds: float = 3.0
    max_file_size_mb: float | None = 5.0
    page_size: int = 1000
    keep_na_strings: tuple[str, ...] = ()
    database: DatabaseConfig = DatabaseConfig()
    supabase: SupabaseConfig = SupabaseConfig()

    def table_for(self, kind: ImportKind) -> str:
        return self.tables[kind.value]

    @property
    def max_file_bytes(self) -> int | None:
        if self.max_file_size_mb is None:
            return None
        return int(self.max_file_size_mb * 1024 * 1024)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config data
            fails schema validation (missing required keys, wrong types, extra keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    sb_raw = data.get("supabase") or {}
    return ImportConfig(
        backend=data["backend"],
        tables=dict(data["tables"]),
        preview_rows=data.get("preview_rows", 10),
        error_display_limit=data.get("error_display_limit", 50),
        success_reset_seconds=float(data.get("success_reset_seconds", 3)),
        max_file_size_mb=data.get("max_file_size_mb", 5),
        page_size=data.get("page_size", 1000),
        keep_na_strings=tuple(data.get("keep_na_strings") or ()),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
        supabase=SupabaseConfig(url=sb_raw.get("url"), key=sb_raw.get("key")),
    )
