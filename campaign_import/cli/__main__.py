from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from campaign_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from campaign_import.db.connection import BackendConnectionError, create_supabase_client, pg_cursor
from campaign_import.db.writers import BulkWriter, DryRunWriter, PostgresBulkWriter, SupabaseBulkWriter
from campaign_import.excel.reader import FileFormatError, open_upload, parse_upload
from campaign_import.logging.error_log import ErrorReportBuffer
from campaign_import.logging.init import log_summary, setup_logging
from campaign_import.models.column_mapping import MappingError
from campaign_import.models.target_field import ImportKind, fields_for
from campaign_import.services.mapper import auto_map
from campaign_import.services.pipeline import ImportPipeline
from campaign_import.services.summary import (
    render_errors,
    render_mapping,
    render_preview,
    render_summary_line,
)

"""CLI entrypoint: a thin adapter over ImportPipeline.

Flow:
- Load .env and config
- Select + parse the file, auto-map columns, apply --map / --unmap overrides
- Validate; on errors print the capped list and stop
- Submit the batch once and print the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1  # config / input format / connection
EXIT_FAILED = 2  # validation or submission failure


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values take precedence over already exported variables."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="campaign-import",
        description="Import wards / polling booths / constituencies from CSV or Excel",
    )
    p.add_argument("kind", choices=[k.value for k in ImportKind], help="Entity type to import")
    p.add_argument("file", type=Path, help="CSV / TSV / XLSX / XLS file")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    p.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="FIELD=HEADER",
        help="Map a target field to a file column (repeatable)",
    )
    p.add_argument("--unmap", action="append", default=[], metavar="FIELD", help="Clear a mapping (repeatable)")
    p.add_argument("--dry-run", action="store_true", help="Validate and build the batch without writing")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, auto mapping & first rows then exit")
    p.add_argument("--error-report", action="store_true", help="Write validation errors to logs/ as JSON Lines")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _parse_overrides(pairs: list[str]) -> list[tuple[str, str]]:
    overrides = []
    for pair in pairs:
        key, sep, header = pair.partition("=")
        if not sep or not key.strip():
            raise MappingError(f"invalid --map value (expected FIELD=HEADER): {pair!r}")
        overrides.append((key.strip(), header.strip()))
    return overrides


@contextmanager
def _open_writer(cfg: ImportConfig, backend: str) -> Iterator[BulkWriter]:
    if backend == "dry-run":
        yield DryRunWriter()
    elif backend == "supabase":
        yield SupabaseBulkWriter(create_supabase_client(cfg))
    else:
        with pg_cursor(cfg) as cur:
            yield PostgresBulkWriter(cur, page_size=cfg.page_size)


def _inspect_data(kind: ImportKind, path: Path, cfg: ImportConfig) -> int:
    logger = setup_logging()
    try:
        upload = open_upload(path, max_bytes=cfg.max_file_bytes)
        sheet = parse_upload(upload, keep_na_strings=list(cfg.keep_na_strings))
    except FileFormatError as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    fields = fields_for(kind)
    print(f"FILE: {upload.name} format={upload.format.value} rows={len(sheet.rows)}")
    print(f"COLUMNS: {sheet.headers}")
    print(render_mapping(auto_map(sheet.headers, fields), fields))
    print(render_preview(sheet.headers, sheet.rows, limit=cfg.preview_rows))
    return EXIT_SUCCESS


def _run_session(kind: ImportKind, args: argparse.Namespace, cfg: ImportConfig, writer: BulkWriter) -> int:
    logger = setup_logging()
    pipeline = ImportPipeline(
        kind,
        writer,
        cfg.table_for(kind),
        on_alert=logger.error,
        reset_delay=cfg.success_reset_seconds,
        preview_limit=cfg.preview_rows,
        max_file_bytes=cfg.max_file_bytes,
        keep_na_strings=list(cfg.keep_na_strings),
    )
    if not pipeline.select_file(args.file):
        return EXIT_FATAL

    file_name = args.file.name
    row_count = len(pipeline.rows)
    try:
        for key, header in _parse_overrides(args.map):
            pipeline.remap(key, header)
        for key in args.unmap:
            pipeline.remap(key.strip(), None)
    except MappingError as e:
        logger.error(f"mapping: {e}")
        return EXIT_FATAL

    print(render_preview(pipeline.headers, pipeline.preview(), limit=cfg.preview_rows))
    print(render_mapping(pipeline.current_mapping(), pipeline.fields))

    outcome = pipeline.submit()
    if outcome is None:
        errors = pipeline.errors
        print(render_errors(errors, limit=cfg.error_display_limit))
        if args.error_report:
            report = ErrorReportBuffer()
            report.extend(errors)
            logger.info(f"validation report written to {report.flush()}")
        log_summary(render_summary_line(kind, file_name, row_count, len(errors), None)[len("SUMMARY "):])
        return EXIT_FAILED

    log_summary(render_summary_line(kind, file_name, row_count, 0, outcome)[len("SUMMARY "):])
    return EXIT_SUCCESS if outcome.success else EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] が渡された場合に sys.argv[1:] を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    kind = ImportKind(args.kind)
    if args.inspect_data:
        return _inspect_data(kind, args.file, cfg)

    backend = "dry-run" if args.dry_run else cfg.backend
    logger.info(f"Importing {kind.value} from {args.file} (backend={backend})")
    try:
        with _open_writer(cfg, backend) as writer:
            return _run_session(kind, args, cfg, writer)
    except BackendConnectionError as e:
        logger.error(f"connection: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
