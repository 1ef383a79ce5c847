from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..db.record import PgRecord
from ..errors import CSVImporterError
from ..logging.error_log import ErrorLogBuffer, records_from_report
from ..logging.init import log_summary, setup_logging
from ..models.config_models import ImporterConfig
from ..models.report import Report
from ..services.importer import Importer
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m csv_importer.cli --config importer.yml [--debug] FILE

Flow:
- Load ``.env`` (python-dotenv, overriding the environment)
- Load the importer config
- Bind a psycopg2 connection when the model is a PgRecord
- Run the import, log the message and the SUMMARY line
- Append invalid rows to the JSON Lines error log
- Optionally write the report as JSON (``--report-json``)
"""

__all__ = [
    "EXIT_FATAL",
    "EXIT_INVALID_ROWS",
    "EXIT_SUCCESS",
    "main",
]

EXIT_SUCCESS = 0
EXIT_INVALID_ROWS = 2
EXIT_FATAL = 1


def _dsn() -> str:
    """Resolve connection parameters: DATABASE_URL / PGDSN first, then PG* variables."""
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN")
    if dsn:
        return dsn
    host = os.getenv("PGHOST", "localhost")
    port = os.getenv("PGPORT", "5432")
    user = os.getenv("PGUSER", "postgres")
    password = os.getenv("PGPASSWORD", "")
    database = os.getenv("PGDATABASE", "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(config: ImporterConfig) -> Iterator[None]:
    """Bind a psycopg2 connection to a PgRecord model for the duration of the import."""
    model = config.model
    if not (isinstance(model, type) and issubclass(model, PgRecord)):
        yield
        return

    conn = psycopg2.connect(_dsn())
    conn.autocommit = False
    model.bind(conn)
    try:
        yield
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="csv-importer", description="CSV -> model importer")
    p.add_argument("file", type=Path, help="CSV file to import")
    p.add_argument("--config", type=Path, default=Path("config/importer.yml"), help="Importer config (YAML)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--quote-char", default='"', help="Quote character (default: \")")
    p.add_argument("--encoding", default="utf-8", help="Input encoding (default: utf-8)")
    p.add_argument("--logs-dir", type=Path, default=None, help="Directory for the error log")
    p.add_argument("--report-json", type=Path, default=None, help="Write the import report as JSON to this path")
    return p.parse_args(argv)


def _exit_code(report: Report) -> int:
    if report.invalid_header or report.invalid_csv_file:
        return EXIT_FATAL
    if report.aborted or report.invalid_rows:
        return EXIT_INVALID_ROWS
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # None only: an explicit [] must not pick up the test runner's arguments
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    logger = setup_logging(logging.DEBUG if args.debug else logging.INFO)
    logger.debug("debug mode enabled")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    logger.info(f"Importing {args.file} into {getattr(config.model, '__name__', config.model)}")

    try:
        with _db_connection(config):
            report = Importer(
                config, path=args.file, quote_char=args.quote_char, encoding=args.encoding
            ).run()
    except psycopg2.Error as e:
        logger.error(f"database: {e}".strip())
        return EXIT_FATAL
    except CSVImporterError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL

    if report.invalid_header or report.invalid_csv_file:
        logger.error(report.message)
    else:
        logger.info(report.message)

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(report).removeprefix("SUMMARY "))

    error_log = ErrorLogBuffer(args.logs_dir)
    error_log.extend(records_from_report(report, args.file.name))
    written = error_log.flush()
    if written is not None:
        logger.info(f"error log: {written}")

    if args.report_json is not None:
        args.report_json.parent.mkdir(parents=True, exist_ok=True)
        args.report_json.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"report: {args.report_json}")

    return _exit_code(report)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
