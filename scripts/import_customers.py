"""CLI entry point for customer CSV imports.

Usage:
    python -m scripts.import_customers --db-url sqlite:///data.db --file customers.csv [--batch-size 5000]

Settings not given on the command line come from CUSTOMER_IMPORT_* environment
variables; the database URL falls back to DATABASE_URL.
"""

import argparse
import dataclasses
import logging
import os
import sys

from custimport import (
    ConfigError,
    ImportConfig,
    ImportResult,
    StorageError,
    ValidationError,
    create_service,
    import_customers,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Customers imported successfully."
FAILURE_MESSAGE = "Customer import failed."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import customer records from a CSV file")
    parser.add_argument(
        "--db-url",
        default=os.environ.get("DATABASE_URL"),
        help="Database URL (sqlite:/// or postgresql://); defaults to $DATABASE_URL",
    )
    parser.add_argument("--file", required=True, help="Path to CSV file")
    parser.add_argument("--batch-size", type=int, help="Rows per bulk insert (default 5000)")
    parser.add_argument("--table", help="Destination table (default customers)")
    parser.add_argument(
        "--strict", action="store_true", default=None, help="Abort on the first invalid row"
    )
    parser.add_argument(
        "--upsert",
        action="store_true",
        default=None,
        help="Update existing customers by customer_id instead of inserting duplicates",
    )
    parser.add_argument(
        "--queue-size",
        type=int,
        help="Parse in a background thread feeding a queue of this many rows (0 disables)",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> ImportConfig:
    """Environment config, overridden by whatever was passed on the command line."""
    config = ImportConfig.from_env()
    overrides = {
        "batch_size": args.batch_size,
        "table": args.table,
        "strict": args.strict,
        "upsert": args.upsert,
        "queue_size": args.queue_size,
    }
    return dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})


def report(result: ImportResult) -> int:
    """Print the user-facing outcome and return the process exit status."""
    if result.succeeded:
        print(SUCCESS_MESSAGE)
        if result.failures:
            print(f"{len(result.failures)} rows were skipped:")
            for failure in result.failures:
                print(f"  line {failure.line_number}: {failure.field}: {failure.reason}")
        return 0

    if isinstance(result.error, ValidationError):
        print("Import aborted on invalid data:", file=sys.stderr)
        for failure in result.failures:
            print(f"  line {failure.line_number}: {failure.field}: {failure.reason}", file=sys.stderr)
    else:
        print(FAILURE_MESSAGE, file=sys.stderr)
    if result.rows_processed:
        print(f"{result.rows_processed} rows were committed before the failure.", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.db_url:
        parser.error("--db-url is required when DATABASE_URL is not set")

    try:
        config = resolve_config(args)
    except ConfigError as e:
        parser.error(str(e))

    service = create_service(args.db_url)
    service.connect()
    try:
        result = import_customers(service, args.file, config)
    except StorageError:
        logger.exception("Could not prepare table %s", config.table)
        print(FAILURE_MESSAGE, file=sys.stderr)
        return 1
    finally:
        service.close()

    logger.info(
        "Done. %d rows imported in %.2f seconds.", result.rows_processed, result.elapsed
    )
    return report(result)


if __name__ == "__main__":
    sys.exit(main())
