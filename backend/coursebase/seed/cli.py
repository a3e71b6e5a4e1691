from __future__ import annotations

import argparse
import logging
from pathlib import Path

from coursebase.config import get_settings
from coursebase.database import SessionLocal, create_schema, engine, reset_schema
from coursebase.logging_config import configure_logging
from coursebase.seed.errors import IntegrityWarning, SeedError
from coursebase.seed.seeder import Seeder
from coursebase.seed.verify import verify_database

logger = logging.getLogger("coursebase.seed")


def parse_seed_args(argv: list[str] | None = None):
    p = argparse.ArgumentParser(description="Seed course content from spreadsheet CSV exports.")
    p.add_argument("--csv-dir", type=Path, help="Directory holding the five CSV exports (default: CSV_DIR setting)")
    p.add_argument("--no-clear", action="store_true", help="Append to existing data instead of clearing it first")
    p.add_argument("--reset-schema", action="store_true", help="Drop and recreate all tables before seeding")
    p.add_argument("--verify", action="store_true", help="Run the integrity check after seeding")
    return p.parse_args(argv)


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(settings.log_level.upper(), settings.log_json)


def _run_verify(db) -> int:
    report = verify_database(db)
    print({"counts": report.counts, "orphans": report.orphans, "empty_tables": report.empty_tables})
    for line in report.sample:
        print(line)
    try:
        report.raise_for_empty()
    except IntegrityWarning as exc:
        logger.error("verification failed: %s", exc)
        return 1
    return 0


def seed_main(argv: list[str] | None = None) -> int:
    args = parse_seed_args(argv)
    _setup_logging()
    settings = get_settings()
    csv_dir = args.csv_dir or Path(settings.csv_dir)

    if args.reset_schema:
        reset_schema()
    else:
        create_schema()

    with SessionLocal() as db:
        seeder = Seeder(
            db,
            csv_dir,
            clear_existing=not args.no_clear,
            strict_exercise_parents=settings.strict_exercise_parents,
        )
        try:
            report = seeder.run()
        except SeedError as exc:
            logger.error("seeding failed during %s: %s", seeder.stage, exc, extra={"stage": seeder.stage})
            return 1

        print(report.summary())
        for i, msg in enumerate(report.all_errors(), start=1):
            print(f"   {i}. {msg}")

        if args.verify:
            return _run_verify(db)
    return 0


def verify_main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(description="Check seeded tables for empty tables and orphaned rows.").parse_args(argv)
    _setup_logging()
    with SessionLocal() as db:
        return _run_verify(db)


def reset_main(argv: list[str] | None = None) -> int:
    argparse.ArgumentParser(description="Drop and recreate all course content tables.").parse_args(argv)
    _setup_logging()
    reset_schema()
    print({"status": "reset", "database_url": str(engine.url)})
    return 0


if __name__ == "__main__":
    raise SystemExit(seed_main())
