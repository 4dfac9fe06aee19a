# seed_db.py
"""
Database Seeding Script
=======================

Fills the appointments table with generated demo bookings spread across the
booking window (today .. today + 3 months), optionally exporting them to CSV.

Usage:
    python seed_db.py --records 50
    python seed_db.py --records 500 --batch-size 100 --export-csv --csv-dir data/seed

Requirements:
    - A database configured through the DB_* environment variables
    - Migrations applied (`alembic upgrade head`)
"""

import sys
import argparse
import asyncio
from pathlib import Path
from typing import Optional
from scripts.db import seed_db, DEFAULT_DATA_TEMPLATE
from ibotika.db import DbManager
from common.config import DatabaseConfig, get_config, initialize_config
from common.api_error import ConfigurationError
from dotenv import load_dotenv


def get_db_config() -> DatabaseConfig:
    """
    Return the validated database configuration or exit.
    """
    db_cfg = get_config().database
    if db_cfg is None:
        print("FATAL: Database configuration required (set DB_HOST or DB_DRIVER=aiosqlite)")
        sys.exit(1)
    return db_cfg


async def run_seed_db(
    _db_config: DatabaseConfig,
    records: int,
    batch_size: Optional[int],
    export_csv: bool,
    csv_dir: str,
) -> int:
    """
    Insert ``records`` appointments, ``batch_size`` per transaction.

    Example:
        >>> asyncio.run(run_seed_db(db_cfg, records=200, batch_size=None, export_csv=True, csv_dir="data/seed"))
    """
    db_manager = DbManager.from_config(_db_config)
    await db_manager.verify_connection()

    step = batch_size or records
    inserted = 0
    try:
        for start_idx in range(0, records, step):
            batch = await seed_db(
                db_manager=db_manager,
                data_template=DEFAULT_DATA_TEMPLATE,
                records=min(step, records - start_idx),
                start_index=start_idx,
                export_csv=export_csv,
                csv_dir=str(Path(csv_dir) / f"batch_{start_idx // step}")
                if batch_size
                else csv_dir,
            )
            inserted += len(batch)
            print(f"Inserted {inserted}/{records} appointments")
    finally:
        await db_manager.dispose()
    return inserted


def main() -> None:
    """
    CLI entry point for database seeding.
    """
    parser = argparse.ArgumentParser(description="Seed demo appointments")
    parser.add_argument(
        "--records",
        type=int,
        required=True,
        help="Number of appointments to insert (REQUIRED)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Insert in transactions of this many rows (default: one transaction)",
    )
    parser.add_argument(
        "--export-csv", action="store_true", help="Export seeded data to CSV"
    )
    parser.add_argument(
        "--csv-dir", type=str, default="data/seed", help="Directory to export CSV files"
    )

    args = parser.parse_args()
    if args.records <= 0:
        parser.error("--records must be positive")
    if args.batch_size is not None and args.batch_size <= 0:
        parser.error("--batch-size must be positive")

    asyncio.run(
        run_seed_db(
            get_db_config(),
            args.records,
            args.batch_size,
            args.export_csv,
            args.csv_dir,
        )
    )


if __name__ == "__main__":
    try:
        load_dotenv()
        initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}")
        sys.exit(1)
    main()
