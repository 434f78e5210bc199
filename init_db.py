"""
Database initialization script.
Creates any missing tables for the configured DATABASE_URL, or with
--migrate brings the schema up to date through Alembic instead.
Run this as: python init_db.py [--migrate]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from instalike.core.config import get_settings
from instalike.db.init_db import create_all_tables, init_db
from instalike.db.session import create_db_engine

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")

def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize the InstaLike database")
    parser.add_argument("--migrate", action="store_true", help="Run Alembic migrations instead of create_all")
    parser.add_argument("--config", default="alembic.ini", help="Path to alembic.ini (with --migrate)")
    args = parser.parse_args()

    settings = get_settings()
    logger.info(f"Initializing database at: {settings.DATABASE_URL}")

    if args.migrate:
        init_db(settings.DATABASE_URL, config_path=args.config)
        return 0

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        new_tables = create_all_tables(engine)
        if not new_tables:
            logger.info("No new tables were created")
        logger.info(f"Tables present: {sorted(inspect(engine).get_table_names())}")
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {e}")
        return 1
    finally:
        engine.dispose()

    logger.info("Database initialization completed successfully")
    return 0

if __name__ == "__main__":
    sys.exit(main())
