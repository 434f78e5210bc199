import logging

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from instalike.db.base import Base

logger = logging.getLogger(__name__)


def init_db(database_url: str, config_path: str = "alembic.ini") -> None:
    """
    Initialize the database by running Alembic migrations.
    """
    try:
        alembic_cfg = Config(config_path)
        alembic_cfg.set_main_option("sqlalchemy.url", database_url)
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations applied successfully")
    except Exception as e:
        logger.error(f"Error applying database migrations: {e}")
        raise


def create_all_tables(engine: Engine) -> set:
    """Create any missing tables and return the names of the new ones"""
    existing_tables = set(inspect(engine).get_table_names())

    Base.metadata.create_all(bind=engine)

    new_tables = set(inspect(engine).get_table_names()) - existing_tables
    if new_tables:
        logger.info(f"Created new tables: {new_tables}")
    return new_tables
