import logging

from sqlalchemy import inspect

from app.db import base  # noqa: F401  registers every model with Base.metadata
from app.db.session import engine, Base

logger = logging.getLogger("app")


def create_all_tables(bind=None) -> bool:
    """Create missing tables, logging the ones that were new"""
    bind = bind or engine
    try:
        existing_tables = inspect(bind).get_table_names()

        Base.metadata.create_all(bind=bind)

        new_tables = set(inspect(bind).get_table_names()) - set(existing_tables)
        if new_tables:
            logger.info(f"Created new tables: {new_tables}")

        return True
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        return False
