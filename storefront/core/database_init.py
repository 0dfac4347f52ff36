"""Database initialization run on application startup."""

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from storefront.models import Base

logger = logging.getLogger(__name__)


def init_database_schema(engine: Engine) -> None:
    """Create any catalog tables that are missing. Existing tables are left untouched."""

    existing = set(inspect(engine).get_table_names())
    missing = [table.name for table in Base.metadata.sorted_tables if table.name not in existing]
    if not missing:
        logger.info("Database schema up to date")
        return
    Base.metadata.create_all(bind=engine)
    logger.info("Created tables: %s", ", ".join(missing))
