"""Table creation for the invoicing schema."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from invoicing.db.connection import get_sqlalchemy_url
from invoicing.db.models import Base

logger = logging.getLogger(__name__)


def init_schema(url: Optional[str] = None, engine: Optional[Engine] = None) -> bool:
    """
    Create the Customer, Invoice, Item and Product tables if they don't exist.

    Existing tables are left untouched; this does not migrate anything.

    Args:
        url: Database URL. Falls back to DATABASE_URL.
        engine: Existing engine to use instead of building one from the URL.

    Returns:
        True if the tables are in place, False otherwise.
    """
    if engine is None:
        try:
            url = get_sqlalchemy_url(url)
        except ValueError as e:
            logger.debug(f"Skipping schema initialization: {e}")
            return False
        engine = create_engine(url, pool_pre_ping=True)

    try:
        Base.metadata.create_all(engine)
        logger.info("Invoicing schema initialized successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize invoicing schema: {e}")
        return False
