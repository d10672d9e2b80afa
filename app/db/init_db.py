"""
Database initialization.

Creates all tables.  Production databases are migrated with Alembic;
this is for development and tests.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Initialize database schema.

    Args:
        bind: Engine to create tables on (defaults to the configured engine)
    """

    # Import all models so SQLModel.metadata has them
    import app.db.base  # noqa: F401

    if bind is None:
        from app.db.session import engine as bind

    logger.info("Creating database tables on %s", bind.url)
    SQLModel.metadata.create_all(bind)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
