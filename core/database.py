"""Database engine and session management."""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from core.settings import get_settings
from core.models import Base

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

if settings.database_url.startswith("sqlite"):
    # SQLite ignores ON DELETE rules unless enabled on every connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Table classes register themselves on Base.metadata at import time
    import modules.clients.models  # noqa: F401
    import modules.finance.models  # noqa: F401
    import modules.inventory.models  # noqa: F401
    import modules.products.models  # noqa: F401
    import modules.projects.models  # noqa: F401
    import modules.sales.models  # noqa: F401
    import modules.suppliers.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready at %s", settings.database_url)
