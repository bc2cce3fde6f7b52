"""Engine and session factory.

The engine is created lazily so importing the package never opens a
database connection or loads a DBAPI driver.
"""

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from logiflow.core.config import get_settings


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    return create_engine(settings.database_url, pool_pre_ping=True)


SessionLocal = sessionmaker(autoflush=False)


def new_session() -> Session:
    """Open a session bound to the configured engine."""
    return SessionLocal(bind=get_engine())
