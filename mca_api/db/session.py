from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from mca_api.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.resolved_db_url(),
    connect_args={"check_same_thread": False} if _settings.resolved_db_url().startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """
    Main DB dependency.

    Handlers commit explicitly; anything left open is rolled back on close.
    Authorization scoping is applied by the handlers themselves through the
    request's `AuthContext`, not by session hooks.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
