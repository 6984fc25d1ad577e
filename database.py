"""
database.py — SQLAlchemy engine, session factory, and Base for the account store.
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def make_engine(database_url: str):
    """Build an engine; SQLite needs cross-thread access for FastAPI's threadpool."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine) -> None:
    """Create all tables known to Base."""
    import models  # noqa: F401  (registers the ORM classes)

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """FastAPI dependency that yields a database session and closes it after use."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
