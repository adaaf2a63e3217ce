from __future__ import annotations

from fastapi import Request
from sqlalchemy import Engine, MetaData, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .config import settings


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def make_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are used from FastAPI's worker threads
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autocommit=False, autoflush=False)


engine = make_engine(settings.DATABASE_URL)

SessionLocal = make_session_factory(engine)


def engine_for(url: str) -> Engine:
    """Reuse the process engine when the URL matches it."""
    return engine if url == settings.DATABASE_URL else make_engine(url)


def ensure_core_schema(bind: Engine | None = None) -> None:
    """Create the users and notes tables if they are missing."""
    Base.metadata.create_all(bind=bind or engine, checkfirst=True)


def get_db(request: Request):
    factory = getattr(request.app.state, "session_factory", SessionLocal)
    db = factory()
    try:
        yield db
    finally:
        db.close()
