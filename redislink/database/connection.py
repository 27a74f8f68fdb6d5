"""
SQLAlchemy engine and session setup for the record store.

Each record store owns one engine (one shared connection pool per process)
and opens a short-lived session per operation.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create an engine for the given database URL.

    SQLite needs check_same_thread=False to be shared between requests, and an
    in-memory SQLite database must live on a single connection (StaticPool),
    otherwise every new connection would see an empty database.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs.setdefault("poolclass", StaticPool)
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False keeps attributes readable after the session closes
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
