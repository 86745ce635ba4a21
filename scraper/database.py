"""Engine and session helpers for the media store."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from models import Base

LOGGER = logging.getLogger(__name__)

_ENGINE_OPTIONS = {
    # Upper bound on connections: worker writes plus API reads share one pool.
    "pool_size": 10,
    "max_overflow": 10,
    "pool_pre_ping": True,
    "pool_recycle": 1800,
}


def build_engine(db_url: str) -> Engine:
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, **_ENGINE_OPTIONS)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> bool:
    """Create the media table and its indexes when missing.

    Failures are logged rather than raised so the API can still start and
    report storage errors per request.
    """

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError:
        LOGGER.exception("Error initializing database")
        return False
    LOGGER.info("Database initialized successfully")
    return True
