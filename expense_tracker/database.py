# expense_tracker/database.py
import logging
import sqlite3
from datetime import date

from sqlalchemy import create_engine, Engine
from sqlalchemy.event import listen
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


# This ensures that Python date objects are handled correctly by sqlite3
# in Python 3.12+ to avoid the DeprecationWarning.
def _fk_pragma_on_connect(dbapi_con, con_record):
    """Ensures that the foreign key pragma is enabled for SQLite connections."""
    dbapi_con.execute('PRAGMA foreign_keys=ON')
    # Register the adapter for date objects
    sqlite3.register_adapter(date, lambda val: val.isoformat())


def make_engine(database_url: str) -> Engine:
    """
    Creates the engine for the record store.

    SQLite needs 'check_same_thread' disabled because FastAPI serves sync
    routes from a threadpool. In-memory SQLite additionally shares a single
    connection, otherwise every new connection would see an empty database.
    """
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://")

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)
    listen(engine, 'connect', _fk_pragma_on_connect)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Creates the tables (and their indexes). Safe to call repeatedly."""
    # Imported for its side effect of registering the tables on Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Record store ready at %s", engine.url.render_as_string(hide_password=True))
