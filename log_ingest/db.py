"""SQLite engine and session setup with exclusive transactions."""

import logging
import os
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from log_ingest.errors import StoreError
from log_ingest.models import Base

logger = logging.getLogger(__name__)


def _database_url(path: str) -> str:
    return f"sqlite:///{path}"


def create_store_engine(path: str) -> Engine:
    """Engine whose transactions open with BEGIN EXCLUSIVE."""
    engine = create_engine(_database_url(path))

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        # Let the "begin" hook below issue BEGIN itself.
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_exclusive(conn):
        conn.exec_driver_sql("BEGIN EXCLUSIVE")

    return engine


def _remove_db_file(path: str):
    logger.info("Removing old db file")
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise StoreError(f"Cannot remove old db file {path}: {e}") from e


def create_schema(engine: Engine):
    """Create every table and index in one exclusive transaction."""
    logger.info("Initializing database")
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StoreError(f"Cannot initialize database: {e}") from e


def open_store(path: str, initialize: bool = False) -> Engine:
    """Open the store at `path`, recreating it from empty when `initialize` is set."""
    if initialize:
        _remove_db_file(path)
    logger.info('Opening sqlite (%s) db file: "%s"', sqlite3.sqlite_version, path)
    engine = create_store_engine(path)
    if initialize:
        try:
            create_schema(engine)
        except StoreError:
            engine.dispose()
            raise
    return engine


def close_store(engine: Engine):
    logger.info("Closing db")
    engine.dispose()


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False)
