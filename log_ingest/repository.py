"""Store reads and writes. Callers own the transaction; nothing here commits."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from log_ingest.errors import ConsistencyError
from log_ingest.models import Entry, Log, StringField

logger = logging.getLogger(__name__)


def find_log_id(db: Session, log_name: str) -> int | None:
    return db.execute(
        select(Log.log_id).where(Log.log_name == log_name)
    ).scalar_one_or_none()


def get_or_create_log(db: Session, log_name: str, filename: str) -> tuple[int, bool]:
    """Return (log_id, created) for `log_name`, inserting the row if needed.

    Raises ConsistencyError if the row is missing right after the insert.
    """
    log_id = find_log_id(db, log_name)
    if log_id is not None:
        logger.info('Using log "%s" (%d)', log_name, log_id)
        return log_id, False

    db.add(Log(log_name=log_name, filename=filename))
    db.flush()

    log_id = find_log_id(db, log_name)
    if log_id is None:
        raise ConsistencyError(f'INSERT failed: log "{log_name}" not found after insert')
    logger.info('Created log "%s" (%d)', log_name, log_id)
    return log_id, True


def add_entry(
    db: Session,
    log_id: int,
    entry_id: str,
    entry_full: str | None,
    entry_time: int,
    fields: dict[str, str],
):
    """Write one entry and one string projection per field, then flush."""
    db.add(Entry(
        log_id=log_id,
        entry_id=entry_id,
        entry_full=entry_full,
        entry_time=entry_time,
    ))
    db.add_all(
        StringField(column_name=name, entry_id=entry_id, string_value=value)
        for name, value in fields.items()
    )
    db.flush()
