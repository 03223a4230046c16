"""Ingestor: runs one log file into the store as a single exclusive transaction."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from log_ingest.config import Config
from log_ingest.entry_id import EntryIdGenerator
from log_ingest.errors import StoreError
from log_ingest.line_source import LineSource
from log_ingest.matcher import FormatMatcher
from log_ingest.repository import add_entry, get_or_create_log
from log_ingest.timestamps import resolve_timestamp

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    IDLE = "idle"
    TRANSACTION_OPEN = "transaction_open"
    LOG_RESOLVED = "log_resolved"
    STREAMING = "streaming"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class IngestStats:
    log_name: str
    log_id: int | None = None
    created_log: bool = False
    lines_read: int = 0
    entries_written: int = 0
    lines_dropped: int = 0
    date_fallbacks: int = 0


def log_name(path: str) -> str:
    """Identity of the log ingested from `path`."""
    return path


class Ingestor:
    def __init__(self, session_factory: sessionmaker, config: Config,
                 id_generator=None, time_func=None):
        self._session_factory = session_factory
        self._config = config
        self._matcher = FormatMatcher(config.log_format)
        self._next_id = id_generator or EntryIdGenerator()
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self.state = RunState.IDLE

    def run(self, path: str) -> IngestStats:
        """Ingest every line of `path`. Commits on success, rolls back and re-raises otherwise."""
        stats = IngestStats(log_name=log_name(path))
        self.state = RunState.IDLE
        session = self._session_factory()
        try:
            self._ingest(session, path, stats)
            session.commit()
            self.state = RunState.COMMITTED
        except SQLAlchemyError as e:
            self._abort(session)
            raise StoreError(str(e)) from e
        except BaseException:
            self._abort(session)
            raise
        finally:
            session.close()

        logger.info(
            'Stats for "%s": %d lines read, %d entries written, %d dropped, %d date fallbacks',
            stats.log_name, stats.lines_read, stats.entries_written,
            stats.lines_dropped, stats.date_fallbacks,
        )
        return stats

    def _ingest(self, session: Session, path: str, stats: IngestStats):
        session.connection()
        self.state = RunState.TRANSACTION_OPEN

        stats.log_id, stats.created_log = get_or_create_log(session, stats.log_name, path)
        self.state = RunState.LOG_RESOLVED

        logger.info('Reading log file: "%s"', path)
        with LineSource(path, capacity=self._config.buffer_size,
                        encoding=self._config.encoding) as lines:
            self.state = RunState.STREAMING
            for line in lines:
                stats.lines_read += 1
                self._add_line(session, stats, line)

    def _add_line(self, session: Session, stats: IngestStats, line: str):
        fields = self._matcher.match(line)
        if fields is None:
            stats.lines_dropped += 1
            if not self._config.relax:
                logger.warning('error reading line: "%s"', line)
            return

        entry_time, parsed = resolve_timestamp(fields, self._config.date_layout, self._time_func())
        if not parsed:
            stats.date_fallbacks += 1

        add_entry(
            session,
            log_id=stats.log_id,
            entry_id=self._next_id(stats.log_id, line),
            entry_full=None if self._config.compact else line,
            entry_time=entry_time,
            fields=fields,
        )
        stats.entries_written += 1

    def _abort(self, session: Session):
        self.state = RunState.ROLLED_BACK
        logger.error("Something went wrong: rolling back transaction")
        try:
            session.rollback()
        except SQLAlchemyError as e:
            logger.warning("ROLLBACK failed: %s", e)
