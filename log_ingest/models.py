"""ORM schema: logs, entries, and the strings/stats field projections."""

from sqlalchemy import Column, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Log(Base):
    __tablename__ = "logs"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    log_name = Column(String, nullable=False, unique=True)
    filename = Column(String)

    __table_args__ = {"sqlite_autoincrement": True}


class Entry(Base):
    __tablename__ = "entries"

    log_id = Column(Integer, nullable=False)
    entry_id = Column(String, primary_key=True)
    entry_full = Column(String, nullable=True)     # NULL under compact mode
    entry_time = Column(Integer, nullable=False)   # Unix seconds

    __table_args__ = (
        Index("entries_log_id", "log_id"),
        Index("entries_entry_time", "entry_time"),
    )


class StringField(Base):
    __tablename__ = "strings"

    column_name = Column(String, primary_key=True)
    entry_id = Column(String, primary_key=True)
    string_value = Column(String)

    __table_args__ = (
        Index("strings_column_name", "column_name"),
        Index("strings_entry_id", "entry_id"),
    )


class StatField(Base):
    """Numeric projections. Nothing writes here yet."""

    __tablename__ = "stats"

    column_name = Column(String, primary_key=True)
    entry_id = Column(String, primary_key=True)
    stat_value = Column(Integer)

    __table_args__ = (
        Index("stats_column_name", "column_name"),
        Index("stats_entry_id", "entry_id"),
    )
