"""Entry timestamp resolution from the reserved datetime field."""

import logging
from datetime import datetime, timezone

from log_ingest.errors import DateParseError
from log_ingest.matcher import DATETIME_FIELD

logger = logging.getLogger(__name__)


def parse_timestamp(value: str, layout: str) -> int:
    """Parse `value` with a strptime layout into Unix seconds.

    Values without an offset are taken as UTC.
    """
    try:
        dt = datetime.strptime(value, layout)
    except ValueError as e:
        raise DateParseError(f"{value!r} does not match layout {layout!r}: {e}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def resolve_timestamp(fields: dict[str, str], layout: str, now: datetime) -> tuple[int, bool]:
    """Return (timestamp, parsed) for an entry.

    Falls back to `now` when the datetime field is absent, or unparseable
    (logged as a warning). `parsed` is False only on a parse failure.
    """
    fallback = int(now.timestamp())
    value = fields.get(DATETIME_FIELD)
    if value is None:
        return fallback, True
    try:
        return parse_timestamp(value, layout), True
    except DateParseError:
        logger.warning('error parsing date: "%s"', value)
        return fallback, False
