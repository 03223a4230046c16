"""Error taxonomy for ingestion runs.

Fatal conditions derive from IngestError and abort the run (the transaction
is rolled back). Recoverable conditions are handled per line and never leave
the streaming loop.
"""


class IngestError(Exception):
    """Base class for failures that abort an ingestion run."""


class SourceReadError(IngestError):
    """The log file could not be opened or read."""


class StoreError(IngestError):
    """A persistence operation failed."""


class ConsistencyError(IngestError):
    """A freshly inserted log row could not be found again."""


class DateParseError(ValueError):
    """The datetime field did not fit the configured layout."""


class FormatTemplateError(ValueError):
    """The format template is malformed."""
