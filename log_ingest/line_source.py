"""LineSource: producer thread streaming a file's lines through a bounded queue."""

import codecs
import logging
import queue
import threading

from log_ingest.errors import SourceReadError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1024

_EOF = object()

_DECODE_ERRORS = "log_ingest.replace"
_decode_state = threading.local()


def _replace_and_flag(exc):
    _decode_state.replaced = True
    return codecs.replace_errors(exc)


codecs.register_error(_DECODE_ERRORS, _replace_and_flag)


def _strip_line_ending(line: str) -> str:
    r"""Remove a trailing "\n" or "\r\n". A bare "\r" is part of the line."""
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


class LineSource:
    """Single-use, ordered iterator over the lines of a file.

    A daemon thread reads the file and feeds a queue of at most `capacity`
    lines. The reader blocks while the queue is full and the consumer blocks
    while it is empty, so disk reads overlap with line processing without
    buffering the whole file.

    Usage:
        with LineSource(path) as lines:
            for line in lines:
                ...
    """

    def __init__(self, path: str, capacity: int = DEFAULT_CAPACITY,
                 encoding: str = "utf-8", poll_interval: float = 0.1):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._path = path
        self._encoding = encoding
        self._poll_interval = poll_interval
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self._stop = threading.Event()
        self._error: BaseException | None = None
        self._file = None
        self._thread: threading.Thread | None = None
        self._consumed = False
        self.replaced_bytes = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def pending(self) -> int:
        """Number of lines read but not yet consumed."""
        return self._queue.qsize()

    def start(self):
        """Open the file and start the reader thread."""
        if self._thread is not None:
            return
        try:
            self._file = open(self._path, "r", encoding=self._encoding,
                              errors=_DECODE_ERRORS, newline="\n")
        except OSError as e:
            raise SourceReadError(f"Cannot open log file {self._path}: {e}") from e
        self._thread = threading.Thread(
            target=self._produce, name=f"line-source:{self._path}", daemon=True,
        )
        self._thread.start()
        logger.debug("Started reader for %s (capacity=%d)", self._path, self._queue.maxsize)

    def _put(self, item) -> bool:
        """Block until the item is queued. Returns False if stopped meanwhile."""
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self):
        _decode_state.replaced = False
        try:
            with self._file as f:
                for line in f:
                    if _decode_state.replaced and not self.replaced_bytes:
                        self.replaced_bytes = True
                        logger.warning('Undecodable bytes in "%s" replaced with U+FFFD', self._path)
                    if not self._put(_strip_line_ending(line)):
                        return
        except Exception as e:
            self._error = e
        self._put(_EOF)

    def __iter__(self):
        if self._consumed:
            raise RuntimeError(f"LineSource for {self._path} can only be iterated once")
        self._consumed = True
        self.start()
        return self._drain()

    def _drain(self):
        while True:
            item = self._queue.get()
            if item is _EOF:
                break
            yield item
        if self._error is not None:
            if isinstance(self._error, OSError):
                raise SourceReadError(
                    f"Error reading log file {self._path}: {self._error}"
                ) from self._error
            raise self._error

    def close(self):
        """Stop the reader thread and release the file."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            if self._thread.is_alive():
                logger.warning("Reader thread for %s did not stop", self._path)
        elif self._file is not None:
            self._file.close()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
