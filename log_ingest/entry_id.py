"""Entry id derivation: md5 over a random salt, the owning log id, and the line."""

import hashlib
import itertools
import random

ENTRY_ID_LENGTH = 32


def derive_entry_id(salt: bytes, log_id: int, line: str, sequence: int | None = None) -> str:
    """Digest the inputs into a fixed-length lowercase hex id."""
    h = hashlib.md5()
    h.update(salt)
    h.update(str(log_id).encode("ascii"))
    if sequence is not None:
        h.update(b":%d:" % sequence)
    h.update(line.encode("utf-8"))
    return h.hexdigest()


class EntryIdGenerator:
    """Callable producing ids for (log_id, line) pairs.

    Each call draws `salt_size` random bytes and folds in a monotonic
    sequence number. Uniqueness across runs stays probabilistic; the store's
    primary key rejects a collision.
    """

    def __init__(self, rng: random.Random | None = None, salt_size: int = 8):
        self._rng = rng or random.Random()
        self._salt_size = salt_size
        self._sequence = itertools.count()

    def __call__(self, log_id: int, line: str) -> str:
        salt = self._rng.getrandbits(self._salt_size * 8).to_bytes(self._salt_size, "big")
        return derive_entry_id(salt, log_id, line, next(self._sequence))
