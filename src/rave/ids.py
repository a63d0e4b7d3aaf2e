"""Synthetic identifiers for entities created locally by a robot."""

from __future__ import annotations

import itertools
import threading

# Prefix the service recognises as "to be decided" for ids it has not assigned.
GENERATED_PREFIX = "TBD"


class IdGenerator:
    """Thread-safe source of unique temporary ids.

    Ids have the form ``TBD_<scope>_<n>`` where ``n`` increases by one on
    every call, regardless of scope.
    """

    def __init__(self, start: int = 1, prefix: str = GENERATED_PREFIX) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
        self.prefix = prefix

    def next_id(self, scope: str | None) -> str:
        """Return the next id for ``scope`` (normally a wavelet id)."""
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}_{scope}_{n}"


# Shared by every Context that is not given its own generator, so ids stay
# unique for the lifetime of the process.
default_id_generator = IdGenerator()
