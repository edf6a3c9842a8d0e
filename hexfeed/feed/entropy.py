"""Feed layer: cryptographically secure byte source for stream events."""

from __future__ import annotations

import secrets
from collections.abc import Callable

from hexfeed.core.errors import EntropyUnavailable

EVENT_SIZE = 3


class EntropySource:
    """Draw fixed-size byte sequences from the OS CSPRNG."""

    def __init__(self, size: int = EVENT_SIZE, reader: Callable[[int], bytes] = secrets.token_bytes) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._size = size
        self._reader = reader

    @property
    def size(self) -> int:
        return self._size

    def next(self) -> bytes:
        try:
            data = self._reader(self._size)
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailable(self._size, 0, str(exc)) from exc
        if not isinstance(data, (bytes, bytearray)) or len(data) != self._size:
            read = len(data) if isinstance(data, (bytes, bytearray)) else 0
            raise EntropyUnavailable(self._size, read, "short read")
        return bytes(data)
