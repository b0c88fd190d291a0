"""Identifier generators injected into the round repository."""

from __future__ import annotations

import itertools
import secrets
import threading
from typing import Protocol


class IdGenerator(Protocol):
    def new_id(self, byte_length: int) -> str:
        """Return an opaque identifier backed by ``byte_length`` bytes."""


class TokenIdGenerator:
    """Hex-encoded random identifiers drawn from the OS entropy pool."""

    def new_id(self, byte_length: int) -> str:
        if byte_length <= 0:
            raise ValueError("byte_length must be positive")
        return secrets.token_hex(byte_length)


class SequentialIdGenerator:
    """Deterministic identifiers (``r-0001``, ``r-0002`` ...) for tests and replays."""

    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self, byte_length: int) -> str:
        with self._lock:
            value = next(self._counter)
        return f"{self._prefix}-{value:0{byte_length}d}"


__all__ = ["IdGenerator", "SequentialIdGenerator", "TokenIdGenerator"]
