"""Correlation identifiers for outgoing messages."""

from __future__ import annotations

import secrets
import time
from typing import Optional


class CorrelationIdProvider:
    """Returns a fixed correlation id once set, otherwise a fresh one per call."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self._correlation_id = correlation_id

    def get(self) -> str:
        return self._correlation_id or self.generate()

    def set(self, correlation_id: str) -> None:
        self._correlation_id = correlation_id

    def clear(self) -> None:
        self._correlation_id = None

    @staticmethod
    def generate() -> str:
        return f"{time.time_ns():x}.{secrets.token_hex(8)}"
