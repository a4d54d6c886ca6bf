"""Defines the contract for turning jobs into message bodies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IPayloadFactory(ABC):
    """Serializes a job and its data into a message body."""

    @abstractmethod
    def create_payload(self, job: Any, data: Any = "") -> bytes:
        """Return the encoded message body for ``job``."""
