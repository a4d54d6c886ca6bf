"""Defines the broker operations the queue components rely on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from rabbitmq_job_queue.models import (
    DeliveredMessage,
    ExchangeDescriptor,
    MessageEnvelope,
    QueueDescriptor,
)


class IProducer(ABC):
    """Sends envelopes to an exchange."""

    delivery_delay: Optional[int]

    @abstractmethod
    def send(self, exchange: ExchangeDescriptor, envelope: MessageEnvelope) -> None:
        """Publish ``envelope`` to ``exchange``, honouring ``delivery_delay`` (ms)."""


class IConsumer(ABC):
    """Reads from a single queue and settles the messages it handed out."""

    queue: QueueDescriptor

    @abstractmethod
    def receive_no_wait(self) -> Optional[DeliveredMessage]:
        """Fetch one message if available, without blocking for new ones."""

    @abstractmethod
    def acknowledge(self, message: DeliveredMessage) -> None:
        """Acknowledge ``message`` so the broker drops it."""

    @abstractmethod
    def reject(self, message: DeliveredMessage, requeue: bool = False) -> None:
        """Reject ``message``, optionally returning it to the queue."""


class IBrokerContext(ABC):
    """Broker client operations over one connection."""

    @abstractmethod
    def ensure_connected(self) -> int:
        """Open the broker connection if needed and return its session number."""

    @abstractmethod
    def declare_exchange(self, exchange: ExchangeDescriptor) -> None:
        """Declare ``exchange`` on the broker."""

    @abstractmethod
    def declare_queue(self, queue: QueueDescriptor) -> int:
        """Declare ``queue`` and return the number of messages it holds."""

    @abstractmethod
    def bind(self, queue: QueueDescriptor, exchange: ExchangeDescriptor, routing_key: str) -> None:
        """Bind ``queue`` to ``exchange`` with ``routing_key``."""

    @abstractmethod
    def create_producer(self) -> IProducer:
        """Return a producer for a single send."""

    @abstractmethod
    def create_consumer(self, queue: QueueDescriptor) -> IConsumer:
        """Return a consumer reading from ``queue``."""
