"""Value types passed between the queue components and the broker adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, TypedDict

import pika
from pika.spec import Basic, BasicProperties

ATTEMPT_COUNT_HEADERS_KEY = "attempts_count"
CONTENT_TYPE = "application/json"

# Fields accepted by pika.BasicProperties, minus the headers table which has its own option.
BASIC_PROPERTY_NAMES = frozenset(
    {
        "content_type",
        "content_encoding",
        "delivery_mode",
        "priority",
        "correlation_id",
        "reply_to",
        "expiration",
        "message_id",
        "timestamp",
        "type",
        "user_id",
        "app_id",
        "cluster_id",
    }
)


class PublishOptions(TypedDict, total=False):
    """Options understood by `MessagePublisher.publish`."""

    headers: Mapping[str, Any]
    properties: Mapping[str, Any]
    attempts: int
    delay: float


@dataclass(frozen=True)
class ExchangeDescriptor:
    name: str
    type: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    passive: bool = False
    durable: bool = False
    auto_delete: bool = False


@dataclass(frozen=True)
class QueueDescriptor:
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    passive: bool = False
    durable: bool = False
    exclusive: bool = False
    auto_delete: bool = False


@dataclass
class MessageEnvelope:
    """A message ready to be handed to a producer.

    ``headers`` is the AMQP application headers table; ``properties`` holds extra
    basic properties such as ``priority`` or ``reply_to``.
    """

    body: bytes
    routing_key: str
    correlation_id: str
    content_type: str = CONTENT_TYPE
    delivery_mode: int = pika.DeliveryMode.Persistent.value
    headers: Dict[str, Any] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)
    delivery_delay: Optional[int] = None

    @property
    def attempts(self) -> Optional[int]:
        return self.headers.get(ATTEMPT_COUNT_HEADERS_KEY)

    def basic_properties(self) -> BasicProperties:
        """Render the envelope as pika basic properties."""
        values = dict(self.properties)
        values.update(
            correlation_id=self.correlation_id,
            content_type=self.content_type,
            delivery_mode=self.delivery_mode,
            headers=dict(self.headers) or None,
        )
        return BasicProperties(**values)


@dataclass(frozen=True)
class DeliveredMessage:
    """A message fetched from a queue, not yet acknowledged."""

    method: Basic.GetOk
    properties: BasicProperties
    body: bytes

    @property
    def delivery_tag(self) -> int:
        return self.method.delivery_tag

    @property
    def headers(self) -> Mapping[str, Any]:
        return self.properties.headers or {}
