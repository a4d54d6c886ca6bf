"""Configuration primitives for wiring a `RabbitMQQueue`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from rabbitmq_job_queue.broker import PikaBrokerContext
from rabbitmq_job_queue.connection import RabbitMQConnection
from rabbitmq_job_queue.contracts import IBrokerContext, IPayloadFactory, IRabbitMQConnection
from rabbitmq_job_queue.correlation import CorrelationIdProvider
from rabbitmq_job_queue.payload import JSONPayloadFactory


@dataclass(frozen=True)
class RabbitMQQueueDependencies:
    """Bundles factory functions used by `RabbitMQQueue.from_config`."""

    make_connection: Callable[[Optional[str]], IRabbitMQConnection] = field(
        default=lambda rabbitmq_url: RabbitMQConnection(rabbitmq_url)
    )
    make_context: Callable[[IRabbitMQConnection], IBrokerContext] = field(
        default=lambda connection: PikaBrokerContext(connection)
    )
    make_payload_factory: Callable[[], IPayloadFactory] = field(default=JSONPayloadFactory)
    make_correlation_ids: Callable[[], CorrelationIdProvider] = field(
        default=CorrelationIdProvider
    )
