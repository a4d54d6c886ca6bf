"""Broker operations implemented on a pika blocking channel."""

from __future__ import annotations

import logging
from typing import Optional

from pika.adapters.blocking_connection import BlockingChannel

from rabbitmq_job_queue.contracts import IBrokerContext, IConsumer, IProducer, IRabbitMQConnection
from rabbitmq_job_queue.models import (
    DeliveredMessage,
    ExchangeDescriptor,
    MessageEnvelope,
    QueueDescriptor,
)

# Header read by the rabbitmq_delayed_message_exchange plugin.
DELAY_HEADER = "x-delay"


class PikaProducer(IProducer):
    """Publishes envelopes on a channel, optionally delayed by the broker."""

    def __init__(self, channel: BlockingChannel, logger: logging.Logger) -> None:
        self._channel = channel
        self.logger = logger
        self.delivery_delay: Optional[int] = None

    def send(self, exchange: ExchangeDescriptor, envelope: MessageEnvelope) -> None:
        properties = envelope.basic_properties()
        if self.delivery_delay:
            properties.headers = {**(properties.headers or {}), DELAY_HEADER: self.delivery_delay}

        self._channel.basic_publish(
            exchange=exchange.name,
            routing_key=envelope.routing_key,
            body=envelope.body,
            properties=properties,
        )
        self.logger.debug(
            "Published %s to exchange %s with correlation_id=%s",
            envelope.routing_key,
            exchange.name,
            envelope.correlation_id,
        )


class PikaConsumer(IConsumer):
    """Polls one queue with ``basic_get`` and settles messages on the same channel."""

    def __init__(self, channel: BlockingChannel, queue: QueueDescriptor) -> None:
        self._channel = channel
        self.queue = queue

    def receive_no_wait(self) -> Optional[DeliveredMessage]:
        method, properties, body = self._channel.basic_get(queue=self.queue.name, auto_ack=False)
        if method is None:
            return None
        return DeliveredMessage(method=method, properties=properties, body=body)

    def acknowledge(self, message: DeliveredMessage) -> None:
        self._channel.basic_ack(delivery_tag=message.delivery_tag)

    def reject(self, message: DeliveredMessage, requeue: bool = False) -> None:
        self._channel.basic_reject(delivery_tag=message.delivery_tag, requeue=requeue)


class PikaBrokerContext(IBrokerContext):
    """Runs topology, publish and receive calls over a `IRabbitMQConnection`."""

    def __init__(
        self,
        connection: IRabbitMQConnection,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.connection = connection
        self.logger = logger or logging.getLogger(__name__)

    def ensure_connected(self) -> int:
        self.connection.connect()
        return self.connection.session

    def declare_exchange(self, exchange: ExchangeDescriptor) -> None:
        self.connection.connect().exchange_declare(
            exchange=exchange.name,
            exchange_type=exchange.type,
            passive=exchange.passive,
            durable=exchange.durable,
            auto_delete=exchange.auto_delete,
            arguments=dict(exchange.arguments) or None,
        )
        self.logger.info("Declared exchange %s (%s)", exchange.name, exchange.type)

    def declare_queue(self, queue: QueueDescriptor) -> int:
        result = self.connection.connect().queue_declare(
            queue=queue.name,
            passive=queue.passive,
            durable=queue.durable,
            exclusive=queue.exclusive,
            auto_delete=queue.auto_delete,
            arguments=dict(queue.arguments) or None,
        )
        return result.method.message_count

    def bind(self, queue: QueueDescriptor, exchange: ExchangeDescriptor, routing_key: str) -> None:
        self.connection.connect().queue_bind(
            queue=queue.name,
            exchange=exchange.name,
            routing_key=routing_key,
        )

    def create_producer(self) -> PikaProducer:
        return PikaProducer(self.connection.connect(), self.logger)

    def create_consumer(self, queue: QueueDescriptor) -> PikaConsumer:
        return PikaConsumer(self.connection.connect(), queue)
