"""Job queue backed by RabbitMQ exchanges and queues."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from rabbitmq_job_queue.consumer import MessageConsumer
from rabbitmq_job_queue.contracts import IBrokerContext, IPayloadFactory
from rabbitmq_job_queue.correlation import CorrelationIdProvider
from rabbitmq_job_queue.error_policy import ConnectionErrorPolicy
from rabbitmq_job_queue.jobs import RabbitMQJob
from rabbitmq_job_queue.models import PublishOptions
from rabbitmq_job_queue.publisher import MessagePublisher
from rabbitmq_job_queue.publisher.message_publisher import Delay, Payload
from rabbitmq_job_queue.queue_config import RabbitMQQueueConfig
from rabbitmq_job_queue.topology import TopologyCache, TopologyManager

from .rabbitmq_queue_config import RabbitMQQueueDependencies


class RabbitMQQueue:
    """Pushes and pops jobs through a RabbitMQ broker.

    Broker failures never escape `push_raw` or `pop` in throttle mode: both return
    ``None`` and the caller should try again later. With ``sleep_on_error=False``
    they raise `BrokerConnectionError` instead.

    An instance owns its topology cache and is not safe for concurrent use; use
    one instance per thread.
    """

    def __init__(
        self,
        *,
        context: IBrokerContext,
        config: RabbitMQQueueConfig,
        payload_factory: IPayloadFactory,
        correlation_ids: Optional[CorrelationIdProvider] = None,
        error_policy: Optional[ConnectionErrorPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.config = config
        self.payload_factory = payload_factory
        self._context = context
        self.correlation_ids = correlation_ids or CorrelationIdProvider()
        self.error_policy = error_policy or ConnectionErrorPolicy(
            config.sleep_on_error, logger=self.logger
        )
        self.topology = TopologyManager(
            context=context,
            queue_config=config.queue,
            exchange_config=config.exchange,
            cache=TopologyCache(),
            logger=self.logger,
        )
        self.publisher = MessagePublisher(
            context=context,
            topology=self.topology,
            correlation_ids=self.correlation_ids,
            error_policy=self.error_policy,
            logger=self.logger,
        )
        self.consumer = MessageConsumer(
            context=context,
            topology=self.topology,
            error_policy=self.error_policy,
            publisher=self.publisher,
            logger=self.logger,
        )

    @classmethod
    def from_config(
        cls,
        config: Union[RabbitMQQueueConfig, Mapping[str, Any]],
        rabbitmq_url: Optional[str] = None,
        *,
        dependencies: Optional[RabbitMQQueueDependencies] = None,
    ) -> "RabbitMQQueue":
        if not isinstance(config, RabbitMQQueueConfig):
            config = RabbitMQQueueConfig.from_mapping(config)
        deps = dependencies or RabbitMQQueueDependencies()

        return cls(
            context=deps.make_context(deps.make_connection(rabbitmq_url)),
            config=config,
            payload_factory=deps.make_payload_factory(),
            correlation_ids=deps.make_correlation_ids(),
        )

    @property
    def context(self) -> IBrokerContext:
        return self._context

    def size(self, queue: Optional[str] = None) -> int:
        declared_queue, _ = self.topology.resolve(queue)
        return self._context.declare_queue(declared_queue)

    def push(self, job: Any, data: Any = "", queue: Optional[str] = None) -> Optional[str]:
        return self.push_raw(self.payload_factory.create_payload(job, data), queue)

    def push_raw(
        self,
        payload: Payload,
        queue: Optional[str] = None,
        options: Optional[PublishOptions] = None,
    ) -> Optional[str]:
        return self.publisher.publish(payload, queue, options)

    def later(
        self, delay: Delay, job: Any, data: Any = "", queue: Optional[str] = None
    ) -> Optional[str]:
        return self.publisher.schedule(delay, self.payload_factory.create_payload(job, data), queue)

    def release(
        self,
        delay: Delay,
        job: Any,
        data: Any,
        queue: Optional[str] = None,
        attempts: int = 0,
    ) -> Optional[str]:
        """Put a failed job back onto ``queue`` with its attempt count."""
        return self.publisher.release(
            delay, self.payload_factory.create_payload(job, data), queue, attempts
        )

    def pop(self, queue: Optional[str] = None) -> Optional[RabbitMQJob]:
        return self.consumer.dequeue(queue)

    def get_correlation_id(self) -> str:
        return self.correlation_ids.get()

    def set_correlation_id(self, correlation_id: str) -> None:
        self.correlation_ids.set(correlation_id)
