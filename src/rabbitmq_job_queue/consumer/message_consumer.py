"""Non-blocking dequeue of single jobs."""

from __future__ import annotations

import logging
from typing import Optional

from rabbitmq_job_queue.contracts import IBrokerContext
from rabbitmq_job_queue.error_policy import ConnectionErrorPolicy
from rabbitmq_job_queue.jobs import RabbitMQJob
from rabbitmq_job_queue.publisher import MessagePublisher
from rabbitmq_job_queue.topology import TopologyManager


class MessageConsumer:
    """Fetches at most one message per call from the resolved queue."""

    def __init__(
        self,
        *,
        context: IBrokerContext,
        topology: TopologyManager,
        error_policy: ConnectionErrorPolicy,
        publisher: Optional[MessagePublisher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.context = context
        self.topology = topology
        self.error_policy = error_policy
        self.publisher = publisher
        self.logger = logger or logging.getLogger(__name__)

    def dequeue(self, queue_name: Optional[str] = None) -> Optional[RabbitMQJob]:
        try:
            queue, _ = self.topology.resolve(queue_name)
            consumer = self.context.create_consumer(queue)
            message = consumer.receive_no_wait()
        except Exception as exc:
            self.error_policy.report("pop", exc)
            return None

        if message is None:
            return None

        self.logger.debug("Received message %s from %s", message.delivery_tag, queue.name)
        return RabbitMQJob(
            consumer=consumer,
            message=message,
            queue_name=queue.name,
            publisher=self.publisher,
        )
