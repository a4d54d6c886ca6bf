"""A job fetched from RabbitMQ, awaiting acknowledgement."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from rabbitmq_job_queue.contracts import IConsumer
from rabbitmq_job_queue.errors import RabbitMQQueueError
from rabbitmq_job_queue.models import ATTEMPT_COUNT_HEADERS_KEY, DeliveredMessage

if TYPE_CHECKING:
    from rabbitmq_job_queue.publisher import MessagePublisher
    from rabbitmq_job_queue.publisher.message_publisher import Delay


class RabbitMQJob:
    """Wraps a delivered message together with the consumer that must settle it.

    The message is settled at most once: after `delete`, `reject` or `release`,
    further settlement calls are ignored.
    """

    ATTEMPT_COUNT_HEADERS_KEY = ATTEMPT_COUNT_HEADERS_KEY

    def __init__(
        self,
        *,
        consumer: IConsumer,
        message: DeliveredMessage,
        queue_name: str,
        publisher: Optional[MessagePublisher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.consumer = consumer
        self.message = message
        self.queue_name = queue_name
        self.publisher = publisher
        self.logger = logger or logging.getLogger(__name__)
        self._settled = False

    @property
    def settled(self) -> bool:
        return self._settled

    def get_queue(self) -> str:
        return self.queue_name

    def get_job_id(self) -> Optional[str]:
        return self.message.properties.correlation_id

    def get_raw_body(self) -> bytes:
        return self.message.body

    def payload(self) -> Any:
        return json.loads(self.message.body.decode("utf-8"))

    def attempts(self) -> int:
        """Number of the current attempt, starting at 1."""
        return int(self.message.headers.get(ATTEMPT_COUNT_HEADERS_KEY, 0)) + 1

    def delete(self) -> None:
        if self._settle():
            self.consumer.acknowledge(self.message)

    def reject(self, requeue: bool = False) -> None:
        if self._settle():
            self.consumer.reject(self.message, requeue=requeue)

    def release(self, delay: Delay = 0) -> Optional[str]:
        """Publish the body again after ``delay``, then acknowledge this delivery.

        The new message carries the current attempt number so the next delivery
        reports one more attempt. When the publish is throttled this delivery stays
        unacknowledged and the broker redelivers it once the channel closes; a
        crash between publish and ack can therefore run the job twice.
        """
        if self.publisher is None:
            raise RabbitMQQueueError("This job was fetched without a publisher and cannot be released.")
        if self._settled:
            self.logger.debug("Job %s is already settled.", self.get_job_id())
            return None

        self.logger.info("Releasing job %s back onto %s", self.get_job_id(), self.queue_name)
        correlation_id = self.publisher.release(
            delay, self.message.body, self.queue_name, self.attempts()
        )
        if correlation_id is None:
            self.logger.warning(
                "Could not re-publish job %s; leaving the delivery unacknowledged.",
                self.get_job_id(),
            )
            return None

        if self._settle():
            self.consumer.acknowledge(self.message)
        return correlation_id

    def _settle(self) -> bool:
        if self._settled:
            self.logger.debug("Job %s is already settled.", self.get_job_id())
            return False
        self._settled = True
        return True
