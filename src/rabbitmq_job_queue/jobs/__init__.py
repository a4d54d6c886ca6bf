"""Jobs handed out by the queue."""

from .rabbitmq_job import RabbitMQJob

__all__ = ["RabbitMQJob"]
