"""RabbitMQ job queue facade."""

from .rabbitmq_queue import RabbitMQQueue
from .rabbitmq_queue_config import RabbitMQQueueDependencies

__all__ = ["RabbitMQQueue", "RabbitMQQueueDependencies"]
