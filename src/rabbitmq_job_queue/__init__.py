"""Job queue backend for RabbitMQ built on pika."""

from .connection import RabbitMQConnection
from .contracts import IBrokerContext, IPayloadFactory, IRabbitMQConnection
from .errors import BrokerConnectionError, ConfigurationError, RabbitMQQueueError
from .jobs import RabbitMQJob
from .queue import RabbitMQQueue, RabbitMQQueueDependencies
from .queue_config import ExchangeConfig, QueueConfig, RabbitMQQueueConfig

__all__ = [
    "BrokerConnectionError",
    "ConfigurationError",
    "ExchangeConfig",
    "IBrokerContext",
    "IPayloadFactory",
    "IRabbitMQConnection",
    "QueueConfig",
    "RabbitMQConnection",
    "RabbitMQJob",
    "RabbitMQQueue",
    "RabbitMQQueueConfig",
    "RabbitMQQueueDependencies",
    "RabbitMQQueueError",
]
