"""Contract interfaces for the RabbitMQ job queue."""

from .broker_context_interface import IBrokerContext, IConsumer, IProducer
from .payload_factory_interface import IPayloadFactory
from .rabbitmq_connection_interface import IRabbitMQConnection

__all__ = [
    "IBrokerContext",
    "IConsumer",
    "IPayloadFactory",
    "IProducer",
    "IRabbitMQConnection",
]
