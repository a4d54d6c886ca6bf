"""pika implementation of the broker operations."""

from .pika_broker_context import DELAY_HEADER, PikaBrokerContext, PikaConsumer, PikaProducer

__all__ = ["DELAY_HEADER", "PikaBrokerContext", "PikaConsumer", "PikaProducer"]
