"""Exception hierarchy for the RabbitMQ job queue."""


class RabbitMQQueueError(Exception):
    """Base class for errors raised by the queue backend."""


class ConfigurationError(RabbitMQQueueError, ValueError):
    """Raised when the queue configuration is incomplete or malformed."""


class BrokerConnectionError(RabbitMQQueueError, RuntimeError):
    """Raised in fail-fast mode when a broker call fails.

    The original broker error is available as ``__cause__``.
    """
