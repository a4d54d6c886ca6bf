"""Message consumption."""

from .message_consumer import MessageConsumer

__all__ = ["MessageConsumer"]
