"""Message publishing."""

from .message_publisher import MessagePublisher, seconds_until

__all__ = ["MessagePublisher", "seconds_until"]
