"""Job payload encoding."""

from .json_payload_factory import JSONPayloadFactory

__all__ = ["JSONPayloadFactory"]
