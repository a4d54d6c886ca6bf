"""Broker failure handling."""

from .connection_error_policy import ConnectionErrorPolicy, ErrorPolicyMode

__all__ = ["ConnectionErrorPolicy", "ErrorPolicyMode"]
