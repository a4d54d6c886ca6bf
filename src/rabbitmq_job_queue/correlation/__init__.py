"""Correlation id handling."""

from .correlation_id_provider import CorrelationIdProvider

__all__ = ["CorrelationIdProvider"]
