"""Builds message envelopes and sends them to the resolved exchange."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from rabbitmq_job_queue.contracts import IBrokerContext
from rabbitmq_job_queue.correlation import CorrelationIdProvider
from rabbitmq_job_queue.error_policy import ConnectionErrorPolicy
from rabbitmq_job_queue.models import (
    ATTEMPT_COUNT_HEADERS_KEY,
    BASIC_PROPERTY_NAMES,
    MessageEnvelope,
    PublishOptions,
)
from rabbitmq_job_queue.topology import TopologyManager

Delay = Union[int, float, timedelta, datetime]
Payload = Union[bytes, str]


def seconds_until(delay: Delay, now: Optional[datetime] = None) -> float:
    """Seconds from ``now`` until ``delay``, never negative.

    ``delay`` is either a duration (seconds or timedelta) or an absolute datetime.
    Naive datetimes are compared against naive local time.
    """
    if isinstance(delay, datetime):
        if now is None:
            now = datetime.now(timezone.utc) if delay.tzinfo else datetime.now()
        seconds = (delay - now).total_seconds()
    elif isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    else:
        seconds = float(delay)
    return max(seconds, 0.0)


class MessagePublisher:
    """Publishes payloads as persistent JSON messages."""

    def __init__(
        self,
        *,
        context: IBrokerContext,
        topology: TopologyManager,
        correlation_ids: CorrelationIdProvider,
        error_policy: ConnectionErrorPolicy,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.context = context
        self.topology = topology
        self.correlation_ids = correlation_ids
        self.error_policy = error_policy
        self.logger = logger or logging.getLogger(__name__)

    def publish(
        self,
        payload: Payload,
        queue_name: Optional[str] = None,
        options: Optional[PublishOptions] = None,
    ) -> Optional[str]:
        """Send ``payload`` and return its correlation id.

        Returns ``None`` when the broker call failed and the error policy chose to
        throttle instead of raising.
        """
        options = options or {}
        self.check_options(options)
        try:
            queue, exchange = self.topology.resolve(queue_name)
            envelope = self.build_envelope(payload, queue.name, options)

            producer = self.context.create_producer()
            if envelope.delivery_delay:
                producer.delivery_delay = envelope.delivery_delay
            producer.send(exchange, envelope)
        except Exception as exc:
            self.error_policy.report("publish", exc)
            return None

        self.logger.debug(
            "Queued message on %s with correlation_id=%s", queue.name, envelope.correlation_id
        )
        return envelope.correlation_id

    @staticmethod
    def check_options(options: PublishOptions) -> None:
        """Reject option values that are caller mistakes rather than broker failures."""
        unknown = set(options.get("properties") or {}) - BASIC_PROPERTY_NAMES
        if unknown:
            raise ValueError(
                f"Unknown AMQP basic properties: {', '.join(sorted(unknown))}. "
                "Pass application values through headers instead."
            )

        attempts = options.get("attempts")
        if attempts is not None and (not isinstance(attempts, int) or attempts < 0):
            raise ValueError(f"attempts must be a non-negative integer, got {attempts!r}.")

        delay = options.get("delay")
        if delay is not None and (not isinstance(delay, (int, float)) or delay < 0):
            raise ValueError(f"delay must be a non-negative number of seconds, got {delay!r}.")

    def build_envelope(
        self, payload: Payload, routing_key: str, options: PublishOptions
    ) -> MessageEnvelope:
        body = payload.encode("utf-8") if isinstance(payload, str) else payload
        envelope = MessageEnvelope(
            body=body,
            routing_key=routing_key,
            correlation_id=self.correlation_ids.get(),
        )

        if "headers" in options:
            envelope.headers.update(options["headers"])
        if "properties" in options:
            envelope.properties.update(options["properties"])
        if options.get("attempts") is not None:
            envelope.headers[ATTEMPT_COUNT_HEADERS_KEY] = int(options["attempts"])

        delay = options.get("delay") or 0
        if delay > 0:
            envelope.delivery_delay = int(delay * 1000)

        return envelope

    def schedule(
        self, delay: Delay, payload: Payload, queue_name: Optional[str] = None
    ) -> Optional[str]:
        return self.publish(payload, queue_name, {"delay": seconds_until(delay)})

    def release(
        self,
        delay: Delay,
        payload: Payload,
        queue_name: Optional[str] = None,
        attempts: int = 0,
    ) -> Optional[str]:
        return self.publish(
            payload,
            queue_name,
            {"delay": seconds_until(delay), "attempts": attempts},
        )
