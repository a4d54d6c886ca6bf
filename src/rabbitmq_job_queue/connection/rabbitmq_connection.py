"""RabbitMQ connection management."""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Optional, Type

import pika
from pika.adapters.blocking_connection import BlockingChannel, BlockingConnection
from pika.connection import Parameters

from rabbitmq_job_queue.contracts import IRabbitMQConnection

RABBITMQ_URL_ENV = "RABBITMQ_URL"


class RabbitMQConnection(IRabbitMQConnection):
    """Owns one blocking RabbitMQ connection and its channel.

    The connection is opened lazily and transparently re-opened when the broker
    closed it. Every re-open bumps ``session`` so callers holding per-connection
    state (such as declared topology) can tell that it is stale.
    """

    def __init__(
        self,
        rabbitmq_url: Optional[str] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        url = (rabbitmq_url or os.getenv(RABBITMQ_URL_ENV) or "").strip()
        if not url:
            raise ValueError(
                f"RabbitMQ URL must be provided via argument or {RABBITMQ_URL_ENV} environment variable."
            )

        try:
            self._parameters: Parameters = pika.URLParameters(url)
        except ValueError as exc:
            raise ValueError(f"Invalid RabbitMQ URL provided: {url}") from exc

        self.rabbitmq_url = url
        self.connection: Optional[BlockingConnection] = None
        self.channel: Optional[BlockingChannel] = None
        self._session = 0
        self.logger = logger or logging.getLogger(__name__)

    @property
    def session(self) -> int:
        return self._session

    def connect(self) -> BlockingChannel:
        if self.connection is None or self.connection.is_closed:
            self.logger.info("Connecting to RabbitMQ at %s", self.rabbitmq_url)
            try:
                self.connection = pika.BlockingConnection(self._parameters)
            except pika.exceptions.AMQPConnectionError as exc:
                self.logger.error("Failed to establish RabbitMQ connection: %s", exc)
                raise

            self._session += 1
            self.channel = self.connection.channel()
            self.logger.info("Connected to RabbitMQ (session %s).", self._session)

        if self.channel is None or self.channel.is_closed:
            self.logger.debug("Re-opening channel for RabbitMQ connection.")
            self.channel = self.connection.channel()

        return self.channel

    def close(self) -> None:
        if self.channel and not self.channel.is_closed:
            self.channel.close()
            self.logger.info("Closed RabbitMQ channel.")

        if self.connection and not self.connection.is_closed:
            self.connection.close()
            self.logger.info("Closed RabbitMQ connection.")

    def __enter__(self) -> RabbitMQConnection:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
