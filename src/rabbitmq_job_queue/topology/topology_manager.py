"""Declares and caches the exchange/queue topology of one connection."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from rabbitmq_job_queue.contracts import IBrokerContext
from rabbitmq_job_queue.models import ExchangeDescriptor, QueueDescriptor
from rabbitmq_job_queue.queue_config import ExchangeConfig, QueueConfig


@dataclass
class TopologyCache:
    """Names already declared on the broker during one connection session."""

    declared_exchanges: Set[str] = field(default_factory=set)
    declared_queues: Set[str] = field(default_factory=set)
    session: Optional[int] = None

    def reset(self, session: int) -> None:
        self.declared_exchanges.clear()
        self.declared_queues.clear()
        self.session = session


class TopologyManager:
    """Resolves queue names into declared queue and exchange descriptors.

    Exchanges and queues are declared at most once per cache session. Bindings are
    re-issued on every resolve. Broker errors are not handled here.
    """

    def __init__(
        self,
        *,
        context: IBrokerContext,
        queue_config: QueueConfig,
        exchange_config: ExchangeConfig,
        cache: Optional[TopologyCache] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.context = context
        self.queue_config = queue_config
        self.exchange_config = exchange_config
        self.cache = cache if cache is not None else TopologyCache()
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, queue_name: Optional[str] = None) -> Tuple[QueueDescriptor, ExchangeDescriptor]:
        queue_name = queue_name or self.queue_config.name
        self._check_session()

        exchange = self.exchange_descriptor(queue_name)
        if self.exchange_config.declare and exchange.name not in self.cache.declared_exchanges:
            self.context.declare_exchange(exchange)
            self.cache.declared_exchanges.add(exchange.name)

        queue = self.queue_descriptor(queue_name)
        if self.queue_config.declare and queue.name not in self.cache.declared_queues:
            self.context.declare_queue(queue)
            self.cache.declared_queues.add(queue.name)

        if self.queue_config.bind:
            self.context.bind(queue, exchange, queue.name)

        return queue, exchange

    def exchange_descriptor(self, queue_name: str) -> ExchangeDescriptor:
        config = self.exchange_config
        return ExchangeDescriptor(
            name=config.name or queue_name,
            type=config.type,
            arguments=config.arguments,
            passive=config.passive,
            durable=config.durable,
            auto_delete=config.auto_delete,
        )

    def queue_descriptor(self, queue_name: str) -> QueueDescriptor:
        config = self.queue_config
        return QueueDescriptor(
            name=queue_name,
            arguments=config.arguments,
            passive=config.passive,
            durable=config.durable,
            exclusive=config.exclusive,
            auto_delete=config.auto_delete,
        )

    def _check_session(self) -> None:
        session = self.context.ensure_connected()
        if self.cache.session == session:
            return
        if self.cache.session is not None:
            self.logger.info(
                "Broker session changed from %s to %s; topology will be re-declared.",
                self.cache.session,
                session,
            )
        self.cache.reset(session)
